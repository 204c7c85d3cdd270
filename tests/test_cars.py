from unittest.mock import AsyncMock, patch

import pytest

from app.models.car.car import Car


@pytest.fixture
def broadcast():
    with patch("app.routes.car.router.broadcast_car_event", new_callable=AsyncMock) as mock:
        yield mock


def test_create_car_is_retrievable(client, storage, seller, car_payload, broadcast):
    _, headers = seller
    response = client.post("/api/cars", json=car_payload, headers=headers)

    assert response.status_code == 201
    created = response.json()
    assert created["price"] == 32500
    assert created["features"] == ["All-Wheel Drive", "Hybrid Engine"]
    assert created["condition"] == "used"
    assert created["available"] is True

    fetched = client.get(f"/api/cars/{created['_id']}")
    assert fetched.status_code == 200
    assert fetched.json()["model"] == "RAV4"

    event, data, dealer_id = broadcast.await_args.args
    assert event == "CAR_ADDED"
    assert data["_id"] == created["_id"]
    assert dealer_id == car_payload["dealerId"]
    assert [log.action for log in storage.get_inventory_logs(dealer_id)] == ["added"]


def test_create_car_requires_seller_or_admin(client, buyer, car_payload, broadcast):
    _, headers = buyer

    assert client.post("/api/cars", json=car_payload).status_code == 401
    forbidden = client.post("/api/cars", json=car_payload, headers=headers)
    assert forbidden.status_code == 403
    assert forbidden.json() == {"message": "Insufficient permissions"}
    broadcast.assert_not_awaited()


def test_create_car_validation(client, seller, car_payload, broadcast):
    _, headers = seller
    car_payload["fuelType"] = "steam"
    car_payload["safetyRating"] = 9

    response = client.post("/api/cars", json=car_payload, headers=headers)
    assert response.status_code == 400
    assert response.json()["message"] == "Validation error"


def test_get_unknown_car(client):
    response = client.get("/api/cars/64b7f0c2a1b2c3d4e5f60718")

    assert response.status_code == 404
    assert response.json() == {"message": "Car not found"}


def test_list_and_featured_skip_unavailable(client, storage, car):
    storage.update_car(car.id, {"available": False})
    storage.create_car(Car.model_validate({**car.model_dump(exclude={"id"}), "available": True, "model": "Accord"}))

    assert [c["model"] for c in client.get("/api/cars").json()] == ["Accord"]
    assert [c["model"] for c in client.get("/api/cars/featured").json()] == ["Accord"]


def test_search_with_filters(client, car):
    response = client.get("/api/cars/search", params={
        "make": "hon", "maxPrice": "30000", "fuelType": "all", "bodyType": "",
    })

    assert response.status_code == 200
    assert [c["_id"] for c in response.json()] == [car.id]
    assert client.get("/api/cars/search", params={"minYear": 2024}).json() == []


def test_search_with_free_text(client, car):
    assert [c["_id"] for c in client.get("/api/cars/search", params={"q": "honda sedan"}).json()] == [car.id]
    assert client.get("/api/cars/search", params={"q": "honda suv"}).json() == []
    unicode_digits = client.get("/api/cars/search", params={"q": "honda ²"})
    assert unicode_digits.status_code == 200
    assert unicode_digits.json() == []


def test_search_rejects_non_numeric_price(client):
    assert client.get("/api/cars/search", params={"minPrice": "cheap"}).status_code == 400


def test_update_car(client, storage, seller, car, broadcast):
    _, headers = seller
    response = client.patch(f"/api/cars/{car.id}", json={"price": 23500, "color": "Blue"}, headers=headers)

    assert response.status_code == 200
    assert response.json()["price"] == 23500
    assert response.json()["updatedAt"] is not None
    assert broadcast.await_args.args[0] == "CAR_UPDATED"

    log = storage.get_inventory_logs(car.dealer_id)[0]
    assert log.action == "updated"
    assert log.old_data["price"] == 24900
    assert log.new_data["price"] == 23500


def test_update_unknown_car(client, seller, broadcast):
    _, headers = seller
    response = client.patch("/api/cars/64b7f0c2a1b2c3d4e5f60718", json={"price": 1}, headers=headers)

    assert response.status_code == 404


def test_delete_marks_car_unavailable(client, storage, admin, car, broadcast):
    _, headers = admin
    response = client.delete(f"/api/cars/{car.id}", headers=headers)

    assert response.status_code == 200
    assert storage.get_car(car.id).available is False
    assert client.get("/api/cars").json() == []
    assert broadcast.await_args.args[0] == "CAR_REMOVED"
    assert storage.get_inventory_logs(car.dealer_id)[0].action == "removed"


def test_makes_and_models(client, storage, car):
    storage.create_car(Car.model_validate({**car.model_dump(exclude={"id"}), "model": "Accord"}))
    storage.create_car(Car.model_validate({**car.model_dump(exclude={"id"}), "make": "BMW", "model": "X5"}))

    assert client.get("/api/makes").json() == ["BMW", "Honda"]
    assert client.get("/api/models/Honda").json() == ["Accord", "Civic"]
    assert client.get("/api/models/Tesla").json() == []


def test_demo_car_update_broadcast(client):
    with patch("app.routes.car.router.broadcast_update", new_callable=AsyncMock) as mock:
        response = client.post("/api/test/car-update", json={"dealerId": "d42"})

    assert response.json() == {"message": "Test update broadcasted"}
    message = mock.await_args.args[0]
    assert message["type"] == "CAR_ADDED"
    assert message["dealerId"] == "d42"
    assert message["data"]["_id"].startswith("test-")
