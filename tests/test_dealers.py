from app.models.dealer.dealer import Dealer


def test_list_dealers_with_location_filter(client, storage, dealer):
    storage.create_dealer(Dealer(name="Green Drive Motors", location="Seattle, WA"))

    assert len(client.get("/api/dealers").json()) == 2
    assert [d["name"] for d in client.get("/api/dealers", params={"location": "seattle"}).json()] == [
        "Green Drive Motors"
    ]


def test_get_dealer_and_cars(client, dealer, car):
    response = client.get(f"/api/dealers/{dealer.id}")
    assert response.status_code == 200
    assert response.json()["reviewCount"] == 0

    assert [c["_id"] for c in client.get(f"/api/dealers/{dealer.id}/cars").json()] == [car.id]
    assert client.get("/api/dealers/64b7f0c2a1b2c3d4e5f60718").status_code == 404


def test_create_dealer(client, seller, buyer):
    user, headers = seller
    payload = {"name": "Family Auto Center", "location": "Austin, TX", "email": "sales@familyauto.com"}

    assert client.post("/api/dealers", json=payload, headers=buyer[1]).status_code == 403
    response = client.post("/api/dealers", json=payload, headers=headers)
    assert response.status_code == 201
    assert response.json()["userId"] == user.id
    assert response.json()["verified"] is False


def test_review_updates_dealer_rating(client, storage, buyer, dealer):
    user, headers = buyer
    for rating in (5, 4, 4):
        response = client.post("/api/reviews", json={"dealerId": dealer.id, "rating": rating}, headers=headers)
        assert response.status_code == 201
        assert response.json()["userId"] == user.id

    stored = storage.get_dealer(dealer.id)
    assert stored.rating == 4.33
    assert stored.review_count == 3
    assert len(client.get(f"/api/reviews/dealer/{dealer.id}").json()) == 3


def test_review_validation(client, buyer, dealer):
    _, headers = buyer

    assert client.post("/api/reviews", json={"dealerId": dealer.id, "rating": 6}, headers=headers).status_code == 400
    assert client.post("/api/reviews", json={"rating": 3}, headers=headers).status_code == 400
    assert client.post("/api/reviews", json={"dealerId": dealer.id, "rating": 3}).status_code == 401


def test_car_and_user_reviews(client, buyer, car):
    user, headers = buyer
    client.post("/api/reviews", json={"carId": car.id, "rating": 5, "comment": "Great"}, headers=headers)

    assert [r["comment"] for r in client.get(f"/api/reviews/car/{car.id}").json()] == ["Great"]
    assert client.get(f"/api/reviews/user/{user.id}").status_code == 401
    assert len(client.get(f"/api/reviews/user/{user.id}", headers=headers).json()) == 1


def test_favorites_flow(client, buyer, car):
    user, headers = buyer

    first = client.post("/api/favorites", json={"carId": car.id}, headers=headers)
    assert first.status_code == 201
    again = client.post("/api/favorites", json={"userId": user.id, "carId": car.id}, headers=headers)
    assert again.status_code == 200
    assert again.json()["_id"] == first.json()["_id"]

    favorites = client.get(f"/api/favorites/{user.id}", headers=headers).json()
    assert len(favorites) == 1
    assert favorites[0]["car"]["model"] == "Civic"

    removed = client.delete(f"/api/favorites/{user.id}/{car.id}", headers=headers)
    assert removed.status_code == 204
    assert client.get(f"/api/favorites/{user.id}", headers=headers).json() == []


def test_favorites_require_auth(client, buyer):
    user, _ = buyer
    assert client.get(f"/api/favorites/{user.id}").status_code == 401
