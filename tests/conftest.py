import mongomock
import pytest
from fastapi.testclient import TestClient

from app.database.memory_storage import MemStorage
from app.database.mongo_storage import MongoStorage
from app.models.car.car import Car
from app.models.dealer.dealer import Dealer
from app.models.user.user import User
from app.socketio.socket_server import connections
from app.utilities.security import hash_password, token_for
from main import app

PASSWORD = "secret123"
PASSWORD_HASH = hash_password(PASSWORD)


@pytest.fixture(params=["memory", "mongo"])
def storage(request):
    """Every test using storage runs against both stores."""
    if request.param == "memory":
        return MemStorage(seed=False)
    return MongoStorage(mongomock.MongoClient(), "CarStoreTest")


@pytest.fixture
def client(storage):
    app.state.storage = storage
    return TestClient(app)


@pytest.fixture(autouse=True)
def reset_sockets():
    connections.clear()
    yield
    connections.clear()


@pytest.fixture
def make_user(storage):
    def _make(role="buyer", username=None, **fields):
        username = username or f"{role}-{len(storage.list_users()) + 1}"
        user = storage.create_user(User(
            username=username,
            email=f"{username}@example.com",
            password=PASSWORD_HASH,
            role=role,
            **fields,
        ))
        return user, {"Authorization": f"Bearer {token_for(user)}"}

    return _make


@pytest.fixture
def buyer(make_user):
    return make_user("buyer", "bob")


@pytest.fixture
def seller(make_user):
    return make_user("seller", "sally")


@pytest.fixture
def admin(make_user):
    return make_user("admin", "ada")


@pytest.fixture
def dealer(storage):
    return storage.create_dealer(Dealer(name="Premium Auto Group", location="Downtown, NYC"))


@pytest.fixture
def car_payload(dealer):
    return {
        "make": "Toyota",
        "model": "RAV4",
        "year": 2022,
        "price": "32500",
        "mileage": 18500,
        "fuelType": "hybrid",
        "transmission": "automatic",
        "bodyType": "suv",
        "drivetrain": "awd",
        "features": "All-Wheel Drive, Hybrid Engine",
        "dealerId": dealer.id,
    }


@pytest.fixture
def car(storage, dealer):
    return storage.create_car(Car(
        make="Honda",
        model="Civic",
        year=2023,
        price=24900,
        mileage=8200,
        fuel_type="gasoline",
        transmission="manual",
        body_type="sedan",
        drivetrain="fwd",
        dealer_id=dealer.id,
    ))
