from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from vehicle_store.app import create_app
from vehicle_store.config import Settings
from vehicle_store.models import FuelType, Vehicle, VehicleType


@pytest.fixture
def settings():
    return Settings(database_url="sqlite://", secret_key="test-secret", bcrypt_rounds=4, log_level="WARNING")


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def db(app):
    session = app.state.session_factory()
    yield session
    session.close()


@pytest.fixture
def make_vehicle(db):
    def _make(**overrides):
        data = {
            "name": "Test Car",
            "brand": "Acme",
            "model": "Roadster",
            "year": 2022,
            "color": "Red",
            "price": Decimal("100.00"),
            "quantity_available": 5,
            "description": "A test vehicle",
            "image_url": "https://example.com/car.jpg",
            "type": VehicleType.SEDAN,
            "fuel_type": FuelType.PETROL,
        }
        data.update(overrides)
        vehicle = Vehicle(**data)
        db.add(vehicle)
        db.commit()
        db.refresh(vehicle)
        return vehicle

    return _make


@pytest.fixture
def signup(client):
    def _signup(email="alice@example.com", password="secret123", first_name="Alice", last_name="Smith"):
        resp = client.post(
            "/auth/signup",
            json={"email": email, "password": password, "firstName": first_name, "lastName": last_name},
        )
        assert resp.status_code == 200, resp.text
        return resp.json()

    return _signup


@pytest.fixture
def auth_headers(signup):
    def _headers(email="alice@example.com"):
        return {"Authorization": f"Bearer {signup(email=email)['token']}"}

    return _headers
