"""Shared pytest fixtures.

Every test runs against its own SQLite file in a temporary directory.
The ``register`` fixture creates users of any role through the public
API and returns their id, token and ready-made auth headers.
"""

import itertools
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from auto_services_api.app.core import db
from auto_services_api.app.core.config import settings
from auto_services_api.app.core.roles import Identity, Role
from auto_services_api.app.main import app

API = "/api/v1"


@pytest.fixture(autouse=True)
def database(tmp_path, monkeypatch):
    """Point the application at a fresh database for each test."""
    path = tmp_path / "auto_services_test.db"
    monkeypatch.setattr(settings, "database_url", str(path))
    db.init_db()
    yield path


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def register(client):
    """Factory registering a user with the given role."""
    counter = itertools.count(1)

    def _register(role: str = "CLIENT", **overrides):
        n = next(counter)
        payload = {
            "name": f"{role.lower()} {n}",
            "email": f"{role.lower()}{n}@example.com",
            "password": "secret123",
            "role": role,
        }
        payload.update(overrides)
        response = client.post(f"{API}/users/register", json=payload)
        assert response.status_code == 201, response.text
        data = response.json()["data"]
        token = data["token"]
        return SimpleNamespace(
            id=data["user"]["id"],
            email=payload["email"],
            password=payload["password"],
            token=token,
            headers={"Authorization": f"Bearer {token}"},
            identity=Identity(id=data["user"]["id"], role=Role(role), email=payload["email"]),
        )

    return _register


@pytest.fixture
def create_service(client):
    """Factory publishing a towing service as ``owner``."""

    def _create(owner, **overrides):
        payload = {
            "category": "REMORQUAGE",
            "title": "24/7 towing",
            "description": "Flatbed towing anywhere in the city",
            "location": "Oran",
            "price": 3500,
            "vehicle_type": "car",
            "distance": 25,
            "urgency": "high",
        }
        payload.update(overrides)
        response = client.post(f"{API}/services", json=payload, headers=owner.headers)
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _create


@pytest.fixture
def create_booking(client):
    """Factory booking ``service_id`` as ``booker``."""

    def _create(booker, service_id, **overrides):
        payload = {"service_id": service_id, "booking_date": "2025-09-01T10:00:00Z"}
        payload.update(overrides)
        response = client.post(f"{API}/bookings", json=payload, headers=booker.headers)
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _create
