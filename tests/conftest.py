"""
Test fixtures for Recipe Catalog tests.
Uses FastAPI dependency overrides for testable, isolated components.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from recipe_catalog.core.dependencies import (
    get_catalog_service,
    get_identity_gateway,
    get_kv_store,
)
from recipe_catalog.core.errors import AuthenticationError
from recipe_catalog.main import app
from recipe_catalog.models import Principal, Role
from recipe_catalog.services.catalog import CatalogService
from recipe_catalog.services.storage import SQLiteKeyValueStore

ADMIN = Principal(user_id="admin-1", display_name="Ada Admin", role=Role.ADMIN)
ALICE = Principal(user_id="user-1", display_name="Alice", role=Role.USER)
BOB = Principal(user_id="user-2", display_name="Bob", role=Role.USER)

TOKENS = {
    "admin-token": ADMIN,
    "alice-token": ALICE,
    "bob-token": BOB,
}


def auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


class TickingClock:
    """Deterministic clock that advances a few milliseconds on every read."""

    def __init__(self, start: datetime | None = None, step_ms: int = 5) -> None:
        self.now = start or datetime(2024, 1, 1, tzinfo=timezone.utc)
        self.step = timedelta(milliseconds=step_ms)

    def __call__(self) -> datetime:
        self.now += self.step
        return self.now


@pytest.fixture
def store():
    """Fresh in-memory KV store for each test."""
    kv = SQLiteKeyValueStore()
    yield kv
    kv.close()


@pytest.fixture
def clock():
    return TickingClock()


@pytest.fixture
def catalog(store, clock):
    return CatalogService(store, clock=clock)


@pytest.fixture
def mock_identity():
    """Mock identity gateway resolving the fixed tokens in TOKENS."""

    def verify(token):
        try:
            return TOKENS[token]
        except KeyError:
            raise AuthenticationError()

    mock = MagicMock()
    mock.verify.side_effect = verify
    mock.create_user.side_effect = lambda email, password, name, role: {
        "id": "new-user",
        "email": email,
        "user_metadata": {"name": name, "role": role},
    }
    mock.update_user_role.side_effect = lambda user_id, role: {
        "id": user_id,
        "user_metadata": {"role": role},
    }
    return mock


@pytest.fixture
def client(store, catalog, mock_identity):
    """Test client with dependency overrides for store, service and identity."""
    app.dependency_overrides[get_kv_store] = lambda: store
    app.dependency_overrides[get_catalog_service] = lambda: catalog
    app.dependency_overrides[get_identity_gateway] = lambda: mock_identity

    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def sample_recipe_data():
    """Sample recipe for testing"""
    return {
        "title": "Tortilla de Patatas",
        "description": "Tortilla española clásica",
        "category": "Guisos",
        "difficulty": "Media",
        "image": "https://example.com/tortilla.jpg",
        "ingredients": [
            {"name": "patatas", "quantity": 500, "unit": "gramos"},
            {"name": "huevos", "quantity": 6, "unit": "unidades"},
            {"name": "sal", "quantity": 1, "unit": "pizca"},
        ],
        "instructions": ["Freír las patatas", "Batir los huevos", "Cuajar la tortilla"],
        "prepTime": "15 min",
        "cookTime": "25 min",
        "servings": 4,
        "chef": "Carmen",
    }


@pytest.fixture
def created_recipe(client, sample_recipe_data):
    """A recipe created through the API by the admin."""
    response = client.post("/api/recipes", json=sample_recipe_data, headers=auth("admin-token"))
    assert response.status_code == 200
    return response.json()["recipe"]
