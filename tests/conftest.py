import pytest
from fastapi.testclient import TestClient

from app import app
from registry import RoomRegistry, get_registry


@pytest.fixture
def registry():
    return RoomRegistry()


@pytest.fixture
def client(registry):
    app.dependency_overrides[get_registry] = lambda: registry
    # A single portal keeps every socket on one event loop
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
