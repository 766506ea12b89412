from fastapi.testclient import TestClient
from pydantic import BaseModel
import pytest

from conftest import FakeBackend, FakeClock
from transport_billing.core.exceptions import NavigationRequired, ResourceNotFoundError
from transport_billing.db.storage import MemoryStore
from transport_billing.main import create_app


@pytest.fixture
def app():
    return create_app(store=MemoryStore(), transport=FakeBackend().transport, clock=FakeClock())


@pytest.fixture
def client(app):
    with TestClient(app) as client:
        yield client


def test_404_not_found(client):
    response = client.get("/non-existent-route")
    assert response.status_code == 404
    data = response.json()
    assert "error" in data
    assert "code" in data
    assert data["code"] == "HTTP_ERROR"


def test_validation_error_structure(app, client):
    class Item(BaseModel):
        name: str
        price: int

    @app.post("/test-validation")
    def create_item(item: Item):
        return item

    response = client.post("/test-validation", json={"name": "foo", "price": "invalid"})
    assert response.status_code == 422
    data = response.json()
    assert data["code"] == "VALIDATION_ERROR"
    assert "details" in data
    assert len(data["details"]) > 0


def test_custom_exception(app, client):
    @app.get("/test-custom-error")
    def trigger_custom_error():
        raise ResourceNotFoundError(message="Entry not found")

    response = client.get("/test-custom-error")
    assert response.status_code == 404
    data = response.json()
    assert data["code"] == "NOT_FOUND"
    assert data["error"] == "Entry not found"


def test_navigation_becomes_redirect(app, client):
    @app.get("/test-navigation")
    def trigger_navigation():
        raise NavigationRequired("/login?redirect=%2Ftest-navigation")

    response = client.get("/test-navigation", follow_redirects=False)
    assert response.status_code == 307
    assert response.headers["location"] == "/login?redirect=%2Ftest-navigation"


def test_signup_payload_validation(client):
    response = client.post("/signup", json={"email": "not-an-email"})
    assert response.status_code == 422
    assert response.json()["code"] == "VALIDATION_ERROR"
