from fastapi.testclient import TestClient
from pydantic import BaseModel

from sms_inspector.main import app

client = TestClient(app)


def test_404_not_found():
    response = client.get("/non-existent-route")
    assert response.status_code == 404
    data = response.json()
    assert "error" in data
    assert "code" in data
    assert data["code"] == "HTTP_ERROR"


def test_validation_error_structure():
    # Temporary route to exercise request validation
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
    assert data["error"] == "Input validation failed"
    assert len(data["details"]) > 0


def test_custom_exception():
    from sms_inspector.core.exceptions import ResourceNotFoundError

    @app.get("/test-custom-error")
    def trigger_custom_error():
        raise ResourceNotFoundError(message="Item not found")

    response = client.get("/test-custom-error")
    assert response.status_code == 404
    data = response.json()
    assert data["code"] == "NOT_FOUND"
    assert data["error"] == "Item not found"


def test_unhandled_exception_becomes_error_body():
    @app.get("/test-crash")
    def crash():
        raise RuntimeError("boom")

    crash_client = TestClient(app, raise_server_exceptions=False)
    response = crash_client.get("/test-crash")
    assert response.status_code == 500
    data = response.json()
    assert data["code"] == "INTERNAL_ERROR"
    assert data["error"] == "boom"


def test_protected_route_requires_session():
    response = client.post("/api/v1/sms/fetch", json={})
    assert response.status_code == 401
    assert response.json()["code"] == "AUTHENTICATION_FAILED"


def test_liveness():
    response = client.get("/live")
    assert response.status_code == 200
    assert response.json() == {"status": "alive"}
