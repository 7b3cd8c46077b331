"""
Tests for the main application endpoints.
"""
from fastapi.testclient import TestClient

from clinic_api.main import app


def test_root_endpoint(client):
    """
    Test the root endpoint returns a welcome message.
    """
    response = client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert "message" in data


def test_health_check(client):
    """
    Test the health check endpoint returns a healthy status.
    """
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_request_id_headers(client):
    response = client.get("/api/health", headers={"X-Request-ID": "abc-123"})
    assert response.headers["X-Request-ID"] == "abc-123"
    assert "X-Process-Time" in response.headers

    generated = client.get("/api/health").headers["X-Request-ID"]
    assert generated and generated != "abc-123"


def test_unknown_route_uses_error_envelope(client):
    response = client.get("/api/does-not-exist")
    assert response.status_code == 404
    assert response.json()["success"] is False


def test_validation_error_is_400(client):
    response = client.post("/api/auth/register", json={"email": "a@example.com"})
    assert response.status_code == 400
    data = response.json()
    assert data["success"] is False
    assert any(error["field"] == "name" for error in data["errors"])


def test_unhandled_error_is_500_with_detail_in_development(client, monkeypatch):
    def explode(db, phone):
        raise RuntimeError("database on fire")

    monkeypatch.setattr("clinic_api.auth.router.check_phone_registered", explode)

    with TestClient(app, raise_server_exceptions=False) as failing_client:
        response = failing_client.post("/api/auth/check-phone", json={"phone": "9876543210"})

    assert response.status_code == 500
    data = response.json()
    assert data == {"success": False, "message": "Server error", "error": "database on fire"}


def test_unhandled_error_hides_detail_outside_development(client, monkeypatch):
    def explode(db, phone):
        raise RuntimeError("database on fire")

    monkeypatch.setattr("clinic_api.auth.router.check_phone_registered", explode)
    monkeypatch.setattr("clinic_api.exceptions.settings.environment", "production")

    with TestClient(app, raise_server_exceptions=False) as failing_client:
        response = failing_client.post("/api/auth/check-phone", json={"phone": "9876543210"})

    assert response.status_code == 500
    assert "error" not in response.json()
