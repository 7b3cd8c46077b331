"""
Tests for the gated admin registration endpoint.
"""
BOOTSTRAP = {"X-Bootstrap-Token": "test-bootstrap-token"}
NEW_ADMIN = {"name": "New Admin", "email": "newadmin@example.com", "password": "adminpass"}


def test_anonymous_admin_registration_is_forbidden(client):
    response = client.post("/api/auth/register-admin", json=NEW_ADMIN)
    assert response.status_code == 403
    assert response.json()["success"] is False


def test_patient_cannot_register_admin(client, patient_headers):
    response = client.post("/api/auth/register-admin", json=NEW_ADMIN, headers=patient_headers)
    assert response.status_code == 403


def test_bootstrap_token_creates_first_admin_once(client):
    first = client.post("/api/auth/register-admin", json=NEW_ADMIN, headers=BOOTSTRAP)
    assert first.status_code == 201
    assert first.json()["user"]["role"] == "admin"

    second = client.post(
        "/api/auth/register-admin",
        json={"name": "Second", "email": "second@example.com", "password": "adminpass"},
        headers=BOOTSTRAP
    )
    assert second.status_code == 403


def test_wrong_bootstrap_token_is_forbidden(client):
    response = client.post("/api/auth/register-admin", json=NEW_ADMIN, headers={"X-Bootstrap-Token": "guess"})
    assert response.status_code == 403


def test_admin_can_register_admin(client, admin_headers):
    response = client.post("/api/auth/register-admin", json=NEW_ADMIN, headers=admin_headers)
    assert response.status_code == 201
    data = response.json()
    assert data["user"]["role"] == "admin"
    assert data["token"]


def test_registered_admin_can_use_admin_routes(client):
    token = client.post("/api/auth/register-admin", json=NEW_ADMIN, headers=BOOTSTRAP).json()["token"]
    response = client.get("/api/admin/users", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 200
