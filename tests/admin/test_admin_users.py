"""
Tests for administrative identity management.
"""
from datetime import date, timedelta

from clinic_api.core.audit_models import AuditLog


def test_admin_routes_require_admin(client, patient_headers):
    assert client.get("/api/admin/users").status_code == 401
    assert client.get("/api/admin/users", headers=patient_headers).status_code == 403


def test_list_users_hides_admins_by_default(client, admin, patient, admin_headers):
    response = client.get("/api/admin/users", headers=admin_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 1
    assert data["items"][0]["email"] == "patient@example.com"
    assert data["page"] == 1 and data["has_next"] is False

    everyone = client.get("/api/admin/users", params={"include_admins": True}, headers=admin_headers).json()
    assert everyone["total"] == 2


def test_list_users_pagination(client, register, admin_headers):
    for i in range(3):
        register(name=f"Patient {i}", email=f"p{i}@example.com")
    data = client.get("/api/admin/users", params={"page": 2, "size": 2}, headers=admin_headers).json()
    assert data["total"] == 3
    assert data["pages"] == 2
    assert len(data["items"]) == 1
    assert data["has_prev"] is True


def test_create_user_with_role(client, admin_headers):
    response = client.post("/api/admin/users", headers=admin_headers, json={
        "name": "Dr. Rao", "email": "rao@example.com", "password": "doctor1", "role": "doctor"
    })
    assert response.status_code == 201
    data = response.json()
    assert data["user"]["role"] == "doctor"
    assert "token" not in data

    duplicate = client.post("/api/admin/users", headers=admin_headers, json={"name": "Copy", "email": "rao@example.com"})
    assert duplicate.status_code == 409


def test_get_user(client, patient, admin_headers):
    user_id = patient["user"]["id"]
    assert client.get(f"/api/admin/users/{user_id}", headers=admin_headers).json()["user"]["id"] == user_id
    assert client.get("/api/admin/users/9999", headers=admin_headers).status_code == 404


def test_update_user_role_is_audited(client, patient, admin, admin_headers, db):
    user_id = patient["user"]["id"]
    response = client.put(f"/api/admin/users/{user_id}", headers=admin_headers, json={"role": "doctor", "location": "Mumbai"})
    assert response.status_code == 200
    assert response.json()["user"]["role"] == "doctor"

    entry = db.query(AuditLog).filter(AuditLog.action == "ADMIN_USER_UPDATED").one()
    assert entry.user_id == user_id
    assert entry.details["admin_id"] == admin.id
    assert entry.details["role"] == {"from": "patient", "to": "doctor"}


def test_demoted_admin_loses_access_with_old_token(client, admin, admin_headers):
    other_admin = client.post(
        "/api/auth/register-admin",
        json={"name": "Second Admin", "email": "second@example.com", "password": "adminpass"},
        headers=admin_headers
    ).json()
    other_headers = {"Authorization": f"Bearer {other_admin['token']}"}
    assert client.get("/api/admin/users", headers=other_headers).status_code == 200

    demote = client.put(f"/api/admin/users/{other_admin['user']['id']}", headers=admin_headers, json={"role": "patient"})
    assert demote.status_code == 200

    assert client.get("/api/admin/users", headers=other_headers).status_code == 403


def test_delete_user_keeps_their_appointments(client, patient, patient_headers, admin_headers):
    booked = client.post("/api/appointments", headers=patient_headers, json={
        "name": "Jane", "phone": "9876543210", "email": "patient@example.com",
        "date": (date.today() + timedelta(days=3)).isoformat(), "time": "09:00"
    })
    appointment_id = booked.json()["appointment"]["id"]

    user_id = patient["user"]["id"]
    assert client.delete(f"/api/admin/users/{user_id}", headers=admin_headers).status_code == 200
    assert client.get(f"/api/admin/users/{user_id}", headers=admin_headers).status_code == 404
    assert client.delete(f"/api/admin/users/{user_id}", headers=admin_headers).status_code == 404

    orphan = client.get(f"/api/admin/appointments/{appointment_id}", headers=admin_headers)
    assert orphan.status_code == 200
    assert orphan.json()["appointment"]["user_id"] == user_id
