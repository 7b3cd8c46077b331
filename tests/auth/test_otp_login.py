"""
Tests for phone + one-time code login with the local provider.
"""
from datetime import datetime, timedelta, timezone

from clinic_api.auth.models import User


def send_code(client, phone="9876543210"):
    response = client.post("/api/auth/send-otp", json={"phone": phone})
    assert response.status_code == 200
    return response.json()["otp"]


def test_send_otp_requires_registered_phone(client):
    response = client.post("/api/auth/send-otp", json={"phone": "9000000000"})
    assert response.status_code == 404
    assert response.json()["message"] == "User not found. Please register first."


def test_send_otp_stores_hashed_code(client, patient, db):
    code = send_code(client)
    assert len(code) == 6

    db.expire_all()
    user = db.query(User).filter(User.id == patient["user"]["id"]).one()
    assert user.otp_hash and user.otp_hash != code
    assert user.otp_expires_at is not None


def test_verify_otp_logs_in(client, patient):
    code = send_code(client, phone="+91 98765 43210")

    response = client.post("/api/auth/verify-otp", json={"phone": "9876543210", "otp": code})
    assert response.status_code == 200
    data = response.json()
    assert data["token"]
    assert data["user"]["id"] == patient["user"]["id"]

    profile = client.get("/api/auth/profile", headers={"Authorization": f"Bearer {data['token']}"})
    assert profile.status_code == 200


def test_code_works_only_once(client, patient):
    code = send_code(client)
    assert client.post("/api/auth/verify-otp", json={"phone": "9876543210", "otp": code}).status_code == 200

    again = client.post("/api/auth/verify-otp", json={"phone": "9876543210", "otp": code})
    assert again.status_code == 401


def test_wrong_code_is_rejected_and_challenge_kept(client, patient):
    code = send_code(client)
    wrong = "000000" if code != "000000" else "111111"

    response = client.post("/api/auth/verify-otp", json={"phone": "9876543210", "otp": wrong})
    assert response.status_code == 401
    assert response.json()["message"] == "Invalid OTP"

    assert client.post("/api/auth/verify-otp", json={"phone": "9876543210", "otp": code}).status_code == 200


def test_expired_code_is_rejected_and_cleared(client, patient, db):
    code = send_code(client)

    db.expire_all()
    user = db.query(User).filter(User.id == patient["user"]["id"]).one()
    user.otp_expires_at = datetime.now(timezone.utc) - timedelta(minutes=1)
    db.commit()

    response = client.post("/api/auth/verify-otp", json={"phone": "9876543210", "otp": code})
    assert response.status_code == 401
    assert "expired" in response.json()["message"].lower()

    db.expire_all()
    user = db.query(User).filter(User.id == patient["user"]["id"]).one()
    assert user.otp_hash is None
    assert user.otp_expires_at is None


def test_reissue_replaces_earlier_code(client, patient, monkeypatch):
    codes = iter(["111111", "222222"])
    monkeypatch.setattr("clinic_api.core.otp.generate_otp_code", lambda: next(codes))

    first = send_code(client)
    second = send_code(client)
    assert (first, second) == ("111111", "222222")

    assert client.post("/api/auth/verify-otp", json={"phone": "9876543210", "otp": first}).status_code == 401
    assert client.post("/api/auth/verify-otp", json={"phone": "9876543210", "otp": second}).status_code == 200


def test_verify_without_outstanding_code(client, patient):
    response = client.post("/api/auth/verify-otp", json={"phone": "9876543210", "otp": "123456"})
    assert response.status_code == 401


def test_verify_unknown_phone(client):
    response = client.post("/api/auth/verify-otp", json={"phone": "9000000000", "otp": "123456"})
    assert response.status_code == 404


def test_code_not_echoed_in_production(client, patient, monkeypatch):
    monkeypatch.setattr("clinic_api.auth.service.settings.environment", "production")

    response = client.post("/api/auth/send-otp", json={"phone": "9876543210"})
    assert response.status_code == 200
    assert "otp" not in response.json()


def test_changing_phone_drops_outstanding_code(client, patient, patient_headers):
    code = send_code(client)
    update = client.put("/api/auth/profile", json={"phone": "9123456789"}, headers=patient_headers)
    assert update.status_code == 200

    response = client.post("/api/auth/verify-otp", json={"phone": "9123456789", "otp": code})
    assert response.status_code == 401
