"""
Tests for OTP login when an external verification service is configured.
"""
import pytest

from clinic_api.auth.models import User
from clinic_api.core.otp import OTPProvider, OTPIssueResult, OTPDeliveryError


class FakeVerifyService(OTPProvider):
    """Approves a single known code per phone, like a hosted verification API."""
    name = "fake"

    def __init__(self):
        self.pending = {}
        self.fail = False

    async def issue(self, phone):
        if self.fail:
            raise OTPDeliveryError("network down")
        self.pending[phone] = "246810"
        return OTPIssueResult(reference=f"VE-{phone}")

    async def check(self, phone, code):
        if self.fail:
            raise OTPDeliveryError("network down")
        if self.pending.get(phone) == code:
            del self.pending[phone]
            return True
        return False


@pytest.fixture
def otp_provider():
    return FakeVerifyService()


def test_send_otp_does_not_echo_or_store_code(client, patient, otp_provider, db):
    response = client.post("/api/auth/send-otp", json={"phone": "9876543210"})
    assert response.status_code == 200
    assert "otp" not in response.json()
    assert "+919876543210" in otp_provider.pending

    db.expire_all()
    assert db.query(User).filter(User.id == patient["user"]["id"]).one().otp_hash is None


def test_verify_otp_through_external_service(client, patient):
    client.post("/api/auth/send-otp", json={"phone": "9876543210"})

    assert client.post("/api/auth/verify-otp", json={"phone": "9876543210", "otp": "111111"}).status_code == 401

    response = client.post("/api/auth/verify-otp", json={"phone": "9876543210", "otp": "246810"})
    assert response.status_code == 200
    assert response.json()["token"]


def test_delivery_failure_is_502(client, patient, otp_provider):
    otp_provider.fail = True

    send = client.post("/api/auth/send-otp", json={"phone": "9876543210"})
    assert send.status_code == 502
    assert send.json()["success"] is False

    verify = client.post("/api/auth/verify-otp", json={"phone": "9876543210", "otp": "246810"})
    assert verify.status_code == 502
