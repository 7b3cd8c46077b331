"""
Tests for the audit trail.
"""
import asyncio

from clinic_api.core.audit_models import AuditLog
from clinic_api.core.audit_service import create_audit_log, redact_details


def test_redact_details_masks_credentials():
    details = {"email": "jane@example.com", "Password": "secret123", "nested": {"otp": "123456", "provider": "local"}}
    assert redact_details(details) == {
        "email": "jane@example.com",
        "Password": "[redacted]",
        "nested": {"otp": "[redacted]", "provider": "local"},
    }
    assert details["Password"] == "secret123"
    assert redact_details(None) is None


def test_stored_entry_is_redacted(db):
    entry = asyncio.run(create_audit_log(db, action="TEST_EVENT", user_id=3, details={"token": "abc", "reason": "x"}))
    assert entry.id is not None
    assert entry.details == {"token": "[redacted]", "reason": "x"}
    assert entry.request_id is None


def test_entry_carries_request_id(client, db):
    response = client.post(
        "/api/auth/register",
        json={"name": "Jane", "email": "jane@example.com", "password": "secret123"},
        headers={"X-Request-ID": "req-42"},
    )
    assert response.status_code == 201

    entry = db.query(AuditLog).filter(AuditLog.action == "REGISTRATION_SUCCESS").one()
    assert entry.request_id == "req-42"
    assert entry.ip_address
