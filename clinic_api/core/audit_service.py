"""
Audit trail for authentication and administration events.
"""
import logging
from typing import Any, Dict, Optional

from fastapi import Request
from sqlalchemy.orm import Session

from .audit_models import AuditLog

logger = logging.getLogger(__name__)

# Credential material that must never reach the audit table
REDACTED_KEYS = frozenset({
    "password", "password_hash", "otp", "otp_hash", "code", "token",
    "access_token", "bootstrap_token", "secret",
})
REDACTED = "[redacted]"


def redact_details(details: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Copy of ``details`` with credential values masked, nested dicts included."""
    if details is None:
        return None
    cleaned = {}
    for key, value in details.items():
        if str(key).lower() in REDACTED_KEYS:
            cleaned[key] = REDACTED
        elif isinstance(value, dict):
            cleaned[key] = redact_details(value)
        else:
            cleaned[key] = value
    return cleaned


async def create_audit_log(
    db: Session,
    action: str,
    user_id: Optional[int] = None,
    request: Optional[Request] = None,
    details: Optional[Dict[str, Any]] = None
) -> AuditLog:
    """
    Record an audit entry for an identity-related event.

    The client address and the request id assigned by
    ``RequestLoggingMiddleware`` are taken from ``request`` when given, so an
    entry can be matched with the request log lines.

    Args:
        db: The database session.
        action: Event name, e.g. 'USER_LOGIN_SUCCESS' or 'OTP_VERIFY_FAILED'.
        user_id: The identity the event concerns, if known.
        request: The current request, if any.
        details: Extra context. Credential values are masked before storage.

    Returns:
        The stored AuditLog row.
    """
    ip_address = None
    request_id = None
    if request is not None:
        if request.client:
            ip_address = request.client.host
        request_id = getattr(request.state, "request_id", None)

    audit_entry = AuditLog(
        user_id=user_id,
        action=action,
        ip_address=ip_address,
        request_id=request_id,
        details=redact_details(details)
    )
    db.add(audit_entry)
    db.commit()
    db.refresh(audit_entry)
    logger.debug(f"Audit {action} recorded for user {user_id} (request {request_id})")
    return audit_entry
