"""
Phone number canonicalization.

Every place that accepts a phone number runs it through ``normalize_phone``
before looking it up or storing it, so ``9876543210`` and ``+91 98765 43210``
resolve to the same account.
"""
import re
from typing import Optional

from ..config import settings

_WHITESPACE = re.compile(r"\s+")
_CANONICAL = re.compile(r"^\+?\d{10,15}$")


def normalize_phone(raw: Optional[str], default_country_code: Optional[str] = None) -> Optional[str]:
    """
    Canonicalize a phone number.

    Whitespace is removed. A bare 10-digit number gets the default country
    code prepended; anything else is returned as is. Idempotent.

    Args:
        raw: Phone number as typed by the user
        default_country_code: Prefix for local numbers (defaults to settings)

    Returns:
        The canonical phone, or None for empty input
    """
    if raw is None:
        return None
    phone = _WHITESPACE.sub("", raw)
    if not phone:
        return None
    if not phone.startswith("+") and len(phone) == 10 and phone.isdigit():
        prefix = default_country_code if default_country_code is not None else settings.default_country_code
        phone = f"{prefix}{phone}"
    return phone


def is_valid_phone(phone: Optional[str]) -> bool:
    """Check a canonical phone: optional '+' followed by 10 to 15 digits."""
    return bool(phone) and bool(_CANONICAL.match(phone))


def parse_phone(value: Optional[str]) -> Optional[str]:
    """
    Normalize then validate a phone from request input.

    Raises:
        ValueError: If the canonical form is not a valid phone number
    """
    phone = normalize_phone(value)
    if phone is None:
        return None
    if not is_valid_phone(phone):
        raise ValueError("Invalid phone number format")
    return phone
