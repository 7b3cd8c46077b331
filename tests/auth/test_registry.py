"""
Tests for the identity registry.
"""
import pytest

from clinic_api.auth.exceptions import (
    EmailAlreadyExistsException,
    PhoneAlreadyExistsException,
    UserNotFoundException,
)
from clinic_api.auth.models import User, UserRole
from clinic_api.auth.registry import IdentityRegistry
from clinic_api.exceptions import ValidationException


@pytest.fixture
def registry(db):
    return IdentityRegistry(db)


def test_create_requires_email_or_phone(registry):
    with pytest.raises(ValidationException):
        registry.create(name="Nobody")


def test_create_normalizes_and_defaults(registry):
    user = registry.create(name="Jane", email="Jane@Example.com", phone="98765 43210")
    assert user.email == "jane@example.com"
    assert user.phone == "+919876543210"
    assert user.role == UserRole.PATIENT
    assert not user.has_password


def test_lookups(registry):
    user = registry.create(name="Jane", email="jane@example.com", phone="9876543210")
    assert registry.find_by_email("JANE@example.com").id == user.id
    assert registry.find_by_phone("+91 98765 43210").id == user.id
    assert registry.find_by_id(str(user.id)).id == user.id
    assert registry.find_by_id("abc") is None
    assert registry.find_by_email(None) is None
    with pytest.raises(UserNotFoundException):
        registry.get_or_404(user.id + 100)


def test_duplicate_email_is_checked_before_phone(registry):
    registry.create(name="Jane", email="jane@example.com", phone="9876543210")
    with pytest.raises(EmailAlreadyExistsException):
        registry.create(name="Copy", email="jane@example.com", phone="9876543210")
    with pytest.raises(PhoneAlreadyExistsException):
        registry.create(name="Copy", email="copy@example.com", phone="+919876543210")


def test_store_level_conflict_is_mapped(registry, monkeypatch):
    registry.create(name="Jane", email="jane@example.com")
    # Lose the race: skip the application check so the unique index fires
    monkeypatch.setattr(registry, "ensure_unique", lambda **kwargs: None)
    with pytest.raises(EmailAlreadyExistsException):
        registry.create(name="Racer", email="jane@example.com")
    assert registry.db.query(User).count() == 1


def test_update_rechecks_uniqueness_excluding_self(registry):
    jane = registry.create(name="Jane", email="jane@example.com", phone="9876543210")
    registry.create(name="John", email="john@example.com", phone="9123456789")

    registry.update(jane, {"email": "jane@example.com", "phone": "98765 43210"})
    with pytest.raises(PhoneAlreadyExistsException):
        registry.update(jane, {"phone": "9123456789"})


def test_update_cannot_remove_both_contacts(registry):
    user = registry.create(name="Jane", phone="9876543210")
    with pytest.raises(ValidationException):
        registry.update(user, {"phone": None})


def test_update_ignores_fields_outside_allowed(registry):
    user = registry.create(name="Jane", email="jane@example.com")
    registry.update(user, {"role": UserRole.ADMIN, "location": "Pune"})
    assert user.role == UserRole.PATIENT
    assert user.location == "Pune"


def test_delete(registry):
    user = registry.create(name="Jane", email="jane@example.com")
    registry.delete(user.id)
    assert registry.find_by_id(user.id) is None
    with pytest.raises(UserNotFoundException):
        registry.delete(user.id)


def test_list_users_excludes_role(registry):
    registry.create(name="Admin", email="admin@example.com", role=UserRole.ADMIN)
    registry.create(name="Jane", email="jane@example.com")
    names = [u.name for u in registry.list_users(exclude_role=UserRole.ADMIN)]
    assert names == ["Jane"]
    assert registry.admin_exists()
