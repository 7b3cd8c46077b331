"""
Tests for first-admin creation at startup.
"""
from clinic_api.auth.models import UserRole
from clinic_api.auth.registry import IdentityRegistry
from clinic_api.config import Settings
from clinic_api.core.bootstrap import bootstrap_admin_if_needed, create_bootstrap_admin
from clinic_api.core.security import verify_password


def bootstrap_settings(**overrides):
    values = dict(
        bootstrap_admin_email="Root@Example.com",
        bootstrap_admin_password="rootpass1",
        bootstrap_admin_name="Root",
    )
    values.update(overrides)
    return Settings(**values)


def test_creates_admin_when_none_exists(db):
    bootstrap_admin_if_needed(db, bootstrap_settings())

    admin = IdentityRegistry(db).find_by_email("root@example.com")
    assert admin is not None
    assert admin.role == UserRole.ADMIN
    assert verify_password("rootpass1", admin.password_hash)


def test_skips_when_admin_already_exists(db):
    bootstrap_admin_if_needed(db, bootstrap_settings())
    bootstrap_admin_if_needed(db, bootstrap_settings(bootstrap_admin_email="second@example.com"))

    assert IdentityRegistry(db).find_by_email("second@example.com") is None


def test_missing_credentials_create_nothing(db):
    assert create_bootstrap_admin(db, bootstrap_settings(bootstrap_admin_password="")) is False
    assert not IdentityRegistry(db).admin_exists()


def test_short_password_is_rejected(db):
    assert create_bootstrap_admin(db, bootstrap_settings(bootstrap_admin_password="abc")) is False
    assert not IdentityRegistry(db).admin_exists()
