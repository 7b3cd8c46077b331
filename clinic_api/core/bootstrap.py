"""
Bootstrap utilities for first admin creation.
Handles automatic creation of the first admin user from environment variables.
"""
import logging
from sqlalchemy.orm import Session

from ..auth.models import UserRole
from ..auth.registry import IdentityRegistry
from ..config import settings, Settings
from ..exceptions import ConflictException, ValidationException
from .security import hash_password

logger = logging.getLogger(__name__)


def create_bootstrap_admin(db: Session, config: Settings = settings) -> bool:
    """
    Create the first admin user from environment variables.

    Args:
        db: Database session
        config: Settings carrying BOOTSTRAP_ADMIN_EMAIL / PASSWORD / NAME

    Returns:
        bool: True if admin was created successfully, False otherwise
    """
    if not config.bootstrap_admin_email or not config.bootstrap_admin_password:
        logger.warning("Bootstrap admin credentials not provided in environment variables")
        return False

    if len(config.bootstrap_admin_password) < config.password_min_length:
        logger.warning("Bootstrap admin password is shorter than the minimum length; skipping")
        return False

    try:
        admin = IdentityRegistry(db).create(
            name=config.bootstrap_admin_name,
            email=config.bootstrap_admin_email,
            password_hash=hash_password(config.bootstrap_admin_password),
            role=UserRole.ADMIN
        )
    except (ConflictException, ValidationException) as e:
        logger.warning(f"Bootstrap failed: {e.detail}")
        return False

    logger.info(f"✅ Bootstrap admin created successfully: {admin.email} (ID: {admin.id})")
    return True


def bootstrap_admin_if_needed(db: Session, config: Settings = settings) -> None:
    """
    Check if admin exists and create bootstrap admin if needed.
    This function should be called during application startup.

    Args:
        db: Database session
        config: Application settings
    """
    logger.info("🔍 Checking for existing admin users...")

    if IdentityRegistry(db).admin_exists():
        logger.info("✅ Admin users found. Bootstrap not needed.")
        return

    if create_bootstrap_admin(db, config):
        logger.info("🎉 Bootstrap admin creation completed successfully!")
    else:
        logger.info("💡 To create the first admin, set BOOTSTRAP_ADMIN_EMAIL and BOOTSTRAP_ADMIN_PASSWORD, or register one with ADMIN_BOOTSTRAP_TOKEN.")
