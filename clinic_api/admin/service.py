"""
Administrative identity management.

Role changes only happen here. Every change is audit-logged with the acting admin.
"""
from typing import Any, Dict, Optional
from fastapi import Request
from sqlalchemy.orm import Session
import logging

from ..auth.models import User, UserRole
from ..auth.registry import IdentityRegistry, ADMIN_FIELDS
from ..auth.schemas import AdminUserCreate, AdminUserUpdate, UserResponse, serialize_user
from ..auth.service import validate_credentials
from ..core.audit_service import create_audit_log
from ..core.pagination import PageParams, PageResponse, paginate
from ..core.security import hash_password

# Set up logging
logger = logging.getLogger(__name__)


def list_users(db: Session, page_params: PageParams, include_admins: bool = False) -> PageResponse:
    """
    Page through identities, newest first.

    Args:
        db: Database session
        page_params: Pagination parameters
        include_admins: Also list admin identities

    Returns:
        PageResponse of sanitized users
    """
    exclude_role = None if include_admins else UserRole.ADMIN
    return paginate(IdentityRegistry(db).list_users(exclude_role=exclude_role), page_params, UserResponse)


def get_user(db: Session, user_id: int) -> Dict[str, Any]:
    return {"success": True, "user": serialize_user(IdentityRegistry(db).get_or_404(user_id))}


async def create_user(
    db: Session,
    data: AdminUserCreate,
    admin: User,
    request: Optional[Request] = None
) -> Dict[str, Any]:
    """
    Create an identity with any role.

    Same rules as self-service registration; no token is issued.
    """
    validate_credentials(data)
    user = IdentityRegistry(db).create(
        name=data.name,
        email=data.email,
        phone=data.phone,
        password_hash=hash_password(data.password) if data.password else None,
        role=data.role
    )
    await create_audit_log(db, action="ADMIN_USER_CREATED", user_id=user.id, request=request,
                           details={"admin_id": admin.id, "role": user.role.value})
    return {"success": True, "message": "User created successfully", "user": serialize_user(user)}


async def update_user(
    db: Session,
    user_id: int,
    data: AdminUserUpdate,
    admin: User,
    request: Optional[Request] = None
) -> Dict[str, Any]:
    """
    Administrative update, including role.

    Raises:
        UserNotFoundException: If the identity does not exist
        ValidationException / ConflictException: As for profile updates
    """
    registry = IdentityRegistry(db)
    user = registry.get_or_404(user_id)
    previous_role = user.role
    changes = data.model_dump(exclude_unset=True)

    if "phone" in changes and changes["phone"] != user.phone:
        user.clear_otp()
    user = registry.update(user, changes, allowed_fields=ADMIN_FIELDS)

    details = {"admin_id": admin.id, "fields": sorted(changes)}
    if user.role != previous_role:
        details["role"] = {"from": previous_role.value, "to": user.role.value}
        logger.info(f"Role of user {user.id} changed from {previous_role.value} to {user.role.value} by admin {admin.id}")
    await create_audit_log(db, action="ADMIN_USER_UPDATED", user_id=user.id, request=request, details=details)
    return {"success": True, "message": "User updated successfully", "user": serialize_user(user)}


async def delete_user(
    db: Session,
    user_id: int,
    admin: User,
    request: Optional[Request] = None
) -> Dict[str, Any]:
    """
    Delete an identity. Its appointments and reports are kept.
    """
    IdentityRegistry(db).delete(user_id)
    await create_audit_log(db, action="ADMIN_USER_DELETED", user_id=user_id, request=request,
                           details={"admin_id": admin.id})
    return {"success": True, "message": "User deleted successfully"}
