"""
FastAPI dependencies for authentication and authorization.

The token only proves who the caller is. Role checks always re-read the
identity from the database, so a demotion takes effect on the next request
even for tokens issued before it.
"""
from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session
from typing import Any, Dict, List, Optional
import logging

from ..database import get_db
from ..core.security import verify_token
from .exceptions import InvalidTokenException, RoleDeniedException
from .models import User, UserRole
from .registry import IdentityRegistry

# Set up logging
logger = logging.getLogger(__name__)

# OAuth2 scheme for JWT token authentication; missing tokens are handled below
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


def get_current_principal(request: Request, token: Optional[str] = Depends(oauth2_scheme)) -> Dict[str, Any]:
    """
    Validate the bearer token and attach the principal to the request.

    Args:
        request: Incoming request; ``principal_id`` and ``token_claims`` are set on its state
        token: JWT token from Authorization header

    Returns:
        Dict: Verified token claims

    Raises:
        InvalidTokenException: If the token is missing, malformed, expired or has no id
    """
    if not token:
        raise InvalidTokenException("Authentication required")

    payload = verify_token(token)
    if not payload or payload.get("id") is None:
        raise InvalidTokenException()

    request.state.principal_id = payload["id"]
    request.state.token_claims = payload
    return payload


def get_current_user(
    claims: Dict[str, Any] = Depends(get_current_principal),
    db: Session = Depends(get_db)
) -> User:
    """
    Get current authenticated user from JWT token with database verification.

    Raises:
        InvalidTokenException: If the identity behind the token no longer exists
    """
    user = IdentityRegistry(db).find_by_id(claims["id"])
    if not user:
        raise InvalidTokenException("User no longer exists")
    return user


def get_optional_current_user(
    request: Request,
    token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db)
) -> Optional[User]:
    """
    Get the current user when a token is sent, None otherwise.

    A token that is sent but invalid is still rejected with 401.
    """
    if not token:
        return None
    claims = get_current_principal(request, token)
    return get_current_user(claims, db)


def require_roles(allowed_roles: List[UserRole]):
    """
    Dependency factory to require specific roles.

    Args:
        allowed_roles: List of roles that are allowed access

    Returns:
        Function that checks if user has required role
    """
    def role_checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in allowed_roles:
            logger.info(f"Role check failed for user {current_user.id}: {current_user.role.value}")
            raise RoleDeniedException(
                [role.value for role in allowed_roles],
                current_user.role.value
            )
        return current_user

    return role_checker


require_admin = require_roles([UserRole.ADMIN])
