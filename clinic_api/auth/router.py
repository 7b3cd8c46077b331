"""
Authentication routes for the clinic API.
"""
from fastapi import APIRouter, Depends, Header, Request, status
from sqlalchemy.orm import Session
from typing import Dict, Any, Optional
import logging

from ..database import get_db
from ..core.otp import OTPProvider, get_otp_provider
from .dependencies import get_current_user, get_optional_current_user
from .models import User
from .schemas import (
    UserRegistration, UserLogin, SendOTPRequest, VerifyOTPRequest,
    CheckUserRequest, CheckPhoneRequest, ProfileUpdate
)
from .service import (
    register_user, register_admin, login_user, send_otp, verify_otp,
    get_profile, update_profile, check_user_exists, check_phone_registered
)

# Set up logging
logger = logging.getLogger(__name__)

# Create API router
router = APIRouter(prefix="/auth", tags=["Authentication"])

# ============================================================================
# REGISTRATION ROUTES
# ============================================================================

@router.post("/register", status_code=status.HTTP_201_CREATED, summary="Register with email and/or phone")
async def register_route(
    user_data: UserRegistration,
    request: Request,
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Self-service registration. New accounts are always patients.

    Returns:
        Dict with token and sanitized user
    """
    return await register_user(db, user_data, request=request)


@router.post("/register-admin", status_code=status.HTTP_201_CREATED, summary="Register an administrator")
async def register_admin_route(
    user_data: UserRegistration,
    request: Request,
    x_bootstrap_token: Optional[str] = Header(None),
    current_user: Optional[User] = Depends(get_optional_current_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Admin registration.

    Requires an admin bearer token, or the X-Bootstrap-Token header while the
    system has no admin yet.
    """
    return await register_admin(
        db,
        user_data,
        acting_user=current_user,
        bootstrap_token=x_bootstrap_token,
        request=request
    )

# ============================================================================
# LOGIN ROUTES
# ============================================================================

@router.post("/login", summary="Login with email and password")
async def login_route(
    login_data: UserLogin,
    request: Request,
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Email + password login. A phone-only payload answers with ``next_step``.
    """
    return await login_user(db, login_data, request=request)


@router.post("/send-otp", summary="Send a one-time code")
async def send_otp_route(
    otp_request: SendOTPRequest,
    request: Request,
    db: Session = Depends(get_db),
    otp_provider: OTPProvider = Depends(get_otp_provider)
) -> Dict[str, Any]:
    return await send_otp(db, otp_request.phone, otp_provider, request=request)


@router.post("/verify-otp", summary="Verify a one-time code and login")
async def verify_otp_route(
    otp_request: VerifyOTPRequest,
    request: Request,
    db: Session = Depends(get_db),
    otp_provider: OTPProvider = Depends(get_otp_provider)
) -> Dict[str, Any]:
    return await verify_otp(db, otp_request.phone, otp_request.otp, otp_provider, request=request)

# ============================================================================
# EXISTENCE CHECKS
# ============================================================================

@router.post("/check-user", summary="Check whether an email or phone is taken")
async def check_user_route(
    check_data: CheckUserRequest,
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    return check_user_exists(db, email=check_data.email, phone=check_data.phone)


@router.post("/check-phone", summary="Check whether a phone is registered")
async def check_phone_route(
    check_data: CheckPhoneRequest,
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    return check_phone_registered(db, check_data.phone)

# ============================================================================
# PROFILE ROUTES
# ============================================================================

@router.get("/profile", summary="Get the current user's profile")
async def get_profile_route(current_user: User = Depends(get_current_user)) -> Dict[str, Any]:
    return get_profile(current_user)


@router.put("/profile", summary="Update the current user's profile")
async def update_profile_route(
    profile_data: ProfileUpdate,
    request: Request,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Update profile fields. Role cannot be changed here.
    """
    return await update_profile(db, current_user, profile_data, request=request)
