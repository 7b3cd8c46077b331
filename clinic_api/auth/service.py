"""
Authentication service layer for business logic.

Registration, password login, OTP login and self-service profile changes.
Every path that hands out a token goes through ``issue_access_token``.
"""
import hmac
import logging
from typing import Dict, Any, Optional

from fastapi import Request
from sqlalchemy.orm import Session

from ..config import settings
from ..core.audit_service import create_audit_log
from ..core.otp import OTPProvider, OTPProviderNotConfigured, OTPDeliveryError
from ..core.security import (
    hash_password,
    verify_password,
    issue_access_token,
    hash_token,
    verify_token_hash,
    is_expired,
    get_expiry_time
)
from ..exceptions import ConflictException, ForbiddenException, ValidationException
from .exceptions import (
    InvalidCredentialsException,
    OTPDeliveryFailedException,
    OTPExpiredException,
    OTPInvalidException,
    UserNotFoundException,
)
from .models import User, UserRole
from .registry import IdentityRegistry, PROFILE_FIELDS
from .schemas import UserRegistration, UserLogin, ProfileUpdate, serialize_user

# Set up logging
logger = logging.getLogger(__name__)

REGISTER_FIRST = "User not found. Please register first."


def validate_credentials(data: UserRegistration) -> None:
    """
    Business rules on a registration payload that Pydantic cannot express.

    Raises:
        ValidationException: If neither email nor phone is given, or the password is unusable
    """
    if not data.email and not data.phone:
        raise ValidationException("Either email or phone number is required")
    if data.password is not None:
        if not data.email:
            raise ValidationException("A password can only be set together with an email address")
        if len(data.password) < settings.password_min_length:
            raise ValidationException(
                f"Password must be at least {settings.password_min_length} characters long"
            )


def _auth_response(message: str, user: User) -> Dict[str, Any]:
    return {
        "success": True,
        "message": message,
        "token": issue_access_token(user),
        "user": serialize_user(user),
    }


async def register_user(
    db: Session,
    data: UserRegistration,
    role: UserRole = UserRole.PATIENT,
    request: Optional[Request] = None,
    message: str = "User registered successfully"
) -> Dict[str, Any]:
    """
    Register a new identity through the email and/or phone path.

    Args:
        db: Database session
        data: Validated registration payload (phone already canonical)
        role: Role to assign; only admin-gated callers pass anything but patient
        request: FastAPI request object for audit logging
        message: Success message for the envelope

    Returns:
        Dict with token and sanitized user

    Raises:
        ValidationException: If the payload breaks a registration rule
        EmailAlreadyExistsException: If the email is taken (checked first)
        PhoneAlreadyExistsException: If the canonical phone is taken
    """
    logger.info(f"Registration attempt (role={role.value}, email={'yes' if data.email else 'no'}, phone={'yes' if data.phone else 'no'})")
    validate_credentials(data)

    registry = IdentityRegistry(db)
    password_hash = hash_password(data.password) if data.password else None

    try:
        user = registry.create(
            name=data.name,
            email=data.email,
            phone=data.phone,
            password_hash=password_hash,
            role=role
        )
    except ConflictException as e:
        logger.warning(f"Registration failed: {e.detail}")
        await create_audit_log(db, action="REGISTRATION_FAILED_CONFLICT", request=request, details={"email": data.email, "phone": data.phone})
        raise

    await create_audit_log(db, action="REGISTRATION_SUCCESS", user_id=user.id, request=request, details={"role": role.value})
    return _auth_response(message, user)


async def register_admin(
    db: Session,
    data: UserRegistration,
    acting_user: Optional[User] = None,
    bootstrap_token: Optional[str] = None,
    request: Optional[Request] = None
) -> Dict[str, Any]:
    """
    Register an identity with the admin role.

    Allowed for an authenticated admin, or once with the configured bootstrap
    token while no admin exists yet.

    Args:
        db: Database session
        data: Registration payload
        acting_user: Authenticated caller, if a bearer token was sent
        bootstrap_token: Value of the X-Bootstrap-Token header, if any
        request: FastAPI request object for audit logging

    Raises:
        ForbiddenException: If neither an admin nor a valid bootstrap token authorizes the call
    """
    registry = IdentityRegistry(db)

    if acting_user is not None and acting_user.role == UserRole.ADMIN:
        authorized_by = f"admin:{acting_user.id}"
    elif bootstrap_token:
        configured = settings.admin_bootstrap_token
        if not configured or not hmac.compare_digest(bootstrap_token, configured) or registry.admin_exists():
            await create_audit_log(db, action="ADMIN_REGISTRATION_DENIED", request=request, details={"reason": "bootstrap_token"})
            raise ForbiddenException("Invalid or already used bootstrap token")
        authorized_by = "bootstrap"
    else:
        await create_audit_log(db, action="ADMIN_REGISTRATION_DENIED", user_id=acting_user.id if acting_user else None, request=request, details={"reason": "not_admin"})
        raise ForbiddenException("Admin registration requires an administrator account or a bootstrap token")

    logger.info(f"Admin registration authorized by {authorized_by}")
    return await register_user(db, data, role=UserRole.ADMIN, request=request, message="Admin registered successfully")


async def login_user(db: Session, data: UserLogin, request: Optional[Request] = None) -> Dict[str, Any]:
    """
    Authenticate with email + password.

    A phone-only login only locates the account and points the client at
    the OTP flow; possession of the phone is proven by verify-otp, so no
    token is issued here.

    Raises:
        ValidationException: If neither email nor phone is given, or the password is missing
        InvalidCredentialsException: Unknown email, no stored password, or wrong password
        UserNotFoundException: Phone-only login for an unknown phone
    """
    registry = IdentityRegistry(db)

    if data.email:
        if not data.password:
            raise ValidationException("Password is required")
        user = registry.find_by_email(data.email)
        if not user or not verify_password(data.password, user.password_hash):
            logger.warning("Login failed: invalid credentials")
            await create_audit_log(db, action="USER_LOGIN_FAILED_INVALID_CREDENTIALS", user_id=user.id if user else None, request=request, details={"email": data.email})
            raise InvalidCredentialsException()

        logger.info(f"Login successful: User {user.id}")
        await create_audit_log(db, action="USER_LOGIN_SUCCESS", user_id=user.id, request=request)
        return _auth_response("Login successful", user)

    if data.phone:
        user = registry.find_by_phone(data.phone)
        if not user:
            raise UserNotFoundException(REGISTER_FIRST)
        return {
            "success": True,
            "message": "Request a one-time code to sign in with this phone number",
            "next_step": "verify_otp",
        }

    raise ValidationException("Email or phone number is required")


async def send_otp(
    db: Session,
    phone: str,
    otp_provider: OTPProvider,
    request: Optional[Request] = None
) -> Dict[str, Any]:
    """
    Issue a one-time code to an existing identity's phone.

    In local mode the code is stored hashed with an expiry. Outside
    production it is also echoed back so the flow can be exercised without SMS.

    Raises:
        UserNotFoundException: If no identity has this phone (OTP login does not register)
        OTPDeliveryFailedException: If the external channel fails
    """
    registry = IdentityRegistry(db)
    user = registry.find_by_phone(phone)
    if not user:
        logger.info("OTP requested for an unregistered phone")
        raise UserNotFoundException(REGISTER_FIRST)

    try:
        result = await otp_provider.issue(user.phone)
    except OTPDeliveryError as e:
        await create_audit_log(db, action="OTP_SEND_FAILED", user_id=user.id, request=request, details={"provider": otp_provider.name})
        raise OTPDeliveryFailedException() from e

    response: Dict[str, Any] = {"success": True, "message": "OTP sent successfully"}
    if result.is_local:
        # A re-issue replaces any earlier code
        user.otp_hash = hash_token(result.code)
        user.otp_expires_at = get_expiry_time(settings.otp_expire_minutes)
        registry.save(user)
        if settings.is_production:
            logger.warning(f"Local OTP issued in production for user {user.id}; no delivery channel configured")
        else:
            response["otp"] = result.code
    elif user.otp_hash:
        user.clear_otp()
        registry.save(user)

    await create_audit_log(db, action="OTP_SENT", user_id=user.id, request=request, details={"provider": otp_provider.name})
    return response


def _check_local_code(registry: IdentityRegistry, user: User, code: str) -> bool:
    """
    Compare a submitted code with the stored challenge.

    An expired challenge is cleared so the next attempt must re-issue.

    Raises:
        OTPInvalidException: If there is no outstanding challenge
        OTPExpiredException: If the challenge has expired
    """
    if not user.otp_hash:
        raise OTPInvalidException("No active OTP. Please request a new code.")
    if is_expired(user.otp_expires_at):
        user.clear_otp()
        registry.save(user)
        raise OTPExpiredException()
    return verify_token_hash(code, user.otp_hash)


async def verify_otp(
    db: Session,
    phone: str,
    code: str,
    otp_provider: OTPProvider,
    request: Optional[Request] = None
) -> Dict[str, Any]:
    """
    Verify a one-time code and sign the identity in.

    The external provider is asked first; the stored code is only consulted
    when the provider reports it is not configured. A code works once.

    Raises:
        UserNotFoundException: If no identity has this phone
        OTPInvalidException / OTPExpiredException: If the code is rejected
        OTPDeliveryFailedException: If the external check fails in transit
    """
    registry = IdentityRegistry(db)
    user = registry.find_by_phone(phone)
    if not user:
        raise UserNotFoundException()

    try:
        approved = await otp_provider.check(user.phone, code)
    except OTPProviderNotConfigured:
        try:
            approved = _check_local_code(registry, user, code)
        except OTPExpiredException:
            await create_audit_log(db, action="OTP_VERIFY_FAILED_EXPIRED", user_id=user.id, request=request)
            raise
    except OTPDeliveryError as e:
        raise OTPDeliveryFailedException("Failed to verify OTP") from e

    if not approved:
        logger.warning(f"OTP verification failed for user {user.id}")
        await create_audit_log(db, action="OTP_VERIFY_FAILED_INVALID", user_id=user.id, request=request)
        raise OTPInvalidException()

    user.clear_otp()
    registry.save(user)
    logger.info(f"OTP login successful: User {user.id}")
    await create_audit_log(db, action="OTP_VERIFY_SUCCESS", user_id=user.id, request=request)
    return _auth_response("OTP verified successfully", user)


def get_profile(user: User) -> Dict[str, Any]:
    return {"success": True, "user": serialize_user(user)}


async def update_profile(
    db: Session,
    user: User,
    data: ProfileUpdate,
    request: Optional[Request] = None
) -> Dict[str, Any]:
    """
    Apply a self-service profile update.

    Role is not a profile field and cannot change here whatever the payload says.

    Raises:
        ValidationException: If the change would leave no email and no phone
        EmailAlreadyExistsException / PhoneAlreadyExistsException: On collisions
    """
    changes = data.model_dump(exclude_unset=True)
    changes.pop("role", None)

    registry = IdentityRegistry(db)
    if "phone" in changes and changes["phone"] != user.phone:
        # A code sent to the old number must not unlock the new one
        user.clear_otp()
    user = registry.update(user, changes, allowed_fields=PROFILE_FIELDS)

    await create_audit_log(db, action="PROFILE_UPDATED", user_id=user.id, request=request, details={"fields": sorted(changes)})
    return {"success": True, "message": "Profile updated successfully", "user": serialize_user(user)}


def check_user_exists(db: Session, email: Optional[str] = None, phone: Optional[str] = None) -> Dict[str, Any]:
    """Pre-registration probe on email and/or phone."""
    if not email and not phone:
        raise ValidationException("Email or phone number is required")
    registry = IdentityRegistry(db)
    if email and registry.find_by_email(email):
        return {"success": True, "exists": True, "message": "An account with this email already exists"}
    if phone and registry.find_by_phone(phone):
        return {"success": True, "exists": True, "message": "An account with this phone number already exists"}
    return {"success": True, "exists": False, "message": "User does not exist"}


def check_phone_registered(db: Session, phone: str) -> Dict[str, Any]:
    registry = IdentityRegistry(db)
    if registry.find_by_phone(phone):
        return {"success": True, "registered": True, "message": "Phone number is registered"}
    return {"success": True, "registered": False, "message": "Phone number is not registered"}
