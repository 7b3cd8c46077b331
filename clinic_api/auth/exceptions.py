"""
Authentication-specific exceptions.
"""
from typing import List
from ..exceptions import (
    ConflictException,
    ForbiddenException,
    NotFoundException,
    UnauthorizedException,
    UpstreamServiceException,
)

BEARER_CHALLENGE = {"WWW-Authenticate": "Bearer"}


class InvalidCredentialsException(UnauthorizedException):
    """Raised for any failed password login. Deliberately says nothing about which part failed."""
    default_detail = "Invalid credentials"


class InvalidTokenException(UnauthorizedException):
    """Exception raised when a bearer token is missing, malformed or expired."""
    default_detail = "Invalid or expired token"

    def __init__(self, detail: str = None):
        super().__init__(detail, headers=BEARER_CHALLENGE)


class EmailAlreadyExistsException(ConflictException):
    default_detail = "An account with this email already exists"


class PhoneAlreadyExistsException(ConflictException):
    default_detail = "An account with this phone number already exists"


class UserNotFoundException(NotFoundException):
    default_detail = "User not found"


class OTPInvalidException(UnauthorizedException):
    default_detail = "Invalid OTP"


class OTPExpiredException(UnauthorizedException):
    default_detail = "OTP has expired. Please request a new code."


class OTPDeliveryFailedException(UpstreamServiceException):
    default_detail = "Failed to send OTP"


class RoleDeniedException(ForbiddenException):
    """Exception raised when user doesn't have required role."""
    def __init__(self, required_roles: List[str], user_role: str):
        detail = f"Access denied. Required roles: {required_roles}. Your role: {user_role}"
        super().__init__(detail)
