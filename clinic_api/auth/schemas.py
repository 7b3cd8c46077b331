"""
User Schemas - Pydantic models for identity data validation and serialization.

Format checks (email syntax, phone shape) live here; business rules such as
uniqueness and the password policy live in the service layer.
"""
from typing import Optional, Dict, Any
from pydantic import BaseModel, EmailStr, Field, validator
from datetime import datetime
from .models import UserRole
from ..core.phone import parse_phone


def _clean_email(value: Optional[str]) -> Optional[str]:
    return value.lower() if value else value


class UserRegistration(BaseModel):
    """
    Registration Schema - Used for self-service and admin registration

    Fields:
    - name: Display name (required)
    - email: Email address (optional, needs a password to enable password login)
    - password: Plain text password (optional, hashed before storage)
    - phone: Phone number (optional, normalized to canonical form)
    """
    name: str = Field(..., min_length=1)
    email: Optional[EmailStr] = None
    password: Optional[str] = None
    phone: Optional[str] = None

    @validator("phone")
    def clean_phone(cls, v):
        return parse_phone(v)

    @validator("email")
    def clean_email(cls, v):
        return _clean_email(v)

    @validator("name")
    def validate_name(cls, v):
        """Reject names made only of whitespace"""
        if not v.strip():
            raise ValueError("Name is required")
        return v.strip()

    class Config:
        """Configuration for Pydantic model"""
        json_schema_extra = {
            "example": {
                "name": "Jane Doe",
                "email": "jane@example.com",
                "password": "secret1",
                "phone": "9876543210"
            }
        }


class AdminUserCreate(UserRegistration):
    """
    Admin-side account creation. Same rules as registration plus an explicit role.
    """
    role: UserRole = UserRole.PATIENT


class UserLogin(BaseModel):
    """
    User Login Schema - email + password, or phone alone (which only leads to OTP)
    """
    email: Optional[EmailStr] = None
    password: Optional[str] = None
    phone: Optional[str] = None

    @validator("phone")
    def clean_phone(cls, v):
        return parse_phone(v)

    @validator("email")
    def clean_email(cls, v):
        return _clean_email(v)


class SendOTPRequest(BaseModel):
    """Request a one-time code for an existing phone account"""
    phone: str

    @validator("phone")
    def clean_phone(cls, v):
        return parse_phone(v)


class VerifyOTPRequest(BaseModel):
    """Submit a one-time code"""
    phone: str
    otp: str = Field(..., min_length=1)

    @validator("phone")
    def clean_phone(cls, v):
        return parse_phone(v)

    @validator("otp")
    def strip_otp(cls, v):
        return v.strip()


class CheckUserRequest(BaseModel):
    """Pre-registration existence probe"""
    email: Optional[EmailStr] = None
    phone: Optional[str] = None

    @validator("phone")
    def clean_phone(cls, v):
        return parse_phone(v)

    @validator("email")
    def clean_email(cls, v):
        return _clean_email(v)


class CheckPhoneRequest(BaseModel):
    phone: str

    @validator("phone")
    def clean_phone(cls, v):
        return parse_phone(v)


class ProfileUpdate(BaseModel):
    """
    Profile Update Schema - Self-service changes

    Only fields present in the payload are applied. Unknown keys, including
    ``role``, are dropped by Pydantic and never reach the service.
    """
    name: Optional[str] = Field(None, min_length=1)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    blood_group: Optional[str] = None
    height: Optional[float] = Field(None, gt=0)
    weight: Optional[float] = Field(None, gt=0)
    allergies: Optional[str] = None
    location: Optional[str] = None
    additional_health_info: Optional[Dict[str, Any]] = None

    @validator("phone")
    def clean_phone(cls, v):
        return parse_phone(v)

    @validator("email")
    def clean_email(cls, v):
        return _clean_email(v)


class AdminUserUpdate(ProfileUpdate):
    """
    Administrative update - any profile field plus role
    """
    role: Optional[UserRole] = None


class UserResponse(BaseModel):
    """
    User Response Schema - sanitized identity

    Never carries the password hash or OTP fields.
    """
    id: int
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    role: UserRole
    blood_group: Optional[str] = None
    height: Optional[float] = None
    weight: Optional[float] = None
    allergies: Optional[str] = None
    location: Optional[str] = None
    additional_health_info: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        """Configuration for Pydantic model to enable ORM mode"""
        from_attributes = True


def serialize_user(user) -> Dict[str, Any]:
    """Render an identity as a JSON-ready sanitized dict."""
    return UserResponse.model_validate(user).model_dump(mode="json")
