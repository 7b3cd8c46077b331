"""
User Model - the identity record shared by both login paths.

An identity signs in either with email + password or with phone + OTP. Both
credential kinds are optional columns on one row; business rules, not the
type structure, decide which login path an identity can use.
"""
from sqlalchemy import Column, Integer, String, Float, DateTime, Enum, JSON, CheckConstraint
from sqlalchemy.sql import func
import enum
from ..database import Base

class UserRole(str, enum.Enum):
    """
    Enumeration for user roles in the clinic system.

    Roles:
    - PATIENT: Default role for self-registered accounts
    - DOCTOR: Medical practitioners
    - ADMIN: Administrators with full access
    """
    PATIENT = "patient"
    DOCTOR = "doctor"
    ADMIN = "admin"

class User(Base):
    """
    User Model - Stores all identity information in the system

    Fields:
    - id: Primary key for user identification
    - name: Display name
    - email: Unique email address (optional, stored lower-cased)
    - phone: Unique canonical phone number (optional)
    - password_hash: bcrypt hash, present only for email+password registrations
    - otp_hash / otp_expires_at: outstanding local OTP challenge (SHA-256 of the code)
    - role: patient, doctor or admin
    - blood_group, height, weight, allergies, location, additional_health_info: health profile
    - created_at: Timestamp when user was created
    - updated_at: Timestamp when user was last updated
    """
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("email IS NOT NULL OR phone IS NOT NULL", name="ck_users_email_or_phone"),
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=True)
    phone = Column(String, unique=True, index=True, nullable=True)
    password_hash = Column(String, nullable=True)
    otp_hash = Column(String, nullable=True)
    otp_expires_at = Column(DateTime(timezone=True), nullable=True)
    role = Column(Enum(UserRole, values_callable=lambda roles: [role.value for role in roles], name="user_role"),
                  nullable=False, default=UserRole.PATIENT)
    blood_group = Column(String, nullable=True)
    height = Column(Float, nullable=True)
    weight = Column(Float, nullable=True)
    allergies = Column(String, nullable=True)
    location = Column(String, nullable=True)
    additional_health_info = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', phone='{self.phone}', role='{self.role}')>"

    @property
    def has_password(self) -> bool:
        """Whether the identity can use password login."""
        return bool(self.password_hash)

    def clear_otp(self) -> None:
        """Drop any outstanding OTP challenge."""
        self.otp_hash = None
        self.otp_expires_at = None
