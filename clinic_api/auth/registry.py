"""
Identity registry - owns the uniqueness rules over email and phone.

Application-level existence checks give friendly errors; the unique indexes
on the ``users`` table are the final word when two requests race, and an
``IntegrityError`` from the store is reported as the same 409.
"""
import logging
from typing import Any, Dict, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, Query

from ..core.phone import normalize_phone
from ..exceptions import ValidationException
from .exceptions import (
    EmailAlreadyExistsException,
    PhoneAlreadyExistsException,
    UserNotFoundException,
)
from .models import User, UserRole

# Set up logging
logger = logging.getLogger(__name__)

# Columns a caller may set through create/update
PROFILE_FIELDS = (
    "name", "email", "phone", "blood_group", "height", "weight",
    "allergies", "location", "additional_health_info",
)
ADMIN_FIELDS = PROFILE_FIELDS + ("role",)


def _clean_email(email: Optional[str]) -> Optional[str]:
    if email is None:
        return None
    email = email.strip().lower()
    return email or None


class IdentityRegistry:
    """
    Data access for identities.

    Lookups return None when nothing matches; the caller decides whether
    that is an error.
    """

    def __init__(self, db: Session):
        self.db = db

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def find_by_email(self, email: Optional[str]) -> Optional[User]:
        email = _clean_email(email)
        if not email:
            return None
        return self.db.query(User).filter(User.email == email).first()

    def find_by_phone(self, phone: Optional[str]) -> Optional[User]:
        phone = normalize_phone(phone)
        if not phone:
            return None
        return self.db.query(User).filter(User.phone == phone).first()

    def find_by_id(self, user_id: Any) -> Optional[User]:
        try:
            user_id = int(user_id)
        except (TypeError, ValueError):
            return None
        return self.db.query(User).filter(User.id == user_id).first()

    def get_or_404(self, user_id: Any) -> User:
        user = self.find_by_id(user_id)
        if not user:
            raise UserNotFoundException()
        return user

    def admin_exists(self) -> bool:
        return self.db.query(User).filter(User.role == UserRole.ADMIN).count() > 0

    def list_users(self, exclude_role: Optional[UserRole] = None) -> Query:
        """
        Newest-first query over identities.

        Args:
            exclude_role: Leave out identities with this role

        Returns:
            Query: Unexecuted query, ready for pagination
        """
        query = self.db.query(User)
        if exclude_role is not None:
            query = query.filter(User.role != exclude_role)
        return query.order_by(User.created_at.desc(), User.id.desc())

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def ensure_unique(self, email: Optional[str] = None, phone: Optional[str] = None,
                      exclude_id: Optional[int] = None) -> None:
        """
        Check email, then phone, against every identity except ``exclude_id``.

        Raises:
            EmailAlreadyExistsException: If another identity has the email
            PhoneAlreadyExistsException: If another identity has the canonical phone
        """
        existing = self.find_by_email(email)
        if existing and existing.id != exclude_id:
            raise EmailAlreadyExistsException()
        existing = self.find_by_phone(phone)
        if existing and existing.id != exclude_id:
            raise PhoneAlreadyExistsException()

    def create(
        self,
        name: str,
        email: Optional[str] = None,
        phone: Optional[str] = None,
        password_hash: Optional[str] = None,
        role: UserRole = UserRole.PATIENT,
        **profile: Any
    ) -> User:
        """
        Persist a new identity.

        Role defaults to patient; only admin-only code paths pass anything else.

        Raises:
            ValidationException: If neither email nor phone is given
            EmailAlreadyExistsException / PhoneAlreadyExistsException: On duplicates
        """
        email = _clean_email(email)
        phone = normalize_phone(phone)
        if not email and not phone:
            raise ValidationException("Either email or phone number is required")

        self.ensure_unique(email=email, phone=phone)

        unknown = set(profile) - set(PROFILE_FIELDS)
        if unknown:
            raise ValueError(f"Unknown identity fields: {sorted(unknown)}")

        user = User(
            name=name,
            email=email,
            phone=phone,
            password_hash=password_hash,
            role=role,
            **profile
        )
        self.db.add(user)
        self._commit(email, phone)
        self.db.refresh(user)
        logger.info(f"Identity created: {user.id} (role={user.role.value})")
        return user

    def update(self, user: User, changes: Dict[str, Any], allowed_fields=PROFILE_FIELDS) -> User:
        """
        Apply a partial update.

        Only keys in ``allowed_fields`` are applied. Email and phone changes are
        re-checked for uniqueness against everyone but ``user``.

        Raises:
            ValidationException: If the update would leave neither email nor phone
            EmailAlreadyExistsException / PhoneAlreadyExistsException: On collisions
        """
        changes = {key: value for key, value in changes.items() if key in allowed_fields}
        if changes.get("role", UserRole.PATIENT) is None:
            del changes["role"]
        if "name" in changes and not (changes["name"] or "").strip():
            raise ValidationException("Name cannot be empty")
        if "email" in changes:
            changes["email"] = _clean_email(changes["email"])
        if "phone" in changes:
            changes["phone"] = normalize_phone(changes["phone"])

        new_email = changes.get("email", user.email)
        new_phone = changes.get("phone", user.phone)
        if not new_email and not new_phone:
            raise ValidationException("Either email or phone number is required")

        self.ensure_unique(
            email=changes.get("email"),
            phone=changes.get("phone"),
            exclude_id=user.id
        )

        for key, value in changes.items():
            setattr(user, key, value)

        self._commit(changes.get("email"), changes.get("phone"))
        self.db.refresh(user)
        logger.info(f"Identity updated: {user.id} fields={sorted(changes)}")
        return user

    def save(self, user: User) -> User:
        """Commit changes already made to a loaded identity (OTP bookkeeping)."""
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user

    def delete(self, user_id: Any) -> None:
        """
        Remove an identity. Appointments and reports that reference it are left alone.

        Raises:
            UserNotFoundException: If no identity has this id
        """
        user = self.get_or_404(user_id)
        self.db.delete(user)
        self.db.commit()
        logger.info(f"Identity deleted: {user_id}")

    def _commit(self, email: Optional[str], phone: Optional[str]) -> None:
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.warning("Uniqueness race lost while saving identity")
            if email and self.find_by_email(email):
                raise EmailAlreadyExistsException()
            if phone and self.find_by_phone(phone):
                raise PhoneAlreadyExistsException()
            raise
