"""
Core security utilities for authentication and password handling.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
from jose import jwt, JWTError
from passlib.context import CryptContext
import hashlib
import hmac
import logging

from ..config import settings

# Set up logging
logger = logging.getLogger(__name__)

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=settings.bcrypt_rounds)

def hash_password(password: str) -> str:
    """
    Hash a password using bcrypt.

    Each call uses a fresh salt, so hashing the same password twice gives
    two different strings.

    Args:
        password: Plain text password

    Returns:
        str: Hashed password
    """
    return pwd_context.hash(password)

def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """
    Verify a password against a hash.

    Args:
        plain_password: Plain text password
        hashed_password: Hashed password to compare against

    Returns:
        bool: True if password matches hash; False for a mismatch or an unusable hash
    """
    if not plain_password or not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError):
        logger.warning("Password verification against a malformed hash")
        return False

def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a JWT access token.

    Args:
        data: Data to encode in the token
        expires_delta: Token lifetime; falls back to settings, where None or 0 means no expiry

    Returns:
        str: Encoded JWT token
    """
    to_encode = data.copy()
    now = datetime.now(timezone.utc)
    to_encode["iat"] = now

    if expires_delta is None and settings.access_token_expire_minutes:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)
    if expires_delta is not None:
        to_encode["exp"] = now + expires_delta

    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)

def issue_access_token(user, expires_delta: Optional[timedelta] = None) -> str:
    """
    Issue a bearer token for an identity.

    The token binds the identity id plus whichever of email/phone the account
    has. Role is deliberately left out; it is re-read from the database on
    every role-gated request.

    Args:
        user: Identity the token is issued for
        expires_delta: Optional custom lifetime

    Returns:
        str: Encoded JWT token
    """
    claims: Dict[str, Any] = {"id": user.id}
    if user.email:
        claims["email"] = user.email
    if user.phone:
        claims["phone"] = user.phone
    return create_access_token(claims, expires_delta)

def verify_token(token: str) -> Optional[Dict[str, Any]]:
    """
    Verify and decode a JWT token.

    Validation is stateless: signature and expiry only.

    Args:
        token: JWT token string

    Returns:
        Dict containing token payload if valid, None if invalid
    """
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError:
        return None

def hash_token(token: str) -> str:
    """
    Hash a short-lived secret (such as an OTP) for storage.

    Args:
        token: Token to hash

    Returns:
        str: Hex SHA-256 digest
    """
    return hashlib.sha256(token.encode()).hexdigest()

def verify_token_hash(token: str, hashed_token: Optional[str]) -> bool:
    """
    Verify a token against a hash in constant time.

    Args:
        token: Plain text token
        hashed_token: Hashed token to compare against

    Returns:
        bool: True if token matches hash
    """
    if not token or not hashed_token:
        return False
    return hmac.compare_digest(hash_token(token), hashed_token)

def is_expired(expiry_time: Optional[datetime]) -> bool:
    """
    Check if an expiry timestamp has passed.

    Naive timestamps (SQLite drops tzinfo) are treated as UTC.

    Args:
        expiry_time: Expiration time

    Returns:
        bool: True if expired or missing
    """
    if expiry_time is None:
        return True
    if expiry_time.tzinfo is None:
        expiry_time = expiry_time.replace(tzinfo=timezone.utc)
    return datetime.now(timezone.utc) >= expiry_time

def get_expiry_time(minutes: int) -> datetime:
    """
    Get an expiration time.

    Args:
        minutes: Minutes until expiration

    Returns:
        datetime: Expiration time
    """
    return datetime.now(timezone.utc) + timedelta(minutes=minutes)
