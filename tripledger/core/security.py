"""
Security utilities for JWT authentication and password hashing.
"""
from datetime import timedelta
from typing import Optional
import hashlib
import bcrypt
from jose import JWTError, jwt
from tripledger.core.config import settings
from tripledger.core.utils import utcnow


def _pre_hash_password(password: str) -> bytes:
    """
    Pre-hash password with SHA256 so passwords longer than bcrypt's
    72-byte limit are not silently truncated.
    """
    return hashlib.sha256(password.encode('utf-8')).digest()


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    pre_hashed = _pre_hash_password(plain_password)
    return bcrypt.checkpw(pre_hashed, hashed_password.encode('utf-8'))


def get_password_hash(password: str) -> str:
    """Hash a password with bcrypt, returned as a string for database storage."""
    pre_hashed = _pre_hash_password(password)
    hashed = bcrypt.hashpw(pre_hashed, bcrypt.gensalt())
    return hashed.decode('utf-8')


def create_access_token(user_id: int, expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT access token whose subject is the user id."""
    expire = utcnow() + (expires_delta or timedelta(days=settings.ACCESS_TOKEN_EXPIRE_DAYS))
    claims = {"sub": str(user_id), "exp": expire}
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> Optional[int]:
    """Verify a JWT token and return the user id it was issued to, or None."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None
    subject = payload.get("sub")
    if subject is None or not str(subject).isdigit():
        return None
    return int(subject)
