# Implements security-related functionality:
# JWT token generation and verification
# Password hashing and verification using bcrypt
# Single-use password reset tokens
# Provides core security functions used by the authentication module

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Union
import hashlib
import logging
import secrets

from jose import jwt, JWTError
from passlib.context import CryptContext

from app.core.config import Settings

logger = logging.getLogger("app")

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def create_access_token(
    subject: Union[str, Any],
    settings: Settings,
    claims: Optional[Dict[str, Any]] = None,
    expires_delta: Optional[timedelta] = None,
) -> str:
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode = {**(claims or {}), "exp": expire, "sub": str(subject)}
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str, settings: Settings) -> Optional[Dict[str, Any]]:
    """Return the verified claims, or None for a malformed, expired or forged token"""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError as e:
        logger.warning(f"JWT verification error: {e}")
        return None

    if payload.get("sub") is None:
        logger.warning("Token payload missing 'sub' field")
        return None
    # jose already rejects expired tokens; a missing exp is rejected here
    if payload.get("exp") is None:
        logger.warning("Token payload missing 'exp' field")
        return None
    return payload


def verify_password(plain_password: str, hashed_password: str) -> bool:
    if not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def generate_reset_token() -> str:
    return secrets.token_urlsafe(32)


def hash_reset_token(token: str) -> str:
    """Reset tokens are stored hashed; lookups hash the presented token"""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()
