# app/core/security.py

import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Union

from jose import jwt
from passlib.context import CryptContext

from app.core.config import settings

# --- password hashing ---
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# bcrypt only looks at the first 72 bytes and newer backends refuse longer input
BCRYPT_MAX_BYTES = 71


def _truncate(password: str) -> str:
    password_bytes = password.encode("utf-8")
    if len(password_bytes) > BCRYPT_MAX_BYTES:
        return password_bytes[:BCRYPT_MAX_BYTES].decode("utf-8", errors="ignore")
    return password


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(_truncate(plain_password), hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(_truncate(password))


def create_session_token(user_id: str, expires_delta: Union[timedelta, None] = None) -> str:
    """
    Sign a session token for ``user_id``.

    Every call carries a fresh ``sid`` so two logins of the same user never
    produce the same token, even within one second.
    """
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.SESSION_TTL_MINUTES)
    expire = datetime.now(timezone.utc) + expires_delta

    to_encode = {"sub": user_id, "sid": uuid.uuid4().hex, "exp": expire}
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_session_token(token: str) -> Dict[str, Any]:
    """Raises ``jose.JWTError`` on a bad signature, malformed token or expiry."""
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
