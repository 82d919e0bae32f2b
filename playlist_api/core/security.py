"""
Security utilities for the Playlist API service.

Provides password hashing/verification using bcrypt (with a constant-time
fallback for legacy plaintext records) and session token encode/decode
using PyJWT with the configured algorithm.
"""

from __future__ import annotations

import hmac
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import bcrypt
import jwt  # PyJWT

from playlist_api.core.config import Settings, get_settings

# bcrypt only considers the first 72 bytes of a password
_BCRYPT_MAX_BYTES = 72


def _encode_password(plain_password: str) -> bytes:
    return plain_password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


# PUBLIC_INTERFACE
def hash_password(plain_password: str) -> str:
    """Hash a plaintext password using bcrypt."""
    if not isinstance(plain_password, str) or not plain_password:
        raise ValueError("Password must be a non-empty string")
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(_encode_password(plain_password), salt)
    return hashed.decode("utf-8")


# PUBLIC_INTERFACE
def verify_password(plain_password: str, password_hash: str) -> bool:
    """Verify a plaintext password against a bcrypt hash."""
    if not (plain_password and password_hash):
        return False
    try:
        return bcrypt.checkpw(_encode_password(plain_password), password_hash.encode("utf-8"))
    except ValueError:
        # Not a bcrypt hash
        return False


# PUBLIC_INTERFACE
def verify_legacy_password(plain_password: str, stored_plaintext: str) -> bool:
    """Compare against a plaintext password kept by older records."""
    if not (plain_password and stored_plaintext):
        return False
    return hmac.compare_digest(plain_password.encode("utf-8"), str(stored_plaintext).encode("utf-8"))


# PUBLIC_INTERFACE
def create_session_token(
    claims: Dict[str, Any],
    settings: Optional[Settings] = None,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Create a signed session token.

    Parameters:
    - claims: session payload (username, firstName, imageUrl).
    - settings: optional explicit settings; defaults to the cached instance.
    - expires_delta: optional timedelta for expiration; falls back to SESSION_TTL_MINUTES.

    Returns:
    - Encoded JWT string carrying a unique "jti" so the session can be revoked.
    """
    settings = settings or get_settings()
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.SESSION_TTL_MINUTES))
    payload: Dict[str, Any] = {
        "sub": claims.get("username"),
        "iat": int(now.timestamp()),
        "exp": int(expire.timestamp()),
    }
    payload.update(claims)
    payload["jti"] = secrets.token_hex(16)
    return jwt.encode(payload, settings.SESSION_SECRET, algorithm=settings.SESSION_ALGORITHM)


# PUBLIC_INTERFACE
def decode_session_token(token: str, settings: Optional[Settings] = None) -> Dict[str, Any]:
    """Decode and validate a session token, returning the payload claims.

    Raises:
    - jwt.ExpiredSignatureError if the token is expired
    - jwt.InvalidTokenError for any other token issues
    """
    settings = settings or get_settings()
    return jwt.decode(token, settings.SESSION_SECRET, algorithms=[settings.SESSION_ALGORITHM])
