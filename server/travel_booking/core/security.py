"""Password hashing and bearer token issuing."""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import bcrypt
import jwt

from .config import settings


def hash_password(plain_password: str) -> str:
    """Hash a password with a fresh bcrypt salt."""
    hashed = bcrypt.hashpw(plain_password.encode("utf-8"), bcrypt.gensalt())
    return hashed.decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check a password against a stored bcrypt hash."""
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False


def create_access_token(
    user_id: int,
    role: str,
    email: str,
    ttl_seconds: Optional[int] = None,
) -> str:
    """
    Issue a signed bearer token for a user.

    Args:
        user_id: Subject of the token
        role: Role claim ("user" or "admin")
        email: Email claim
        ttl_seconds: Lifetime override, defaults to the configured token TTL

    Returns:
        str: Encoded JWT
    """
    now = datetime.now(timezone.utc)
    lifetime = ttl_seconds if ttl_seconds is not None else settings.access_token_ttl_seconds
    payload = {
        "sub": str(user_id),
        "role": role,
        "email": email,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(seconds=lifetime)).timestamp()),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> Dict[str, Any]:
    """
    Decode and verify a bearer token.

    Raises:
        jwt.PyJWTError: If the signature is invalid, the token is expired or malformed
    """
    return jwt.decode(
        token,
        settings.jwt_secret,
        algorithms=[settings.jwt_algorithm],
        options={"require": ["sub", "exp"]},
    )
