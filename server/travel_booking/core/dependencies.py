"""FastAPI dependencies for authentication and authorization."""

from dataclasses import dataclass
from typing import Optional

import jwt
from fastapi import Depends, Header

from .exceptions import AuthenticationError, AuthorizationError
from .security import decode_access_token

ADMIN_ROLE = "admin"
USER_ROLE = "user"


@dataclass(frozen=True)
class Principal:
    """The authenticated caller, as described by a verified bearer token."""

    user_id: int
    role: str
    email: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN_ROLE


async def get_current_user(
    authorization: Optional[str] = Header(None, alias="Authorization")
) -> Principal:
    """
    Authentication dependency that validates Bearer tokens.

    Args:
        authorization: Authorization header with Bearer token

    Returns:
        Principal: Caller identity from the validated token

    Raises:
        AuthenticationError: If the header is missing or the token is invalid
    """
    if not authorization:
        raise AuthenticationError("Authorization header missing")

    try:
        scheme, token = authorization.split()
    except ValueError:
        raise AuthenticationError("Invalid authorization header format")

    if scheme.lower() != "bearer":
        raise AuthenticationError("Invalid authentication scheme")

    try:
        payload = decode_access_token(token)
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Token has expired")
    except jwt.PyJWTError as e:
        raise AuthenticationError(f"Token validation failed: {e}")

    try:
        user_id = int(payload["sub"])
    except (KeyError, TypeError, ValueError):
        raise AuthenticationError("Invalid token payload")

    return Principal(
        user_id=user_id,
        role=payload.get("role", USER_ROLE),
        email=payload.get("email"),
    )


async def require_admin(current_user: Principal = Depends(get_current_user)) -> Principal:
    """Authorization dependency that only admits admin callers."""
    if not current_user.is_admin:
        raise AuthorizationError("Admin privileges required", required_role=ADMIN_ROLE)
    return current_user


def ensure_owner_or_admin(current_user: Principal, user_id: int) -> None:
    """
    Check that the caller is acting on their own data.

    Raises:
        AuthorizationError: If the caller is neither the owner nor an admin
    """
    if current_user.is_admin or current_user.user_id == user_id:
        return
    raise AuthorizationError("You can only access your own data")


RequiredAuth = Depends(get_current_user)
AdminAuth = Depends(require_admin)
