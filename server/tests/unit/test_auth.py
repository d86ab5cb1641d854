"""Unit tests for accounts, passwords and bearer tokens."""

import jwt
import pytest

from travel_booking.core.dependencies import (
    Principal,
    ensure_owner_or_admin,
    get_current_user,
    require_admin,
)
from travel_booking.core.exceptions import AuthenticationError, AuthorizationError, ConflictError
from travel_booking.core.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from travel_booking.models.user import UserRole
from travel_booking.schemas.auth import LoginRequest, SignupRequest
from travel_booking.services.auth_service import AuthService


def test_password_hash_round_trip():
    hashed = hash_password("s3cret-passphrase")

    assert hashed != "s3cret-passphrase"
    assert verify_password("s3cret-passphrase", hashed)
    assert not verify_password("wrong-passphrase", hashed)
    assert not verify_password("s3cret-passphrase", "not-a-bcrypt-hash")


def test_access_token_claims():
    token = create_access_token(7, "admin", "ops@example.com")
    payload = decode_access_token(token)

    assert payload["sub"] == "7"
    assert payload["role"] == "admin"
    assert payload["email"] == "ops@example.com"
    assert payload["exp"] > payload["iat"]


def test_expired_token_rejected():
    token = create_access_token(7, "user", "late@example.com", ttl_seconds=-10)

    with pytest.raises(jwt.ExpiredSignatureError):
        decode_access_token(token)


@pytest.mark.asyncio
async def test_signup_and_login(test_session):
    """Test a registered user can log in and gets a token for their account."""
    service = AuthService(test_session)

    user = await service.signup(
        SignupRequest(name="Carla Viajante", email="Carla@Example.com", password="longenough1")
    )
    assert user.email == "carla@example.com"
    assert user.role == UserRole.USER.value
    assert user.password_hash != "longenough1"

    logged_in, token = await service.login(
        LoginRequest(email="carla@example.com", password="longenough1")
    )
    assert logged_in.id == user.id
    assert decode_access_token(token)["sub"] == str(user.id)


@pytest.mark.asyncio
async def test_signup_duplicate_email(test_session, user):
    service = AuthService(test_session)

    with pytest.raises(ConflictError):
        await service.signup(
            SignupRequest(name="Alice Again", email="alice@example.com", password="another-pass")
        )


@pytest.mark.asyncio
@pytest.mark.parametrize("email,password", [
    ("alice@example.com", "wrong-password"),
    ("nobody@example.com", "correct-horse-battery"),
])
async def test_login_bad_credentials(test_session, user, email, password):
    with pytest.raises(AuthenticationError):
        await AuthService(test_session).login(LoginRequest(email=email, password=password))


@pytest.mark.asyncio
async def test_ensure_admin_creates_and_promotes(test_session, user):
    service = AuthService(test_session)

    created = await service.ensure_admin("root@example.com", "bootstrap-pass")
    assert created.role == UserRole.ADMIN.value

    again = await service.ensure_admin("root@example.com", "other-pass")
    assert again.id == created.id

    promoted = await service.ensure_admin("alice@example.com", "ignored-pass")
    assert promoted.id == user.id
    assert promoted.role == UserRole.ADMIN.value

    # The existing password is kept on promotion
    _, token = await service.login(
        LoginRequest(email="alice@example.com", password="correct-horse-battery")
    )
    assert token


@pytest.mark.asyncio
async def test_get_current_user_from_header():
    token = create_access_token(3, "user", "dan@example.com")

    principal = await get_current_user(f"Bearer {token}")

    assert principal == Principal(user_id=3, role="user", email="dan@example.com")
    assert not principal.is_admin


@pytest.mark.asyncio
@pytest.mark.parametrize("header", [
    None,
    "Bearer",
    "Basic dXNlcjpwYXNz",
    "Bearer not-a-jwt",
])
async def test_get_current_user_rejects_bad_headers(header):
    with pytest.raises(AuthenticationError):
        await get_current_user(header)


@pytest.mark.asyncio
async def test_get_current_user_rejects_expired_token():
    token = create_access_token(3, "user", "dan@example.com", ttl_seconds=-1)

    with pytest.raises(AuthenticationError) as exc_info:
        await get_current_user(f"Bearer {token}")

    assert exc_info.value.status_code == 401


@pytest.mark.asyncio
async def test_role_checks():
    admin = Principal(user_id=1, role="admin")
    member = Principal(user_id=2, role="user")

    assert await require_admin(admin) is admin
    with pytest.raises(AuthorizationError):
        await require_admin(member)

    ensure_owner_or_admin(member, 2)
    ensure_owner_or_admin(admin, 2)
    with pytest.raises(AuthorizationError):
        ensure_owner_or_admin(member, 1)
