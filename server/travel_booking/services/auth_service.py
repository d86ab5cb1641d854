"""Account registration and login."""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import AuthenticationError, ConflictError, NotFoundError
from ..core.security import create_access_token, hash_password, verify_password
from ..models.user import User, UserRole
from ..schemas.auth import LoginRequest, SignupRequest

logger = logging.getLogger(__name__)


class AuthService:
    """Service for user accounts and token issuing."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def signup(self, request: SignupRequest, role: UserRole = UserRole.USER) -> User:
        """
        Register a new account.

        Args:
            request: Name, email and password
            role: Role of the new account

        Returns:
            Created user entity

        Raises:
            ConflictError: If the email is already registered
        """
        if await self.get_user_by_email(request.email):
            raise ConflictError(
                detail=f"Email '{request.email}' is already registered",
                conflicting_resource={"email": request.email}
            )

        user = User(
            name=request.name,
            email=request.email,
            password_hash=hash_password(request.password),
            role=role.value,
        )

        try:
            self.db.add(user)
            await self.db.commit()
            await self.db.refresh(user)
        except IntegrityError as e:
            await self.db.rollback()
            logger.warning(
                "Signup failed due to integrity constraint",
                extra={"email": request.email, "error": str(e)}
            )
            raise ConflictError(
                detail=f"Email '{request.email}' is already registered",
                conflicting_resource={"email": request.email}
            )

        logger.info("User registered", extra={"user_id": user.id, "role": user.role})

        return user

    async def login(self, request: LoginRequest) -> tuple[User, str]:
        """
        Exchange credentials for a bearer token.

        Returns:
            The user and a signed access token

        Raises:
            AuthenticationError: If the email is unknown or the password is wrong
        """
        user = await self.get_user_by_email(request.email)

        if not user or not verify_password(request.password, user.password_hash):
            logger.warning("Login failed", extra={"email": request.email})
            raise AuthenticationError("Invalid email or password")

        token = create_access_token(user.id, user.role, user.email)
        logger.info("User logged in", extra={"user_id": user.id})

        return user, token

    async def get_user_by_email(self, email: str) -> Optional[User]:
        stmt = select(User).where(User.email == email)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_user_by_id_or_raise(self, user_id: int) -> User:
        """
        Get user by ID or raise NotFoundError.

        Raises:
            NotFoundError: If the user does not exist
        """
        user = await self.db.get(User, user_id)
        if not user:
            raise NotFoundError(resource_type="user", resource_id=user_id)
        return user

    async def ensure_admin(self, email: str, password: str, name: str = "Administrator") -> User:
        """
        Make sure an admin account exists for the given email.

        An existing account is promoted to admin and keeps its password. A
        missing account is created with the given password.
        """
        email = email.strip().lower()
        user = await self.get_user_by_email(email)

        if user is None:
            return await self.signup(
                SignupRequest(name=name, email=email, password=password),
                role=UserRole.ADMIN,
            )

        if user.role != UserRole.ADMIN.value:
            user.role = UserRole.ADMIN.value
            await self.db.commit()
            await self.db.refresh(user)
            logger.info("User promoted to admin", extra={"user_id": user.id})

        return user
