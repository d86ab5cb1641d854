"""Authentication router: signup, login and the current account."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..core.database import get_db
from ..core.dependencies import Principal, RequiredAuth
from ..schemas.auth import LoginRequest, SignupRequest, TokenResponse, User
from ..schemas.common import PROBLEM_RESPONSES
from ..services.auth_service import AuthService

router = APIRouter(prefix="/v1/auth", tags=["auth"], responses=PROBLEM_RESPONSES)

DB_DEPENDENCY = Depends(get_db)


@router.post("/signup", response_model=User, status_code=201)
async def signup(request: SignupRequest, db: AsyncSession = DB_DEPENDENCY) -> User:
    """Register a new account with the 'user' role."""
    user = await AuthService(db).signup(request)
    return User.model_validate(user)


@router.post("/login", response_model=TokenResponse)
async def login(request: LoginRequest, db: AsyncSession = DB_DEPENDENCY) -> TokenResponse:
    """Exchange an email and password for a bearer token."""
    user, token = await AuthService(db).login(request)

    return TokenResponse(
        access_token=token,
        expires_in=settings.access_token_ttl_seconds,
        user=User.model_validate(user),
    )


@router.get("/me", response_model=User)
async def me(
    current_user: Principal = RequiredAuth,
    db: AsyncSession = DB_DEPENDENCY
) -> User:
    """Return the account behind the bearer token."""
    user = await AuthService(db).get_user_by_id_or_raise(current_user.user_id)
    return User.model_validate(user)
