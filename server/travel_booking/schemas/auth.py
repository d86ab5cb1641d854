"""Authentication Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class SignupRequest(BaseModel):
    """Request schema for registering an account."""

    name: str = Field(..., min_length=2, max_length=100, description="Display name")
    email: str = Field(..., max_length=255, pattern=EMAIL_PATTERN, description="Login email address")
    # bcrypt only reads the first 72 bytes
    password: str = Field(..., min_length=8, max_length=72, description="Account password")

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class LoginRequest(BaseModel):
    """Request schema for exchanging credentials for a token."""

    email: str = Field(..., description="Login email address")
    password: str = Field(..., description="Account password")

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class User(BaseModel):
    """User response schema."""

    id: int = Field(..., description="User ID")
    name: str = Field(..., description="Display name")
    email: str = Field(..., description="Login email address")
    role: str = Field(..., description="'user' or 'admin'")
    created_at: datetime = Field(..., description="Registration time (ISO 8601)")

    model_config = ConfigDict(from_attributes=True)


class TokenResponse(BaseModel):
    """Bearer token issued on login."""

    access_token: str = Field(..., description="Signed JWT")
    token_type: str = Field("bearer", description="Token type for the Authorization header")
    expires_in: int = Field(..., description="Token lifetime in seconds")
    user: User = Field(..., description="Authenticated user")
