"""User entity model."""

from datetime import datetime
from typing import Annotated

from pydantic import EmailStr, StringConstraints
from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel

from taskforge.models.task import utc_now

# Letters, digits, underscores and hyphens
Username = Annotated[
    str,
    StringConstraints(min_length=3, max_length=32, pattern=r"^[a-zA-Z0-9_-]+$"),
]


class User(SQLModel, table=True):
    """User database model."""

    __tablename__ = "users"

    id: int | None = Field(default=None, primary_key=True)
    username: str = Field(max_length=32, unique=True, index=True)
    email: str = Field(max_length=255, unique=True, index=True)
    password_hash: str = Field(max_length=255)
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))


class RegisterRequest(SQLModel):
    """Schema for user registration."""

    username: Username
    email: EmailStr
    password: str = Field(min_length=6, max_length=128)


class LoginRequest(SQLModel):
    """Schema for user login."""

    email: EmailStr
    password: str = Field(min_length=6, max_length=128)


class UserResponse(SQLModel):
    """Schema for user response (no password)."""

    id: int
    username: str
    email: str
    created_at: datetime

    model_config = {"from_attributes": True}


class AuthResponse(SQLModel):
    """Schema for authentication response."""

    user: UserResponse
    user_id: int
    token: str
    token_type: str = "bearer"
    expires_at: datetime
