"""Authentication service for user registration and sign-in."""

import logging

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from taskforge.errors import AuthenticationError, ConflictError
from taskforge.models.user import AuthResponse, RegisterRequest, User, UserResponse
from taskforge.services.passwords import hash_password, verify_password
from taskforge.services.tokens import TokenService

logger = logging.getLogger(__name__)


def get_user_by_email(session: Session, email: str) -> User | None:
    """Get a user by email address."""
    return session.exec(select(User).where(User.email == email)).first()


def get_user_by_username(session: Session, username: str) -> User | None:
    """Get a user by username."""
    return session.exec(select(User).where(User.username == username)).first()


def create_user(session: Session, user_data: RegisterRequest) -> User:
    """
    Create a new user.

    Raises ConflictError if the email or username is already taken,
    including when a concurrent registration wins the race.
    """
    if get_user_by_email(session, user_data.email) is not None:
        raise ConflictError("Email already registered")
    if get_user_by_username(session, user_data.username) is not None:
        raise ConflictError("Username already taken")

    user = User(
        username=user_data.username,
        email=user_data.email,
        password_hash=hash_password(user_data.password),
    )
    session.add(user)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        logger.info("Registration lost a uniqueness race", extra={"username": user_data.username})
        raise ConflictError("Username or email already registered")
    session.refresh(user)

    logger.info("User registered", extra={"user_id": user.id})
    return user


def authenticate_user(session: Session, email: str, password: str) -> User:
    """
    Authenticate a user by email and password.

    Unknown email and wrong password fail the same way.
    """
    user = get_user_by_email(session, email)
    if user is None or not verify_password(password, user.password_hash):
        logger.info("Failed sign-in attempt")
        raise AuthenticationError("Invalid credentials")
    return user


def create_auth_response(user: User, tokens: TokenService) -> AuthResponse:
    """Create an authentication response with a freshly issued token."""
    issued = tokens.issue(user.id)
    return AuthResponse(
        user=UserResponse.model_validate(user),
        user_id=user.id,
        token=issued.token,
        expires_at=issued.expires_at,
    )
