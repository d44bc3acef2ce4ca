"""Authentication API endpoints."""

from fastapi import APIRouter, status

from taskforge.api.deps import CurrentUserId, DBSession, Tokens
from taskforge.models.user import AuthResponse, LoginRequest, RegisterRequest
from taskforge.services.auth import authenticate_user, create_auth_response, create_user

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register_user(session: DBSession, tokens: Tokens, user_data: RegisterRequest) -> AuthResponse:
    """Register a new user account and sign it in."""
    user = create_user(session, user_data)
    return create_auth_response(user, tokens)


@router.post("/login", response_model=AuthResponse)
def login_user(session: DBSession, tokens: Tokens, credentials: LoginRequest) -> AuthResponse:
    """Sign in with email and password."""
    user = authenticate_user(session, credentials.email, credentials.password)
    return create_auth_response(user, tokens)


@router.post("/logout")
def logout_user(current_user_id: CurrentUserId) -> dict[str, str]:
    """Sign out."""
    # Tokens are stateless and not revocable; the client discards its token.
    return {"message": "Logged out successfully"}
