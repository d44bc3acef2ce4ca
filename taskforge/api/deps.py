"""API dependencies for dependency injection."""

import logging
from collections.abc import Callable, Coroutine, Generator
from typing import Annotated, Any

from fastapi import Depends, Request, Response
from fastapi.routing import APIRoute
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel import Session

from taskforge.db.session import get_session
from taskforge.errors import AuthenticationError
from taskforge.services.tokens import TokenService, TokenVerificationError, get_token_service

logger = logging.getLogger(__name__)

# Missing or non-Bearer headers are rejected below with the same error as bad tokens
security = HTTPBearer(auto_error=False)


def get_db_session() -> Generator[Session, None, None]:
    """Get database session dependency."""
    yield from get_session()


DBSession = Annotated[Session, Depends(get_db_session)]
Tokens = Annotated[TokenService, Depends(get_token_service)]


def authenticate(request: Request, tokens: TokenService, token: str | None) -> int:
    """Verify a bearer token and record its subject on the request.

    Every failure raises the same AuthenticationError; the reason is only
    logged.
    """
    if not token:
        logger.info(
            "Rejected request without bearer token",
            extra={"path": request.url.path},
        )
        raise AuthenticationError()

    try:
        user_id = tokens.verify(token)
    except TokenVerificationError as e:
        logger.info(
            "Rejected bearer token",
            extra={"path": request.url.path, "reason": e.reason.value},
        )
        raise AuthenticationError() from e

    request.state.user_id = user_id
    return user_id


def get_current_user_id(
    request: Request,
    tokens: Tokens,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> int:
    """Authenticate the request from its bearer token.

    The verified user id is also stored on ``request.state.user_id``.
    """
    return authenticate(request, tokens, credentials.credentials if credentials else None)


CurrentUserId = Annotated[int, Depends(get_current_user_id)]


class AuthenticatedRoute(APIRoute):
    """Route that rejects unauthenticated requests before reading the body.

    FastAPI decodes the request body before running dependencies, so a
    malformed body would otherwise be reported as 422 ahead of the 401.
    """

    def get_route_handler(self) -> Callable[[Request], Coroutine[Any, Any, Response]]:
        route_handler = super().get_route_handler()

        async def authenticated_route_handler(request: Request) -> Response:
            token_provider = request.app.dependency_overrides.get(
                get_token_service, get_token_service
            )
            credentials = await security(request)
            authenticate(
                request,
                token_provider(),
                credentials.credentials if credentials else None,
            )
            return await route_handler(request)

        return authenticated_route_handler
