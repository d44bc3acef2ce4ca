"""Bearer token issuance and verification.

Tokens are HS256 JWTs carrying the subject (user id), the issue time and
the expiry time. They are signed, not encrypted, and carry nothing secret.

A ``TokenService`` holds the signing secret for its whole lifetime. The
application builds one instance from settings (``get_token_service``);
tests build their own instances with a scoped secret and clock instead of
touching the shared one.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from functools import lru_cache
from typing import Any

from jose import JWTError, jwt

from taskforge.config import get_settings
from taskforge.models.task import utc_now

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


class TokenFailure(str, Enum):
    """Why a token was rejected. Only ever logged, never returned to clients."""

    MALFORMED = "malformed"
    BAD_SIGNATURE = "bad_signature"
    EXPIRED = "expired"


class TokenVerificationError(Exception):
    """Raised when a bearer token cannot be accepted."""

    def __init__(self, reason: TokenFailure, detail: str = "") -> None:
        self.reason = reason
        self.detail = detail
        super().__init__(f"{reason.value}: {detail}" if detail else reason.value)


@dataclass(frozen=True)
class TokenClaims:
    """The identity claim carried inside a token."""

    subject_id: int
    issued_at: datetime
    expires_at: datetime

    def to_payload(self) -> dict[str, Any]:
        return {
            "sub": str(self.subject_id),
            "iat": int(self.issued_at.timestamp()),
            "exp": int(self.expires_at.timestamp()),
        }


@dataclass(frozen=True)
class IssuedToken:
    """A freshly signed token together with the claims it encodes."""

    token: str
    claims: TokenClaims

    @property
    def expires_at(self) -> datetime:
        return self.claims.expires_at


def _timestamp_claim(payload: dict[str, Any], name: str) -> datetime:
    value = payload.get(name)
    # bool is an int subclass
    if not isinstance(value, int) or isinstance(value, bool):
        raise TokenVerificationError(TokenFailure.MALFORMED, f"'{name}' must be an integer")
    try:
        return datetime.fromtimestamp(value, tz=timezone.utc)
    except (OverflowError, OSError, ValueError) as e:
        raise TokenVerificationError(TokenFailure.MALFORMED, f"'{name}' out of range") from e


def _subject_claim(payload: dict[str, Any]) -> int:
    value = payload.get("sub")
    if not isinstance(value, str) or not (value.isascii() and value.isdigit()):
        raise TokenVerificationError(TokenFailure.MALFORMED, "'sub' must be a user id")
    return int(value)


class TokenService:
    """Issues and verifies signed, time-bounded identity tokens."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        lifetime: timedelta = timedelta(hours=8),
        clock: Clock = utc_now,
    ) -> None:
        if not secret:
            raise ValueError("Token signing secret must not be empty")
        if lifetime < timedelta(seconds=1):
            raise ValueError("Token lifetime must be at least one second")
        self._secret = secret
        self._algorithm = algorithm
        self._lifetime = lifetime
        self._clock = clock

    @property
    def lifetime(self) -> timedelta:
        return self._lifetime

    def issue(self, subject_id: int) -> IssuedToken:
        """Create and sign a token for the given user id."""
        # JWT timestamps are whole seconds
        issued_at = self._clock().replace(microsecond=0)
        claims = TokenClaims(
            subject_id=subject_id,
            issued_at=issued_at,
            expires_at=issued_at + self._lifetime,
        )
        token = jwt.encode(claims.to_payload(), self._secret, algorithm=self._algorithm)
        return IssuedToken(token=token, claims=claims)

    def decode(self, token: str) -> TokenClaims:
        """Verify a token and return its claims.

        Checks run in order: structure, expiry, signature. An expired token
        is reported as expired whatever its signature.

        Raises:
            TokenVerificationError: If the token is malformed, expired or
                its signature does not match
        """
        try:
            jwt.get_unverified_header(token)
            payload = jwt.get_unverified_claims(token)
        except JWTError as e:
            raise TokenVerificationError(TokenFailure.MALFORMED, str(e)) from e

        subject_id = _subject_claim(payload)
        issued_at = _timestamp_claim(payload, "iat")
        expires_at = _timestamp_claim(payload, "exp")

        if self._clock() >= expires_at:
            raise TokenVerificationError(TokenFailure.EXPIRED)

        try:
            jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                # Expiry is checked above against the injected clock
                options={"verify_exp": False},
            )
        except JWTError as e:
            raise TokenVerificationError(TokenFailure.BAD_SIGNATURE, str(e)) from e

        return TokenClaims(subject_id=subject_id, issued_at=issued_at, expires_at=expires_at)

    def verify(self, token: str) -> int:
        """Verify a token and return the subject (user id)."""
        return self.decode(token).subject_id


@lru_cache
def get_token_service() -> TokenService:
    """Get the process-wide token service, built once from settings."""
    settings = get_settings()
    if not settings.JWT_SECRET:
        raise ValueError("JWT_SECRET environment variable is required")
    service = TokenService(
        secret=settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
        lifetime=timedelta(hours=settings.JWT_EXPIRATION_HOURS),
    )
    logger.info(
        "Token service initialised",
        extra={
            "algorithm": settings.JWT_ALGORITHM,
            "lifetime_seconds": int(service.lifetime.total_seconds()),
        },
    )
    return service
