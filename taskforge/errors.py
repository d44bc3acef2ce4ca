"""Typed error hierarchy for TaskForge failure modes.

Every error carries a machine-readable code, an HTTP status and a
client-safe message. Route handlers raise these; the handlers registered in
``taskforge.api.error_handlers`` turn them into the JSON error envelope.

Store failures are not wrapped: SQLAlchemy errors propagate as-is and are
translated to an opaque 500 at the boundary.
"""

from typing import Any


class TaskForgeError(Exception):
    """Base class for all domain errors."""

    code: str = "INTERNAL_ERROR"
    http_status: int = 500
    default_message: str = "An unexpected error occurred"

    def __init__(
        self,
        message: str | None = None,
        details: list[dict[str, Any]] | None = None,
    ) -> None:
        self.message = message or self.default_message
        self.details = details or []
        super().__init__(self.message)

    def to_response(self) -> dict[str, Any]:
        """Build the REST error envelope."""
        error: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            error["details"] = self.details
        return {"error": error}


class ValidationError(TaskForgeError):
    """Malformed input, out-of-domain value or field length violation."""

    code = "VALIDATION_ERROR"
    http_status = 422
    default_message = "Invalid request data"

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        return cls(message, details=[{"field": field, "message": message}])


class InvalidFilterValue(ValidationError):
    """A list filter carried a value outside its closed enum domain."""

    def __init__(self, field: str, value: str, allowed: list[str]) -> None:
        self.field = field
        self.value = value
        message = f"Invalid value for '{field}'. Allowed values: {', '.join(allowed)}"
        super().__init__(
            message,
            details=[{"field": field, "message": message, "allowed": allowed}],
        )


class AuthenticationError(TaskForgeError):
    """Missing, invalid or expired credentials."""

    code = "UNAUTHORIZED"
    http_status = 401
    default_message = "Invalid or expired token"


class NotFoundError(TaskForgeError):
    """No such resource."""

    code = "NOT_FOUND"
    http_status = 404
    default_message = "Resource not found"


class AuthorizationError(NotFoundError):
    """Valid identity acting on a resource it does not own.

    Reported exactly like ``NotFoundError`` so a prober cannot confirm that
    another user's resource exists.
    """


class ConflictError(TaskForgeError):
    """Uniqueness violation, e.g. duplicate username or email."""

    code = "CONFLICT"
    http_status = 409
    default_message = "Resource already exists"
