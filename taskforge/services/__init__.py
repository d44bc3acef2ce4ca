"""Services module.

Services:
- passwords.py: bcrypt hashing and verification
- tokens.py: bearer token issuance and verification
- auth.py: Registration and sign-in
- task_query.py: Ownership-scoped, filtered task listing
- tasks.py: Task CRUD behind the ownership guard
"""

from taskforge.services.task_query import TaskFilter, build_task_query, list_tasks
from taskforge.services.tokens import (
    TokenFailure,
    TokenService,
    TokenVerificationError,
    get_token_service,
)

__all__ = [
    # Token service
    "TokenFailure",
    "TokenService",
    "TokenVerificationError",
    "get_token_service",
    # Task listing
    "TaskFilter",
    "build_task_query",
    "list_tasks",
]
