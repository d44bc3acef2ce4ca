"""Ownership-scoped task queries.

Every list query is built from a fixed set of typed filters. The owner
predicate is always the first condition of the WHERE clause and every value
reaches the database as a bound parameter.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TypeVar

from sqlalchemy import or_
from sqlmodel import Session, col, select
from sqlmodel.sql.expression import SelectOfScalar

from taskforge.errors import InvalidFilterValue
from taskforge.models.task import Task, TaskPriority, TaskStatus

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)

LIKE_ESCAPE = "\\"


def _parse_enum(enum_cls: type[E], field: str, raw: str | E | None) -> E | None:
    """Map a wire token onto its enum member, rejecting anything else."""
    if raw is None or isinstance(raw, enum_cls):
        return raw
    try:
        return enum_cls(raw)
    except ValueError:
        raise InvalidFilterValue(
            field, str(raw), [member.value for member in enum_cls]
        ) from None


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so the term matches literally."""
    return (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


@dataclass(frozen=True)
class TaskFilter:
    """Optional criteria narrowing a task list. Absent fields impose nothing."""

    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    assigned_to: int | None = None
    search: str | None = None

    @classmethod
    def from_params(
        cls,
        status: str | None = None,
        priority: str | None = None,
        assigned_to: int | None = None,
        search: str | None = None,
    ) -> "TaskFilter":
        """Build criteria from raw query parameters.

        Raises:
            InvalidFilterValue: If status or priority is not a known value
        """
        if search is not None:
            search = search.strip() or None
        return cls(
            status=_parse_enum(TaskStatus, "status", status),
            priority=_parse_enum(TaskPriority, "priority", priority),
            assigned_to=assigned_to,
            search=search,
        )

    def to_log_dict(self) -> dict[str, object]:
        return {
            "status": self.status.value if self.status else None,
            "priority": self.priority.value if self.priority else None,
            "assigned_to": self.assigned_to,
            "has_search": self.search is not None,
        }


def build_task_query(
    owner_id: int,
    criteria: TaskFilter | None = None,
    limit: int | None = None,
    offset: int | None = None,
) -> SelectOfScalar[Task]:
    """Build the list query for one owner's tasks.

    Args:
        owner_id: The authenticated user id
        criteria: Optional filters, AND'd after the owner predicate
        limit: Maximum rows to return
        offset: Rows to skip

    Returns:
        A select over Task ordered newest first
    """
    criteria = criteria or TaskFilter()

    conditions = [col(Task.user_id) == owner_id]
    if criteria.status is not None:
        conditions.append(col(Task.status) == criteria.status)
    if criteria.priority is not None:
        conditions.append(col(Task.priority) == criteria.priority)
    if criteria.assigned_to is not None:
        conditions.append(col(Task.assigned_to) == criteria.assigned_to)
    if criteria.search is not None:
        pattern = f"%{escape_like(criteria.search)}%"
        conditions.append(
            or_(
                col(Task.title).ilike(pattern, escape=LIKE_ESCAPE),
                col(Task.description).ilike(pattern, escape=LIKE_ESCAPE),
            )
        )

    query = (
        select(Task)
        .where(*conditions)
        .order_by(col(Task.created_at).desc(), col(Task.id).desc())
    )
    if offset:
        query = query.offset(offset)
    if limit is not None:
        query = query.limit(limit)
    return query


def list_tasks(
    session: Session,
    owner_id: int,
    criteria: TaskFilter | None = None,
    limit: int | None = None,
    offset: int = 0,
) -> list[Task]:
    """Get the owner's tasks matching every present filter, in one query."""
    criteria = criteria or TaskFilter()
    tasks = list(session.exec(build_task_query(owner_id, criteria, limit, offset)).all())

    logger.debug(
        "Tasks listed",
        extra={"user_id": owner_id, "count": len(tasks), **criteria.to_log_dict()},
    )
    return tasks
