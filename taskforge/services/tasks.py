"""Task service for CRUD operations with ownership checks."""

import logging
from uuid import UUID

from sqlmodel import Session

from taskforge.errors import AuthorizationError, NotFoundError, ValidationError
from taskforge.models.task import Task, TaskCreate, TaskUpdate, utc_now
from taskforge.models.user import User

logger = logging.getLogger(__name__)


class TaskNotFoundError(NotFoundError):
    """Raised when no task exists with the requested id."""

    default_message = "Task not found"


class TaskAccessDeniedError(AuthorizationError):
    """Raised when the task exists but belongs to another user."""

    default_message = "Task not found"


def _require_title(title: str | None) -> None:
    if title is not None and len(title.strip()) == 0:
        raise ValidationError.for_field("title", "Title cannot be empty")


def create_task(session: Session, user_id: int, task_data: TaskCreate) -> Task:
    """Create a new task owned by the specified user."""
    _require_title(task_data.title)

    task = Task(
        user_id=user_id,
        title=task_data.title,
        description=task_data.description,
        priority=task_data.priority,
        status=task_data.status,
        due_date=task_data.due_date,
    )
    session.add(task)
    session.commit()
    session.refresh(task)

    logger.info("Task created", extra={"task_id": str(task.id), "user_id": user_id})
    return task


def get_owned_task(session: Session, user_id: int, task_id: UUID) -> Task:
    """Load a task by id and check that the user owns it.

    The row is fetched by id alone; ownership is checked afterwards so the
    two failure cases stay distinguishable in the logs.

    Raises:
        TaskNotFoundError: If no task has this id
        TaskAccessDeniedError: If the task belongs to another user
    """
    task = session.get(Task, task_id)
    if task is None:
        raise TaskNotFoundError()
    if task.user_id != user_id:
        logger.warning(
            "Task ownership mismatch",
            extra={"task_id": str(task_id), "user_id": user_id},
        )
        raise TaskAccessDeniedError()
    return task


def update_task(
    session: Session, user_id: int, task_id: UUID, task_data: TaskUpdate
) -> Task:
    """Update the provided fields of a task the user owns."""
    task = get_owned_task(session, user_id, task_id)
    _require_title(task_data.title)

    update_data = task_data.model_dump(exclude_unset=True)
    for field in ("title", "status"):
        if field in update_data and update_data[field] is None:
            raise ValidationError.for_field(field, f"{field.capitalize()} cannot be null")

    for key, value in update_data.items():
        setattr(task, key, value)

    task.updated_at = utc_now()
    session.add(task)
    session.commit()
    session.refresh(task)

    logger.info(
        "Task updated",
        extra={"task_id": str(task_id), "fields": sorted(update_data)},
    )
    return task


def assign_task(
    session: Session, user_id: int, task_id: UUID, assignee_id: int | None
) -> Task:
    """Assign a task the user owns to another user, or clear the assignee.

    Raises:
        TaskNotFoundError: If no task has this id
        TaskAccessDeniedError: If the task belongs to another user
        ValidationError: If the assignee does not exist or is the owner
    """
    task = get_owned_task(session, user_id, task_id)

    if assignee_id is not None:
        if assignee_id == task.user_id:
            raise ValidationError.for_field(
                "assignee_id", "A task cannot be assigned to its owner"
            )
        if session.get(User, assignee_id) is None:
            raise ValidationError.for_field("assignee_id", "Assignee user not found")

    task.assigned_to = assignee_id
    task.updated_at = utc_now()
    session.add(task)
    session.commit()
    session.refresh(task)

    logger.info(
        "Task assignment changed",
        extra={"task_id": str(task_id), "assignee_id": assignee_id},
    )
    return task


def delete_task(session: Session, user_id: int, task_id: UUID) -> None:
    """Delete a task the user owns."""
    task = get_owned_task(session, user_id, task_id)
    session.delete(task)
    session.commit()

    logger.info("Task deleted", extra={"task_id": str(task_id), "user_id": user_id})
