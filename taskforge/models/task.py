"""Task entity model."""

from datetime import datetime, timezone
from enum import Enum
from uuid import UUID, uuid4

from sqlalchemy import Column, DateTime
from sqlalchemy import Enum as SAEnum
from sqlmodel import Field, SQLModel


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


class TaskStatus(str, Enum):
    """Task workflow status values."""

    TODO = "todo"
    IN_PROGRESS = "in_progress"
    REVIEW = "review"
    DONE = "done"


class TaskPriority(str, Enum):
    """Task priority values."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


def _enum_type(enum_cls: type[Enum], name: str) -> SAEnum:
    # Persist the lowercase wire value, not the member name
    return SAEnum(
        enum_cls,
        name=name,
        values_callable=lambda members: [member.value for member in members],
        validate_strings=True,
    )


class Task(SQLModel, table=True):
    """Task database model."""

    __tablename__ = "tasks"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    title: str = Field(max_length=200)
    description: str | None = Field(default=None, max_length=1000)
    priority: TaskPriority | None = Field(
        default=None,
        sa_column=Column(_enum_type(TaskPriority, "task_priority"), nullable=True, index=True),
    )
    status: TaskStatus = Field(
        default=TaskStatus.TODO,
        sa_column=Column(
            _enum_type(TaskStatus, "task_status"),
            nullable=False,
            index=True,
            server_default=TaskStatus.TODO.value,
        ),
    )
    due_date: datetime | None = Field(default=None, index=True, sa_type=DateTime(timezone=True))
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))
    user_id: int = Field(foreign_key="users.id", index=True, ondelete="CASCADE")
    assigned_to: int | None = Field(
        default=None,
        foreign_key="users.id",
        index=True,
        nullable=True,
        ondelete="SET NULL",
    )


class TaskCreate(SQLModel):
    """Schema for task creation.

    Owner and assignee are not accepted here: the owner is always the
    authenticated user and assignment goes through the assign endpoint.
    """

    title: str = Field(min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=1000)
    priority: TaskPriority | None = None
    status: TaskStatus = TaskStatus.TODO
    due_date: datetime | None = None


class TaskUpdate(SQLModel):
    """Schema for task update. Only provided fields are applied."""

    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=1000)
    priority: TaskPriority | None = None
    status: TaskStatus | None = None
    due_date: datetime | None = None


class AssignTaskRequest(SQLModel):
    """Schema for (un)assigning a task. ``null`` clears the assignee."""

    assignee_id: int | None


class TaskResponse(SQLModel):
    """Schema for task response."""

    id: UUID
    title: str
    description: str | None
    priority: TaskPriority | None
    status: TaskStatus
    due_date: datetime | None
    created_at: datetime
    updated_at: datetime
    user_id: int
    assigned_to: int | None

    model_config = {"from_attributes": True}
