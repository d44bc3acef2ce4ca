"""SQLModel entities for the TaskForge application."""

from taskforge.models.task import Task, TaskPriority, TaskStatus
from taskforge.models.user import User

__all__ = [
    "User",
    "Task",
    "TaskPriority",
    "TaskStatus",
]
