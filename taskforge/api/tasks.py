"""Task API endpoints.

Every route requires a bearer token. The route class rejects
unauthenticated requests before the body is read or any handler runs.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from taskforge.api.deps import (
    AuthenticatedRoute,
    CurrentUserId,
    DBSession,
    get_current_user_id,
)
from taskforge.models.task import AssignTaskRequest, TaskCreate, TaskResponse, TaskUpdate
from taskforge.services.task_query import TaskFilter, list_tasks
from taskforge.services.tasks import (
    assign_task,
    create_task,
    delete_task,
    get_owned_task,
    update_task,
)

router = APIRouter(
    prefix="/api/tasks",
    tags=["Tasks"],
    dependencies=[Depends(get_current_user_id)],
    route_class=AuthenticatedRoute,
)


@router.post("", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
def create_task_endpoint(
    session: DBSession,
    current_user_id: CurrentUserId,
    task_data: TaskCreate,
) -> TaskResponse:
    """Create a new task owned by the authenticated user."""
    task = create_task(session, current_user_id, task_data)
    return TaskResponse.model_validate(task)


@router.get("", response_model=list[TaskResponse])
def list_tasks_endpoint(
    session: DBSession,
    current_user_id: CurrentUserId,
    status_filter: str | None = Query(
        default=None,
        alias="status",
        description="Filter by status: todo, in_progress, review, done",
    ),
    priority: str | None = Query(
        default=None, description="Filter by priority: low, medium, high, urgent"
    ),
    assigned_to: int | None = Query(default=None, description="Filter by assignee user id"),
    search: str | None = Query(
        default=None, max_length=200, description="Case-insensitive text in title or description"
    ),
    limit: int | None = Query(
        default=None, ge=1, le=100, description="Maximum number of tasks; omit for all"
    ),
    offset: int = Query(default=0, ge=0, description="Number of tasks to skip"),
) -> list[TaskResponse]:
    """List the authenticated user's tasks, newest first."""
    criteria = TaskFilter.from_params(
        status=status_filter,
        priority=priority,
        assigned_to=assigned_to,
        search=search,
    )
    tasks = list_tasks(session, current_user_id, criteria, limit, offset)
    return [TaskResponse.model_validate(t) for t in tasks]


@router.get("/{task_id}", response_model=TaskResponse)
def get_task_endpoint(
    session: DBSession,
    current_user_id: CurrentUserId,
    task_id: UUID,
) -> TaskResponse:
    """Get a specific task by ID."""
    task = get_owned_task(session, current_user_id, task_id)
    return TaskResponse.model_validate(task)


@router.put("/{task_id}", response_model=TaskResponse)
def update_task_endpoint(
    session: DBSession,
    current_user_id: CurrentUserId,
    task_id: UUID,
    task_data: TaskUpdate,
) -> TaskResponse:
    """Update a task."""
    task = update_task(session, current_user_id, task_id, task_data)
    return TaskResponse.model_validate(task)


@router.post("/{task_id}/assign", response_model=TaskResponse)
def assign_task_endpoint(
    session: DBSession,
    current_user_id: CurrentUserId,
    task_id: UUID,
    assignment: AssignTaskRequest,
) -> TaskResponse:
    """Assign a task to another user, or clear its assignee."""
    task = assign_task(session, current_user_id, task_id, assignment.assignee_id)
    return TaskResponse.model_validate(task)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_task_endpoint(
    session: DBSession,
    current_user_id: CurrentUserId,
    task_id: UUID,
) -> None:
    """Delete a task."""
    delete_task(session, current_user_id, task_id)
