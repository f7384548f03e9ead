"""Task API routes."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status

from api.dependencies.auth import CurrentUser
from api.v1.dependencies import get_task_service
from api.v1.schemas.task import (
    TaskAssign,
    TaskCreate,
    TaskDetailResponse,
    TaskListResponse,
    TaskResponse,
    TaskUpdate,
)
from core.rate_limit import limiter
from domain.entities.task import TaskStatus
from domain.services.task_service import TaskService

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.post(
    "",
    response_model=TaskDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a task",
    responses={
        201: {"description": "Task created"},
        403: {"description": "Admin access required"},
        404: {"description": "Group not found"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def create_task(
    request: Request,
    body: TaskCreate,
    user: CurrentUser,
    service: TaskService = Depends(get_task_service),
) -> TaskDetailResponse:
    """Create a task in a group. Online assignees are notified."""
    task = await service.create(
        user_email=user.email,
        group_id=body.group_id,
        title=body.title,
        description=body.description,
        due_date=body.due_date,
        priority=body.priority,
        assigned_to=body.assigned_to,
    )
    return TaskDetailResponse(
        message="Task created successfully",
        data=TaskResponse.model_validate(task),
    )


@router.get(
    "",
    response_model=TaskListResponse,
    summary="List tasks",
    responses={403: {"description": "Not a member"}},
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def list_tasks(
    request: Request,
    user: CurrentUser,
    group_id: UUID | None = Query(None, alias="groupId"),
    assigned_to: str | None = Query(None, alias="assignedTo"),
    task_status: TaskStatus | None = Query(None, alias="status"),
    service: TaskService = Depends(get_task_service),
) -> TaskListResponse:
    """
    List tasks, optionally filtered by group, assignee and status.

    Without ``groupId`` tasks across all of the caller's groups are returned.
    """
    tasks = await service.list_for_user(
        user.email,
        group_id=group_id,
        assignee=assigned_to,
        status=task_status,
    )
    data = [TaskResponse.model_validate(t) for t in tasks]
    return TaskListResponse(data=data, meta={"total": len(data)})


@router.get(
    "/{task_id}",
    response_model=TaskDetailResponse,
    summary="Get a task",
    responses={
        403: {"description": "Not a member"},
        404: {"description": "Task not found"},
    },
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def get_task(
    request: Request,
    task_id: UUID,
    user: CurrentUser,
    service: TaskService = Depends(get_task_service),
) -> TaskDetailResponse:
    task = await service.get(task_id, user.email)
    return TaskDetailResponse(data=TaskResponse.model_validate(task))


@router.patch(
    "/{task_id}",
    response_model=TaskDetailResponse,
    summary="Update a task",
    responses={
        403: {"description": "Not a member"},
        404: {"description": "Task not found"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def update_task(
    request: Request,
    task_id: UUID,
    body: TaskUpdate,
    user: CurrentUser,
    service: TaskService = Depends(get_task_service),
) -> TaskDetailResponse:
    """Partially update a task. Only provided fields are changed."""
    task = await service.update(
        task_id, user.email, body.model_dump(exclude_unset=True, exclude_none=True)
    )
    return TaskDetailResponse(
        message="Task updated successfully",
        data=TaskResponse.model_validate(task),
    )


@router.post(
    "/{task_id}/assign",
    response_model=TaskDetailResponse,
    summary="Assign users to a task",
    responses={
        403: {"description": "Admin access required"},
        404: {"description": "Task not found"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def assign_task(
    request: Request,
    task_id: UUID,
    body: TaskAssign,
    user: CurrentUser,
    service: TaskService = Depends(get_task_service),
) -> TaskDetailResponse:
    """Add assignees to a task, keeping the existing ones."""
    task = await service.assign(task_id, user.email, body.assigned_to)
    return TaskDetailResponse(
        message="Task assigned successfully",
        data=TaskResponse.model_validate(task),
    )


@router.post(
    "/{task_id}/complete",
    response_model=TaskDetailResponse,
    summary="Complete a task",
    responses={
        403: {"description": "Admin access required"},
        404: {"description": "Task not found"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def complete_task(
    request: Request,
    task_id: UUID,
    user: CurrentUser,
    service: TaskService = Depends(get_task_service),
) -> TaskDetailResponse:
    task = await service.complete(task_id, user.email)
    return TaskDetailResponse(
        message="Task completed successfully",
        data=TaskResponse.model_validate(task),
    )
