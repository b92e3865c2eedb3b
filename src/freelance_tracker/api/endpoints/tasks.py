"""Task endpoints with actual-versus-estimated hours."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status

from freelance_tracker.api.dependencies import get_owner_id, get_repository
from freelance_tracker.api.models import (
    CreateTaskRequest,
    TaskResponse,
    UpdateTaskStatusRequest,
)
from freelance_tracker.core.models import Task, TaskStatus, to_local_naive
from freelance_tracker.core.reconciliation import filter_by_tags, reconcile, reconcile_tasks
from freelance_tracker.core.repository import Repository

router = APIRouter()


@router.get("/", response_model=list[TaskResponse])
async def list_tasks(
    project_id: Optional[str] = Query(None, description="Only tasks of this project"),
    status_filter: Optional[list[TaskStatus]] = Query(
        None, alias="status", description="Only tasks in these statuses"
    ),
    tag: Optional[list[str]] = Query(None, description="Only tasks with one of these tags"),
    repository: Repository = Depends(get_repository),
    owner_id: str = Depends(get_owner_id),
) -> list[TaskResponse]:
    """List tasks with the hours logged against each of them.

    Actual hours are loaded with one concurrent query per task. If any of
    them fails the whole request fails.

    Example:
        >>> GET /api/v1/tasks/?project_id=...&tag=design
        [
            {
                "name": "Landing page",
                "estimated_hours": 10.0,
                "actual_hours": 7.25,
                "hours_diff": -2.75,
                ...
            }
        ]
    """
    if project_id is not None:
        await repository.get_project(owner_id, project_id)

    tasks = await repository.list_tasks(owner_id, project_id=project_id, statuses=status_filter)
    tasks = filter_by_tags(tasks, tag)
    reconciled = await reconcile_tasks(repository, owner_id, tasks)
    return [TaskResponse.from_actuals(item) for item in reconciled]


@router.post("/", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
async def create_task(
    request: CreateTaskRequest,
    repository: Repository = Depends(get_repository),
    owner_id: str = Depends(get_owner_id),
) -> TaskResponse:
    """Create a task in one of the owner's projects.

    Example:
        >>> POST /api/v1/tasks/
        {
            "project_id": "...",
            "name": "Landing page",
            "estimated_hours": 10,
            "due_at": "2026-11-01T17:00:00",
            "tags": ["design"]
        }
    """
    await repository.get_project(owner_id, request.project_id)

    task = Task(
        owner_id=owner_id,
        project_id=request.project_id,
        name=request.name,
        estimated_hours=request.estimated_hours,
        due_at=to_local_naive(request.due_at) if request.due_at else None,
        tags=request.tags,
        description=request.description,
    )
    await repository.add_task(task)
    return TaskResponse.from_actuals(reconcile(task, []))


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(
    task_id: str,
    repository: Repository = Depends(get_repository),
    owner_id: str = Depends(get_owner_id),
) -> TaskResponse:
    """Get a task with its actual hours."""
    task = await repository.get_task(owner_id, task_id)
    reconciled = await reconcile_tasks(repository, owner_id, [task])
    return TaskResponse.from_actuals(reconciled[0])


@router.put("/{task_id}/status", response_model=TaskResponse)
async def update_task_status(
    task_id: str,
    request: UpdateTaskStatusRequest,
    repository: Repository = Depends(get_repository),
    owner_id: str = Depends(get_owner_id),
) -> TaskResponse:
    """Change a task's status.

    Example:
        >>> PUT /api/v1/tasks/{task_id}/status
        {"status": "inProgress"}
    """
    task = await repository.set_task_status(owner_id, task_id, request.status)
    return TaskResponse.from_task(task)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(
    task_id: str,
    repository: Repository = Depends(get_repository),
    owner_id: str = Depends(get_owner_id),
) -> Response:
    """Delete a task. Its time entries still count toward project income."""
    await repository.remove_task(owner_id, task_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
