"""Entry endpoints for logged time."""

import asyncio
from datetime import date, datetime, time
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from freelance_tracker.api.dependencies import get_owner_id, get_repository
from freelance_tracker.api.models import CreateEntryRequest, EntryResponse
from freelance_tracker.core.models import to_local_naive
from freelance_tracker.core.repository import Repository
from freelance_tracker.core.tracker import TimeTracker

router = APIRouter()


@router.get("/", response_model=list[EntryResponse])
async def list_entries(
    limit: int = Query(100, ge=1, le=1000, description="Maximum number of entries to return"),
    project_id: Optional[str] = Query(None, description="Filter by project"),
    from_date: Optional[date] = Query(None, description="Filter from date (YYYY-MM-DD)"),
    to_date: Optional[date] = Query(None, description="Filter to date (YYYY-MM-DD)"),
    repository: Repository = Depends(get_repository),
    owner_id: str = Depends(get_owner_id),
) -> list[EntryResponse]:
    """List time entries newest first, with project and task names.

    Example:
        >>> GET /api/v1/entries/?from_date=2026-10-01&to_date=2026-10-31
    """
    start = datetime.combine(from_date, time.min) if from_date else None
    end = datetime.combine(to_date, time.max) if to_date else None

    entries, projects, tasks = await asyncio.gather(
        repository.list_time_entries(owner_id, start=start, end=end, project_id=project_id),
        repository.list_projects(owner_id),
        repository.list_tasks(owner_id),
    )
    project_names = {p.id: p.name for p in projects}
    task_names = {t.id: t.name for t in tasks}

    return [
        EntryResponse.from_entry(e, project_names.get(e.project_id), task_names.get(e.task_id))
        for e in entries[:limit]
    ]


@router.post("/", response_model=EntryResponse, status_code=status.HTTP_201_CREATED)
async def create_entry(
    request: CreateEntryRequest,
    repository: Repository = Depends(get_repository),
    owner_id: str = Depends(get_owner_id),
) -> EntryResponse:
    """Log worked hours manually against a task.

    Example:
        >>> POST /api/v1/entries/
        {
            "project_id": "...",
            "task_id": "...",
            "hours": 2.5
        }
    """
    project, task = await asyncio.gather(
        repository.get_project(owner_id, request.project_id),
        repository.get_task(owner_id, request.task_id),
    )

    tracker = TimeTracker(repository, owner_id)
    start_time = to_local_naive(request.start_time) if request.start_time else None
    entry = await tracker.log_time(project.id, task.id, request.hours, start_time=start_time)
    return EntryResponse.from_entry(entry, project.name, task.name)
