"""Statistics endpoints for dashboards and income reports."""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query

from freelance_tracker.api.dependencies import get_config, get_owner_id, get_repository
from freelance_tracker.api.models import (
    DayBucketResponse,
    ProjectRollupResponse,
    StatisticsResponse,
)
from freelance_tracker.core.aggregation import DateWindow, gather_statistics, top_projects
from freelance_tracker.core.config import ConfigManager
from freelance_tracker.core.exceptions import ValidationError
from freelance_tracker.core.repository import Repository

router = APIRouter()


@router.get("/", response_model=StatisticsResponse)
async def get_statistics(
    range_name: Optional[str] = Query(
        None, alias="range", description="week, month or quarter (last 7, 30 or 90 days)"
    ),
    start: Optional[date] = Query(None, description="First day (YYYY-MM-DD)"),
    end: Optional[date] = Query(None, description="Last day (YYYY-MM-DD)"),
    project_id: Optional[str] = Query(None, description="Only entries of this project"),
    top: Optional[int] = Query(None, ge=1, le=100, description="Size of the top projects list"),
    repository: Repository = Depends(get_repository),
    owner_id: str = Depends(get_owner_id),
    config: ConfigManager = Depends(get_config),
) -> StatisticsResponse:
    """Totals, per-project rollups and daily buckets for a window.

    Give either ``range`` or both ``start`` and ``end``. Without either the
    window is ``dashboard.default_range``.

    Example:
        >>> GET /api/v1/statistics/?range=week
        >>> GET /api/v1/statistics/?start=2026-10-01&end=2026-10-31
    """
    if (start is None) != (end is None):
        raise ValidationError("Give both start and end, or neither")
    if start is not None and range_name is not None:
        raise ValidationError("Give either range or start and end, not both")

    if start is not None and end is not None:
        window = DateWindow.between(start, end)
    else:
        window = DateWindow.for_range(range_name or config.get("dashboard.default_range", "month"))

    stats = await gather_statistics(repository, owner_id, window, project_id)
    limit = top or config.get("dashboard.top_projects", 5)

    return StatisticsResponse(
        start=window.start,
        end=window.end,
        total_hours=stats.total_hours,
        total_income=stats.total_income,
        total_projects=stats.total_projects,
        active_projects=stats.active_projects,
        projects=[ProjectRollupResponse.model_validate(r) for r in stats.projects],
        top_projects=[ProjectRollupResponse.model_validate(r) for r in top_projects(stats, limit)],
        daily=[DayBucketResponse.model_validate(b) for b in stats.daily],
    )
