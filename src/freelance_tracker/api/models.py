"""Pydantic models for API requests and responses.

This module defines the data models used for API requests and responses.
All models use Pydantic for automatic validation and serialization.
"""

import datetime as dt
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from freelance_tracker.core.models import ProjectStatus, TaskStatus

# ============================================================================
# Response Models
# ============================================================================


class ProjectResponse(BaseModel):
    """Response model for project."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    hourly_rate: float
    status: ProjectStatus
    description: Optional[str] = None
    created_at: datetime

    @classmethod
    def from_project(cls, project):  # type: ignore[no-untyped-def]
        """Create response from Project model."""
        return cls.model_validate(project)


class TaskResponse(BaseModel):
    """Response model for task, with logged hours when reconciled."""

    id: str
    project_id: str
    name: str
    estimated_hours: float
    status: TaskStatus
    due_at: Optional[datetime] = None
    tags: list[str] = Field(default_factory=list)
    description: Optional[str] = None
    created_at: datetime
    actual_hours: Optional[float] = None
    hours_diff: Optional[float] = None

    @classmethod
    def from_task(cls, task, actual_hours=None, hours_diff=None):  # type: ignore[no-untyped-def]
        """Create response from Task model.

        Args:
            task: Task instance from core.models
            actual_hours: Logged hours, when reconciled
            hours_diff: Actual minus estimated hours, when reconciled

        Returns:
            TaskResponse instance
        """
        return cls(
            id=task.id,
            project_id=task.project_id,
            name=task.name,
            estimated_hours=task.estimated_hours,
            status=task.status,
            due_at=task.due_at,
            tags=task.tags,
            description=task.description,
            created_at=task.created_at,
            actual_hours=actual_hours,
            hours_diff=hours_diff,
        )

    @classmethod
    def from_actuals(cls, item):  # type: ignore[no-untyped-def]
        """Create response from a TaskWithActuals."""
        return cls.from_task(item.task, item.actual_hours, item.hours_diff)


class EntryResponse(BaseModel):
    """Response model for time entry."""

    id: str
    project_id: str
    task_id: str
    hours: float
    start_time: datetime
    created_at: datetime
    project_name: Optional[str] = None
    task_name: Optional[str] = None

    @classmethod
    def from_entry(cls, entry, project_name=None, task_name=None):  # type: ignore[no-untyped-def]
        """Create response from TimeEntry model."""
        return cls(
            id=entry.id,
            project_id=entry.project_id,
            task_id=entry.task_id,
            hours=entry.hours,
            start_time=entry.start_time,
            created_at=entry.created_at,
            project_name=project_name,
            task_name=task_name,
        )


class ProjectRollupResponse(BaseModel):
    """Hours and income of one project."""

    model_config = ConfigDict(from_attributes=True)

    project_id: str
    project_name: str
    hourly_rate: float
    hours: float
    income: float


class DayBucketResponse(BaseModel):
    """Hours and income of one calendar day."""

    model_config = ConfigDict(from_attributes=True)

    date: dt.date
    hours: float
    income: float


class StatisticsResponse(BaseModel):
    """Aggregated statistics for a date window."""

    start: date
    end: date
    total_hours: float
    total_income: float
    total_projects: int
    active_projects: int
    projects: list[ProjectRollupResponse]
    top_projects: list[ProjectRollupResponse]
    daily: list[DayBucketResponse]


# ============================================================================
# Request Models
# ============================================================================


class CreateProjectRequest(BaseModel):
    """Request model for creating a project."""

    name: str = Field(..., min_length=1, max_length=200, description="Project name")
    hourly_rate: float = Field(0.0, ge=0, description="Billing rate per hour")
    description: Optional[str] = Field(None, max_length=1000)


class UpdateProjectRequest(BaseModel):
    """Request model for updating a project."""

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    hourly_rate: Optional[float] = Field(None, ge=0)
    status: Optional[ProjectStatus] = None
    description: Optional[str] = Field(None, max_length=1000)


class CreateTaskRequest(BaseModel):
    """Request model for creating a task."""

    project_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=500)
    estimated_hours: float = Field(..., gt=0, description="Planned effort in hours")
    due_at: Optional[datetime] = None
    tags: list[str] = Field(default_factory=list)
    description: Optional[str] = Field(None, max_length=5000)


class UpdateTaskStatusRequest(BaseModel):
    """Request model for changing a task's status."""

    status: TaskStatus


class CreateEntryRequest(BaseModel):
    """Request model for logging hours manually."""

    project_id: str = Field(..., min_length=1)
    task_id: str = Field(..., min_length=1)
    hours: float = Field(..., description="Worked hours, must be positive")
    start_time: Optional[datetime] = Field(None, description="Defaults to now")


# ============================================================================
# System Models
# ============================================================================


class HealthResponse(BaseModel):
    """Response model for health check."""

    status: str = Field(..., description="Health status")
    timestamp: datetime = Field(..., description="Current server time")
    version: str = Field(..., description="API version")
