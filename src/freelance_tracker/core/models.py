"""Core data models for projects, tasks and time entries."""

import json
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import uuid4


def _new_id() -> str:
    return str(uuid4())


def _parse_optional_datetime(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


def to_local_naive(moment: datetime) -> datetime:
    """Convert an aware datetime to naive local time. Naive values pass through.

    Records are stored with naive local timestamps, so anything compared
    against them must be normalized first.
    """
    if moment.tzinfo is None:
        return moment
    return moment.astimezone().replace(tzinfo=None)


class ProjectStatus(str, Enum):
    """Lifecycle status of a project."""

    ACTIVE = "active"
    INACTIVE = "inactive"


class TaskStatus(str, Enum):
    """Lifecycle status of a task."""

    PENDING = "pending"
    IN_PROGRESS = "inProgress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# Statuses a timer or a manual entry may be logged against
OPEN_TASK_STATUSES = (TaskStatus.PENDING, TaskStatus.IN_PROGRESS)


@dataclass
class Project:
    """Client project billed at an hourly rate.

    Attributes:
        owner_id: Identifier of the owning user
        name: Display name
        hourly_rate: Billing rate per hour (0 when unset)
        id: Unique identifier (generated when omitted)
        status: Active or inactive
        description: Free text description (optional)
        created_at: Creation timestamp
    """

    owner_id: str
    name: str
    hourly_rate: float = 0.0
    id: str = field(default_factory=_new_id)
    status: ProjectStatus = ProjectStatus.ACTIVE
    description: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.now)

    def __post_init__(self) -> None:
        self.status = ProjectStatus(self.status)
        if self.hourly_rate is None:
            self.hourly_rate = 0.0
        if self.hourly_rate < 0:
            raise ValueError("hourly_rate must not be negative")

    @property
    def is_active(self) -> bool:
        """Check whether the project accepts new work."""
        return self.status == ProjectStatus.ACTIVE

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for CSV serialization."""
        return {
            "id": self.id,
            "owner_id": self.owner_id,
            "name": self.name,
            "hourly_rate": repr(float(self.hourly_rate)),
            "status": self.status.value,
            "description": self.description or "",
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Project":
        """Create Project from dictionary (CSV deserialization)."""
        return cls(
            id=data["id"],
            owner_id=data["owner_id"],
            name=data["name"],
            hourly_rate=float(data["hourly_rate"]) if data["hourly_rate"] else 0.0,
            status=ProjectStatus(data["status"] or ProjectStatus.ACTIVE.value),
            description=data["description"] if data["description"] else None,
            created_at=datetime.fromisoformat(data["created_at"]),
        )


@dataclass
class Task:
    """Unit of work inside a project.

    Attributes:
        owner_id: Identifier of the owning user
        project_id: Project the task belongs to (not enforced at write time)
        name: Task name
        estimated_hours: Planned effort in hours
        id: Unique identifier (generated when omitted)
        status: Pending, in progress, completed or cancelled
        due_at: Deadline (optional)
        tags: Free-form labels
        description: Free text description (optional)
        created_at: Creation timestamp
    """

    owner_id: str
    project_id: str
    name: str
    estimated_hours: float
    id: str = field(default_factory=_new_id)
    status: TaskStatus = TaskStatus.PENDING
    due_at: Optional[datetime] = None
    tags: list[str] = field(default_factory=list)
    description: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.now)

    def __post_init__(self) -> None:
        self.status = TaskStatus(self.status)
        if self.estimated_hours <= 0:
            raise ValueError("estimated_hours must be positive")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for CSV serialization."""
        return {
            "id": self.id,
            "owner_id": self.owner_id,
            "project_id": self.project_id,
            "name": self.name,
            "estimated_hours": repr(float(self.estimated_hours)),
            "status": self.status.value,
            "due_at": self.due_at.isoformat() if self.due_at else "",
            "tags": json.dumps(self.tags, ensure_ascii=False),
            "description": self.description or "",
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Task":
        """Create Task from dictionary (CSV deserialization)."""
        return cls(
            id=data["id"],
            owner_id=data["owner_id"],
            project_id=data["project_id"],
            name=data["name"],
            estimated_hours=float(data["estimated_hours"]),
            status=TaskStatus(data["status"] or TaskStatus.PENDING.value),
            due_at=_parse_optional_datetime(data["due_at"]),
            tags=json.loads(data["tags"]) if data["tags"] else [],
            description=data["description"] if data["description"] else None,
            created_at=datetime.fromisoformat(data["created_at"]),
        )


@dataclass(frozen=True)
class TimeEntry:
    """Recorded block of worked time. Immutable once created.

    Attributes:
        owner_id: Identifier of the owning user
        project_id: Project the hours are billed to
        task_id: Task the hours were spent on
        hours: Worked hours (fractional)
        start_time: Moment the work is attributed to
        id: Unique identifier (generated when omitted)
        created_at: When this record was created
    """

    owner_id: str
    project_id: str
    task_id: str
    hours: float
    start_time: datetime
    id: str = field(default_factory=_new_id)
    created_at: datetime = field(default_factory=datetime.now)

    def __post_init__(self) -> None:
        if self.hours <= 0:
            raise ValueError("hours must be positive")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for CSV serialization."""
        return {
            "id": self.id,
            "owner_id": self.owner_id,
            "project_id": self.project_id,
            "task_id": self.task_id,
            "hours": repr(float(self.hours)),
            "start_time": self.start_time.isoformat(),
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TimeEntry":
        """Create TimeEntry from dictionary (CSV deserialization)."""
        return cls(
            id=data["id"],
            owner_id=data["owner_id"],
            project_id=data["project_id"],
            task_id=data["task_id"],
            hours=float(data["hours"]),
            start_time=datetime.fromisoformat(data["start_time"]),
            created_at=datetime.fromisoformat(data["created_at"]),
        )
