"""Core functionality: data model, storage and the statistics engine."""

from freelance_tracker.core.aggregation import DateWindow, Statistics, compute_statistics
from freelance_tracker.core.exceptions import (
    FreelanceTrackerError,
    PersistenceError,
    RecordNotFoundError,
    ValidationError,
)
from freelance_tracker.core.models import Project, ProjectStatus, Task, TaskStatus, TimeEntry
from freelance_tracker.core.reconciliation import TaskWithActuals, reconcile
from freelance_tracker.core.repository import Repository
from freelance_tracker.core.timer import TimerSession
from freelance_tracker.core.tracker import TimeTracker

__all__ = [
    "DateWindow",
    "FreelanceTrackerError",
    "PersistenceError",
    "Project",
    "ProjectStatus",
    "RecordNotFoundError",
    "Repository",
    "Statistics",
    "Task",
    "TaskStatus",
    "TaskWithActuals",
    "TimeEntry",
    "TimeTracker",
    "TimerSession",
    "ValidationError",
    "compute_statistics",
    "reconcile",
]
