"""Time logging against projects and tasks."""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from freelance_tracker.core.exceptions import ValidationError
from freelance_tracker.core.models import TimeEntry
from freelance_tracker.core.repository import Repository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EntryListing:
    """Time entry joined with the names of its project and task."""

    entry: TimeEntry
    project_name: Optional[str]
    task_name: Optional[str]


class TimeTracker:
    """Creates time entries for one owner."""

    def __init__(
        self,
        repository: Repository,
        owner_id: str,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """Initialize time tracker.

        Args:
            repository: Repository the entries are written to
            owner_id: Owner the entries belong to
            clock: Source of the current time
        """
        self.repository = repository
        self.owner_id = owner_id
        self.clock = clock

    async def log_time(
        self,
        project_id: Optional[str],
        task_id: Optional[str],
        hours: float,
        start_time: Optional[datetime] = None,
    ) -> TimeEntry:
        """Record worked hours.

        Args:
            project_id: Project the hours are billed to
            task_id: Task the hours were spent on
            hours: Worked hours, must be positive
            start_time: Moment the work is attributed to. Defaults to now.

        Returns:
            Persisted entry

        Raises:
            ValidationError: If project or task is missing or hours are not positive
            PersistenceError: If the entry cannot be stored
        """
        if not project_id:
            raise ValidationError("no project selected")
        if not task_id:
            raise ValidationError("no task selected")
        if hours is None or hours <= 0:
            raise ValidationError("Hours must be greater than zero")

        entry = TimeEntry(
            owner_id=self.owner_id,
            project_id=project_id,
            task_id=task_id,
            hours=float(hours),
            start_time=start_time or self.clock(),
        )
        await self.repository.add_time_entry(entry)
        logger.info(f"Logged {entry.hours:.4f}h on task {task_id} (project {project_id})")
        return entry

    async def recent_entries(self, limit: Optional[int] = None) -> list[EntryListing]:
        """Return the owner's entries newest first with project and task names.

        Entries whose project or task was deleted are listed without a name.
        """
        entries, projects, tasks = await asyncio.gather(
            self.repository.list_time_entries(self.owner_id),
            self.repository.list_projects(self.owner_id),
            self.repository.list_tasks(self.owner_id),
        )
        if limit:
            entries = entries[:limit]

        project_names = {project.id: project.name for project in projects}
        task_names = {task.id: task.name for task in tasks}

        return [
            EntryListing(
                entry=entry,
                project_name=project_names.get(entry.project_id),
                task_name=task_names.get(entry.task_id),
            )
            for entry in entries
        ]
