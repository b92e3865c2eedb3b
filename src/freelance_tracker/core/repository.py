"""Owner-scoped queries over the record stores."""

from datetime import datetime
from typing import Any, Iterable, Optional

from freelance_tracker.core.exceptions import RecordNotFoundError, ValidationError
from freelance_tracker.core.models import Project, Task, TaskStatus, TimeEntry
from freelance_tracker.core.query import Query
from freelance_tracker.core.storage import RecordStore, StorageManager


class Repository:
    """Typed access to projects, tasks and time entries of one store set.

    Every read is restricted to a single owner; the stores themselves do the
    filtering through conjunctive query conditions.
    """

    def __init__(
        self,
        projects: RecordStore[Project],
        tasks: RecordStore[Task],
        time_entries: RecordStore[TimeEntry],
    ):
        self.projects = projects
        self.tasks = tasks
        self.time_entries = time_entries

    @classmethod
    def from_storage(cls, storage: StorageManager) -> "Repository":
        """Build a repository over the stores opened by a StorageManager."""
        return cls(storage.projects, storage.tasks, storage.time_entries)

    # Projects

    async def list_projects(self, owner_id: str, active_only: bool = False) -> list[Project]:
        query = Query().where("owner_id", "==", owner_id)
        if active_only:
            query = query.where("status", "==", "active")
        return await self.projects.get_all(query.order_by("name"))

    async def get_project(self, owner_id: str, project_id: str) -> Project:
        """Return one of the owner's projects.

        Raises:
            RecordNotFoundError: If the project does not exist for this owner
        """
        query = Query().where("owner_id", "==", owner_id).where("id", "==", project_id)
        found = await self.projects.get_all(query)
        if not found:
            raise RecordNotFoundError("projects", project_id)
        return found[0]

    async def add_project(self, project: Project) -> str:
        return await self.projects.add(project)

    async def update_project(self, owner_id: str, project_id: str, **changes: Any) -> Project:
        await self.get_project(owner_id, project_id)
        if changes.get("hourly_rate") is not None and changes["hourly_rate"] < 0:
            raise ValidationError("Hourly rate must not be negative")
        await self.projects.update(project_id, changes)
        return await self.get_project(owner_id, project_id)

    async def remove_project(self, owner_id: str, project_id: str) -> None:
        """Delete a project. Its time entries stay behind as orphans."""
        await self.get_project(owner_id, project_id)
        await self.projects.remove(project_id)

    # Tasks

    async def list_tasks(
        self,
        owner_id: str,
        project_id: Optional[str] = None,
        statuses: Optional[Iterable[TaskStatus]] = None,
    ) -> list[Task]:
        query = Query().where("owner_id", "==", owner_id)
        if project_id is not None:
            query = query.where("project_id", "==", project_id)
        if statuses is not None:
            query = query.where("status", "in", [TaskStatus(s).value for s in statuses])
        return await self.tasks.get_all(query.order_by("created_at"))

    async def list_in_progress_tasks(self, owner_id: str) -> list[Task]:
        return await self.list_tasks(owner_id, statuses=[TaskStatus.IN_PROGRESS])

    async def get_task(self, owner_id: str, task_id: str) -> Task:
        """Return one of the owner's tasks.

        Raises:
            RecordNotFoundError: If the task does not exist for this owner
        """
        query = Query().where("owner_id", "==", owner_id).where("id", "==", task_id)
        found = await self.tasks.get_all(query)
        if not found:
            raise RecordNotFoundError("tasks", task_id)
        return found[0]

    async def add_task(self, task: Task) -> str:
        return await self.tasks.add(task)

    async def update_task(self, owner_id: str, task_id: str, **changes: Any) -> Task:
        await self.get_task(owner_id, task_id)
        if changes.get("estimated_hours") is not None and changes["estimated_hours"] <= 0:
            raise ValidationError("Estimated hours must be positive")
        await self.tasks.update(task_id, changes)
        return await self.get_task(owner_id, task_id)

    async def set_task_status(self, owner_id: str, task_id: str, status: TaskStatus) -> Task:
        return await self.update_task(owner_id, task_id, status=TaskStatus(status))

    async def remove_task(self, owner_id: str, task_id: str) -> None:
        await self.get_task(owner_id, task_id)
        await self.tasks.remove(task_id)

    # Time entries

    async def list_time_entries(
        self,
        owner_id: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        project_id: Optional[str] = None,
    ) -> list[TimeEntry]:
        """Return the owner's entries, newest first.

        Args:
            owner_id: Owner of the entries
            start: Only entries starting at or after this moment
            end: Only entries starting at or before this moment
            project_id: Only entries billed to this project
        """
        query = Query().where("owner_id", "==", owner_id)
        if start is not None:
            query = query.where("start_time", ">=", start)
        if end is not None:
            query = query.where("start_time", "<=", end)
        if project_id is not None:
            query = query.where("project_id", "==", project_id)
        return await self.time_entries.get_all(query.order_by("start_time", "desc"))

    async def list_task_entries(self, owner_id: str, task_id: str) -> list[TimeEntry]:
        query = Query().where("owner_id", "==", owner_id).where("task_id", "==", task_id)
        return await self.time_entries.get_all(query)

    async def add_time_entry(self, entry: TimeEntry) -> str:
        return await self.time_entries.add(entry)
