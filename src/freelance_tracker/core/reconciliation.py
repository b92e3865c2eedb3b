"""Actual-versus-estimated hours for tasks."""

import asyncio
from collections import defaultdict
from dataclasses import dataclass
from typing import Iterable, Optional

from freelance_tracker.core.models import Task, TimeEntry
from freelance_tracker.core.repository import Repository


@dataclass(frozen=True)
class TaskWithActuals:
    """A task joined with the hours logged against it.

    Attributes:
        task: The reconciled task
        actual_hours: Logged hours rounded to 2 decimals
        hours_diff: Actual minus estimated hours, rounded to 2 decimals.
            Positive means over budget.
    """

    task: Task
    actual_hours: float
    hours_diff: float

    @property
    def over_budget(self) -> bool:
        return self.hours_diff > 0


def reconcile(task: Task, related_entries: Iterable[TimeEntry]) -> TaskWithActuals:
    """Sum the hours logged against a task and compare with its estimate.

    Entries belonging to other tasks are ignored. Results are rounded to two
    decimals so many small entries do not leave float noise in the variance.
    """
    total = sum(entry.hours or 0.0 for entry in related_entries if entry.task_id == task.id)
    return TaskWithActuals(
        task=task,
        actual_hours=round(total, 2),
        hours_diff=round(total - task.estimated_hours, 2),
    )


def reconcile_many(tasks: Iterable[Task], entries: Iterable[TimeEntry]) -> list[TaskWithActuals]:
    """Reconcile many tasks against one flat entry list, keeping task order."""
    by_task: dict[str, list[TimeEntry]] = defaultdict(list)
    for entry in entries:
        by_task[entry.task_id].append(entry)

    return [reconcile(task, by_task.get(task.id, [])) for task in tasks]


def filter_by_tags(tasks: Iterable[Task], tags: Optional[Iterable[str]]) -> list[Task]:
    """Keep tasks carrying at least one of the tags. No tags keeps everything."""
    wanted = set(tags or [])
    if not wanted:
        return list(tasks)
    return [task for task in tasks if wanted.intersection(task.tags)]


async def reconcile_tasks(
    repository: Repository, owner_id: str, tasks: list[Task]
) -> list[TaskWithActuals]:
    """Reconcile tasks with one entry query per task, run concurrently.

    All queries must succeed: the first failure propagates and no partial
    result is returned, so a task is never shown with hours missing.
    """
    entry_lists = await asyncio.gather(
        *(repository.list_task_entries(owner_id, task.id) for task in tasks)
    )
    return [reconcile(task, entries) for task, entries in zip(tasks, entry_lists)]


async def reconcile_project_tasks(
    repository: Repository, owner_id: str, project_id: str
) -> list[TaskWithActuals]:
    """Load a project's tasks and reconcile each of them."""
    tasks = await repository.list_tasks(owner_id, project_id=project_id)
    return await reconcile_tasks(repository, owner_id, tasks)
