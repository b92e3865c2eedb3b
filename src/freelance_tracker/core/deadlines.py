"""Periodic scan of in-progress tasks for approaching deadlines."""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Awaitable, Callable, Iterable, Optional

from freelance_tracker.automation.notifier import Notifier
from freelance_tracker.core.models import Task, TaskStatus, to_local_naive
from freelance_tracker.core.scheduling import RepeatingTask

logger = logging.getLogger(__name__)

TaskSource = Callable[[], Awaitable[list[Task]]]


@dataclass(frozen=True)
class DeadlineWarning:
    """A task due within the warning window."""

    task_id: str
    task_name: str
    due_at: datetime
    hours_remaining: int


def hours_until(due_at: datetime, now: datetime) -> int:
    """Whole hours from now until due, truncated toward zero."""
    seconds = (to_local_naive(due_at) - to_local_naive(now)).total_seconds()
    return int(seconds / 3600)


class DeadlineMonitor:
    """Warns about in-progress tasks that are due soon.

    By default every scan warns again about every task still inside the
    window. With ``deduplicate`` a task is warned once until it leaves the
    window.
    """

    def __init__(
        self,
        notifier: Optional[Notifier] = None,
        window_hours: int = 24,
        interval_seconds: float = 3600,
        deduplicate: bool = False,
        task_source: Optional[TaskSource] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """Initialize deadline monitor.

        Args:
            notifier: Sends the warnings. No notifications if None.
            window_hours: Warn when at most this many hours remain
            interval_seconds: Seconds between scheduled scans
            deduplicate: Warn once per task while it stays in the window
            task_source: Coroutine function returning the tasks to scan
            clock: Source of the current time
        """
        self.notifier = notifier
        self.window_hours = window_hours
        self.interval_seconds = interval_seconds
        self.deduplicate = deduplicate
        self.task_source = task_source
        self.clock = clock
        self._warned: set[str] = set()
        self._scan_task: Optional[RepeatingTask] = None

    @property
    def running(self) -> bool:
        return self._scan_task is not None and self._scan_task.running

    def find_due_soon(self, tasks: Iterable[Task], now: datetime) -> list[DeadlineWarning]:
        """Return warnings for in-progress tasks due within the window. No side effects."""
        warnings = []
        for task in tasks:
            if task.status != TaskStatus.IN_PROGRESS or task.due_at is None:
                continue
            remaining = hours_until(task.due_at, now)
            if 0 < remaining <= self.window_hours:
                warnings.append(DeadlineWarning(task.id, task.name, task.due_at, remaining))
        return warnings

    def scan(self, tasks: Iterable[Task], now: Optional[datetime] = None) -> list[DeadlineWarning]:
        """Check tasks and emit a notification for each one due soon.

        Args:
            tasks: Tasks to check
            now: Reference time. Defaults to the monitor's clock.

        Returns:
            Warnings that were emitted on this scan
        """
        found = self.find_due_soon(tasks, now or self.clock())

        if self.deduplicate:
            in_window = {w.task_id for w in found}
            emitted = [w for w in found if w.task_id not in self._warned]
            # Tasks that left the window may be warned again later
            self._warned = (self._warned & in_window) | {w.task_id for w in emitted}
        else:
            emitted = found

        for warning in emitted:
            logger.warning(
                f'Task "{warning.task_name}" is due in {warning.hours_remaining} hour(s)'
            )
            if self.notifier is not None:
                self.notifier.notify_deadline(warning.task_name, warning.hours_remaining)

        return emitted

    async def scan_once(self) -> list[DeadlineWarning]:
        """Fetch tasks from the task source and scan them.

        Raises:
            RuntimeError: If no task source is configured
        """
        if self.task_source is None:
            raise RuntimeError("DeadlineMonitor has no task source")
        tasks = await self.task_source()
        return self.scan(tasks)

    async def _tick(self) -> None:
        try:
            await self.scan_once()
        except Exception as e:
            logger.error(f"Deadline scan failed: {e}")

    def start(self) -> None:
        """Start scanning every ``interval_seconds``. Needs a running event loop."""
        if self.task_source is None:
            raise RuntimeError("DeadlineMonitor has no task source")
        if self.running:
            return
        self._scan_task = RepeatingTask(self.interval_seconds, self._tick, name="deadline-scan")
        self._scan_task.start()
        logger.info(f"Deadline monitor started (every {self.interval_seconds}s)")

    def stop(self) -> None:
        """Cancel the repeating scan."""
        if self._scan_task is not None:
            self._scan_task.cancel()
            self._scan_task = None
            logger.info("Deadline monitor stopped")
