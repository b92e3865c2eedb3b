"""Live timer session that turns elapsed time into a time entry."""

import logging
from datetime import datetime
from enum import Enum
from typing import Callable, Optional

from freelance_tracker.core.exceptions import ValidationError
from freelance_tracker.core.models import TimeEntry
from freelance_tracker.core.scheduling import RepeatingTask
from freelance_tracker.core.tracker import TimeTracker

logger = logging.getLogger(__name__)


class TimerState(str, Enum):
    """Timer session states."""

    IDLE = "idle"
    RUNNING = "running"


class StampPolicy(str, Enum):
    """Which moment a stopped session's entry is attributed to."""

    START = "start"
    STOP = "stop"


class TimerSession:
    """Single tracking session: idle -> running -> idle.

    Elapsed time is counted by a cooperative tick every ``tick_seconds``
    rather than read from a clock, so long sessions may drift by a few
    seconds. Nothing stops a caller from creating several sessions; keeping
    one per user is up to the caller.
    """

    def __init__(
        self,
        tracker: TimeTracker,
        stamp_policy: StampPolicy = StampPolicy.START,
        tick_seconds: float = 1.0,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """Initialize timer session.

        Args:
            tracker: Writes the entry when the session stops
            stamp_policy: Attribute the entry to the start or the stop moment
            tick_seconds: Real seconds between ticks
            clock: Source of the current time. Defaults to the tracker's clock.
        """
        self.tracker = tracker
        self.stamp_policy = StampPolicy(stamp_policy)
        self.tick_seconds = tick_seconds
        self.clock = clock or tracker.clock

        self.state = TimerState.IDLE
        self.project_id: Optional[str] = None
        self.task_id: Optional[str] = None
        self.elapsed_seconds = 0
        self.started_at: Optional[datetime] = None
        self._ticker: Optional[RepeatingTask] = None

    @property
    def is_running(self) -> bool:
        return self.state == TimerState.RUNNING

    @property
    def elapsed_hours(self) -> float:
        return self.elapsed_seconds / 3600

    def select(self, project_id: Optional[str], task_id: Optional[str] = None) -> None:
        """Choose the project and task the session tracks.

        Raises:
            ValidationError: If the session is running
        """
        if self.is_running:
            raise ValidationError("Cannot change the selection while tracking")
        self.project_id = project_id
        self.task_id = task_id

    def start(self) -> None:
        """Begin tracking and schedule the tick.

        Must be called from a running event loop.

        Raises:
            ValidationError: If no task or project is selected, or already running
        """
        if self.is_running:
            raise ValidationError("Tracking is already running")
        if not self.task_id:
            raise ValidationError("no task selected")
        if not self.project_id:
            raise ValidationError("no project selected")

        self.elapsed_seconds = 0
        self.started_at = self.clock()
        self._ticker = RepeatingTask(self.tick_seconds, self.tick, name="timer-tick")
        self._ticker.start()
        self.state = TimerState.RUNNING
        logger.info(f"Started tracking task {self.task_id}")

    def tick(self) -> None:
        """Count one more second while running."""
        if self.is_running:
            self.elapsed_seconds += 1

    async def stop(self) -> TimeEntry:
        """Stop tracking and persist the elapsed time as an entry.

        If the entry cannot be stored the error propagates and the session
        keeps running with its elapsed time intact.

        Returns:
            Persisted entry

        Raises:
            ValidationError: If not running or no time has elapsed
            PersistenceError: If the entry cannot be stored
        """
        if not self.is_running:
            raise ValidationError("Tracking is not running")
        if self.elapsed_seconds <= 0:
            raise ValidationError("No time tracked yet")

        if self.stamp_policy == StampPolicy.START and self.started_at is not None:
            stamp = self.started_at
        else:
            stamp = self.clock()

        entry = await self.tracker.log_time(
            self.project_id, self.task_id, self.elapsed_hours, start_time=stamp
        )

        self._reset()
        logger.info(f"Stopped tracking task {entry.task_id}: {entry.hours:.4f}h saved")
        return entry

    def cancel(self) -> None:
        """Discard the session without saving anything."""
        if self.is_running:
            logger.info(f"Discarded tracking of task {self.task_id}")
        self._reset()

    def _reset(self) -> None:
        if self._ticker is not None:
            self._ticker.cancel()
            self._ticker = None
        self.state = TimerState.IDLE
        self.elapsed_seconds = 0
        self.started_at = None
