"""Tests for the deadline monitor."""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Optional
from unittest.mock import Mock

import pytest  # type: ignore[import-not-found]

from freelance_tracker.core.deadlines import DeadlineMonitor, hours_until
from freelance_tracker.core.models import Task, TaskStatus

NOW = datetime(2026, 10, 17, 9, 0)


def make_task(
    name: str,
    due_in_hours: Optional[float],
    status: TaskStatus = TaskStatus.IN_PROGRESS,
) -> Task:
    return Task(
        owner_id="user-1",
        project_id="p1",
        name=name,
        estimated_hours=1,
        status=status,
        due_at=NOW + timedelta(hours=due_in_hours) if due_in_hours is not None else None,
    )


class TestHoursUntil:
    """Test hours_until."""

    def test_truncates(self) -> None:
        """Test partial hours are truncated."""
        assert hours_until(NOW + timedelta(hours=5, minutes=59), NOW) == 5

    def test_truncates_toward_zero_when_overdue(self) -> None:
        """Test overdue deadlines under an hour give zero."""
        assert hours_until(NOW - timedelta(minutes=30), NOW) == 0
        assert hours_until(NOW - timedelta(hours=2, minutes=30), NOW) == -2

    def test_aware_due_date(self) -> None:
        """Test aware timestamps are compared in local time."""
        due = (NOW + timedelta(hours=3)).astimezone(timezone.utc)

        assert hours_until(due, NOW) == 3


class TestDeadlineMonitor:
    """Test DeadlineMonitor scanning."""

    def test_window_boundaries(self) -> None:
        """Test only tasks with 1 to 24 whole hours left are reported."""
        monitor = DeadlineMonitor(window_hours=24)
        tasks = [
            make_task("in 30 minutes", 0.5),
            make_task("in 1 hour", 1),
            make_task("in 24 hours", 24),
            make_task("in 24.5 hours", 24.5),
            make_task("in 25 hours", 25),
            make_task("overdue", -3),
        ]

        found = monitor.find_due_soon(tasks, NOW)

        assert [w.task_name for w in found] == ["in 1 hour", "in 24 hours", "in 24.5 hours"]
        assert [w.hours_remaining for w in found] == [1, 24, 24]

    def test_only_in_progress_with_deadline(self) -> None:
        """Test pending, completed and undated tasks are ignored."""
        monitor = DeadlineMonitor()
        tasks = [
            make_task("pending", 5, TaskStatus.PENDING),
            make_task("done", 5, TaskStatus.COMPLETED),
            make_task("no deadline", None),
            make_task("busy", 5),
        ]

        assert [w.task_name for w in monitor.find_due_soon(tasks, NOW)] == ["busy"]

    def test_scan_notifies(self) -> None:
        """Test each warning is sent to the notifier."""
        notifier = Mock()
        monitor = DeadlineMonitor(notifier=notifier)

        emitted = monitor.scan([make_task("Landing page", 5)], now=NOW)

        assert len(emitted) == 1
        notifier.notify_deadline.assert_called_once_with("Landing page", 5)

    def test_scan_repeats_without_deduplication(self) -> None:
        """Test every scan warns again by default."""
        notifier = Mock()
        monitor = DeadlineMonitor(notifier=notifier)
        tasks = [make_task("Landing page", 5)]

        monitor.scan(tasks, now=NOW)
        monitor.scan(tasks, now=NOW)

        assert notifier.notify_deadline.call_count == 2

    def test_deduplicate(self) -> None:
        """Test a task is warned once while it stays in the window."""
        notifier = Mock()
        monitor = DeadlineMonitor(notifier=notifier, deduplicate=True)
        tasks = [make_task("Landing page", 5)]

        assert len(monitor.scan(tasks, now=NOW)) == 1
        assert monitor.scan(tasks, now=NOW + timedelta(hours=1)) == []
        assert notifier.notify_deadline.call_count == 1

    def test_deduplicate_rearms_after_leaving_window(self) -> None:
        """Test a task that left the window is warned again when it returns."""
        monitor = DeadlineMonitor(deduplicate=True)
        task = make_task("Landing page", 5)

        monitor.scan([task], now=NOW)
        monitor.scan([], now=NOW)
        assert len(monitor.scan([task], now=NOW)) == 1

    def test_scan_logs_warning(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test warnings are logged."""
        monitor = DeadlineMonitor()

        with caplog.at_level("WARNING"):
            monitor.scan([make_task("Landing page", 5)], now=NOW)

        assert 'Task "Landing page" is due in 5 hour(s)' in caplog.text

    def test_scan_once_uses_source(self) -> None:
        """Test scan_once reads tasks from the task source."""

        async def source() -> list[Task]:
            return [make_task("Landing page", 2)]

        monitor = DeadlineMonitor(task_source=source, clock=lambda: NOW)

        warnings = asyncio.run(monitor.scan_once())

        assert [w.hours_remaining for w in warnings] == [2]

    def test_scan_once_without_source(self) -> None:
        """Test a monitor without source cannot scan by itself."""
        with pytest.raises(RuntimeError):
            asyncio.run(DeadlineMonitor().scan_once())

    def test_periodic_scan(self) -> None:
        """Test start schedules repeated scans until stopped."""
        calls = []

        async def source() -> list[Task]:
            calls.append(1)
            return []

        monitor = DeadlineMonitor(task_source=source, interval_seconds=0.01)

        async def scenario() -> None:
            monitor.start()
            assert monitor.running
            await asyncio.sleep(0.1)
            monitor.stop()
            assert not monitor.running

        asyncio.run(scenario())
        assert len(calls) >= 2

    def test_failed_tick_keeps_running(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test a failing source is logged and the schedule continues."""
        calls = []

        async def source() -> list[Task]:
            calls.append(1)
            raise OSError("store offline")

        monitor = DeadlineMonitor(task_source=source, interval_seconds=0.01)

        async def scenario() -> None:
            monitor.start()
            await asyncio.sleep(0.1)
            assert monitor.running
            monitor.stop()

        with caplog.at_level("ERROR"):
            asyncio.run(scenario())

        assert len(calls) >= 2
        assert "Deadline scan failed: store offline" in caplog.text
