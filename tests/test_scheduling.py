"""Tests for repeating tasks."""

import asyncio

import pytest  # type: ignore[import-not-found]

from freelance_tracker.core.scheduling import RepeatingTask


class TestRepeatingTask:
    """Test RepeatingTask."""

    def test_invalid_interval(self) -> None:
        """Test the interval must be positive."""
        with pytest.raises(ValueError):
            RepeatingTask(0, lambda: None)

    def test_plain_callback(self) -> None:
        """Test a plain function is called repeatedly."""
        calls = []
        task = RepeatingTask(0.01, lambda: calls.append(1))

        async def scenario() -> None:
            task.start()
            await asyncio.sleep(0.1)
            task.cancel()

        asyncio.run(scenario())
        assert len(calls) >= 2

    def test_coroutine_callback(self) -> None:
        """Test a coroutine function is awaited."""
        calls = []

        async def callback() -> None:
            calls.append(1)

        task = RepeatingTask(0.01, callback)

        async def scenario() -> None:
            task.start()
            await asyncio.sleep(0.1)
            task.cancel()

        asyncio.run(scenario())
        assert len(calls) >= 2

    def test_cancel_stops_calls(self) -> None:
        """Test no calls happen after cancel."""
        calls = []
        task = RepeatingTask(0.01, lambda: calls.append(1))

        async def scenario() -> int:
            task.start()
            await asyncio.sleep(0.05)
            task.cancel()
            count = len(calls)
            await asyncio.sleep(0.05)
            return count

        count = asyncio.run(scenario())
        assert len(calls) == count
        assert not task.running

    def test_cancel_is_idempotent(self) -> None:
        """Test cancel can be called repeatedly, even before start."""
        task = RepeatingTask(1, lambda: None)

        task.cancel()
        task.cancel()

        assert not task.running

    def test_start_twice(self) -> None:
        """Test a running task cannot be started again."""
        task = RepeatingTask(1, lambda: None)

        async def scenario() -> None:
            task.start()
            try:
                task.start()
            finally:
                task.cancel()

        with pytest.raises(RuntimeError):
            asyncio.run(scenario())

    def test_start_needs_event_loop(self) -> None:
        """Test starting outside an event loop fails."""
        with pytest.raises(RuntimeError):
            RepeatingTask(1, lambda: None).start()

    def test_failing_callback_keeps_ticking(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test a raising callback is logged and the loop keeps running."""
        calls = []

        def callback() -> None:
            calls.append(1)
            if len(calls) == 1:
                raise RuntimeError("boom")

        task = RepeatingTask(0.01, callback, name="flaky")

        async def scenario() -> bool:
            task.start()
            await asyncio.sleep(0.1)
            still_running = task.running
            task.cancel()
            return still_running

        with caplog.at_level("ERROR"):
            still_running = asyncio.run(scenario())

        assert still_running
        assert len(calls) >= 2
        assert "flaky callback failed: boom" in caplog.text
