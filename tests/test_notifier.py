"""Tests for desktop notifications."""

from unittest.mock import Mock

from freelance_tracker.automation.notifier import NotificationType, Notifier


class TestNotifier:
    """Test Notifier."""

    def test_initialization_disabled(self) -> None:
        """Test notifier initialization when disabled."""
        notifier = Notifier(enabled=False)

        assert not notifier.enabled
        assert notifier._notifier is None

    def test_notify_when_disabled(self) -> None:
        """Test notify does nothing when disabled."""
        notifier = Notifier(enabled=False)

        # Should not raise
        notifier.notify("Test", "Message")

    def test_notify_when_notifier_unavailable(self) -> None:
        """Test notify handles unavailable notifier."""
        notifier = Notifier(enabled=True)
        notifier._notifier = None

        # Should not raise
        notifier.notify("Test", "Message")

    def test_notify_with_mock_notifier(self) -> None:
        """Test notify calls the backend correctly."""
        notifier = Notifier(enabled=True)
        mock_notif = Mock()
        notifier._notifier = mock_notif

        notifier.notify("Test Title", "Test Message", NotificationType.STATUS, timeout=3)

        mock_notif.notify.assert_called_once()
        call_kwargs = mock_notif.notify.call_args[1]
        assert call_kwargs["title"] == "Test Title"
        assert call_kwargs["message"] == "Test Message"
        assert call_kwargs["app_name"] == "Freelance Tracker"
        assert call_kwargs["timeout"] == 3

    def test_backend_failure_is_swallowed(self) -> None:
        """Test a failing backend does not break the caller."""
        notifier = Notifier(enabled=True)
        notifier._notifier = Mock()
        notifier._notifier.notify.side_effect = NotImplementedError("no backend")

        # Should not raise
        notifier.notify_status("Landing page")

    def test_notify_deadline(self) -> None:
        """Test deadline notifications stay until dismissed."""
        notifier = Notifier(enabled=True)
        notifier._notifier = Mock()

        notifier.notify_deadline("Landing page", 5)

        call_kwargs = notifier._notifier.notify.call_args[1]
        assert call_kwargs["message"] == 'Task "Landing page" is due in 5 hour(s)'
        assert call_kwargs["timeout"] == 0

    def test_notify_status(self) -> None:
        """Test status notification text."""
        notifier = Notifier(enabled=True)
        notifier._notifier = Mock()

        notifier.notify_status("Landing page", "Stopped")

        call_kwargs = notifier._notifier.notify.call_args[1]
        assert call_kwargs["message"] == "Stopped tracking: Landing page"
