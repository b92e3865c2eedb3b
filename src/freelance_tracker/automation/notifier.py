"""Desktop notifications for Freelance Tracker."""

import logging
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


class NotificationType(Enum):
    """Types of notifications."""

    STATUS = "status"
    DEADLINE = "deadline"


class Notifier:
    """Send desktop notifications."""

    APP_NAME = "Freelance Tracker"

    def __init__(self, enabled: bool = True, backend: str = "auto"):
        """Initialize notifier.

        Args:
            enabled: Whether notifications are enabled
            backend: Notification backend ('auto', 'plyer', etc.)
        """
        self.enabled = enabled
        self.backend = backend
        self._notifier = self._init_notifier()

    def _init_notifier(self) -> Any:
        """Initialize platform-specific notifier.

        Returns:
            Notification handler or None if not available
        """
        if not self.enabled:
            return None

        try:
            from plyer import notification  # type: ignore[import-not-found]

            return notification  # type: ignore[no-any-return]
        except ImportError:
            logger.warning("plyer is not available, desktop notifications are disabled")
            return None

    def notify(
        self,
        title: str,
        message: str,
        notification_type: NotificationType = NotificationType.STATUS,
        timeout: int = 5,
    ) -> None:
        """Send a desktop notification.

        Args:
            title: Notification title
            message: Notification message
            notification_type: Type of notification
            timeout: Display duration in seconds, 0 keeps it until dismissed
        """
        if not self.enabled or not self._notifier:
            return

        try:
            self._notifier.notify(  # type: ignore[attr-defined]
                title=title,
                message=message,
                app_name=self.APP_NAME,
                timeout=timeout,
            )
        except Exception as e:
            # Notifications are best effort; the caller has already logged the event
            logger.debug(f"Failed to send {notification_type.value} notification: {e}")

    def notify_status(self, task_name: str, action: str = "Started") -> None:
        """Notify about tracking status change.

        Args:
            task_name: Name of task
            action: Action performed (Started, Stopped, etc.)
        """
        self.notify(
            title=self.APP_NAME,
            message=f"{action} tracking: {task_name}",
            notification_type=NotificationType.STATUS,
        )

    def notify_deadline(self, task_name: str, hours_remaining: int) -> None:
        """Warn that a task is close to its deadline. Stays until dismissed.

        Args:
            task_name: Name of the task
            hours_remaining: Whole hours left before the due time
        """
        self.notify(
            title="Deadline approaching",
            message=f'Task "{task_name}" is due in {hours_remaining} hour(s)',
            notification_type=NotificationType.DEADLINE,
            timeout=0,
        )
