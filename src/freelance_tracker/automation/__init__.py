"""Automation features for Freelance Tracker."""

from freelance_tracker.automation.notifier import NotificationType, Notifier

__all__ = [
    "Notifier",
    "NotificationType",
]
