"""Budget and balance notifications."""

from finance_manager.notifications.service import NotificationService

__all__ = ["NotificationService"]
