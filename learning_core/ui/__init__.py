from .notifications import (
    Notifier,
    Notification,
    LogNotifier,
    QueuedNotifier,
    flush_notifications,
)

__all__ = ["Notifier", "Notification", "LogNotifier", "QueuedNotifier", "flush_notifications"]
