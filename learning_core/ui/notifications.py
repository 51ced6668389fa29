# =============================================================================
# learning_core/ui/notifications.py
# User-facing notifications (toasts) for store and sync outcomes
# =============================================================================
"""
Every store mutation ends in exactly one notification: a success message or
an error message. The core only talks to the ``Notifier`` protocol; the
Streamlit page decides how to render it.

The sync layer runs on a background event loop, where Streamlit calls are not
allowed, so the app uses ``QueuedNotifier`` and renders pending messages on
each script run with ``flush_notifications``.
"""

from __future__ import annotations
import threading
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import Deque, List, Protocol

from learning_core.logging import get_logger

logger = get_logger(__name__)


class Notifier(Protocol):
    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...

    def info(self, message: str) -> None: ...


@dataclass(frozen=True)
class Notification:
    level: str  # success, error, info
    message: str
    created_at: datetime = field(default_factory=datetime.now)


class LogNotifier:
    """Writes notifications to the log only. Default for headless use."""

    def success(self, message: str) -> None:
        logger.info(message)

    def error(self, message: str) -> None:
        logger.warning(message)

    def info(self, message: str) -> None:
        logger.info(message)


class QueuedNotifier:
    """Thread-safe buffer of notifications waiting to be rendered."""

    def __init__(self, maxlen: int = 50):
        self._queue: Deque[Notification] = deque(maxlen=maxlen)
        self._lock = threading.Lock()

    def _push(self, level: str, message: str) -> None:
        with self._lock:
            self._queue.append(Notification(level, message))

    def success(self, message: str) -> None:
        self._push("success", message)

    def error(self, message: str) -> None:
        self._push("error", message)

    def info(self, message: str) -> None:
        self._push("info", message)

    def drain(self) -> List[Notification]:
        """Remove and return everything queued so far."""
        with self._lock:
            items = list(self._queue)
            self._queue.clear()
        return items


ICONS = {"success": "✅", "error": "⚠️", "info": "ℹ️"}


def flush_notifications(notifier: QueuedNotifier) -> int:
    """
    Render queued notifications as Streamlit toasts.

    Must be called from the Streamlit script thread.

    Returns:
        Number of toasts shown
    """
    import streamlit as st

    pending = notifier.drain()
    for note in pending:
        st.toast(note.message, icon=ICONS.get(note.level))
    return len(pending)
