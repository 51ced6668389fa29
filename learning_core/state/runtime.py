# =============================================================================
# learning_core/state/runtime.py
# Background asyncio loop for the Streamlit script thread
# =============================================================================
"""
Streamlit re-runs the page script on every interaction, on a fresh thread.
The sync layer needs one long-lived event loop (realtime channels, pending
re-fetches), so the loop runs in a daemon thread and the script submits
coroutines to it.

Usage:
    runtime = EventLoopThread.get_instance()
    runtime.start()
    result = runtime.run(ctx.add_topic({...}))
"""

from __future__ import annotations
import asyncio
import concurrent.futures
import threading
from typing import Any, Awaitable, Optional

from learning_core.logging import get_logger

logger = get_logger(__name__)


class EventLoopThread:
    """Singleton owner of the background event loop."""

    _instance: Optional[EventLoopThread] = None
    _lock = threading.Lock()

    DEFAULT_TIMEOUT = 30  # seconds a script waits for a submitted coroutine

    def __init__(self):
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._thread: Optional[threading.Thread] = None
        self._ready = threading.Event()

    @classmethod
    def get_instance(cls) -> EventLoopThread:
        """Get or create singleton instance."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = EventLoopThread()
        return cls._instance

    @property
    def loop(self) -> Optional[asyncio.AbstractEventLoop]:
        return self._loop

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the loop thread (no-op when already running)."""
        if self.is_running:
            return
        self._ready.clear()
        self._thread = threading.Thread(target=self._run_loop, daemon=True, name="LearningSyncLoop")
        self._thread.start()
        self._ready.wait(timeout=5)
        logger.info("Background event loop started")

    def _run_loop(self) -> None:
        self._loop = asyncio.new_event_loop()
        asyncio.set_event_loop(self._loop)
        self._ready.set()
        try:
            self._loop.run_forever()
        finally:
            self._loop.close()

    def submit(self, coro: Awaitable[Any]) -> concurrent.futures.Future:
        """Schedule a coroutine without waiting for it."""
        if not self.is_running:
            self.start()
        return asyncio.run_coroutine_threadsafe(coro, self._loop)

    def run(self, coro: Awaitable[Any], timeout: Optional[float] = None) -> Any:
        """Run a coroutine on the loop and block until it finishes."""
        future = self.submit(coro)
        return future.result(timeout=timeout or self.DEFAULT_TIMEOUT)

    def stop(self) -> None:
        """Stop the loop and wait for the thread to exit."""
        if self._loop is not None and self.is_running:
            self._loop.call_soon_threadsafe(self._loop.stop)
        if self._thread is not None:
            self._thread.join(timeout=10)
        self._thread = None
        self._loop = None
        logger.info("Background event loop stopped")
