# =============================================================================
# learning_core/errors/handlers.py
# Error Handling Utilities for the Learning Tracker
# =============================================================================

from __future__ import annotations
import traceback
from typing import Optional, TYPE_CHECKING

from learning_core.logging import get_logger
from .exceptions import LearningTrackerError

if TYPE_CHECKING:
    from learning_core.ui.notifications import Notifier

logger = get_logger(__name__)


def handle_error(
    error: Exception,
    notifier: Optional[Notifier] = None,
    user_message: Optional[str] = None,
    log_error: bool = True,
) -> str:
    """
    Centralized error handling function.

    Args:
        error: The exception to handle
        notifier: Where to surface the message (nothing is shown if None)
        user_message: Custom message to show the user (uses error message if None)
        log_error: Whether to log the error

    Returns:
        The message that was surfaced
    """
    if isinstance(error, LearningTrackerError):
        message = user_message or error.message
        code = error.code
        details = error.details
        recoverable = error.recoverable
    else:
        message = user_message or str(error)
        code = "UNKNOWN"
        details = {"traceback": traceback.format_exc()}
        recoverable = True

    if log_error:
        # Expected rejections are not worth a traceback
        if isinstance(error, LearningTrackerError) and recoverable:
            logger.warning(f"[{code}] {message}", extra={"details": details})
        else:
            logger.error(f"[{code}] {message}", extra={"details": details}, exc_info=error)

    if notifier is not None:
        if recoverable:
            notifier.error(message)
        else:
            notifier.error(f"Critical error: {message}")

    return message


class ErrorContext:
    """
    Context manager for error handling with automatic logging and user feedback.

    Usage:
        with ErrorContext("Loading categories", notifier=notifier):
            ...

        # On error, logs and surfaces: "Error during: Loading categories"
    """

    def __init__(
        self,
        operation: str,
        notifier: Optional[Notifier] = None,
        recoverable: bool = True,
    ):
        self.operation = operation
        self.notifier = notifier
        self.recoverable = recoverable
        self.error: Optional[BaseException] = None

    def __enter__(self) -> ErrorContext:
        logger.debug(f"Starting: {self.operation}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        if exc_type is None:
            logger.debug(f"Completed: {self.operation}")
            return False

        if not issubclass(exc_type, Exception):
            return False

        self.error = exc_val
        if isinstance(exc_val, LearningTrackerError):
            handle_error(exc_val, notifier=self.notifier)
        else:
            handle_error(exc_val, notifier=self.notifier, user_message=f"Error during: {self.operation}")

        # Suppress exception if recoverable
        return self.recoverable
