# =============================================================================
# learning_core/logging/config.py
# Logging Configuration for the Learning Tracker
# =============================================================================

import logging
import sys
import time
from typing import Optional


# Log format
LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


# Chatty client libraries used by the Supabase SDK
NOISY_LOGGERS = ("httpx", "httpcore", "hpack", "supabase", "postgrest", "realtime", "websockets")


def setup_logging(level: int = logging.INFO) -> None:
    """Send package logs to stdout and keep the Supabase SDK loggers at WARNING."""
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        stream=sys.stdout,
        force=True,
    )

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger("learning_core").info("Logging initialized")


def get_logger(name: str) -> logging.Logger:
    """Module logger; use ``get_logger(__name__)``."""
    return logging.getLogger(name)


class LogContext:
    """
    Times an operation and logs its start and its outcome.

    Usage:
        with LogContext(logger, "Fetching data for user 42") as op:
            ...
        op.elapsed  # seconds
    """

    def __init__(self, logger: logging.Logger, operation: str):
        self.logger = logger
        self.operation = operation
        self.elapsed: Optional[float] = None
        self._started = 0.0

    def __enter__(self) -> "LogContext":
        self._started = time.perf_counter()
        self.logger.info("%s started", self.operation)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.elapsed = time.perf_counter() - self._started
        if exc_type is None:
            self.logger.info("%s completed in %.2fs", self.operation, self.elapsed)
        else:
            self.logger.error("%s failed after %.2fs: %s", self.operation, self.elapsed, exc_val)
        return False
