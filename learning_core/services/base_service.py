# =============================================================================
# learning_core/services/base_service.py
# Standard result container shared by stores, gateways and services
# =============================================================================

from __future__ import annotations
from typing import Optional, Dict, Any
from dataclasses import dataclass

from learning_core.errors import LearningTrackerError
from learning_core.logging import get_logger, LogContext


@dataclass
class ServiceResult:
    """
    Standard result container for service operations.

    Remote gateways and entity stores report success and failure through
    this object instead of raising, so callers can pick rollback or re-fetch.
    """
    success: bool
    data: Optional[Any] = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None

    def __bool__(self) -> bool:
        return self.success

    @classmethod
    def ok(cls, data: Any = None, metadata: Dict[str, Any] = None) -> ServiceResult:
        """Create a successful result"""
        return cls(success=True, data=data, metadata=metadata)

    @classmethod
    def fail(
        cls,
        error: str,
        error_code: str = "UNKNOWN",
        metadata: Dict[str, Any] = None
    ) -> ServiceResult:
        """Create a failed result"""
        return cls(
            success=False,
            error=error,
            error_code=error_code,
            metadata=metadata,
        )

    @classmethod
    def from_exception(cls, e: Exception) -> ServiceResult:
        """Create a failed result from an exception"""
        if isinstance(e, LearningTrackerError):
            return cls(
                success=False,
                error=e.message,
                error_code=e.code,
                metadata=e.details,
            )
        return cls(
            success=False,
            error=str(e),
            error_code="EXCEPTION",
        )


class BaseService:
    """
    Base class for stores and services.

    Provides a class-named logger and timed operation logging.

    Usage:
        class MyStore(BaseService):
            async def load(self) -> ServiceResult:
                with self.log_operation("Loading rows"):
                    ...
    """

    def __init__(self):
        self.logger = get_logger(self.__class__.__name__)

    def log_operation(self, operation: str) -> LogContext:
        """
        Create a logging context for an operation.

        Usage:
            with self.log_operation("Deleting topic"):
                ...
        """
        return LogContext(self.logger, operation)
