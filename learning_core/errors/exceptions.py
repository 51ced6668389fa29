# =============================================================================
# learning_core/errors/exceptions.py
# Custom Exception Hierarchy for the Learning Tracker
# =============================================================================

from typing import Optional, Dict, Any


class LearningTrackerError(Exception):
    """
    Base exception for all learning tracker errors.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code (e.g., "VAL_001")
        details: Additional context as a dictionary
        recoverable: Whether the error can be recovered from
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        recoverable: bool = True,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or "LT_000"
        self.details = details or {}
        self.recoverable = recoverable

    def __str__(self) -> str:
        base = f"[{self.code}] {self.message}"
        if self.details:
            base += f" | Details: {self.details}"
        return base

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization"""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "details": self.details,
            "recoverable": self.recoverable,
        }


# =============================================================================
# ENTITY EXCEPTIONS
# =============================================================================

class EntityValidationError(LearningTrackerError):
    """Raised when entity fields fail validation before any state change"""

    def __init__(
        self,
        message: str,
        entity: Optional[str] = None,
        field: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if entity:
            details["entity"] = entity
        if field:
            details["field"] = field

        super().__init__(
            message=message,
            code="VAL_001",
            details=details,
            **kwargs,
        )


class EntityNotFoundError(LearningTrackerError):
    """Raised when an operation targets an id that is not in the store"""

    def __init__(self, message: str, entity: Optional[str] = None, entity_id: Optional[str] = None, **kwargs):
        details = kwargs.pop("details", {})
        if entity:
            details["entity"] = entity
        if entity_id:
            details["id"] = entity_id

        super().__init__(
            message=message,
            code="DATA_404",
            details=details,
            **kwargs,
        )


class CategoryNotEmptyError(LearningTrackerError):
    """
    Raised when deleting a category that topics still reference.

    This is the one store error that propagates to the caller, so a
    confirmation dialog can stay open and explain why.
    """

    def __init__(
        self,
        message: str = "Cannot delete category with existing topics",
        category_id: Optional[str] = None,
        topic_count: Optional[int] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if category_id:
            details["category_id"] = category_id
        if topic_count is not None:
            details["topic_count"] = topic_count

        super().__init__(
            message=message,
            code="REF_001",
            details=details,
            **kwargs,
        )


# =============================================================================
# AUTH EXCEPTIONS
# =============================================================================

class OwnershipError(LearningTrackerError):
    """Raised when a remote-backed mutation has no authenticated owner"""

    def __init__(self, message: str, operation: Optional[str] = None, **kwargs):
        details = kwargs.pop("details", {})
        if operation:
            details["operation"] = operation

        super().__init__(
            message=message,
            code="AUTH_001",
            details=details,
            **kwargs,
        )


# =============================================================================
# REMOTE EXCEPTIONS
# =============================================================================

class PersistenceError(LearningTrackerError):
    """Raised when a remote create/update/delete fails"""

    def __init__(
        self,
        message: str,
        table: Optional[str] = None,
        operation: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if table:
            details["table"] = table
        if operation:
            details["operation"] = operation

        super().__init__(
            message=message,
            code="DB_001",
            details=details,
            **kwargs,
        )


class SyncError(LearningTrackerError):
    """Raised when the bulk fetch of remote collections fails"""

    def __init__(self, message: str, table: Optional[str] = None, **kwargs):
        details = kwargs.pop("details", {})
        if table:
            details["table"] = table

        super().__init__(
            message=message,
            code="SYNC_001",
            details=details,
            **kwargs,
        )


# =============================================================================
# CONFIGURATION EXCEPTIONS
# =============================================================================

class ConfigurationError(LearningTrackerError):
    """Raised when configuration is invalid or missing"""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if config_key:
            details["config_key"] = config_key

        super().__init__(
            message=message,
            code="CONFIG_001",
            details=details,
            recoverable=False,
            **kwargs,
        )
