# =============================================================================
# learning_core/errors/__init__.py
# Centralized Error Handling for the Learning Tracker
# =============================================================================

from .exceptions import (
    LearningTrackerError,
    EntityValidationError,
    EntityNotFoundError,
    CategoryNotEmptyError,
    OwnershipError,
    PersistenceError,
    SyncError,
    ConfigurationError,
)

from .handlers import (
    handle_error,
    ErrorContext,
)

__all__ = [
    # Exceptions
    "LearningTrackerError",
    "EntityValidationError",
    "EntityNotFoundError",
    "CategoryNotEmptyError",
    "OwnershipError",
    "PersistenceError",
    "SyncError",
    "ConfigurationError",
    # Handlers
    "handle_error",
    "ErrorContext",
]
