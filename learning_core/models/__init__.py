from .entities import (
    TopicStatus,
    Topic,
    LearningMethod,
    JournalEntry,
    Resource,
    Category,
    clamp_progress,
    normalize_tags,
    new_id,
    utc_now,
)

__all__ = [
    "TopicStatus",
    "Topic",
    "LearningMethod",
    "JournalEntry",
    "Resource",
    "Category",
    "clamp_progress",
    "normalize_tags",
    "new_id",
    "utc_now",
]
