"""
Entity models for the learning tracker.

Plain frozen dataclasses: an entity is never edited in place, an update
produces a new instance through ``dataclasses.replace``. Field names are the
Python-side names; the remote column names live in ``learning_core.data.mappers``.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, fields
from datetime import date, datetime, timezone
from enum import Enum
from typing import FrozenSet, Iterable, Optional, Tuple


class TopicStatus(str, Enum):
    NOT_STARTED = "Not Started"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"
    # Legacy values, still readable from older rows
    ON_HOLD = "On Hold"
    ARCHIVED = "Archived"

    @classmethod
    def parse(cls, value) -> TopicStatus:
        if isinstance(value, cls):
            return value
        for member in cls:
            if member.value == value or member.name == value:
                return member
        raise ValueError(f"Unknown topic status: {value!r}")


ACTIVE_STATUSES = (TopicStatus.NOT_STARTED, TopicStatus.IN_PROGRESS, TopicStatus.COMPLETED)

PROGRESS_MIN = 0
PROGRESS_MAX = 100


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    """Client-side UUID so optimistic inserts are addressable before the server confirms."""
    return str(uuid.uuid4())


def clamp_progress(value) -> int:
    """Clamp progress to 0..100 (out-of-range input is clamped, not rejected)."""
    return max(PROGRESS_MIN, min(PROGRESS_MAX, int(round(float(value)))))


def normalize_tags(tags: Optional[Iterable[str]]) -> Tuple[str, ...]:
    """Strip, drop blanks and duplicates (case-sensitive), keep first-seen order."""
    seen = []
    for tag in tags or ():
        tag = str(tag).strip()
        if tag and tag not in seen:
            seen.append(tag)
    return tuple(seen)


@dataclass(frozen=True)
class Topic:
    id: str
    title: str
    category_id: str
    description: str = ""
    status: TopicStatus = TopicStatus.NOT_STARTED
    progress: int = 0
    start_date: Optional[date] = None
    target_end_date: Optional[date] = None
    parent_id: Optional[str] = None  # in the schema, unused by the current UI
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class LearningMethod:
    id: str
    topic_id: str
    type: str
    title: str
    link: Optional[str] = None
    time_spent: Optional[float] = None  # hours
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class JournalEntry:
    id: str
    topic_id: str
    content: str
    tags: Tuple[str, ...] = ()
    category: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class Resource:
    id: str
    topic_id: str
    title: str
    url: Optional[str] = None
    notes: Optional[str] = None
    tags: Tuple[str, ...] = ()
    type: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class Category:
    id: str
    name: str
    order: int = 0
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


SYSTEM_FIELDS: FrozenSet[str] = frozenset({"id", "created_at", "updated_at"})


def editable_fields(entity_type: type) -> FrozenSet[str]:
    """Names a caller may pass to add/update for this entity type."""
    return frozenset(f.name for f in fields(entity_type)) - SYSTEM_FIELDS
