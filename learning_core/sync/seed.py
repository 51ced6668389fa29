# =============================================================================
# learning_core/sync/seed.py
# Sample dataset for demo mode, signed-out preview and fetch fallback
# =============================================================================
"""
The seed is immutable (tuples of frozen entities) and injected into the sync
coordinator, so tests can swap in their own and nothing can edit it in place.

Ids are UUID5 values derived from a fixed namespace, which keeps them stable
across runs and valid for UUID-typed columns.
"""

from __future__ import annotations
import uuid
from dataclasses import dataclass
from datetime import date
from typing import Tuple

from learning_core.data.mappers import parse_datetime
from learning_core.models.entities import (
    Category,
    JournalEntry,
    LearningMethod,
    Resource,
    Topic,
    TopicStatus,
)

SEED_NAMESPACE = uuid.UUID("6f1c2a4e-93b5-4f0e-9c55-2d7c1b8e4a10")


def seed_id(kind: str, key: str) -> str:
    return str(uuid.uuid5(SEED_NAMESPACE, f"{kind}:{key}"))


@dataclass(frozen=True)
class SeedDataset:
    topics: Tuple[Topic, ...] = ()
    methods: Tuple[LearningMethod, ...] = ()
    journals: Tuple[JournalEntry, ...] = ()
    resources: Tuple[Resource, ...] = ()
    categories: Tuple[Category, ...] = ()

    @classmethod
    def empty(cls) -> SeedDataset:
        return cls()


def _ts(text: str):
    return parse_datetime(text)


def default_seed() -> SeedDataset:
    """Three categories, three topics and a few methods, entries and resources."""
    web, languages, design = (seed_id("category", k) for k in ("web", "languages", "design"))
    react, japanese, uiux = (seed_id("topic", k) for k in ("react", "japanese", "uiux"))

    categories = (
        Category(web, "Web Development", 0, True, _ts("2024-02-01T08:00:00Z"), _ts("2024-02-01T08:00:00Z")),
        Category(languages, "Languages", 1, True, _ts("2024-02-01T08:00:00Z"), _ts("2024-02-01T08:00:00Z")),
        Category(design, "Design", 2, True, _ts("2024-02-01T08:00:00Z"), _ts("2024-02-01T08:00:00Z")),
    )

    topics = (
        Topic(
            id=react,
            title="React Fundamentals",
            description="Learning React basics, components, state management, and hooks",
            category_id=web,
            status=TopicStatus.IN_PROGRESS,
            progress=60,
            start_date=date(2024, 3, 1),
            target_end_date=date(2024, 5, 1),
            created_at=_ts("2024-03-01T10:00:00Z"),
            updated_at=_ts("2024-03-15T14:30:00Z"),
        ),
        Topic(
            id=japanese,
            title="Japanese N5 Level",
            description="Basic Japanese language skills including hiragana, katakana, and basic kanji",
            category_id=languages,
            status=TopicStatus.NOT_STARTED,
            progress=0,
            start_date=date(2024, 4, 1),
            target_end_date=date(2024, 8, 1),
            created_at=_ts("2024-03-20T09:00:00Z"),
            updated_at=_ts("2024-03-20T09:00:00Z"),
        ),
        Topic(
            id=uiux,
            title="UI/UX Principles",
            description="Learning user interface design principles and user experience best practices",
            category_id=design,
            status=TopicStatus.COMPLETED,
            progress=100,
            start_date=date(2024, 2, 1),
            target_end_date=date(2024, 3, 15),
            created_at=_ts("2024-02-01T08:00:00Z"),
            updated_at=_ts("2024-03-15T16:45:00Z"),
        ),
    )

    methods = (
        LearningMethod(
            id=seed_id("method", "react-course"),
            topic_id=react,
            type="Online Course",
            title="React Complete Guide",
            link="https://react-course.example.com",
            time_spent=8.0,
            created_at=_ts("2024-03-01T10:30:00Z"),
            updated_at=_ts("2024-03-15T11:20:00Z"),
        ),
        LearningMethod(
            id=seed_id("method", "genki"),
            topic_id=japanese,
            type="Textbook",
            title="Genki I Textbook",
            time_spent=2.0,
            created_at=_ts("2024-03-20T09:15:00Z"),
            updated_at=_ts("2024-03-20T09:15:00Z"),
        ),
    )

    journals = (
        JournalEntry(
            id=seed_id("journal", "hooks"),
            topic_id=react,
            content=(
                "Learned about React hooks today. useState and useEffect are powerful tools "
                "for managing component state and side effects."
            ),
            tags=("react", "hooks", "frontend"),
            category="Progress Update",
            created_at=_ts("2024-03-10T15:20:00Z"),
            updated_at=_ts("2024-03-10T15:20:00Z"),
        ),
        JournalEntry(
            id=seed_id("journal", "uiux-done"),
            topic_id=uiux,
            content=(
                "Completed the UI/UX course! Key takeaways: Always design with user needs in mind, "
                "test early and often, and iterate based on feedback."
            ),
            tags=("design", "ux", "completion"),
            category="Reflection",
            created_at=_ts("2024-03-15T16:45:00Z"),
            updated_at=_ts("2024-03-15T16:45:00Z"),
        ),
    )

    resources = (
        Resource(
            id=seed_id("resource", "react-docs"),
            topic_id=react,
            title="React Official Documentation",
            url="https://react.dev",
            notes="Comprehensive guide to React concepts and APIs",
            type="Documentation",
            created_at=_ts("2024-03-01T11:00:00Z"),
            updated_at=_ts("2024-03-01T11:00:00Z"),
        ),
        Resource(
            id=seed_id("resource", "kana-sheet"),
            topic_id=japanese,
            title="Japanese Learning Sheet",
            notes="Hiragana and Katakana practice sheets with common phrases",
            type="Study Material",
            created_at=_ts("2024-03-20T09:30:00Z"),
            updated_at=_ts("2024-03-20T09:30:00Z"),
        ),
        Resource(
            id=seed_id("resource", "ui-guide"),
            topic_id=uiux,
            title="UI Design Principles Guide",
            url="https://example.com/ui-principles",
            notes="Comprehensive overview of fundamental UI design principles",
            type="Article",
            created_at=_ts("2024-02-05T13:20:00Z"),
            updated_at=_ts("2024-02-05T13:20:00Z"),
        ),
    )

    return SeedDataset(
        topics=topics,
        methods=methods,
        journals=journals,
        resources=resources,
        categories=categories,
    )
