# =============================================================================
# learning_core/services/queries.py
# Derived read models: tag lists, journal/resource filters, groupings
# =============================================================================
"""
Pure functions over store snapshots. Nothing here mutates or talks to the
backend; pass in whatever collection the page is rendering.
"""

from __future__ import annotations
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from learning_core.models.entities import Category, JournalEntry, LearningMethod, Resource, Topic

ALL = "all"

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def collect_tags(*collections: Iterable) -> List[str]:
    """Every tag used across the given collections, once each, first-seen order."""
    seen: Dict[str, None] = {}
    for collection in collections:
        for item in collection:
            for tag in getattr(item, "tags", ()) or ():
                seen.setdefault(tag, None)
    return list(seen)


def tag_suggestions(all_tags: Iterable[str], attached: Iterable[str] = ()) -> List[str]:
    """
    Tags offered in an edit form: each existing tag at most once
    (case-sensitive), minus the ones already on the item being edited.
    """
    exclude = set(attached or ())
    result: Dict[str, None] = {}
    for tag in all_tags:
        if tag not in exclude:
            result.setdefault(tag, None)
    return list(result)


def _newest_first(items: Iterable) -> List:
    return sorted(items, key=lambda i: i.created_at or _EPOCH, reverse=True)


def _matches_tag(item, tag: Optional[str]) -> bool:
    return not tag or tag == ALL or tag in item.tags


def _matches_topic(item, topic_id: Optional[str]) -> bool:
    return not topic_id or topic_id == ALL or item.topic_id == topic_id


def filter_journals(
    journals: Iterable[JournalEntry],
    topic_id: Optional[str] = None,
    tag: Optional[str] = None,
    search: str = "",
) -> List[JournalEntry]:
    """
    Journal entries for a topic and/or tag whose content or tags contain
    ``search`` (case-insensitive), newest first.
    """
    term = (search or "").strip().lower()

    def matches_search(entry: JournalEntry) -> bool:
        if not term:
            return True
        return term in entry.content.lower() or any(term in t.lower() for t in entry.tags)

    return _newest_first(
        j for j in journals
        if _matches_topic(j, topic_id) and _matches_tag(j, tag) and matches_search(j)
    )


def filter_resources(
    resources: Iterable[Resource],
    topic_id: Optional[str] = None,
    tag: Optional[str] = None,
    search: str = "",
) -> List[Resource]:
    """Resources filtered like journal entries; search looks at title and notes."""
    term = (search or "").strip().lower()

    def matches_search(resource: Resource) -> bool:
        if not term:
            return True
        return term in resource.title.lower() or term in (resource.notes or "").lower()

    return _newest_first(
        r for r in resources
        if _matches_topic(r, topic_id) and _matches_tag(r, tag) and matches_search(r)
    )


def topics_by_category(
    categories: Sequence[Category],
    topics: Iterable[Topic],
    include_inactive: bool = False,
) -> List[Tuple[Category, List[Topic]]]:
    """Categories in display order, each with its topics."""
    grouped: Dict[str, List[Topic]] = {}
    for topic in topics:
        grouped.setdefault(topic.category_id, []).append(topic)

    return [
        (category, grouped.get(category.id, []))
        for category in sorted(categories, key=lambda c: c.order)
        if include_inactive or category.is_active
    ]


def methods_for_topic(methods: Iterable[LearningMethod], topic_id: str) -> List[LearningMethod]:
    return [m for m in methods if m.topic_id == topic_id]
