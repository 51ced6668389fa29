# =============================================================================
# learning_core/data/mappers.py
# Row <-> entity field mapping for every remote table
# =============================================================================
"""
Remote rows use underscored column names (``start_date``, ``topic_id``,
``user_id``) and JSON-friendly values (ISO strings, plain lists). Entities use
Python types (``date``, ``datetime``, ``TopicStatus``, tuples).

Reading drops ``user_id`` (ownership is implicit in the query scope).
Writing an insert row requires an owner id; a missing one is a hard error
rather than a silent anonymous write.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Callable, Dict, Generic, Iterable, List, Mapping, Optional, Tuple, Type, TypeVar

from learning_core.errors import EntityValidationError, OwnershipError
from learning_core.models.entities import (
    Category,
    JournalEntry,
    LearningMethod,
    Resource,
    Topic,
    TopicStatus,
    normalize_tags,
)

E = TypeVar("E")


# ── value converters ────────────────────────────────────────────────────────

def _identity(value):
    return value


def parse_datetime(value) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_date(value) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    # Accept both "2024-03-01" and full timestamps
    return date.fromisoformat(str(value)[:10])


def format_temporal(value) -> Optional[str]:
    return value.isoformat() if value is not None else None


def optional_text(value) -> Optional[str]:
    """Empty string and absent are the same thing."""
    if value is None:
        return None
    text = str(value)
    return text if text.strip() else None


def text_or_empty(value) -> str:
    """For NOT NULL text columns holding an optional value."""
    return value if value else ""


def tags_to_remote(value) -> List[str]:
    return list(normalize_tags(value))


def optional_float(value) -> Optional[float]:
    return float(value) if value is not None else None


def status_to_remote(value) -> str:
    return TopicStatus.parse(value).value


# ── mapper ──────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Column:
    attr: str
    name: str
    to_remote: Callable[[Any], Any] = _identity
    from_remote: Callable[[Any], Any] = _identity
    default: Any = None


class EntityMapper(Generic[E]):
    """Translates one entity type to and from rows of one table."""

    def __init__(self, entity_type: Type[E], table: str, columns: Iterable[Column]):
        self.entity_type = entity_type
        self.table = table
        self.columns: Tuple[Column, ...] = tuple(columns)
        self._by_attr: Dict[str, Column] = {c.attr: c for c in self.columns}

    @property
    def label(self) -> str:
        return self.entity_type.__name__

    def from_row(self, row: Mapping[str, Any]) -> E:
        values: Dict[str, Any] = {"id": str(row["id"])}
        for col in self.columns:
            raw = row.get(col.name)
            value = col.from_remote(raw) if raw is not None else None
            values[col.attr] = col.default if value is None else value
        values["created_at"] = parse_datetime(row.get("created_at"))
        values["updated_at"] = parse_datetime(row.get("updated_at"))
        return self.entity_type(**values)

    def from_rows(self, rows: Iterable[Mapping[str, Any]]) -> List[E]:
        return [self.from_row(r) for r in rows or ()]

    def to_insert_row(self, entity: E, owner_id: Optional[str]) -> Dict[str, Any]:
        if not owner_id:
            raise OwnershipError(
                f"Refusing to insert {self.label} without an owner",
                operation=f"insert:{self.table}",
            )
        row: Dict[str, Any] = {"id": entity.id}
        for col in self.columns:
            row[col.name] = col.to_remote(getattr(entity, col.attr))
        row["created_at"] = format_temporal(entity.created_at)
        row["updated_at"] = format_temporal(entity.updated_at)
        row["user_id"] = owner_id
        return row

    def to_update_fields(self, updates: Mapping[str, Any], updated_at: Optional[datetime] = None) -> Dict[str, Any]:
        fields: Dict[str, Any] = {}
        for attr, value in updates.items():
            col = self._by_attr.get(attr)
            if col is None:
                raise EntityValidationError(
                    f"{self.label} has no field '{attr}'", entity=self.label, field=attr,
                )
            fields[col.name] = col.to_remote(value)
        if updated_at is not None:
            fields["updated_at"] = format_temporal(updated_at)
        return fields


class TopicMapper(EntityMapper[Topic]):
    """
    Topics reference categories by id. Older rows stored the reference in the
    ``category`` column (sometimes as a name), newer ones in ``category_id``;
    both columns are written and ``category_id`` wins on read.
    """

    def from_row(self, row: Mapping[str, Any]) -> Topic:
        row = dict(row)
        row["category_id"] = row.get("category_id") or row.get("category") or ""
        return super().from_row(row)

    def to_insert_row(self, entity: Topic, owner_id: Optional[str]) -> Dict[str, Any]:
        row = super().to_insert_row(entity, owner_id)
        row["category"] = row["category_id"]
        return row

    def to_update_fields(self, updates: Mapping[str, Any], updated_at: Optional[datetime] = None) -> Dict[str, Any]:
        fields = super().to_update_fields(updates, updated_at)
        if "category_id" in fields:
            fields["category"] = fields["category_id"]
        return fields


TOPIC_MAPPER = TopicMapper(Topic, "topics", [
    Column("title", "title"),
    Column("description", "description", default=""),
    Column("category_id", "category_id", from_remote=str, default=""),
    Column("status", "status", status_to_remote, TopicStatus.parse, TopicStatus.NOT_STARTED),
    Column("progress", "progress", int, int, 0),
    Column("start_date", "start_date", format_temporal, parse_date),
    Column("target_end_date", "target_end_date", format_temporal, parse_date),
    Column("parent_id", "parent_id"),
])

METHOD_MAPPER = EntityMapper(LearningMethod, "learning_methods", [
    Column("topic_id", "topic_id", default=""),
    Column("type", "type", default=""),
    Column("title", "title"),
    Column("link", "link", from_remote=optional_text),
    Column("time_spent", "time_spent", optional_float, optional_float),
])

JOURNAL_MAPPER = EntityMapper(JournalEntry, "journal_entries", [
    Column("topic_id", "topic_id", default=""),
    Column("content", "content"),
    Column("tags", "tags", tags_to_remote, normalize_tags, ()),
    Column("category", "category", text_or_empty, optional_text),
])

RESOURCE_MAPPER = EntityMapper(Resource, "resources", [
    Column("topic_id", "topic_id", default=""),
    Column("title", "title"),
    Column("url", "url", from_remote=optional_text),
    Column("notes", "notes", from_remote=optional_text),
    Column("tags", "tags", tags_to_remote, normalize_tags, ()),
    Column("type", "type", text_or_empty, optional_text),
])

CATEGORY_MAPPER = EntityMapper(Category, "categories", [
    Column("name", "name"),
    Column("order", "order", int, int, 0),
    Column("is_active", "is_active", bool, bool, True),
])
