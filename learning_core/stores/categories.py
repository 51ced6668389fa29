# =============================================================================
# learning_core/stores/categories.py
# Category store: dense ordering, activation, guarded delete
# =============================================================================
"""
Categories are kept in display order and their ``order`` values are always
0..N-1 without gaps. Adding appends at the end, deleting closes the gap,
reordering swaps neighbours.

A category that topics still point at cannot be deleted; that is reported by
raising ``CategoryNotEmptyError`` so the caller can keep its dialog open.
"""

from __future__ import annotations
from dataclasses import replace
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple

from learning_core.data.mappers import CATEGORY_MAPPER
from learning_core.errors import (
    CategoryNotEmptyError,
    EntityValidationError,
    LearningTrackerError,
    PersistenceError,
)
from learning_core.models.entities import Category, utc_now
from learning_core.services.base_service import ServiceResult
from .base_store import EntityStore
from .topics import TopicStore

DIRECTIONS = ("up", "down")


def renumber(categories: Iterable[Category], now: Optional[datetime] = None) -> Tuple[List[Category], List[Category]]:
    """
    Give every category its list index as ``order``.

    Returns:
        (all categories, only those whose order changed)
    """
    result, changed = [], []
    for index, category in enumerate(categories):
        if category.order != index:
            category = replace(category, order=index, updated_at=now or category.updated_at)
            changed.append(category)
        result.append(category)
    return result, changed


class CategoryStore(EntityStore[Category]):
    label = "Category"
    noun = "category"
    required_fields = ("name",)

    def __init__(self, gateway, identity_provider, notifier=None, topics: Optional[TopicStore] = None, mapper=CATEGORY_MAPPER):
        super().__init__(gateway, mapper, identity_provider, notifier)
        self.topics = topics

    def replace_all(self, items: Iterable[Category]) -> None:
        ordered = sorted(items, key=lambda c: c.order)
        self._items, changed = renumber(ordered)
        if changed:
            self.logger.info(f"Closed {len(changed)} gap(s) in category order")

    @property
    def active(self) -> Tuple[Category, ...]:
        return tuple(c for c in self._items if c.is_active)

    def clean(self, values: Dict[str, Any], creating: bool) -> Dict[str, Any]:
        if "name" in values:
            values["name"] = str(values["name"]).strip()
        if creating:
            # Position is assigned in build(), after the owner lookup
            values.pop("order", None)
            values["is_active"] = bool(values.get("is_active", True))
        elif "order" in values:
            raise EntityValidationError(
                "Category order can only be changed by reordering",
                entity=self.label,
                field="order",
            )
        elif "is_active" in values:
            values["is_active"] = bool(values["is_active"])
        return values

    def build(self, values: Dict[str, Any]) -> Category:
        # No await between this and the append in add()
        return super().build(dict(values, order=len(self._items)))

    # ── operations ──────────────────────────────────────────────────────────

    async def add(self, fields: Dict[str, Any]) -> ServiceResult:
        result = await super().add(fields)
        if not result and self.is_remote:
            await self._close_gaps()
        return result

    async def add_category(self, name: str) -> ServiceResult:
        """Append a new active category at the end of the list."""
        return await self.add({"name": name})

    async def update_category(self, category_id: str, updates: Dict[str, Any]) -> ServiceResult:
        """Rename or (de)activate a category."""
        return await self.update(category_id, updates)

    async def toggle_category_active(self, category_id: str) -> ServiceResult:
        """Flip ``is_active``. Topics in the category are left alone."""
        try:
            current = self.require(category_id)
        except LearningTrackerError as e:
            return self.fail(e)
        return await self.update(category_id, {"is_active": not current.is_active})

    async def reorder_category(self, category_id: str, direction: str) -> ServiceResult:
        """
        Move a category one place up or down.

        Moving the first category up or the last one down changes nothing.
        Only the two swapped categories are written to the backend.

        Args:
            category_id: Category to move
            direction: "up" or "down"

        Returns:
            ServiceResult with the ordered categories as data
        """
        try:
            if direction not in DIRECTIONS:
                raise EntityValidationError(
                    f"Direction must be 'up' or 'down', got {direction!r}",
                    entity=self.label,
                    field="order",
                )
            owner = await self.resolve_owner("update")
            current = self.require(category_id)
        except LearningTrackerError as e:
            return self.fail(e)

        index = self._items.index(current)
        swap = index - 1 if direction == "up" else index + 1
        if swap < 0 or swap >= len(self._items):
            return ServiceResult.ok(self.items, metadata={"moved": False})

        items = list(self._items)
        items[index], items[swap] = items[swap], items[index]
        self._items, _ = renumber(items, utc_now())

        if self.is_remote:
            swapped = (self._items[index], self._items[swap])
            failed = await self._persist_orders(swapped, owner)
            if failed:
                await self.request_resync()
                return self.fail(PersistenceError(
                    "Failed to reorder categories in database",
                    table=self.mapper.table,
                    operation="update",
                    details={"category_ids": failed},
                ))

        self.notifier.success("Category order updated")
        return ServiceResult.ok(self.items, metadata={"moved": True})

    async def delete_category(self, category_id: str) -> ServiceResult:
        """
        Delete a category and close the gap in the ordering.

        Raises:
            CategoryNotEmptyError: if any topic still references the category.
                Nothing is changed in that case.
        """
        topic_count = self.topics.count_in_category(category_id) if self.topics is not None else 0
        if topic_count:
            self.logger.info(f"Refusing to delete category {category_id}: {topic_count} topic(s) reference it")
            raise CategoryNotEmptyError(category_id=category_id, topic_count=topic_count)

        try:
            owner = await self.resolve_owner("delete")
            current = self.require(category_id)
        except LearningTrackerError as e:
            return self.fail(e)

        self.discard([category_id])
        self._items, changed = renumber(self._items, utc_now())

        if self.is_remote:
            result = await self.call_remote(self.gateway.delete(category_id, owner))
            if not result:
                error = self.remote_failure("delete", result)
                await self.request_resync()
                return self.fail(error)

            failed = await self._persist_orders(changed, owner)
            if failed:
                await self.request_resync()
                return self.fail(PersistenceError(
                    "Failed to update category order in database",
                    table=self.mapper.table,
                    operation="update",
                    details={"category_ids": failed},
                ))

        result = self.succeed("delete", current)
        result.metadata = {"renumbered": len(changed)}
        return result

    async def delete(self, entity_id: str) -> ServiceResult:
        return await self.delete_category(entity_id)

    async def _close_gaps(self) -> None:
        """Renumber after a rolled-back add and write the shifted orders."""
        self._items, changed = renumber(self._items, utc_now())
        if not changed:
            return
        owner = await self.identity_provider()
        failed = await self._persist_orders(changed, owner) if owner else [c.id for c in changed]
        if failed:
            self.logger.warning(f"Failed to persist order for {len(failed)} category(ies), re-fetching")
            await self.request_resync()

    async def _persist_orders(self, categories: Iterable[Category], owner: str) -> List[str]:
        """Write ``order`` for each category. Returns ids whose update failed."""
        failed = []
        for category in categories:
            result = await self.call_remote(self.gateway.update(
                category.id,
                self.mapper.to_update_fields({"order": category.order}, category.updated_at),
                owner,
            ))
            if not result:
                failed.append(category.id)
        return failed
