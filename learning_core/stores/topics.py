# =============================================================================
# learning_core/stores/topics.py
# Topic store with cascading delete of methods, journal entries and resources
# =============================================================================

from __future__ import annotations
from typing import Any, Dict, List, Optional, Tuple

from learning_core.data.mappers import TOPIC_MAPPER, parse_date
from learning_core.errors import EntityValidationError, LearningTrackerError, PersistenceError
from learning_core.models.entities import Topic, TopicStatus, clamp_progress
from learning_core.services.base_service import ServiceResult
from .base_store import EntityStore


class TopicStore(EntityStore[Topic]):
    label = "Topic"
    noun = "topic"
    required_fields = ("title", "category_id")

    def __init__(self, gateway, identity_provider, notifier=None, mapper=TOPIC_MAPPER):
        super().__init__(gateway, mapper, identity_provider, notifier)
        self._children: Tuple[EntityStore, ...] = ()

    def attach_children(self, *stores: EntityStore) -> None:
        """Stores whose items carry a ``topic_id`` and go away with their topic."""
        self._children = tuple(stores)

    def count_in_category(self, category_id: str) -> int:
        return sum(1 for t in self._items if t.category_id == category_id)

    def clean(self, values: Dict[str, Any], creating: bool) -> Dict[str, Any]:
        if "title" in values:
            values["title"] = str(values["title"]).strip()
        if "description" in values:
            values["description"] = values["description"] or ""
        if "category_id" in values:
            values["category_id"] = str(values["category_id"])

        if "status" in values:
            try:
                values["status"] = TopicStatus.parse(values["status"])
            except ValueError as e:
                raise EntityValidationError(str(e), entity=self.label, field="status")

        if "progress" in values:
            try:
                values["progress"] = clamp_progress(values["progress"])
            except (TypeError, ValueError):
                raise EntityValidationError(
                    f"Progress must be a number, got {values['progress']!r}",
                    entity=self.label,
                    field="progress",
                )

        for name in ("start_date", "target_end_date"):
            if name in values:
                try:
                    values[name] = parse_date(values[name])
                except ValueError:
                    raise EntityValidationError(
                        f"Invalid date for {name}: {values[name]!r}", entity=self.label, field=name,
                    )

        start, end = values.get("start_date"), values.get("target_end_date")
        if start and end and end < start:
            raise EntityValidationError(
                "Target end date cannot be before the start date",
                entity=self.label,
                field="target_end_date",
            )
        return values

    async def delete(self, entity_id: str) -> ServiceResult:
        """
        Remove a topic and, in the same step, every method, journal entry and
        resource pointing at it. Remote deletes follow: the topic first, then
        each child. Any remote failure re-fetches everything.
        """
        try:
            owner = await self.resolve_owner("delete")
            current = self.require(entity_id)
        except LearningTrackerError as e:
            return self.fail(e)
        except Exception as e:
            return self.unexpected("delete", e)

        self.discard([entity_id])
        removed: List[Tuple[EntityStore, list]] = [
            (store, store.discard([c.id for c in store if c.topic_id == entity_id]))
            for store in self._children
        ]
        child_count = sum(len(dropped) for _, dropped in removed)
        self.logger.info(f"Deleted topic {entity_id} with {child_count} dependent item(s)")

        if self.is_remote:
            error = await self._delete_remote(entity_id, owner, removed)
            if error is not None:
                await self.request_resync()
                return self.fail(error)

        result = self.succeed("delete", current)
        result.metadata = {"children_removed": child_count}
        return result

    async def _delete_remote(
        self,
        entity_id: str,
        owner: str,
        removed: List[Tuple[EntityStore, list]],
    ) -> Optional[PersistenceError]:
        result = await self.call_remote(self.gateway.delete(entity_id, owner))
        if not result:
            return self.remote_failure("delete", result)

        failed = []
        for store, dropped in removed:
            for child in dropped:
                child_result = await store.call_remote(store.gateway.delete(child.id, owner))
                if not child_result:
                    failed.append(child.id)

        if failed:
            return PersistenceError(
                f"Failed to delete {len(failed)} item(s) belonging to the topic",
                table=self.mapper.table,
                operation="delete",
                details={"child_ids": failed},
            )
        return None
