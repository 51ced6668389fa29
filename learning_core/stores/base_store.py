# =============================================================================
# learning_core/stores/base_store.py
# Optimistic entity store shared by every collection
# =============================================================================
"""
EntityStore - in-memory collection of one entity kind with remote persistence.

Every mutation is applied locally first, then confirmed remotely:

- add: on remote failure the appended item is removed again.
- update / delete: on remote failure the whole dataset is re-fetched through
  the resync handler installed by the sync coordinator (no field-level undo).

In LOCAL mode (demo, signed out) nothing is sent anywhere. In REMOTE mode a
mutation without a signed-in identity is refused before anything changes.

Failures never raise out of the store (except ``CategoryNotEmptyError``, see
``CategoryStore``): they come back as ``ServiceResult.fail`` and are surfaced
through the notifier.
"""

from __future__ import annotations
from dataclasses import replace
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Generic, Iterable, Iterator, List, Mapping, Optional, Tuple, TypeVar

from learning_core.data.gateway import IdentityProvider, TableGateway
from learning_core.data.mappers import EntityMapper
from learning_core.errors import (
    EntityNotFoundError,
    EntityValidationError,
    LearningTrackerError,
    OwnershipError,
    PersistenceError,
    handle_error,
)
from learning_core.models.entities import editable_fields, new_id, normalize_tags, utc_now
from learning_core.services.base_service import BaseService, ServiceResult
from learning_core.ui.notifications import LogNotifier, Notifier

E = TypeVar("E")

ResyncHandler = Callable[[], Awaitable[Any]]


class StoreMode(str, Enum):
    LOCAL = "local"
    REMOTE = "remote"


# Per operation: login verb, past tense, remote failure phrase, gerund
_OPERATION_TEXT = {
    "add": ("save", "added", "save {noun} to database", "adding"),
    "update": ("update", "updated", "update {noun} in database", "updating"),
    "delete": ("delete", "deleted", "delete {noun} from database", "deleting"),
}


class EntityStore(BaseService, Generic[E]):
    """
    Subclasses set ``label`` (message title), ``noun`` (message body) and
    ``required_fields``, and may override ``clean`` for per-kind validation.
    """

    label: str = "Item"
    noun: str = "item"
    required_fields: Tuple[str, ...] = ()

    def __init__(
        self,
        gateway: TableGateway,
        mapper: EntityMapper,
        identity_provider: IdentityProvider,
        notifier: Optional[Notifier] = None,
    ):
        super().__init__()
        self.gateway = gateway
        self.mapper = mapper
        self.identity_provider = identity_provider
        self.notifier = notifier or LogNotifier()
        self.mode = StoreMode.LOCAL
        self._items: List[E] = []
        self._resync: Optional[ResyncHandler] = None
        self._editable = editable_fields(mapper.entity_type)

    # ── collection ──────────────────────────────────────────────────────────

    @property
    def items(self) -> Tuple[E, ...]:
        return tuple(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[E]:
        return iter(tuple(self._items))

    def get(self, entity_id: str) -> Optional[E]:
        for item in self._items:
            if item.id == entity_id:
                return item
        return None

    def replace_all(self, items: Iterable[E]) -> None:
        """Swap in a fresh dataset (used by the sync coordinator)."""
        self._items = list(items)

    # ── wiring ──────────────────────────────────────────────────────────────

    @property
    def is_remote(self) -> bool:
        return self.mode is StoreMode.REMOTE

    def set_mode(self, mode: StoreMode) -> None:
        if mode is not self.mode:
            self.logger.debug(f"{self.label} store mode: {self.mode.value} -> {mode.value}")
        self.mode = mode

    def set_resync_handler(self, handler: Optional[ResyncHandler]) -> None:
        self._resync = handler

    # ── validation ──────────────────────────────────────────────────────────

    def clean(self, values: Dict[str, Any], creating: bool) -> Dict[str, Any]:
        """Per-kind value normalization. Raise EntityValidationError to reject."""
        return values

    def validate(self, values: Mapping[str, Any], creating: bool) -> Dict[str, Any]:
        values = dict(values)
        unknown = sorted(set(values) - self._editable)
        if unknown:
            raise EntityValidationError(
                f"{self.label} has no editable field '{unknown[0]}'",
                entity=self.label,
                field=unknown[0],
            )

        required = self.required_fields if creating else tuple(f for f in self.required_fields if f in values)
        for name in required:
            value = values.get(name)
            if value is None or (isinstance(value, str) and not value.strip()):
                raise EntityValidationError(
                    f"{self.label} {name.replace('_', ' ')} is required",
                    entity=self.label,
                    field=name,
                )

        return self.clean(values, creating)

    # ── helpers ─────────────────────────────────────────────────────────────

    async def resolve_owner(self, operation: str) -> Optional[str]:
        """Signed-in user id in REMOTE mode, None in LOCAL mode."""
        if not self.is_remote:
            return None
        owner = await self.identity_provider()
        if not owner:
            verb = _OPERATION_TEXT.get(operation, ("update",))[0]
            raise OwnershipError(
                f"You need to be logged in to {verb} data",
                operation=f"{operation}:{self.mapper.table}",
            )
        return owner

    def require(self, entity_id: str) -> E:
        item = self.get(entity_id)
        if item is None:
            raise EntityNotFoundError(
                f"{self.label} not found", entity=self.label, entity_id=entity_id,
            )
        return item

    def fail(self, error: Exception, user_message: Optional[str] = None) -> ServiceResult:
        """Log, notify and convert an error into a failed result."""
        message = handle_error(error, notifier=self.notifier, user_message=user_message)
        result = ServiceResult.from_exception(error)
        result.error = message
        return result

    def remote_failure(self, operation: str, result: ServiceResult) -> PersistenceError:
        phrase = _OPERATION_TEXT[operation][2].format(noun=self.noun)
        return PersistenceError(
            f"Failed to {phrase}",
            table=self.mapper.table,
            operation=operation,
            details={"cause": result.error},
        )

    def unexpected(self, operation: str, error: Exception) -> ServiceResult:
        gerund = _OPERATION_TEXT[operation][3]
        return self.fail(error, user_message=f"An error occurred while {gerund} the {self.noun}")

    def succeed(self, operation: str, data: Any = None) -> ServiceResult:
        self.notifier.success(f"{self.label} {_OPERATION_TEXT[operation][1]} successfully")
        return ServiceResult.ok(data)

    async def call_remote(self, call: Awaitable[ServiceResult]) -> ServiceResult:
        """Await a gateway call; an exception counts as a failed result."""
        try:
            return await call
        except Exception as e:
            self.logger.error(f"{self.mapper.table} gateway raised: {e}", exc_info=True)
            return ServiceResult.from_exception(e)

    async def request_resync(self) -> None:
        if self._resync is None:
            self.logger.warning(f"{self.label} store has no resync handler")
            return
        await self._resync()

    def clean_tags(self, tags: Any) -> Tuple[str, ...]:
        """Tags must be a list of strings; a bare string is rejected."""
        if isinstance(tags, str):
            raise EntityValidationError(
                "Tags must be a list, not a single string",
                entity=self.label,
                field="tags",
            )
        return normalize_tags(tags)

    def build(self, values: Dict[str, Any]) -> E:
        now = utc_now()
        return self.mapper.entity_type(id=new_id(), created_at=now, updated_at=now, **values)

    # ── operations ──────────────────────────────────────────────────────────

    async def add(self, fields: Mapping[str, Any]) -> ServiceResult:
        """
        Create an item.

        Args:
            fields: Editable field values (no id, no timestamps)

        Returns:
            ServiceResult with the created entity as data
        """
        try:
            values = self.validate(fields, creating=True)
            owner = await self.resolve_owner("add")
            entity = self.build(values)
        except LearningTrackerError as e:
            return self.fail(e)
        except Exception as e:
            return self.unexpected("add", e)

        self._items.append(entity)

        if self.is_remote:
            result = await self.call_remote(
                self.gateway.insert(self.mapper.to_insert_row(entity, owner))
            )
            if not result:
                self._items = [i for i in self._items if i.id != entity.id]
                return self.fail(self.remote_failure("add", result))

        return self.succeed("add", entity)

    async def update(self, entity_id: str, updates: Mapping[str, Any]) -> ServiceResult:
        """
        Merge ``updates`` into an item and bump ``updated_at``.

        Returns:
            ServiceResult with the updated entity as data
        """
        try:
            values = self.validate(updates, creating=False)
            owner = await self.resolve_owner("update")
            current = self.require(entity_id)
        except LearningTrackerError as e:
            return self.fail(e)
        except Exception as e:
            return self.unexpected("update", e)

        updated = replace(current, updated_at=utc_now(), **values)
        self._items = [updated if i.id == entity_id else i for i in self._items]

        if self.is_remote:
            result = await self.call_remote(self.gateway.update(
                entity_id,
                self.mapper.to_update_fields(values, updated.updated_at),
                owner,
            ))
            if not result:
                error = self.remote_failure("update", result)
                await self.request_resync()
                return self.fail(error)

        return self.succeed("update", updated)

    async def delete(self, entity_id: str) -> ServiceResult:
        """
        Remove an item.

        Returns:
            ServiceResult with the removed entity as data
        """
        try:
            owner = await self.resolve_owner("delete")
            current = self.require(entity_id)
        except LearningTrackerError as e:
            return self.fail(e)
        except Exception as e:
            return self.unexpected("delete", e)

        self.discard([entity_id])

        if self.is_remote:
            result = await self.call_remote(self.gateway.delete(entity_id, owner))
            if not result:
                error = self.remote_failure("delete", result)
                await self.request_resync()
                return self.fail(error)

        return self.succeed("delete", current)

    def discard(self, entity_ids: Iterable[str]) -> List[E]:
        """Drop items locally without touching the backend. Returns what was dropped."""
        ids = set(entity_ids)
        dropped = [i for i in self._items if i.id in ids]
        if dropped:
            self._items = [i for i in self._items if i.id not in ids]
        return dropped
