# =============================================================================
# learning_core/data/gateway.py
# Persistence + change-notification contract consumed by stores and sync
# =============================================================================

from __future__ import annotations
from typing import Any, Awaitable, Callable, Dict, Optional, Protocol

from learning_core.services.base_service import ServiceResult

# Called with no arguments on any insert/update/delete in the table
ChangeCallback = Callable[[], None]

# Async lookup of the signed-in user id, evaluated per call
IdentityProvider = Callable[[], Awaitable[Optional[str]]]


class Subscription(Protocol):
    table: str

    async def close(self) -> None: ...


class TableGateway(Protocol):
    """
    One remote table. Mutations report failure through ``ServiceResult``
    rather than raising, so the caller decides between rollback and re-fetch.
    """

    table: str

    async def list(self, owner_id: str) -> ServiceResult: ...

    async def insert(self, row: Dict[str, Any]) -> ServiceResult: ...

    async def update(self, entity_id: str, fields: Dict[str, Any], owner_id: str) -> ServiceResult: ...

    async def delete(self, entity_id: str, owner_id: str) -> ServiceResult: ...

    async def subscribe_to_changes(self, on_change: ChangeCallback) -> Subscription: ...


class Backend(Protocol):
    def table(self, name: str) -> TableGateway: ...
