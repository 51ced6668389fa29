# =============================================================================
# learning_core/data/supabase_client.py
# Supabase client and per-table persistence service
# =============================================================================

from __future__ import annotations
from typing import Any, Dict, List, Optional

from supabase import AsyncClient, acreate_client

from learning_core.config import SupabaseConfig, load_supabase_config
from learning_core.data.gateway import ChangeCallback
from learning_core.errors import PersistenceError
from learning_core.logging import get_logger
from learning_core.services.base_service import ServiceResult

logger = get_logger(__name__)

# Supabase caps a single select at 1000 rows
BATCH_SIZE = 1000

# Column each table is listed by
TABLE_ORDER = {
    "categories": "order",
}


async def create_supabase_client(config: Optional[SupabaseConfig] = None) -> AsyncClient:
    """
    Create the async Supabase client.

    The async client is required for realtime channels.
    """
    config = config or load_supabase_config()
    client = await acreate_client(config.url, config.key)
    logger.info(f"Supabase client created for {config.url}")
    return client


def _error_message(e: Exception) -> str:
    # postgrest APIError carries .message; transport errors only str()
    return getattr(e, "message", None) or str(e) or e.__class__.__name__


class SupabaseSubscription:
    """Handle to a realtime channel for one table."""

    def __init__(self, client: AsyncClient, channel: Any, table: str):
        self._client = client
        self._channel = channel
        self.table = table
        self.closed = False

    async def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        await self._client.remove_channel(self._channel)
        logger.debug(f"Realtime channel for {self.table} removed")


class SupabaseTableService:
    """
    Persistence service for a single Supabase table.

    Every query is scoped to the owning user through the ``user_id`` column.
    """

    def __init__(self, client: AsyncClient, table: str, schema: str = "public"):
        self.client = client
        self.table = table
        self.schema = schema
        self.order_by = TABLE_ORDER.get(table, "created_at")

    def _failure(self, operation: str, e: Exception) -> ServiceResult:
        error = PersistenceError(
            f"{operation} on {self.table} failed: {_error_message(e)}",
            table=self.table,
            operation=operation,
        )
        logger.error(str(error))
        return ServiceResult.from_exception(error)

    async def list(self, owner_id: str) -> ServiceResult:
        """
        Fetch ALL rows owned by ``owner_id`` (pages past the 1000 row limit).

        Returns:
            ServiceResult with a list of row dicts
        """
        try:
            all_rows: List[Dict[str, Any]] = []
            offset = 0

            while True:
                response = await (
                    self.client.table(self.table)
                    .select("*")
                    .eq("user_id", owner_id)
                    .order(self.order_by)
                    .range(offset, offset + BATCH_SIZE - 1)
                    .execute()
                )

                if not response.data:
                    break
                all_rows.extend(response.data)
                # Fewer than a full page means we reached the end
                if len(response.data) < BATCH_SIZE:
                    break
                offset += BATCH_SIZE

            return ServiceResult.ok(all_rows)

        except Exception as e:
            return self._failure("select", e)

    async def insert(self, row: Dict[str, Any]) -> ServiceResult:
        try:
            response = await self.client.table(self.table).insert(row).execute()
            return ServiceResult.ok(response.data)
        except Exception as e:
            return self._failure("insert", e)

    async def update(self, entity_id: str, fields: Dict[str, Any], owner_id: str) -> ServiceResult:
        try:
            response = await (
                self.client.table(self.table)
                .update(fields)
                .eq("id", entity_id)
                .eq("user_id", owner_id)
                .execute()
            )
            return ServiceResult.ok(response.data)
        except Exception as e:
            return self._failure("update", e)

    async def delete(self, entity_id: str, owner_id: str) -> ServiceResult:
        try:
            response = await (
                self.client.table(self.table)
                .delete()
                .eq("id", entity_id)
                .eq("user_id", owner_id)
                .execute()
            )
            return ServiceResult.ok(response.data)
        except Exception as e:
            return self._failure("delete", e)

    async def subscribe_to_changes(self, on_change: ChangeCallback) -> SupabaseSubscription:
        """
        Listen for any insert/update/delete on the table.

        The payload is ignored: the caller re-fetches wholesale.
        """
        channel = self.client.channel(f"{self.schema}:{self.table}")
        channel.on_postgres_changes(
            "*",
            schema=self.schema,
            table=self.table,
            callback=lambda payload: on_change(),
        )
        await channel.subscribe()
        logger.info(f"Subscribed to realtime changes on {self.table}")
        return SupabaseSubscription(self.client, channel, self.table)


class SupabaseBackend:
    """Hands out one ``SupabaseTableService`` per table."""

    def __init__(self, client: AsyncClient, schema: str = "public"):
        self.client = client
        self.schema = schema
        self._services: Dict[str, SupabaseTableService] = {}

    def table(self, name: str) -> SupabaseTableService:
        if name not in self._services:
            self._services[name] = SupabaseTableService(self.client, name, self.schema)
        return self._services[name]
