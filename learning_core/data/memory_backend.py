# =============================================================================
# learning_core/data/memory_backend.py
# In-memory implementation of the persistence contract
# =============================================================================
"""
InMemoryBackend - a process-local stand-in for Supabase.

Mirrors the table semantics the stores rely on (owner scoping, id-keyed
update/delete, change notifications) and adds hooks to drive edge cases:

- ``fail_next(operation)`` makes the next insert/update/delete/select report
  failure.
- ``gate`` (an ``asyncio.Event``) holds ``list`` calls until it is set, to
  keep a bulk fetch in flight.
- ``emit_change()`` fires subscribers the way a realtime channel would.
"""

from __future__ import annotations
import asyncio
import copy
from collections import Counter
from typing import Any, Dict, List, Optional, Tuple

from learning_core.data.gateway import ChangeCallback
from learning_core.errors import PersistenceError
from learning_core.logging import get_logger
from learning_core.services.base_service import ServiceResult

logger = get_logger(__name__)

OPERATIONS = ("select", "insert", "update", "delete")


class InMemorySubscription:
    def __init__(self, table: InMemoryTable, callback: ChangeCallback):
        self._table = table
        self._callback = callback
        self.table = table.table
        self.closed = False

    async def close(self) -> None:
        if not self.closed:
            self.closed = True
            self._table._subscribers.remove(self._callback)


class InMemoryTable:
    def __init__(self, table: str, echo_changes: bool = False):
        self.table = table
        self.echo_changes = echo_changes
        self.rows: Dict[str, Dict[str, Any]] = {}
        self.calls: List[Tuple[str, Any]] = []
        self.gate: Optional[asyncio.Event] = None
        self._failures: Counter = Counter()
        self._subscribers: List[ChangeCallback] = []

    # ── test hooks ──────────────────────────────────────────────────────────

    def fail_next(self, operation: str, times: int = 1) -> None:
        if operation not in OPERATIONS:
            raise ValueError(f"Unknown operation: {operation}")
        self._failures[operation] += times

    def emit_change(self) -> None:
        for callback in list(self._subscribers):
            callback()

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def seed_rows(self, rows: List[Dict[str, Any]]) -> None:
        for row in rows:
            self.rows[str(row["id"])] = copy.deepcopy(row)

    def calls_for(self, operation: str) -> List[Any]:
        return [args for op, args in self.calls if op == operation]

    # ── contract ────────────────────────────────────────────────────────────

    def _should_fail(self, operation: str) -> bool:
        if self._failures[operation] > 0:
            self._failures[operation] -= 1
            return True
        return False

    def _failure(self, operation: str) -> ServiceResult:
        error = PersistenceError(
            f"{operation} on {self.table} failed", table=self.table, operation=operation,
        )
        logger.warning(str(error))
        return ServiceResult.from_exception(error)

    def _changed(self) -> None:
        if self.echo_changes:
            self.emit_change()

    async def list(self, owner_id: str) -> ServiceResult:
        self.calls.append(("select", owner_id))
        if self.gate is not None:
            await self.gate.wait()
        if self._should_fail("select"):
            return self._failure("select")
        rows = [copy.deepcopy(r) for r in self.rows.values() if r.get("user_id") == owner_id]
        if self.table == "categories":
            rows.sort(key=lambda r: r.get("order", 0))
        return ServiceResult.ok(rows)

    async def insert(self, row: Dict[str, Any]) -> ServiceResult:
        self.calls.append(("insert", copy.deepcopy(row)))
        await asyncio.sleep(0)
        if self._should_fail("insert"):
            return self._failure("insert")
        self.rows[str(row["id"])] = copy.deepcopy(row)
        self._changed()
        return ServiceResult.ok([row])

    async def update(self, entity_id: str, fields: Dict[str, Any], owner_id: str) -> ServiceResult:
        self.calls.append(("update", (entity_id, copy.deepcopy(fields), owner_id)))
        await asyncio.sleep(0)
        if self._should_fail("update"):
            return self._failure("update")
        row = self.rows.get(entity_id)
        if row is None or row.get("user_id") != owner_id:
            # Same as a filtered UPDATE that matches nothing
            return ServiceResult.ok([])
        row.update(copy.deepcopy(fields))
        self._changed()
        return ServiceResult.ok([copy.deepcopy(row)])

    async def delete(self, entity_id: str, owner_id: str) -> ServiceResult:
        self.calls.append(("delete", (entity_id, owner_id)))
        await asyncio.sleep(0)
        if self._should_fail("delete"):
            return self._failure("delete")
        row = self.rows.get(entity_id)
        if row is None or row.get("user_id") != owner_id:
            return ServiceResult.ok([])
        del self.rows[entity_id]
        self._changed()
        return ServiceResult.ok([row])

    async def subscribe_to_changes(self, on_change: ChangeCallback) -> InMemorySubscription:
        self._subscribers.append(on_change)
        return InMemorySubscription(self, on_change)


class InMemoryBackend:
    def __init__(self, echo_changes: bool = False):
        self.echo_changes = echo_changes
        self._tables: Dict[str, InMemoryTable] = {}

    def table(self, name: str) -> InMemoryTable:
        if name not in self._tables:
            self._tables[name] = InMemoryTable(name, echo_changes=self.echo_changes)
        return self._tables[name]
