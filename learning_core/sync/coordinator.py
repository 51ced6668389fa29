# =============================================================================
# learning_core/sync/coordinator.py
# Chooses the data source from auth state and keeps the stores in sync
# =============================================================================
"""
DataSyncCoordinator - decides where the five collections come from.

    auth loading             -> nothing happens yet (is_loading stays True)
    demo mode                -> seed data, stores in LOCAL mode
    signed out               -> seed data (preview), stores in LOCAL mode
    signed in                -> bulk fetch for the user, stores in REMOTE mode,
                                realtime subscriptions that re-fetch on change

Only one bulk fetch runs at a time; a request that arrives while one is in
flight is dropped. A failed bulk fetch falls back to the seed for all five
collections and sets a page-level error.

Usage:
    coordinator = DataSyncCoordinator(stores, seed=default_seed())
    auth.register_listener(coordinator.handle_auth_change)
"""

from __future__ import annotations
import asyncio
from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Callable, Dict, Iterator, List, Optional, Set, Tuple

from learning_core.auth.session import AuthState
from learning_core.config import SyncConfig
from learning_core.data.gateway import Subscription
from learning_core.errors import ErrorContext, LearningTrackerError, SyncError, handle_error
from learning_core.logging import LogContext
from learning_core.models.entities import utc_now
from learning_core.services.base_service import BaseService, ServiceResult
from learning_core.stores import (
    CategoryStore,
    EntityStore,
    JournalStore,
    MethodStore,
    ResourceStore,
    StoreMode,
    TopicStore,
)
from .seed import SeedDataset, default_seed

FETCH_FAILED_MESSAGE = "Failed to load data. Using local data instead."

KINDS = ("topics", "methods", "journals", "resources", "categories")


class DataSource(str, Enum):
    NONE = "none"
    SEED = "seed"
    REMOTE = "remote"


@dataclass
class SyncState:
    """Observable state of the coordinator."""
    is_loading: bool = True
    data_fetched: bool = False
    error: Optional[str] = None
    source: DataSource = DataSource.NONE
    owner_id: Optional[str] = None
    is_fetching: bool = False
    last_synced: Optional[datetime] = None

    def to_dict(self) -> Dict[str, object]:
        return {
            "is_loading": self.is_loading,
            "data_fetched": self.data_fetched,
            "error": self.error,
            "source": self.source.value,
            "owner_id": self.owner_id,
            "is_fetching": self.is_fetching,
            "last_synced": self.last_synced.isoformat() if self.last_synced else None,
        }


@dataclass
class StoreSet:
    """The five stores, addressable by kind."""
    topics: TopicStore
    methods: MethodStore
    journals: JournalStore
    resources: ResourceStore
    categories: CategoryStore

    def items(self) -> Iterator[Tuple[str, EntityStore]]:
        for kind in KINDS:
            yield kind, getattr(self, kind)


class DataSyncCoordinator(BaseService):
    """
    Owns the transition between seed and remote data.

    Stores call back into ``fetch_data`` (via their resync handler) when a
    remote update or delete fails.
    """

    def __init__(
        self,
        stores: StoreSet,
        seed: Optional[SeedDataset] = None,
        config: Optional[SyncConfig] = None,
    ):
        super().__init__()
        self.stores = stores
        self.seed = seed if seed is not None else default_seed()
        self.config = config or SyncConfig()
        self.state = SyncState()

        self._auth = AuthState()
        self._closed = False
        self._subscriptions: List[Subscription] = []
        self._subscribed_owner: Optional[str] = None
        self._pending: Set[asyncio.Task] = set()
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._callbacks: List[Callable[[SyncState], None]] = []

        for _, store in self.stores.items():
            store.set_resync_handler(self.fetch_data)

    # ── observers ───────────────────────────────────────────────────────────

    def register_callback(self, callback: Callable[[SyncState], None]) -> None:
        """Register a callback invoked with the state after every change."""
        if callback not in self._callbacks:
            self._callbacks.append(callback)

    def unregister_callback(self, callback: Callable[[SyncState], None]) -> None:
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def _notify_callbacks(self) -> None:
        snapshot = replace(self.state)
        for callback in list(self._callbacks):
            try:
                callback(snapshot)
            except Exception as e:
                self.logger.error(f"Error in sync callback: {e}")

    @property
    def subscription_count(self) -> int:
        return len(self._subscriptions)

    # ── auth driven transitions ─────────────────────────────────────────────

    async def handle_auth_change(self, auth: AuthState) -> None:
        """Re-evaluate the data source for a new auth state."""
        if self._closed:
            return
        self._auth = auth

        if auth.is_loading:
            self.state.is_loading = True
            self._notify_callbacks()
            return

        if auth.is_demo_mode:
            await self._release_subscriptions()
            self.populate_from_seed("demo mode")
            return

        if auth.session is None:
            await self._release_subscriptions()
            self.populate_from_seed("signed out")
            return

        owner = auth.user_id
        if self._subscribed_owner is not None and self._subscribed_owner != owner:
            await self._release_subscriptions()

        self._set_store_mode(StoreMode.REMOTE)
        await self.fetch_data()

        if (
            self.config.realtime_enabled
            and not self._closed
            and self._subscribed_owner is None
            and self._is_current_remote_owner(owner)
        ):
            await self._subscribe(owner)

    def populate_from_seed(self, reason: str = "seed") -> None:
        """Load the seed into every store and switch them to LOCAL mode."""
        self.logger.info(f"Using local seed data ({reason})")
        self._set_store_mode(StoreMode.LOCAL)
        for kind, store in self.stores.items():
            store.replace_all(getattr(self.seed, kind))
        self.state.is_loading = False
        self.state.data_fetched = True
        self.state.error = None
        self.state.source = DataSource.SEED
        self.state.owner_id = None
        self._notify_callbacks()

    # ── bulk fetch ──────────────────────────────────────────────────────────

    async def fetch_data(self) -> ServiceResult:
        """
        Replace every collection with the signed-in user's rows.

        Returns:
            ServiceResult with per-kind counts as data. A skipped request
            (already fetching, or not signed in) succeeds with
            ``metadata["skipped"]`` set.
        """
        if self._closed:
            return ServiceResult.ok(metadata={"skipped": "closed"})
        if self.state.is_fetching:
            self.logger.debug("Fetch already in progress, request dropped")
            return ServiceResult.ok(metadata={"skipped": "in_progress"})

        auth = self._auth
        if auth.is_loading or auth.is_demo_mode or auth.session is None:
            return ServiceResult.ok(metadata={"skipped": "not_signed_in"})

        owner = auth.user_id
        self.state.is_fetching = True
        self.state.is_loading = True
        self.state.error = None
        self._notify_callbacks()

        fetched: Dict[str, list] = {}
        failure: Optional[Exception] = None
        try:
            with LogContext(self.logger, f"Fetching data for user {owner}"):
                for kind, store in self.stores.items():
                    result = await store.call_remote(store.gateway.list(owner))
                    if not result:
                        raise SyncError(
                            f"Failed to load {store.mapper.table}: {result.error}",
                            table=store.mapper.table,
                        )
                    fetched[kind] = store.mapper.from_rows(result.data)
        except Exception as e:
            failure = e
        finally:
            self.state.is_fetching = False

        if self._closed:
            return ServiceResult.ok(metadata={"skipped": "closed"})

        if not self._is_current_remote_owner(owner):
            # Identity changed while the request was in flight
            self.logger.info(f"Discarding fetch result for {owner}: identity changed")
            self.state.is_loading = False
            self._notify_callbacks()
            if self._auth.session is not None and not self._auth.is_demo_mode:
                await self.handle_auth_change(self._auth)
            return ServiceResult.ok(metadata={"skipped": "stale"})

        if failure is not None:
            return self._fall_back(failure)

        counts = {}
        for kind, store in self.stores.items():
            items = fetched[kind]
            if not items and self.config.seed_on_empty:
                items = list(getattr(self.seed, kind))
            store.replace_all(items)
            counts[kind] = len(store)

        self.state.is_loading = False
        self.state.data_fetched = True
        self.state.source = DataSource.REMOTE
        self.state.owner_id = owner
        self.state.last_synced = utc_now()
        self._notify_callbacks()
        self.logger.info(f"Data fetched for user {owner}: {counts}")
        return ServiceResult.ok(counts)

    def _fall_back(self, error: Exception) -> ServiceResult:
        if not isinstance(error, LearningTrackerError):
            error = SyncError(f"Unexpected error while fetching data: {error}")
        handle_error(error)

        for kind, store in self.stores.items():
            store.replace_all(getattr(self.seed, kind))
        self.state.is_loading = False
        self.state.error = FETCH_FAILED_MESSAGE
        self.state.source = DataSource.SEED
        self._notify_callbacks()

        result = ServiceResult.from_exception(error)
        result.error = FETCH_FAILED_MESSAGE
        return result

    # ── realtime ────────────────────────────────────────────────────────────

    async def _subscribe(self, owner: str) -> None:
        self._loop = asyncio.get_running_loop()
        with ErrorContext("Subscribing to realtime changes") as ctx:
            for _, store in self.stores.items():
                subscription = await store.gateway.subscribe_to_changes(self._on_remote_change)
                self._subscriptions.append(subscription)
            self._subscribed_owner = owner
            self.logger.info(f"Subscribed to {len(self._subscriptions)} change channel(s)")
        if ctx.error is not None:
            await self._release_subscriptions()

    async def _release_subscriptions(self) -> None:
        subscriptions, self._subscriptions = self._subscriptions, []
        self._subscribed_owner = None
        for subscription in subscriptions:
            try:
                await subscription.close()
            except Exception as e:
                self.logger.warning(f"Failed to close subscription for {subscription.table}: {e}")
        if subscriptions:
            self.logger.info(f"Released {len(subscriptions)} change channel(s)")

    def _on_remote_change(self) -> None:
        """Change notification from any table: re-fetch everything."""
        if self._closed or self._loop is None:
            return
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None

        if running is self._loop:
            self._track(self._loop.create_task(self.fetch_data()))
        else:
            self._loop.call_soon_threadsafe(
                lambda: self._track(self._loop.create_task(self.fetch_data()))
            )

    def _track(self, task: asyncio.Task) -> None:
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def drain(self) -> None:
        """Wait for re-fetches triggered by change notifications."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    # ── teardown ────────────────────────────────────────────────────────────

    def reopen(self) -> None:
        """Accept auth changes again after ``close()``."""
        if self._closed:
            self._closed = False
            self.logger.info("Sync coordinator reopened")

    async def close(self) -> None:
        """Release subscriptions; results arriving afterwards are ignored."""
        self._closed = True
        await self._release_subscriptions()
        self._callbacks.clear()

    # ── helpers ─────────────────────────────────────────────────────────────

    def _set_store_mode(self, mode: StoreMode) -> None:
        for _, store in self.stores.items():
            store.set_mode(mode)

    def _is_current_remote_owner(self, owner: Optional[str]) -> bool:
        auth = self._auth
        return (
            not auth.is_loading
            and not auth.is_demo_mode
            and auth.session is not None
            and auth.user_id == owner
        )
