# =============================================================================
# learning_core/services/learning_context.py
# Aggregate facade over stores, sync coordinator and auth state
# =============================================================================
"""
LearningContext - the single object presentation code talks to.

Usage:
    ctx = LearningContext(InMemoryBackend(), AuthStateManager())
    await ctx.start()
    await ctx.add_category("Languages")
    await ctx.add_topic({"title": "Spanish", "category_id": ctx.categories[0].id})
    ...
    await ctx.close()

    # Against Supabase
    ctx = await LearningContext.from_supabase()
"""

from __future__ import annotations
from typing import Any, Dict, Mapping, Optional, Tuple

from learning_core.auth.session import AuthStateManager, SupabaseAuthBridge
from learning_core.config import TABLES, SupabaseConfig, SyncConfig, load_supabase_config
from learning_core.data.gateway import Backend, IdentityProvider
from learning_core.models.entities import Category, JournalEntry, LearningMethod, Resource, Topic
from learning_core.stores import CategoryStore, JournalStore, MethodStore, ResourceStore, TopicStore
from learning_core.sync.coordinator import DataSyncCoordinator, StoreSet, SyncState
from learning_core.sync.seed import SeedDataset
from learning_core.ui.notifications import LogNotifier, Notifier
from .base_service import BaseService, ServiceResult


class LearningContext(BaseService):
    """
    Composes the five entity stores, the sync coordinator and the auth
    manager, and exposes their collections, flags and mutations.
    """

    def __init__(
        self,
        backend: Backend,
        auth: AuthStateManager,
        identity_provider: Optional[IdentityProvider] = None,
        notifier: Optional[Notifier] = None,
        seed: Optional[SeedDataset] = None,
        sync_config: Optional[SyncConfig] = None,
        auth_bridge: Optional[SupabaseAuthBridge] = None,
    ):
        super().__init__()
        self.backend = backend
        self.auth = auth
        self.auth_bridge = auth_bridge
        self.notifier = notifier or LogNotifier()
        identity = identity_provider or auth.get_current_identity

        topics = TopicStore(backend.table(TABLES["topics"]), identity, self.notifier)
        methods = MethodStore(backend.table(TABLES["methods"]), identity, self.notifier)
        journals = JournalStore(backend.table(TABLES["journals"]), identity, self.notifier)
        resources = ResourceStore(backend.table(TABLES["resources"]), identity, self.notifier)
        categories = CategoryStore(backend.table(TABLES["categories"]), identity, self.notifier, topics=topics)
        topics.attach_children(methods, journals, resources)

        self.stores = StoreSet(topics, methods, journals, resources, categories)
        self.sync = DataSyncCoordinator(self.stores, seed=seed, config=sync_config)
        self._started = False

    @classmethod
    async def from_supabase(
        cls,
        config: Optional[SupabaseConfig] = None,
        notifier: Optional[Notifier] = None,
        sync_config: Optional[SyncConfig] = None,
        seed: Optional[SeedDataset] = None,
    ) -> LearningContext:
        """Build a context backed by Supabase tables and Supabase Auth."""
        from learning_core.data.supabase_client import SupabaseBackend, create_supabase_client

        config = config or load_supabase_config()
        client = await create_supabase_client(config)
        auth = AuthStateManager()
        bridge = SupabaseAuthBridge(client, auth)
        return cls(
            SupabaseBackend(client, schema=config.schema),
            auth,
            identity_provider=bridge.get_current_identity,
            notifier=notifier,
            seed=seed,
            sync_config=sync_config,
            auth_bridge=bridge,
        )

    # ── lifecycle ───────────────────────────────────────────────────────────

    async def start(self) -> None:
        """Populate the stores for the current auth state and follow changes.

        A closed context can be started again.
        """
        if self._started:
            return
        self._started = True
        self.sync.reopen()
        self.auth.register_listener(self.sync.handle_auth_change)
        if self.auth_bridge is not None:
            # The initial session reaches the coordinator through the listener
            await self.auth_bridge.start()
        else:
            await self.sync.handle_auth_change(self.auth.state)
        self.logger.info("Learning context started")

    async def close(self) -> None:
        self.auth.unregister_listener(self.sync.handle_auth_change)
        if self.auth_bridge is not None:
            await self.auth_bridge.close()
        await self.sync.close()
        self._started = False
        self.logger.info("Learning context closed")

    async def __aenter__(self) -> LearningContext:
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> bool:
        await self.close()
        return False

    # ── collections & flags ─────────────────────────────────────────────────

    @property
    def topics(self) -> Tuple[Topic, ...]:
        return self.stores.topics.items

    @property
    def methods(self) -> Tuple[LearningMethod, ...]:
        return self.stores.methods.items

    @property
    def journals(self) -> Tuple[JournalEntry, ...]:
        return self.stores.journals.items

    @property
    def resources(self) -> Tuple[Resource, ...]:
        return self.stores.resources.items

    @property
    def categories(self) -> Tuple[Category, ...]:
        return self.stores.categories.items

    @property
    def state(self) -> SyncState:
        return self.sync.state

    @property
    def is_loading(self) -> bool:
        return self.sync.state.is_loading

    @property
    def data_fetched(self) -> bool:
        return self.sync.state.data_fetched

    @property
    def error(self) -> Optional[str]:
        return self.sync.state.error

    @property
    def is_demo_mode(self) -> bool:
        return self.auth.state.is_demo_mode

    def get_topic(self, topic_id: str) -> Optional[Topic]:
        return self.stores.topics.get(topic_id)

    def get_category(self, category_id: str) -> Optional[Category]:
        return self.stores.categories.get(category_id)

    # ── sync ────────────────────────────────────────────────────────────────

    async def fetch_data(self) -> ServiceResult:
        return await self.sync.fetch_data()

    async def set_demo_mode(self, enabled: bool) -> None:
        await self.auth.set_demo_mode(enabled)

    # ── topics ──────────────────────────────────────────────────────────────

    async def add_topic(self, fields: Mapping[str, Any]) -> ServiceResult:
        return await self.stores.topics.add(fields)

    async def update_topic(self, topic_id: str, updates: Mapping[str, Any]) -> ServiceResult:
        return await self.stores.topics.update(topic_id, updates)

    async def delete_topic(self, topic_id: str) -> ServiceResult:
        return await self.stores.topics.delete(topic_id)

    # ── methods ─────────────────────────────────────────────────────────────

    async def add_method(self, fields: Mapping[str, Any]) -> ServiceResult:
        return await self.stores.methods.add(fields)

    async def update_method(self, method_id: str, updates: Mapping[str, Any]) -> ServiceResult:
        return await self.stores.methods.update(method_id, updates)

    async def delete_method(self, method_id: str) -> ServiceResult:
        return await self.stores.methods.delete(method_id)

    # ── journal entries ─────────────────────────────────────────────────────

    async def add_journal(self, fields: Mapping[str, Any]) -> ServiceResult:
        return await self.stores.journals.add(fields)

    async def update_journal(self, journal_id: str, updates: Mapping[str, Any]) -> ServiceResult:
        return await self.stores.journals.update(journal_id, updates)

    async def delete_journal(self, journal_id: str) -> ServiceResult:
        return await self.stores.journals.delete(journal_id)

    # ── resources ───────────────────────────────────────────────────────────

    async def add_resource(self, fields: Mapping[str, Any]) -> ServiceResult:
        return await self.stores.resources.add(fields)

    async def update_resource(self, resource_id: str, updates: Mapping[str, Any]) -> ServiceResult:
        return await self.stores.resources.update(resource_id, updates)

    async def delete_resource(self, resource_id: str) -> ServiceResult:
        return await self.stores.resources.delete(resource_id)

    # ── categories ──────────────────────────────────────────────────────────

    async def add_category(self, name: str) -> ServiceResult:
        return await self.stores.categories.add_category(name)

    async def update_category(self, category_id: str, updates: Dict[str, Any]) -> ServiceResult:
        return await self.stores.categories.update_category(category_id, updates)

    async def delete_category(self, category_id: str) -> ServiceResult:
        """Raises CategoryNotEmptyError while topics reference the category."""
        return await self.stores.categories.delete_category(category_id)

    async def reorder_category(self, category_id: str, direction: str) -> ServiceResult:
        return await self.stores.categories.reorder_category(category_id, direction)

    async def toggle_category_active(self, category_id: str) -> ServiceResult:
        return await self.stores.categories.toggle_category_active(category_id)

    # ── read models ─────────────────────────────────────────────────────────

    def dashboard_summary(self):
        """Dashboard figures for the current collections."""
        from learning_core.analytics.summary import build_dashboard_summary

        return build_dashboard_summary(self.topics, self.methods, self.journals, self.resources)
