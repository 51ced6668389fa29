# =============================================================================
# learning_core/data/__init__.py
# Remote persistence: table contract, row mapping, backends
# =============================================================================
# SupabaseBackend lives in learning_core.data.supabase_client and is imported
# from there, so the in-memory backend works without a Supabase project.

from .gateway import Backend, ChangeCallback, IdentityProvider, Subscription, TableGateway
from .mappers import (
    CATEGORY_MAPPER,
    JOURNAL_MAPPER,
    METHOD_MAPPER,
    RESOURCE_MAPPER,
    TOPIC_MAPPER,
    Column,
    EntityMapper,
)
from .memory_backend import InMemoryBackend, InMemoryTable

__all__ = [
    "Backend",
    "ChangeCallback",
    "IdentityProvider",
    "Subscription",
    "TableGateway",
    "CATEGORY_MAPPER",
    "JOURNAL_MAPPER",
    "METHOD_MAPPER",
    "RESOURCE_MAPPER",
    "TOPIC_MAPPER",
    "Column",
    "EntityMapper",
    "InMemoryBackend",
    "InMemoryTable",
]
