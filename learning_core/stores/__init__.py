from .base_store import EntityStore, StoreMode
from .topics import TopicStore
from .methods import MethodStore
from .journals import JournalStore
from .resources import ResourceStore
from .categories import CategoryStore, renumber

__all__ = [
    "EntityStore",
    "StoreMode",
    "TopicStore",
    "MethodStore",
    "JournalStore",
    "ResourceStore",
    "CategoryStore",
    "renumber",
]
