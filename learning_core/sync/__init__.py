from .seed import SeedDataset, default_seed, seed_id
from .coordinator import (
    DataSource,
    DataSyncCoordinator,
    FETCH_FAILED_MESSAGE,
    StoreSet,
    SyncState,
)

__all__ = [
    "SeedDataset",
    "default_seed",
    "seed_id",
    "DataSource",
    "DataSyncCoordinator",
    "FETCH_FAILED_MESSAGE",
    "StoreSet",
    "SyncState",
]
