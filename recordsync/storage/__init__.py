"""Record storage components for the synchronization system."""

from recordsync.storage.record_store import (
    InMemoryRecordStore,
    RecordNotFoundError,
    RecordStoreInterface,
    StoreAccessError,
)

__all__ = [
    "InMemoryRecordStore",
    "RecordNotFoundError",
    "RecordStoreInterface",
    "StoreAccessError",
]
