"""Data models for the record synchronization system."""

from recordsync.models.config import (
    AppConfig,
    DeletedRecordPolicy,
    LoggingConfig,
    SyncConfig,
)
from recordsync.models.record import Record

__all__ = [
    "Record",
    "AppConfig",
    "DeletedRecordPolicy",
    "LoggingConfig",
    "SyncConfig",
]
