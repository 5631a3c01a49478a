"""Synchronization components for replicating records between stores."""

from recordsync.sync.batch_synchronizer import BatchSynchronizer
from recordsync.sync.change_poller import ChangePoller
from recordsync.sync.event_sink import EventSink, SinkWriteError
from recordsync.sync.models import DeliveryCounter, SyncCursor
from recordsync.sync.sync_coordinator import SyncCoordinator

__all__ = [
    "BatchSynchronizer",
    "ChangePoller",
    "DeliveryCounter",
    "EventSink",
    "SinkWriteError",
    "SyncCoordinator",
    "SyncCursor",
]
