"""Synchronization coordinator for orchestrating full sync and change polling."""

from datetime import datetime
from typing import Callable

import structlog

from recordsync.models.config import SyncConfig
from recordsync.storage.record_store import RecordStoreInterface
from recordsync.sync.batch_synchronizer import BatchSynchronizer
from recordsync.sync.change_poller import ChangePoller
from recordsync.sync.event_sink import EventSink
from recordsync.sync.models import DeliveryCounter, SyncCursor
from recordsync.utils.delay import wait as default_wait
from recordsync.utils.logging_config import sync_run_context

log = structlog.stdlib.get_logger()


class SyncCoordinator:
    """Orchestrates replication from a source store to a target store."""

    def __init__(
        self,
        source_store: RecordStoreInterface,
        target_store: RecordStoreInterface,
        sync_config: SyncConfig | None = None,
        counter: DeliveryCounter | None = None,
        wait: Callable[[int], None] = default_wait,
    ):
        """
        Initialize sync coordinator.

        Args:
            source_store: Store records are replicated from
            target_store: Store receiving replicated records
            sync_config: Paging and polling settings (defaults if None)
            counter: Delivery counter for this run (a fresh one if None)
            wait: Delay primitive taking milliseconds
        """
        self._config: SyncConfig = sync_config or SyncConfig()
        self._wait = wait

        self._sink: EventSink = EventSink(target_store, counter)
        self._batch_synchronizer: BatchSynchronizer = BatchSynchronizer(source_store, self._sink)
        self._change_poller: ChangePoller = ChangePoller(
            source_store,
            self._sink,
            poll_interval_ms=self._config.poll_interval_ms,
            deleted_record_policy=self._config.deleted_record_policy,
            wait=wait,
        )

        log.info(
            "sync_coordinator_initialized",
            page_size=self._config.page_size,
            poll_rounds=self._config.poll_rounds,
            deleted_record_policy=self._config.deleted_record_policy.value,
        )

    @property
    def counter(self) -> DeliveryCounter:
        return self._sink.counter

    @property
    def batch_synchronizer(self) -> BatchSynchronizer:
        return self._batch_synchronizer

    @property
    def change_poller(self) -> ChangePoller:
        return self._change_poller

    def run(self, page_size: int | None = None, poll_rounds: int | None = None) -> SyncCursor:
        """
        Perform a full paged sync, then poll for changes.

        This method:
        1. Delivers every source record in pages of ``page_size``
        2. Waits ``settle_delay_ms``
        3. Runs ``poll_rounds`` change polling rounds

        Args:
            page_size: Records per page (config value if None)
            poll_rounds: Number of poll rounds (config value if None)

        Returns:
            Cursor after the last poll round

        Raises:
            StoreAccessError: If a store operation fails
            SinkWriteError: If a delivery fails
        """
        page_size = self._config.page_size if page_size is None else page_size
        poll_rounds = self._config.poll_rounds if poll_rounds is None else poll_rounds

        with sync_run_context(page_size=page_size, poll_rounds=poll_rounds):
            start_time = datetime.now()
            log.info("sync_run_started")

            try:
                cursor = self._batch_synchronizer.sync_all(page_size)
                self._wait(self._config.settle_delay_ms)
                cursor = self._change_poller.poll_loop(poll_rounds, cursor)
            except Exception as e:
                log.error(
                    "sync_run_failed",
                    error=str(e),
                    deliveries=self.counter.count,
                    duration_seconds=(datetime.now() - start_time).total_seconds(),
                )
                raise

            log.info(
                "sync_run_completed",
                records_synced=len(cursor.seen),
                pages=cursor.page_index,
                deliveries=self.counter.count,
                duration_seconds=(datetime.now() - start_time).total_seconds(),
            )
        return cursor

    def sync_all_no_paging(self) -> SyncCursor:
        """Deliver the whole source store as a single batch, without polling."""
        return self._batch_synchronizer.sync_all_no_paging()
