"""Change detection by re-fetching synced records and comparing timestamps."""

from typing import Callable

import structlog

from recordsync.models.config import DeletedRecordPolicy
from recordsync.storage.record_store import (
    RecordNotFoundError,
    RecordStoreInterface,
    StoreAccessError,
)
from recordsync.sync.event_sink import EventSink, SinkWriteError
from recordsync.sync.models import SyncCursor
from recordsync.utils.delay import wait as default_wait

log = structlog.stdlib.get_logger()


class ChangePoller:
    """Re-delivers previously synced records whose timestamp has moved."""

    def __init__(
        self,
        source_store: RecordStoreInterface,
        sink: EventSink,
        poll_interval_ms: int = 5000,
        deleted_record_policy: DeletedRecordPolicy = DeletedRecordPolicy.SKIP,
        wait: Callable[[int], None] = default_wait,
    ):
        """
        Initialize change poller.

        Args:
            source_store: Store records are re-fetched from
            sink: Event sink receiving changed records
            poll_interval_ms: Delay between consecutive rounds
            deleted_record_policy: Handling of records no longer in the source
            wait: Delay primitive taking milliseconds
        """
        self._source_store: RecordStoreInterface = source_store
        self._sink: EventSink = sink
        self._poll_interval_ms = poll_interval_ms
        self._deleted_record_policy = DeletedRecordPolicy(deleted_record_policy)
        self._wait = wait

    def poll_once(self, cursor: SyncCursor) -> SyncCursor:
        """
        Run one poll round over every record in ``cursor.seen``.

        A record whose ``updated_at`` differs from the cached value is retracted
        from the target, delivered again and replaced in the returned cursor.

        Args:
            cursor: Cursor produced by a full sync or a previous round

        Returns:
            Cursor with changed entries replaced; same length as the input

        Raises:
            StoreAccessError: If a source query fails
            RecordNotFoundError: If a record is gone and the policy is ``error``
            SinkWriteError: If a retraction or delivery fails
        """
        changed = 0

        for index, cached in enumerate(cursor.seen):
            try:
                fresh = self._source_store.find_one({"id": cached.id})
            except StoreAccessError as e:
                log.error("poll_fetch_failed", record_id=cached.id, error=str(e))
                raise

            if fresh is None:
                self._handle_missing_record(cached.id)
                continue

            if fresh.updated_at == cached.updated_at:
                continue

            log.debug(
                "record_change_detected",
                record_id=cached.id,
                cached_updated_at=cached.updated_at,
                source_updated_at=fresh.updated_at,
            )

            try:
                self._sink.retract(fresh.id)
                self._sink.deliver(fresh)
            except SinkWriteError as e:
                log.error("poll_redelivery_failed", record_id=fresh.id, error=str(e))
                raise

            cursor = cursor.replace_seen(index, fresh)
            changed += 1

        log.info("poll_round_completed", records_checked=len(cursor.seen), records_changed=changed)
        return cursor

    def poll_loop(self, rounds: int, cursor: SyncCursor) -> SyncCursor:
        """
        Run exactly ``rounds`` poll rounds with a fixed delay between them.

        There is no cancellation; continuous replication needs the caller to
        start another loop.

        Args:
            rounds: Number of rounds (0 returns the cursor unchanged)
            cursor: Cursor to start polling from

        Returns:
            Cursor after the last round

        Raises:
            ValueError: If rounds is negative
        """
        if rounds < 0:
            raise ValueError(f"rounds must be non-negative, got {rounds}")

        log.info("poll_loop_started", rounds=rounds, poll_interval_ms=self._poll_interval_ms)

        for round_number in range(rounds):
            if round_number > 0:
                self._wait(self._poll_interval_ms)
            cursor = self.poll_once(cursor)

        log.info("poll_loop_completed", rounds=rounds)
        return cursor

    def _handle_missing_record(self, record_id: str) -> None:
        policy = self._deleted_record_policy

        if policy is DeletedRecordPolicy.ERROR:
            log.error("synced_record_missing", record_id=record_id, policy=policy.value)
            raise RecordNotFoundError(f"Record {record_id} no longer exists in the source store")

        if policy is DeletedRecordPolicy.TOMBSTONE:
            removed = self._sink.retract(record_id)
            log.info("synced_record_tombstoned", record_id=record_id, removed=removed)
            return

        log.info("synced_record_missing_skipped", record_id=record_id)
