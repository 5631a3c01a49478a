"""Paged full synchronization from the source store to the event sink."""

import structlog

from recordsync.storage.record_store import RecordStoreInterface, StoreAccessError
from recordsync.sync.event_sink import EventSink, SinkWriteError
from recordsync.sync.models import SyncCursor

log = structlog.stdlib.get_logger()


class BatchSynchronizer:
    """Walks the whole source store in fixed-size pages."""

    def __init__(self, source_store: RecordStoreInterface, sink: EventSink):
        """
        Initialize batch synchronizer.

        Args:
            source_store: Store records are replicated from
            sink: Event sink receiving each page
        """
        self._source_store: RecordStoreInterface = source_store
        self._sink: EventSink = sink

    def sync_page(self, page_size: int, cursor: SyncCursor) -> SyncCursor:
        """
        Fetch and deliver the page at ``cursor.page_index``.

        The page is delivered exactly once, even when empty. The caller is
        responsible for advancing ``page_index``.

        Args:
            page_size: Maximum records per page
            cursor: Cursor whose page_index selects the page

        Returns:
            Cursor with the page's records appended to ``seen``

        Raises:
            StoreAccessError: If the source query fails
            SinkWriteError: If the delivery fails
        """
        skip = cursor.page_index * page_size

        try:
            records = self._source_store.find({}, skip=skip, limit=page_size)
            self._sink.deliver(records)
        except (StoreAccessError, SinkWriteError) as e:
            log.error(
                "sync_page_failed",
                page_index=cursor.page_index,
                page_size=page_size,
                error=str(e),
            )
            raise

        log.info(
            "page_synced",
            page_index=cursor.page_index,
            page_size=page_size,
            record_count=len(records),
        )
        return cursor.with_page(records)

    def sync_all(self, page_size: int) -> SyncCursor:
        """
        Synchronize the whole source store page by page.

        The record count is read once before paging starts. Records inserted
        while paging is in progress may not be synced by this run.

        Args:
            page_size: Maximum records per page (at least 1)

        Returns:
            Cursor holding every delivered record in delivery order

        Raises:
            ValueError: If page_size is less than 1
            StoreAccessError: If a source query fails
            SinkWriteError: If a delivery fails
        """
        if page_size < 1:
            raise ValueError(f"page_size must be at least 1, got {page_size}")

        cursor = SyncCursor()
        total_at_start = self._source_store.count({})

        log.info("sync_all_started", page_size=page_size, total_records=total_at_start)

        while cursor.page_index * page_size < total_at_start:
            cursor = self.sync_page(page_size, cursor)
            cursor = cursor.advance()

        log.info(
            "sync_all_completed",
            pages=cursor.page_index,
            records_synced=len(cursor.seen),
        )
        return cursor

    def sync_all_no_paging(self) -> SyncCursor:
        """
        Fetch the whole source store in one call and deliver it as one batch.

        Only suitable when the downstream target has no response-size limit;
        use sync_all otherwise.

        Returns:
            Cursor with page_index 1 holding every delivered record

        Raises:
            StoreAccessError: If the source query fails
            SinkWriteError: If the delivery fails
        """
        try:
            records = self._source_store.find({})
            self._sink.deliver(records)
        except (StoreAccessError, SinkWriteError) as e:
            log.error("sync_all_no_paging_failed", error=str(e))
            raise

        log.info("sync_all_no_paging_completed", records_synced=len(records))
        return SyncCursor().with_page(records).advance()
