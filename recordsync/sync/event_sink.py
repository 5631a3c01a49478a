"""Event sink delivering records to the target store."""

from typing import Sequence

import structlog

from recordsync.models.record import Record
from recordsync.storage.record_store import RecordStoreInterface, StoreAccessError
from recordsync.sync.models import DeliveryCounter

log = structlog.stdlib.get_logger()


class SinkWriteError(Exception):
    """Raised when a delivery to the target store fails."""

    pass


class EventSink:
    """Delivers single records or batches to the target store."""

    def __init__(self, target_store: RecordStoreInterface, counter: DeliveryCounter | None = None):
        """
        Initialize event sink.

        Args:
            target_store: Store receiving replicated records
            counter: Delivery counter to report to (a fresh one if None)
        """
        self._target_store: RecordStoreInterface = target_store
        self._counter: DeliveryCounter = counter if counter is not None else DeliveryCounter()

    @property
    def counter(self) -> DeliveryCounter:
        return self._counter

    def deliver(self, payload: Record | Sequence[Record]) -> None:
        """
        Deliver one record or one batch of records to the target.

        Each call counts as exactly one delivery, whatever the batch size. Records
        are upserted by identifier and keep their source timestamps.

        Args:
            payload: A single Record or an ordered sequence of Records

        Raises:
            SinkWriteError: If the target store write fails
        """
        records = [payload] if isinstance(payload, Record) else list(payload)
        delivery_number = self._counter.increment()

        log.info(
            "event_being_sent",
            delivery_number=delivery_number,
            record_count=len(records),
            record_ids=[record.id for record in records],
        )

        try:
            for record in records:
                self._target_store.remove({"id": record.id})
                self._target_store.insert(record)
        except StoreAccessError as e:
            log.error(
                "event_delivery_failed",
                delivery_number=delivery_number,
                record_count=len(records),
                error=str(e),
            )
            raise SinkWriteError(f"Failed to deliver records to target: {e}") from e

    def retract(self, record_id: str) -> int:
        """
        Remove a record from the target by identifier.

        Retractions are not counted as deliveries.

        Args:
            record_id: Identifier of the record to remove

        Returns:
            Number of target records removed

        Raises:
            SinkWriteError: If the target store remove fails
        """
        try:
            removed = self._target_store.remove({"id": record_id})
        except StoreAccessError as e:
            log.error("event_retraction_failed", record_id=record_id, error=str(e))
            raise SinkWriteError(f"Failed to retract record {record_id} from target: {e}") from e

        log.debug("event_retracted", record_id=record_id, removed=removed)
        return removed
