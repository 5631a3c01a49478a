"""Record store interface and implementations for source and target collections."""

import copy
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Iterable, List, Mapping, Optional

import structlog

from recordsync.models.record import Record

log = structlog.stdlib.get_logger()

Filter = Mapping[str, Any]


class StoreAccessError(Exception):
    """Raised when a record store operation fails."""

    pass


class RecordNotFoundError(StoreAccessError):
    """Raised when a record expected to exist cannot be found."""

    pass


class RecordStoreInterface(ABC):
    """Abstract interface for record store operations.

    This interface defines the contract both the source and the target of a
    synchronization run must follow. Every mutating call refreshes the
    ``updated_at`` timestamp of the records it touches.
    """

    @abstractmethod
    def insert(self, record: Mapping[str, Any] | Record) -> str:
        """Insert a record and return its identifier.

        Args:
            record: Payload fields for a new record, or a complete Record
                whose identifier and timestamps are kept as-is

        Raises:
            StoreAccessError: If the insert fails
        """
        pass

    @abstractmethod
    def find(
        self, filter: Optional[Filter] = None, skip: int = 0, limit: Optional[int] = None
    ) -> List[Record]:
        """Find records matching a filter, in insertion order.

        Args:
            filter: Equality filter; None or {} matches every record
            skip: Number of matching records to skip
            limit: Maximum number of records to return (None for no limit)

        Raises:
            StoreAccessError: If the query fails
        """
        pass

    @abstractmethod
    def find_one(self, filter: Filter) -> Optional[Record]:
        """Return the first record matching a filter, or None."""
        pass

    @abstractmethod
    def update(self, filter: Filter, patch: Mapping[str, Any], multi: bool = False) -> int:
        """Update matching records and return how many were changed.

        Args:
            filter: Equality filter selecting the records to update
            patch: ``{"$set": {...}}``, ``{"$unset": [...]}`` or a plain mapping
                replacing the whole payload
            multi: Update every match instead of only the first

        Raises:
            StoreAccessError: If the filter or patch is invalid
        """
        pass

    @abstractmethod
    def remove(self, filter: Filter, multi: bool = False) -> int:
        """Remove matching records and return how many were removed."""
        pass

    @abstractmethod
    def count(self, filter: Optional[Filter] = None) -> int:
        """Count records matching a filter."""
        pass


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryRecordStore(RecordStoreInterface):
    """In-memory, insertion-ordered implementation of the record store.

    Timestamps come from ``clock`` but are forced to be strictly increasing
    within one store, so two mutations never share an ``updated_at`` value.
    Records are copied on the way in and out, so callers never hold a stored
    instance and cannot change it without going through ``update``.
    """

    ID_LENGTH: int = 16

    def __init__(self, name: str = "records", clock: Callable[[], datetime] = _utc_now):
        """Initialize an empty store.

        Args:
            name: Store name used in log events
            clock: Callable returning the current time
        """
        self._name = name
        self._clock = clock
        self._records: list[Record] = []
        self._last_timestamp: datetime | None = None
        log.info("record_store_initialized", store=name)

    @property
    def name(self) -> str:
        return self._name

    def insert(self, record: Mapping[str, Any] | Record) -> str:
        if isinstance(record, Record):
            if any(existing.id == record.id for existing in self._records):
                log.error("duplicate_record_id", store=self._name, record_id=record.id)
                raise StoreAccessError(f"Record {record.id} already exists in {self._name}")
            new_record = record
        else:
            if not isinstance(record, Mapping):
                raise StoreAccessError(f"Cannot insert {type(record).__name__} into {self._name}")
            self._validate_field_names(record.keys())
            now = self._next_timestamp()
            new_record = Record(
                id=self._new_id(),
                created_at=now,
                updated_at=now,
                fields=dict(record),
            )

        self._records.append(new_record.model_copy(deep=True))
        log.debug("record_inserted", store=self._name, record_id=new_record.id)
        return new_record.id

    def find(
        self, filter: Optional[Filter] = None, skip: int = 0, limit: Optional[int] = None
    ) -> List[Record]:
        if skip < 0:
            raise StoreAccessError(f"skip must be non-negative, got {skip}")
        if limit is not None and limit < 0:
            raise StoreAccessError(f"limit must be non-negative, got {limit}")

        matches = [record for record in self._records if self._matches(record, filter)]
        end = None if limit is None else skip + limit
        results = matches[skip:end]

        log.debug(
            "records_found",
            store=self._name,
            skip=skip,
            limit=limit,
            result_count=len(results),
        )
        return [record.model_copy(deep=True) for record in results]

    def find_one(self, filter: Filter) -> Optional[Record]:
        for record in self._records:
            if self._matches(record, filter):
                return record.model_copy(deep=True)
        return None

    def update(self, filter: Filter, patch: Mapping[str, Any], multi: bool = False) -> int:
        updated = 0
        for index, record in enumerate(self._records):
            if not self._matches(record, filter):
                continue

            self._records[index] = record.model_copy(
                update={
                    "fields": copy.deepcopy(self._apply_patch(record.fields, patch)),
                    "updated_at": self._next_timestamp(),
                }
            )
            updated += 1
            if not multi:
                break

        log.debug("records_updated", store=self._name, updated=updated)
        return updated

    def remove(self, filter: Filter, multi: bool = False) -> int:
        kept: list[Record] = []
        removed = 0
        for record in self._records:
            if (multi or removed == 0) and self._matches(record, filter):
                removed += 1
            else:
                kept.append(record)

        self._records = kept
        log.debug("records_removed", store=self._name, removed=removed)
        return removed

    def count(self, filter: Optional[Filter] = None) -> int:
        return sum(1 for record in self._records if self._matches(record, filter))

    def _matches(self, record: Record, filter: Optional[Filter]) -> bool:
        """Check a record against an equality filter.

        The key ``id`` matches the record identifier; every other key matches
        the payload field of the same name.
        """
        if not filter:
            return True

        self._validate_field_names(filter.keys())

        for key, expected in filter.items():
            if key == "id":
                if record.id != expected:
                    return False
            elif key not in record.fields or record.fields[key] != expected:
                return False
        return True

    def _apply_patch(self, fields: dict[str, Any], patch: Mapping[str, Any]) -> dict[str, Any]:
        operators = [key for key in patch if key.startswith("$")]

        if not operators:
            self._validate_field_names(patch.keys())
            return dict(patch)

        if len(operators) != len(patch):
            raise StoreAccessError("Cannot mix update operators and plain fields in a patch")

        new_fields = dict(fields)
        for operator, value in patch.items():
            if operator == "$set":
                if not isinstance(value, Mapping):
                    raise StoreAccessError("$set expects a mapping of fields")
                self._validate_field_names(value.keys())
                new_fields.update(value)
            elif operator == "$unset":
                if not isinstance(value, (list, tuple)) or not all(
                    isinstance(key, str) for key in value
                ):
                    raise StoreAccessError("$unset expects a list of field names")
                for key in value:
                    new_fields.pop(key, None)
            else:
                raise StoreAccessError(f"Unsupported update operator: {operator}")
        return new_fields

    def _validate_field_names(self, names: Iterable[str]) -> None:
        for name in names:
            if not isinstance(name, str) or name.startswith("$"):
                log.error("invalid_field_name", store=self._name, field=name)
                raise StoreAccessError(f"Invalid field name in {self._name}: {name!r}")

    def _next_timestamp(self) -> datetime:
        now = self._clock()
        if self._last_timestamp is not None and now <= self._last_timestamp:
            now = self._last_timestamp + timedelta(microseconds=1)
        self._last_timestamp = now
        return now

    def _new_id(self) -> str:
        return uuid.uuid4().hex[: self.ID_LENGTH]
