"""Data models for synchronization operations."""

from typing import Iterable

from pydantic import BaseModel, ConfigDict, Field

from recordsync.models.record import Record


class SyncCursor(BaseModel):
    """Progress of one synchronization run.

    Cursors are immutable: every step returns a new cursor. ``seen`` only grows
    during full sync; polling replaces single entries and never resizes it.
    """

    model_config = ConfigDict(frozen=True)

    page_index: int = Field(default=0, ge=0, description="Number of pages already processed")
    seen: tuple[Record, ...] = Field(
        default=(), description="Delivered records, in delivery order"
    )

    def with_page(self, records: Iterable[Record]) -> "SyncCursor":
        """Return a cursor with ``records`` appended to ``seen``."""
        return self.model_copy(update={"seen": self.seen + tuple(records)})

    def advance(self) -> "SyncCursor":
        """Return a cursor pointing at the next page."""
        return self.model_copy(update={"page_index": self.page_index + 1})

    def replace_seen(self, index: int, record: Record) -> "SyncCursor":
        """Return a cursor with ``seen[index]`` replaced by ``record``."""
        if not 0 <= index < len(self.seen):
            raise IndexError(f"seen index {index} out of range for {len(self.seen)} records")
        seen = list(self.seen)
        seen[index] = record
        return self.model_copy(update={"seen": tuple(seen)})


class DeliveryCounter:
    """Counts event sink deliveries for one run."""

    def __init__(self) -> None:
        self._count = 0

    @property
    def count(self) -> int:
        return self._count

    def increment(self) -> int:
        self._count += 1
        return self._count

    def reset(self) -> None:
        self._count = 0
