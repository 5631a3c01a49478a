"""Property-based tests for event sink delivery.

Feature: recordsync
"""

from unittest.mock import Mock

import pytest
import structlog
from hypothesis import given, settings
from hypothesis import strategies as st

from recordsync.storage.record_store import InMemoryRecordStore, StoreAccessError
from recordsync.sync.event_sink import EventSink, SinkWriteError
from recordsync.sync.models import DeliveryCounter

log = structlog.stdlib.get_logger()


def seeded_source(count: int) -> InMemoryRecordStore:
    source = InMemoryRecordStore(name="source")
    for i in range(count):
        source.insert({"n": i})
    return source


@given(batch_size=st.integers(min_value=0, max_value=25))
@settings(max_examples=30)
def test_batch_counts_as_one_delivery(batch_size: int) -> None:
    """Property: one deliver call increments the counter once, whatever the batch size."""
    source = seeded_source(batch_size)
    target = InMemoryRecordStore(name="target")
    sink = EventSink(target)

    sink.deliver(source.find({}))

    assert sink.counter.count == 1
    assert target.find({}) == source.find({})


def test_single_record_delivery() -> None:
    source = seeded_source(1)
    target = InMemoryRecordStore(name="target")
    sink = EventSink(target)
    record = source.find({})[0]

    sink.deliver(record)

    assert sink.counter.count == 1
    assert target.find_one({"id": record.id}) == record


def test_redelivery_upserts_by_identifier() -> None:
    """Delivering the same record twice leaves one copy with the newest version."""
    source = seeded_source(1)
    target = InMemoryRecordStore(name="target")
    sink = EventSink(target)
    record = source.find({})[0]

    sink.deliver(record)
    source.update({"id": record.id}, {"$set": {"n": 99}})
    refreshed = source.find_one({"id": record.id})
    sink.deliver(refreshed)

    assert target.count() == 1
    assert target.find_one({"id": record.id}) == refreshed
    assert sink.counter.count == 2


def test_injected_counter_is_shared() -> None:
    counter = DeliveryCounter()
    sink = EventSink(InMemoryRecordStore(name="target"), counter)

    sink.deliver([])
    sink.deliver([])

    assert counter.count == 2
    counter.reset()
    assert sink.counter.count == 0


def test_target_failure_raises_sink_write_error() -> None:
    target = Mock()
    target.remove.return_value = 0
    target.insert.side_effect = StoreAccessError("target offline")
    sink = EventSink(target)
    record = seeded_source(1).find({})[0]

    with pytest.raises(SinkWriteError) as exc_info:
        sink.deliver(record)

    assert isinstance(exc_info.value.__cause__, StoreAccessError)
    # The attempt still counts as a delivery event
    assert sink.counter.count == 1


def test_retract_removes_without_counting() -> None:
    source = seeded_source(2)
    target = InMemoryRecordStore(name="target")
    sink = EventSink(target)
    records = source.find({})
    sink.deliver(records)

    removed = sink.retract(records[0].id)

    assert removed == 1
    assert target.find({}) == records[1:]
    assert sink.retract(records[0].id) == 0
    assert sink.counter.count == 1


def test_retract_failure_raises_sink_write_error() -> None:
    target = Mock()
    target.remove.side_effect = StoreAccessError("target offline")
    sink = EventSink(target)

    with pytest.raises(SinkWriteError):
        sink.retract("abc")
