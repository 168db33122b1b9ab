"""Tests for veilshare.core.events."""

from __future__ import annotations

import logging

from veilshare.core.events import (
    DataRequested,
    DatasetAccessed,
    DatasetContributed,
    EventBus,
    QualityScoreUpdated,
    RewardDistributed,
)


class TestRegistryEvent:
    def test_name_and_dict(self):
        event = DatasetContributed(dataset_id=1, contributor="did:example:alice", metadata_hash="QmHash")
        assert event.name == "DatasetContributed"
        assert event.to_dict() == {
            "event": "DatasetContributed",
            "dataset_id": 1,
            "contributor": "did:example:alice",
            "metadata_hash": "QmHash",
        }

    def test_events_compare_by_value(self):
        assert DatasetAccessed(1, "did:example:bob") == DatasetAccessed(1, "did:example:bob")
        assert QualityScoreUpdated(1, 95) != QualityScoreUpdated(1, 90)


class TestEventBus:
    def test_publish_records_history_in_order(self):
        bus = EventBus()
        events = [DataRequested(1, "did:example:bob", "Cancer"), RewardDistributed("did:example:alice", 1)]
        bus.publish(events)
        assert bus.history == events

    def test_history_is_a_copy(self):
        bus = EventBus()
        bus.publish([DatasetAccessed(1, "did:example:bob")])
        bus.history.clear()
        assert len(bus.history) == 1

    def test_subscribers_receive_events(self):
        bus = EventBus()
        received = []
        bus.subscribe(received.append)
        bus.publish([DatasetAccessed(1, "did:example:bob")])
        assert received == [DatasetAccessed(1, "did:example:bob")]

    def test_unsubscribe(self):
        bus = EventBus()
        received = []
        bus.subscribe(received.append)
        bus.unsubscribe(received.append)
        bus.publish([DatasetAccessed(1, "did:example:bob")])
        assert received == []

    def test_failing_subscriber_is_isolated(self, caplog):
        bus = EventBus()
        received = []

        def broken(event):
            raise RuntimeError("subscriber down")

        bus.subscribe(broken)
        bus.subscribe(received.append)
        with caplog.at_level(logging.ERROR, logger="veilshare.core.events"):
            bus.publish([DatasetAccessed(1, "did:example:bob")])

        assert len(received) == 1
        assert len(bus.history) == 1
        assert "failed on DatasetAccessed" in caplog.text
