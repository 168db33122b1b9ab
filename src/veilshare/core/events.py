"""Notification events emitted by committed registry transactions.

Events are buffered while a transaction runs and only published once it
commits. An aborted transaction publishes nothing.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import asdict, dataclass
from typing import Any

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegistryEvent:
    """Base class for registry notifications."""

    @property
    def name(self) -> str:
        return type(self).__name__

    def to_dict(self) -> dict[str, Any]:
        return {"event": self.name, **asdict(self)}


@dataclass(frozen=True)
class DatasetContributed(RegistryEvent):
    dataset_id: int
    contributor: str
    metadata_hash: str


@dataclass(frozen=True)
class DataRequested(RegistryEvent):
    request_id: int
    requester: str
    topic: str


@dataclass(frozen=True)
class DatasetAccessed(RegistryEvent):
    dataset_id: int
    accessor: str


@dataclass(frozen=True)
class QualityScoreUpdated(RegistryEvent):
    """Carries the plaintext score; the stored score stays wrapped."""

    dataset_id: int
    new_score: int


@dataclass(frozen=True)
class RewardDistributed(RegistryEvent):
    contributor: str
    dataset_id: int


EventHandler = Callable[[RegistryEvent], None]


class EventBus:
    """Fan-out of committed events to subscribers, plus the committed history."""

    def __init__(self) -> None:
        self._handlers: list[EventHandler] = []
        self._history: list[RegistryEvent] = []

    def subscribe(self, handler: EventHandler) -> None:
        self._handlers.append(handler)

    def unsubscribe(self, handler: EventHandler) -> None:
        self._handlers.remove(handler)

    @property
    def history(self) -> list[RegistryEvent]:
        return list(self._history)

    def publish(self, events: list[RegistryEvent]) -> None:
        """Record and deliver events from a committed transaction.

        Subscriber failures are logged and do not affect the committed
        transaction or other subscribers.
        """
        for event in events:
            self._history.append(event)
            logger.info(f"Event {event.name}: {event.to_dict()}")
            for handler in list(self._handlers):
                try:
                    handler(event)
                except Exception:
                    logger.exception(f"Event handler {handler!r} failed on {event.name}")
