"""Registry state and the single-writer transaction executor.

All registry state lives in one ``RegistryState`` arena: an id counter per id
space, a record table per entity type, the grant relation keyed by
``(dataset_id, principal)`` and the reward lists keyed by principal.

``TransactionExecutor`` runs every operation as begin / validate / mutate /
commit-or-abort under one lock:
- begin: open the state's undo journal
- abort: replay the journal in reverse, drop buffered events, re-raise
- commit: discard the journal, publish buffered events

Components keep references to the state's containers, so rollbacks always
happen in place rather than by swapping objects.
"""

from __future__ import annotations

import json
import logging
import threading
from collections.abc import Callable, Generator
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .events import EventBus, RegistryEvent
from .models import Contribution, DataRequest, Dataset
from .sequence import initial_counters

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1


@dataclass
class RegistryState:
    """Arena of registry records keyed by integer id.

    Writes made inside a transaction go through the mutation helpers below,
    which record an undo step for each change. ``rollback`` replays those
    steps newest first; ``commit`` discards them.
    """

    counters: dict[str, int] = field(default_factory=initial_counters)
    datasets: dict[int, Dataset] = field(default_factory=dict)
    contributor_datasets: dict[str, list[int]] = field(default_factory=dict)
    grants: dict[tuple[int, str], bool] = field(default_factory=dict)
    requests: dict[int, DataRequest] = field(default_factory=dict)
    rewards: dict[str, list[Contribution]] = field(default_factory=dict)
    _undo: list[Callable[[], None]] | None = field(default=None, init=False, repr=False, compare=False)

    # ------------------------------------------------------------------
    # Undo journal
    # ------------------------------------------------------------------

    @property
    def journaling(self) -> bool:
        return self._undo is not None

    def begin(self) -> None:
        """Start recording undo steps, saving the id counters."""
        if self._undo is not None:
            raise RuntimeError("Undo journal already open")
        saved_counters = dict(self.counters)

        def restore_counters() -> None:
            self.counters.clear()
            self.counters.update(saved_counters)

        self._undo = [restore_counters]

    def commit(self) -> None:
        self._undo = None

    def rollback(self) -> None:
        """Undo every change recorded since ``begin``, newest first."""
        steps, self._undo = self._undo or [], None
        for step in reversed(steps):
            step()

    def _record(self, step: Callable[[], None]) -> None:
        if self._undo is not None:
            self._undo.append(step)

    def _append(self, table: dict[str, list[Any]], key: str, item: Any) -> None:
        created = key not in table
        table.setdefault(key, []).append(item)

        def undo() -> None:
            table[key].pop()
            if created:
                del table[key]

        self._record(undo)

    # ------------------------------------------------------------------
    # Mutation helpers
    # ------------------------------------------------------------------

    def add_dataset(self, dataset: Dataset) -> None:
        self.datasets[dataset.id] = dataset
        self._record(lambda: self.datasets.pop(dataset.id, None))
        self._append(self.contributor_datasets, dataset.contributor, dataset.id)

    def add_request(self, request: DataRequest) -> None:
        self.requests[request.id] = request
        self._record(lambda: self.requests.pop(request.id, None))

    def add_grant(self, dataset_id: int, principal: str) -> None:
        key = (dataset_id, principal)
        existed = key in self.grants
        previous = self.grants.get(key, False)

        def undo() -> None:
            if existed:
                self.grants[key] = previous
            else:
                self.grants.pop(key, None)

        self.grants[key] = True
        self._record(undo)

    def add_reward(self, contributor: str, contribution: Contribution) -> None:
        self._append(self.rewards, contributor, contribution)

    def set_field(self, record: Any, name: str, value: Any) -> None:
        """Assign ``record.<name>``, remembering the previous value."""
        previous = getattr(record, name)
        setattr(record, name, value)
        self._record(lambda: setattr(record, name, previous))

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dictionary."""
        return {
            "version": SNAPSHOT_VERSION,
            "counters": dict(self.counters),
            "datasets": [d.to_dict() for d in self.datasets.values()],
            "contributor_datasets": {k: list(v) for k, v in self.contributor_datasets.items()},
            "grants": [
                {"dataset_id": dataset_id, "principal": principal, "granted": granted}
                for (dataset_id, principal), granted in self.grants.items()
            ],
            "requests": [r.to_dict() for r in self.requests.values()],
            "rewards": {k: [c.to_dict() for c in v] for k, v in self.rewards.items()},
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RegistryState:
        """Deserialize from dictionary."""
        version = data.get("version", SNAPSHOT_VERSION)
        if version != SNAPSHOT_VERSION:
            raise ValueError(f"Unsupported snapshot version: {version}")

        counters = initial_counters()
        counters.update({k: int(v) for k, v in data.get("counters", {}).items()})

        datasets = {}
        for item in data.get("datasets", []):
            dataset = Dataset.from_dict(item)
            datasets[dataset.id] = dataset

        requests = {}
        for item in data.get("requests", []):
            request = DataRequest.from_dict(item)
            requests[request.id] = request

        return cls(
            counters=counters,
            datasets=datasets,
            contributor_datasets={
                k: [int(d) for d in v] for k, v in data.get("contributor_datasets", {}).items()
            },
            grants={
                (int(g["dataset_id"]), g["principal"]): bool(g["granted"]) for g in data.get("grants", [])
            },
            requests=requests,
            rewards={
                k: [Contribution.from_dict(c) for c in v] for k, v in data.get("rewards", {}).items()
            },
        )


def save_snapshot(state: RegistryState, path: str | Path) -> None:
    """Write the state to a JSON file."""
    Path(path).write_text(json.dumps(state.to_dict(), indent=2), encoding="utf-8")
    logger.info(f"Saved registry snapshot to {path}")


def load_snapshot(path: str | Path) -> RegistryState:
    """Read a state previously written by ``save_snapshot``."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    logger.info(f"Loaded registry snapshot from {path}")
    return RegistryState.from_dict(data)


class TransactionExecutor:
    """Serializes registry operations into all-or-nothing transactions."""

    def __init__(self, state: RegistryState, bus: EventBus | None = None):
        self.state = state
        self.bus = bus or EventBus()
        self._lock = threading.RLock()
        self._pending: list[RegistryEvent] | None = None

    @property
    def in_transaction(self) -> bool:
        return self._pending is not None

    def emit(self, event: RegistryEvent) -> None:
        """Buffer an event for publication when the transaction commits."""
        if self._pending is None:
            raise RuntimeError("emit() called outside a transaction")
        self._pending.append(event)

    @contextmanager
    def transaction(self, name: str = "transaction") -> Generator[RegistryState, None, None]:
        """Run the enclosed block as one atomic transaction.

        Nested transactions join the outer one.
        """
        with self._lock:
            if self._pending is not None:
                yield self.state
                return

            self.state.begin()
            self._pending = []
            try:
                yield self.state
            except BaseException as e:
                self.state.rollback()
                self._pending = None
                logger.warning(f"Transaction {name} aborted: {type(e).__name__}: {e}")
                raise
            self.state.commit()
            events, self._pending = self._pending, None
            logger.debug(f"Transaction {name} committed with {len(events)} event(s)")
            self.bus.publish(events)

    def read(self, fn: Callable[[RegistryState], Any]) -> Any:
        """Run a read-only query against committed state."""
        with self._lock:
            return fn(self.state)
