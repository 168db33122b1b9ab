"""Read-only platform rollups."""

from __future__ import annotations

from collections.abc import Callable

from ..core.models import PlatformStats
from ..core.sequence import DATASET, REQUEST
from ..core.store import RegistryState


class StatsAggregator:
    def __init__(self, state: RegistryState, clock: Callable[[], int]):
        self.state = state
        self.clock = clock

    def stats(self) -> PlatformStats:
        return PlatformStats(
            total_datasets=self.state.counters[DATASET] - 1,
            total_requests=self.state.counters[REQUEST] - 1,
            current_time=self.clock(),
        )
