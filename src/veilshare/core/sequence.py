"""Sequential id allocation for datasets and requests."""

from __future__ import annotations

DATASET = "dataset"
REQUEST = "request"

COUNTER_NAMES = (DATASET, REQUEST)


def initial_counters() -> dict[str, int]:
    """Fresh counter table; every id space starts at 1."""
    return {name: 1 for name in COUNTER_NAMES}


class SequenceAllocator:
    """Issues strictly increasing ids from named counters.

    The counter table is owned by the registry state, so a transaction that
    aborts after calling ``next`` also rolls the counter back. Only call
    ``next`` from inside the transaction that stores the new record.
    """

    def __init__(self, counters: dict[str, int]):
        self._counters = counters

    def next(self, counter_name: str) -> int:
        """Return the current value of a counter and advance it by one."""
        current = self.peek(counter_name)
        self._counters[counter_name] = current + 1
        return current

    def peek(self, counter_name: str) -> int:
        """Return the next id a counter would issue, without advancing it."""
        try:
            return self._counters[counter_name]
        except KeyError:
            raise ValueError(f"Unknown counter: {counter_name}") from None
