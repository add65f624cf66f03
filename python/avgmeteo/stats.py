"""Rolling per-sensor averages.

Histories grow for the lifetime of a session and are never pruned.  A
single skip offset, advanced once per message, marks the start of the
averaging slice for every sensor kind alike, so the slice is "window
values starting at the offset" rather than "the last window messages".
"""

from __future__ import annotations

import numpy as np

from .decoder import SensorKind, SensorSample

WINDOW = 10

History = dict[SensorKind, list[float]]


def record(history: History, kind: SensorKind, value: float) -> None:
    """Append *value* to the history of *kind*."""
    history.setdefault(kind, []).append(value)


def average(history: History, kind: SensorKind, skip: int,
            window: int = WINDOW) -> float:
    """Sum of ``history[kind][skip:skip + window]`` divided by *window*.

    A short slice is still divided by the full window, so the result
    undercounts until enough values have arrived.  Kinds with no history
    average to 0.0.
    """
    values = history.get(kind)
    if not values:
        return 0.0
    return float(np.sum(values[skip:skip + window], dtype=np.float64)) / window


def advance_skip(message_count: int, skip: int, window: int = WINDOW) -> int:
    """Return the next skip offset after *message_count* messages."""
    if message_count > window:
        return skip + 1
    return skip


class RollingStatistics:
    """History and skip offset for one session."""

    def __init__(self, window: int = WINDOW) -> None:
        self.window = window
        self.history: History = {}
        self.skip = 0

    def add_samples(self, samples: list[SensorSample]) -> None:
        for s in samples:
            record(self.history, s.kind, s.value)

    def advance(self, message_count: int) -> None:
        self.skip = advance_skip(message_count, self.skip, self.window)

    def average(self, kind: SensorKind) -> float:
        return average(self.history, kind, self.skip, self.window)

    def last_values(self) -> dict[SensorKind, float]:
        """Most recent value of every kind seen so far, in first-seen order."""
        return {kind: values[-1] for kind, values in self.history.items()}

    def reset(self) -> None:
        self.history = {}
        self.skip = 0
