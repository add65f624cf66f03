"""Test the rolling statistics engine.

Run from the repo root:
    python3 tests/test_stats.py
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "python"))

import math

from avgmeteo.decoder import SensorKind, SensorSample
from avgmeteo.stats import (
    WINDOW, RollingStatistics, advance_skip, average, record,
)

T = SensorKind.TEMPERATURE
H = SensorKind.HUMIDITY
P = SensorKind.PRESSURE


def test_record_appends():
    print("test_record_appends...", end="")

    history = {}
    record(history, T, 1.0)
    record(history, T, 2.0)
    record(history, P, 9.0)
    assert history == {T: [1.0, 2.0], P: [9.0]}

    print(" OK")


def test_average_of_full_window():
    print("test_average_of_full_window...", end="")

    values = [0.1, 2.5, 3.3, 4.0, -1.0, 7.25, 8.0, 9.5, 10.0, 11.1]
    history = {H: list(values)}
    assert math.isclose(average(history, H, 0, 10), sum(values) / 10)

    print(" OK")


def test_average_short_slice_divides_by_window():
    print("test_average_short_slice_divides_by_window...", end="")

    history = {T: [10.0, 20.0]}
    assert math.isclose(average(history, T, 0), 3.0)

    # skip past the end leaves an empty slice
    assert average(history, T, 5) == 0.0

    print(" OK")


def test_average_uses_skip_offset():
    print("test_average_uses_skip_offset...", end="")

    history = {P: [float(i) for i in range(15)]}
    # slice [3:13] -> 3..12
    assert math.isclose(average(history, P, 3), sum(range(3, 13)) / WINDOW)

    print(" OK")


def test_average_unknown_kind_is_zero():
    print("test_average_unknown_kind_is_zero...", end="")
    assert average({}, H, 0) == 0.0
    assert average({H: []}, H, 0) == 0.0
    print(" OK")


def test_advance_skip():
    print("test_advance_skip...", end="")

    assert advance_skip(1, 0) == 0
    assert advance_skip(10, 0) == 0
    assert advance_skip(11, 0) == 1
    assert advance_skip(12, 1) == 2
    assert advance_skip(4, 0, window=3) == 1

    print(" OK")


def test_rolling_statistics_shared_skip():
    """One offset governs every kind, even when kinds grow at different rates."""
    print("test_rolling_statistics_shared_skip...", end="")

    stats = RollingStatistics()
    count = 0
    for i in range(12):
        samples = [SensorSample(T, float(i))]
        if i % 2 == 0:
            samples.append(SensorSample(H, 100.0 + i))
        stats.add_samples(samples)
        count += 1
        stats.advance(count)

    assert stats.skip == 2
    assert len(stats.history[T]) == 12
    assert len(stats.history[H]) == 6
    assert math.isclose(stats.average(T), sum(range(2, 12)) / 10)
    # humidity slice [2:12] only has 4 values left
    assert math.isclose(stats.average(H), (104 + 106 + 108 + 110) / 10)
    assert stats.average(P) == 0.0
    assert stats.last_values() == {T: 11.0, H: 110.0}

    stats.reset()
    assert stats.history == {}
    assert stats.skip == 0

    print(" OK")


if __name__ == "__main__":
    print("avgmeteo statistics tests")
    print("=========================\n")

    test_record_appends()
    test_average_of_full_window()
    test_average_short_slice_divides_by_window()
    test_average_uses_skip_offset()
    test_average_unknown_kind_is_zero()
    test_advance_skip()
    test_rolling_statistics_shared_skip()

    print("\nAll tests passed.")
