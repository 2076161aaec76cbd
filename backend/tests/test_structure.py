"""Tests for swing detection and structure events."""

import pytest

from core.structure import (
    Bias,
    SwingIndex,
    SwingKind,
    SwingPoint,
    break_of_structure,
    confirmed_at,
    find_break_of_structure,
    find_fair_value_gaps,
    find_liquidity_sweep,
    find_swing_highs,
    find_swing_lows,
    find_swing_points,
)


def _spike_highs(n: int = 21, at: int = 10) -> list[float]:
    highs = [10.0] * n
    highs[at] = 20.0
    return highs


class TestSwingDetection:
    """Tests for find_swing_highs / find_swing_lows."""

    def test_single_spike_is_swing_high(self):
        swings = find_swing_highs(_spike_highs(), 5)

        assert len(swings) == 1
        assert swings[0].index == 10
        assert swings[0].price == 20.0
        assert swings[0].kind == SwingKind.HIGH

    def test_needs_full_right_window(self):
        highs = _spike_highs()

        # i + L = 15 must exist
        assert len(find_swing_highs(highs[:16], 5)) == 1
        assert find_swing_highs(highs[:14], 5) == []

    def test_equal_neighbour_blocks_swing(self):
        highs = _spike_highs()
        highs[12] = 20.0

        assert find_swing_highs(highs, 5) == []

    def test_swing_lows_mirror(self):
        lows = [10.0] * 21
        lows[10] = 5.0

        swings = find_swing_lows(lows, 5)

        assert [(s.index, s.price, s.kind) for s in swings] == [(10, 5.0, SwingKind.LOW)]

    def test_times_attached(self):
        times = [1000 * i for i in range(21)]

        swings = find_swing_highs(_spike_highs(), 5, times)

        assert swings[0].time == 10_000

    def test_non_positive_lookaround(self):
        assert find_swing_highs(_spike_highs(), 0) == []

    def test_swing_points_sorted(self):
        highs = [10.0] * 21
        lows = [5.0] * 21
        highs[12] = 20.0
        lows[7] = 1.0

        points = find_swing_points(highs, lows, 3)

        assert [(p.index, p.kind) for p in points] == [
            (7, SwingKind.LOW),
            (12, SwingKind.HIGH),
        ]

    def test_detection_is_prefix_stable(self):
        highs = [10.0, 12.0, 11.0, 15.0, 13.0, 14.0, 18.0, 12.0, 11.0, 16.0, 10.0, 9.0]
        full = find_swing_highs(highs, 2)

        for n in range(len(highs) + 1):
            prefix = find_swing_highs(highs[:n], 2)
            assert prefix == confirmed_at(full, n - 1, 2)


class TestSwingIndex:

    def _index(self) -> SwingIndex:
        points = [
            SwingPoint(3, 3, 12.0, SwingKind.HIGH),
            SwingPoint(8, 8, 15.0, SwingKind.HIGH),
        ]
        return SwingIndex(points, 2)

    def test_latest_respects_confirmation(self):
        index = self._index()

        assert index.latest(4) is None
        assert index.latest(5).index == 3
        assert index.latest(9).index == 3
        assert index.latest(10).index == 8

    def test_latest_before(self):
        index = self._index()

        assert index.latest(20, before=8).index == 3
        assert index.latest(20, before=3) is None

    def test_confirmed_range(self):
        index = self._index()

        assert [p.index for p in index.confirmed(20)] == [3, 8]
        assert [p.index for p in index.confirmed(20, since=4)] == [8]
        assert len(index) == 2


class TestBreakOfStructure:

    def test_bearish_break_inside_open_interval(self):
        closes = [10.0, 9.0, 7.5, 8.0, 7.0]

        assert find_break_of_structure(closes, 8.0, Bias.BEARISH, 0, 5) == 2

    def test_bounds_are_exclusive(self):
        closes = [7.0, 9.0, 9.0, 7.0]

        assert find_break_of_structure(closes, 8.0, Bias.BEARISH, 0, 3) is None

    def test_bullish_break(self):
        closes = [10.0, 11.0, 12.5]

        assert find_break_of_structure(closes, 12.0, Bias.BULLISH, 0, 3) == 2

    def test_high_volume_break_skipped(self):
        closes = [10.0, 7.0, 6.5]
        volumes = [100.0, 500.0, 100.0]

        k = find_break_of_structure(
            closes, 8.0, Bias.BEARISH, 0, 3, volumes=volumes, max_volume=300.0
        )

        assert k == 2

    def test_swing_low_break_is_bearish(self):
        swing = SwingPoint(1, 1, 8.0, SwingKind.LOW)
        closes = [9.0, 8.5, 9.0, 7.9]

        event = break_of_structure(closes, swing, 1, 4)

        assert event.direction == Bias.BEARISH
        assert event.trigger_index == 3
        assert event.reference_swing_index == 1
        assert event.level == 8.0


class TestLiquiditySweep:

    def test_sweep_of_swing_high(self):
        swing = SwingPoint(2, 2, 12.0, SwingKind.HIGH)
        highs = [10.0, 11.0, 12.0, 11.5, 12.5, 13.0]
        lows = [9.0] * 6
        volumes = [1.0, 2.0, 3.0, 4.0, 5.0, 6.0]

        sweep = find_liquidity_sweep(highs, lows, volumes, swing, 10)

        assert sweep.sweep_index == 4
        assert sweep.wick == 12.5
        assert sweep.volume == 5.0
        assert sweep.direction == Bias.BEARISH

    def test_lookahead_bound(self):
        swing = SwingPoint(2, 2, 12.0, SwingKind.HIGH)
        highs = [10.0, 11.0, 12.0, 11.5, 12.5]

        assert find_liquidity_sweep(highs, [9.0] * 5, [1.0] * 5, swing, 2) is None

    def test_sweep_of_swing_low_is_bullish(self):
        swing = SwingPoint(0, 0, 5.0, SwingKind.LOW)
        lows = [5.0, 6.0, 4.5]

        sweep = find_liquidity_sweep([7.0] * 3, lows, [1.0] * 3, swing, 10)

        assert sweep.sweep_index == 2
        assert sweep.direction == Bias.BULLISH


class TestFairValueGaps:

    def test_bullish_and_bearish_gaps(self):
        highs = [10.0, 12.0, 14.0, 13.0, 9.0]
        lows = [9.0, 10.5, 11.0, 10.0, 8.0]

        gaps = find_fair_value_gaps(highs, lows)

        assert len(gaps) == 2
        bullish, bearish = gaps
        assert (bullish.index, bullish.kind, bullish.top, bullish.bottom) == (
            1, Bias.BULLISH, 11.0, 10.0
        )
        assert (bearish.index, bearish.kind, bearish.top, bearish.bottom) == (
            3, Bias.BEARISH, 11.0, 9.0
        )
        assert bullish.confirmed_index == 2

    def test_contains_is_inclusive(self):
        gaps = find_fair_value_gaps([10.0, 12.0, 14.0], [9.0, 10.5, 11.0])

        assert gaps[0].contains(10.0)
        assert gaps[0].contains(11.0)
        assert not gaps[0].contains(11.01)

    def test_no_gap_on_overlap(self):
        assert find_fair_value_gaps([10.0, 11.0, 12.0], [9.0, 9.5, 9.8]) == []

    def test_short_series(self):
        assert find_fair_value_gaps([10.0, 11.0], [9.0, 10.0]) == []


@pytest.mark.parametrize("lookaround", [1, 2, 3])
def test_swing_confirmed_index(lookaround):
    point = SwingPoint(5, 5, 1.0, SwingKind.LOW)

    assert point.confirmed_index(lookaround) == 5 + lookaround
