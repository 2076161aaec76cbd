"""Tests for the structure-based and multi-timeframe strategies."""

import logging

import pytest

from core.models import Candle, CandleSeries
from core.strategy import StrategyContext, create_strategy
from core.strategy.mtf.generator import map_higher_timeframe

HOUR = 3_600_000
DAY = 24 * HOUR


def _make_candles(rows, start: int = 0, step: int = HOUR) -> CandleSeries:
    """Build candles from (high, low, close[, volume]) rows; open = close."""
    candles = []
    for i, row in enumerate(rows):
        high, low, close = row[:3]
        volume = row[3] if len(row) > 3 else 100.0
        candles.append(Candle(start + i * step, close, high, low, close, volume))
    return CandleSeries(candles)


PFF_PARAMS = {
    "peak_lookaround": 2,
    "swing_lookaround": 1,
    "ema_short_period": 2,
    "ema_long_period": 3,
}

PFF_ROWS = [
    (11, 9, 10),
    (10, 8, 9),
    (12, 9.5, 11.5),
    (14, 11, 13),
    (16, 13, 15),
    (15, 12, 12.5),
    (13, 9, 9.5),
    (10, 7, 7.5),
    (9, 6, 6.5),
    (11.5, 8.5, 11),
]

LOF_PARAMS = {"swing_lookaround": 1, "ema_trend_period": 3, "max_lookahead": 50}

LOF_ROWS = [
    (10, 9, 9.5, 100),
    (12, 10, 11, 100),
    (11, 9.5, 10, 100),
    (10.5, 8, 9, 100),
    (11.5, 9, 11, 100),
    (12.5, 10.5, 11, 500),
    (11, 9, 9.5, 100),
    (9.5, 7.5, 7.8, 50),
    (7.6, 6, 6.2, 80),
    (7, 5.5, 6, 80),
    (7.2, 6, 6.5, 100),
]

GRAB_PARAMS = {"swing_lookaround": 2, "confirmation_candles": 3, "sweep_window": 10}

GRAB_ROWS = [
    (12, 10, 11),
    (11.5, 9.5, 10),
    (11, 9, 10),
    (11, 9.8, 10.5),
    (11.5, 10, 11),
    (11.2, 9.9, 10.5),
    (10.5, 8.5, 8.8),
    (10, 8.7, 9.5),
]


class TestPeakFormationFib:
    """Peak, break of structure, retracement entry."""

    def test_short_entry_on_retracement(self):
        result = create_strategy("peak-formation-fib").calculate(
            _make_candles(PFF_ROWS), PFF_PARAMS
        )

        assert result.sell_indices() == [9]
        assert result.buy_indices() == []
        # Marker sits at the crossed retracement level
        assert result.sell_signal[9] == pytest.approx(11.0)
        assert result.stop_loss_level[9] == pytest.approx(16.016)
        assert result.peak_price[9] == 16.0

    def test_reverse_keeps_peak_but_drops_stop(self):
        result = create_strategy("peak-formation-fib").calculate(
            _make_candles(PFF_ROWS), {**PFF_PARAMS, "reverse": True}
        )

        assert result.buy_indices() == [9]
        assert result.buy_signal[9] == pytest.approx(11.0)
        assert result.sell_indices() == []
        assert result.stop_loss_level[9] is None
        assert result.peak_price[9] == 16.0

    def test_prefix_stable(self):
        candles = _make_candles(PFF_ROWS)
        strategy = create_strategy("peak-formation-fib")

        for n in range(3, len(PFF_ROWS) + 1):
            result = strategy.calculate(candles.head(n), PFF_PARAMS)
            expected = [9] if n == 10 else []
            assert result.sell_indices() == expected

    def test_stale_setup_ignored(self):
        result = create_strategy("peak-formation-fib").calculate(
            _make_candles(PFF_ROWS), {**PFF_PARAMS, "signal_staleness": 1}
        )

        assert result.sell_indices() == []

    def test_ema_columns(self):
        result = create_strategy("peak-formation-fib").calculate(
            _make_candles(PFF_ROWS), PFF_PARAMS
        )

        assert result.get("ema_short", 0) is None
        assert result.get("ema_short", 1) == pytest.approx(9.5)
        assert result.get("ema_long", 2) == pytest.approx(30.5 / 3)


class TestLiquidityOrderFlow:
    """Sweep, volume-confirmed structure shift, fair value gap entry."""

    def test_bearish_gap_entry(self):
        result = create_strategy("liquidity-order-flow").calculate(
            _make_candles(LOF_ROWS), LOF_PARAMS
        )

        assert result.sell_indices() == [10]
        assert result.sell_signal[10] == 7.2
        assert result.stop_loss_level[10] == 12.5
        assert result.peak_price[10] == 12.0
        assert result.buy_indices() == []

    def test_high_volume_break_rejected(self):
        rows = [
            (h, l, c, 600 if i >= 7 else v)
            for i, (h, l, c, v) in enumerate(LOF_ROWS)
        ]

        result = create_strategy("liquidity-order-flow").calculate(
            _make_candles(rows), LOF_PARAMS
        )

        assert result.sell_indices() == []
        assert result.buy_indices() == []

    def test_wick_beyond_sweep_invalidates(self):
        rows = list(LOF_ROWS)
        rows[9] = (13, 5.5, 6, 80)

        result = create_strategy("liquidity-order-flow").calculate(
            _make_candles(rows), LOF_PARAMS
        )

        assert result.sell_indices() == []
        assert result.buy_indices() == []

    def test_prefix_stable(self):
        candles = _make_candles(LOF_ROWS)
        strategy = create_strategy("liquidity-order-flow")

        for n in range(3, len(LOF_ROWS)):
            assert strategy.calculate(candles.head(n), LOF_PARAMS).sell_indices() == []


class TestLiquidityGrab:

    def test_sweep_and_reclaim_of_swing_low(self):
        result = create_strategy("liquidity-grab").calculate(
            _make_candles(GRAB_ROWS), GRAB_PARAMS
        )

        assert result.buy_indices() == [7]
        assert result.buy_signal[7] == 8.7
        assert result.stop_loss_level[7] == 8.5
        assert result.peak_price[7] == 9.0
        assert result.sell_indices() == []

    def test_no_reclaim_yet(self):
        result = create_strategy("liquidity-grab").calculate(
            _make_candles(GRAB_ROWS[:7]), GRAB_PARAMS
        )

        assert result.buy_indices() == []

    def test_min_candles(self):
        strategy = create_strategy("liquidity-grab")

        assert strategy.min_candles(strategy.resolve_params(GRAB_PARAMS)) == 7


def _htf_series(n: int = 30, close: float = 50.0) -> CandleSeries:
    return CandleSeries(
        Candle(i * DAY, close, close + 1, close - 1, close) for i in range(n)
    )


def _engulfing_base(n: int = 30) -> CandleSeries:
    candles = []
    for i in range(n):
        if i == 19:
            o, c = 101.0, 99.0
        elif i == 20:
            o, c = 98.5, 102.0
        else:
            o = c = 100.0
        candles.append(Candle(25 * DAY + i * HOUR, o, max(o, c) + 0.5, min(o, c) - 0.5, c))
    return CandleSeries(candles)


class TestMtfEngulfing:

    def test_bullish_engulfing_with_htf_trend(self):
        context = StrategyContext(higher_timeframe=_htf_series(), htf_interval="1d")

        result = create_strategy("mtf-engulfing").calculate(_engulfing_base(), context=context)

        assert result.buy_indices() == [20]
        assert result.sell_indices() == []
        stop = result.stop_loss_level[20]
        target = result.take_profit_level[20]
        assert stop < 102.0 < target
        assert target - 102.0 == pytest.approx(2 * (102.0 - stop))
        assert result.get("ema_long", 20) == pytest.approx(50.0)

    def test_closed_htf_bucket_only(self):
        context = StrategyContext(higher_timeframe=_htf_series(), htf_interval="1d")

        result = create_strategy("mtf-engulfing").calculate(
            _engulfing_base(), {"htf_closed_only": True}, context
        )

        assert result.buy_indices() == [20]
        assert result.get("ema_long", 0) == pytest.approx(50.0)

    def test_interval_from_params(self):
        context = StrategyContext(higher_timeframe=_htf_series())

        result = create_strategy("mtf-engulfing").calculate(
            _engulfing_base(), {"htf": "1D"}, context
        )

        assert result.buy_indices() == [20]

    def test_reverse(self):
        context = StrategyContext(higher_timeframe=_htf_series(), htf_interval="1d")

        result = create_strategy("mtf-engulfing").calculate(
            _engulfing_base(), {"reverse": True}, context
        )

        assert result.sell_indices() == [20]
        assert result.stop_loss_level[20] > 102.0 > result.take_profit_level[20]

    def test_missing_htf_returns_base_series(self, caplog):
        with caplog.at_level(logging.WARNING):
            result = create_strategy("mtf-engulfing").calculate(_engulfing_base())

        assert result.buy_indices() == []
        assert not result.has_column("ema_long")
        assert "higher-timeframe series" in caplog.text

    def test_short_htf_returns_base_series(self, caplog):
        context = StrategyContext(higher_timeframe=_htf_series(20), htf_interval="1d")

        with caplog.at_level(logging.WARNING):
            result = create_strategy("mtf-engulfing").calculate(_engulfing_base(), context=context)

        assert result.buy_indices() == []
        assert "shorter than 21" in caplog.text


class TestMapHigherTimeframe:

    def test_carries_last_value_forward(self):
        base = [0, HOUR, DAY, DAY + HOUR, 2 * DAY + 5 * HOUR, 3 * DAY]

        mapped = map_higher_timeframe(base, [0, DAY, 2 * DAY], [None, 1.0, 2.0], DAY)

        assert mapped == [None, None, 1.0, 1.0, 2.0, 2.0]

    def test_closed_only_reads_previous_bucket(self):
        base = [0, HOUR, DAY, DAY + HOUR, 2 * DAY + 5 * HOUR, 3 * DAY]

        mapped = map_higher_timeframe(
            base, [0, DAY, 2 * DAY], [None, 1.0, 2.0], DAY, closed_only=True
        )

        assert mapped == [None, None, None, None, 1.0, 2.0]

    def test_zero_interval(self):
        assert map_higher_timeframe([0, 1], [0], [1.0], 0) == [None, None]
