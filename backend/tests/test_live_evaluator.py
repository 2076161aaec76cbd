"""Tests for LiveEvaluator subscription handling and signal publishing."""

import asyncio
import logging

import pytest

from app.config import Settings
from app.services import CandleUpdate, LiveEvaluator, build_predictor_gate
from core.consensus import Prediction
from core.models import Action, Candle, CandleSeries

HOUR = 3_600_000
DAY = 24 * HOUR


def _make_candle(i: int, close: float) -> Candle:
    return Candle(i * HOUR, close, close + 1.0, close - 1.0, close, 100.0)


def _history(n: int = 49) -> list[Candle]:
    return [_make_candle(i, 100.0 + i) for i in range(n)]


class FakeFeed:
    """Stream factory backed by one asyncio.Queue per (symbol, interval)."""

    def __init__(self):
        self.queues: dict[tuple[str, str], asyncio.Queue] = {}
        self.opened: list[tuple[str, str]] = []
        self.closed: list[tuple[str, str]] = []

    def queue(self, symbol: str, interval: str) -> asyncio.Queue:
        return self.queues.setdefault((symbol, interval), asyncio.Queue())

    def __call__(self, symbol: str, interval: str):
        return self._stream(symbol, interval)

    async def _stream(self, symbol: str, interval: str):
        self.opened.append((symbol, interval))
        queue = self.queue(symbol, interval)
        try:
            while True:
                yield await queue.get()
        finally:
            self.closed.append((symbol, interval))


async def _until(predicate, timeout: float = 2.0) -> None:
    """Yield to the event loop until predicate() holds."""
    async def wait():
        while not predicate():
            await asyncio.sleep(0.001)
    await asyncio.wait_for(wait(), timeout)


def _settings(**kwargs) -> Settings:
    return Settings(**{"default_strategy": "sma-crossover", **kwargs})


class TestCallbacks:

    def test_duplicate_callbacks_ignored(self):
        evaluator = LiveEvaluator(FakeFeed(), settings=_settings())

        async def callback(signal):
            pass

        evaluator.on_signal(callback)
        evaluator.on_signal(callback)
        assert len(evaluator._callbacks) == 1

        evaluator.off_signal(callback)
        assert evaluator._callbacks == []


class TestLiveEvaluator:

    @pytest.mark.asyncio
    async def test_publishes_on_closed_candle(self):
        feed = FakeFeed()
        evaluator = LiveEvaluator(feed, settings=_settings())
        received = []

        async def on_signal(signal):
            received.append(signal)

        evaluator.on_signal(on_signal)
        try:
            await evaluator.subscribe("BTCUSDT", "1h", history=_history())
            await feed.queue("BTCUSDT", "1h").put(CandleUpdate(_make_candle(49, 149.0)))
            await _until(lambda: received)
        finally:
            await evaluator.close()

        signal = received[0]
        assert signal.action == Action.BUY
        assert signal.entry_price == 149.0
        assert signal.strategy_id == "sma-crossover"
        assert signal.asset == "BTCUSDT"
        assert signal.timestamp == 49 * HOUR

    @pytest.mark.asyncio
    async def test_forming_candle_ignored(self):
        feed = FakeFeed()
        evaluator = LiveEvaluator(feed, settings=_settings())
        received = []

        async def on_signal(signal):
            received.append(signal)

        evaluator.on_signal(on_signal)
        try:
            await evaluator.subscribe("BTCUSDT", "1h", history=_history())
            queue = feed.queue("BTCUSDT", "1h")
            # A forming candle this low would evaluate to HOLD
            await queue.put(CandleUpdate(_make_candle(49, 60.0), closed=False))
            await queue.put(CandleUpdate(_make_candle(49, 149.0)))
            await _until(lambda: received)
        finally:
            await evaluator.close()

        assert len(received) == 1
        assert received[0].action == Action.BUY

    @pytest.mark.asyncio
    async def test_hold_published_without_marker(self):
        feed = FakeFeed()
        evaluator = LiveEvaluator(feed, settings=_settings())
        received = []

        async def on_signal(signal):
            received.append(signal)

        evaluator.on_signal(on_signal)
        try:
            await evaluator.subscribe("ETHUSDT", "1h", history=_history(10))
            await feed.queue("ETHUSDT", "1h").put(CandleUpdate(_make_candle(10, 110.0)))
            await _until(lambda: received)
        finally:
            await evaluator.close()

        assert received[0].action == Action.HOLD

    @pytest.mark.asyncio
    async def test_resubscribe_cancels_previous_stream(self):
        feed = FakeFeed()
        evaluator = LiveEvaluator(feed, settings=_settings())
        try:
            first = await evaluator.subscribe("BTCUSDT", "1h")
            await _until(lambda: feed.opened == [("BTCUSDT", "1h")])

            second = await evaluator.subscribe("ETHUSDT", "4h")
            await _until(lambda: len(feed.opened) == 2)

            assert second == first + 1
            assert feed.closed == [("BTCUSDT", "1h")]
            assert evaluator.subscription.symbol == "ETHUSDT"
        finally:
            await evaluator.close()

        assert feed.closed == [("BTCUSDT", "1h"), ("ETHUSDT", "4h")]
        assert evaluator.task is None

    @pytest.mark.asyncio
    async def test_stale_generation_not_published(self):
        evaluator = LiveEvaluator(FakeFeed(), settings=_settings())
        received = []

        async def on_signal(signal):
            received.append(signal)

        evaluator.on_signal(on_signal)
        try:
            generation = await evaluator.subscribe("BTCUSDT", "1h")
            sub = evaluator.subscription
            await evaluator.subscribe("BTCUSDT", "1h")

            for candle in _history(50):
                result = await evaluator.process_closed_candle(sub, candle)
                assert result is None
        finally:
            await evaluator.close()

        assert generation == 1
        assert received == []

    @pytest.mark.asyncio
    async def test_callback_errors_logged(self, caplog):
        evaluator = LiveEvaluator(FakeFeed(), settings=_settings())
        received = []

        async def broken(signal):
            raise RuntimeError("boom")

        async def healthy(signal):
            received.append(signal)

        evaluator.on_signal(broken)
        evaluator.on_signal(healthy)
        try:
            await evaluator.subscribe("BTCUSDT", "1h", history=_history())
            with caplog.at_level(logging.ERROR):
                signal = await evaluator.process_closed_candle(
                    evaluator.subscription, _make_candle(49, 149.0)
                )
        finally:
            await evaluator.close()

        assert signal.action == Action.BUY
        assert len(received) == 1
        assert "boom" in caplog.text

    @pytest.mark.asyncio
    async def test_buffer_is_bounded(self):
        evaluator = LiveEvaluator(FakeFeed(), settings=_settings(buffer_size=5))
        try:
            await evaluator.subscribe("BTCUSDT", "1h")
            sub = evaluator.subscription
            for candle in _history(8):
                await evaluator.process_closed_candle(sub, candle)
        finally:
            await evaluator.close()

        assert len(sub.buffer) == 5
        assert sub.buffer[0].time == 3 * HOUR

    @pytest.mark.asyncio
    async def test_out_of_order_and_same_time(self, caplog):
        evaluator = LiveEvaluator(FakeFeed(), settings=_settings())
        try:
            await evaluator.subscribe("BTCUSDT", "1h", history=_history(5))
            sub = evaluator.subscription

            with caplog.at_level(logging.WARNING):
                late = await evaluator.process_closed_candle(sub, _make_candle(2, 50.0))
            await evaluator.process_closed_candle(sub, _make_candle(4, 99.0))
        finally:
            await evaluator.close()

        assert late is None
        assert "Out-of-order" in caplog.text
        assert len(sub.buffer) == 5
        assert sub.buffer[-1].close == 99.0

    @pytest.mark.asyncio
    async def test_malformed_candle_not_buffered(self, caplog):
        evaluator = LiveEvaluator(FakeFeed(), settings=_settings())
        received = []

        async def on_signal(signal):
            received.append(signal)

        evaluator.on_signal(on_signal)
        try:
            await evaluator.subscribe("BTCUSDT", "1h", history=_history())
            sub = evaluator.subscription
            bad = Candle(49 * HOUR, 149.0, 150.0, 148.0, 149.0, float("nan"))

            with caplog.at_level(logging.WARNING):
                rejected = await evaluator.process_closed_candle(sub, bad)
            signal = await evaluator.process_closed_candle(sub, _make_candle(49, 149.0))
        finally:
            await evaluator.close()

        assert rejected is None
        assert "non-finite" in caplog.text
        assert len(sub.buffer) == 50
        assert signal.action == Action.BUY
        assert received == [signal]

    @pytest.mark.asyncio
    async def test_unknown_strategy(self):
        evaluator = LiveEvaluator(FakeFeed(), settings=_settings())
        try:
            with pytest.raises(KeyError):
                await evaluator.subscribe("BTCUSDT", "1h", strategy_id="nope")
            assert evaluator.subscription is None
            assert evaluator.task is None
        finally:
            await evaluator.close()


def _htf(n: int = 30) -> CandleSeries:
    return CandleSeries(Candle(i * DAY, 50.0, 51.0, 49.0, 50.0) for i in range(n))


class TestHigherTimeframe:

    @pytest.mark.asyncio
    async def test_htf_interval_from_params(self):
        calls = []

        async def fetch(symbol, interval):
            calls.append((symbol, interval))
            return _htf()

        evaluator = LiveEvaluator(FakeFeed(), htf_fetcher=fetch, settings=_settings())
        try:
            await evaluator.subscribe("BTCUSDT", "1h", strategy_id="mtf-engulfing")
            sub = evaluator.subscription
            await evaluator.process_closed_candle(sub, _make_candle(0, 100.0))
        finally:
            await evaluator.close()

        assert sub.htf_interval == "1d"
        assert calls == [("BTCUSDT", "1d")]

    @pytest.mark.asyncio
    async def test_fetch_failure_continues(self, caplog):
        async def fetch(symbol, interval):
            raise ConnectionError("exchange down")

        evaluator = LiveEvaluator(FakeFeed(), htf_fetcher=fetch, settings=_settings())
        try:
            await evaluator.subscribe(
                "BTCUSDT", "1h", strategy_id="mtf-engulfing", history=_history(30)
            )
            with caplog.at_level(logging.WARNING):
                signal = await evaluator.process_closed_candle(
                    evaluator.subscription, _make_candle(30, 130.0)
                )
        finally:
            await evaluator.close()

        assert signal.action == Action.HOLD
        assert "Higher-timeframe fetch failed" in caplog.text

    @pytest.mark.asyncio
    async def test_fetch_timeout_continues(self, caplog):
        async def fetch(symbol, interval):
            await asyncio.sleep(10)

        evaluator = LiveEvaluator(
            FakeFeed(), htf_fetcher=fetch, settings=_settings(htf_fetch_timeout=0.01)
        )
        try:
            await evaluator.subscribe("BTCUSDT", "1h", strategy_id="mtf-engulfing")
            with caplog.at_level(logging.WARNING):
                signal = await evaluator.process_closed_candle(
                    evaluator.subscription, _make_candle(0, 100.0)
                )
        finally:
            await evaluator.close()

        assert signal.action == Action.HOLD
        assert "timed out" in caplog.text


class _UpPredictor:
    async def predict(self, request):
        return Prediction(direction="UP", confidence=0.75)


class TestPredictorWiring:

    @pytest.mark.asyncio
    async def test_gate_from_settings(self):
        settings = _settings(
            consensus_strategies=["sma-crossover"],
            predictor_throttle_every=2,
            predictor_min_confidence=0.5,
        )

        gate = build_predictor_gate(_UpPredictor(), settings)
        candles = CandleSeries(_history(50))

        assert gate.throttle_every == 2
        assert gate.aggregator.strategy_ids == ["sma-crossover"]
        signal = await gate.evaluate(candles, asset="BTCUSDT")
        assert signal.action == Action.BUY
        assert signal.confidence == pytest.approx(0.75)
