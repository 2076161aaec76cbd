"""Live strategy evaluation over a streaming candle feed.

One active subscription at a time:
- subscribe() cancels the in-flight stream task before starting a new one
- each closed candle is appended to a bounded buffer and the strategy is
  re-run over the buffer in a worker thread
- the resulting TradeSignal is published to registered async callbacks
- every delivery is tagged with the subscription generation; results from a
  superseded generation are dropped instead of published

Higher-timeframe candles are pulled through an optional async fetcher with a
timeout. A failed or slow fetch is logged and evaluation continues without it.
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Awaitable, Callable, Iterable, Mapping

from app.config import Settings, get_settings
from core.models import Candle, CandleSeries, MalformedSeriesError, TradeSignal
from core.signals import build_trade_signal
from core.strategy import StrategyContext, create_strategy

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class CandleUpdate:
    """A streamed candle; `closed` is False while the candle is still forming."""

    candle: Candle
    closed: bool = True


# (symbol, interval) -> async iterator of candle updates
StreamFactory = Callable[[str, str], AsyncIterator[CandleUpdate]]
# (symbol, interval) -> higher-timeframe candles
HtfFetcher = Callable[[str, str], Awaitable[CandleSeries]]
SignalCallback = Callable[[TradeSignal], Awaitable[None]]


@dataclass
class Subscription:
    generation: int
    symbol: str
    interval: str
    strategy: Any
    params: Mapping[str, Any] | None
    buffer: deque = field(default_factory=deque)
    htf_interval: str | None = None


class LiveEvaluator:
    """Re-evaluates one strategy on every newly closed candle of a stream."""

    def __init__(
        self,
        stream_factory: StreamFactory,
        htf_fetcher: HtfFetcher | None = None,
        settings: Settings | None = None,
    ):
        self.settings = settings or get_settings()
        self._stream_factory = stream_factory
        self._htf_fetcher = htf_fetcher
        self._callbacks: list[SignalCallback] = []
        self._generation = 0
        self._subscription: Subscription | None = None
        self._task: asyncio.Task | None = None

    # ------------------------------------------------------------------
    # Callbacks
    # ------------------------------------------------------------------

    def on_signal(self, callback: SignalCallback) -> None:
        """Register callback for published signals.

        Note: Duplicate callbacks are ignored.
        """
        if callback not in self._callbacks:
            self._callbacks.append(callback)

    def off_signal(self, callback: SignalCallback) -> None:
        """Unregister callback for published signals."""
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    # ------------------------------------------------------------------
    # Subscription lifecycle
    # ------------------------------------------------------------------

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def subscription(self) -> Subscription | None:
        return self._subscription

    @property
    def task(self) -> asyncio.Task | None:
        return self._task

    async def subscribe(
        self,
        symbol: str,
        interval: str,
        strategy_id: str | None = None,
        params: Mapping[str, Any] | None = None,
        history: Iterable[Candle] = (),
        htf_interval: str | None = None,
    ) -> int:
        """
        Start evaluating `strategy_id` on the (symbol, interval) stream.

        Args:
            symbol: Instrument symbol
            interval: Candle interval (e.g. '1h')
            strategy_id: Registered strategy id (settings default when None)
            params: Strategy parameter overrides
            history: Closed candles to seed the buffer with
            htf_interval: Higher-timeframe interval to fetch; defaults to the
                strategy's `htf` parameter when it has one

        Returns:
            The generation number of the new subscription

        Raises:
            KeyError: strategy_id is not registered
        """
        strategy = create_strategy(strategy_id or self.settings.default_strategy)
        await self._cancel_task()

        if htf_interval is None:
            htf_interval = getattr(strategy.resolve_params(params), "htf", None)

        self._generation += 1
        sub = Subscription(
            generation=self._generation,
            symbol=symbol,
            interval=interval,
            strategy=strategy,
            params=params,
            buffer=deque(history, maxlen=self.settings.buffer_size),
            htf_interval=htf_interval,
        )
        self._subscription = sub
        self._task = asyncio.create_task(self._run(sub))
        logger.info(
            f"Live subscription #{sub.generation}: {symbol} {interval} "
            f"strategy={strategy.id}"
        )
        return sub.generation

    async def unsubscribe(self) -> None:
        """Stop the active subscription; pending results become stale."""
        if self._subscription is not None:
            logger.info(
                f"Live subscription #{self._subscription.generation} stopped: "
                f"{self._subscription.symbol} {self._subscription.interval}"
            )
        self._generation += 1
        self._subscription = None
        await self._cancel_task()

    async def close(self) -> None:
        await self.unsubscribe()
        self._callbacks.clear()

    async def _cancel_task(self) -> None:
        task, self._task = self._task, None
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    async def _run(self, sub: Subscription) -> None:
        stream = self._stream_factory(sub.symbol, sub.interval)
        try:
            async for update in stream:
                if sub.generation != self._generation:
                    break
                if not update.closed:
                    continue
                await self.process_closed_candle(sub, update.candle)
        except Exception as e:
            logger.error(f"Live stream error ({sub.symbol} {sub.interval}): {e}")
        finally:
            aclose = getattr(stream, "aclose", None)
            if aclose is not None:
                await aclose()

    async def process_closed_candle(
        self, sub: Subscription, candle: Candle
    ) -> TradeSignal | None:
        """Append a closed candle, re-run the strategy and publish the signal."""
        buffer = sub.buffer
        if buffer and candle.time < buffer[-1].time:
            logger.warning(
                f"Out-of-order candle {candle.time} ignored ({sub.symbol} {sub.interval})"
            )
            return None
        replaces_last = bool(buffer) and candle.time == buffer[-1].time
        window = list(buffer)[:-1] if replaces_last else list(buffer)
        window.append(candle)
        if buffer.maxlen is not None:
            window = window[-buffer.maxlen:]

        # The buffer only takes candles that produce a valid series
        try:
            candles = CandleSeries(window)
        except MalformedSeriesError as e:
            logger.warning(f"Live candle rejected ({sub.symbol} {sub.interval}): {e}")
            return None

        if replaces_last:
            buffer[-1] = candle
        else:
            buffer.append(candle)

        context = await self._build_context(sub)
        annotated = await asyncio.to_thread(
            sub.strategy.calculate, candles, sub.params, context
        )
        signal = build_trade_signal(annotated, sub.strategy.id, asset=sub.symbol)
        if signal is None:
            return None
        if not await self.publish(sub.generation, signal):
            return None
        return signal

    async def _build_context(self, sub: Subscription) -> StrategyContext:
        context = StrategyContext(symbol=sub.symbol, htf_interval=sub.htf_interval)
        if self._htf_fetcher is None or not sub.htf_interval:
            return context
        try:
            context.higher_timeframe = await asyncio.wait_for(
                self._htf_fetcher(sub.symbol, sub.htf_interval),
                timeout=self.settings.htf_fetch_timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(
                f"Higher-timeframe fetch timed out ({sub.symbol} {sub.htf_interval}); "
                "continuing without it"
            )
        except Exception as e:
            logger.warning(
                f"Higher-timeframe fetch failed ({sub.symbol} {sub.htf_interval}): {e}; "
                "continuing without it"
            )
        return context

    async def publish(self, generation: int, signal: TradeSignal) -> bool:
        """Deliver a signal unless its subscription generation is stale."""
        if generation != self._generation:
            logger.debug(f"Dropped stale signal from subscription #{generation}")
            return False
        for callback in list(self._callbacks):
            try:
                await callback(signal)
            except Exception as e:
                logger.error(f"Signal callback error: {e}")
        return True
