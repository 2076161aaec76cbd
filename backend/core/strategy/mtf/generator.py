"""MTF Engulfing strategy implementation.

Trend comes from an EMA on an independently supplied higher-timeframe
series; entries are engulfing candles on the base series in the trend
direction:
- LONG: close above the HTF EMA and a bullish engulfing candle
- SHORT: close below the HTF EMA and a bearish engulfing candle

SL/TP based on ATR:
- SL = close -/+ sl_atr_multiplier * ATR
- TP = close +/- sl_atr_multiplier * ATR * rr_ratio
"""

import logging
from typing import Sequence

from core.indicators import atr, ema
from core.models import Candle, CandleSeries, bucket_start, interval_to_ms
from core.strategy.base import BaseStrategy
from core.strategy.mtf.models import MtfEngulfingParams
from core.strategy.registry import register_strategy

logger = logging.getLogger(__name__)


def map_higher_timeframe(
    base_times: Sequence[int],
    htf_times: Sequence[int],
    htf_values: Sequence[float | None],
    interval_ms: int,
    closed_only: bool = False,
) -> list[float | None]:
    """Join a higher-timeframe series onto base candles.

    Each base timestamp is bucketed into its enclosing higher-timeframe
    interval; when a higher-timeframe value exists for that bucket it
    becomes the current value, otherwise the last known value is carried
    forward.

    By default a base candle sees the value of the bucket that contains it,
    which on historical data is computed from the bucket's final close and
    so includes prices later than the base candle. With `closed_only` each
    base candle reads the previous, already completed bucket instead.

    Args:
        base_times: Base candle times (epoch ms)
        htf_times: Higher-timeframe candle times (epoch ms)
        htf_values: Higher-timeframe indicator values (None = undefined)
        interval_ms: Higher-timeframe interval length
        closed_only: Read the last completed bucket rather than the current one

    Returns:
        Values aligned with `base_times`
    """
    if interval_ms <= 0:
        return [None] * len(base_times)
    by_bucket = {
        bucket_start(t, interval_ms): v
        for t, v in zip(htf_times, htf_values)
        if v is not None
    }
    mapped: list[float | None] = []
    last: float | None = None
    offset = interval_ms if closed_only else 0
    for t in base_times:
        value = by_bucket.get(bucket_start(t, interval_ms) - offset)
        if value is not None:
            last = value
        mapped.append(last)
    return mapped


def _bullish_engulfing(prev: Candle, cur: Candle) -> bool:
    return prev.is_bearish and cur.is_bullish and cur.close > prev.open and cur.open < prev.close


def _bearish_engulfing(prev: Candle, cur: Candle) -> bool:
    return prev.is_bullish and cur.is_bearish and cur.close < prev.open and cur.open > prev.close


@register_strategy("mtf-engulfing")
class MtfEngulfingStrategy(BaseStrategy):
    """Engulfing entries filtered by a higher-timeframe EMA trend."""

    name = "MTF Engulfing"
    description = "Uses a higher-timeframe EMA for trend and enters on a base-timeframe engulfing candle."
    params_model = MtfEngulfingParams

    def min_candles(self, params: MtfEngulfingParams) -> int:
        return params.ema_length

    def annotate(self, candles, params: MtfEngulfingParams, out, context) -> None:
        htf: CandleSeries | None = context.higher_timeframe if context else None
        interval = (context.htf_interval if context else None) or params.htf
        if htf is None or len(htf) < params.ema_length:
            logger.warning(
                "mtf-engulfing: higher-timeframe series (%s) missing or shorter than %d candles; "
                "returning base series without the overlay",
                interval, params.ema_length,
            )
            return
        interval_ms = interval_to_ms(interval)
        if interval_ms == 0:
            logger.warning("mtf-engulfing: unknown higher-timeframe interval %r", interval)
            return

        htf_ema = map_higher_timeframe(
            candles.times,
            htf.times,
            ema(htf.closes, params.ema_length),
            interval_ms,
            closed_only=params.htf_closed_only,
        )
        atr_values = atr(candles.highs, candles.lows, candles.closes, params.atr_length)
        out.set_column("ema_long", htf_ema)
        out.set_column("atr", atr_values)

        risk_mult = params.sl_atr_multiplier
        for i in range(1, len(candles)):
            trend, band = htf_ema[i], atr_values[i]
            if trend is None or band is None:
                continue
            prev, cur = candles[i - 1], candles[i]
            if cur.close > trend and _bullish_engulfing(prev, cur):
                bullish = True
            elif cur.close < trend and _bearish_engulfing(prev, cur):
                bullish = False
            else:
                continue

            self.emit(out, i, bullish, params.reverse)
            risk = band * risk_mult
            if bullish != params.reverse:
                out.stop_loss_level[i] = cur.close - risk
                out.take_profit_level[i] = cur.close + risk * params.rr_ratio
            else:
                out.stop_loss_level[i] = cur.close + risk
                out.take_profit_level[i] = cur.close - risk * params.rr_ratio
