"""Peak Formation Fib strategy implementation (non-repainting).

Short setup, evaluated at every candle i using only candles <= i:
1. Peak: the most recent swing high (peak lookaround) confirmed by i
2. The last swing low (swing lookaround) before the peak
3. Break of structure: first close below that swing low after the peak,
   with the short EMA below the long EMA on the break candle
4. Pullback extreme: lowest low from the break to i
5. Retracement levels between the peak and the pullback extreme
6. Entry: the first fresh cross of a level within `signal_staleness`
   candles of the break; stop just above the peak

The long setup mirrors it on swing lows. Each (peak, break) setup emits
at most once.

This module is pure business logic with no I/O dependencies.
"""

import logging
from dataclasses import dataclass

from core.indicators import ema
from core.structure import (
    Bias,
    SwingIndex,
    SwingPoint,
    find_break_of_structure,
    find_swing_highs,
    find_swing_lows,
)
from core.strategy.base import BaseStrategy
from core.strategy.peak_formation.models import PeakFormationFibParams
from core.strategy.registry import register_strategy

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class FibSetup:
    """A peak that has been followed by a break of structure."""

    direction: Bias
    peak: SwingPoint
    bos_index: int
    extreme: float
    levels: tuple[float, ...]

    @property
    def key(self) -> tuple[str, int, int]:
        return (self.direction.value, self.peak.index, self.bos_index)


@register_strategy("peak-formation-fib")
class PeakFormationFibStrategy(BaseStrategy):
    """Peak, break of structure, then entry on a Fibonacci retracement."""

    name = "Peak Formation Fib (Non-Repainting)"
    description = (
        "Identifies market peaks, waits for a break of structure, and enters "
        "on a Fibonacci retracement without using future candles."
    )
    params_model = PeakFormationFibParams

    def min_candles(self, params: PeakFormationFibParams) -> int:
        return params.ema_long_period

    def annotate(self, candles, params: PeakFormationFibParams, out, context) -> None:
        closes, highs, lows = candles.closes, candles.highs, candles.lows
        ema_short = ema(closes, params.ema_short_period)
        ema_long = ema(closes, params.ema_long_period)
        out.set_column("ema_short", ema_short)
        out.set_column("ema_long", ema_long)

        peak_l, swing_l = params.peak_lookaround, params.swing_lookaround
        if peak_l <= 0 or swing_l <= 0:
            return
        peak_highs = SwingIndex(find_swing_highs(highs, peak_l, candles.times), peak_l)
        peak_lows = SwingIndex(find_swing_lows(lows, peak_l, candles.times), peak_l)
        swing_highs = SwingIndex(find_swing_highs(highs, swing_l, candles.times), swing_l)
        swing_lows = SwingIndex(find_swing_lows(lows, swing_l, candles.times), swing_l)

        emitted: set[tuple[str, int, int]] = set()
        for i in range(max(peak_l + swing_l, 1), len(candles)):
            short = self._bearish_setup(i, params, candles, peak_highs, swing_lows, ema_short, ema_long)
            if short is not None and short.key not in emitted:
                level = self._crossed_level(short, i, highs, lows)
                if level is not None:
                    emitted.add(short.key)
                    self._emit_setup(out, i, short, level, params)

            long = self._bullish_setup(i, params, candles, peak_lows, swing_highs, ema_short, ema_long)
            if long is not None and long.key not in emitted:
                level = self._crossed_level(long, i, highs, lows)
                if level is not None:
                    emitted.add(long.key)
                    self._emit_setup(out, i, long, level, params)

    # ------------------------------------------------------------------
    # Setup detection
    # ------------------------------------------------------------------

    @staticmethod
    def _bearish_setup(i, params, candles, peak_highs, swing_lows, ema_short, ema_long):
        peak = peak_highs.latest(i)
        if peak is None:
            return None
        support = swing_lows.latest(i, before=peak.index)
        if support is None:
            return None
        bos = find_break_of_structure(candles.closes, support.price, Bias.BEARISH, peak.index, i)
        if bos is None or i > bos + params.signal_staleness:
            return None
        fast, slow = ema_short[bos], ema_long[bos]
        if fast is None or slow is None or not fast < slow:
            return None
        extreme = min(candles.lows[bos: i + 1])
        span = peak.price - extreme
        levels = (extreme + span * params.fib_level1, extreme + span * params.fib_level2)
        return FibSetup(Bias.BEARISH, peak, bos, extreme, levels)

    @staticmethod
    def _bullish_setup(i, params, candles, peak_lows, swing_highs, ema_short, ema_long):
        peak = peak_lows.latest(i)
        if peak is None:
            return None
        resistance = swing_highs.latest(i, before=peak.index)
        if resistance is None:
            return None
        bos = find_break_of_structure(candles.closes, resistance.price, Bias.BULLISH, peak.index, i)
        if bos is None or i > bos + params.signal_staleness:
            return None
        fast, slow = ema_short[bos], ema_long[bos]
        if fast is None or slow is None or not fast > slow:
            return None
        extreme = max(candles.highs[bos: i + 1])
        span = extreme - peak.price
        levels = (extreme - span * params.fib_level1, extreme - span * params.fib_level2)
        return FibSetup(Bias.BULLISH, peak, bos, extreme, levels)

    @staticmethod
    def _crossed_level(setup: FibSetup, i: int, highs, lows) -> float | None:
        """First retracement level freshly reached by candle i."""
        for level in setup.levels:
            if setup.direction == Bias.BEARISH:
                if highs[i] >= level and highs[i - 1] < level:
                    return level
            elif lows[i] <= level and lows[i - 1] > level:
                return level
        return None

    def _emit_setup(self, out, i, setup: FibSetup, level: float, params) -> None:
        logger.debug(
            "peak-formation-fib %s entry at %d (peak %d, bos %d, level %.6f)",
            setup.direction.value, i, setup.peak.index, setup.bos_index, level,
        )
        bullish = setup.direction == Bias.BULLISH
        self.emit(out, i, bullish, params.reverse, price=level)
        out.peak_price[i] = setup.peak.price
        if params.reverse:
            # The peak is on the wrong side of a reversed entry
            return
        if bullish:
            out.stop_loss_level[i] = setup.peak.price * (1 - params.stop_buffer)
        else:
            out.stop_loss_level[i] = setup.peak.price * (1 + params.stop_buffer)
