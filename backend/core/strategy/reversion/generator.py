"""Mean-reversion signal generators.

Each generator waits for price or an oscillator to stretch into an
extreme zone and enters on the first candle that moves back out of it.
"""

import logging

from core.indicators import bollinger_bands, cci, pivot_points, rsi, williams_r
from core.strategy.base import BaseStrategy, fell_through, rose_through
from core.strategy.registry import register_strategy
from core.strategy.reversion.models import (
    BollingerBandsParams,
    CciReversionParams,
    PivotPointReversalParams,
    RsiDivergenceParams,
    WilliamsRParams,
)

logger = logging.getLogger(__name__)


def _mark_zone_exits(out, line, oversold: float, overbought: float, reverse: bool = False) -> None:
    """Buy when the line rises back above `oversold`, sell when it falls back below `overbought`."""
    for i in range(1, len(out)):
        if rose_through(line, oversold, i):
            BaseStrategy.emit(out, i, True, reverse)
        elif fell_through(line, overbought, i):
            BaseStrategy.emit(out, i, False, reverse)


@register_strategy("rsi-divergence")
class RsiDivergenceStrategy(BaseStrategy):
    name = "RSI Divergence"
    description = "Buys when RSI leaves the oversold zone and sells when it leaves the overbought zone."
    params_model = RsiDivergenceParams

    def min_candles(self, params: RsiDivergenceParams) -> int:
        return params.period + 1

    def annotate(self, candles, params: RsiDivergenceParams, out, context) -> None:
        line = rsi(candles.closes, params.period)
        out.set_column("rsi", line)
        _mark_zone_exits(out, line, params.oversold, params.overbought)


@register_strategy("bollinger-bands")
class BollingerBandsStrategy(BaseStrategy):
    """Band touch on the previous candle, close back inside on this one."""

    name = "Bollinger Bands"
    description = "Mean reversion after price touches a Bollinger Band and closes back inside."
    params_model = BollingerBandsParams

    def min_candles(self, params: BollingerBandsParams) -> int:
        return params.period

    def annotate(self, candles, params: BollingerBandsParams, out, context) -> None:
        bands = bollinger_bands(candles.closes, params.period, params.std_dev)
        out.set_column("bb_upper", bands.upper)
        out.set_column("bb_middle", bands.middle)
        out.set_column("bb_lower", bands.lower)
        upper, lower = bands.upper, bands.lower
        for i in range(1, len(candles)):
            if upper[i - 1] is None:
                continue
            prev, cur = candles[i - 1], candles[i]
            if prev.low <= lower[i - 1] and cur.close > lower[i]:
                out.mark_buy(i)
            elif prev.high >= upper[i - 1] and cur.close < upper[i]:
                out.mark_sell(i)


@register_strategy("williams-r")
class WilliamsRStrategy(BaseStrategy):
    name = "Williams %R"
    description = "Buys when %R rises out of oversold and sells when it falls out of overbought."
    params_model = WilliamsRParams

    def min_candles(self, params: WilliamsRParams) -> int:
        return params.period

    def annotate(self, candles, params: WilliamsRParams, out, context) -> None:
        line = williams_r(candles.highs, candles.lows, candles.closes, params.period)
        out.set_column("williams_r", line)
        _mark_zone_exits(out, line, params.oversold, params.overbought)


@register_strategy("cci-reversion")
class CciReversionStrategy(BaseStrategy):
    name = "CCI Reversion"
    description = "Trades CCI moving back inside its overbought/oversold levels."
    params_model = CciReversionParams

    def min_candles(self, params: CciReversionParams) -> int:
        return params.period

    def annotate(self, candles, params: CciReversionParams, out, context) -> None:
        line = cci(candles.highs, candles.lows, candles.closes, params.period)
        out.set_column("cci", line)
        _mark_zone_exits(out, line, params.oversold, params.overbought, params.reverse)


@register_strategy("pivot-point-reversal")
class PivotPointReversalStrategy(BaseStrategy):
    """Rejection of a support or resistance pivot.

    Buy: the candle's low reaches S1, S2 or S3 (the previous low was above
    it) and the close is back above that level. Sell mirrors on R1..R3.
    """

    name = "Pivot Point Reversal"
    description = "Fades touches of the floor pivot support and resistance levels."
    params_model = PivotPointReversalParams

    def min_candles(self, params: PivotPointReversalParams) -> int:
        return params.period

    def annotate(self, candles, params: PivotPointReversalParams, out, context) -> None:
        pivots = pivot_points(candles.highs, candles.lows, candles.closes, params.period)
        out.set_column("pivot_point", pivots.pivot)
        for name in ("s1", "s2", "s3", "r1", "r2", "r3"):
            out.set_column(name, getattr(pivots, name))

        supports = (pivots.s1, pivots.s2, pivots.s3)
        resistances = (pivots.r1, pivots.r2, pivots.r3)
        for i in range(1, len(candles)):
            if pivots.pivot[i] is None:
                continue
            prev, cur = candles[i - 1], candles[i]
            bullish = any(
                prev.low > level[i] >= cur.low and cur.close > level[i]
                for level in supports
            )
            bearish = any(
                prev.high < level[i] <= cur.high and cur.close < level[i]
                for level in resistances
            )
            if bullish:
                out.mark_buy(i)
            if bearish:
                out.mark_sell(i)
