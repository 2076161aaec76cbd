"""Crossover family signal generators.

Two kinds of entries:
- Line crossovers: a fast line crosses a slow line (SMA/EMA pairs,
  MACD vs signal, %K vs %D, OBV vs its SMA).
- Zero-line and price crosses: an oscillator crosses 0, or the close
  crosses an overlay (VWAP).

This module is pure business logic with no I/O dependencies.
"""

import logging

from core.indicators import (
    awesome_oscillator,
    chaikin_money_flow,
    coppock_curve,
    elder_ray,
    ema,
    macd,
    momentum,
    obv,
    sma,
    stochastic,
    vwap,
)
from core.strategy.base import (
    BaseStrategy,
    crossed_above,
    crossed_below,
    fell_through,
    rose_through,
)
from core.strategy.crossover.models import (
    AwesomeOscillatorParams,
    ChaikinMoneyFlowParams,
    CoppockCurveParams,
    ElderRayParams,
    EmaCrossoverParams,
    MacdCrossoverParams,
    MomentumCrossParams,
    ObvDivergenceParams,
    SmaCrossoverParams,
    StochasticCrossoverParams,
    VwapCrossParams,
)
from core.strategy.registry import register_strategy

logger = logging.getLogger(__name__)


def _mark_line_cross(out, fast, slow, reverse: bool = False) -> None:
    for i in range(len(out)):
        if crossed_above(fast, slow, i):
            BaseStrategy.emit(out, i, True, reverse)
        elif crossed_below(fast, slow, i):
            BaseStrategy.emit(out, i, False, reverse)


def _mark_zero_cross(out, line, reverse: bool = False) -> None:
    for i in range(1, len(out)):
        if rose_through(line, 0.0, i):
            BaseStrategy.emit(out, i, True, reverse)
        elif fell_through(line, 0.0, i):
            BaseStrategy.emit(out, i, False, reverse)


@register_strategy("sma-crossover")
class SmaCrossoverStrategy(BaseStrategy):
    """Short SMA crossing above (buy) or below (sell) the long SMA."""

    name = "SMA Crossover"
    description = "Buys when the short SMA crosses above the long SMA and sells on the opposite cross."
    params_model = SmaCrossoverParams

    def min_candles(self, params: SmaCrossoverParams) -> int:
        return params.long_period

    def annotate(self, candles, params: SmaCrossoverParams, out, context) -> None:
        short = sma(candles.closes, params.short_period)
        long = sma(candles.closes, params.long_period)
        out.set_column("sma_short", short)
        out.set_column("sma_long", long)
        _mark_line_cross(out, short, long)


@register_strategy("ema-crossover")
class EmaCrossoverStrategy(BaseStrategy):
    """Short EMA crossing the long EMA."""

    name = "EMA Crossover"
    description = "Buys when the short EMA crosses above the long EMA and sells on the opposite cross."
    params_model = EmaCrossoverParams

    def min_candles(self, params: EmaCrossoverParams) -> int:
        return params.long_period

    def annotate(self, candles, params: EmaCrossoverParams, out, context) -> None:
        short = ema(candles.closes, params.short_period)
        long = ema(candles.closes, params.long_period)
        out.set_column("ema_short", short)
        out.set_column("ema_long", long)
        _mark_line_cross(out, short, long, params.reverse)


@register_strategy("macd-crossover")
class MacdCrossoverStrategy(BaseStrategy):
    name = "MACD Crossover"
    description = "Trades the MACD line crossing its signal line."
    params_model = MacdCrossoverParams

    def min_candles(self, params: MacdCrossoverParams) -> int:
        return params.long_period

    def annotate(self, candles, params: MacdCrossoverParams, out, context) -> None:
        result = macd(
            candles.closes, params.short_period, params.long_period, params.signal_period
        )
        out.set_column("macd", result.macd)
        out.set_column("macd_signal", result.signal)
        out.set_column("macd_hist", result.histogram)
        _mark_line_cross(out, result.macd, result.signal)


@register_strategy("stochastic-crossover")
class StochasticCrossoverStrategy(BaseStrategy):
    name = "Stochastic Crossover"
    description = "A momentum strategy based on the Stochastic %K line crossing the %D line."
    params_model = StochasticCrossoverParams

    def min_candles(self, params: StochasticCrossoverParams) -> int:
        return params.period + params.smooth_k + params.smooth_d

    def annotate(self, candles, params: StochasticCrossoverParams, out, context) -> None:
        result = stochastic(
            candles.highs, candles.lows, candles.closes,
            params.period, params.smooth_k, params.smooth_d,
        )
        out.set_column("stoch_k", result.k)
        out.set_column("stoch_d", result.d)
        _mark_line_cross(out, result.k, result.d)


@register_strategy("vwap-cross")
class VwapCrossStrategy(BaseStrategy):
    """Close crossing a rolling VWAP."""

    name = "VWAP Cross"
    description = "Signals when the close crosses a rolling volume-weighted average price."
    params_model = VwapCrossParams

    def min_candles(self, params: VwapCrossParams) -> int:
        return params.period

    def annotate(self, candles, params: VwapCrossParams, out, context) -> None:
        line = vwap(
            candles.highs, candles.lows, candles.closes, candles.volumes, params.period
        )
        out.set_column("vwap", line)
        closes = candles.closes
        for i in range(1, len(candles)):
            if line[i] is None or line[i - 1] is None:
                continue
            if closes[i - 1] <= line[i - 1] and closes[i] > line[i]:
                self.emit(out, i, True, params.reverse)
            elif closes[i - 1] >= line[i - 1] and closes[i] < line[i]:
                self.emit(out, i, False, params.reverse)


@register_strategy("momentum-cross")
class MomentumCrossStrategy(BaseStrategy):
    name = "Momentum Cross"
    description = "Momentum crossing above zero buys; crossing below zero sells."
    params_model = MomentumCrossParams

    def min_candles(self, params: MomentumCrossParams) -> int:
        return params.period

    def annotate(self, candles, params: MomentumCrossParams, out, context) -> None:
        line = momentum(candles.closes, params.period)
        out.set_column("momentum", line)
        _mark_zero_cross(out, line)


@register_strategy("awesome-oscillator")
class AwesomeOscillatorStrategy(BaseStrategy):
    name = "Awesome Oscillator"
    description = "Zero-line crosses of the Awesome Oscillator."
    params_model = AwesomeOscillatorParams

    def min_candles(self, params: AwesomeOscillatorParams) -> int:
        return params.long_period

    def annotate(self, candles, params: AwesomeOscillatorParams, out, context) -> None:
        line = awesome_oscillator(
            candles.highs, candles.lows, params.short_period, params.long_period
        )
        out.set_column("awesome_oscillator", line)
        _mark_zero_cross(out, line)


@register_strategy("coppock-curve")
class CoppockCurveStrategy(BaseStrategy):
    name = "Coppock Curve"
    description = "A long-term momentum indicator; signals when the curve crosses zero."
    params_model = CoppockCurveParams

    def min_candles(self, params: CoppockCurveParams) -> int:
        return params.long_roc + params.wma_period

    def annotate(self, candles, params: CoppockCurveParams, out, context) -> None:
        line = coppock_curve(
            candles.closes, params.long_roc, params.short_roc, params.wma_period
        )
        out.set_column("coppock", line)
        _mark_zero_cross(out, line)


@register_strategy("obv-divergence")
class ObvDivergenceStrategy(BaseStrategy):
    """On-Balance Volume crossing its own SMA."""

    name = "OBV Divergence"
    description = "Buys when OBV crosses above its moving average, sells on the cross below."
    params_model = ObvDivergenceParams

    def min_candles(self, params: ObvDivergenceParams) -> int:
        return params.period

    def annotate(self, candles, params: ObvDivergenceParams, out, context) -> None:
        line = obv(candles.closes, candles.volumes)
        average = sma(line, params.period)
        out.set_column("obv", line)
        out.set_column("obv_sma", average)
        _mark_line_cross(out, line, average)


@register_strategy("chaikin-money-flow")
class ChaikinMoneyFlowStrategy(BaseStrategy):
    name = "Chaikin Money Flow"
    description = "Zero-line crosses of Chaikin Money Flow."
    params_model = ChaikinMoneyFlowParams

    def min_candles(self, params: ChaikinMoneyFlowParams) -> int:
        return params.period

    def annotate(self, candles, params: ChaikinMoneyFlowParams, out, context) -> None:
        line = chaikin_money_flow(
            candles.highs, candles.lows, candles.closes, candles.volumes, params.period
        )
        out.set_column("cmf", line)
        _mark_zero_cross(out, line, params.reverse)


@register_strategy("elder-ray-index")
class ElderRayStrategy(BaseStrategy):
    """Bull/bear power zero crosses filtered by the EMA slope.

    Buy: EMA rising and bear power crosses above 0.
    Sell: EMA falling and bull power crosses below 0.
    """

    name = "Elder-Ray Index"
    description = "Uses Bull and Bear Power with an EMA for trend direction."
    params_model = ElderRayParams

    def min_candles(self, params: ElderRayParams) -> int:
        return params.period

    def annotate(self, candles, params: ElderRayParams, out, context) -> None:
        result = elder_ray(candles.highs, candles.lows, candles.closes, params.period)
        out.set_column("ema_short", result.ema)
        out.set_column("bull_power", result.bull_power)
        out.set_column("bear_power", result.bear_power)
        trend = result.ema
        for i in range(1, len(candles)):
            if trend[i] is None or trend[i - 1] is None:
                continue
            if trend[i] > trend[i - 1] and rose_through(result.bear_power, 0.0, i):
                self.emit(out, i, True, params.reverse)
            elif trend[i] < trend[i - 1] and fell_through(result.bull_power, 0.0, i):
                self.emit(out, i, False, params.reverse)
