"""Confluence signal generators.

Each generator requires several independent indicators to agree on the
same candle: a trend filter (EMA or Supertrend), a trigger (CCI, SMI of
MFI, cumulative volume delta) and, for some, a momentum or price-level
confirmation.
"""

import logging

from core.indicators import (
    cci,
    ema,
    macd,
    mfi,
    pivot_points,
    point_of_control,
    smi,
    supertrend,
    volume_delta,
)
from core.strategy.base import BaseStrategy, fell_through, rose_through
from core.strategy.confluence.models import (
    EmaCciMacdParams,
    SmiMfiParams,
    SmiMfiScalpParams,
    SmiMfiSupertrendParams,
    VolumeDeltaParams,
)
from core.strategy.registry import register_strategy

logger = logging.getLogger(__name__)


@register_strategy("ema-cci-macd")
class EmaCciMacdStrategy(BaseStrategy):
    """Trend pullback entry.

    Buy: CCI rises back above -cci_level while close is above the trend
    EMA and the MACD histogram is positive. Sell mirrors on +cci_level.
    """

    name = "EMA-CCI-MACD Triple Confirmation"
    description = "EMA trend filter, CCI pullback trigger and MACD momentum confirmation."
    params_model = EmaCciMacdParams

    def min_candles(self, params: EmaCciMacdParams) -> int:
        return max(
            params.ema_period,
            params.cci_period,
            params.macd_long_period + params.macd_signal_period,
        )

    def annotate(self, candles, params: EmaCciMacdParams, out, context) -> None:
        trend = ema(candles.closes, params.ema_period)
        line = cci(candles.highs, candles.lows, candles.closes, params.cci_period)
        hist = macd(
            candles.closes,
            params.macd_short_period,
            params.macd_long_period,
            params.macd_signal_period,
        ).histogram
        out.set_column("ema_long", trend)
        out.set_column("cci", line)
        out.set_column("macd_hist", hist)

        for i in range(1, len(candles)):
            if trend[i] is None or hist[i] is None:
                continue
            close = candles[i].close
            if rose_through(line, -params.cci_level, i) and close > trend[i] and hist[i] > 0:
                out.mark_buy(i)
            elif fell_through(line, params.cci_level, i) and close < trend[i] and hist[i] < 0:
                out.mark_sell(i)


def _smi_of_mfi(candles, params: SmiMfiParams, out):
    """Annotate Supertrend and the SMI of MFI; return (direction, smi, signal)."""
    trend = supertrend(
        candles.highs,
        candles.lows,
        candles.closes,
        params.supertrend_period,
        params.supertrend_multiplier,
    )
    flow = mfi(
        candles.highs, candles.lows, candles.closes, candles.volumes, params.mfi_period
    )
    momentum = smi(flow, params.smi_period, params.smi_ema_period)
    out.set_column("supertrend", trend.line)
    out.set_column("supertrend_direction", trend.direction)
    out.set_column("smi", momentum.smi)
    return trend.direction, momentum.smi, momentum.signal


def _smi_min_candles(params: SmiMfiParams) -> int:
    return max(
        params.supertrend_period,
        params.mfi_period,
        params.smi_period + params.smi_ema_period,
    )


@register_strategy("smi-mfi-supertrend")
class SmiMfiSupertrendStrategy(BaseStrategy):
    """SMI-of-MFI signal cross in the Supertrend direction.

    Buy: uptrend, the previous SMI was at or below `oversold` and at or
    below its signal line, and SMI is now above the signal. Sell mirrors
    with `overbought`. The stop sits `stop_buffer` beyond the signal
    candle's low (buy) or high (sell).
    """

    name = "SMI MFI + Pivot Supertrend"
    description = "Supertrend trend filter with SMI-of-MFI crosses out of extreme zones."
    params_model = SmiMfiSupertrendParams

    def min_candles(self, params: SmiMfiSupertrendParams) -> int:
        return _smi_min_candles(params)

    def annotate(self, candles, params: SmiMfiSupertrendParams, out, context) -> None:
        direction, line, signal = _smi_of_mfi(candles, params, out)
        out.set_column("smi_signal", signal)
        out.set_column(
            "pivot_point",
            pivot_points(
                candles.highs, candles.lows, candles.closes, params.supertrend_period
            ).pivot,
        )

        for i in range(1, len(candles)):
            values = (line[i - 1], signal[i - 1], line[i], signal[i])
            if direction[i] is None or any(v is None for v in values):
                continue
            prev_smi, prev_signal, cur_smi, cur_signal = values
            bullish = (
                direction[i] == 1
                and prev_smi <= params.oversold
                and prev_smi <= prev_signal
                and cur_smi > cur_signal
            )
            bearish = (
                direction[i] == -1
                and prev_smi >= params.overbought
                and prev_smi >= prev_signal
                and cur_smi < cur_signal
            )
            if not (bullish or bearish):
                continue
            self.emit(out, i, bullish, params.reverse)
            candle = candles[i]
            if bullish != params.reverse:
                out.stop_loss_level[i] = candle.low * (1 - params.stop_buffer)
            else:
                out.stop_loss_level[i] = candle.high * (1 + params.stop_buffer)


@register_strategy("smi-mfi-scalp")
class SmiMfiScalpStrategy(BaseStrategy):
    """Always-in-market scalper.

    Every candle with a defined trend and SMI takes a side: buy at the
    close in an uptrend unless SMI is at or above `overbought`, sell at
    the close in a downtrend unless SMI is at or below `oversold`.
    """

    name = "SMI MFI Scalp"
    description = "Takes the Supertrend side on every candle unless SMI of MFI is stretched."
    params_model = SmiMfiScalpParams

    def min_candles(self, params: SmiMfiScalpParams) -> int:
        return _smi_min_candles(params)

    def annotate(self, candles, params: SmiMfiScalpParams, out, context) -> None:
        direction, line, _ = _smi_of_mfi(candles, params, out)

        for i in range(1, len(candles)):
            if direction[i] is None or line[i] is None:
                continue
            close = candles[i].close
            if direction[i] == 1 and line[i] < params.overbought:
                self.emit(out, i, True, params.reverse, close)
            elif direction[i] == -1 and line[i] > params.oversold:
                self.emit(out, i, False, params.reverse, close)


@register_strategy("volume-delta")
class VolumeDeltaStrategy(BaseStrategy):
    """Cumulative volume delta flip at the point of control.

    Buy: a bullish candle whose low comes within `poc_proximity` above the
    POC, closes above it, and turns the cumulative delta from <= 0 to > 0.
    Sell mirrors from below the POC.
    """

    name = "Volume Delta Confirmation"
    description = "Confirms POC tests with a flip in cumulative buying/selling volume."
    params_model = VolumeDeltaParams

    def min_candles(self, params: VolumeDeltaParams) -> int:
        return params.poc_lookback + 1

    def annotate(self, candles, params: VolumeDeltaParams, out, context) -> None:
        delta = volume_delta(
            candles.opens, candles.closes, candles.volumes, params.delta_lookback
        )
        poc = point_of_control(
            candles.highs, candles.lows, candles.closes, candles.volumes,
            params.poc_lookback,
        )
        out.set_column("volume_delta", delta.delta)
        out.set_column("cumulative_volume_delta", delta.cumulative)
        out.set_column("poc", poc)

        cumulative = delta.cumulative
        for i in range(params.poc_lookback, len(candles)):
            level, prev, cur = poc[i], cumulative[i - 1], cumulative[i]
            if level is None or prev is None or cur is None:
                continue
            candle = candles[i]
            if (
                candle.is_bullish
                and candle.low <= level * (1 + params.poc_proximity)
                and candle.close > level
                and prev <= 0 < cur
            ):
                out.mark_buy(i)
            elif (
                candle.is_bearish
                and candle.high >= level * (1 - params.poc_proximity)
                and candle.close < level
                and prev >= 0 > cur
            ):
                out.mark_sell(i)
