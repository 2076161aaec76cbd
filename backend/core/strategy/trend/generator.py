"""Trend-following signal generators.

Entries fire when a trend overlay flips (Supertrend, Parabolic SAR,
Heikin-Ashi colour), when the close breaks out of a channel (Donchian,
Keltner), or on an Ichimoku TK cross confirmed by the cloud.
"""

import logging

from core.indicators import (
    donchian_channels,
    heikin_ashi,
    ichimoku_cloud,
    keltner_channels,
    parabolic_sar,
    supertrend,
)
from core.strategy.base import BaseStrategy
from core.strategy.registry import register_strategy
from core.strategy.trend.models import (
    DonchianChannelsParams,
    HeikinAshiTrendParams,
    IchimokuCloudParams,
    KeltnerChannelsParams,
    ParabolicSarFlipParams,
    SupertrendParams,
)

logger = logging.getLogger(__name__)


def _mark_direction_flips(out, direction) -> None:
    for i in range(1, len(out)):
        prev, cur = direction[i - 1], direction[i]
        if prev is None or cur is None:
            continue
        if prev == -1 and cur == 1:
            out.mark_buy(i)
        elif prev == 1 and cur == -1:
            out.mark_sell(i)


@register_strategy("supertrend")
class SupertrendStrategy(BaseStrategy):
    name = "Supertrend"
    description = "Follows Supertrend direction changes."
    params_model = SupertrendParams

    def min_candles(self, params: SupertrendParams) -> int:
        return params.period

    def annotate(self, candles, params: SupertrendParams, out, context) -> None:
        result = supertrend(
            candles.highs, candles.lows, candles.closes, params.period, params.multiplier
        )
        out.set_column("supertrend", result.line)
        out.set_column("supertrend_direction", result.direction)
        _mark_direction_flips(out, result.direction)


@register_strategy("parabolic-sar-flip")
class ParabolicSarFlipStrategy(BaseStrategy):
    """Enters when the SAR dots flip to the other side of price."""

    name = "Parabolic SAR Flip"
    description = "Enters when the Parabolic SAR flips from one side of price to the other."
    params_model = ParabolicSarFlipParams

    def min_candles(self, params: ParabolicSarFlipParams) -> int:
        return 2

    def annotate(self, candles, params: ParabolicSarFlipParams, out, context) -> None:
        result = parabolic_sar(
            candles.highs, candles.lows, candles.closes,
            params.af_start, params.af_increment, params.af_max,
        )
        out.set_column("psar", result.sar)
        out.set_column("psar_direction", result.direction)
        _mark_direction_flips(out, result.direction)


@register_strategy("ichimoku-cloud")
class IchimokuCloudStrategy(BaseStrategy):
    """TK cross confirmed by price above/below both senkou spans.

    Only tenkan, kijun and the (forward-shifted) senkou spans at the
    evaluation bar are read; the chikou column is for plotting.
    """

    name = "Ichimoku Cloud"
    description = "Tenkan/Kijun cross confirmed by price position relative to the cloud."
    params_model = IchimokuCloudParams

    def min_candles(self, params: IchimokuCloudParams) -> int:
        return params.senkou_b_period + params.displacement

    def annotate(self, candles, params: IchimokuCloudParams, out, context) -> None:
        cloud = ichimoku_cloud(
            candles.highs, candles.lows, candles.closes,
            params.tenkan_period, params.kijun_period,
            params.senkou_b_period, params.displacement,
        )
        out.set_column("tenkan_sen", cloud.tenkan)
        out.set_column("kijun_sen", cloud.kijun)
        out.set_column("senkou_a", cloud.senkou_a)
        out.set_column("senkou_b", cloud.senkou_b)
        out.set_column("chikou_span", cloud.chikou)

        tenkan, kijun = cloud.tenkan, cloud.kijun
        start = max(params.kijun_period + params.displacement, 1)
        for i in range(start, len(candles)):
            values = (tenkan[i], kijun[i], tenkan[i - 1], kijun[i - 1],
                      cloud.senkou_a[i], cloud.senkou_b[i])
            if any(v is None for v in values):
                continue
            close = candles[i].close
            span_a, span_b = cloud.senkou_a[i], cloud.senkou_b[i]
            bullish_cross = tenkan[i - 1] <= kijun[i - 1] and tenkan[i] > kijun[i]
            bearish_cross = tenkan[i - 1] >= kijun[i - 1] and tenkan[i] < kijun[i]
            if bullish_cross and close > span_a and close > span_b:
                self.emit(out, i, True, params.reverse)
            elif bearish_cross and close < span_a and close < span_b:
                self.emit(out, i, False, params.reverse)


@register_strategy("heikin-ashi-trend")
class HeikinAshiTrendStrategy(BaseStrategy):
    name = "Heikin-Ashi Trend"
    description = "Trades Heikin-Ashi candle colour flips."
    params_model = HeikinAshiTrendParams

    def min_candles(self, params) -> int:
        return 2

    def annotate(self, candles, params, out, context) -> None:
        ha = heikin_ashi(candles.opens, candles.highs, candles.lows, candles.closes)
        out.set_column("ha_open", ha.open)
        out.set_column("ha_high", ha.high)
        out.set_column("ha_low", ha.low)
        out.set_column("ha_close", ha.close)
        for i in range(1, len(candles)):
            prev_bull = ha.close[i - 1] > ha.open[i - 1]
            prev_bear = ha.close[i - 1] < ha.open[i - 1]
            if prev_bear and ha.close[i] > ha.open[i]:
                out.mark_buy(i)
            elif prev_bull and ha.close[i] < ha.open[i]:
                out.mark_sell(i)


@register_strategy("donchian-channels")
class DonchianChannelsStrategy(BaseStrategy):
    """Close breaking out of the prior candle's channel.

    The channel at i includes candle i itself, so a breakout is measured
    against the channel as it stood at i-1.
    """

    name = "Donchian Channels"
    description = "Breakouts of the close above the upper or below the lower Donchian channel."
    params_model = DonchianChannelsParams

    def min_candles(self, params: DonchianChannelsParams) -> int:
        return params.period

    def annotate(self, candles, params: DonchianChannelsParams, out, context) -> None:
        bands = donchian_channels(candles.highs, candles.lows, params.period)
        out.set_column("donchian_upper", bands.upper)
        out.set_column("donchian_middle", bands.middle)
        out.set_column("donchian_lower", bands.lower)
        upper, lower, closes = bands.upper, bands.lower, candles.closes
        for i in range(2, len(candles)):
            if upper[i - 2] is None:
                continue
            if closes[i - 1] <= upper[i - 2] and closes[i] > upper[i - 1]:
                out.mark_buy(i)
            elif closes[i - 1] >= lower[i - 2] and closes[i] < lower[i - 1]:
                out.mark_sell(i)


@register_strategy("keltner-channels")
class KeltnerChannelsStrategy(BaseStrategy):
    name = "Keltner Channels Breakout"
    description = "A volatility-based strategy using Keltner Channels to trade breakouts."
    params_model = KeltnerChannelsParams

    def min_candles(self, params: KeltnerChannelsParams) -> int:
        return params.period

    def annotate(self, candles, params: KeltnerChannelsParams, out, context) -> None:
        bands = keltner_channels(
            candles.highs, candles.lows, candles.closes, params.period, params.multiplier
        )
        out.set_column("keltner_upper", bands.upper)
        out.set_column("keltner_middle", bands.middle)
        out.set_column("keltner_lower", bands.lower)
        upper, lower, closes = bands.upper, bands.lower, candles.closes
        for i in range(1, len(candles)):
            if upper[i - 1] is None or upper[i] is None:
                continue
            if closes[i - 1] <= upper[i - 1] and closes[i] > upper[i]:
                out.mark_buy(i)
            elif closes[i - 1] >= lower[i - 1] and closes[i] < lower[i]:
                out.mark_sell(i)
