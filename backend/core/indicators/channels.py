"""Band, channel and trend-following overlay indicators."""

from dataclasses import dataclass
from typing import Sequence

import numpy as np

from core.indicators.indicators import (
    as_array,
    atr_array,
    ema_array,
    highest_array,
    lowest_array,
    nan_array,
    rolling_sum_array,
    sma_array,
    stddev_array,
    to_list,
)


@dataclass(slots=True)
class Bands:
    """Upper / middle / lower lines of a channel indicator."""

    upper: list[float | None]
    middle: list[float | None]
    lower: list[float | None]


@dataclass(slots=True)
class Supertrend:
    line: list[float | None]
    direction: list[int | None]  # 1 = uptrend, -1 = downtrend


@dataclass(slots=True)
class Ichimoku:
    tenkan: list[float | None]
    kijun: list[float | None]
    senkou_a: list[float | None]
    senkou_b: list[float | None]
    chikou: list[float | None]


@dataclass(slots=True)
class ParabolicSar:
    sar: list[float | None]
    direction: list[int | None]


@dataclass(slots=True)
class PivotPoints:
    pivot: list[float | None]
    r1: list[float | None]
    r2: list[float | None]
    r3: list[float | None]
    s1: list[float | None]
    s2: list[float | None]
    s3: list[float | None]


def _directions(arr: np.ndarray) -> list[int | None]:
    return [None if np.isnan(v) else int(v) for v in arr]


def bollinger_bands(
    values: Sequence[float], period: int = 20, multiplier: float = 2.0
) -> Bands:
    """
    Calculate Bollinger Bands.

    Middle is the SMA; the bands are middle +/- multiplier times the
    population standard deviation of the same window.

    Args:
        values: Sequence of close prices
        period: Window length
        multiplier: Standard deviation multiplier

    Returns:
        Bands(upper, middle, lower)
    """
    arr = as_array(values)
    middle = sma_array(arr, period)
    deviation = stddev_array(arr, period)
    return Bands(
        upper=to_list(middle + multiplier * deviation),
        middle=to_list(middle),
        lower=to_list(middle - multiplier * deviation),
    )


def donchian_channels(
    highs: Sequence[float], lows: Sequence[float], period: int = 20
) -> Bands:
    """Rolling highest high / lowest low and their midpoint."""
    upper = highest_array(as_array(highs), period)
    lower = lowest_array(as_array(lows), period)
    return Bands(
        upper=to_list(upper),
        middle=to_list((upper + lower) / 2),
        lower=to_list(lower),
    )


def keltner_channels(
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
    period: int = 20,
    multiplier: float = 2.0,
) -> Bands:
    """
    Calculate Keltner Channels: EMA middle +/- multiplier * ATR.

    Defined from index `period` onwards (the ATR warm-up).
    """
    close_arr = as_array(closes)
    middle = ema_array(close_arr, period)
    atr = atr_array(as_array(highs), as_array(lows), close_arr, period)
    upper = middle + multiplier * atr
    lower = middle - multiplier * atr
    middle = np.where(np.isnan(atr), np.nan, middle)
    return Bands(upper=to_list(upper), middle=to_list(middle), lower=to_list(lower))


def supertrend(
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
    period: int = 10,
    multiplier: float = 3.0,
) -> Supertrend:
    """
    Calculate Supertrend.

    Basic bands are hl2 +/- multiplier * ATR. The final upper band only
    moves down (and the lower band only up) unless the previous close broke
    through it. Direction flips to down when close falls below the final
    lower band and to up when close rises above the final upper band. The
    first bar with a defined ATR is seeded from the basic bands.

    Args:
        highs: Sequence of high prices
        lows: Sequence of low prices
        closes: Sequence of close prices
        period: ATR period
        multiplier: ATR multiplier

    Returns:
        Supertrend(line, direction) where line is the active band
    """
    high_arr = as_array(highs)
    low_arr = as_array(lows)
    close_arr = as_array(closes)
    n = len(close_arr)
    atr = atr_array(high_arr, low_arr, close_arr, period)

    line = nan_array(n)
    direction = nan_array(n)
    final_upper = final_lower = None
    trend = 1

    for i in range(n):
        if np.isnan(atr[i]):
            continue
        hl2 = (high_arr[i] + low_arr[i]) / 2
        basic_upper = hl2 + multiplier * atr[i]
        basic_lower = hl2 - multiplier * atr[i]

        if final_upper is None:
            final_upper, final_lower = basic_upper, basic_lower
        else:
            prev_close = close_arr[i - 1]
            if basic_upper < final_upper or prev_close > final_upper:
                final_upper = basic_upper
            if basic_lower > final_lower or prev_close < final_lower:
                final_lower = basic_lower

        if close_arr[i] > final_upper:
            trend = 1
        elif close_arr[i] < final_lower:
            trend = -1

        line[i] = final_lower if trend == 1 else final_upper
        direction[i] = trend

    return Supertrend(line=to_list(line), direction=_directions(direction))


def ichimoku_cloud(
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
    tenkan_period: int = 9,
    kijun_period: int = 26,
    senkou_b_period: int = 52,
    displacement: int = 26,
) -> Ichimoku:
    """
    Calculate the Ichimoku Cloud.

    Tenkan and kijun are rolling high-low midpoints. The senkou spans are
    written `displacement` bars forward of their source index and the
    chikou span is the close written `displacement` bars backward, which
    is the alignment charts expect. Only tenkan, kijun and the senkou spans
    at index i are known at candle i; chikou[i] reads a future close.
    """
    high_arr = as_array(highs)
    low_arr = as_array(lows)
    close_arr = as_array(closes)
    n = len(close_arr)

    def midpoint(period: int) -> np.ndarray:
        return (highest_array(high_arr, period) + lowest_array(low_arr, period)) / 2

    tenkan = midpoint(tenkan_period)
    kijun = midpoint(kijun_period)
    span_b_source = midpoint(senkou_b_period)

    senkou_a = nan_array(n)
    senkou_b = nan_array(n)
    chikou = nan_array(n)
    if displacement >= 0 and n > displacement:
        senkou_a[displacement:] = ((tenkan + kijun) / 2)[: n - displacement]
        senkou_b[displacement:] = span_b_source[: n - displacement]
        chikou[: n - displacement] = close_arr[displacement:]

    return Ichimoku(
        tenkan=to_list(tenkan),
        kijun=to_list(kijun),
        senkou_a=to_list(senkou_a),
        senkou_b=to_list(senkou_b),
        chikou=to_list(chikou),
    )


def vwap(
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
    volumes: Sequence[float],
    window: int = 20,
) -> list[float | None]:
    """
    Calculate a rolling Volume Weighted Average Price.

    VWAP = sum(typical_price * volume) / sum(volume) over the last
    `window` candles. None where the window volume is 0.
    """
    volume = as_array(volumes)
    typical = (as_array(highs) + as_array(lows) + as_array(closes)) / 3
    pv = rolling_sum_array(typical * volume, window)
    vol = rolling_sum_array(volume, window)
    with np.errstate(divide="ignore", invalid="ignore"):
        out = np.where(vol > 0, pv / vol, np.nan)
    return to_list(out)


def parabolic_sar(
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
    af_start: float = 0.02,
    af_increment: float = 0.02,
    af_max: float = 0.2,
) -> ParabolicSar:
    """
    Calculate Wilder's Parabolic SAR.

    Seeded on the second candle: uptrend if close[1] >= close[0], with SAR
    at the first low (high) and the extreme point at the second high (low).
    The SAR never enters the prior two candles' range. On a flip the SAR
    jumps to the old extreme point and the acceleration factor resets; it
    grows by `af_increment` on each new extreme up to `af_max`.
    """
    high_arr = as_array(highs)
    low_arr = as_array(lows)
    close_arr = as_array(closes)
    n = len(close_arr)
    sar_out = nan_array(n)
    dir_out = nan_array(n)
    if n < 2:
        return ParabolicSar(sar=to_list(sar_out), direction=_directions(dir_out))

    uptrend = close_arr[1] >= close_arr[0]
    sar = low_arr[0] if uptrend else high_arr[0]
    ep = high_arr[1] if uptrend else low_arr[1]
    af = af_start
    sar_out[1] = sar
    dir_out[1] = 1 if uptrend else -1

    for i in range(2, n):
        sar = sar + af * (ep - sar)
        if uptrend:
            sar = min(sar, low_arr[i - 1], low_arr[i - 2])
            if low_arr[i] < sar:
                uptrend = False
                sar, ep, af = ep, low_arr[i], af_start
            elif high_arr[i] > ep:
                ep = high_arr[i]
                af = min(af + af_increment, af_max)
        else:
            sar = max(sar, high_arr[i - 1], high_arr[i - 2])
            if high_arr[i] > sar:
                uptrend = True
                sar, ep, af = ep, high_arr[i], af_start
            elif low_arr[i] < ep:
                ep = low_arr[i]
                af = min(af + af_increment, af_max)
        sar_out[i] = sar
        dir_out[i] = 1 if uptrend else -1

    return ParabolicSar(sar=to_list(sar_out), direction=_directions(dir_out))


def pivot_points(
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
    period: int = 24,
) -> PivotPoints:
    """
    Calculate floor pivot points from the *prior* `period` candles.

    For candle i the window is [i-period, i-1]: H = max high, L = min low,
    C = close[i-1]. PP = (H + L + C) / 3, R1 = 2PP - L, S1 = 2PP - H,
    R2 = PP + (H - L), S2 = PP - (H - L), R3 = H + 2(PP - L),
    S3 = L - 2(H - PP). Defined from index `period` onwards.
    """
    high_arr = as_array(highs)
    low_arr = as_array(lows)
    close_arr = as_array(closes)
    n = len(close_arr)

    prior_high = nan_array(n)
    prior_low = nan_array(n)
    prior_close = nan_array(n)
    if 0 < period < n:
        prior_high[period:] = highest_array(high_arr, period)[period - 1: n - 1]
        prior_low[period:] = lowest_array(low_arr, period)[period - 1: n - 1]
        prior_close[period:] = close_arr[period - 1: n - 1]

    pp = (prior_high + prior_low + prior_close) / 3
    spread = prior_high - prior_low
    return PivotPoints(
        pivot=to_list(pp),
        r1=to_list(2 * pp - prior_low),
        r2=to_list(pp + spread),
        r3=to_list(prior_high + 2 * (pp - prior_low)),
        s1=to_list(2 * pp - prior_high),
        s2=to_list(pp - spread),
        s3=to_list(prior_low - 2 * (prior_high - pp)),
    )
