"""Momentum, volume and oscillator indicators."""

import math
from dataclasses import dataclass
from typing import Sequence

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view

from core.indicators.indicators import (
    as_array,
    ema_array,
    highest_array,
    lowest_array,
    nan_array,
    on_valid,
    roc_array,
    rolling_sum_array,
    sma_array,
    to_list,
    wma_array,
)


@dataclass(slots=True)
class Macd:
    macd: list[float | None]
    signal: list[float | None]
    histogram: list[float | None]


@dataclass(slots=True)
class Stochastic:
    k: list[float | None]
    d: list[float | None]


@dataclass(slots=True)
class ElderRay:
    ema: list[float | None]
    bull_power: list[float | None]
    bear_power: list[float | None]


@dataclass(slots=True)
class HeikinAshi:
    open: list[float]
    high: list[float]
    low: list[float]
    close: list[float]


def macd(
    values: Sequence[float],
    short_period: int = 12,
    long_period: int = 26,
    signal_period: int = 9,
) -> Macd:
    """
    Calculate MACD.

    MACD = EMA(short) - EMA(long); the signal line is the EMA of the MACD
    line computed over its valid portion only, then re-padded so it stays
    aligned with the input; histogram = MACD - signal.

    Args:
        values: Sequence of close prices
        short_period: Fast EMA period
        long_period: Slow EMA period
        signal_period: Signal EMA period

    Returns:
        Macd(macd, signal, histogram)
    """
    arr = as_array(values)
    line = ema_array(arr, short_period) - ema_array(arr, long_period)
    signal = on_valid(ema_array, line, signal_period)
    return Macd(
        macd=to_list(line),
        signal=to_list(signal),
        histogram=to_list(line - signal),
    )


def stochastic(
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
    period: int = 14,
    smooth_k: int = 3,
    smooth_d: int = 3,
) -> Stochastic:
    """
    Calculate the slow Stochastic Oscillator.

    Raw %K is 100 * (close - lowest low) / (highest high - lowest low)
    over `period` candles, 50 on a zero range. %K is the SMA(smooth_k) of
    raw %K and %D the SMA(smooth_d) of %K.
    """
    close_arr = as_array(closes)
    hh = highest_array(as_array(highs), period)
    ll = lowest_array(as_array(lows), period)
    span = hh - ll
    with np.errstate(divide="ignore", invalid="ignore"):
        raw_k = np.where(span == 0, 50.0, (close_arr - ll) / span * 100.0)
    raw_k[np.isnan(hh)] = np.nan
    k = on_valid(sma_array, raw_k, smooth_k)
    d = on_valid(sma_array, k, smooth_d)
    return Stochastic(k=to_list(k), d=to_list(d))


def awesome_oscillator(
    highs: Sequence[float],
    lows: Sequence[float],
    short_period: int = 5,
    long_period: int = 34,
) -> list[float | None]:
    """SMA(short) - SMA(long) of the median price (high + low) / 2."""
    median = (as_array(highs) + as_array(lows)) / 2
    return to_list(sma_array(median, short_period) - sma_array(median, long_period))


def williams_r(
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
    period: int = 14,
) -> list[float | None]:
    """
    Calculate Williams %R in [-100, 0].

    %R = (highest high - close) / (highest high - lowest low) * -100,
    -50 when the window range is 0.
    """
    close_arr = as_array(closes)
    hh = highest_array(as_array(highs), period)
    ll = lowest_array(as_array(lows), period)
    span = hh - ll
    with np.errstate(divide="ignore", invalid="ignore"):
        out = np.where(span == 0, -50.0, (hh - close_arr) / span * -100.0)
    out[np.isnan(hh)] = np.nan
    return to_list(out)


def cci(
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
    period: int = 20,
) -> list[float | None]:
    """
    Calculate the Commodity Channel Index.

    CCI = (tp - SMA(tp)) / (0.015 * mean deviation), 0 when the mean
    deviation is 0.
    """
    typical = (as_array(highs) + as_array(lows) + as_array(closes)) / 3
    n = len(typical)
    out = nan_array(n)
    if period <= 0 or n < period:
        return to_list(out)
    windows = sliding_window_view(typical, period)
    mean = windows.mean(axis=1)
    mean_dev = np.abs(windows - mean[:, None]).mean(axis=1)
    current = typical[period - 1:]
    with np.errstate(divide="ignore", invalid="ignore"):
        out[period - 1:] = np.where(
            mean_dev == 0, 0.0, (current - mean) / (0.015 * mean_dev)
        )
    return to_list(out)


def obv(closes: Sequence[float], volumes: Sequence[float]) -> list[float]:
    """On-Balance Volume, starting at 0 on the first candle."""
    close_arr = as_array(closes)
    volume = as_array(volumes)
    if len(close_arr) == 0:
        return []
    step = np.zeros(len(close_arr))
    change = np.diff(close_arr)
    step[1:] = np.where(change > 0, volume[1:], np.where(change < 0, -volume[1:], 0.0))
    return [float(v) for v in np.cumsum(step)]


def chaikin_money_flow(
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
    volumes: Sequence[float],
    period: int = 20,
) -> list[float | None]:
    """
    Calculate Chaikin Money Flow.

    The money-flow multiplier ((c - l) - (h - c)) / (h - l) is 0 on a zero
    range candle; CMF is sum(multiplier * volume) / sum(volume) over the
    window, 0 when the window volume is 0.
    """
    high_arr = as_array(highs)
    low_arr = as_array(lows)
    close_arr = as_array(closes)
    volume = as_array(volumes)
    span = high_arr - low_arr
    with np.errstate(divide="ignore", invalid="ignore"):
        multiplier = np.where(
            span == 0, 0.0, ((close_arr - low_arr) - (high_arr - close_arr)) / span
        )
        flow = rolling_sum_array(multiplier * volume, period)
        vol = rolling_sum_array(volume, period)
        out = np.where(vol == 0, 0.0, flow / vol)
    out[np.isnan(vol)] = np.nan
    return to_list(out)


def coppock_curve(
    values: Sequence[float],
    long_roc: int = 14,
    short_roc: int = 11,
    wma_period: int = 10,
) -> list[float | None]:
    """WMA(wma_period) of ROC(long_roc) + ROC(short_roc)."""
    arr = as_array(values)
    roc_sum = roc_array(arr, long_roc) + roc_array(arr, short_roc)
    return to_list(on_valid(wma_array, roc_sum, wma_period))


def elder_ray(
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
    period: int = 13,
) -> ElderRay:
    """Bull power (high - EMA) and bear power (low - EMA)."""
    trend = ema_array(as_array(closes), period)
    return ElderRay(
        ema=to_list(trend),
        bull_power=to_list(as_array(highs) - trend),
        bear_power=to_list(as_array(lows) - trend),
    )


def heikin_ashi(
    opens: Sequence[float],
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
) -> HeikinAshi:
    """
    Transform candles to Heikin-Ashi.

    ha_close = (o + h + l + c) / 4; ha_open[0] = (o + c) / 2 and then the
    average of the previous HA open and close; HA high/low extend the real
    high/low to include the HA open and close.
    """
    open_arr = as_array(opens)
    high_arr = as_array(highs)
    low_arr = as_array(lows)
    close_arr = as_array(closes)
    n = len(close_arr)

    ha_close = (open_arr + high_arr + low_arr + close_arr) / 4
    ha_open = np.empty(n)
    if n:
        ha_open[0] = (open_arr[0] + close_arr[0]) / 2
    for i in range(1, n):
        ha_open[i] = (ha_open[i - 1] + ha_close[i - 1]) / 2
    ha_high = np.maximum.reduce([high_arr, ha_open, ha_close]) if n else ha_open
    ha_low = np.minimum.reduce([low_arr, ha_open, ha_close]) if n else ha_open

    return HeikinAshi(
        open=[float(v) for v in ha_open],
        high=[float(v) for v in ha_high],
        low=[float(v) for v in ha_low],
        close=[float(v) for v in ha_close],
    )


@dataclass(slots=True)
class Smi:
    smi: list[float | None]
    signal: list[float | None]


@dataclass(slots=True)
class VolumeDelta:
    delta: list[float]
    cumulative: list[float | None]


def mfi(
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
    volumes: Sequence[float],
    period: int = 14,
) -> list[float | None]:
    """
    Calculate the Money Flow Index in [0, 100].

    Raw money flow is typical price * volume. It counts as positive when
    the typical price rose from the previous candle and negative when it
    fell. MFI = 100 - 100 / (1 + positive / negative) over `period`
    candles: 100 when there is no negative flow, 50 when there is no flow
    at all. Defined from index `period` onwards.
    """
    typical = (as_array(highs) + as_array(lows) + as_array(closes)) / 3
    flow = typical * as_array(volumes)
    n = len(typical)
    positive = nan_array(n)
    negative = nan_array(n)
    if n:
        change = np.diff(typical)
        positive[1:] = np.where(change > 0, flow[1:], 0.0)
        negative[1:] = np.where(change < 0, flow[1:], 0.0)

    pos = rolling_sum_array(positive, period)
    neg = rolling_sum_array(negative, period)
    with np.errstate(divide="ignore", invalid="ignore"):
        out = np.where(
            neg == 0,
            np.where(pos == 0, 50.0, 100.0),
            100.0 - 100.0 / (1.0 + pos / neg),
        )
    out[np.isnan(pos)] = np.nan
    return to_list(out)


def smi(values: Sequence[float], period: int = 5, ema_period: int = 3) -> Smi:
    """
    Calculate the Stochastic Momentum Index of a single series.

    The distance of each value from the midpoint of its `period` range and
    the range itself are both smoothed twice with EMA(ema_period);
    SMI = 100 * smoothed distance / (0.5 * smoothed range), 0 on a zero
    range. The signal line is EMA(ema_period) of SMI. Leading gaps in
    `values` (an MFI warm-up, say) are skipped.
    """
    arr = as_array(values)
    hh = on_valid(highest_array, arr, period)
    ll = on_valid(lowest_array, arr, period)
    distance = arr - (hh + ll) / 2
    span = hh - ll

    def double_ema(series: np.ndarray) -> np.ndarray:
        return on_valid(ema_array, on_valid(ema_array, series, ema_period), ema_period)

    smooth_distance = double_ema(distance)
    smooth_span = double_ema(span)
    with np.errstate(divide="ignore", invalid="ignore"):
        line = np.where(
            smooth_span == 0, 0.0, 100.0 * smooth_distance / (0.5 * smooth_span)
        )
    line[np.isnan(smooth_span)] = np.nan
    signal = on_valid(ema_array, line, ema_period)
    return Smi(smi=to_list(line), signal=to_list(signal))


def volume_delta(
    opens: Sequence[float],
    closes: Sequence[float],
    volumes: Sequence[float],
    lookback: int = 5,
) -> VolumeDelta:
    """
    Signed candle volume and its rolling sum.

    The delta is +volume when close > open, -volume when close < open and
    0 otherwise. The cumulative delta sums it over `lookback` candles.
    """
    open_arr = as_array(opens)
    close_arr = as_array(closes)
    volume = as_array(volumes)
    delta = np.where(
        close_arr > open_arr, volume, np.where(close_arr < open_arr, -volume, 0.0)
    )
    return VolumeDelta(
        delta=[float(v) for v in delta],
        cumulative=to_list(rolling_sum_array(delta, lookback)),
    )


def _price_bin(min_price: float) -> float:
    if min_price > 1000:
        return 10.0
    if min_price > 100:
        return 1.0
    if min_price > 1:
        return 0.1
    return 0.01


def point_of_control(
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
    volumes: Sequence[float],
    lookback: int = 200,
) -> list[float | None]:
    """
    Price level that traded the most volume over the last `lookback` candles.

    Each candle's volume is credited to its close, rounded half-up to a bin
    sized by the window's lowest low (10 above 1000, 1 above 100, 0.1
    above 1, else 0.01). The first bin in candle order to reach the
    highest volume wins. A window with no price range returns its first
    low; a zero result falls back to the last close. Defined from index
    `lookback - 1` onwards.
    """
    n = len(closes)
    out: list[float | None] = [None] * n
    if lookback <= 0:
        return out
    for end in range(lookback - 1, n):
        start = end - lookback + 1
        low = min(lows[start:end + 1])
        high = max(highs[start:end + 1])
        if high == low:
            out[end] = float(lows[start])
            continue

        size = _price_bin(low)
        volume_at: dict[int, float] = {}
        best_volume = 0.0
        poc = 0.0
        for j in range(start, end + 1):
            key = math.floor(closes[j] / size + 0.5)
            volume_at[key] = volume_at.get(key, 0.0) + volumes[j]
            if volume_at[key] > best_volume:
                best_volume = volume_at[key]
                poc = round(key * size, 8)
        out[end] = poc or float(closes[end])
    return out
