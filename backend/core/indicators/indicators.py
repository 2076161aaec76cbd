"""Core technical indicators: averages, volatility and rate of change.

All functions compute on NumPy float64 arrays, using NaN for the warm-up
span, and return plain lists aligned index-for-index with the input where
None marks "not yet defined". A series shorter than the warm-up span, or a
non-positive period, returns an all-None list instead of raising.
"""

from typing import Callable, Sequence

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view


# =============================================================================
# Array helpers
# =============================================================================

def as_array(values: Sequence[float]) -> np.ndarray:
    """Convert a sequence (None allowed) to a float64 array with NaN gaps."""
    return np.array(
        [np.nan if v is None else v for v in values], dtype=np.float64
    )


def to_list(arr: np.ndarray) -> list[float | None]:
    """Convert a float array back to a list, NaN becoming None."""
    return [None if np.isnan(v) else float(v) for v in arr]


def nan_array(n: int) -> np.ndarray:
    return np.full(n, np.nan, dtype=np.float64)


def on_valid(
    fn: Callable[..., np.ndarray], arr: np.ndarray, *args
) -> np.ndarray:
    """Apply `fn` to the non-NaN tail of `arr` and re-pad to full length.

    Used for indicators of indicators (MACD signal, stochastic %D, ...):
    the inner series starts with a warm-up run of NaN, and the outer
    indicator must only see the valid portion.
    """
    out = nan_array(len(arr))
    valid = ~np.isnan(arr)
    if not valid.any():
        return out
    start = int(np.argmax(valid))
    out[start:] = fn(arr[start:], *args)
    return out


def _rolling(arr: np.ndarray, period: int) -> np.ndarray | None:
    """Sliding windows ending at each index >= period-1, or None."""
    if period <= 0 or len(arr) < period:
        return None
    return sliding_window_view(arr, period)


# =============================================================================
# Array implementations (shared by the other indicator modules)
# =============================================================================

def sma_array(arr: np.ndarray, period: int) -> np.ndarray:
    out = nan_array(len(arr))
    windows = _rolling(arr, period)
    if windows is not None:
        out[period - 1:] = windows.mean(axis=1)
    return out


def ema_array(arr: np.ndarray, period: int) -> np.ndarray:
    out = nan_array(len(arr))
    if period <= 0 or len(arr) < period:
        return out
    multiplier = 2.0 / (period + 1)
    out[period - 1] = np.mean(arr[:period])
    for i in range(period, len(arr)):
        out[i] = out[i - 1] + multiplier * (arr[i] - out[i - 1])
    return out


def wma_array(arr: np.ndarray, period: int) -> np.ndarray:
    out = nan_array(len(arr))
    windows = _rolling(arr, period)
    if windows is not None:
        weights = np.arange(1, period + 1, dtype=np.float64)
        out[period - 1:] = windows @ weights / weights.sum()
    return out


def stddev_array(arr: np.ndarray, period: int) -> np.ndarray:
    out = nan_array(len(arr))
    windows = _rolling(arr, period)
    if windows is not None:
        out[period - 1:] = windows.std(axis=1)
    return out


def highest_array(arr: np.ndarray, period: int) -> np.ndarray:
    out = nan_array(len(arr))
    windows = _rolling(arr, period)
    if windows is not None:
        out[period - 1:] = windows.max(axis=1)
    return out


def lowest_array(arr: np.ndarray, period: int) -> np.ndarray:
    out = nan_array(len(arr))
    windows = _rolling(arr, period)
    if windows is not None:
        out[period - 1:] = windows.min(axis=1)
    return out


def rolling_sum_array(arr: np.ndarray, period: int) -> np.ndarray:
    out = nan_array(len(arr))
    windows = _rolling(arr, period)
    if windows is not None:
        out[period - 1:] = windows.sum(axis=1)
    return out


def true_range_array(
    highs: np.ndarray, lows: np.ndarray, closes: np.ndarray
) -> np.ndarray:
    n = len(highs)
    if n == 0:
        return nan_array(0)
    tr = highs - lows
    if n > 1:
        prev_close = closes[:-1]
        tr[1:] = np.maximum.reduce([
            highs[1:] - lows[1:],
            np.abs(highs[1:] - prev_close),
            np.abs(lows[1:] - prev_close),
        ])
    return tr


def atr_array(
    highs: np.ndarray, lows: np.ndarray, closes: np.ndarray, period: int
) -> np.ndarray:
    n = len(highs)
    out = nan_array(n)
    if period <= 0 or n <= period:
        return out
    tr = true_range_array(highs, lows, closes)
    # Seeded from the true ranges that have a previous close (1..period)
    out[period] = np.mean(tr[1:period + 1])
    for i in range(period + 1, n):
        out[i] = (out[i - 1] * (period - 1) + tr[i]) / period
    return out


def rsi_array(arr: np.ndarray, period: int) -> np.ndarray:
    n = len(arr)
    out = nan_array(n)
    if period <= 0 or n <= period:
        return out
    change = np.diff(arr)
    gains = np.where(change > 0, change, 0.0)
    losses = np.where(change < 0, -change, 0.0)

    avg_gain = gains[:period].mean()
    avg_loss = losses[:period].mean()
    for i in range(period, n):
        if i > period:
            avg_gain = (avg_gain * (period - 1) + gains[i - 1]) / period
            avg_loss = (avg_loss * (period - 1) + losses[i - 1]) / period
        if avg_loss == 0:
            out[i] = 100.0
        else:
            out[i] = 100.0 - 100.0 / (1.0 + avg_gain / avg_loss)
    return out


def roc_array(arr: np.ndarray, period: int) -> np.ndarray:
    out = nan_array(len(arr))
    if period <= 0 or len(arr) <= period:
        return out
    reference = arr[:-period]
    current = arr[period:]
    with np.errstate(divide="ignore", invalid="ignore"):
        roc = np.where(
            reference == 0, 0.0, (current - reference) / reference * 100.0
        )
    out[period:] = roc
    return out


# =============================================================================
# Public API
# =============================================================================

def sma(values: Sequence[float], period: int) -> list[float | None]:
    """
    Calculate Simple Moving Average.

    Args:
        values: Sequence of price values
        period: SMA period

    Returns:
        List of SMA values (same length as input, None for the first period-1)
    """
    return to_list(sma_array(as_array(values), period))


def ema(values: Sequence[float], period: int) -> list[float | None]:
    """
    Calculate Exponential Moving Average.

    Seeded with the SMA of the first `period` values, then
    ema[i] = ema[i-1] + 2/(period+1) * (x[i] - ema[i-1]).

    Args:
        values: Sequence of price values
        period: EMA period

    Returns:
        List of EMA values (same length as input, None for the first period-1)
    """
    return to_list(ema_array(as_array(values), period))


def wma(values: Sequence[float], period: int) -> list[float | None]:
    """Calculate linearly Weighted Moving Average (newest value weighs most)."""
    return to_list(wma_array(as_array(values), period))


def stddev(values: Sequence[float], period: int) -> list[float | None]:
    """Rolling population standard deviation."""
    return to_list(stddev_array(as_array(values), period))


def highest(values: Sequence[float], period: int) -> list[float | None]:
    """
    Calculate highest value over lookback period.

    Args:
        values: Sequence of values (typically highs)
        period: Lookback period

    Returns:
        List of highest values
    """
    return to_list(highest_array(as_array(values), period))


def lowest(values: Sequence[float], period: int) -> list[float | None]:
    """
    Calculate lowest value over lookback period.

    Args:
        values: Sequence of values (typically lows)
        period: Lookback period

    Returns:
        List of lowest values
    """
    return to_list(lowest_array(as_array(values), period))


def true_range(
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
) -> list[float | None]:
    """
    Calculate True Range.

    TR = max(high - low, abs(high - prev_close), abs(low - prev_close))
    The first candle has no previous close and uses high - low.

    Args:
        highs: Sequence of high prices
        lows: Sequence of low prices
        closes: Sequence of close prices

    Returns:
        List of True Range values
    """
    return to_list(
        true_range_array(as_array(highs), as_array(lows), as_array(closes))
    )


def atr(
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
    period: int = 14,
) -> list[float | None]:
    """
    Calculate Average True Range (ATR).

    Uses Wilder's smoothing. The first value is at index `period`: the
    mean of the true ranges of candles 1..period.

    Args:
        highs: Sequence of high prices
        lows: Sequence of low prices
        closes: Sequence of close prices
        period: ATR period

    Returns:
        List of ATR values
    """
    return to_list(
        atr_array(as_array(highs), as_array(lows), as_array(closes), period)
    )


def rsi(values: Sequence[float], period: int = 14) -> list[float | None]:
    """
    Calculate Relative Strength Index with Wilder smoothing.

    The first value is at index `period`. Whenever the trailing average
    loss is 0 (including a flat series) RSI is 100.

    Args:
        values: Sequence of close prices
        period: RSI period

    Returns:
        List of RSI values in [0, 100]
    """
    return to_list(rsi_array(as_array(values), period))


def momentum(values: Sequence[float], period: int = 14) -> list[float | None]:
    """Price change over `period` candles: x[i] - x[i-period]."""
    arr = as_array(values)
    out = nan_array(len(arr))
    if 0 < period < len(arr):
        out[period:] = arr[period:] - arr[:-period]
    return to_list(out)


def roc(values: Sequence[float], period: int) -> list[float | None]:
    """Rate of change in percent; 0 when the reference value is 0."""
    return to_list(roc_array(as_array(values), period))
