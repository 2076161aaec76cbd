"""Candle interval helpers."""

# Interval length in minutes for each supported timeframe
TIMEFRAME_TO_MINUTES = {
    "1m": 1,
    "3m": 3,
    "5m": 5,
    "15m": 15,
    "30m": 30,
    "1h": 60,
    "2h": 120,
    "4h": 240,
    "6h": 360,
    "12h": 720,
    "1d": 1440,
    "3d": 4320,
    "1w": 10080,
}


def interval_to_ms(interval: str) -> int:
    """Interval length in milliseconds; 0 for an unknown interval.

    Case-insensitive for the day/week suffix ('1D' == '1d').
    """
    key = interval.strip()
    if key[-1:] in ("D", "W", "H"):
        key = key[:-1] + key[-1].lower()
    minutes = TIMEFRAME_TO_MINUTES.get(key, 0)
    return minutes * 60_000


def bucket_start(time_ms: int, interval_ms: int) -> int:
    """Start of the interval bucket enclosing `time_ms`."""
    return (time_ms // interval_ms) * interval_ms
