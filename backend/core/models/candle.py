"""Candle (OHLCV) data models.

These models use:
- @dataclass(slots=True, frozen=True) for a small, immutable footprint
- float for all prices and volumes
- integer epoch-millisecond timestamps

A CandleSeries is the immutable input of every analysis call. Strategies
never write to it; derived values go to an AnnotatedSeries instead.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Sequence


class MalformedSeriesError(ValueError):
    """Raised when a candle series violates ordering or field requirements."""


@dataclass(slots=True, frozen=True)
class Candle:
    """A single closed candle."""

    time: int  # epoch milliseconds
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0

    @property
    def is_bullish(self) -> bool:
        """Check if this is a bullish (green) candle."""
        return self.close > self.open

    @property
    def is_bearish(self) -> bool:
        """Check if this is a bearish (red) candle."""
        return self.close < self.open

    @property
    def body_size(self) -> float:
        """Get the absolute size of the candle body."""
        return abs(self.close - self.open)

    @property
    def range_size(self) -> float:
        """Get the full range (high - low) of the candle."""
        return self.high - self.low

    @property
    def typical_price(self) -> float:
        return (self.high + self.low + self.close) / 3

    @property
    def median_price(self) -> float:
        return (self.high + self.low) / 2

    def to_dict(self) -> dict[str, float | int]:
        return {
            "time": self.time,
            "open": self.open,
            "high": self.high,
            "low": self.low,
            "close": self.close,
            "volume": self.volume,
        }


_REQUIRED_FIELDS = ("time", "open", "high", "low", "close")


def _candle_from_mapping(record: Mapping[str, Any], position: int) -> Candle:
    missing = [name for name in _REQUIRED_FIELDS if record.get(name) is None]
    if missing:
        raise MalformedSeriesError(
            f"Candle at position {position} is missing fields: {', '.join(missing)}"
        )
    try:
        return Candle(
            time=int(record["time"]),
            open=float(record["open"]),
            high=float(record["high"]),
            low=float(record["low"]),
            close=float(record["close"]),
            volume=float(record.get("volume") or 0.0),
        )
    except (TypeError, ValueError) as e:
        raise MalformedSeriesError(
            f"Candle at position {position} has a non-numeric field: {e}"
        ) from e


class CandleSeries(Sequence[Candle]):
    """Immutable, validated, time-ordered sequence of candles.

    Column views (closes, highs, ...) are built once and shared by every
    indicator call on the series.
    """

    __slots__ = ("_candles", "opens", "highs", "lows", "closes", "volumes", "times")

    def __init__(self, candles: Iterable[Candle]):
        self._candles: tuple[Candle, ...] = tuple(candles)
        self._validate()
        self.opens: tuple[float, ...] = tuple(c.open for c in self._candles)
        self.highs: tuple[float, ...] = tuple(c.high for c in self._candles)
        self.lows: tuple[float, ...] = tuple(c.low for c in self._candles)
        self.closes: tuple[float, ...] = tuple(c.close for c in self._candles)
        self.volumes: tuple[float, ...] = tuple(c.volume for c in self._candles)
        self.times: tuple[int, ...] = tuple(c.time for c in self._candles)

    @classmethod
    def from_records(cls, records: Iterable[Mapping[str, Any]]) -> CandleSeries:
        """Build a series from mappings with time/open/high/low/close/volume keys.

        Extra keys (for example previously derived indicator fields) are ignored.
        """
        return cls(_candle_from_mapping(r, pos) for pos, r in enumerate(records))

    def _validate(self) -> None:
        prev_time: int | None = None
        for pos, c in enumerate(self._candles):
            if not isinstance(c, Candle):
                raise MalformedSeriesError(
                    f"Element at position {pos} is {type(c).__name__}, expected Candle"
                )
            values = (c.open, c.high, c.low, c.close, c.volume)
            if not all(math.isfinite(v) for v in values):
                raise MalformedSeriesError(f"Candle at time {c.time} has non-finite values")
            if prev_time is not None and c.time <= prev_time:
                raise MalformedSeriesError(
                    f"Candle times must be strictly ascending: {c.time} follows {prev_time}"
                )
            prev_time = c.time

    def __len__(self) -> int:
        return len(self._candles)

    def __getitem__(self, index):
        if isinstance(index, slice):
            return CandleSeries(self._candles[index])
        return self._candles[index]

    def __iter__(self):
        return iter(self._candles)

    def __repr__(self) -> str:
        if not self._candles:
            return "CandleSeries([])"
        return (
            f"CandleSeries(n={len(self._candles)}, "
            f"first={self._candles[0].time}, last={self._candles[-1].time})"
        )

    def head(self, length: int) -> CandleSeries:
        """Return the prefix of the first `length` candles."""
        return CandleSeries(self._candles[:length])

    def to_records(self) -> list[dict[str, float | int]]:
        return [c.to_dict() for c in self._candles]
