"""Swing point detection.

A swing high at index i with lookaround L requires high[i] to strictly
exceed every high in [i-L, i-1] and [i+1, i+L] (symmetric for swing lows).
The right-hand window means a swing at i is only *confirmed* once candle
i+L has closed, and detection never reads beyond i+L. Computing swings on
a full series and filtering them by `index + L <= as_of` therefore gives
exactly what a live evaluation at `as_of` would have seen.
"""

from bisect import bisect_right
from dataclasses import dataclass
from enum import Enum
from typing import Sequence

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view


class SwingKind(str, Enum):
    HIGH = "high"
    LOW = "low"


@dataclass(slots=True, frozen=True)
class SwingPoint:
    """A confirmed local extremum."""

    index: int
    time: int
    price: float
    kind: SwingKind

    def confirmed_index(self, lookaround: int) -> int:
        """First candle index at which this swing is known."""
        return self.index + lookaround


def _extrema_mask(arr: np.ndarray, lookaround: int, highs: bool) -> np.ndarray:
    mask = np.zeros(len(arr), dtype=bool)
    width = 2 * lookaround + 1
    if lookaround <= 0 or len(arr) < width:
        return mask
    windows = sliding_window_view(arr, width)
    center = windows[:, lookaround]
    left = windows[:, :lookaround]
    right = windows[:, lookaround + 1:]
    if highs:
        hits = (center > left.max(axis=1)) & (center > right.max(axis=1))
    else:
        hits = (center < left.min(axis=1)) & (center < right.min(axis=1))
    mask[lookaround: len(arr) - lookaround] = hits
    return mask


def find_swing_highs(
    highs: Sequence[float],
    lookaround: int,
    times: Sequence[int] | None = None,
) -> list[SwingPoint]:
    arr = np.asarray(highs, dtype=np.float64)
    idx = np.flatnonzero(_extrema_mask(arr, lookaround, highs=True))
    return [
        SwingPoint(int(i), int(times[i]) if times is not None else int(i),
                   float(arr[i]), SwingKind.HIGH)
        for i in idx
    ]


def find_swing_lows(
    lows: Sequence[float],
    lookaround: int,
    times: Sequence[int] | None = None,
) -> list[SwingPoint]:
    arr = np.asarray(lows, dtype=np.float64)
    idx = np.flatnonzero(_extrema_mask(arr, lookaround, highs=False))
    return [
        SwingPoint(int(i), int(times[i]) if times is not None else int(i),
                   float(arr[i]), SwingKind.LOW)
        for i in idx
    ]


def find_swing_points(
    highs: Sequence[float],
    lows: Sequence[float],
    lookaround: int,
    times: Sequence[int] | None = None,
) -> list[SwingPoint]:
    """
    Find all confirmed swing highs and lows, ordered by index.

    Args:
        highs: Sequence of high prices
        lows: Sequence of low prices
        lookaround: Candles required on each side
        times: Optional candle times (defaults to the index)

    Returns:
        Swing points sorted by index (a candle can be both a high and a low)
    """
    points = find_swing_highs(highs, lookaround, times) + find_swing_lows(
        lows, lookaround, times
    )
    points.sort(key=lambda p: (p.index, p.kind != SwingKind.HIGH))
    return points


def confirmed_at(
    points: Sequence[SwingPoint], as_of: int, lookaround: int
) -> list[SwingPoint]:
    """Swing points already confirmed when candle `as_of` closes."""
    return [p for p in points if p.index + lookaround <= as_of]


class SwingIndex:
    """Causal lookups over one kind of swing point.

    Holds the swings of a single kind sorted by index and answers "latest
    swing known at candle `as_of`" queries with a binary search.
    """

    def __init__(self, points: Sequence[SwingPoint], lookaround: int):
        self.points = sorted(points, key=lambda p: p.index)
        self.lookaround = lookaround
        self._indices = [p.index for p in self.points]

    def __len__(self) -> int:
        return len(self.points)

    def latest(self, as_of: int, before: int | None = None) -> SwingPoint | None:
        """Most recent swing confirmed by `as_of`, optionally with index < before."""
        bound = as_of - self.lookaround
        if before is not None:
            bound = min(bound, before - 1)
        pos = bisect_right(self._indices, bound)
        return self.points[pos - 1] if pos else None

    def confirmed(self, as_of: int, since: int = 0) -> list[SwingPoint]:
        """Swings with since <= index and index + lookaround <= as_of."""
        lo = bisect_right(self._indices, since - 1)
        hi = bisect_right(self._indices, as_of - self.lookaround)
        return self.points[lo:hi]
