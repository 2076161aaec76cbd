"""Structure events: break of structure, liquidity sweeps and fair value gaps.

All searches scan forward from a known starting candle and stop at the
first match, so a result found on a prefix of the series is the same
result found on the full series.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Sequence

from core.structure.swings import SwingKind, SwingPoint


class Bias(str, Enum):
    BULLISH = "bullish"
    BEARISH = "bearish"


@dataclass(slots=True, frozen=True)
class StructureEvent:
    """A close beyond a prior confirmed swing extremum."""

    trigger_index: int
    reference_swing_index: int
    direction: Bias
    level: float


@dataclass(slots=True, frozen=True)
class LiquiditySweep:
    """A wick beyond a confirmed swing extremum.

    Sweeping a swing high takes buy-side liquidity and sets up a bearish
    reversal; sweeping a swing low is the bullish mirror.
    """

    swing: SwingPoint
    sweep_index: int
    wick: float
    volume: float

    @property
    def direction(self) -> Bias:
        return Bias.BEARISH if self.swing.kind == SwingKind.HIGH else Bias.BULLISH


@dataclass(slots=True, frozen=True)
class FairValueGap:
    """Three-candle imbalance centred on `index`.

    Bullish when high[index-1] < low[index+1] (gap between them), bearish
    when low[index-1] > high[index+1]. Known once candle index+1 closes.
    """

    index: int
    kind: Bias
    top: float
    bottom: float

    @property
    def confirmed_index(self) -> int:
        return self.index + 1

    def contains(self, price: float) -> bool:
        return self.bottom <= price <= self.top


def find_break_of_structure(
    closes: Sequence[float],
    level: float,
    direction: Bias,
    start: int,
    end: int,
    volumes: Sequence[float] | None = None,
    max_volume: float | None = None,
) -> int | None:
    """
    Find the first close that breaks `level` strictly inside (start, end).

    Args:
        closes: Sequence of close prices
        level: Price of the swing extremum being broken
        direction: BEARISH breaks below the level, BULLISH above
        start: Exclusive lower bound (usually the peak or sweep index)
        end: Exclusive upper bound (usually the evaluation index)
        volumes: Candle volumes, required with max_volume
        max_volume: When set, a break only counts if its volume is below it;
            breaks failing the check are skipped and scanning continues

    Returns:
        Index of the break candle, or None
    """
    for k in range(max(start + 1, 0), min(end, len(closes))):
        if direction == Bias.BEARISH:
            broke = closes[k] < level
        else:
            broke = closes[k] > level
        if not broke:
            continue
        if max_volume is not None and volumes is not None and volumes[k] >= max_volume:
            continue
        return k
    return None


def break_of_structure(
    closes: Sequence[float],
    swing: SwingPoint,
    start: int,
    end: int,
    volumes: Sequence[float] | None = None,
    max_volume: float | None = None,
) -> StructureEvent | None:
    """Break of a swing point: below a swing low is bearish, above a swing high bullish."""
    direction = Bias.BEARISH if swing.kind == SwingKind.LOW else Bias.BULLISH
    k = find_break_of_structure(
        closes, swing.price, direction, start, end, volumes, max_volume
    )
    if k is None:
        return None
    return StructureEvent(
        trigger_index=k,
        reference_swing_index=swing.index,
        direction=direction,
        level=swing.price,
    )


def find_liquidity_sweep(
    highs: Sequence[float],
    lows: Sequence[float],
    volumes: Sequence[float],
    swing: SwingPoint,
    max_lookahead: int,
    start: int | None = None,
    end: int | None = None,
) -> LiquiditySweep | None:
    """
    Find the first candle whose wick exceeds a swing extremum.

    Scans (start, start + max_lookahead) where start defaults to the swing
    index, bounded by `end` (exclusive, defaults to the series length).
    """
    first = swing.index if start is None else start
    stop = min(first + max_lookahead, len(highs) if end is None else end)
    for j in range(first + 1, stop):
        if swing.kind == SwingKind.HIGH and highs[j] > swing.price:
            return LiquiditySweep(swing, j, highs[j], volumes[j])
        if swing.kind == SwingKind.LOW and lows[j] < swing.price:
            return LiquiditySweep(swing, j, lows[j], volumes[j])
    return None


def find_fair_value_gaps(
    highs: Sequence[float], lows: Sequence[float]
) -> list[FairValueGap]:
    """Detect every three-candle fair value gap, ordered by middle index."""
    gaps: list[FairValueGap] = []
    for i in range(1, len(highs) - 1):
        if highs[i - 1] < lows[i + 1]:
            gaps.append(FairValueGap(i, Bias.BULLISH, lows[i + 1], highs[i - 1]))
        elif lows[i - 1] > highs[i + 1]:
            gaps.append(FairValueGap(i, Bias.BEARISH, lows[i - 1], highs[i + 1]))
    return gaps
