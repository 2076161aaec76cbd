"""Market structure detection (swing points and structure events)."""

from core.structure.events import (
    Bias,
    FairValueGap,
    LiquiditySweep,
    StructureEvent,
    break_of_structure,
    find_break_of_structure,
    find_fair_value_gaps,
    find_liquidity_sweep,
)
from core.structure.swings import (
    SwingIndex,
    SwingKind,
    SwingPoint,
    confirmed_at,
    find_swing_highs,
    find_swing_lows,
    find_swing_points,
)

__all__ = [
    "Bias",
    "FairValueGap",
    "LiquiditySweep",
    "StructureEvent",
    "break_of_structure",
    "find_break_of_structure",
    "find_fair_value_gaps",
    "find_liquidity_sweep",
    "SwingIndex",
    "SwingKind",
    "SwingPoint",
    "confirmed_at",
    "find_swing_highs",
    "find_swing_lows",
    "find_swing_points",
]
