"""Multi-timeframe strategy package (auto-registers on import)."""

from core.strategy.mtf.generator import MtfEngulfingStrategy, map_higher_timeframe
from core.strategy.mtf.models import HTF_INTERVALS, MtfEngulfingParams

__all__ = [
    "MtfEngulfingStrategy",
    "map_higher_timeframe",
    "HTF_INTERVALS",
    "MtfEngulfingParams",
]
