"""Multi-indicator confluence strategy family (auto-registers on import)."""

from core.strategy.confluence.generator import (
    EmaCciMacdStrategy,
    SmiMfiScalpStrategy,
    SmiMfiSupertrendStrategy,
    VolumeDeltaStrategy,
)

__all__ = [
    "EmaCciMacdStrategy",
    "SmiMfiScalpStrategy",
    "SmiMfiSupertrendStrategy",
    "VolumeDeltaStrategy",
]
