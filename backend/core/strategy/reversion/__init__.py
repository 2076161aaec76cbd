"""Mean-reversion strategy family (auto-registers on import)."""

from core.strategy.reversion.generator import (
    BollingerBandsStrategy,
    CciReversionStrategy,
    PivotPointReversalStrategy,
    RsiDivergenceStrategy,
    WilliamsRStrategy,
)

__all__ = [
    "BollingerBandsStrategy",
    "CciReversionStrategy",
    "PivotPointReversalStrategy",
    "RsiDivergenceStrategy",
    "WilliamsRStrategy",
]
