"""Parameter sets for the mean-reversion family."""

from core.models import StrategyParams


class RsiDivergenceParams(StrategyParams):
    period: int = 14
    oversold: float = 30.0
    overbought: float = 70.0


class BollingerBandsParams(StrategyParams):
    period: int = 20
    std_dev: float = 2.0


class WilliamsRParams(StrategyParams):
    period: int = 14
    overbought: float = -20.0
    oversold: float = -80.0


class CciReversionParams(StrategyParams):
    period: int = 20
    overbought: float = 100.0
    oversold: float = -100.0
    reverse: bool = False


class PivotPointReversalParams(StrategyParams):
    period: int = 24
