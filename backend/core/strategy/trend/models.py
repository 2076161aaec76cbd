"""Parameter sets for the trend-following family."""

from core.models import StrategyParams


class SupertrendParams(StrategyParams):
    period: int = 10
    multiplier: float = 3.0


class ParabolicSarFlipParams(StrategyParams):
    af_start: float = 0.02
    af_increment: float = 0.02
    af_max: float = 0.2


class IchimokuCloudParams(StrategyParams):
    tenkan_period: int = 9
    kijun_period: int = 26
    senkou_b_period: int = 52
    displacement: int = 26
    reverse: bool = False


class HeikinAshiTrendParams(StrategyParams):
    """No tunable fields; HA colour flips only."""


class DonchianChannelsParams(StrategyParams):
    period: int = 20


class KeltnerChannelsParams(StrategyParams):
    period: int = 20
    multiplier: float = 2.0
