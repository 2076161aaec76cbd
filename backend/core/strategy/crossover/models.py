"""Parameter sets for the crossover family."""

from core.models import StrategyParams


class SmaCrossoverParams(StrategyParams):
    short_period: int = 20
    long_period: int = 50


class EmaCrossoverParams(StrategyParams):
    short_period: int = 12
    long_period: int = 26
    reverse: bool = False


class MacdCrossoverParams(StrategyParams):
    short_period: int = 12
    long_period: int = 26
    signal_period: int = 9


class StochasticCrossoverParams(StrategyParams):
    period: int = 14
    smooth_k: int = 3
    smooth_d: int = 3


class VwapCrossParams(StrategyParams):
    period: int = 20
    reverse: bool = False


class MomentumCrossParams(StrategyParams):
    period: int = 14


class AwesomeOscillatorParams(StrategyParams):
    short_period: int = 5
    long_period: int = 34


class CoppockCurveParams(StrategyParams):
    long_roc: int = 14
    short_roc: int = 11
    wma_period: int = 10


class ObvDivergenceParams(StrategyParams):
    period: int = 20


class ChaikinMoneyFlowParams(StrategyParams):
    period: int = 20
    reverse: bool = False


class ElderRayParams(StrategyParams):
    period: int = 13
    reverse: bool = False
