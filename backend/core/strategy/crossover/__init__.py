"""Crossover strategy family.

Importing this package triggers strategy registration via the
@register_strategy decorators in the generator module.
"""

from core.strategy.crossover.generator import (
    AwesomeOscillatorStrategy,
    ChaikinMoneyFlowStrategy,
    CoppockCurveStrategy,
    ElderRayStrategy,
    EmaCrossoverStrategy,
    MacdCrossoverStrategy,
    MomentumCrossStrategy,
    ObvDivergenceStrategy,
    SmaCrossoverStrategy,
    StochasticCrossoverStrategy,
    VwapCrossStrategy,
)

__all__ = [
    "AwesomeOscillatorStrategy",
    "ChaikinMoneyFlowStrategy",
    "CoppockCurveStrategy",
    "ElderRayStrategy",
    "EmaCrossoverStrategy",
    "MacdCrossoverStrategy",
    "MomentumCrossStrategy",
    "ObvDivergenceStrategy",
    "SmaCrossoverStrategy",
    "StochasticCrossoverStrategy",
    "VwapCrossStrategy",
]
