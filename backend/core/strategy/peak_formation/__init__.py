"""Peak Formation Fib strategy package.

Importing this package triggers strategy registration via the
@register_strategy decorator on PeakFormationFibStrategy.
"""

from core.strategy.peak_formation.generator import FibSetup, PeakFormationFibStrategy
from core.strategy.peak_formation.models import PeakFormationFibParams

__all__ = [
    "FibSetup",
    "PeakFormationFibStrategy",
    "PeakFormationFibParams",
]
