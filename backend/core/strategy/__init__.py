"""Strategy plugin system.

Public API:
- Strategy: Protocol that all signal generators implement
- StrategyContext: Optional side inputs (higher-timeframe candles)
- BaseStrategy: Template base class for registered generators
- register_strategy: Decorator to register a strategy class
- create_strategy: Factory function to instantiate strategies by id
- list_strategies: Discover all registered strategy ids
- get_strategy_class: Get strategy class by id without instantiating

Importing this package auto-registers all built-in strategies.
"""

from core.strategy.protocol import ParamsInput, Strategy, StrategyContext
from core.strategy.registry import (
    register_strategy,
    create_strategy,
    describe_strategies,
    list_strategies,
    get_strategy_class,
)
from core.strategy.base import BaseStrategy, crossed_above, crossed_below

# Import built-in strategies to trigger auto-registration
import core.strategy.crossover  # noqa: F401
import core.strategy.trend  # noqa: F401
import core.strategy.reversion  # noqa: F401
import core.strategy.peak_formation  # noqa: F401
import core.strategy.liquidity  # noqa: F401
import core.strategy.mtf  # noqa: F401
import core.strategy.confluence  # noqa: F401
import core.strategy.code_based_consensus  # noqa: F401

__all__ = [
    "ParamsInput",
    "Strategy",
    "StrategyContext",
    "BaseStrategy",
    "crossed_above",
    "crossed_below",
    "register_strategy",
    "create_strategy",
    "describe_strategies",
    "list_strategies",
    "get_strategy_class",
]
