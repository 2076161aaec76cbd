"""Strategy registry for discovering and instantiating signal generators.

Usage:
    @register_strategy("my-strategy")
    class MyStrategy(BaseStrategy):
        ...

    strategy = create_strategy("my-strategy")
    strategies = list_strategies()
"""

from __future__ import annotations

import logging
from typing import Any

logger = logging.getLogger(__name__)

# Global registry: strategy_id -> strategy_class
_REGISTRY: dict[str, type] = {}


def register_strategy(strategy_id: str):
    """Decorator to register a strategy class under a given id.

    The id is also stored on the class as `id`.

    Args:
        strategy_id: Unique strategy id (e.g., 'sma-crossover').

    Returns:
        Decorator that registers the class and returns it.

    Raises:
        ValueError: If a strategy with the same id is already registered.
    """

    def decorator(cls):
        if strategy_id in _REGISTRY:
            raise ValueError(
                f"Strategy '{strategy_id}' is already registered by {_REGISTRY[strategy_id].__name__}"
            )
        cls.id = strategy_id
        _REGISTRY[strategy_id] = cls
        logger.debug("Registered strategy: %s -> %s", strategy_id, cls.__name__)
        return cls

    return decorator


def get_strategy_class(strategy_id: str) -> type:
    """Get the strategy class by id (without instantiating).

    Raises:
        KeyError: If no strategy is registered under the given id.
    """
    cls = _REGISTRY.get(strategy_id)
    if cls is None:
        available = ", ".join(sorted(_REGISTRY.keys())) or "(none)"
        raise KeyError(
            f"Unknown strategy '{strategy_id}'. Available: {available}"
        )
    return cls


def create_strategy(strategy_id: str, **kwargs: Any):
    """Create a strategy instance by id.

    Args:
        strategy_id: Registered strategy id.
        **kwargs: Arguments passed to the strategy constructor.

    Raises:
        KeyError: If no strategy is registered under the given id.
    """
    return get_strategy_class(strategy_id)(**kwargs)


def list_strategies() -> list[str]:
    """Return a sorted list of registered strategy ids."""
    return sorted(_REGISTRY.keys())


def describe_strategies() -> list[dict[str, str]]:
    """Return id, name and description of every registered strategy."""
    return [
        {
            "id": strategy_id,
            "name": _REGISTRY[strategy_id].name,
            "description": _REGISTRY[strategy_id].description,
        }
        for strategy_id in list_strategies()
    ]
