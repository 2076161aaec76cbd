"""Liquidity sweep strategy package (auto-registers on import)."""

from core.strategy.liquidity.generator import LiquidityGrabStrategy, LiquidityOrderFlowStrategy
from core.strategy.liquidity.models import LiquidityGrabParams, LiquidityOrderFlowParams

__all__ = [
    "LiquidityGrabStrategy",
    "LiquidityOrderFlowStrategy",
    "LiquidityGrabParams",
    "LiquidityOrderFlowParams",
]
