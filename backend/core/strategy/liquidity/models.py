"""Liquidity strategy configurations."""

from core.models import StrategyParams


class LiquidityOrderFlowParams(StrategyParams):
    swing_lookaround: int = 5
    # Trend EMA, plotted as ema_long
    ema_trend_period: int = 200
    # Candles allowed between swing and sweep, sweep and break, break and entry
    max_lookahead: int = 50


class LiquidityGrabParams(StrategyParams):
    swing_lookaround: int = 10
    # Candles after the sweep in which the close must reclaim the level
    confirmation_candles: int = 3
    # Candles after confirmation of the swing in which a sweep is looked for
    sweep_window: int = 10
