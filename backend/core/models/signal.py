"""Signal and trade direction models."""

from enum import Enum

from pydantic import BaseModel, Field, field_validator


class Direction(int, Enum):
    """Trade direction."""

    LONG = 1
    SHORT = -1


class Action(str, Enum):
    """Trade signal action."""

    BUY = "BUY"
    SELL = "SELL"
    HOLD = "HOLD"


class TradeSignal(BaseModel):
    """Current trade signal handed to the execution layer."""

    action: Action
    entry_price: float
    stop_loss: float | None = None
    take_profit: float | None = None
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    reasoning: str = ""
    timestamp: int  # epoch ms of the evaluated candle
    strategy_id: str
    asset: str = ""

    @field_validator("confidence", mode="before")
    @classmethod
    def _clamp_confidence(cls, value):
        """Clamp out-of-range confidences into [0, 1]; NaN becomes 0."""
        try:
            value = float(value)
        except (TypeError, ValueError):
            return 0.0
        if value != value:  # NaN
            return 0.0
        return min(1.0, max(0.0, value))

    @property
    def direction(self) -> Direction | None:
        if self.action == Action.BUY:
            return Direction.LONG
        if self.action == Action.SELL:
            return Direction.SHORT
        return None

    @property
    def risk_amount(self) -> float | None:
        """Distance from entry to stop loss."""
        if self.stop_loss is None or self.action == Action.HOLD:
            return None
        return abs(self.entry_price - self.stop_loss)

    @property
    def reward_amount(self) -> float | None:
        """Distance from entry to take profit."""
        if self.take_profit is None or self.action == Action.HOLD:
            return None
        return abs(self.take_profit - self.entry_price)
