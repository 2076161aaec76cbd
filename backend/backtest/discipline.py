"""Trading discipline: entry lockouts after loss streaks or a daily drawdown.

The guard is fed every closed trade and consulted before each new entry.
Two rules apply once enabled:
- Daily drawdown: when the realized pnl of the current UTC day is negative
  and its magnitude reaches ``daily_drawdown_limit`` percent of the
  initial capital, entries are blocked until the next UTC day.
- Consecutive losses: once ``max_consecutive_losses`` losing trades
  (pnl <= 0) happen in a row, ``COOLDOWN`` blocks entries for
  ``cooldown_minutes`` of candle time and then resets the streak;
  ``ADAPT`` blocks entries for the rest of the run.
"""

from __future__ import annotations

import logging
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

DAY_MS = 86_400_000


class FailureMode(str, Enum):
    COOLDOWN = "cooldown"
    ADAPT = "adapt"


class DisciplineConfig(BaseModel):
    """Discipline rules for a backtest run (disabled by default)."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = False
    max_consecutive_losses: int = Field(default=4, ge=1)
    cooldown_minutes: float = Field(default=15.0, ge=0)
    daily_drawdown_limit: float = Field(default=10.0, gt=0)  # percent of capital
    on_failure: FailureMode = FailureMode.COOLDOWN


class TradingDiscipline:
    """Tracks the loss streak and daily pnl of one simulation."""

    def __init__(self, config: DisciplineConfig, initial_capital: float):
        self.config = config
        self.initial_capital = initial_capital
        self.consecutive_losses = 0
        self.day_pnl = 0.0
        self._day: int | None = None
        self._cooldown_until: int | None = None
        self._halted = False

    def _roll_day(self, time_ms: int) -> None:
        day = time_ms // DAY_MS
        if day != self._day:
            self._day = day
            self.day_pnl = 0.0

    def record_trade(self, pnl: float, time_ms: int) -> None:
        """Register a closed trade at its exit time."""
        self._roll_day(time_ms)
        self.day_pnl += pnl
        if pnl <= 0:
            self.consecutive_losses += 1
        else:
            self.consecutive_losses = 0

    def check(self, time_ms: int) -> str | None:
        """Return the reason entries are blocked at ``time_ms``, or None."""
        cfg = self.config
        if not cfg.enabled:
            return None
        self._roll_day(time_ms)

        if self._halted:
            return "Trading halted after consecutive losses"

        drawdown_pct = -self.day_pnl / self.initial_capital * 100
        if self.day_pnl < 0 and drawdown_pct >= cfg.daily_drawdown_limit:
            return f"Daily drawdown limit of {cfg.daily_drawdown_limit}% reached"

        if self.consecutive_losses >= cfg.max_consecutive_losses:
            if cfg.on_failure == FailureMode.ADAPT:
                self._halted = True
                logger.info(f"{self.consecutive_losses} consecutive losses; halting entries")
                return "Trading halted after consecutive losses"
            if self._cooldown_until is None:
                self._cooldown_until = time_ms + int(cfg.cooldown_minutes * 60_000)
                logger.info(
                    f"{self.consecutive_losses} consecutive losses; "
                    f"cooling down for {cfg.cooldown_minutes} minutes"
                )

        if self._cooldown_until is not None:
            if time_ms < self._cooldown_until:
                return "Cooling down after consecutive losses"
            self._cooldown_until = None
            self.consecutive_losses = 0

        return None
