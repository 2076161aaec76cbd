"""Trade ledger types and summary statistics for backtest results.

Ledger identity: ending_balance == initial_capital + sum(trade.pnl).
Profit factor is infinite when the ledger has no losing trades.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from core.models import Direction


class CloseReason(str, Enum):
    STOP_LOSS = "stop-loss"
    TAKE_PROFIT = "take-profit"
    SIGNAL = "signal"


@dataclass
class BacktestTrade:
    """A closed position."""

    side: Direction
    entry_time: int
    entry_price: float
    exit_time: int
    exit_price: float
    quantity: float
    pnl: float
    pnl_percent: float
    close_reason: CloseReason
    stop_loss: float | None = None
    take_profit: float | None = None
    fee: float = 0.0
    peak_price: float | None = None

    @property
    def is_win(self) -> bool:
        return self.pnl > 0


@dataclass
class BacktestSummary:
    total_trades: int = 0
    wins: int = 0
    losses: int = 0
    win_rate: float = 0.0
    total_pnl: float = 0.0
    average_win: float = 0.0
    average_loss: float = 0.0
    profit_factor: float = 0.0
    initial_capital: float = 0.0
    ending_balance: float = 0.0
    total_return_percent: float = 0.0
    total_fees: float = 0.0
    max_drawdown: float = 0.0
    max_drawdown_percent: float = 0.0


@dataclass
class BacktestResult:
    """Complete backtest output."""

    trades: list[BacktestTrade] = field(default_factory=list)
    summary: BacktestSummary = field(default_factory=BacktestSummary)
    strategy_id: str = ""
    blocked_entries: int = 0  # Entries skipped by the discipline guard


def _max_drawdown(trades: list[BacktestTrade], initial_capital: float) -> tuple[float, float]:
    """Peak-to-trough decline of the realized equity curve (absolute, percent of peak)."""
    equity = peak = initial_capital
    worst = worst_pct = 0.0
    for trade in trades:
        equity += trade.pnl
        peak = max(peak, equity)
        drawdown = peak - equity
        if drawdown > worst:
            worst = drawdown
            worst_pct = drawdown / peak * 100 if peak > 0 else 0.0
    return worst, worst_pct


def summarize(trades: list[BacktestTrade], initial_capital: float) -> BacktestSummary:
    """
    Compute summary statistics for a trade ledger.

    Args:
        trades: Closed trades in chronological order
        initial_capital: Starting balance

    Returns:
        BacktestSummary
    """
    wins = [t.pnl for t in trades if t.is_win]
    losses = [t.pnl for t in trades if not t.is_win]

    gross_profit = sum(wins)
    gross_loss = sum(losses)
    total_pnl = gross_profit + gross_loss

    if not trades:
        profit_factor = 0.0
    elif gross_loss == 0:
        profit_factor = float("inf")
    else:
        profit_factor = abs(gross_profit / gross_loss)

    max_dd, max_dd_pct = _max_drawdown(trades, initial_capital)
    ending_balance = initial_capital + total_pnl

    return BacktestSummary(
        total_trades=len(trades),
        wins=len(wins),
        losses=len(losses),
        win_rate=len(wins) / len(trades) * 100 if trades else 0.0,
        total_pnl=total_pnl,
        average_win=gross_profit / len(wins) if wins else 0.0,
        average_loss=abs(gross_loss) / len(losses) if losses else 0.0,
        profit_factor=profit_factor,
        initial_capital=initial_capital,
        ending_balance=ending_balance,
        total_return_percent=total_pnl / initial_capital * 100 if initial_capital else 0.0,
        total_fees=sum(t.fee for t in trades),
        max_drawdown=max_dd,
        max_drawdown_percent=max_dd_pct,
    )
