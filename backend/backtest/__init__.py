"""Backtesting for registered signal strategies.

Only depends on core/ for business logic and performs file I/O solely in
the loader and report modules.

Usage:
    python -m backtest --candles btc_1h.csv --strategy ema-crossover
    python -m backtest --list
"""

from backtest.config import BacktestConfig
from backtest.discipline import DisciplineConfig, FailureMode
from backtest.runner import run_backtest
from backtest.simulator import BacktestSimulator
from backtest.stats import (
    BacktestResult,
    BacktestSummary,
    BacktestTrade,
    CloseReason,
    summarize,
)

__all__ = [
    "BacktestConfig",
    "BacktestResult",
    "BacktestSimulator",
    "BacktestSummary",
    "BacktestTrade",
    "CloseReason",
    "DisciplineConfig",
    "FailureMode",
    "run_backtest",
    "summarize",
]
