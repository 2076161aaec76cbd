"""Backtest pipeline: strategy annotation followed by the position simulator."""

from __future__ import annotations

import logging
import time
from typing import Any, Mapping

from core.models import CandleSeries
from core.strategy import StrategyContext, create_strategy

from backtest.config import BacktestConfig
from backtest.simulator import BacktestSimulator
from backtest.stats import BacktestResult

logger = logging.getLogger(__name__)


def run_backtest(
    candles: CandleSeries,
    strategy_id: str,
    params: Mapping[str, Any] | None = None,
    config: BacktestConfig | None = None,
    context: StrategyContext | None = None,
) -> BacktestResult:
    """
    Annotate candles with a registered strategy and replay the markers.

    Args:
        candles: Input series (not modified)
        strategy_id: Registered strategy id
        params: Parameter overrides for the strategy
        config: Simulation settings (defaults when omitted)
        context: Side inputs such as higher-timeframe candles

    Returns:
        BacktestResult with the trade ledger and summary

    Raises:
        KeyError: strategy_id is not registered
    """
    config = config or BacktestConfig()
    strategy = create_strategy(strategy_id)
    start_time = time.time()

    annotated = strategy.calculate(candles, params, context)
    result = BacktestSimulator(config).run(annotated)
    result.strategy_id = strategy_id

    elapsed = time.time() - start_time
    logger.info(
        f"Backtest {strategy_id}: {len(candles):,} candles, "
        f"{result.summary.total_trades} trades, "
        f"pnl={result.summary.total_pnl:+.2f} in {elapsed:.2f}s"
    )
    return result
