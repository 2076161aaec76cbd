"""Position state machine that replays an annotated series into a trade ledger.

Rules:
- Flat: a buy marker opens a long, a sell marker opens a short (buy wins
  when both are present). Entry is the candle close; size is
  initial_capital * leverage / entry.
- In position, per candle, the first matching exit fires:
  1. stop-loss touch  (long: low <= stop, short: high >= stop) at the stop
  2. take-profit touch (long: high >= target, short: low <= target) at the target
  3. opposite marker at the candle high (closing a long) or low (closing a short)
- After an exit the simulator is flat and may re-enter on the same candle.
- A position still open after the last candle is closed at its close.
- When the discipline guard is enabled, entries it blocks are skipped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from core.models import AnnotatedSeries, Candle, Direction

from backtest.config import BacktestConfig
from backtest.discipline import TradingDiscipline
from backtest.stats import BacktestResult, BacktestTrade, CloseReason, summarize

logger = logging.getLogger(__name__)


@dataclass
class _OpenPosition:
    side: Direction
    entry_time: int
    entry_price: float
    quantity: float
    stop_loss: float
    take_profit: float
    peak_price: float | None


class BacktestSimulator:
    """Replays one annotated series under a BacktestConfig."""

    def __init__(self, config: BacktestConfig | None = None):
        self.config = config or BacktestConfig()

    def run(self, annotated: AnnotatedSeries) -> BacktestResult:
        trades: list[BacktestTrade] = []
        position: _OpenPosition | None = None
        candles = annotated.candles
        buys = annotated.buy_signal
        sells = annotated.sell_signal
        discipline = TradingDiscipline(self.config.discipline, self.config.initial_capital)
        blocked = 0

        for i, candle in enumerate(candles):
            if position is not None:
                exit_ = self._check_exit(position, candle, buys[i], sells[i])
                if exit_ is not None:
                    price, reason = exit_
                    trade = self._close(position, candle.time, price, reason)
                    trades.append(trade)
                    discipline.record_trade(trade.pnl, candle.time)
                    position = None

            if position is None:
                # Consulted on every flat candle so a cooldown starts right after the streak
                block = discipline.check(candle.time)
                if block is not None:
                    if buys[i] is not None or sells[i] is not None:
                        blocked += 1
                        logger.debug(f"Entry at {candle.time} blocked: {block}")
                    continue
                if buys[i] is not None:
                    position = self._open(annotated, i, Direction.LONG)
                elif sells[i] is not None:
                    position = self._open(annotated, i, Direction.SHORT)

        if position is not None:
            last = candles[-1]
            trades.append(self._close(position, last.time, last.close, CloseReason.SIGNAL))

        return BacktestResult(
            trades=trades,
            summary=summarize(trades, self.config.initial_capital),
            blocked_entries=blocked,
        )

    def _open(self, annotated: AnnotatedSeries, i: int, side: Direction) -> _OpenPosition:
        cfg = self.config
        candle = annotated.candles[i]
        entry = candle.close
        sign = int(side)

        stop = entry * (1 - sign * cfg.stop_loss_pct / 100)
        if cfg.use_signal_stops:
            signal_stop = annotated.stop_loss_level[i]
            if signal_stop is not None:
                stop = signal_stop

        return _OpenPosition(
            side=side,
            entry_time=candle.time,
            entry_price=entry,
            quantity=cfg.initial_capital * cfg.leverage / entry,
            stop_loss=stop,
            take_profit=entry * (1 + sign * cfg.take_profit_pct / 100),
            peak_price=annotated.peak_price[i],
        )

    @staticmethod
    def _check_exit(
        position: _OpenPosition,
        candle: Candle,
        buy: float | None,
        sell: float | None,
    ) -> tuple[float, CloseReason] | None:
        if position.side == Direction.LONG:
            if candle.low <= position.stop_loss:
                return position.stop_loss, CloseReason.STOP_LOSS
            if candle.high >= position.take_profit:
                return position.take_profit, CloseReason.TAKE_PROFIT
            if sell is not None:
                return candle.high, CloseReason.SIGNAL
        else:
            if candle.high >= position.stop_loss:
                return position.stop_loss, CloseReason.STOP_LOSS
            if candle.low <= position.take_profit:
                return position.take_profit, CloseReason.TAKE_PROFIT
            if buy is not None:
                return candle.low, CloseReason.SIGNAL
        return None

    def _close(
        self,
        position: _OpenPosition,
        exit_time: int,
        exit_price: float,
        reason: CloseReason,
    ) -> BacktestTrade:
        entry_value = position.entry_price * position.quantity
        exit_value = exit_price * position.quantity
        fee = (entry_value + exit_value) * self.config.fee_pct / 100
        gross = (exit_value - entry_value) * int(position.side)
        pnl = gross - fee

        logger.debug(
            "Closed %s at %.6g (%s), pnl=%.4f",
            position.side.name, exit_price, reason.value, pnl,
        )
        return BacktestTrade(
            side=position.side,
            entry_time=position.entry_time,
            entry_price=position.entry_price,
            exit_time=exit_time,
            exit_price=exit_price,
            quantity=position.quantity,
            pnl=pnl,
            pnl_percent=pnl / self.config.initial_capital * 100,
            close_reason=reason,
            stop_loss=position.stop_loss,
            take_profit=position.take_profit,
            fee=fee,
            peak_price=position.peak_price,
        )
