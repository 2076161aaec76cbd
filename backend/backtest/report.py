"""Report formatting for backtest results.

Outputs results to console (formatted tables) and JSON files.
"""

from __future__ import annotations

import json
import math
from datetime import datetime, timezone

from backtest.stats import BacktestResult


def _finite_or_label(value: float) -> float | str:
    """JSON has no infinity; encode it as a string."""
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    return value


def _fmt_time(ms: int) -> str:
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc).strftime("%Y-%m-%d %H:%M")


class ReportFormatter:
    """Format backtest results for display and export."""

    @staticmethod
    def print_console(result: BacktestResult, max_trades: int = 20) -> None:
        """Print formatted report to console."""
        s = result.summary
        pf = "inf" if math.isinf(s.profit_factor) else f"{s.profit_factor:.2f}"

        print("\n" + "=" * 70)
        print(f"  BACKTEST RESULTS: {result.strategy_id or 'strategy'}")
        print("=" * 70)
        print(f"  Initial capital: {s.initial_capital:,.2f}")
        print(f"  Ending balance:  {s.ending_balance:,.2f} ({s.total_return_percent:+.2f}%)")

        print("\n" + "-" * 70)
        print("  OVERALL")
        print("-" * 70)
        print(f"  Total trades:   {s.total_trades}")
        print(f"  Wins:           {s.wins}")
        print(f"  Losses:         {s.losses}")
        print(f"  Win rate:       {s.win_rate:.1f}%")
        print(f"  Total PnL:      {s.total_pnl:+,.2f}")
        print(f"  Average win:    {s.average_win:,.2f}")
        print(f"  Average loss:   {s.average_loss:,.2f}")
        print(f"  Profit factor:  {pf}")
        print(f"  Total fees:     {s.total_fees:,.2f}")
        print(f"  Max drawdown:   {s.max_drawdown:,.2f} ({s.max_drawdown_percent:.2f}%)")
        if result.blocked_entries:
            print(f"  Blocked entries: {result.blocked_entries}")

        if result.trades:
            print("\n" + "-" * 70)
            print(f"  TRADES (last {min(max_trades, len(result.trades))})")
            print("-" * 70)
            print(
                f"  {'Entry':<17} {'Side':<6} {'Entry px':>11} {'Exit px':>11} "
                f"{'PnL':>10} {'Reason':>12}"
            )
            for t in result.trades[-max_trades:]:
                print(
                    f"  {_fmt_time(t.entry_time):<17} {t.side.name:<6} "
                    f"{t.entry_price:>11.4f} {t.exit_price:>11.4f} "
                    f"{t.pnl:>+10.2f} {t.close_reason.value:>12}"
                )

        print("\n" + "=" * 70)

    @staticmethod
    def to_dict(result: BacktestResult) -> dict:
        """Convert results to JSON-serializable dict."""
        s = result.summary
        return {
            "strategy_id": result.strategy_id,
            "blocked_entries": result.blocked_entries,
            "summary": {
                "total_trades": s.total_trades,
                "wins": s.wins,
                "losses": s.losses,
                "win_rate": round(s.win_rate, 2),
                "total_pnl": s.total_pnl,
                "average_win": s.average_win,
                "average_loss": s.average_loss,
                "profit_factor": _finite_or_label(s.profit_factor),
                "initial_capital": s.initial_capital,
                "ending_balance": s.ending_balance,
                "total_return_percent": s.total_return_percent,
                "total_fees": s.total_fees,
                "max_drawdown": s.max_drawdown,
                "max_drawdown_percent": s.max_drawdown_percent,
            },
            "trades": [
                {
                    "side": "long" if t.side > 0 else "short",
                    "entry_time": t.entry_time,
                    "entry_price": t.entry_price,
                    "exit_time": t.exit_time,
                    "exit_price": t.exit_price,
                    "quantity": t.quantity,
                    "pnl": t.pnl,
                    "pnl_percent": t.pnl_percent,
                    "close_reason": t.close_reason.value,
                    "stop_loss": t.stop_loss,
                    "take_profit": t.take_profit,
                    "fee": t.fee,
                    "peak_price": t.peak_price,
                }
                for t in result.trades
            ],
        }

    @staticmethod
    def save_json(result: BacktestResult, filepath: str) -> None:
        """Save results to JSON file."""
        data = ReportFormatter.to_dict(result)
        with open(filepath, "w") as f:
            json.dump(data, f, indent=2)
        print(f"\nResults saved to {filepath}")
