"""CLI entry point for the backtesting system.

Usage:
    python -m backtest --candles data/BTCUSDT_1h.csv --strategy ema-crossover
    python -m backtest --candles data.json --strategy rsi-divergence --params '{"period": 10}'
    python -m backtest --candles 1h.csv --strategy mtf-engulfing --htf-candles 1d.csv --htf-interval 1d
    python -m backtest --list
"""

import argparse
import json
import logging
import os
import sys

from pydantic import ValidationError

# Add backend to Python path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.models import MalformedSeriesError
from core.strategy import StrategyContext, describe_strategies

from backtest.config import get_backtest_settings
from backtest.loader import load_candles
from backtest.report import ReportFormatter
from backtest.runner import run_backtest


def parse_params(value: str) -> dict:
    """Parse a JSON object of strategy parameter overrides."""
    try:
        params = json.loads(value)
    except json.JSONDecodeError as e:
        raise argparse.ArgumentTypeError(f"Invalid --params JSON: {e}")
    if not isinstance(params, dict):
        raise argparse.ArgumentTypeError("--params must be a JSON object")
    return params


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Backtest a registered signal strategy on a candle file",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m backtest --candles btc_1h.csv --strategy ema-crossover
  python -m backtest --candles btc_1h.json --strategy supertrend --sl 1.5 --tp 3 --fee 0.04
  python -m backtest --candles btc_1h.csv --strategy ema-crossover --discipline
  python -m backtest --list
        """,
    )

    parser.add_argument(
        "--list",
        action="store_true",
        help="List registered strategies and exit",
    )
    parser.add_argument("--candles", type=str, default=None, help="Candle file (.csv or .json)")
    parser.add_argument("--strategy", type=str, default=None, help="Strategy id")
    parser.add_argument(
        "--params",
        type=parse_params,
        default=None,
        help="Strategy parameter overrides as a JSON object",
    )
    parser.add_argument("--htf-candles", type=str, default=None, help="Higher-timeframe candle file")
    parser.add_argument("--htf-interval", type=str, default=None, help="Higher-timeframe interval (e.g. 1d)")

    # Simulation settings (defaults from BACKTEST_* environment)
    parser.add_argument("--capital", type=float, default=None, help="Initial capital")
    parser.add_argument("--leverage", type=float, default=None, help="Leverage multiplier")
    parser.add_argument("--tp", type=float, default=None, help="Take-profit percent")
    parser.add_argument("--sl", type=float, default=None, help="Stop-loss percent")
    parser.add_argument("--fee", type=float, default=None, help="Fee percent per side notional")
    parser.add_argument(
        "--use-signal-stops",
        action="store_true",
        default=None,
        help="Use the strategy's stop_loss_level column when present",
    )
    parser.add_argument(
        "--discipline",
        action="store_true",
        default=None,
        help="Block entries after loss streaks or the daily drawdown limit",
    )
    parser.add_argument(
        "--output", "-o",
        type=str,
        default=None,
        help="Output file path for JSON results",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose logging",
    )
    return parser.parse_args(argv)


def cmd_list() -> None:
    """Print registered strategies."""
    strategies = describe_strategies()
    print(f"\n{'ID':<28} {'Name':<32}")
    print("-" * 60)
    for s in strategies:
        print(f"{s['id']:<28} {s['name']:<32}")
    print()


def cmd_run_backtest(args: argparse.Namespace) -> int:
    """Run a backtest; returns the process exit code."""
    if not args.candles or not args.strategy:
        print("Error: --candles and --strategy are required for backtest")
        return 1

    try:
        config = get_backtest_settings().to_config(
            discipline_enabled=args.discipline,
            initial_capital=args.capital,
            leverage=args.leverage,
            take_profit_pct=args.tp,
            stop_loss_pct=args.sl,
            fee_pct=args.fee,
            use_signal_stops=args.use_signal_stops,
        )
    except ValidationError as e:
        print(f"Error: invalid backtest settings: {e}")
        return 1

    try:
        candles = load_candles(args.candles)
        context = None
        if args.htf_candles:
            context = StrategyContext(
                higher_timeframe=load_candles(args.htf_candles),
                htf_interval=args.htf_interval,
            )
    except (OSError, MalformedSeriesError) as e:
        print(f"Error: {e}")
        return 1

    try:
        result = run_backtest(candles, args.strategy, args.params, config, context)
    except KeyError as e:
        print(f"Error: {e.args[0] if e.args else e}")
        return 1

    ReportFormatter.print_console(result)
    if args.output:
        ReportFormatter.save_json(result, args.output)
    return 0


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    # Configure logging
    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    if args.list:
        cmd_list()
        return 0
    return cmd_run_backtest(args)


if __name__ == "__main__":
    sys.exit(main())
