"""Data models shared by indicators, strategies and the backtest."""

from core.models.annotated import (
    AnnotatedSeries,
    BUY_SIGNAL,
    PEAK_PRICE,
    SELL_SIGNAL,
    SIGNAL_COLUMNS,
    STOP_LOSS_LEVEL,
    TAKE_PROFIT_LEVEL,
)
from core.models.candle import Candle, CandleSeries, MalformedSeriesError
from core.models.config import StrategyParams, coerce_flag, coerce_number
from core.models.signal import Action, Direction, TradeSignal
from core.models.timeframe import TIMEFRAME_TO_MINUTES, bucket_start, interval_to_ms

__all__ = [
    "AnnotatedSeries",
    "BUY_SIGNAL",
    "SELL_SIGNAL",
    "STOP_LOSS_LEVEL",
    "TAKE_PROFIT_LEVEL",
    "PEAK_PRICE",
    "SIGNAL_COLUMNS",
    "Candle",
    "CandleSeries",
    "MalformedSeriesError",
    "StrategyParams",
    "coerce_flag",
    "coerce_number",
    "Action",
    "Direction",
    "TradeSignal",
    "TIMEFRAME_TO_MINUTES",
    "bucket_start",
    "interval_to_ms",
]
