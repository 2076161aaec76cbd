"""File-based candle loading for the backtest CLI.

Supported formats:
- CSV with a header row naming time/open/high/low/close[/volume]
- Headerless CSV in exchange kline-dump order
  (open_time, open, high, low, close, volume, ...)
- JSON: a list of candle objects, or {"candles": [...]}

Times are epoch milliseconds.
"""

from __future__ import annotations

import csv
import json
import logging
from pathlib import Path
from typing import Any, Iterator

from core.models import CandleSeries, MalformedSeriesError

logger = logging.getLogger(__name__)

_POSITIONAL = ("time", "open", "high", "low", "close", "volume")
_TIME_ALIASES = ("time", "timestamp", "open_time")


def _normalize(record: dict[str, Any]) -> dict[str, Any]:
    out = {k.strip().lower(): v for k, v in record.items() if k is not None}
    if "time" not in out:
        for alias in _TIME_ALIASES[1:]:
            if alias in out:
                out["time"] = out[alias]
                break
    if isinstance(out.get("time"), str):
        # "1700000000000.0" style values from spreadsheets
        try:
            out["time"] = int(float(out["time"]))
        except ValueError:
            pass
    return out


def _iter_csv_records(text: str) -> Iterator[dict[str, Any]]:
    rows = [row for row in csv.reader(text.splitlines()) if row]
    if not rows:
        return
    first = rows[0]
    if first[0].strip().lstrip("-").replace(".", "", 1).isdigit():
        for row in rows:
            yield dict(zip(_POSITIONAL, row))
    else:
        header = [h.strip() for h in first]
        for row in rows[1:]:
            yield _normalize(dict(zip(header, row)))


def load_candles_text(text: str, fmt: str) -> CandleSeries:
    """
    Parse candles from CSV or JSON text.

    Args:
        text: File contents
        fmt: "csv" or "json"

    Returns:
        Validated CandleSeries

    Raises:
        MalformedSeriesError: unreadable content or invalid candles
    """
    if fmt == "json":
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise MalformedSeriesError(f"Invalid JSON candle file: {e}") from e
        if isinstance(data, dict):
            data = data.get("candles")
        if not isinstance(data, list) or not all(isinstance(r, dict) for r in data):
            raise MalformedSeriesError("JSON candles must be a list of objects")
        records = [_normalize(r) for r in data]
    elif fmt == "csv":
        records = list(_iter_csv_records(text))
    else:
        raise MalformedSeriesError(f"Unsupported candle format: {fmt}")

    return CandleSeries.from_records(records)


def load_candles(path: str | Path) -> CandleSeries:
    """Load candles from a .csv or .json file (format chosen by extension)."""
    path = Path(path)
    fmt = "json" if path.suffix.lower() == ".json" else "csv"
    series = load_candles_text(path.read_text(encoding="utf-8"), fmt)
    logger.info(f"Loaded {len(series):,} candles from {path}")
    return series
