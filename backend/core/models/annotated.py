"""Annotated output buffer for strategy results.

An AnnotatedSeries pairs the immutable input candles with one preallocated
column per derived field. Every column has exactly len(candles) slots and
None marks "no value at this candle".
"""

from __future__ import annotations

from typing import Any, Iterator, Sequence

from core.models.candle import Candle, CandleSeries

# Marker and level columns understood by the backtest and signal builder
BUY_SIGNAL = "buy_signal"
SELL_SIGNAL = "sell_signal"
STOP_LOSS_LEVEL = "stop_loss_level"
TAKE_PROFIT_LEVEL = "take_profit_level"
PEAK_PRICE = "peak_price"

SIGNAL_COLUMNS = (BUY_SIGNAL, SELL_SIGNAL, STOP_LOSS_LEVEL, TAKE_PROFIT_LEVEL, PEAK_PRICE)


class AnnotatedSeries:
    """Candles plus derived per-candle columns."""

    def __init__(self, candles: CandleSeries):
        self.candles = candles
        self._columns: dict[str, list[Any]] = {
            name: [None] * len(candles) for name in SIGNAL_COLUMNS
        }

    def __len__(self) -> int:
        return len(self.candles)

    # ------------------------------------------------------------------
    # Columns
    # ------------------------------------------------------------------

    @property
    def columns(self) -> list[str]:
        return list(self._columns)

    def column(self, name: str) -> list[Any]:
        """Return a column, allocating an empty one on first use."""
        if name not in self._columns:
            self._columns[name] = [None] * len(self.candles)
        return self._columns[name]

    def has_column(self, name: str) -> bool:
        return name in self._columns

    def set_column(self, name: str, values: Sequence[Any]) -> None:
        """Attach a full indicator column (must be aligned with the candles)."""
        if len(values) != len(self.candles):
            raise ValueError(
                f"Column '{name}' has {len(values)} values for {len(self.candles)} candles"
            )
        self._columns[name] = list(values)

    def get(self, name: str, index: int) -> Any:
        col = self._columns.get(name)
        if col is None:
            return None
        return col[index]

    def set(self, name: str, index: int, value: Any) -> None:
        self.column(name)[index] = value

    # ------------------------------------------------------------------
    # Markers
    # ------------------------------------------------------------------

    @property
    def buy_signal(self) -> list[float | None]:
        return self._columns[BUY_SIGNAL]

    @property
    def sell_signal(self) -> list[float | None]:
        return self._columns[SELL_SIGNAL]

    @property
    def stop_loss_level(self) -> list[float | None]:
        return self._columns[STOP_LOSS_LEVEL]

    @property
    def take_profit_level(self) -> list[float | None]:
        return self._columns[TAKE_PROFIT_LEVEL]

    @property
    def peak_price(self) -> list[float | None]:
        return self._columns[PEAK_PRICE]

    def mark_buy(self, index: int, price: float | None = None) -> None:
        """Place a buy marker (defaults to the candle low)."""
        self.buy_signal[index] = self.candles[index].low if price is None else price

    def mark_sell(self, index: int, price: float | None = None) -> None:
        """Place a sell marker (defaults to the candle high)."""
        self.sell_signal[index] = self.candles[index].high if price is None else price

    def buy_indices(self) -> list[int]:
        return [i for i, v in enumerate(self.buy_signal) if v is not None]

    def sell_indices(self) -> list[int]:
        return [i for i, v in enumerate(self.sell_signal) if v is not None]

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def record(self, index: int) -> dict[str, Any]:
        """Candle fields plus every non-null derived field at `index`."""
        out: dict[str, Any] = self.candles[index].to_dict()
        for name, col in self._columns.items():
            value = col[index]
            if value is not None:
                out[name] = value
        return out

    def records(self) -> list[dict[str, Any]]:
        return [self.record(i) for i in range(len(self.candles))]

    def last(self) -> dict[str, Any] | None:
        if not len(self.candles):
            return None
        return self.record(len(self.candles) - 1)

    def __iter__(self) -> Iterator[tuple[Candle, dict[str, Any]]]:
        for i, candle in enumerate(self.candles):
            yield candle, {name: col[i] for name, col in self._columns.items()}
