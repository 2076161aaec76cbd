"""Shared base class and helpers for signal generators."""

from __future__ import annotations

import logging
from typing import Sequence

from core.models import AnnotatedSeries, CandleSeries, StrategyParams
from core.strategy.protocol import ParamsInput, StrategyContext

logger = logging.getLogger(__name__)

Line = Sequence[float | None]


# ---------------------------------------------------------------------------
# Cross detection
# ---------------------------------------------------------------------------
def crossed_above(fast: Line, slow: Line, i: int) -> bool:
    """True if `fast` is above `slow` at i and was not above it at i-1.

    An undefined previous value counts as "not above", so the first bar
    where both lines are defined and fast > slow is a cross.
    """
    a, b = fast[i], slow[i]
    if a is None or b is None or not a > b:
        return False
    if i == 0:
        return True
    pa, pb = fast[i - 1], slow[i - 1]
    return pa is None or pb is None or pa <= pb


def crossed_below(fast: Line, slow: Line, i: int) -> bool:
    """Mirror of crossed_above."""
    a, b = fast[i], slow[i]
    if a is None or b is None or not a < b:
        return False
    if i == 0:
        return True
    pa, pb = fast[i - 1], slow[i - 1]
    return pa is None or pb is None or pa >= pb


def rose_through(line: Line, level: float, i: int) -> bool:
    """line[i-1] <= level < line[i], both values defined."""
    if i == 0 or line[i] is None or line[i - 1] is None:
        return False
    return line[i - 1] <= level < line[i]


def fell_through(line: Line, level: float, i: int) -> bool:
    """line[i-1] >= level > line[i], both values defined."""
    if i == 0 or line[i] is None or line[i - 1] is None:
        return False
    return line[i - 1] >= level > line[i]


# ---------------------------------------------------------------------------
# BaseStrategy
# ---------------------------------------------------------------------------
class BaseStrategy:
    """Template for registered generators.

    Subclasses set `name`, `description`, `params_model` and implement
    `annotate()`; `id` is assigned by @register_strategy. `calculate()`
    resolves parameters, allocates the output buffer and skips annotation
    when the series is shorter than `min_candles()`.
    """

    id: str = ""
    name: str = ""
    description: str = ""
    params_model: type[StrategyParams] = StrategyParams

    def resolve_params(self, params: ParamsInput = None) -> StrategyParams:
        return self.params_model.resolve(params)

    def min_candles(self, params) -> int:
        """Shortest series the generator annotates."""
        return 1

    def calculate(
        self,
        candles: CandleSeries,
        params: ParamsInput = None,
        context: StrategyContext | None = None,
    ) -> AnnotatedSeries:
        resolved = self.resolve_params(params)
        out = AnnotatedSeries(candles)
        required = self.min_candles(resolved)
        if len(candles) < required or required <= 0:
            logger.debug(
                "%s: %d candles, %d required; returning unannotated series",
                self.id, len(candles), required,
            )
            return out
        self.annotate(candles, resolved, out, context)
        return out

    def annotate(
        self,
        candles: CandleSeries,
        params,
        out: AnnotatedSeries,
        context: StrategyContext | None,
    ) -> None:
        raise NotImplementedError

    @staticmethod
    def emit(
        out: AnnotatedSeries,
        i: int,
        bullish: bool,
        reverse: bool = False,
        price: float | None = None,
    ) -> None:
        """Place a marker, swapping buy and sell when `reverse` is set."""
        if bullish != reverse:
            out.mark_buy(i, price)
        else:
            out.mark_sell(i, price)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id!r})"
