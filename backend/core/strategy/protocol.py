"""Strategy protocol defining the interface all signal generators implement.

This module provides:
- StrategyContext: Optional side inputs for a calculation (higher-timeframe data)
- Strategy: Runtime-checkable Protocol that strategies must satisfy
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Protocol, runtime_checkable

from core.models import AnnotatedSeries, CandleSeries, StrategyParams


# ---------------------------------------------------------------------------
# StrategyContext: side inputs supplied by the caller
# ---------------------------------------------------------------------------
@dataclass(slots=True)
class StrategyContext:
    """Side inputs for a single calculation.

    Attributes:
        higher_timeframe: Independently fetched higher-timeframe candles,
            used by multi-timeframe strategies.
        htf_interval: Interval of `higher_timeframe` (e.g. '4h', '1d').
        symbol: Instrument the candles belong to.
    """

    higher_timeframe: CandleSeries | None = None
    htf_interval: str | None = None
    symbol: str | None = None


ParamsInput = StrategyParams | Mapping[str, Any] | None


# ---------------------------------------------------------------------------
# Strategy Protocol
# ---------------------------------------------------------------------------
@runtime_checkable
class Strategy(Protocol):
    """Protocol that all signal generators must implement.

    A strategy is a pure function of its inputs: it reads an immutable
    candle series and a parameter set and returns a freshly allocated
    AnnotatedSeries. It holds no state between calls.
    """

    id: str
    name: str
    description: str
    params_model: type[StrategyParams]

    def calculate(
        self,
        candles: CandleSeries,
        params: ParamsInput = None,
        context: StrategyContext | None = None,
    ) -> AnnotatedSeries:
        """Annotate candles with indicator columns and buy/sell markers.

        Args:
            candles: Immutable input series.
            params: Parameter overrides (mapping or params model).
            context: Optional side inputs.

        Returns:
            AnnotatedSeries aligned with `candles`. Too-short input returns
            the series without markers rather than raising.
        """
        ...
