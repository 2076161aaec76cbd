"""MTF Engulfing configuration."""

from typing import Any

from pydantic import field_validator

from core.models import StrategyParams

HTF_INTERVALS = ("1d", "4h", "1h")


class MtfEngulfingParams(StrategyParams):
    htf: str = "1d"
    ema_length: int = 21
    atr_length: int = 14
    sl_atr_multiplier: float = 1.5
    rr_ratio: float = 2.0
    reverse: bool = False
    # Use the previous completed higher-timeframe candle (no intra-bucket lookahead)
    htf_closed_only: bool = False

    @field_validator("htf", mode="before")
    @classmethod
    def _normalize_htf(cls, value: Any) -> str:
        """Accept '1D'/'4H' spellings; anything unsupported falls back to 1d."""
        if isinstance(value, str) and value.strip().lower() in HTF_INTERVALS:
            return value.strip().lower()
        return "1d"
