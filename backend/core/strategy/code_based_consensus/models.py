"""Code-Based Consensus configuration."""

from typing import Any

from pydantic import Field, field_validator

from core.models import StrategyParams

DEFAULT_MEMBERS = ["ema-crossover", "rsi-divergence", "macd-crossover"]


class CodeBasedConsensusParams(StrategyParams):
    strategies: list[str] = Field(default_factory=lambda: list(DEFAULT_MEMBERS))

    @field_validator("strategies", mode="before")
    @classmethod
    def _parse_members(cls, value: Any) -> list[str]:
        """Accept a list or a comma-separated string; anything else means the defaults."""
        if isinstance(value, str):
            return [s.strip() for s in value.split(",") if s.strip()]
        if isinstance(value, (list, tuple)):
            return [str(s) for s in value if isinstance(s, str) and s]
        return list(DEFAULT_MEMBERS)
