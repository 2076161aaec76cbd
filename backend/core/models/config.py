"""Strategy parameter set models."""

from __future__ import annotations

import math
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, field_validator


def coerce_number(value: Any) -> float:
    """Coerce a parameter value to a finite float; anything else becomes 0."""
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return 0.0
    else:
        try:
            number = float(value)
        except (TypeError, ValueError):
            return 0.0
    return number if math.isfinite(number) else 0.0


def coerce_flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(coerce_number(value))


class StrategyParams(BaseModel):
    """Base class for per-strategy parameter sets.

    Every field has a documented default and any subset may be overridden
    from a flat mapping. Invalid or NaN numeric values are coerced to 0
    instead of being rejected; unknown keys are ignored.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    @field_validator("*", mode="before")
    @classmethod
    def _coerce_field(cls, value: Any, info):
        annotation = cls.model_fields[info.field_name].annotation
        if annotation is bool:
            return coerce_flag(value)
        if annotation is int:
            return int(coerce_number(value))
        if annotation is float:
            return coerce_number(value)
        return value

    @classmethod
    def resolve(cls, params: StrategyParams | Mapping[str, Any] | None = None):
        """Build a parameter set from defaults plus any overrides."""
        if params is None:
            return cls()
        if isinstance(params, cls):
            return params
        if isinstance(params, StrategyParams):
            params = params.model_dump()
        return cls.model_validate(dict(params))
