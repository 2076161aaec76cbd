"""Technical indicators (pure math, no I/O)."""

from core.indicators.indicators import (
    sma,
    ema,
    wma,
    rsi,
    atr,
    true_range,
    highest,
    lowest,
    stddev,
    momentum,
    roc,
)
from core.indicators.channels import (
    Bands,
    Ichimoku,
    ParabolicSar,
    PivotPoints,
    Supertrend,
    bollinger_bands,
    donchian_channels,
    ichimoku_cloud,
    keltner_channels,
    parabolic_sar,
    pivot_points,
    supertrend,
    vwap,
)
from core.indicators.oscillators import (
    ElderRay,
    HeikinAshi,
    Macd,
    Stochastic,
    Smi,
    VolumeDelta,
    awesome_oscillator,
    cci,
    chaikin_money_flow,
    coppock_curve,
    elder_ray,
    heikin_ashi,
    macd,
    mfi,
    obv,
    point_of_control,
    smi,
    stochastic,
    volume_delta,
    williams_r,
)

__all__ = [
    "sma",
    "ema",
    "wma",
    "rsi",
    "atr",
    "true_range",
    "highest",
    "lowest",
    "stddev",
    "momentum",
    "roc",
    "Bands",
    "Ichimoku",
    "ParabolicSar",
    "PivotPoints",
    "Supertrend",
    "bollinger_bands",
    "donchian_channels",
    "ichimoku_cloud",
    "keltner_channels",
    "parabolic_sar",
    "pivot_points",
    "supertrend",
    "vwap",
    "ElderRay",
    "HeikinAshi",
    "Macd",
    "Stochastic",
    "Smi",
    "VolumeDelta",
    "awesome_oscillator",
    "cci",
    "chaikin_money_flow",
    "coppock_curve",
    "elder_ray",
    "heikin_ashi",
    "macd",
    "mfi",
    "obv",
    "point_of_control",
    "smi",
    "stochastic",
    "volume_delta",
    "williams_r",
]
