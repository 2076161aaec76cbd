"""Trend-following strategy family (auto-registers on import)."""

from core.strategy.trend.generator import (
    DonchianChannelsStrategy,
    HeikinAshiTrendStrategy,
    IchimokuCloudStrategy,
    KeltnerChannelsStrategy,
    ParabolicSarFlipStrategy,
    SupertrendStrategy,
)

__all__ = [
    "DonchianChannelsStrategy",
    "HeikinAshiTrendStrategy",
    "IchimokuCloudStrategy",
    "KeltnerChannelsStrategy",
    "ParabolicSarFlipStrategy",
    "SupertrendStrategy",
]
