"""Parameter sets for the multi-indicator confluence family."""

from core.models import StrategyParams


class EmaCciMacdParams(StrategyParams):
    ema_period: int = 100
    cci_period: int = 14
    cci_level: float = 100.0
    macd_short_period: int = 12
    macd_long_period: int = 26
    macd_signal_period: int = 9


class SmiMfiParams(StrategyParams):
    supertrend_period: int = 10
    supertrend_multiplier: float = 3.0
    mfi_period: int = 14
    smi_period: int = 5
    smi_ema_period: int = 3
    overbought: float = 40.0
    oversold: float = -40.0
    reverse: bool = False


class SmiMfiSupertrendParams(SmiMfiParams):
    stop_buffer: float = 0.02  # fraction beyond the signal candle's low/high


class SmiMfiScalpParams(SmiMfiParams):
    pass


class VolumeDeltaParams(StrategyParams):
    poc_lookback: int = 200
    delta_lookback: int = 5
    poc_proximity: float = 0.005  # fraction of the POC price
