"""Peak Formation Fib configuration."""

from core.models import StrategyParams


class PeakFormationFibParams(StrategyParams):
    """Parameters for the peak / break-of-structure / retracement setup."""

    peak_lookaround: int = 5
    swing_lookaround: int = 3
    ema_short_period: int = 13
    ema_long_period: int = 50
    fib_level1: float = 0.5
    fib_level2: float = 0.618
    # Candles a setup stays valid after its break of structure
    signal_staleness: int = 25
    reverse: bool = False

    # Stop offsets beyond the peak (short) / trough (long)
    stop_buffer: float = 0.001
