"""Application configuration."""

from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="ENGINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = "INFO"

    # Strategy selection
    default_strategy: str = "ema-crossover"
    consensus_strategies: list[str] = ["ema-crossover", "rsi-divergence", "macd-crossover"]

    # Live evaluation
    buffer_size: int = 500  # Closed candles kept per subscription
    htf_fetch_timeout: float = 10.0  # Seconds

    # External predictor policy
    predictor_timeout: float = 30.0  # Seconds
    predictor_throttle_every: int = 1  # Consult once per N evaluations
    predictor_min_confidence: float = 0.0


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
