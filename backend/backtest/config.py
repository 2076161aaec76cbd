"""Backtest configuration.

BacktestConfig holds the parameters of one simulation run. BacktestSettings
loads CLI defaults from the environment (prefix BACKTEST_) and `.env`.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from backtest.discipline import DisciplineConfig, FailureMode


class BacktestConfig(BaseModel):
    """Parameters of a single backtest run."""

    model_config = ConfigDict(frozen=True)

    initial_capital: float = Field(default=1000.0, gt=0)
    leverage: float = Field(default=1.0, gt=0)
    take_profit_pct: float = Field(default=5.0, ge=0)
    stop_loss_pct: float = Field(default=2.0, ge=0)
    fee_pct: float = Field(default=0.0, ge=0)
    # When set, a candle's stop_loss_level column replaces the percentage stop
    use_signal_stops: bool = False
    discipline: DisciplineConfig = DisciplineConfig()


class BacktestSettings(BaseSettings):
    """Backtest defaults loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="BACKTEST_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    initial_capital: float = 1000.0
    leverage: float = 1.0
    take_profit_pct: float = 5.0
    stop_loss_pct: float = 2.0
    fee_pct: float = 0.0
    use_signal_stops: bool = False

    # Discipline guard
    discipline_enabled: bool = False
    max_consecutive_losses: int = 4
    cooldown_minutes: float = 15.0
    daily_drawdown_limit: float = 10.0
    on_failure: FailureMode = FailureMode.COOLDOWN

    def discipline_config(self, enabled: bool | None = None) -> DisciplineConfig:
        return DisciplineConfig(
            enabled=self.discipline_enabled if enabled is None else enabled,
            max_consecutive_losses=self.max_consecutive_losses,
            cooldown_minutes=self.cooldown_minutes,
            daily_drawdown_limit=self.daily_drawdown_limit,
            on_failure=self.on_failure,
        )

    def to_config(self, discipline_enabled: bool | None = None, **overrides) -> BacktestConfig:
        """Build a BacktestConfig from these defaults plus non-None overrides."""
        values = self.model_dump(
            include={
                "initial_capital", "leverage", "take_profit_pct",
                "stop_loss_pct", "fee_pct", "use_signal_stops",
            }
        )
        values["discipline"] = self.discipline_config(discipline_enabled)
        values.update({k: v for k, v in overrides.items() if v is not None})
        return BacktestConfig(**values)


_settings: BacktestSettings | None = None


def get_backtest_settings() -> BacktestSettings:
    """Get cached backtest settings instance."""
    global _settings
    if _settings is None:
        _settings = BacktestSettings()
    return _settings
