"""Wiring for the external predictor gate from application settings."""

from app.config import Settings, get_settings
from core.consensus import ConsensusAggregator, Predictor, PredictorGate


def build_predictor_gate(predictor: Predictor, settings: Settings | None = None) -> PredictorGate:
    """Create a PredictorGate using the configured members and policy knobs."""
    settings = settings or get_settings()
    return PredictorGate(
        predictor,
        ConsensusAggregator(settings.consensus_strategies),
        throttle_every=settings.predictor_throttle_every,
        min_confidence=settings.predictor_min_confidence,
        timeout=settings.predictor_timeout,
    )
