"""Business services."""

from app.services.live_evaluator import CandleUpdate, LiveEvaluator, Subscription
from app.services.predictor import build_predictor_gate

__all__ = [
    "CandleUpdate",
    "LiveEvaluator",
    "Subscription",
    "build_predictor_gate",
]
