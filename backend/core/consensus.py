"""Consensus voting across signal generators and the external predictor gate.

- ConsensusAggregator runs several strategies over the same candles and
  reduces the markers on their last candle to one directional vote.
- PredictorGate consults an injected async Predictor with the strategies'
  last-candle outputs, applying throttling, a confidence threshold and a
  timeout. Any predictor failure degrades to a HOLD signal.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal, Mapping, Protocol, Sequence, runtime_checkable

from pydantic import BaseModel, Field, field_validator

from core.models import Action, AnnotatedSeries, CandleSeries, TradeSignal
from core.signals import hold_signal
from core.strategy import StrategyContext, get_strategy_class

logger = logging.getLogger(__name__)

# Indicator columns forwarded to the predictor when present on the last candle
KNOWN_INDICATORS = (
    "sma_short", "sma_long", "ema_short", "ema_long", "rsi", "stop_loss_level",
    "peak_price", "bb_upper", "bb_middle", "bb_lower", "macd", "macd_signal",
    "macd_hist", "supertrend", "supertrend_direction", "atr", "donchian_upper",
    "donchian_middle", "donchian_lower", "tenkan_sen", "kijun_sen", "senkou_a",
    "senkou_b", "stoch_k", "stoch_d", "keltner_upper", "keltner_middle",
    "keltner_lower", "vwap", "psar", "psar_direction", "momentum",
    "awesome_oscillator", "williams_r", "cci", "ha_close", "pivot_point", "s1",
    "r1", "obv", "cmf", "coppock", "bull_power", "bear_power",
)


class VoteDirection(str, Enum):
    UP = "UP"
    DOWN = "DOWN"


@dataclass(slots=True, frozen=True)
class ConsensusVote:
    """Majority direction of the markers on the last candle."""

    direction: VoteDirection
    price: float
    buy_votes: int
    sell_votes: int


@dataclass(slots=True)
class StrategyOutput:
    """One strategy's view of the last candle."""

    strategy_id: str
    strategy_name: str
    signal: Action
    indicators: dict[str, float] = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Aggregator
# ---------------------------------------------------------------------------
class ConsensusAggregator:
    """Runs N strategies over one series and votes on their last candle.

    Args:
        strategy_ids: Default member strategies for vote()
        params: Optional per-strategy parameter overrides keyed by id
    """

    def __init__(
        self,
        strategy_ids: Sequence[str] = (),
        params: Mapping[str, Mapping[str, Any]] | None = None,
    ):
        self.strategy_ids = list(strategy_ids)
        self.params = dict(params or {})

    def _members(self, strategy_ids: Sequence[str] | None):
        members = []
        for strategy_id in self.strategy_ids if strategy_ids is None else strategy_ids:
            try:
                members.append(get_strategy_class(strategy_id)())
            except KeyError:
                logger.warning("Consensus: strategy '%s' not found, skipping", strategy_id)
        return members

    def _run_one(self, strategy, candles, context) -> AnnotatedSeries:
        return strategy.calculate(candles, self.params.get(strategy.id), context)

    def run(
        self,
        candles: CandleSeries,
        strategy_ids: Sequence[str] | None = None,
        context: StrategyContext | None = None,
    ) -> list[tuple[Any, AnnotatedSeries]]:
        """Calculate every known member; unknown ids are logged and skipped."""
        return [
            (strategy, self._run_one(strategy, candles, context))
            for strategy in self._members(strategy_ids)
        ]

    async def run_async(
        self,
        candles: CandleSeries,
        strategy_ids: Sequence[str] | None = None,
        context: StrategyContext | None = None,
    ) -> list[tuple[Any, AnnotatedSeries]]:
        """Same as run(), with members fanned out to worker threads."""
        members = self._members(strategy_ids)
        results = await asyncio.gather(*(
            asyncio.to_thread(self._run_one, strategy, candles, context)
            for strategy in members
        ))
        return list(zip(members, results))

    @staticmethod
    def tally(results: Sequence[AnnotatedSeries]) -> ConsensusVote | None:
        """
        Reduce the last-candle markers of several results to one vote.

        Buy majority gives UP at the mean buy price, sell majority gives
        DOWN at the mean sell price, a tie (including no markers) gives None.
        """
        buys: list[float] = []
        sells: list[float] = []
        for result in results:
            if len(result) == 0:
                continue
            i = len(result) - 1
            if result.buy_signal[i] is not None:
                buys.append(result.buy_signal[i])
            if result.sell_signal[i] is not None:
                sells.append(result.sell_signal[i])

        if len(buys) > len(sells):
            return ConsensusVote(VoteDirection.UP, sum(buys) / len(buys), len(buys), len(sells))
        if len(sells) > len(buys):
            return ConsensusVote(VoteDirection.DOWN, sum(sells) / len(sells), len(buys), len(sells))
        return None

    def vote(
        self,
        candles: CandleSeries,
        strategy_ids: Sequence[str] | None = None,
        context: StrategyContext | None = None,
    ) -> ConsensusVote | None:
        results = self.run(candles, strategy_ids, context)
        return self.tally([annotated for _, annotated in results])

    async def vote_async(
        self,
        candles: CandleSeries,
        strategy_ids: Sequence[str] | None = None,
        context: StrategyContext | None = None,
    ) -> ConsensusVote | None:
        results = await self.run_async(candles, strategy_ids, context)
        return self.tally([annotated for _, annotated in results])

    @staticmethod
    def last_candle_outputs(results) -> list[StrategyOutput]:
        """Signal plus known indicator values of each member's last candle."""
        outputs = []
        for strategy, annotated in results:
            if len(annotated) == 0:
                continue
            last = annotated.last()
            if last.get("buy_signal") is not None:
                signal = Action.BUY
            elif last.get("sell_signal") is not None:
                signal = Action.SELL
            else:
                signal = Action.HOLD
            indicators = {
                key: last[key] for key in KNOWN_INDICATORS
                if isinstance(last.get(key), (int, float))
            }
            outputs.append(StrategyOutput(strategy.id, strategy.name, signal, indicators))
        return outputs


# ---------------------------------------------------------------------------
# External predictor
# ---------------------------------------------------------------------------
class PredictionRequest(BaseModel):
    """Input handed to the external predictor."""

    asset: str = ""
    interval: str = ""
    current_price: float
    recent_candles: list[dict[str, float]] = Field(default_factory=list)
    strategy_outputs: list[dict[str, Any]] = Field(default_factory=list)
    market_context: str = ""


class Prediction(BaseModel):
    direction: Literal["UP", "DOWN", "NEUTRAL"]
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    reasoning: str = ""

    @field_validator("confidence", mode="before")
    @classmethod
    def _clamp_confidence(cls, value):
        try:
            value = float(value)
        except (TypeError, ValueError):
            return 0.0
        if value != value:  # NaN
            return 0.0
        return min(1.0, max(0.0, value))


@runtime_checkable
class Predictor(Protocol):
    """Probabilistic direction predictor (e.g. a hosted model)."""

    async def predict(self, request: PredictionRequest) -> Prediction:
        ...


class PredictorGate:
    """Policy wrapper around an injected Predictor.

    Args:
        predictor: The external predictor capability
        aggregator: Supplies the member strategies whose outputs are sent
        throttle_every: Consult the predictor at most once per N evaluations
        min_confidence: Emit BUY/SELL only at or above this confidence
        timeout: Seconds to wait for the predictor
        recent_candles: How many trailing candles to include in the request
        strategy_id: Id stamped on the produced signals
    """

    def __init__(
        self,
        predictor: Predictor,
        aggregator: ConsensusAggregator,
        *,
        throttle_every: int = 1,
        min_confidence: float = 0.0,
        timeout: float = 30.0,
        recent_candles: int = 100,
        strategy_id: str = "ai-consensus",
    ):
        self.predictor = predictor
        self.aggregator = aggregator
        self.throttle_every = max(1, int(throttle_every))
        self.min_confidence = min_confidence
        self.timeout = timeout
        self.recent_candles = recent_candles
        self.strategy_id = strategy_id
        self._evaluations = 0

    @property
    def evaluations(self) -> int:
        return self._evaluations

    async def evaluate(
        self,
        candles: CandleSeries,
        asset: str = "",
        interval: str = "",
        context: StrategyContext | None = None,
        market_context: str = "",
    ) -> TradeSignal | None:
        """Produce the current signal, falling back to HOLD on any predictor problem."""
        if len(candles) == 0:
            return None
        last = candles[-1]
        self._evaluations += 1
        if (self._evaluations - 1) % self.throttle_every != 0:
            return hold_signal(last, self.strategy_id, asset, "Predictor throttled")

        results = await self.aggregator.run_async(candles, context=context)
        outputs = self.aggregator.last_candle_outputs(results)
        if not outputs:
            logger.warning("PredictorGate: no member strategies produced output")
            return hold_signal(last, self.strategy_id, asset, "No strategy outputs")

        request = PredictionRequest(
            asset=asset,
            interval=interval,
            current_price=last.close,
            recent_candles=candles.to_records()[-self.recent_candles:],
            strategy_outputs=[
                {
                    "strategy_name": o.strategy_name,
                    "signal": o.signal.value,
                    "indicator_values": o.indicators,
                }
                for o in outputs
            ],
            market_context=market_context or "Market context is neutral.",
        )

        try:
            prediction = await asyncio.wait_for(self.predictor.predict(request), self.timeout)
        except asyncio.TimeoutError:
            logger.warning("PredictorGate: predictor timed out after %.1fs", self.timeout)
            return hold_signal(last, self.strategy_id, asset, "Predictor timed out")
        except Exception as e:
            logger.warning("PredictorGate: predictor failed: %s", e)
            return hold_signal(last, self.strategy_id, asset, f"Predictor failed: {e}")

        if prediction.direction == "NEUTRAL" or prediction.confidence < self.min_confidence:
            return hold_signal(
                last, self.strategy_id, asset,
                prediction.reasoning or f"Confidence {prediction.confidence:.2f} below threshold",
            )

        return TradeSignal(
            action=Action.BUY if prediction.direction == "UP" else Action.SELL,
            entry_price=last.close,
            confidence=prediction.confidence,
            reasoning=prediction.reasoning,
            timestamp=last.time,
            strategy_id=self.strategy_id,
            asset=asset,
        )
