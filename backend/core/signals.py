"""Current trade signal for the execution layer.

Reads the most recent candle of an annotated series and turns its markers
into a single TradeSignal.
"""

from __future__ import annotations

from core.models import (
    Action,
    AnnotatedSeries,
    Candle,
    STOP_LOSS_LEVEL,
    TAKE_PROFIT_LEVEL,
    TradeSignal,
)


def hold_signal(
    candle: Candle, strategy_id: str, asset: str = "", reasoning: str = ""
) -> TradeSignal:
    """A HOLD signal priced at the candle close."""
    return TradeSignal(
        action=Action.HOLD,
        entry_price=candle.close,
        confidence=0.0,
        reasoning=reasoning or "No signal on the latest candle",
        timestamp=candle.time,
        strategy_id=strategy_id,
        asset=asset,
    )


def build_trade_signal(
    annotated: AnnotatedSeries,
    strategy_id: str,
    asset: str = "",
    stop_loss_pct: float = 2.0,
    take_profit_pct: float = 5.0,
) -> TradeSignal | None:
    """
    Build the current trade signal from the last annotated candle.

    BUY or SELL when the last candle carries a marker (buy wins if both are
    present), otherwise HOLD. Entry is the close. The stop and target come
    from the stop_loss_level / take_profit_level columns when the strategy
    set them, else from the percentages. Deterministic generators report
    confidence 1.0.

    Args:
        annotated: Strategy output
        strategy_id: Id of the strategy that produced it
        asset: Instrument symbol
        stop_loss_pct: Fallback stop distance in percent of entry
        take_profit_pct: Fallback target distance in percent of entry

    Returns:
        TradeSignal, or None for an empty series
    """
    if len(annotated) == 0:
        return None
    i = len(annotated) - 1
    candle = annotated.candles[i]

    if annotated.buy_signal[i] is not None:
        action, side = Action.BUY, 1
    elif annotated.sell_signal[i] is not None:
        action, side = Action.SELL, -1
    else:
        return hold_signal(candle, strategy_id, asset)

    entry = candle.close
    stop = annotated.get(STOP_LOSS_LEVEL, i)
    if stop is None:
        stop = entry * (1 - side * stop_loss_pct / 100)
    target = annotated.get(TAKE_PROFIT_LEVEL, i)
    if target is None:
        target = entry * (1 + side * take_profit_pct / 100)

    return TradeSignal(
        action=action,
        entry_price=entry,
        stop_loss=stop,
        take_profit=target,
        confidence=1.0,
        reasoning=f"{strategy_id} {action.value.lower()} marker on the latest candle",
        timestamp=candle.time,
        strategy_id=strategy_id,
        asset=asset,
    )
