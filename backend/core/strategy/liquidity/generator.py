"""Liquidity sweep strategies.

liquidity-order-flow (bearish side, bullish mirrors it):
1. Liquidity sweep: within `max_lookahead` candles of a confirmed swing
   high, a candle's high takes out the swing high
2. Market structure shift: the last swing low known at the sweep is
   broken by a close, on lower volume than the sweep candle
3. Entry: price pulls back into a bearish fair value gap formed at or
   after the break; a high beyond the sweep wick first invalidates it

liquidity-grab: a sweep of a confirmed swing followed by a close back
inside the swept level within `confirmation_candles`.

Every step scans forward from an earlier event and only reads candles up
to the entry candle, so appending candles never changes an emitted
marker.
"""

import logging
from bisect import bisect_left

from core.indicators import ema
from core.structure import (
    Bias,
    FairValueGap,
    SwingIndex,
    SwingKind,
    SwingPoint,
    find_break_of_structure,
    find_fair_value_gaps,
    find_swing_highs,
    find_swing_lows,
)
from core.strategy.base import BaseStrategy
from core.strategy.liquidity.models import LiquidityGrabParams, LiquidityOrderFlowParams
from core.strategy.registry import register_strategy

logger = logging.getLogger(__name__)


class _GapBook:
    """Fair value gaps of one kind, searchable by middle index."""

    def __init__(self, gaps: list[FairValueGap]):
        self.gaps = gaps
        self._indices = [g.index for g in gaps]

    def latest_known(self, as_of: int, since: int) -> FairValueGap | None:
        """Most recent gap with since <= index and index + 1 < as_of."""
        pos = bisect_left(self._indices, as_of - 1)
        if pos == 0:
            return None
        gap = self.gaps[pos - 1]
        return gap if gap.index >= since else None


def _beyond(price: float, level: float, kind: SwingKind) -> bool:
    """True if `price` lies past `level` on the far side of a swing of `kind`."""
    return price > level if kind == SwingKind.HIGH else price < level


@register_strategy("liquidity-order-flow")
class LiquidityOrderFlowStrategy(BaseStrategy):
    """Sweep, volume-confirmed structure shift, then fair value gap entry."""

    name = "Liquidity & Order Flow"
    description = (
        "Identifies liquidity sweeps, confirms them with volume, waits for a "
        "market structure shift and enters on a pullback into a fair value gap."
    )
    params_model = LiquidityOrderFlowParams

    def min_candles(self, params: LiquidityOrderFlowParams) -> int:
        return params.ema_trend_period

    def annotate(self, candles, params: LiquidityOrderFlowParams, out, context) -> None:
        out.set_column("ema_long", ema(candles.closes, params.ema_trend_period))
        lookaround = params.swing_lookaround
        if lookaround <= 0 or params.max_lookahead <= 0:
            return

        swing_highs = find_swing_highs(candles.highs, lookaround, candles.times)
        swing_lows = find_swing_lows(candles.lows, lookaround, candles.times)
        gaps = find_fair_value_gaps(candles.highs, candles.lows)
        books = {
            Bias.BEARISH: _GapBook([g for g in gaps if g.kind == Bias.BEARISH]),
            Bias.BULLISH: _GapBook([g for g in gaps if g.kind == Bias.BULLISH]),
        }
        high_index = SwingIndex(swing_highs, lookaround)
        low_index = SwingIndex(swing_lows, lookaround)

        for swing in swing_highs:
            self._run_setup(out, candles, params, swing, low_index, books[Bias.BEARISH])
        for swing in swing_lows:
            self._run_setup(out, candles, params, swing, high_index, books[Bias.BULLISH])

    def _run_setup(
        self,
        out,
        candles,
        params: LiquidityOrderFlowParams,
        swing: SwingPoint,
        opposite_swings: SwingIndex,
        gap_book: _GapBook,
    ) -> None:
        n = len(candles)
        highs, lows, closes, volumes = candles.highs, candles.lows, candles.closes, candles.volumes
        kind = swing.kind
        bearish = kind == SwingKind.HIGH
        wicks = highs if bearish else lows
        horizon = params.max_lookahead

        for j in range(swing.index + 1, min(swing.index + horizon, n)):
            if not _beyond(wicks[j], swing.price, kind):
                continue
            # 1. Sweep at j; the opposite swing must already be known at j
            opposite = opposite_swings.latest(j)
            if opposite is None:
                continue
            sweep_wick = wicks[j]

            # 2. Structure shift on lower volume than the sweep
            direction = Bias.BEARISH if bearish else Bias.BULLISH
            bos = find_break_of_structure(
                closes, opposite.price, direction, j, min(j + horizon, n),
                volumes=volumes, max_volume=volumes[j],
            )
            if bos is None:
                return

            # 3. Pullback into a gap formed at or after the break
            for entry in range(bos + 1, min(bos + horizon, n)):
                gap = gap_book.latest_known(entry, since=bos)
                touch = highs[entry] if bearish else lows[entry]
                if gap is not None and gap.contains(touch):
                    self.emit(out, entry, not bearish)
                    out.stop_loss_level[entry] = sweep_wick
                    out.peak_price[entry] = swing.price
                    logger.debug(
                        "liquidity-order-flow %s entry at %d (swing %d, sweep %d, bos %d)",
                        direction.value, entry, swing.index, j, bos,
                    )
                    return
                if _beyond(touch, sweep_wick, kind):
                    logger.debug(
                        "liquidity-order-flow setup from swing %d invalidated at %d",
                        swing.index, entry,
                    )
                    return
            return


@register_strategy("liquidity-grab")
class LiquidityGrabStrategy(BaseStrategy):
    """Sweep of a confirmed swing, then a quick reclaim of the level."""

    name = "Liquidity Grab"
    description = (
        "Identifies sweeps below support or above resistance, then enters on "
        "a quick reversal, anticipating a trap."
    )
    params_model = LiquidityGrabParams

    def min_candles(self, params: LiquidityGrabParams) -> int:
        return params.swing_lookaround * 2 + params.confirmation_candles

    def annotate(self, candles, params: LiquidityGrabParams, out, context) -> None:
        lookaround = params.swing_lookaround
        if lookaround <= 0:
            return
        swings = find_swing_highs(candles.highs, lookaround, candles.times)
        swings += find_swing_lows(candles.lows, lookaround, candles.times)
        for swing in sorted(swings, key=lambda p: p.index):
            self._run_setup(out, candles, params, swing)

    def _run_setup(self, out, candles, params: LiquidityGrabParams, swing: SwingPoint) -> None:
        n = len(candles)
        bearish = swing.kind == SwingKind.HIGH
        wicks = candles.highs if bearish else candles.lows
        closes = candles.closes
        confirmed = swing.confirmed_index(params.swing_lookaround)

        for j in range(confirmed + 1, min(confirmed + 1 + params.sweep_window, n)):
            if not _beyond(wicks[j], swing.price, swing.kind):
                continue
            for k in range(j + 1, min(j + 1 + params.confirmation_candles, n)):
                reclaimed = closes[k] < swing.price if bearish else closes[k] > swing.price
                if reclaimed:
                    self.emit(out, k, not bearish)
                    out.stop_loss_level[k] = wicks[j]
                    out.peak_price[k] = swing.price
                    return
