"""Code-Based Consensus strategy implementation.

Runs every member strategy over the same candles and, per candle, marks a
buy when buy votes outnumber sell votes (and a sell for the opposite).
"""

import logging

from core.strategy.base import BaseStrategy
from core.strategy.code_based_consensus.models import CodeBasedConsensusParams
from core.strategy.registry import get_strategy_class, register_strategy

logger = logging.getLogger(__name__)


@register_strategy("code-based-consensus")
class CodeBasedConsensusStrategy(BaseStrategy):
    name = "Code-Based Consensus"
    description = "Majority vote of several selected technical strategies, without any external predictor."
    params_model = CodeBasedConsensusParams

    def min_candles(self, params: CodeBasedConsensusParams) -> int:
        return 1 if params.strategies else 0

    def annotate(self, candles, params: CodeBasedConsensusParams, out, context) -> None:
        results = []
        for strategy_id in params.strategies:
            if strategy_id == self.id:
                logger.warning("code-based-consensus cannot include itself; skipping")
                continue
            try:
                member = get_strategy_class(strategy_id)()
            except KeyError:
                logger.warning("code-based-consensus: unknown strategy '%s' skipped", strategy_id)
                continue
            results.append(member.calculate(candles, context=context))

        buy_votes = [0] * len(candles)
        sell_votes = [0] * len(candles)
        for result in results:
            for i in result.buy_indices():
                buy_votes[i] += 1
            for i in result.sell_indices():
                sell_votes[i] += 1

        out.set_column("buy_votes", buy_votes)
        out.set_column("sell_votes", sell_votes)
        for i in range(len(candles)):
            if buy_votes[i] > sell_votes[i]:
                out.mark_buy(i)
            elif sell_votes[i] > buy_votes[i]:
                out.mark_sell(i)
