"""Code-Based Consensus strategy package (auto-registers on import)."""

from core.strategy.code_based_consensus.generator import CodeBasedConsensusStrategy
from core.strategy.code_based_consensus.models import CodeBasedConsensusParams, DEFAULT_MEMBERS

__all__ = [
    "CodeBasedConsensusStrategy",
    "CodeBasedConsensusParams",
    "DEFAULT_MEMBERS",
]
