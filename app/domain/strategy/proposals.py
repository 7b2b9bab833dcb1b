"""
Rules applied to generated trade proposals.

The generator is untrusted: proposals with a stake below one cent or a
non-positive duration are dropped, and the total stake is only checked,
since the execution side caps allocations itself.
"""

import logging
from typing import Iterable

from app.domain.strategy.entities import TradeProposal, TradingStrategy

logger = logging.getLogger(__name__)

MIN_STAKE = 0.01
MIN_DURATION_SECONDS = 1
DEFAULT_STOP_LOSS_PERCENT = 5.0
MIN_STOP_LOSS_PERCENT = 1.0
MAX_STOP_LOSS_PERCENT = 50.0
MIN_TOTAL_STAKE = 1.0


def is_valid_proposal(proposal: TradeProposal) -> bool:
    valid = True
    if proposal.stake < MIN_STAKE:
        logger.warning(
            "Dropping proposal for %s: invalid stake %s",
            proposal.instrument,
            proposal.stake,
        )
        valid = False
    if proposal.duration_seconds < MIN_DURATION_SECONDS:
        logger.warning(
            "Dropping proposal for %s: invalid duration %s",
            proposal.instrument,
            proposal.duration_seconds,
        )
        valid = False
    return valid


def sanitize_strategy(strategy: TradingStrategy, total_stake: float) -> TradingStrategy:
    """Drop invalid proposals and warn when the plan overspends."""
    kept = tuple(p for p in strategy.trades if is_valid_proposal(p))
    cleaned = TradingStrategy(trades=kept, overall_reasoning=strategy.overall_reasoning)
    if cleaned.total_stake > total_stake:
        logger.warning(
            "Proposed total stake %.2f exceeds the session limit %.2f",
            cleaned.total_stake,
            total_stake,
        )
    return cleaned


def allocate_within_budget(
    proposals: Iterable[TradeProposal], total_stake: float
) -> list[TradeProposal]:
    """Keep proposals, in order, while their running stake fits the budget."""
    allocated = 0.0
    accepted = []
    for proposal in proposals:
        if allocated + proposal.stake > total_stake:
            logger.info(
                "Skipping %s proposal: stake %.2f exceeds remaining budget",
                proposal.instrument,
                proposal.stake,
            )
            continue
        allocated += proposal.stake
        accepted.append(proposal)
    return accepted
