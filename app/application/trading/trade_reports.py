"""
Use cases: Read-only views of a user's ledger.

Input: user id
Output: list[TradeResult] / ProfitSummaryResult /
    list[StrategyPerformanceResult]
Side effects: None.
"""

import logging

from app.application.trading.dtos import (
    ProfitSummaryResult,
    StrategyPerformanceResult,
    TradeResult,
)
from app.domain.strategy.catalog import strategy_names
from app.domain.trading import ledger
from app.domain.trading.ports import ProfitSummaryRepository, TradeRepository

logger = logging.getLogger(__name__)


class GetTradeHistoryUseCase:
    def __init__(self, trades: TradeRepository) -> None:
        self._trades = trades

    def execute(self, user_id: str) -> list[TradeResult]:
        return [TradeResult.from_trade(trade) for trade in self._trades.list_for_user(user_id)]


class GetProfitSummaryUseCase:
    """Return the stored summary, or an all-zero one for new users."""

    def __init__(self, summaries: ProfitSummaryRepository) -> None:
        self._summaries = summaries

    def execute(self, user_id: str) -> ProfitSummaryResult:
        summary = self._summaries.get(user_id)
        if summary is None:
            return ProfitSummaryResult(
                total_trades=0,
                winning_trades=0,
                losing_trades=0,
                total_profit=0.0,
                win_rate=0.0,
                last_updated=None,
            )
        return ProfitSummaryResult.from_summary(summary)


class GetStrategyPerformanceUseCase:
    def __init__(self, trades: TradeRepository) -> None:
        self._trades = trades

    def execute(self, user_id: str) -> list[StrategyPerformanceResult]:
        closed = self._trades.list_closed(user_id)
        performance = ledger.strategy_performance(closed, strategy_names())
        logger.debug(
            "Strategy performance for user %s: %d strategies over %d closed trades",
            user_id,
            len(performance),
            len(closed),
        )
        return [StrategyPerformanceResult.from_performance(item) for item in performance]
