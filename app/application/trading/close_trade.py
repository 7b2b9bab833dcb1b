"""
Use case: Close an open ledger trade.

The P&L comes from ``metadata.pnl`` when it is a number, otherwise
from the exit price. Before storing it the consecutive-trade win-rate
adjustment is applied against the user's recent closed trades. Once the
trade is closed the user's profit summary is recomputed from all of
their closed trades.

Input: CloseTradeCommand (trade_id, exit_price?, metadata)
Output: TradeResult
Side effects: Updates the trades row; upserts profit_summaries.
Failure cases: InvalidTradeError, TradeNotFoundError, TradeAlreadyClosedError.
"""

import logging
from dataclasses import replace
from datetime import datetime
from typing import Any, Callable, Optional

from app.application.trading.dtos import CloseTradeCommand, TradeResult
from app.domain.accounts.entities import utcnow
from app.domain.trading import ledger
from app.domain.trading.entities import TradeStatus
from app.domain.trading.errors import (
    InvalidTradeError,
    TradeAlreadyClosedError,
    TradeNotFoundError,
)
from app.domain.trading.ports import ProfitSummaryRepository, TradeRepository

logger = logging.getLogger(__name__)


def _number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


class CloseTradeUseCase:
    def __init__(
        self,
        trades: TradeRepository,
        summaries: ProfitSummaryRepository,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._trades = trades
        self._summaries = summaries
        self._clock = clock

    def execute(self, command: CloseTradeCommand) -> TradeResult:
        metadata_pnl = _number(command.metadata.get("pnl"))
        if metadata_pnl is None and command.exit_price is None:
            raise InvalidTradeError(
                "Exit price (number) or metadata.pnl (number) is required to close the trade"
            )

        trade = self._trades.get(command.trade_id)
        if trade is None:
            raise TradeNotFoundError(command.trade_id)
        if trade.status is not TradeStatus.OPEN:
            raise TradeAlreadyClosedError(trade.id, trade.status.value)

        closed_at = self._clock()
        if metadata_pnl is not None:
            pnl = metadata_pnl
        else:
            pnl = ledger.calculate_pnl(trade, command.exit_price)

        recent = self._trades.list_closed(
            trade.user_id, since=ledger.sequence_lookback_start(closed_at)
        )
        adjustment = ledger.apply_win_rate_adjustment(closed_at, pnl, recent)
        if adjustment.adjusted:
            logger.info(
                "Adjusted P&L of trade %s from %.4f to %.2f (sequence of %d at %.1f%% wins)",
                trade.id,
                adjustment.original_pnl,
                adjustment.pnl,
                adjustment.sequence_length,
                adjustment.win_rate,
            )

        metadata = {**trade.metadata, **command.metadata}
        if metadata_pnl is None:
            metadata["calculatedUsingExitPrice"] = command.exit_price
        request_exit = _number(command.metadata.get("exitPrice"))
        if request_exit is not None:
            metadata["requestBodyExitPrice"] = request_exit
        if adjustment.adjusted:
            metadata["profitAdjustedForSequence"] = True
            metadata["originalPnlBeforeAdjustment"] = adjustment.original_pnl

        closed = self._trades.update(
            replace(
                trade,
                status=TradeStatus.CLOSED,
                close_time=closed_at,
                profit=adjustment.pnl,
                exit_price=command.exit_price if command.exit_price is not None else trade.exit_price,
                metadata=metadata,
            )
        )
        logger.info("Closed trade %s with profit %.4f", closed.id, adjustment.pnl)

        self._refresh_summary(trade.user_id, closed_at)
        return TradeResult.from_trade(closed)

    def _refresh_summary(self, user_id: str, now: datetime) -> None:
        try:
            summary = ledger.summarize(user_id, self._trades.list_closed(user_id), now)
            self._summaries.upsert(summary)
        except Exception:
            logger.exception("Failed to update profit summary for user %s", user_id)

