"""
Use case: Settle a broker contract.

Input: SettleBrokerTradeCommand (contract id, final status, pnl,
    exit price?, sell time?)
Output: TradeResult
Side effects: Updates the trades row matching the contract id.
Failure cases: InvalidTradeError, TradeNotFoundError.
"""

import logging
from dataclasses import replace
from datetime import datetime
from typing import Callable

from app.application.trading.dtos import SettleBrokerTradeCommand, TradeResult
from app.domain.accounts.entities import utcnow
from app.domain.trading.entities import TradeStatus
from app.domain.trading.errors import InvalidTradeError, TradeNotFoundError
from app.domain.trading.ports import TradeRepository

logger = logging.getLogger(__name__)


class SettleBrokerTradeUseCase:
    """Record the broker's final result for a contract.

    Settling twice is allowed: the second result overwrites the first
    and a warning is logged.
    """

    def __init__(
        self, trades: TradeRepository, clock: Callable[[], datetime] = utcnow
    ) -> None:
        self._trades = trades
        self._clock = clock

    def execute(self, command: SettleBrokerTradeCommand) -> TradeResult:
        try:
            final_status = TradeStatus(command.final_status.lower())
        except ValueError:
            raise InvalidTradeError(f"Unknown final status: {command.final_status}") from None

        trade = self._trades.get_by_contract_id(command.deriv_contract_id)
        if trade is None:
            raise TradeNotFoundError(f"contract {command.deriv_contract_id}")

        if trade.status.is_settled:
            logger.warning(
                "Trade %s (contract %s) already settled as %s; overwriting with %s",
                trade.id,
                command.deriv_contract_id,
                trade.status.value,
                final_status.value,
            )

        settled = self._trades.update(
            replace(
                trade,
                status=final_status,
                pnl=command.pnl,
                exit_price=command.exit_price if command.exit_price is not None else trade.exit_price,
                close_time=command.sell_time or self._clock(),
            )
        )
        logger.info(
            "Settled contract %s as %s with pnl %.2f",
            command.deriv_contract_id,
            final_status.value,
            command.pnl,
        )
        return TradeResult.from_trade(settled)
