"""
Use cases: Add trades to the ledger.

CreateTradeUseCase records a generic ledger trade
(``total_value = amount * price``). RecordBrokerTradeUseCase records a
binary contract already bought on the broker, where the total value is
the stake.

Input: CreateTradeCommand / RecordBrokerTradeCommand
Output: TradeResult
Side effects: Inserts a trades row.
Failure cases: UnknownTraderError, InvalidTradeError.
"""

import logging

from app.application.trading.dtos import (
    CreateTradeCommand,
    RecordBrokerTradeCommand,
    TradeResult,
)
from app.domain.accounts.entities import AccountType, utcnow
from app.domain.trading.entities import ContractType, Trade, TradeStatus
from app.domain.trading.errors import InvalidTradeError, UnknownTraderError
from app.domain.trading.ports import TradeRepository, UserDirectory

logger = logging.getLogger(__name__)


def _parse_status(value: str | None) -> TradeStatus:
    if not value:
        return TradeStatus.OPEN
    try:
        return TradeStatus(value.lower())
    except ValueError:
        raise InvalidTradeError(f"Unknown trade status: {value}") from None


class CreateTradeUseCase:
    def __init__(self, trades: TradeRepository, users: UserDirectory) -> None:
        self._trades = trades
        self._users = users

    def execute(self, command: CreateTradeCommand) -> TradeResult:
        """Add a trade for an existing user.

        Raises:
            InvalidTradeError: If amount or price is not positive or the
                status is unknown.
            UnknownTraderError: If the user does not exist.
        """
        if command.amount <= 0 or command.price <= 0:
            raise InvalidTradeError("Trade amount and price must be positive")
        status = _parse_status(command.status)

        if not self._users.exists(command.user_id):
            raise UnknownTraderError(command.user_id)

        trade = self._trades.add(
            Trade.open_new(
                user_id=command.user_id,
                symbol=command.symbol,
                type=command.type,
                amount=command.amount,
                price=command.price,
                total_value=command.amount * command.price,
                status=status,
                open_time=command.open_time or utcnow(),
                metadata=dict(command.metadata),
                ai_strategy_id=command.ai_strategy_id,
                deriv_contract_id=command.deriv_contract_id,
                duration_seconds=command.duration_seconds,
                deriv_account_id=command.deriv_account_id,
            )
        )
        logger.info(
            "Created trade %s for user %s: %s %s x%s @ %s",
            trade.id,
            trade.user_id,
            trade.type,
            trade.symbol,
            trade.amount,
            trade.price,
        )
        return TradeResult.from_trade(trade)


class RecordBrokerTradeUseCase:
    def __init__(self, trades: TradeRepository) -> None:
        self._trades = trades

    def execute(self, command: RecordBrokerTradeCommand) -> TradeResult:
        if command.stake_amount <= 0:
            raise InvalidTradeError("Stake amount must be positive.")
        try:
            contract_type = ContractType(command.contract_type)
        except ValueError:
            raise InvalidTradeError("Invalid contractType. Must be CALL or PUT.") from None
        try:
            account_type = AccountType(command.account_type)
        except ValueError:
            raise InvalidTradeError("Invalid accountType. Must be demo or real.") from None

        trade = self._trades.add(
            Trade.open_new(
                user_id=command.user_id,
                symbol=command.symbol,
                type=contract_type.value,
                amount=command.stake_amount,
                price=command.entry_price,
                total_value=command.stake_amount,
                open_time=command.open_time or utcnow(),
                deriv_contract_id=command.deriv_contract_id,
                deriv_account_id=command.deriv_account_id,
                account_type=account_type,
                ai_strategy_id=command.ai_strategy_id,
            )
        )
        logger.info(
            "Recorded broker contract %s as trade %s", command.deriv_contract_id, trade.id
        )
        return TradeResult.from_trade(trade)
