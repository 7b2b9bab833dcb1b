"""
Use case: Execute a generated strategy on the broker.

Each proposal is bought on the user's selected broker account and
recorded as an open ledger trade. Failures are reported per proposal;
one failed purchase never stops the others.

Input: ExecuteStrategyCommand (user id, proposals, strategy id)
Output: list[ExecutionResult]
Side effects: Broker purchases; inserts trades rows.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from app.application.trading.dtos import ExecutionResult
from app.domain.accounts.entities import AccountType, utcnow
from app.domain.accounts.ports import UserSettingsRepository
from app.domain.strategy.entities import TradeProposal
from app.domain.trading.entities import ContractOrder, Trade
from app.domain.trading.errors import TradingDomainError
from app.domain.trading.instruments import to_broker_symbol
from app.domain.trading.ports import BrokerGateway, TradeRepository

logger = logging.getLogger(__name__)

MISSING_TOKEN = "Deriv API token is missing. Cannot execute trades."
MISSING_ACCOUNT = "Target Deriv Account ID is missing. Cannot execute trades."
UNRECORDED_CONTRACT = "Contract was bought but could not be saved to the trade history."


@dataclass(frozen=True)
class ExecuteStrategyCommand:
    user_id: str
    proposals: tuple[TradeProposal, ...]
    strategy_id: Optional[str] = None


class ExecuteStrategyUseCase:
    def __init__(
        self,
        broker: BrokerGateway,
        trades: TradeRepository,
        settings: UserSettingsRepository,
    ) -> None:
        self._broker = broker
        self._trades = trades
        self._settings = settings

    def _fail_all(self, command: ExecuteStrategyCommand, error: str) -> list[ExecutionResult]:
        logger.error("Cannot execute strategy for user %s: %s", command.user_id, error)
        return [
            ExecutionResult(success=False, instrument=p.instrument, error=error)
            for p in command.proposals
        ]

    def execute(self, command: ExecuteStrategyCommand) -> list[ExecutionResult]:
        settings = self._settings.get(command.user_id)
        if settings is None or not settings.deriv_api_token:
            return self._fail_all(command, MISSING_TOKEN)
        account_type = settings.selected_deriv_account_type
        account_id = settings.account_id_for(account_type)
        if not account_id:
            return self._fail_all(command, MISSING_ACCOUNT)

        return [
            self._execute_one(command, proposal, settings.deriv_api_token, account_id, account_type)
            for proposal in command.proposals
        ]

    def _execute_one(
        self,
        command: ExecuteStrategyCommand,
        proposal: TradeProposal,
        token: str,
        account_id: str,
        account_type: AccountType,
    ) -> ExecutionResult:
        try:
            receipt = self._broker.place_trade(
                token,
                ContractOrder(
                    symbol=to_broker_symbol(proposal.instrument),
                    contract_type=proposal.action,
                    amount=proposal.stake,
                    duration=proposal.duration_seconds,
                ),
            )
        except TradingDomainError as e:
            logger.error("Failed to place trade for %s: %s", proposal.instrument, e.message)
            return ExecutionResult(success=False, instrument=proposal.instrument, error=e.message)
        except Exception as e:
            logger.exception("Unexpected error placing trade for %s", proposal.instrument)
            return ExecutionResult(
                success=False, instrument=proposal.instrument, error=f"Unexpected error: {e}"
            )

        try:
            trade = self._trades.add(
                Trade.open_new(
                    user_id=command.user_id,
                    symbol=proposal.instrument,
                    type=proposal.action.value,
                    amount=proposal.stake,
                    price=receipt.entry_spot,
                    total_value=proposal.stake,
                    open_time=utcnow(),
                    deriv_contract_id=receipt.contract_id,
                    deriv_account_id=account_id,
                    account_type=account_type,
                    ai_strategy_id=command.strategy_id,
                    duration_seconds=proposal.duration_seconds,
                    metadata={
                        "reasoning": proposal.reasoning,
                        "derivLongcode": receipt.longcode,
                    },
                )
            )
        except Exception:
            logger.exception(
                "Contract %s for %s was bought but could not be recorded",
                receipt.contract_id,
                proposal.instrument,
            )
            return ExecutionResult(
                success=False,
                instrument=proposal.instrument,
                contract_id=receipt.contract_id,
                buy_price=receipt.buy_price,
                longcode=receipt.longcode,
                error=UNRECORDED_CONTRACT,
            )

        logger.info(
            "Placed contract %s for %s on %s (trade %s)",
            receipt.contract_id,
            proposal.instrument,
            account_id,
            trade.id,
        )
        return ExecutionResult(
            success=True,
            instrument=proposal.instrument,
            contract_id=receipt.contract_id,
            buy_price=receipt.buy_price,
            longcode=receipt.longcode,
            trade_id=trade.id,
        )
