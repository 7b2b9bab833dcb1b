"""
Use cases: Broker settings and balances.

Input: user id / SelectAccountTypeCommand / AccountBalanceQuery
Output: SettingsResult / AccountBalance
Side effects: SelectAccountTypeUseCase updates user_settings and, when
    the broker answers, the cached balance of the selected account.
Failure cases: SettingsNotFoundError, InvalidAccountTypeError,
    BrokerTokenMissingError, broker errors (balance query only).
"""

import logging
from dataclasses import replace

from app.application.accounts.dtos import (
    AccountBalanceQuery,
    SelectAccountTypeCommand,
    SettingsResult,
)
from app.domain.accounts.entities import AccountType, utcnow
from app.domain.accounts.errors import (
    BrokerTokenMissingError,
    InvalidAccountTypeError,
    SettingsNotFoundError,
)
from app.domain.accounts.ports import UserSettingsRepository
from app.domain.trading.entities import AccountBalance
from app.domain.trading.errors import BrokerError
from app.domain.trading.ports import BrokerGateway

logger = logging.getLogger(__name__)


class GetSettingsUseCase:
    def __init__(self, settings: UserSettingsRepository) -> None:
        self._settings = settings

    def execute(self, user_id: str) -> SettingsResult:
        current = self._settings.get(user_id)
        if current is None:
            raise SettingsNotFoundError(user_id)
        return SettingsResult.from_settings(current)


class SelectAccountTypeUseCase:
    """Switch between the demo and real account and refresh its balance.

    The balance refresh is best effort: a broker failure is logged and
    the account type is switched anyway.
    """

    def __init__(self, settings: UserSettingsRepository, broker: BrokerGateway) -> None:
        self._settings = settings
        self._broker = broker

    def execute(self, command: SelectAccountTypeCommand) -> SettingsResult:
        try:
            account_type = AccountType(command.account_type)
        except ValueError:
            raise InvalidAccountTypeError(command.account_type) from None

        current = self._settings.get(command.user_id)
        if current is None:
            raise SettingsNotFoundError(command.user_id)
        if not current.deriv_api_token:
            raise BrokerTokenMissingError(command.user_id)

        updated = replace(current, selected_deriv_account_type=account_type)
        account_id = current.account_id_for(account_type)
        if account_id:
            try:
                balance = self._broker.get_balance(current.deriv_api_token, account_id)
            except BrokerError as e:
                logger.error(
                    "Balance refresh failed for user %s account %s: %s",
                    command.user_id,
                    account_id,
                    e.message,
                )
            else:
                field = (
                    "deriv_demo_balance" if account_type is AccountType.DEMO else "deriv_real_balance"
                )
                updated = replace(updated, **{field: balance.balance, "last_balance_sync": utcnow()})
        else:
            logger.warning(
                "No %s account linked for user %s; balance not refreshed",
                account_type.value,
                command.user_id,
            )

        return SettingsResult.from_settings(self._settings.save(updated))


class GetAccountBalanceUseCase:
    def __init__(self, settings: UserSettingsRepository, broker: BrokerGateway) -> None:
        self._settings = settings
        self._broker = broker

    def execute(self, query: AccountBalanceQuery) -> AccountBalance:
        current = self._settings.get(query.user_id)
        if current is None or not current.deriv_api_token:
            raise BrokerTokenMissingError(query.user_id)
        if query.account_id not in (
            current.deriv_demo_account_id,
            current.deriv_real_account_id,
        ):
            logger.warning(
                "User %s requested balance of unlinked account %s",
                query.user_id,
                query.account_id,
            )
        return self._broker.get_balance(current.deriv_api_token, query.account_id)
