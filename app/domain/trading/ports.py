"""
Port interfaces (ABCs) for the trading bounded context.

Ports define the contracts that the domain requires from the outside world.
Infrastructure adapters implement these interfaces.
The domain layer never depends on concrete implementations.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional, Sequence

from app.domain.trading.entities import (
    AccountBalance,
    BrokerAccount,
    BrokerAuthorization,
    Candle,
    ContractOrder,
    ContractReceipt,
    IndicatorSnapshot,
    ProfitSummary,
    Trade,
)


class TradeRepository(ABC):
    """Port for the per-user trade ledger."""

    @abstractmethod
    def add(self, trade: Trade) -> Trade:
        raise NotImplementedError

    @abstractmethod
    def get(self, trade_id: str) -> Optional[Trade]:
        raise NotImplementedError

    @abstractmethod
    def get_by_contract_id(self, contract_id: int) -> Optional[Trade]:
        raise NotImplementedError

    @abstractmethod
    def update(self, trade: Trade) -> Trade:
        """Overwrite the mutable fields of an existing trade."""
        raise NotImplementedError

    @abstractmethod
    def list_for_user(self, user_id: str) -> list[Trade]:
        """Return all trades of a user ordered by open time descending."""
        raise NotImplementedError

    @abstractmethod
    def list_closed(
        self, user_id: str, since: Optional[datetime] = None
    ) -> list[Trade]:
        """Return a user's ``closed`` trades ordered by close time descending.

        Args:
            user_id: Owner of the trades.
            since: Only trades closed at or after this instant.
        """
        raise NotImplementedError


class ProfitSummaryRepository(ABC):
    """Port for the per-user profit summary row."""

    @abstractmethod
    def get(self, user_id: str) -> Optional[ProfitSummary]:
        raise NotImplementedError

    @abstractmethod
    def upsert(self, summary: ProfitSummary) -> None:
        raise NotImplementedError


class UserDirectory(ABC):
    """Port answering whether a trade owner exists."""

    @abstractmethod
    def exists(self, user_id: str) -> bool:
        raise NotImplementedError


class BrokerGateway(ABC):
    """Port for the broker's (Deriv) request/response API.

    Every call is a single-shot exchange with a fixed timeout and no
    retry. Implementations raise ``BrokerTimeoutError`` on timeout and
    ``BrokerError`` (or ``BrokerAuthorizationError``) on error replies.
    """

    @abstractmethod
    def authorize(self, token: str) -> BrokerAuthorization:
        raise NotImplementedError

    @abstractmethod
    def get_account_list(self, token: str) -> list[BrokerAccount]:
        raise NotImplementedError

    @abstractmethod
    def get_account_settings(self, token: str) -> dict:
        raise NotImplementedError

    @abstractmethod
    def get_balance(self, token: str, account_id: str) -> AccountBalance:
        raise NotImplementedError

    @abstractmethod
    def get_candles(
        self, instrument: str, count: int = 120, granularity: int = 60
    ) -> list[Candle]:
        raise NotImplementedError

    @abstractmethod
    def place_trade(self, token: str, order: ContractOrder) -> ContractReceipt:
        """Authorize, request a proposal and buy it.

        Args:
            token: Broker API token of the target account.
            order: The contract to buy.

        Returns:
            The broker's purchase receipt, with the proposal's entry spot.
        """
        raise NotImplementedError


class IndicatorCalculator(ABC):
    """Port for technical indicator computation over a price series."""

    @abstractmethod
    def snapshot(
        self,
        closes: Sequence[float],
        highs: Optional[Sequence[float]] = None,
        lows: Optional[Sequence[float]] = None,
    ) -> IndicatorSnapshot:
        """Return the latest RSI, MACD, Bollinger Bands, EMA and ATR."""
        raise NotImplementedError
