"""
Domain entities for the trading bounded context.

Entities represent core business objects with identity and lifecycle.
They contain no framework imports and no IO operations.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from app.domain.accounts.entities import AccountType, new_id, utcnow


class TradeStatus(Enum):
    """Lifecycle status of a ledger trade.

    Ledger trades move ``open -> closed`` once. Broker settlement and the
    simulated engine may record a more specific final status.
    """

    OPEN = "open"
    CLOSED = "closed"
    WON = "won"
    LOST = "lost"
    SOLD = "sold"
    LOST_STOPLOSS = "lost_stoploss"
    LOST_DURATION = "lost_duration"
    CANCELLED = "cancelled"
    PENDING_SETTLEMENT = "pending_settlement"

    @property
    def is_settled(self) -> bool:
        return self not in (TradeStatus.OPEN, TradeStatus.PENDING_SETTLEMENT)


class ContractType(Enum):
    """Direction of a binary-options contract."""

    CALL = "CALL"
    PUT = "PUT"


class InstrumentType(Enum):
    FOREX = "Forex"
    CRYPTO = "Crypto"
    COMMODITY = "Commodity"
    VOLATILITY = "Volatility"


@dataclass(frozen=True)
class Instrument:
    """A tradable instrument and its price precision."""

    name: str
    label: str
    type: InstrumentType
    decimal_places: int


@dataclass(frozen=True)
class Trade:
    """A row of the per-user trade ledger.

    ``profit`` is the P&L recorded when the ledger closes the trade.
    ``pnl``/``exit_price`` are filled by broker settlement.
    """

    id: str
    user_id: str
    symbol: str
    type: str
    amount: float
    price: float
    total_value: float
    status: TradeStatus = TradeStatus.OPEN
    open_time: datetime = field(default_factory=utcnow)
    close_time: Optional[datetime] = None
    profit: Optional[float] = None
    metadata: dict[str, Any] = field(default_factory=dict)
    account_type: Optional[AccountType] = None
    deriv_account_id: Optional[str] = None
    deriv_contract_id: Optional[int] = None
    ai_strategy_id: Optional[str] = None
    duration_seconds: Optional[int] = None
    stop_loss: Optional[float] = None
    pnl: Optional[float] = None
    exit_price: Optional[float] = None

    @staticmethod
    def open_new(
        user_id: str,
        symbol: str,
        type: str,
        amount: float,
        price: float,
        total_value: float,
        **extra: Any,
    ) -> "Trade":
        """Build a new open trade with a fresh id."""
        return Trade(
            id=new_id(),
            user_id=user_id,
            symbol=symbol,
            type=type,
            amount=amount,
            price=price,
            total_value=total_value,
            **extra,
        )


@dataclass(frozen=True)
class ProfitSummary:
    """Aggregated results of a user's closed trades."""

    user_id: str
    total_trades: int = 0
    winning_trades: int = 0
    losing_trades: int = 0
    total_profit: float = 0.0
    win_rate: float = 0.0
    last_updated: datetime = field(default_factory=utcnow)


@dataclass(frozen=True)
class StrategyPerformance:
    """Closed-trade results grouped by the AI strategy that opened them."""

    strategy_id: str
    strategy_name: str
    total_trades: int
    winning_trades: int
    losing_trades: int
    win_rate: float
    total_pnl: float


@dataclass(frozen=True)
class Candle:
    """One OHLC bar returned by the broker."""

    time: datetime
    open: float
    high: float
    low: float
    close: float
    epoch: int


@dataclass(frozen=True)
class PriceTick:
    """A single price observation fed to the strategy prompt."""

    epoch: int
    price: float
    time: str


@dataclass(frozen=True)
class MacdValue:
    macd: float
    signal: float
    histogram: float


@dataclass(frozen=True)
class BollingerBandsValue:
    upper: float
    middle: float
    lower: float


@dataclass(frozen=True)
class IndicatorSnapshot:
    """Latest value of each indicator; unavailable values are None."""

    rsi: Optional[float] = None
    macd: Optional[MacdValue] = None
    bollinger_bands: Optional[BollingerBandsValue] = None
    ema: Optional[float] = None
    atr: Optional[float] = None

    @property
    def is_empty(self) -> bool:
        return all(
            value is None
            for value in (self.rsi, self.macd, self.bollinger_bands, self.ema, self.atr)
        )


@dataclass(frozen=True)
class MarketStatus:
    instrument: str
    is_open: bool
    message: str


@dataclass(frozen=True)
class BrokerAccount:
    """One entry of the broker's account list."""

    loginid: str
    is_virtual: bool
    currency: Optional[str] = None
    balance: Optional[float] = None

    @property
    def is_demo(self) -> bool:
        return self.is_virtual and self.loginid.startswith("VRTC")

    @property
    def is_real(self) -> bool:
        return not self.is_virtual and self.loginid.startswith("CR")


@dataclass(frozen=True)
class BrokerAuthorization:
    """The broker's reply to an ``authorize`` request."""

    loginid: str
    user_id: Optional[str] = None
    email: Optional[str] = None
    fullname: Optional[str] = None
    balance: Optional[float] = None
    currency: Optional[str] = None
    is_virtual: bool = False
    accounts: tuple[BrokerAccount, ...] = ()

    @property
    def broker_user_id(self) -> str:
        return self.user_id or self.loginid


@dataclass(frozen=True)
class AccountBalance:
    loginid: str
    balance: float
    currency: str


@dataclass(frozen=True)
class ContractOrder:
    """Parameters of a contract purchase sent to the broker."""

    symbol: str
    contract_type: ContractType
    amount: float
    duration: int
    duration_unit: str = "s"
    currency: str = "USD"
    basis: str = "stake"


@dataclass(frozen=True)
class ContractReceipt:
    """The broker's confirmation of a bought contract."""

    contract_id: int
    buy_price: float
    longcode: str
    entry_spot: float
