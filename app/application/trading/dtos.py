"""
Data Transfer Objects for the trading application layer.

DTOs carry data between the interface and application layers.
They are plain dataclasses with no behavior.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from app.domain.trading.entities import ProfitSummary, StrategyPerformance, Trade


@dataclass(frozen=True)
class CreateTradeCommand:
    """Input DTO for adding a trade to the ledger.

    Attributes:
        user_id: Owner of the trade; must exist.
        symbol: Instrument name.
        type: Trade side (``buy``/``sell`` or ``CALL``/``PUT``).
        amount: Quantity or stake.
        price: Entry price.
        status: Initial status, ``open`` when omitted.
        metadata: Free-form JSON stored with the trade.
        open_time: Purchase time, now when omitted.
    """

    user_id: str
    symbol: str
    type: str
    amount: float
    price: float
    status: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)
    ai_strategy_id: Optional[str] = None
    deriv_contract_id: Optional[int] = None
    duration_seconds: Optional[int] = None
    deriv_account_id: Optional[str] = None
    open_time: Optional[datetime] = None


@dataclass(frozen=True)
class RecordBrokerTradeCommand:
    """Input DTO for a contract already bought on the broker."""

    user_id: str
    symbol: str
    contract_type: str
    stake_amount: float
    entry_price: float
    deriv_contract_id: int
    deriv_account_id: str
    account_type: str
    ai_strategy_id: Optional[str] = None
    open_time: Optional[datetime] = None


@dataclass(frozen=True)
class CloseTradeCommand:
    """Input DTO for closing an open ledger trade.

    Attributes:
        trade_id: Trade to close.
        exit_price: Price the trade closed at.
        metadata: Merged into the stored metadata; a numeric ``pnl``
            key takes precedence over ``exit_price``.
    """

    trade_id: str
    exit_price: Optional[float] = None
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class SettleBrokerTradeCommand:
    deriv_contract_id: int
    final_status: str
    pnl: float
    exit_price: Optional[float] = None
    sell_time: Optional[datetime] = None


@dataclass(frozen=True)
class TradeResult:
    """Output DTO for a ledger trade."""

    id: str
    user_id: str
    symbol: str
    type: str
    amount: float
    price: float
    total_value: float
    status: str
    open_time: datetime
    close_time: Optional[datetime]
    profit: Optional[float]
    metadata: dict[str, Any]
    account_type: Optional[str]
    deriv_account_id: Optional[str]
    deriv_contract_id: Optional[int]
    ai_strategy_id: Optional[str]
    duration_seconds: Optional[int]
    pnl: Optional[float]
    exit_price: Optional[float]

    @staticmethod
    def from_trade(trade: Trade) -> "TradeResult":
        return TradeResult(
            id=trade.id,
            user_id=trade.user_id,
            symbol=trade.symbol,
            type=trade.type,
            amount=trade.amount,
            price=trade.price,
            total_value=trade.total_value,
            status=trade.status.value,
            open_time=trade.open_time,
            close_time=trade.close_time,
            profit=trade.profit,
            metadata=dict(trade.metadata),
            account_type=trade.account_type.value if trade.account_type else None,
            deriv_account_id=trade.deriv_account_id,
            deriv_contract_id=trade.deriv_contract_id,
            ai_strategy_id=trade.ai_strategy_id,
            duration_seconds=trade.duration_seconds,
            pnl=trade.pnl,
            exit_price=trade.exit_price,
        )


@dataclass(frozen=True)
class ProfitSummaryResult:
    total_trades: int
    winning_trades: int
    losing_trades: int
    total_profit: float
    win_rate: float
    last_updated: Optional[datetime]

    @staticmethod
    def from_summary(summary: ProfitSummary) -> "ProfitSummaryResult":
        return ProfitSummaryResult(
            total_trades=summary.total_trades,
            winning_trades=summary.winning_trades,
            losing_trades=summary.losing_trades,
            total_profit=summary.total_profit,
            win_rate=summary.win_rate,
            last_updated=summary.last_updated,
        )


@dataclass(frozen=True)
class StrategyPerformanceResult:
    strategy_id: str
    strategy_name: str
    total_trades: int
    winning_trades: int
    losing_trades: int
    win_rate: float
    total_pnl: float

    @staticmethod
    def from_performance(item: StrategyPerformance) -> "StrategyPerformanceResult":
        return StrategyPerformanceResult(
            strategy_id=item.strategy_id,
            strategy_name=item.strategy_name,
            total_trades=item.total_trades,
            winning_trades=item.winning_trades,
            losing_trades=item.losing_trades,
            win_rate=item.win_rate,
            total_pnl=item.total_pnl,
        )


@dataclass(frozen=True)
class ExecutionResult:
    """Outcome of placing one proposal on the broker.

    Attributes:
        success: True if the contract was bought and recorded.
        instrument: Proposal instrument.
        contract_id: Broker contract id on success.
        buy_price: Price paid on success.
        trade_id: Ledger trade id on success.
        error: Failure reason otherwise.
    """

    success: bool
    instrument: str
    contract_id: Optional[int] = None
    buy_price: Optional[float] = None
    longcode: Optional[str] = None
    trade_id: Optional[str] = None
    error: Optional[str] = None
