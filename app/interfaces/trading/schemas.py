"""
Pydantic schemas for trading API request/response validation.

These schemas enforce input validation and define the API contract.
No business logic belongs here.
"""

from datetime import datetime
from typing import Any

from pydantic import Field

from app.interfaces.schemas import ApiModel

SYMBOL_MAX_LEN = 64


class CreateTradeRequest(ApiModel):
    """Request schema for adding a trade to the ledger.

    Attributes:
        user_id: Owner of the trade.
        symbol: Instrument name.
        type: Trade side.
        amount: Quantity or stake, positive.
        price: Entry price, positive.
        status: Initial status; ``open`` when omitted.
        metadata: Free-form JSON stored with the trade.
        purchase_time: Purchase time; now when omitted.
    """

    user_id: str = Field(..., min_length=1, max_length=64)
    symbol: str = Field(..., min_length=1, max_length=SYMBOL_MAX_LEN)
    type: str = Field(..., min_length=1, max_length=16)
    amount: float = Field(..., gt=0)
    price: float = Field(..., gt=0)
    status: str | None = Field(default=None, max_length=32)
    metadata: dict[str, Any] = Field(default_factory=dict)
    ai_strategy_id: str | None = Field(default=None, max_length=64)
    deriv_contract_id: int | None = None
    duration_seconds: int | None = Field(default=None, ge=1)
    deriv_account_id: str | None = Field(default=None, max_length=32)
    purchase_time: datetime | None = None


class RecordBrokerTradeRequest(ApiModel):
    """Request schema for a contract already bought on the broker."""

    symbol: str = Field(..., min_length=1, max_length=SYMBOL_MAX_LEN)
    contract_type: str = Field(..., min_length=1, max_length=8)
    stake_amount: float = Field(..., gt=0)
    entry_price: float
    deriv_contract_id: int
    deriv_account_id: str = Field(..., min_length=1, max_length=32)
    account_type: str = Field(..., min_length=1, max_length=8)
    ai_strategy_id: str | None = Field(default=None, max_length=64)
    purchase_time: datetime | None = None


class CloseTradeRequest(ApiModel):
    """Request schema for closing an open trade.

    Either ``exit_price`` or a numeric ``metadata.pnl`` is required.
    """

    exit_price: float | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class SettleBrokerTradeRequest(ApiModel):
    deriv_contract_id: int
    final_status: str = Field(..., min_length=1, max_length=32)
    pnl: float
    exit_price: float | None = None
    sell_time: datetime | None = None


class TradeResponse(ApiModel):
    """A ledger trade."""

    id: str
    user_id: str
    symbol: str
    type: str
    amount: float
    price: float
    total_value: float
    status: str
    open_time: datetime
    close_time: datetime | None
    profit: float | None
    metadata: dict[str, Any]
    account_type: str | None
    deriv_account_id: str | None
    deriv_contract_id: int | None
    ai_strategy_id: str | None
    duration_seconds: int | None
    pnl: float | None
    exit_price: float | None


class ProfitSummaryResponse(ApiModel):
    total_trades: int
    winning_trades: int
    losing_trades: int
    total_profit: float
    win_rate: float
    last_updated: datetime | None


class InstrumentResponse(ApiModel):
    name: str
    label: str
    type: str
    decimal_places: int


class MarketStatusResponse(ApiModel):
    instrument: str
    is_open: bool
    message: str


class CandleResponse(ApiModel):
    time: datetime
    epoch: int
    open: float
    high: float
    low: float
    close: float


class MacdResponse(ApiModel):
    macd: float
    signal: float
    histogram: float


class BollingerBandsResponse(ApiModel):
    upper: float
    middle: float
    lower: float


class IndicatorsResponse(ApiModel):
    """Latest indicator values; unavailable ones are omitted."""

    rsi: float | None = None
    macd: MacdResponse | None = None
    bollinger_bands: BollingerBandsResponse | None = None
    ema: float | None = None
    atr: float | None = None
