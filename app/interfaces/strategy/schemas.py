"""
Pydantic schemas for the AI strategy and automation APIs.

These schemas enforce input validation and define the API contract.
Range checks that carry business meaning (minimum stake, stop-loss
bounds, allowed trading modes) live in the use cases so every caller
gets the same error.
"""

from datetime import datetime

from pydantic import Field

from app.interfaces.schemas import ApiModel
from app.interfaces.trading.schemas import IndicatorsResponse

INSTRUMENT_MAX_LEN = 64
MAX_INSTRUMENTS = 20


class GenerateStrategyRequest(ApiModel):
    """Request schema for strategy generation.

    Attributes:
        total_stake: Session budget.
        instruments: Candidate instruments.
        trading_mode: conservative, balanced or aggressive.
        stop_loss_percentage: Optional stop-loss between 1 and 50.
        strategy_id: Catalog strategy; ``default_dynamic`` when omitted.
        flavor: ``markets`` or ``volatility``.
    """

    total_stake: float
    instruments: list[str] = Field(..., max_length=MAX_INSTRUMENTS)
    trading_mode: str = Field(..., min_length=1, max_length=16)
    stop_loss_percentage: float | None = None
    strategy_id: str | None = Field(default=None, max_length=64)
    flavor: str = Field(default="markets", max_length=16)


class ProposalSchema(ApiModel):
    """One proposed trade, as returned by generation and sent to execution."""

    instrument: str = Field(..., min_length=1, max_length=INSTRUMENT_MAX_LEN)
    action: str = Field(..., pattern=r"^(CALL|PUT)$")
    stake: float = Field(..., ge=0.01)
    duration_seconds: int = Field(..., ge=1)
    reasoning: str = ""


class StrategyResponse(ApiModel):
    trades_to_execute: list[ProposalSchema]
    overall_reasoning: str
    total_stake: float
    strategy_id: str
    latest_prices: dict[str, float]


class StrategyDefinitionResponse(ApiModel):
    id: str
    name: str
    description: str


class StrategyPerformanceResponse(ApiModel):
    strategy_id: str
    strategy_name: str
    total_trades: int
    winning_trades: int
    losing_trades: int
    win_rate: float
    total_pnl: float


class SentimentRequest(ApiModel):
    instrument: str = Field(..., min_length=1, max_length=INSTRUMENT_MAX_LEN)
    trading_mode: str = Field(default="balanced", max_length=16)


class SentimentResponse(ApiModel):
    action: str
    confidence: float
    reasoning: str
    price_trend: str | None
    indicators: IndicatorsResponse | None


class ExecuteStrategyRequest(ApiModel):
    trades_to_execute: list[ProposalSchema] = Field(..., min_length=1, max_length=MAX_INSTRUMENTS)
    strategy_id: str | None = Field(default=None, max_length=64)


class ExecutionResponse(ApiModel):
    success: bool
    instrument: str
    contract_id: int | None = None
    buy_price: float | None = None
    longcode: str | None = None
    trade_id: str | None = None
    error: str | None = None


class StartAutomationRequest(GenerateStrategyRequest):
    account_type: str = Field(default="demo", max_length=8)


class SimulatedTradeResponse(ApiModel):
    id: str
    instrument: str
    action: str
    stake: float
    duration_seconds: int
    entry_price: float
    stop_loss_price: float
    current_price: float
    status: str
    pnl: float | None
    started_at: datetime
    finished_at: datetime | None
    reasoning: str


class AutomationSessionResponse(ApiModel):
    """Point-in-time view of a simulated session."""

    strategy_id: str
    overall_reasoning: str
    started_at: datetime
    is_running: bool
    trades: list[SimulatedTradeResponse]
    total_net_profit: float
    trade_count: int
    winning_trades: int
    losing_trades: int
