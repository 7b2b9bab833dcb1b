"""
Domain entities for the strategy bounded context.

Entities represent core business objects with identity and lifecycle.
They contain no framework imports and no IO operations.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from app.domain.trading.entities import ContractType, IndicatorSnapshot, PriceTick


class TradingMode(Enum):
    """Risk appetite the strategy generator is asked to follow."""

    CONSERVATIVE = "conservative"
    BALANCED = "balanced"
    AGGRESSIVE = "aggressive"


class StrategyFlavor(Enum):
    """Which prompt family a strategy is generated with."""

    MARKETS = "markets"
    VOLATILITY = "volatility"


class SentimentAction(Enum):
    CALL = "CALL"
    PUT = "PUT"
    HOLD = "HOLD"


@dataclass(frozen=True)
class StrategyDefinition:
    """A named AI strategy the user can pick."""

    id: str
    name: str
    description: str


@dataclass(frozen=True)
class TradeProposal:
    """One trade suggested by the strategy generator."""

    instrument: str
    action: ContractType
    stake: float
    duration_seconds: int
    reasoning: str


@dataclass(frozen=True)
class TradingStrategy:
    """The generator's plan for one session."""

    trades: tuple[TradeProposal, ...]
    overall_reasoning: str

    @property
    def total_stake(self) -> float:
        return round(sum(trade.stake for trade in self.trades), 2)


@dataclass(frozen=True)
class StrategyRequest:
    """Everything the generator needs to propose trades.

    Attributes:
        total_stake: Budget for the session, at least 1.
        instruments: Instruments the generator may pick from.
        trading_mode: Risk appetite.
        ticks: Recent prices per instrument, oldest first.
        indicators: Latest indicator snapshot per instrument.
        stop_loss_percent: User stop-loss; None means the system default.
        strategy_id: Selected AI strategy.
        flavor: Prompt family to use.
    """

    total_stake: float
    instruments: tuple[str, ...]
    trading_mode: TradingMode
    ticks: dict[str, list[PriceTick]] = field(default_factory=dict)
    indicators: dict[str, IndicatorSnapshot] = field(default_factory=dict)
    stop_loss_percent: Optional[float] = None
    strategy_id: Optional[str] = None
    flavor: StrategyFlavor = StrategyFlavor.MARKETS


@dataclass(frozen=True)
class SentimentRequest:
    instrument: str
    trading_mode: TradingMode
    price_trend: str
    indicators: IndicatorSnapshot


@dataclass(frozen=True)
class MarketSentiment:
    """A single-instrument trade recommendation."""

    action: SentimentAction
    confidence: float
    reasoning: str
    price_trend: Optional[str] = None
    indicators: Optional[IndicatorSnapshot] = None
