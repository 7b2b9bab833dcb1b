"""
Data Transfer Objects for the strategy application layer.
"""

from dataclasses import dataclass
from typing import Optional

from app.domain.trading.entities import IndicatorSnapshot


@dataclass(frozen=True)
class GenerateStrategyCommand:
    """Input DTO for strategy generation.

    Attributes:
        total_stake: Session budget, at least 1.
        instruments: Candidate instruments.
        trading_mode: conservative, balanced or aggressive.
        stop_loss_percent: Optional user stop-loss between 1 and 50.
        strategy_id: Catalog strategy; the default one when omitted.
        flavor: ``markets`` or ``volatility`` prompt family.
    """

    total_stake: float
    instruments: tuple[str, ...]
    trading_mode: str
    stop_loss_percent: Optional[float] = None
    strategy_id: Optional[str] = None
    flavor: str = "markets"


@dataclass(frozen=True)
class ProposalResult:
    instrument: str
    action: str
    stake: float
    duration_seconds: int
    reasoning: str


@dataclass(frozen=True)
class StrategyResult:
    """Output DTO of strategy generation.

    Attributes:
        trades: Proposals that passed validation.
        overall_reasoning: The model's summary.
        total_stake: Sum of proposed stakes.
        strategy_id: Catalog strategy used.
        latest_prices: Last observed price per instrument that had data.
    """

    trades: list[ProposalResult]
    overall_reasoning: str
    total_stake: float
    strategy_id: str
    latest_prices: dict[str, float]


@dataclass(frozen=True)
class SentimentCommand:
    instrument: str
    trading_mode: str = "balanced"


@dataclass(frozen=True)
class SentimentResult:
    action: str
    confidence: float
    reasoning: str
    price_trend: Optional[str]
    indicators: Optional[IndicatorSnapshot]
