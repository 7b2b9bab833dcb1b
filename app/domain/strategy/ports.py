"""
Port interfaces (ABCs) for the strategy bounded context.

The generator and sentiment ports are implemented by LLM adapters;
the domain only sees validated entities.
"""

from abc import ABC, abstractmethod

from app.domain.strategy.entities import (
    MarketSentiment,
    SentimentRequest,
    StrategyRequest,
    TradingStrategy,
)


class StrategyGeneratorPort(ABC):
    """Port for turning market data into a set of trade proposals."""

    @abstractmethod
    def generate(self, request: StrategyRequest) -> TradingStrategy:
        """Return the proposals for ``request``.

        Proposals are returned as the model produced them once they pass
        schema validation; business filtering happens in the use case.

        Raises:
            StrategyGenerationError: If the model reply is missing or invalid.
        """
        raise NotImplementedError


class SentimentAnalyzerPort(ABC):
    """Port for single-instrument CALL/PUT/HOLD recommendations."""

    @abstractmethod
    def analyze(self, request: SentimentRequest) -> MarketSentiment:
        raise NotImplementedError
