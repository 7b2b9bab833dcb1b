"""
Use case: Single-instrument market sentiment.

Input: SentimentCommand (instrument, trading_mode)
Output: SentimentResult
Side effects: Broker ``ticks_history`` call; one LLM completion.
Failure cases: None; every failure degrades to a HOLD recommendation.
"""

import logging

from app.application.strategy.dtos import SentimentCommand, SentimentResult
from app.application.trading.market_data import STRATEGY_CANDLE_COUNT, MarketDataLoader
from app.domain.strategy.entities import SentimentRequest, TradingMode
from app.domain.strategy.errors import StrategyDomainError
from app.domain.strategy.ports import SentimentAnalyzerPort
from app.domain.trading.entities import Candle, IndicatorSnapshot
from app.domain.trading.errors import BrokerError
from app.domain.trading.ports import BrokerGateway

logger = logging.getLogger(__name__)

TREND_WINDOW = 30
FALLBACK_CONFIDENCE = 0.5
TREND_STABLE = "Stable"
TREND_FETCH_ERROR = "Error fetching price data"


def price_trend(candles: list[Candle]) -> str:
    """Direction of the close prices from the first to the last candle."""
    if len(candles) > 1:
        first, last = candles[0].close, candles[-1].close
        if last > first:
            return "Upward"
        if last < first:
            return "Downward"
        return "Sideways"
    if len(candles) == 1:
        return "Sideways"
    return TREND_STABLE


class AnalyzeMarketSentimentUseCase:
    def __init__(
        self,
        analyzer: SentimentAnalyzerPort,
        broker: BrokerGateway,
        loader: MarketDataLoader,
    ) -> None:
        self._analyzer = analyzer
        self._broker = broker
        self._loader = loader

    def execute(self, command: SentimentCommand) -> SentimentResult:
        try:
            candles = self._broker.get_candles(command.instrument, count=STRATEGY_CANDLE_COUNT)
            trend = price_trend(candles[-TREND_WINDOW:])
            indicators = self._loader.snapshot(candles) if candles else IndicatorSnapshot()
        except BrokerError as e:
            logger.error("Error fetching candles for %s: %s", command.instrument, e.message)
            trend, indicators = TREND_FETCH_ERROR, IndicatorSnapshot()
        logger.info("Price trend for %s: %s", command.instrument, trend)

        try:
            mode = TradingMode(command.trading_mode.lower())
            sentiment = self._analyzer.analyze(
                SentimentRequest(
                    instrument=command.instrument,
                    trading_mode=mode,
                    price_trend=trend,
                    indicators=indicators,
                )
            )
        except (StrategyDomainError, ValueError) as e:
            logger.error("Sentiment analysis failed for %s: %s", command.instrument, e)
            return SentimentResult(
                action="HOLD",
                confidence=FALLBACK_CONFIDENCE,
                reasoning=f"Error during analysis: {e}",
                price_trend=trend,
                indicators=indicators,
            )

        return SentimentResult(
            action=sentiment.action.value,
            confidence=sentiment.confidence,
            reasoning=sentiment.reasoning,
            price_trend=trend,
            indicators=indicators,
        )
