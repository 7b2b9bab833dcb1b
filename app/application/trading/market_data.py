"""
Use cases: Market overview and the market-data loader.

MarketDataLoader turns broker candles into the price ticks and
indicator snapshots the strategy generator and the automation engine
consume. Instruments whose candles cannot be fetched are left out
rather than failing the whole request.

Input: instrument name(s)
Output: Instrument catalog / MarketStatus / list[Candle] /
    IndicatorSnapshot / MarketData
Side effects: Broker ``ticks_history`` calls.
Failure cases: BrokerError, BrokerTimeoutError (single-instrument reads).
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable

from app.domain.trading.entities import (
    Candle,
    IndicatorSnapshot,
    Instrument,
    MarketStatus,
    PriceTick,
)
from app.domain.trading.errors import BrokerError
from app.domain.trading.instruments import SUPPORTED_INSTRUMENTS
from app.domain.trading.market_hours import get_market_status
from app.domain.trading.ports import BrokerGateway, IndicatorCalculator

logger = logging.getLogger(__name__)

STRATEGY_CANDLE_COUNT = 150


def candles_to_ticks(candles: Iterable[Candle]) -> list[PriceTick]:
    return [
        PriceTick(epoch=candle.epoch, price=candle.close, time=candle.time.isoformat())
        for candle in candles
    ]


@dataclass(frozen=True)
class MarketData:
    """Ticks and indicators for the instruments that returned data."""

    ticks: dict[str, list[PriceTick]] = field(default_factory=dict)
    indicators: dict[str, IndicatorSnapshot] = field(default_factory=dict)

    @property
    def instruments(self) -> tuple[str, ...]:
        return tuple(self.ticks)

    def latest_price(self, instrument: str) -> float | None:
        series = self.ticks.get(instrument)
        return series[-1].price if series else None


class MarketDataLoader:
    def __init__(self, broker: BrokerGateway, indicators: IndicatorCalculator) -> None:
        self._broker = broker
        self._indicators = indicators

    def snapshot(self, candles: list[Candle]) -> IndicatorSnapshot:
        return self._indicators.snapshot(
            closes=[c.close for c in candles],
            highs=[c.high for c in candles],
            lows=[c.low for c in candles],
        )

    def load(
        self, instruments: Iterable[str], count: int = STRATEGY_CANDLE_COUNT
    ) -> MarketData:
        data = MarketData()
        for instrument in instruments:
            try:
                candles = self._broker.get_candles(instrument, count=count)
            except BrokerError as e:
                logger.warning("Could not fetch candles for %s: %s", instrument, e.message)
                continue
            if not candles:
                logger.warning("No candle data returned for %s", instrument)
                continue
            data.ticks[instrument] = candles_to_ticks(candles)
            data.indicators[instrument] = self.snapshot(candles)
        return data


class ListInstrumentsUseCase:
    def execute(self) -> tuple[Instrument, ...]:
        return SUPPORTED_INSTRUMENTS


class GetMarketStatusUseCase:
    def execute(self, instrument: str) -> MarketStatus:
        return get_market_status(instrument)


class GetCandlesUseCase:
    def __init__(self, broker: BrokerGateway) -> None:
        self._broker = broker

    def execute(self, instrument: str, count: int, granularity: int) -> list[Candle]:
        return self._broker.get_candles(instrument, count=count, granularity=granularity)


class GetIndicatorsUseCase:
    def __init__(self, broker: BrokerGateway, loader: MarketDataLoader) -> None:
        self._broker = broker
        self._loader = loader

    def execute(self, instrument: str, count: int = STRATEGY_CANDLE_COUNT) -> IndicatorSnapshot:
        candles = self._broker.get_candles(instrument, count=count)
        return self._loader.snapshot(candles)
