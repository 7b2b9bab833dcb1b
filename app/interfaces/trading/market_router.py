"""
Market data router.

Instrument catalog, market hours, candles and indicator snapshots.
Instrument names contain slashes (``EUR/USD``), so they are captured
with a path converter.
"""

from fastapi import APIRouter, Depends, Query

from app.application.trading.market_data import (
    GetCandlesUseCase,
    GetIndicatorsUseCase,
    GetMarketStatusUseCase,
    ListInstrumentsUseCase,
    STRATEGY_CANDLE_COUNT,
)
from app.domain.trading.entities import IndicatorSnapshot
from app.interfaces.schemas import ErrorResponse
from app.interfaces.trading.dependencies import (
    get_candles_use_case,
    get_indicators_use_case,
    get_list_instruments_use_case,
    get_market_status_use_case,
)
from app.interfaces.trading.schemas import (
    BollingerBandsResponse,
    CandleResponse,
    IndicatorsResponse,
    InstrumentResponse,
    MacdResponse,
    MarketStatusResponse,
)

router = APIRouter(prefix="/market", tags=["market"])


def indicators_response(snapshot: IndicatorSnapshot) -> IndicatorsResponse:
    return IndicatorsResponse(
        rsi=snapshot.rsi,
        macd=MacdResponse(
            macd=snapshot.macd.macd,
            signal=snapshot.macd.signal,
            histogram=snapshot.macd.histogram,
        )
        if snapshot.macd
        else None,
        bollinger_bands=BollingerBandsResponse(
            upper=snapshot.bollinger_bands.upper,
            middle=snapshot.bollinger_bands.middle,
            lower=snapshot.bollinger_bands.lower,
        )
        if snapshot.bollinger_bands
        else None,
        ema=snapshot.ema,
        atr=snapshot.atr,
    )


@router.get(
    "/instruments",
    response_model=list[InstrumentResponse],
    summary="Supported instruments",
)
def list_instruments(
    use_case: ListInstrumentsUseCase = Depends(get_list_instruments_use_case),
) -> list[InstrumentResponse]:
    return [
        InstrumentResponse(
            name=i.name, label=i.label, type=i.type.value, decimal_places=i.decimal_places
        )
        for i in use_case.execute()
    ]


@router.get(
    "/status/{instrument:path}",
    response_model=MarketStatusResponse,
    summary="Market hours",
    description="Whether the instrument's market is likely open right now.",
)
def get_market_status(
    instrument: str,
    use_case: GetMarketStatusUseCase = Depends(get_market_status_use_case),
) -> MarketStatusResponse:
    result = use_case.execute(instrument)
    return MarketStatusResponse(
        instrument=result.instrument, is_open=result.is_open, message=result.message
    )


@router.get(
    "/candles/{instrument:path}",
    response_model=list[CandleResponse],
    responses={400: {"model": ErrorResponse}, 502: {"model": ErrorResponse}, 504: {"model": ErrorResponse}},
    summary="Recent candles",
)
def get_candles(
    instrument: str,
    count: int = Query(default=120, ge=1, le=5000),
    granularity: int = Query(default=60, ge=60, le=86400),
    use_case: GetCandlesUseCase = Depends(get_candles_use_case),
) -> list[CandleResponse]:
    """Fetch OHLC candles from the broker."""
    return [
        CandleResponse(
            time=c.time, epoch=c.epoch, open=c.open, high=c.high, low=c.low, close=c.close
        )
        for c in use_case.execute(instrument, count=count, granularity=granularity)
    ]


@router.get(
    "/indicators/{instrument:path}",
    response_model=IndicatorsResponse,
    response_model_exclude_none=True,
    responses={502: {"model": ErrorResponse}, 504: {"model": ErrorResponse}},
    summary="Indicator snapshot",
    description="RSI, MACD, Bollinger Bands, EMA(50) and ATR over recent candles.",
)
def get_indicators(
    instrument: str,
    count: int = Query(default=STRATEGY_CANDLE_COUNT, ge=1, le=5000),
    use_case: GetIndicatorsUseCase = Depends(get_indicators_use_case),
) -> IndicatorsResponse:
    return indicators_response(use_case.execute(instrument, count=count))
