"""
Adapter: Technical indicators.

Thin wrappers around pandas-ta. Series helpers return the indicator
values (rounded to 2 decimals, warm-up NaNs dropped) or an empty list
when there are fewer prices than the period. ``latest_*`` helpers
return the last value or None.
"""

import logging
from typing import Optional, Sequence

import pandas as pd
import pandas_ta as ta

from app.domain.trading.entities import BollingerBandsValue, IndicatorSnapshot, MacdValue
from app.domain.trading.ports import IndicatorCalculator

logger = logging.getLogger(__name__)

RSI_PERIOD = 14
MACD_FAST = 12
MACD_SLOW = 26
MACD_SIGNAL = 9
BBANDS_PERIOD = 20
BBANDS_STD = 2.0
EMA_PERIOD = 20
SNAPSHOT_EMA_PERIOD = 50
ATR_PERIOD = 14
PRECISION = 2


def _clean(series: Optional[pd.Series]) -> list[float]:
    if series is None:
        return []
    return [round(float(value), PRECISION) for value in series.dropna()]


def _column(frame: pd.DataFrame, prefix: str) -> pd.Series:
    """Pick a pandas-ta output column by prefix; suffixes vary by version."""
    for name in frame.columns:
        if name.startswith(prefix):
            return frame[name]
    raise KeyError(prefix)


def _last(values: list) -> Optional[float]:
    return values[-1] if values else None


def rsi(prices: Sequence[float], period: int = RSI_PERIOD) -> list[float]:
    if len(prices) < period:
        return []
    return _clean(ta.rsi(pd.Series(prices, dtype="float64"), length=period))


def sma(prices: Sequence[float], period: int) -> list[float]:
    if len(prices) < period:
        return []
    return _clean(ta.sma(pd.Series(prices, dtype="float64"), length=period))


def ema(prices: Sequence[float], period: int = EMA_PERIOD) -> list[float]:
    if len(prices) < period:
        return []
    return _clean(ta.ema(pd.Series(prices, dtype="float64"), length=period))


def macd(
    prices: Sequence[float],
    fast: int = MACD_FAST,
    slow: int = MACD_SLOW,
    signal: int = MACD_SIGNAL,
) -> list[MacdValue]:
    """MACD line, signal line and histogram for every complete bar."""
    if len(prices) < slow:
        return []
    frame = ta.macd(pd.Series(prices, dtype="float64"), fast=fast, slow=slow, signal=signal)
    if frame is None:
        return []
    frame = pd.DataFrame(
        {
            "macd": _column(frame, "MACD_"),
            "histogram": _column(frame, "MACDh_"),
            "signal": _column(frame, "MACDs_"),
        }
    ).dropna()
    return [
        MacdValue(
            macd=round(float(row.macd), PRECISION),
            signal=round(float(row.signal), PRECISION),
            histogram=round(float(row.histogram), PRECISION),
        )
        for row in frame.itertuples()
    ]


def bollinger_bands(
    prices: Sequence[float], period: int = BBANDS_PERIOD, std_dev: float = BBANDS_STD
) -> list[BollingerBandsValue]:
    if len(prices) < period:
        return []
    frame = ta.bbands(pd.Series(prices, dtype="float64"), length=period, std=std_dev)
    if frame is None:
        return []
    frame = pd.DataFrame(
        {
            "lower": _column(frame, "BBL_"),
            "middle": _column(frame, "BBM_"),
            "upper": _column(frame, "BBU_"),
        }
    ).dropna()
    return [
        BollingerBandsValue(
            upper=round(float(row.upper), PRECISION),
            middle=round(float(row.middle), PRECISION),
            lower=round(float(row.lower), PRECISION),
        )
        for row in frame.itertuples()
    ]


def atr(
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
    period: int = ATR_PERIOD,
) -> list[float]:
    if len(closes) < period or not (len(highs) == len(lows) == len(closes)):
        return []
    series = ta.atr(
        pd.Series(highs, dtype="float64"),
        pd.Series(lows, dtype="float64"),
        pd.Series(closes, dtype="float64"),
        length=period,
    )
    return _clean(series)


def latest_rsi(prices: Sequence[float], period: int = RSI_PERIOD) -> Optional[float]:
    return _last(rsi(prices, period))


def latest_ema(prices: Sequence[float], period: int = EMA_PERIOD) -> Optional[float]:
    return _last(ema(prices, period))


def latest_macd(prices: Sequence[float]) -> Optional[MacdValue]:
    return _last(macd(prices))


def latest_bollinger_bands(prices: Sequence[float]) -> Optional[BollingerBandsValue]:
    return _last(bollinger_bands(prices))


def latest_atr(
    highs: Sequence[float], lows: Sequence[float], closes: Sequence[float]
) -> Optional[float]:
    return _last(atr(highs, lows, closes))


class PandasTaIndicatorCalculator(IndicatorCalculator):
    """IndicatorCalculator port backed by pandas-ta.

    When highs/lows are not supplied the closes stand in for them.
    """

    def snapshot(
        self,
        closes: Sequence[float],
        highs: Optional[Sequence[float]] = None,
        lows: Optional[Sequence[float]] = None,
    ) -> IndicatorSnapshot:
        if not closes:
            return IndicatorSnapshot()
        closes = list(closes)
        highs = list(highs) if highs is not None else closes
        lows = list(lows) if lows is not None else closes
        snapshot = IndicatorSnapshot(
            rsi=latest_rsi(closes),
            macd=latest_macd(closes),
            bollinger_bands=latest_bollinger_bands(closes),
            ema=latest_ema(closes, SNAPSHOT_EMA_PERIOD),
            atr=latest_atr(highs, lows, closes),
        )
        logger.debug("Indicator snapshot over %d prices: %s", len(closes), snapshot)
        return snapshot
