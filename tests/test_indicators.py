"""
Tests for the pandas-ta indicator adapter.
"""

import pytest

from app.infrastructure.trading import indicator_adapter as ind
from app.infrastructure.trading.indicator_adapter import PandasTaIndicatorCalculator

RISING = [float(i) for i in range(1, 61)]
FLAT = [10.0] * 60


class TestSeries:
    """Tests for the per-indicator series helpers."""

    def test_sma(self) -> None:
        values = ind.sma(RISING[:30], 5)
        assert values[0] == 3.0
        assert len(values) == 26

    def test_rsi_of_rising_prices_is_maximal(self) -> None:
        assert ind.latest_rsi(RISING) == pytest.approx(100.0)

    def test_flat_prices_give_zero_macd(self) -> None:
        latest = ind.latest_macd(FLAT)
        assert (latest.macd, latest.signal, latest.histogram) == (0.0, 0.0, 0.0)

    def test_flat_prices_collapse_bands(self) -> None:
        bands = ind.latest_bollinger_bands(FLAT)
        assert bands.upper == bands.middle == bands.lower == 10.0

    def test_atr_tracks_the_bar_range(self) -> None:
        highs = [p + 1 for p in FLAT]
        lows = [p - 1 for p in FLAT]
        assert ind.latest_atr(highs, lows, FLAT) == pytest.approx(2.0, abs=0.01)

    def test_ema_of_flat_prices(self) -> None:
        assert ind.latest_ema(FLAT) == 10.0

    @pytest.mark.parametrize(
        "func",
        [ind.rsi, ind.ema, ind.macd, ind.bollinger_bands, lambda p: ind.sma(p, 20)],
    )
    def test_too_few_prices_give_nothing(self, func) -> None:
        assert func(RISING[:5]) == []

    def test_mismatched_atr_inputs(self) -> None:
        assert ind.atr(RISING, RISING[:-1], RISING) == []


class TestSnapshot:
    """Tests for the IndicatorCalculator port implementation."""

    def test_full_snapshot(self) -> None:
        snapshot = PandasTaIndicatorCalculator().snapshot(RISING)
        assert snapshot.rsi == pytest.approx(100.0)
        assert snapshot.macd is not None
        assert snapshot.bollinger_bands is not None
        assert snapshot.ema is not None
        assert snapshot.atr is not None
        assert not snapshot.is_empty

    def test_short_series_is_empty(self) -> None:
        assert PandasTaIndicatorCalculator().snapshot(RISING[:10]).is_empty

    def test_no_prices(self) -> None:
        assert PandasTaIndicatorCalculator().snapshot([]).is_empty
