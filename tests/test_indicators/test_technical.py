"""
Tests for the vectorized indicator calculations.
"""
from datetime import time

import numpy as np
import pandas as pd
import pytest

from symphony.indicators.symbol_state import SymbolState, indicator_label
from symphony.indicators.technical import TechnicalIndicators
from symphony.shared.types import DailyBar, IndicatorKind


@pytest.fixture
def closes():
    """Random-walk closes."""
    rng = np.random.default_rng(3)
    dates = pd.date_range('2023-01-02', periods=80, freq='B')
    return pd.Series(100 * np.cumprod(1 + rng.normal(0, 0.015, 80)), index=dates)


@pytest.fixture
def calculator():
    return TechnicalIndicators()


class TestTechnicalIndicators:
    def test_sma(self, calculator):
        values = pd.Series([100.0, 102.0, 101.0, 105.0, 103.0])
        sma = calculator.calculate_sma(values, 4)
        assert sma.isna().sum() == 3
        assert sma.iloc[-1] == pytest.approx(102.75)

    def test_returns_zero_previous_close(self, calculator):
        returns = calculator.calculate_returns(pd.Series([0.0, 5.0, 10.0]))
        assert np.isnan(returns.iloc[0])
        assert returns.iloc[1] == 0.0
        assert returns.iloc[2] == pytest.approx(1.0)

    def test_cumulative_return_definition(self, calculator, closes):
        result = calculator.calculate_cumulative_return(closes, 10)
        assert result.iloc[:10].isna().all()
        assert result.iloc[-1] == pytest.approx(closes.iloc[-1] / closes.iloc[-10] - 1.0)

    def test_rsi_range(self, calculator, closes):
        rsi = calculator.calculate_rsi(closes, 14).dropna()
        assert len(rsi) == len(closes) - 13
        assert rsi.between(0, 100).all()

    def test_rsi_wilder_known_value(self, calculator):
        closes = pd.Series([10.0, 12.0, 11.0, 10.0, 9.0, 10.0, 11.0, 10.5, 11.5, 12.0])
        rsi = calculator.calculate_rsi(closes, 3)
        assert rsi.iloc[:2].isna().all()
        assert rsi.iloc[2] == pytest.approx(100.0 - 100.0 / 3.0)
        assert rsi.iloc[-1] == pytest.approx(77.6167004929, abs=1e-8)

    def test_calculate_all_columns(self, calculator, closes):
        frame = calculator.calculate_all(closes, [5, 20])
        assert "CurrentPrice" in frame.columns
        assert indicator_label(IndicatorKind.RSI, 20) in frame.columns
        assert len(frame.columns) == 1 + 2 * 8

    def test_latest_values_empty(self, calculator):
        assert calculator.latest_values(pd.Series(dtype=float), [5]) == {}

    def test_matches_incremental_state(self, calculator, closes):
        """Every kind agrees with the bar-by-bar SymbolState on the last bar."""
        periods = [5, 20]
        state = SymbolState("TEST", periods, time(15, 59))
        for date, close in closes.items():
            state.update(DailyBar("TEST", date, close, date))

        latest = calculator.latest_values(closes, periods)
        for label, value in state.snapshot().items():
            assert latest[label] == pytest.approx(value), label

    def test_warm_up_masks_match_incremental(self, calculator):
        """NaN rows line up with the incremental warm-up periods."""
        closes = pd.Series([100.0, 101.0, 99.0, 102.0, 103.0, 101.5])
        frame = calculator.calculate_all(closes, [3])
        state = SymbolState("TEST", [3], time(15, 59))
        for i, close in enumerate(closes):
            date = pd.Timestamp('2024-01-01') + pd.Timedelta(days=i)
            state.update(DailyBar("TEST", date, close, date))
            for label, value in state.snapshot().items():
                row = frame[label].iloc[i]
                if value is None:
                    assert np.isnan(row), (label, i)
                else:
                    assert row == pytest.approx(value), (label, i)
