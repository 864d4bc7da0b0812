"""
Tests for per-symbol indicator state.
"""
from datetime import time

import numpy as np
import pandas as pd
import pytest

from symphony.indicators.symbol_state import IndicatorSet, SymbolState, indicator_label, validate_periods
from symphony.shared.errors import ConfigurationError, WarmUpError
from symphony.shared.types import DailyBar, IndicatorKind, PricePoint


def make_state(closes, periods=(4,), symbol="SPY") -> SymbolState:
    state = SymbolState(symbol, periods, time(15, 59))
    dates = pd.date_range('2024-01-01', periods=len(closes), freq='D')
    for date, close in zip(dates, closes):
        state.update(DailyBar(symbol, date, float(close), date + pd.Timedelta(hours=15, minutes=59)))
    return state


def independent_cumulative_return(closes, period):
    """Product of adjacent ratios over the last `period` closes, minus 1."""
    window = list(closes)[-period:]
    product = 1.0
    for previous, current in zip(window[:-1], window[1:]):
        product *= current / previous
    return product - 1.0


class TestValidatePeriods:
    def test_sorted_unique(self):
        assert validate_periods([200, 30, 200, 90]) == [30, 90, 200]

    @pytest.mark.parametrize("periods", [[], [0, 5], [-1]])
    def test_invalid(self, periods):
        with pytest.raises(ConfigurationError):
            validate_periods(periods)


class TestIndicatorSet:
    def test_one_indicator_per_kind_and_period(self):
        indicators = IndicatorSet([10, 20])
        assert len(indicators) == 12
        assert (IndicatorKind.RSI, 20) in indicators.keys()

    def test_unconfigured_lookup(self):
        with pytest.raises(ConfigurationError, match="not configured"):
            IndicatorSet([10]).get(IndicatorKind.RSI, 14)


class TestSymbolState:
    """History and rolling statistics of one symbol."""

    def test_mov_avg_scenario(self):
        state = make_state([100, 102, 101, 105, 103], periods=[4])
        assert state.mov_avg_of_price(4) == pytest.approx(102.75)

    def test_rsi_not_warmed_up(self):
        state = make_state([100, 101, 102, 101, 103], periods=[14])
        with pytest.raises(WarmUpError) as exc_info:
            state.rsi(14)
        assert exc_info.value.symbol == "SPY"
        assert exc_info.value.samples == 5

    def test_history_capacity_is_largest_period(self):
        state = make_state(range(1, 30), periods=[5, 10])
        assert state.history.capacity == 10
        assert len(state.history) == 10
        assert state.samples == 29
        assert state.current_price() == 29.0

    def test_cumulative_return_matches_recomputation(self):
        rng = np.random.default_rng(42)
        closes = list(100 * np.cumprod(1 + rng.normal(0, 0.01, 40)))
        state = make_state(closes, periods=[10, 30])
        for period in (2, 5, 10, 30):
            assert state.cumulative_return(period) == pytest.approx(
                independent_cumulative_return(closes, period)
            )

    def test_cumulative_return_needs_period_plus_one(self):
        state = make_state([100, 101, 102, 103], periods=[4])
        with pytest.raises(WarmUpError):
            state.cumulative_return(4)
        state.update(DailyBar("SPY", pd.Timestamp('2024-02-01'), 104.0, pd.Timestamp('2024-02-01 15:59')))
        assert state.cumulative_return(4) == pytest.approx(104.0 / 101.0 - 1.0)

    def test_window_beyond_capacity(self):
        state = make_state(range(1, 10), periods=[5])
        with pytest.raises(ConfigurationError):
            state.cumulative_return(6)
        with pytest.raises(ConfigurationError):
            state.max_drawdown(0)

    def test_max_drawdown(self):
        state = make_state([100, 120, 90, 110], periods=[4])
        assert state.max_drawdown(4) == pytest.approx((90 - 120) / 120)

    def test_returns_statistics(self):
        closes = [100.0, 110.0, 99.0, 99.0]
        state = make_state(closes, periods=[3])
        returns = [0.10, -0.10, 0.0]
        assert state.mov_avg_of_return(3) == pytest.approx(np.mean(returns))
        assert state.std_dev_of_return(3) == pytest.approx(np.std(returns))

    def test_value_dispatch(self):
        state = make_state([100, 102, 101, 105, 103], periods=[4])
        assert state.value("mov_avg_of_price", 4) == pytest.approx(102.75)
        assert state.value(IndicatorKind.CURRENT_PRICE, 4) == 103.0
        with pytest.raises(ConfigurationError, match="Unrecognized filter function"):
            state.value("median_price", 4)

    def test_snapshot_marks_cold_values(self):
        state = make_state([100, 102, 101], periods=[4])
        snapshot = state.snapshot()
        assert snapshot["CurrentPrice"] == 101.0
        assert snapshot[indicator_label(IndicatorKind.MOV_AVG_OF_PRICE, 4)] is None

    def test_push_consolidates_raw_prices(self):
        state = SymbolState("SPY", [2], time(15, 59))
        state.push(PricePoint(pd.Timestamp('2024-01-02 10:00'), 100.0, "SPY"))
        state.push(PricePoint(pd.Timestamp('2024-01-02 15:00'), 101.0, "SPY"))
        assert state.samples == 0
        bar = state.scan(pd.Timestamp('2024-01-02 16:00'))
        assert bar.close == 101.0
        assert state.current_price() == 101.0

    def test_current_price_empty(self):
        state = SymbolState("SPY", [2], time(15, 59))
        with pytest.raises(WarmUpError):
            state.current_price()

    def test_dispose(self):
        state = make_state([1, 2, 3], periods=[2])
        state.dispose()
        assert state.disposed
