"""
Tests for StrategyBase helpers and the sample strategy.
"""
from datetime import time

import pandas as pd
import pytest

from symphony.scheduling.date_rules import DailyRule
from symphony.scheduling.trading_calendar import TradingCalendar
from symphony.shared.errors import ConfigurationError
from symphony.shared.types import DailyBar, TargetWeight
from symphony.strategy.base import StrategyBase
from symphony.strategy.sample import SampleStrategy


def feed_closes(state, closes):
    for i, close in enumerate(closes):
        date = pd.Timestamp('2020-01-01') + pd.Timedelta(days=i)
        state.update(DailyBar(state.symbol, date, float(close), date))


class TestEqualWeight:
    @pytest.mark.parametrize("k", [1, 2, 3, 7])
    def test_weights_sum_to_budget(self, k):
        tickers = [f"T{i}" for i in range(k)]
        targets = StrategyBase.equal_weight(tickers)
        assert len(targets) == k
        assert all(t.weight == pytest.approx(1.0 / k) for t in targets)
        assert sum(t.weight for t in targets) == pytest.approx(1.0)

    def test_partial_budget(self):
        targets = StrategyBase.equal_weight(['A', 'B'], budget=0.5)
        assert [t.weight for t in targets] == [0.25, 0.25]

    def test_empty(self):
        with pytest.raises(ConfigurationError):
            StrategyBase.equal_weight([])


class TestStaticWeights:
    def test_sixty_forty(self):
        targets = StrategyBase.static_weights({'VTI': 0.6, 'BND': 0.4})
        assert targets == [TargetWeight('VTI', 0.6), TargetWeight('BND', 0.4)]

    def test_over_allocated(self):
        with pytest.raises(ConfigurationError):
            StrategyBase.static_weights({'VTI': 0.7, 'BND': 0.4})

    def test_invalid_weight(self):
        with pytest.raises(ConfigurationError):
            TargetWeight('VTI', -0.1)
        with pytest.raises(ConfigurationError):
            TargetWeight('', 0.5)


class TestSampleStrategy:
    """Branch logic of the sample strategy."""

    @pytest.fixture
    def strategy(self):
        strategy = SampleStrategy()
        for ticker in strategy.tickers:
            strategy.add_symbol_data(ticker, time(15, 59))
        return strategy

    def test_declarations(self):
        strategy = SampleStrategy()
        assert strategy.periods == [90, 200]
        assert strategy.backtest_start_date == pd.Timestamp('2007-04-10')
        calendar = TradingCalendar.from_dates(pd.bdate_range('2020-01-01', '2020-01-31'))
        assert isinstance(strategy.evaluation_rule(calendar), DailyRule)

    def test_uptrend_picks_best_leveraged_fund(self, strategy):
        feed_closes(strategy.symbol_data['SPY'], [100 + i * 0.1 for i in range(201)])
        feed_closes(strategy.symbol_data['SSO'], [50 + i * 0.1 for i in range(201)])
        feed_closes(strategy.symbol_data['QLD'], [50 + i * 0.2 for i in range(201)])
        assert strategy.evaluate() == [TargetWeight('QLD', 1.0)]

    def test_downtrend_holds_sixty_forty(self, strategy):
        feed_closes(strategy.symbol_data['SPY'], [200 - i * 0.1 for i in range(201)])
        assert strategy.evaluate() == [TargetWeight('VTI', 0.6), TargetWeight('BND', 0.4)]

    def test_duplicate_symbol_data(self, strategy):
        with pytest.raises(ConfigurationError):
            strategy.add_symbol_data('SPY', time(15, 59))

    def test_dispose_releases_states(self, strategy):
        states = list(strategy.symbol_data.values())
        strategy.dispose()
        assert strategy.symbol_data == {}
        assert all(state.disposed for state in states)

    def test_set_backtest_start_date(self):
        strategy = SampleStrategy()
        strategy.set_backtest_start_date(2010, 1, 4)
        assert strategy.backtest_start_date == pd.Timestamp('2010-01-04')
