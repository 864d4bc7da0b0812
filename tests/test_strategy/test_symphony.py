"""
Tests for declarative symphony strategies.
"""
from datetime import time

import pandas as pd
import pytest

from symphony.scheduling.date_rules import WeeklyRule
from symphony.scheduling.trading_calendar import TradingCalendar
from symphony.shared.errors import ConfigurationError
from symphony.shared.types import DailyBar, IndicatorKind, Select, TargetWeight
from symphony.strategy.symphony import (
    Constant,
    FilterNode,
    IfNode,
    IndicatorRef,
    SymphonyStrategy,
    WeightsNode,
    parse_node,
    parse_operand,
)


TREND = {
    'name': 'SPY trend',
    'rebalance': 'weekly',
    'start_date': '2010-01-04',
    'logic': {
        'if': {
            'condition': {
                'lhs': {'ticker': 'SPY', 'indicator': 'current_price'},
                'op': '>',
                'rhs': {'ticker': 'SPY', 'indicator': 'mov_avg_of_price', 'window': 5},
            },
            'then': {
                'filter': {'tickers': ['SSO', 'QLD'], 'by': 'cumulative_return',
                           'window': 3, 'select': 'top', 'count': 1},
            },
            'else': {'weights': {'VTI': 0.6, 'BND': 0.4}},
        }
    },
}


def feed_closes(state, closes):
    for i, close in enumerate(closes):
        date = pd.Timestamp('2020-01-01') + pd.Timedelta(days=i)
        state.update(DailyBar(state.symbol, date, float(close), date))


@pytest.fixture
def strategy():
    strategy = SymphonyStrategy.from_dict(TREND)
    for ticker in strategy.tickers:
        strategy.add_symbol_data(ticker, time(15, 44))
    return strategy


class TestParsing:
    def test_tree_structure(self):
        node = parse_node(TREND['logic'])
        assert isinstance(node, IfNode)
        assert isinstance(node.then, FilterNode)
        assert node.then.by is IndicatorKind.CUMULATIVE_RETURN
        assert node.then.select is Select.TOP
        assert isinstance(node.otherwise, WeightsNode)
        assert str(node.condition) == "SPY.CurrentPrice > SPY.MovAvgOfPrice(5)"

    def test_operands(self):
        assert parse_operand(0.02) == Constant(0.02)
        ref = parse_operand({'ticker': 'TLT', 'indicator': 'RSI', 'window': 10})
        assert ref == IndicatorRef('TLT', IndicatorKind.RSI, 10)

    def test_tickers_and_periods_collected(self):
        strategy = SymphonyStrategy.from_dict(TREND)
        assert strategy.tickers == ['BND', 'QLD', 'SPY', 'SSO', 'VTI']
        assert strategy.periods == [3, 5]
        assert strategy.name == 'SPY trend'
        assert strategy.backtest_start_date == pd.Timestamp('2010-01-04')

    def test_extra_tickers_and_periods(self):
        raw = {'logic': {'equal_weight': ['SPY', 'TLT']}, 'tickers': ['GLD'], 'periods': [20]}
        strategy = SymphonyStrategy.from_dict(raw)
        assert strategy.tickers == ['GLD', 'SPY', 'TLT']
        assert strategy.periods == [20]

    def test_static_only_tree_gets_one_period(self):
        strategy = SymphonyStrategy.from_dict({'logic': {'weights': {'SPY': 1.0}}})
        assert strategy.periods == [1]
        assert strategy.rebalance == 'daily'

    def test_rebalance_alias(self):
        strategy = SymphonyStrategy.from_dict(dict(TREND, rebalance='W'))
        calendar = TradingCalendar.from_dates(pd.bdate_range('2020-01-01', '2020-03-31'))
        assert isinstance(strategy.evaluation_rule(calendar), WeeklyRule)

    @pytest.mark.parametrize("logic", [
        {'weights': {'VTI': 0.7, 'BND': 0.4}},
        {'weights': {'VTI': 'lots'}},
        {'weights': {}},
        {'equal_weight': []},
        {'filter': {'tickers': ['A', 'B'], 'by': 'rsi', 'window': 10, 'count': 3}},
        {'filter': {'tickers': ['A', 'B'], 'by': 'rsi'}},
        {'filter': {'tickers': ['A', 'B'], 'by': 'momentum', 'window': 10}},
        {'filter': {'tickers': ['A', 'B'], 'by': 'rsi', 'window': 10, 'select': 'middle'}},
        {'filter': {'tickers': ['A'], 'by': 'rsi', 'window': 0}},
        {'if': {'condition': {'lhs': 1, 'op': '==', 'rhs': 2},
                'then': {'weights': {'A': 1.0}}, 'else': {'weights': {'B': 1.0}}}},
        {'if': {'condition': {'lhs': 1, 'op': '>', 'rhs': 2}, 'then': {'weights': {'A': 1.0}}}},
        {'weights': {'A': 1.0}, 'equal_weight': ['B']},
        {'rotate': ['A', 'B']},
    ])
    def test_malformed_trees(self, logic):
        with pytest.raises(ConfigurationError):
            SymphonyStrategy.from_dict({'logic': logic})

    def test_unknown_rebalance(self):
        with pytest.raises(ConfigurationError, match="Unknown rebalance frequency"):
            SymphonyStrategy.from_dict(dict(TREND, rebalance='hourly'))

    def test_missing_logic(self):
        with pytest.raises(ConfigurationError, match="missing 'logic'"):
            SymphonyStrategy.from_dict({'name': 'empty'})


class TestEvaluation:
    def test_then_branch(self, strategy):
        feed_closes(strategy.symbol_data['SPY'], [100, 101, 102, 103, 104, 110])
        feed_closes(strategy.symbol_data['SSO'], [10, 10, 10, 11])
        feed_closes(strategy.symbol_data['QLD'], [10, 10, 10, 12])
        assert strategy.evaluate() == [TargetWeight('QLD', 1.0)]

    def test_else_branch(self, strategy):
        feed_closes(strategy.symbol_data['SPY'], [110, 104, 103, 102, 101, 100])
        assert strategy.evaluate() == [TargetWeight('VTI', 0.6), TargetWeight('BND', 0.4)]

    def test_constant_threshold(self):
        raw = {
            'logic': {
                'if': {
                    'condition': {
                        'lhs': {'ticker': 'SPY', 'indicator': 'max_drawdown', 'window': 3},
                        'op': '<=',
                        'rhs': -0.1,
                    },
                    'then': {'equal_weight': ['TLT', 'GLD']},
                    'else': {'weights': {'SPY': 1.0}},
                }
            }
        }
        strategy = SymphonyStrategy.from_dict(raw)
        for ticker in strategy.tickers:
            strategy.add_symbol_data(ticker, time(15, 44))
        feed_closes(strategy.symbol_data['SPY'], [100, 85, 90])
        assert strategy.evaluate() == [TargetWeight('TLT', 0.5), TargetWeight('GLD', 0.5)]
