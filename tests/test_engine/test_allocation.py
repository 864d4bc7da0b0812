"""
Tests for the simulated portfolio sink.
"""
import pytest

from symphony.engine.allocation import SimulatedPortfolio
from symphony.shared.errors import SymphonyError
from symphony.shared.types import TargetWeight


@pytest.fixture
def portfolio():
    portfolio = SimulatedPortfolio(1000.0)
    portfolio.update_price('A', 10.0)
    portfolio.update_price('B', 20.0)
    return portfolio


def test_starts_in_cash(portfolio):
    assert portfolio.total_value == 1000.0
    assert portfolio.invested == set()
    assert portfolio.weights() == {}


def test_set_holdings_buys_fractions(portfolio):
    portfolio.set_holdings([TargetWeight('A', 0.5), TargetWeight('B', 0.5)], False)
    assert portfolio.positions == {'A': pytest.approx(50.0), 'B': pytest.approx(25.0)}
    assert portfolio.cash == pytest.approx(0.0)
    assert portfolio.trades == 2


def test_marks_to_last_price(portfolio):
    portfolio.set_holdings([TargetWeight('A', 0.5), TargetWeight('B', 0.5)], False)
    portfolio.update_price('A', 20.0)
    assert portfolio.total_value == pytest.approx(1500.0)
    assert portfolio.weights() == {'A': pytest.approx(2 / 3), 'B': pytest.approx(1 / 3)}


def test_liquidate_existing(portfolio):
    portfolio.set_holdings([TargetWeight('A', 1.0)], False)
    portfolio.update_price('A', 15.0)
    portfolio.set_holdings([TargetWeight('B', 1.0)], True)
    assert portfolio.invested == {'B'}
    assert portfolio.positions['B'] == pytest.approx(75.0)
    assert portfolio.cash == pytest.approx(0.0)


def test_without_liquidation_keeps_absent_holdings(portfolio):
    portfolio.set_holdings([TargetWeight('A', 0.5)], False)
    portfolio.set_holdings([TargetWeight('B', 0.5)], False)
    assert portfolio.invested == {'A', 'B'}
    assert portfolio.cash == pytest.approx(0.0)


def test_partial_weights_keep_cash(portfolio):
    portfolio.set_holdings([TargetWeight('A', 0.25)], False)
    assert portfolio.cash == pytest.approx(750.0)
    assert portfolio.total_value == pytest.approx(1000.0)


def test_rebalance_to_same_target_does_not_trade(portfolio):
    portfolio.set_holdings([TargetWeight('A', 1.0)], False)
    portfolio.set_holdings([TargetWeight('A', 1.0)], False)
    assert portfolio.trades == 1


def test_missing_price(portfolio):
    with pytest.raises(SymphonyError, match="No price observed for C"):
        portfolio.set_holdings([TargetWeight('C', 1.0)], False)
