"""
Strategy capability and shared strategy helpers.

A strategy declares the tickers and lookback periods it needs, the
calendar rule it is evaluated on and the earliest backtest date, and
returns a complete list of target weights from evaluate().
"""
import logging
from abc import ABC, abstractmethod
from datetime import time
from typing import Dict, Iterable, List, Mapping, Optional, Union

import pandas as pd

from .filter_select import filter_tickers
from ..indicators.symbol_state import SymbolState, validate_periods
from ..scheduling.date_rules import CalendarRule, get_date_rule
from ..scheduling.trading_calendar import TradingCalendar
from ..shared.defaults import DEFAULT_BUDGET
from ..shared.errors import ConfigurationError
from ..shared.types import IndicatorKind, Select, TargetWeight


logger = logging.getLogger(__name__)

# Tolerance when checking that weights fit the budget
WEIGHT_TOLERANCE = 1e-9


class Strategy(ABC):
    """Strategy that SymphonyAlgorithm can execute."""

    @property
    @abstractmethod
    def periods(self) -> List[int]:
        """All indicator periods the strategy uses."""
        pass

    @property
    @abstractmethod
    def tickers(self) -> List[str]:
        """All tickers the strategy trades or reads indicators from."""
        pass

    @property
    @abstractmethod
    def backtest_start_date(self) -> Optional[pd.Timestamp]:
        pass

    @abstractmethod
    def evaluation_rule(self, calendar: TradingCalendar) -> CalendarRule:
        """Calendar rule the strategy is evaluated on."""
        pass

    @abstractmethod
    def add_symbol_data(self, symbol: str, consolidation_time: time) -> SymbolState:
        pass

    @abstractmethod
    def evaluate(self) -> List[TargetWeight]:
        pass

    def dispose(self) -> None:
        pass


class StrategyBase(Strategy):
    """
    Base class for strategies.

    Subclasses set `name`, `rebalance` and `start_date` and implement
    periods, tickers and evaluate().
    """

    name: str = "strategy"
    rebalance: str = "daily"
    start_date: Optional[str] = None

    def __init__(self):
        self.symbol_data: Dict[str, SymbolState] = {}
        self._backtest_start_date: Optional[pd.Timestamp] = (
            pd.Timestamp(self.start_date) if self.start_date is not None else None
        )

    @property
    def backtest_start_date(self) -> Optional[pd.Timestamp]:
        return self._backtest_start_date

    def set_backtest_start_date(self, year: int, month: int, day: int) -> None:
        """Set the earliest date this strategy can be backtested from."""
        self._backtest_start_date = pd.Timestamp(year=year, month=month, day=day)

    def evaluation_rule(self, calendar: TradingCalendar) -> CalendarRule:
        return get_date_rule(self.rebalance, calendar)

    def add_symbol_data(self, symbol: str, consolidation_time: time) -> SymbolState:
        """
        Create the SymbolState for a ticker.

        Raises:
            ConfigurationError: If the ticker already has symbol data
        """
        if symbol in self.symbol_data:
            raise ConfigurationError(f"Symbol data for {symbol} already exists")
        state = SymbolState(symbol, validate_periods(self.periods), consolidation_time)
        self.symbol_data[symbol] = state
        logger.debug(f"Added symbol data for {symbol} (periods: {state.periods})")
        return state

    def remove_symbol_data(self, symbol: str) -> None:
        state = self.symbol_data.pop(symbol, None)
        if state is not None:
            state.dispose()

    def dispose(self) -> None:
        """Release every SymbolState."""
        for symbol in list(self.symbol_data):
            self.remove_symbol_data(symbol)

    def filter(
        self,
        tickers: Iterable[str],
        by: Union[IndicatorKind, str],
        window: int,
        select: Union[Select, str],
        count: int,
    ) -> List[str]:
        """Rank `tickers` by an indicator and keep the top or bottom `count`."""
        return filter_tickers(self.symbol_data, tickers, by, window, select, count)

    @staticmethod
    def equal_weight(tickers: Iterable[str], budget: float = DEFAULT_BUDGET) -> List[TargetWeight]:
        """
        Equally weight a list of tickers.

        Args:
            tickers: Tickers to weight
            budget: Total weight shared by the tickers

        Returns:
            One TargetWeight of budget / len(tickers) per ticker
        """
        tickers = list(tickers)
        if not tickers:
            raise ConfigurationError("Cannot equally weight an empty ticker list")
        weight = budget / len(tickers)
        return [TargetWeight(ticker, weight) for ticker in tickers]

    @staticmethod
    def static_weights(
        weights: Mapping[str, float], budget: float = DEFAULT_BUDGET
    ) -> List[TargetWeight]:
        """
        Fixed allocation scaled to the budget.

        Raises:
            ConfigurationError: If the weights are empty or sum to more than 1
        """
        if not weights:
            raise ConfigurationError("Static allocation needs at least one ticker")
        total = sum(weights.values())
        if total > 1.0 + WEIGHT_TOLERANCE:
            raise ConfigurationError(f"Static weights sum to {total:.4f}, more than 1.0")
        return [TargetWeight(ticker, float(weight) * budget) for ticker, weight in weights.items()]
