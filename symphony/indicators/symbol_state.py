"""
Per-symbol indicator state.

A SymbolState owns the consolidator, the price history and the indicator
set of one ticker. Rolling statistics live in the IndicatorSet keyed by
(kind, period); history statistics (current price, cumulative return,
max drawdown) are computed on demand from the price history for any
window up to its capacity.
"""
import logging
from datetime import time
from typing import Callable, Dict, Iterable, List, Optional, Tuple

import numpy as np
import pandas as pd

from .base import Indicator, CompositeIndicator
from .implementations import (
    SimpleMovingAverage,
    ExponentialMovingAverage,
    StandardDeviation,
    RateOfChange,
    RelativeStrengthIndex,
)
from ..data.consolidator import BarConsolidator
from ..data.history import PriceHistory
from ..shared.errors import ConfigurationError, WarmUpError
from ..shared.types import DailyBar, IndicatorKind, PricePoint


logger = logging.getLogger(__name__)

IndicatorKey = Tuple[IndicatorKind, int]

LABELS: Dict[IndicatorKind, str] = {
    IndicatorKind.CURRENT_PRICE: "CurrentPrice",
    IndicatorKind.CUMULATIVE_RETURN: "CumulativeReturn",
    IndicatorKind.STD_DEV_OF_PRICE: "StdDevOfPrice",
    IndicatorKind.STD_DEV_OF_RETURN: "StdDevOfReturn",
    IndicatorKind.MAX_DRAWDOWN: "MaxDrawdown",
    IndicatorKind.MOV_AVG_OF_PRICE: "MovAvgOfPrice",
    IndicatorKind.MOV_AVG_OF_RETURN: "MovAvgOfReturn",
    IndicatorKind.EXP_MOV_AVG_OF_PRICE: "ExpMovAvgOfPrice",
    IndicatorKind.RSI: "RSI",
}


def indicator_label(kind: IndicatorKind, period: Optional[int] = None) -> str:
    """Human-readable name such as 'MovAvgOfPrice(200)'."""
    if kind is IndicatorKind.CURRENT_PRICE or period is None:
        return LABELS[kind]
    return f"{LABELS[kind]}({period})"


def _of_returns(outer: Indicator, period: int, kind: IndicatorKind) -> Indicator:
    """Apply `outer` to per-bar returns (one-bar rate of change)."""
    return CompositeIndicator(outer, RateOfChange(1), name=indicator_label(kind, period))


# Factories for rolling indicators, keyed by kind
ROLLING_FACTORIES: Dict[IndicatorKind, Callable[[int], Indicator]] = {
    IndicatorKind.MOV_AVG_OF_PRICE: lambda p: SimpleMovingAverage(
        p, name=indicator_label(IndicatorKind.MOV_AVG_OF_PRICE, p)
    ),
    IndicatorKind.EXP_MOV_AVG_OF_PRICE: lambda p: ExponentialMovingAverage(
        p, name=indicator_label(IndicatorKind.EXP_MOV_AVG_OF_PRICE, p)
    ),
    IndicatorKind.STD_DEV_OF_PRICE: lambda p: StandardDeviation(
        p, name=indicator_label(IndicatorKind.STD_DEV_OF_PRICE, p)
    ),
    IndicatorKind.RSI: lambda p: RelativeStrengthIndex(
        p, name=indicator_label(IndicatorKind.RSI, p)
    ),
    IndicatorKind.MOV_AVG_OF_RETURN: lambda p: _of_returns(
        SimpleMovingAverage(p), p, IndicatorKind.MOV_AVG_OF_RETURN
    ),
    IndicatorKind.STD_DEV_OF_RETURN: lambda p: _of_returns(
        StandardDeviation(p), p, IndicatorKind.STD_DEV_OF_RETURN
    ),
}


def validate_periods(periods: Iterable[int]) -> List[int]:
    """Return the sorted distinct periods, failing on empty or non-positive input."""
    unique = sorted(set(int(p) for p in periods))
    if not unique:
        raise ConfigurationError("At least one lookback period is required")
    if unique[0] < 1:
        raise ConfigurationError(f"Lookback periods must be >= 1, got {unique[0]}")
    return unique


class IndicatorSet:
    """One instance of each rolling statistic for each configured period."""

    def __init__(self, periods: Iterable[int]):
        self.periods = validate_periods(periods)
        self._indicators: Dict[IndicatorKey, Indicator] = {}
        for period in self.periods:
            for kind, factory in ROLLING_FACTORIES.items():
                self._indicators[(kind, period)] = factory(period)

    def update(self, close: float) -> None:
        for indicator in self._indicators.values():
            indicator.update(close)

    def get(self, kind: IndicatorKind, period: int) -> Indicator:
        """
        Look up the indicator for (kind, period).

        Raises:
            ConfigurationError: If the pair was not configured
        """
        try:
            return self._indicators[(kind, period)]
        except KeyError:
            raise ConfigurationError(
                f"{indicator_label(kind, period)} is not configured "
                f"(configured periods: {self.periods})"
            ) from None

    def keys(self) -> List[IndicatorKey]:
        return list(self._indicators.keys())

    def __len__(self) -> int:
        return len(self._indicators)

    def reset(self) -> None:
        for indicator in self._indicators.values():
            indicator.reset()


class SymbolState:
    """
    Contains indicators and consolidation state for one symbol.

    Created when a ticker is added to a strategy, disposed when the strategy
    is torn down.
    """

    def __init__(self, symbol: str, periods: Iterable[int], consolidation_time: time):
        """
        Initialize symbol state.

        Args:
            symbol: Ticker symbol
            periods: All lookback periods to create indicators for
            consolidation_time: Time-of-day at which daily bars close
        """
        self.symbol = symbol
        self.indicators = IndicatorSet(periods)
        self.periods = self.indicators.periods
        self.history = PriceHistory(max(self.periods))
        self.consolidator = BarConsolidator(symbol, consolidation_time)
        self.last_bar: Optional[DailyBar] = None
        self.disposed = False

    @property
    def samples(self) -> int:
        """Number of daily bars recorded so far."""
        return self.history.samples

    def push(self, point: PricePoint) -> Optional[DailyBar]:
        """Feed one raw price; update indicators if it completed a bar."""
        bar = self.consolidator.push(point)
        if bar is not None:
            self.update(bar)
        return bar

    def scan(self, now: pd.Timestamp) -> Optional[DailyBar]:
        """Close the working bar if the clock passed its boundary."""
        bar = self.consolidator.scan(now)
        if bar is not None:
            self.update(bar)
        return bar

    def update(self, bar: DailyBar) -> None:
        """Record a consolidated bar: one history push, one indicator set update."""
        self.history.push(bar.close)
        self.indicators.update(bar.close)
        self.last_bar = bar

    def dispose(self) -> None:
        self.consolidator.reset()
        self.disposed = True
        logger.debug(f"{self.symbol}: symbol state disposed")

    # History statistics

    def _require(self, kind: IndicatorKind, period: int, required: int) -> None:
        if period < 1 or period > self.history.capacity:
            raise ConfigurationError(
                f"{indicator_label(kind, period)} window must be in "
                f"[1, {self.history.capacity}] for {self.symbol}"
            )
        if self.samples < required:
            raise WarmUpError(indicator_label(kind, period), self.samples, required, self.symbol)

    def current_price(self) -> float:
        """Latest consolidated close."""
        if self.samples < 1:
            raise WarmUpError(indicator_label(IndicatorKind.CURRENT_PRICE), 0, 1, self.symbol)
        return self.history[0]

    def cumulative_return(self, period: int) -> float:
        """
        Compounded return across the most recent `period` closes.

        Each adjacent pair of closes contributes one multiplicative factor;
        defined once period + 1 closes were recorded.
        """
        self._require(IndicatorKind.CUMULATIVE_RETURN, period, period + 1)
        closes = np.asarray(self.history.latest(period), dtype=float)
        ratios = closes[:-1] / closes[1:]
        return float(np.prod(ratios) - 1.0)

    def max_drawdown(self, period: int) -> float:
        """(min - max) / max over the most recent `period` closes."""
        self._require(IndicatorKind.MAX_DRAWDOWN, period, period)
        closes = self.history.latest(period)
        peak = max(closes)
        trough = min(closes)
        return (trough - peak) / peak

    # Rolling statistics

    def _rolling(self, kind: IndicatorKind, period: int) -> float:
        indicator = self.indicators.get(kind, period)
        try:
            return indicator.current
        except WarmUpError as e:
            raise WarmUpError(e.name, e.samples, e.required, self.symbol) from None

    def mov_avg_of_price(self, period: int) -> float:
        return self._rolling(IndicatorKind.MOV_AVG_OF_PRICE, period)

    def exp_mov_avg_of_price(self, period: int) -> float:
        return self._rolling(IndicatorKind.EXP_MOV_AVG_OF_PRICE, period)

    def std_dev_of_price(self, period: int) -> float:
        return self._rolling(IndicatorKind.STD_DEV_OF_PRICE, period)

    def mov_avg_of_return(self, period: int) -> float:
        return self._rolling(IndicatorKind.MOV_AVG_OF_RETURN, period)

    def std_dev_of_return(self, period: int) -> float:
        return self._rolling(IndicatorKind.STD_DEV_OF_RETURN, period)

    def rsi(self, period: int) -> float:
        return self._rolling(IndicatorKind.RSI, period)

    def value(self, kind: IndicatorKind, period: int) -> float:
        """
        Current value of any indicator kind.

        Raises:
            ConfigurationError: If the kind/period is not available
            WarmUpError: If the value is not defined yet
        """
        kind = IndicatorKind.coerce(kind)
        if kind is IndicatorKind.CURRENT_PRICE:
            return self.current_price()
        if kind is IndicatorKind.CUMULATIVE_RETURN:
            return self.cumulative_return(period)
        if kind is IndicatorKind.MAX_DRAWDOWN:
            return self.max_drawdown(period)
        return self._rolling(kind, period)

    def snapshot(self) -> Dict[str, Optional[float]]:
        """All configured values by label; None where not yet warmed up."""
        out: Dict[str, Optional[float]] = {}
        keys = [(IndicatorKind.CURRENT_PRICE, 1)]
        keys += [(kind, p) for p in self.periods
                 for kind in (IndicatorKind.CUMULATIVE_RETURN, IndicatorKind.MAX_DRAWDOWN)]
        keys += self.indicators.keys()
        for kind, period in keys:
            try:
                out[indicator_label(kind, period)] = self.value(kind, period)
            except WarmUpError:
                out[indicator_label(kind, period)] = None
        return out
