"""
Price feeds delivering raw prices per symbol.

A feed hands out one chronologically ordered stream of PricePoints per
subscribed symbol; merge_streams() interleaves several streams by time.
Every subscribe() must be paired with an unsubscribe().
"""
import heapq
import logging
from abc import ABC, abstractmethod
from datetime import time
from pathlib import Path
from typing import Dict, Iterator, Mapping, Optional, Set, Union

import pandas as pd

from .loader import DataLoader, DateLike
from ..shared.errors import ConfigurationError
from ..shared.types import PricePoint


logger = logging.getLogger(__name__)


class PriceFeed(ABC):
    """Source of raw price streams."""

    def __init__(self):
        self._subscriptions: Set[str] = set()

    @property
    def subscriptions(self) -> Set[str]:
        return set(self._subscriptions)

    def subscribe(
        self,
        symbol: str,
        start: Optional[DateLike] = None,
        end: Optional[DateLike] = None,
    ) -> Iterator[PricePoint]:
        """
        Subscribe to a symbol.

        Returns:
            Iterator of PricePoints in chronological order within [start, end]
        """
        prices = self.load_prices(symbol, start, end)
        self._subscriptions.add(symbol)
        logger.debug(f"Subscribed {symbol}: {len(prices)} prices")
        return self._iter_points(symbol, prices)

    def unsubscribe(self, symbol: str) -> None:
        if symbol not in self._subscriptions:
            logger.warning(f"Unsubscribe of {symbol} without an active subscription")
            return
        self._subscriptions.discard(symbol)
        logger.debug(f"Unsubscribed {symbol}")

    @abstractmethod
    def load_prices(
        self,
        symbol: str,
        start: Optional[DateLike],
        end: Optional[DateLike],
    ) -> pd.Series:
        """
        Load the raw price series for a symbol.

        Returns:
            Series of prices with a datetime index
        """
        pass

    @staticmethod
    def _iter_points(symbol: str, prices: pd.Series) -> Iterator[PricePoint]:
        for timestamp, price in prices.sort_index().items():
            if pd.isna(price):
                continue
            yield PricePoint(timestamp=pd.Timestamp(timestamp), price=float(price), symbol=symbol)


class DataFrameFeed(PriceFeed):
    """Feed over in-memory price series keyed by symbol."""

    def __init__(self, prices: Mapping[str, pd.Series]):
        super().__init__()
        self.prices: Dict[str, pd.Series] = dict(prices)

    def load_prices(self, symbol, start, end) -> pd.Series:
        if symbol not in self.prices:
            raise ConfigurationError(f"No prices available for {symbol}")
        series = self.prices[symbol].sort_index()
        if start is not None:
            series = series[series.index >= pd.Timestamp(start)]
        if end is not None:
            end_ts = pd.Timestamp(end)
            if end_ts == end_ts.normalize():
                end_ts += pd.Timedelta(days=1)
                series = series[series.index < end_ts]
            else:
                series = series[series.index <= end_ts]
        return series


class CsvPriceFeed(PriceFeed):
    """Feed over per-ticker CSV files ({data_dir}/{TICKER}.csv)."""

    def __init__(
        self,
        data_dir: Optional[Union[str, Path]] = None,
        column: str = "Close",
        bar_time: Optional[time] = None,
    ):
        """
        Initialize CSV feed.

        Args:
            data_dir: Directory with ticker CSV files (default: data/tickers)
            column: Price column to stream
            bar_time: Time-of-day stamped on daily rows (None keeps rows as-is)
        """
        super().__init__()
        self.data_dir = data_dir
        self.column = column
        self.bar_time = bar_time

    def load_prices(self, symbol, start, end) -> pd.Series:
        return DataLoader.from_ticker(
            symbol,
            data_dir=self.data_dir,
            start_date=start,
            end_date=end,
            column=self.column,
            bar_time=self.bar_time,
        )


def merge_streams(streams: Mapping[str, Iterator[PricePoint]]) -> Iterator[PricePoint]:
    """Interleave per-symbol streams by timestamp (ties keep subscription order)."""
    return heapq.merge(*streams.values(), key=lambda point: point.timestamp)
