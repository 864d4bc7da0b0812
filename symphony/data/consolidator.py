"""
Daily bar consolidation anchored to a time-of-day boundary.

Turns a possibly sub-daily price stream into exactly one closing price per
trading day. A bar period starts at the consolidation time; a price whose
time-of-day falls before the consolidation time belongs to the period that
started the previous day. Only one session per day is assumed.
"""
import logging
from datetime import time
from typing import Optional

import pandas as pd

from ..shared.errors import FeedOrderError
from ..shared.types import DailyBar, PricePoint


logger = logging.getLogger(__name__)

BAR_PERIOD = pd.Timedelta(days=1)


class BarConsolidator:
    """
    Consolidates raw prices into daily closing bars for one symbol.

    The close of a bar is the last price observed in its period. A bar is
    emitted when the first price of the next period arrives (`push`) or when
    the clock passes the period end (`scan`).
    """

    def __init__(self, symbol: str, consolidation_time: time):
        """
        Initialize consolidator.

        Args:
            symbol: Ticker the prices belong to
            consolidation_time: Time-of-day at which a new bar period starts
        """
        self.symbol = symbol
        self.consolidation_time = consolidation_time
        self._offset = pd.Timedelta(
            hours=consolidation_time.hour,
            minutes=consolidation_time.minute,
            seconds=consolidation_time.second,
        )
        self._period_start: Optional[pd.Timestamp] = None
        self._close: Optional[float] = None
        self._close_time: Optional[pd.Timestamp] = None
        self._last_time: Optional[pd.Timestamp] = None

    def period_start(self, timestamp: pd.Timestamp) -> pd.Timestamp:
        """
        Compute the start of the bar period containing `timestamp`.

        The boundary always precedes the price it is bucketing: when the
        consolidation time on the price's calendar date is later than the
        price itself, the period started one day earlier.
        """
        start = timestamp.normalize() + self._offset
        if start > timestamp:
            start -= BAR_PERIOD
        return start

    @property
    def working_period_end(self) -> Optional[pd.Timestamp]:
        """End of the period currently being accumulated (None before the first price)."""
        if self._period_start is None:
            return None
        return self._period_start + BAR_PERIOD

    def push(self, point: PricePoint) -> Optional[DailyBar]:
        """
        Ingest one price.

        Returns:
            The previous period's bar when this price opens a new period, else None

        Raises:
            FeedOrderError: If the price is older than the latest price seen
        """
        timestamp = pd.Timestamp(point.timestamp)
        if self._last_time is not None and timestamp < self._last_time:
            raise FeedOrderError(
                f"{self.symbol}: price at {timestamp} arrived after {self._last_time}"
            )
        self._last_time = timestamp

        emitted = self.scan(timestamp)
        if self._period_start is None:
            self._period_start = self.period_start(timestamp)
        self._close = float(point.price)
        self._close_time = timestamp
        return emitted

    def scan(self, now: pd.Timestamp) -> Optional[DailyBar]:
        """
        Emit the working bar if `now` has reached its period end.

        Returns:
            The completed bar, or None if the working period is still open
        """
        end = self.working_period_end
        if end is None or pd.Timestamp(now) < end:
            return None

        bar = DailyBar(
            symbol=self.symbol,
            date=self._close_time.normalize(),
            close=self._close,
            end_time=end,
        )
        self._period_start = None
        self._close = None
        self._close_time = None
        logger.debug(f"{self.symbol}: consolidated bar {bar.date.date()} close={bar.close}")
        return bar

    def reset(self) -> None:
        self._period_start = None
        self._close = None
        self._close_time = None
        self._last_time = None
