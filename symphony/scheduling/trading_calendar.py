"""
Trading-day calendar.

Wraps an exchange calendar from pandas_market_calendars (NYSE by default)
or a fixed list of dates. All dates are naive, normalized Timestamps.
"""
import logging
from typing import Iterable, Optional, Union
from datetime import date, datetime

import pandas as pd
import pandas_market_calendars as mcal

from ..shared.defaults import EXCHANGE


logger = logging.getLogger(__name__)

DateLike = Union[str, date, datetime, pd.Timestamp]

# Calendar days fetched per trading day when looking backwards
LOOKBACK_SLACK = 1.6


def _normalize(days: pd.DatetimeIndex) -> pd.DatetimeIndex:
    days = pd.DatetimeIndex(days)
    if days.tz is not None:
        days = days.tz_localize(None)
    return days.normalize().unique().sort_values()


class TradingCalendar:
    """
    Ordered trading days of one exchange.

    Example:
        >>> cal = TradingCalendar("NYSE")
        >>> cal.trading_days("2024-01-12", "2024-01-16")
        DatetimeIndex(['2024-01-12', '2024-01-16'], dtype='datetime64[ns]', freq=None)
    """

    def __init__(self, exchange: str = EXCHANGE, days: Optional[Iterable[DateLike]] = None):
        """
        Initialize calendar.

        Args:
            exchange: pandas_market_calendars calendar name (e.g. NYSE, XNYS)
            days: Fixed trading days; when given, the exchange calendar is not used
        """
        self.exchange = exchange
        self._days: Optional[pd.DatetimeIndex] = None
        self._calendar = None
        if days is not None:
            self._days = _normalize(pd.to_datetime(list(days)))
        else:
            self._calendar = mcal.get_calendar(exchange)

    @classmethod
    def from_dates(cls, days: Iterable[DateLike], name: str = "custom") -> "TradingCalendar":
        """Calendar over an explicit list of trading days."""
        return cls(exchange=name, days=days)

    def trading_days(self, start: DateLike, end: DateLike) -> pd.DatetimeIndex:
        """
        Trading days in [start, end], in increasing order.

        Returns:
            Empty index when end is before start
        """
        start_ts = pd.Timestamp(start).normalize()
        end_ts = pd.Timestamp(end).normalize()
        if end_ts < start_ts:
            return pd.DatetimeIndex([])
        if self._days is not None:
            return self._days[(self._days >= start_ts) & (self._days <= end_ts)]
        return _normalize(self._calendar.valid_days(start_date=start_ts, end_date=end_ts))

    def is_trading_day(self, day: DateLike) -> bool:
        ts = pd.Timestamp(day).normalize()
        return len(self.trading_days(ts, ts)) == 1

    def next_trading_day(self, day: DateLike) -> Optional[pd.Timestamp]:
        """First trading day on or after `day` (None if the calendar has none)."""
        start = pd.Timestamp(day).normalize()
        if self._days is not None:
            later = self._days[self._days >= start]
            return later[0] if len(later) else None
        days = self.trading_days(start, start + pd.Timedelta(days=14))
        return days[0] if len(days) else None

    def previous_trading_days(self, day: DateLike, count: int) -> pd.Timestamp:
        """
        The trading day `count` trading days before `day`.

        Used to start warm-up subscriptions early enough that the indicators
        are defined on the first evaluation date.

        Raises:
            ValueError: If the calendar does not reach back that far
        """
        if count <= 0:
            return pd.Timestamp(day).normalize()
        end = pd.Timestamp(day).normalize() - pd.Timedelta(days=1)
        if self._days is not None:
            earlier = self._days[self._days <= end]
            if len(earlier) < count:
                raise ValueError(
                    f"Calendar '{self.exchange}' has only {len(earlier)} trading days before {day}"
                )
            return earlier[-count]

        span = int(count * LOOKBACK_SLACK) + 10
        for _ in range(5):
            earlier = self.trading_days(end - pd.Timedelta(days=span), end)
            if len(earlier) >= count:
                return earlier[-count]
            span *= 2
        raise ValueError(f"Could not find {count} trading days before {day} on {self.exchange}")
