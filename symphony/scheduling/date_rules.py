"""
Calendar rules mapping a date range to evaluation dates.

Every rule takes the trading days of the range and keeps the first trading
day of each grouping unit (none for Daily):

- 'daily' or 'D': every trading day
- 'weekly' or 'W': first trading day of each (ISO year, ISO week)
- 'monthly' or 'M': first trading day of each month
- 'quarterly' or 'Q': first trading day of each quarter
- 'yearly' or 'Y': first trading day of each year
"""
from abc import ABC, abstractmethod
from typing import Dict, List, Type

import numpy as np
import pandas as pd

from .trading_calendar import DateLike, TradingCalendar
from ..shared.errors import ConfigurationError


class CalendarRule(ABC):
    """Produces ordered, de-duplicated evaluation dates from a trading calendar."""

    name: str = ""

    def __init__(self, calendar: TradingCalendar):
        self.calendar = calendar

    def get_dates(self, start: DateLike, end: DateLike) -> pd.DatetimeIndex:
        """
        Evaluation dates in [start, end].

        Returns:
            Strictly increasing trading days, at most one per grouping unit
        """
        return self.select(self.calendar.trading_days(start, end))

    @abstractmethod
    def select(self, days: pd.DatetimeIndex) -> pd.DatetimeIndex:
        """Reduce an ordered index of trading days to evaluation dates."""
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.calendar.exchange})"


class DailyRule(CalendarRule):
    name = "daily"

    def select(self, days: pd.DatetimeIndex) -> pd.DatetimeIndex:
        return days


class GroupedRule(CalendarRule):
    """Keeps the first trading day of each group."""

    @abstractmethod
    def group_keys(self, days: pd.DatetimeIndex) -> List[np.ndarray]:
        """One array per key component, aligned with `days`."""
        pass

    def select(self, days: pd.DatetimeIndex) -> pd.DatetimeIndex:
        if len(days) == 0:
            return days
        keys = pd.MultiIndex.from_arrays(self.group_keys(days))
        return days[~keys.duplicated(keep='first')]


class WeeklyRule(GroupedRule):
    name = "weekly"

    def group_keys(self, days):
        # ISO year, not calendar year: Dec 30 can belong to week 1 of next year
        iso = days.isocalendar()
        return [iso['year'].to_numpy(dtype=int), iso['week'].to_numpy(dtype=int)]


class MonthlyRule(GroupedRule):
    name = "monthly"

    def group_keys(self, days):
        return [np.asarray(days.year), np.asarray(days.month)]


class QuarterlyRule(GroupedRule):
    name = "quarterly"

    def group_keys(self, days):
        return [np.asarray(days.year), np.asarray(days.quarter)]


class YearlyRule(GroupedRule):
    name = "yearly"

    def group_keys(self, days):
        return [np.asarray(days.year)]


DATE_RULES: Dict[str, Type[CalendarRule]] = {
    'daily': DailyRule,
    'weekly': WeeklyRule,
    'monthly': MonthlyRule,
    'quarterly': QuarterlyRule,
    'yearly': YearlyRule,
}

ALIASES = {'d': 'daily', 'w': 'weekly', 'm': 'monthly', 'q': 'quarterly', 'y': 'yearly'}


def get_date_rule(name: str, calendar: TradingCalendar) -> CalendarRule:
    """
    Get a calendar rule by name.

    Args:
        name: Rule name, case-insensitive ('daily'/'D', 'weekly'/'W', ...)
        calendar: Trading calendar the rule draws dates from

    Raises:
        ConfigurationError: If the name is not recognized
    """
    key = str(name).strip().lower()
    key = ALIASES.get(key, key)
    if key not in DATE_RULES:
        raise ConfigurationError(
            f"Unknown rebalance frequency: {name}. Available: {list(DATE_RULES.keys())}"
        )
    return DATE_RULES[key](calendar)
