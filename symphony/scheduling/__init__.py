"""
Scheduling module.

Provides:
- Exchange trading calendar (pandas_market_calendars)
- Calendar rules: Daily, Weekly, Monthly, Quarterly, Yearly
- Simulated-clock scheduler firing evaluation callbacks
"""
from .trading_calendar import TradingCalendar
from .date_rules import (
    CalendarRule,
    DailyRule,
    WeeklyRule,
    MonthlyRule,
    QuarterlyRule,
    YearlyRule,
    DATE_RULES,
    get_date_rule,
)
from .scheduler import Scheduler, ScheduledEvent

__all__ = [
    'TradingCalendar',
    'CalendarRule',
    'DailyRule',
    'WeeklyRule',
    'MonthlyRule',
    'QuarterlyRule',
    'YearlyRule',
    'DATE_RULES',
    'get_date_rule',
    'Scheduler',
    'ScheduledEvent',
]
