"""
Tests for the trading calendar.
"""
import pandas as pd
import pytest

from symphony.scheduling.trading_calendar import TradingCalendar


@pytest.fixture
def calendar():
    return TradingCalendar.from_dates(pd.bdate_range('2024-01-01', '2024-03-29'))


class TestFixedCalendar:
    def test_trading_days_inclusive(self, calendar):
        days = calendar.trading_days('2024-01-05', '2024-01-09')
        assert list(days.strftime('%Y-%m-%d')) == ['2024-01-05', '2024-01-08', '2024-01-09']

    def test_is_trading_day(self, calendar):
        assert calendar.is_trading_day('2024-01-05')
        assert not calendar.is_trading_day('2024-01-06')

    def test_next_trading_day(self, calendar):
        assert calendar.next_trading_day('2024-01-06') == pd.Timestamp('2024-01-08')
        assert calendar.next_trading_day('2024-01-08') == pd.Timestamp('2024-01-08')
        assert calendar.next_trading_day('2024-06-01') is None

    def test_previous_trading_days(self, calendar):
        # Five trading days before Monday 2024-01-15 is Monday 2024-01-08
        assert calendar.previous_trading_days('2024-01-15', 5) == pd.Timestamp('2024-01-08')
        assert calendar.previous_trading_days('2024-01-15', 1) == pd.Timestamp('2024-01-12')

    def test_previous_trading_days_before_calendar(self, calendar):
        with pytest.raises(ValueError):
            calendar.previous_trading_days('2024-01-03', 5)


class TestExchangeCalendar:
    """NYSE sessions from pandas_market_calendars."""

    def test_holiday_skipped(self):
        nyse = TradingCalendar("NYSE")
        days = nyse.trading_days('2024-01-12', '2024-01-16')
        # 2024-01-15 is Martin Luther King Jr. Day
        assert list(days) == [pd.Timestamp('2024-01-12'), pd.Timestamp('2024-01-16')]
        assert days.tz is None

    def test_previous_trading_days(self):
        nyse = TradingCalendar("NYSE")
        assert nyse.previous_trading_days('2024-01-17', 2) == pd.Timestamp('2024-01-12')
