"""
Algorithm configuration.

Holds the settings the backtest host consumes: execution time-of-day,
consolidation offset, backtest window, capital, benchmark, timezone and
exchange. Validation runs at construction time (fail fast with clear errors).
"""
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Any, Optional

import pandas as pd
import pytz

from ..shared.defaults import (
    CONSOLIDATION_TIME_OFFSET,
    INITIAL_CAPITAL,
    BENCHMARK_TICKER,
    MARKET_TIMEZONE,
    EXCHANGE,
)
from ..shared.errors import ConfigurationError


def parse_time_of_day(value: Any) -> Optional[time]:
    """
    Parse 'HH:MM' or 'HH:MM:SS' into a time (time and None pass through).

    Raises:
        ConfigurationError: If the value is not a time of day
    """
    if value is None or isinstance(value, time):
        return value
    if isinstance(value, str):
        for fmt in ('%H:%M', '%H:%M:%S'):
            try:
                return datetime.strptime(value.strip(), fmt).time()
            except ValueError:
                continue
    # YAML reads unquoted 15:45 as the base-60 integer 945
    raise ConfigurationError(
        f"Invalid time of day {value!r}; use a quoted 'HH:MM' string"
    )


def _parse_date(value: Any, field_name: str) -> Optional[pd.Timestamp]:
    if value is None:
        return None
    try:
        return pd.Timestamp(value).normalize()
    except (TypeError, ValueError):
        raise ConfigurationError(f"{field_name} is not a date: {value!r}") from None


def _validate_config(
    *,
    execution_time: Optional[time],
    consolidation_offset_minutes: int,
    backtest_start_date: Optional[pd.Timestamp],
    backtest_end_date: Optional[pd.Timestamp],
    initial_capital: float,
    benchmark_ticker: str,
    timezone: str,
) -> None:
    """Validate algorithm settings. Raises ConfigurationError with clear message on failure."""
    if execution_time is None:
        raise ConfigurationError("Execution time must be set")
    if consolidation_offset_minutes < 0:
        raise ConfigurationError(
            f"consolidation_offset_minutes must be >= 0, got {consolidation_offset_minutes}"
        )
    minutes_of_day = execution_time.hour * 60 + execution_time.minute
    if consolidation_offset_minutes > minutes_of_day:
        raise ConfigurationError(
            f"Consolidation offset ({consolidation_offset_minutes} min) reaches before "
            f"midnight of execution time {execution_time}"
        )
    if (backtest_start_date is not None and backtest_end_date is not None
            and backtest_end_date < backtest_start_date):
        raise ConfigurationError(
            f"Backtest end ({backtest_end_date.date()}) is before start ({backtest_start_date.date()})"
        )
    if initial_capital <= 0:
        raise ConfigurationError(f"initial_capital must be > 0, got {initial_capital}")
    if not benchmark_ticker:
        raise ConfigurationError("benchmark_ticker must be non-empty")
    try:
        pytz.timezone(timezone)
    except pytz.UnknownTimeZoneError:
        raise ConfigurationError(f"Unknown timezone: {timezone}") from None


@dataclass
class AlgorithmConfig:
    """Configuration for a backtest run."""

    execution_time: Optional[time]  # Time of day the strategy is evaluated (required)
    consolidation_offset_minutes: int = CONSOLIDATION_TIME_OFFSET  # Bars close this long before execution
    backtest_start_date: Optional[Any] = None  # None = strategy's declared start date
    backtest_end_date: Optional[Any] = None  # None = today
    initial_capital: float = INITIAL_CAPITAL
    benchmark_ticker: str = BENCHMARK_TICKER
    timezone: str = MARKET_TIMEZONE
    exchange: str = EXCHANGE

    def __post_init__(self) -> None:
        self.execution_time = parse_time_of_day(self.execution_time)
        self.backtest_start_date = _parse_date(self.backtest_start_date, 'backtest_start_date')
        self.backtest_end_date = _parse_date(self.backtest_end_date, 'backtest_end_date')
        self.initial_capital = float(self.initial_capital)
        _validate_config(
            execution_time=self.execution_time,
            consolidation_offset_minutes=self.consolidation_offset_minutes,
            backtest_start_date=self.backtest_start_date,
            backtest_end_date=self.backtest_end_date,
            initial_capital=self.initial_capital,
            benchmark_ticker=self.benchmark_ticker,
            timezone=self.timezone,
        )

    @property
    def consolidation_time(self) -> time:
        """Time of day at which daily bars close (execution time minus offset)."""
        anchor = datetime.combine(date(2000, 1, 1), self.execution_time)
        return (anchor - timedelta(minutes=self.consolidation_offset_minutes)).time()
