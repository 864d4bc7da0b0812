"""
Shared types for the symphony modules.

This module consolidates the value types passed between the consolidator,
the indicator set, the filter/select engine and the allocation sink, plus
the enums that name indicator kinds and select modes.
"""
import pandas as pd
from dataclasses import dataclass
from enum import Enum
from typing import Union

from .errors import ConfigurationError


class IndicatorKind(Enum):
    """Statistic that can be computed for a symbol (also the filter function)."""
    CURRENT_PRICE = "current_price"
    CUMULATIVE_RETURN = "cumulative_return"
    STD_DEV_OF_PRICE = "std_dev_of_price"
    STD_DEV_OF_RETURN = "std_dev_of_return"
    MAX_DRAWDOWN = "max_drawdown"
    MOV_AVG_OF_PRICE = "mov_avg_of_price"
    MOV_AVG_OF_RETURN = "mov_avg_of_return"
    EXP_MOV_AVG_OF_PRICE = "exp_mov_avg_of_price"
    RSI = "rsi"

    @classmethod
    def coerce(cls, value: Union[str, "IndicatorKind"]) -> "IndicatorKind":
        """
        Resolve an enum member from a member, value or name.

        Raises:
            ConfigurationError: If the value names no indicator kind
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip()
            for member in cls:
                if key.lower() == member.value or key.upper() == member.name:
                    return member
        raise ConfigurationError(f"Unrecognized filter function: {value!r}")


# The filter function of a filter/select call is one indicator kind
FilterBy = IndicatorKind


class Select(Enum):
    """Which end of the ranking a filter/select call keeps."""
    TOP = "top"
    BOTTOM = "bottom"

    @classmethod
    def coerce(cls, value: Union[str, "Select"]) -> "Select":
        """
        Resolve an enum member from a member, value or name.

        Raises:
            ConfigurationError: If the value names no select mode
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().lower()
            for member in cls:
                if key == member.value:
                    return member
        raise ConfigurationError(f"Unrecognized select function: {value!r}")


@dataclass(frozen=True)
class PricePoint:
    """A single raw price from the feed."""
    timestamp: pd.Timestamp
    price: float
    symbol: str = ""


@dataclass(frozen=True)
class DailyBar:
    """
    One consolidated closing price per symbol per trading day.

    `date` is the trading day of the last price in the period; `end_time` is
    the consolidation boundary that closed the period.
    """
    symbol: str
    date: pd.Timestamp
    close: float
    end_time: pd.Timestamp


@dataclass(frozen=True)
class TargetWeight:
    """Fraction of portfolio value to allocate to one ticker."""
    ticker: str
    weight: float

    def __post_init__(self) -> None:
        if not self.ticker:
            raise ConfigurationError("TargetWeight ticker must be non-empty")
        if not (0.0 <= self.weight <= 1.0):
            raise ConfigurationError(
                f"TargetWeight for {self.ticker} must be in [0, 1], got {self.weight}"
            )
