"""
Shared types, errors and defaults for the symphony modules.
"""
from .types import (
    PricePoint,
    DailyBar,
    TargetWeight,
    IndicatorKind,
    FilterBy,
    Select,
)
from .errors import SymphonyError, ConfigurationError, WarmUpError, FeedOrderError
from .defaults import (
    CONSOLIDATION_TIME_OFFSET,
    DEFAULT_BUDGET,
    INITIAL_CAPITAL,
    BENCHMARK_TICKER,
    MARKET_TIMEZONE,
    EXCHANGE,
    WARMUP_EXTRA_DAYS,
)

__all__ = [
    'PricePoint',
    'DailyBar',
    'TargetWeight',
    'IndicatorKind',
    'FilterBy',
    'Select',
    'SymphonyError',
    'ConfigurationError',
    'WarmUpError',
    'FeedOrderError',
    'CONSOLIDATION_TIME_OFFSET',
    'DEFAULT_BUDGET',
    'INITIAL_CAPITAL',
    'BENCHMARK_TICKER',
    'MARKET_TIMEZONE',
    'EXCHANGE',
    'WARMUP_EXTRA_DAYS',
]
