"""
Indicator calculation module.

Provides all symphony statistics:
- Incremental indicators updated once per consolidated bar
- Per-symbol state (history, indicator set, consolidator)
- Vectorized pandas calculations over a full close series

Every indicator raises WarmUpError when read before its window is filled.
"""
from .base import Indicator, CompositeIndicator
from .implementations import (
    SimpleMovingAverage,
    ExponentialMovingAverage,
    StandardDeviation,
    RateOfChange,
    RelativeStrengthIndex,
)
from .symbol_state import IndicatorSet, SymbolState, indicator_label, validate_periods
from .technical import TechnicalIndicators

__all__ = [
    'Indicator',
    'CompositeIndicator',
    'SimpleMovingAverage',
    'ExponentialMovingAverage',
    'StandardDeviation',
    'RateOfChange',
    'RelativeStrengthIndex',
    'IndicatorSet',
    'SymbolState',
    'indicator_label',
    'validate_periods',
    'TechnicalIndicators',
]
