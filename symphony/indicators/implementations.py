"""
Incremental indicator implementations following the Indicator interface.

Each class keeps only the state it needs to produce its next value from
one new input, so indicators can be updated bar by bar during a backtest.
"""
from collections import deque
from typing import List, Optional

import numpy as np

from .base import Indicator


class SimpleMovingAverage(Indicator):
    """Arithmetic mean of the last `period` inputs."""

    def __init__(self, period: int, name: Optional[str] = None):
        super().__init__(name or f"SMA({period})", period)
        self._window: deque = deque(maxlen=period)
        self._sum = 0.0

    def compute_next(self, value: float) -> Optional[float]:
        if len(self._window) == self.period:
            self._sum -= self._window[0]
        self._window.append(value)
        self._sum += value
        return self._sum / len(self._window)

    def reset(self) -> None:
        super().reset()
        self._window.clear()
        self._sum = 0.0


class ExponentialMovingAverage(Indicator):
    """
    Exponentially weighted moving average.

    Smoothing factor is 2 / (period + 1). The average is seeded with the
    first input and becomes ready after `period` inputs.
    """

    def __init__(self, period: int, name: Optional[str] = None):
        super().__init__(name or f"EMA({period})", period)
        self.k = 2.0 / (period + 1)

    def compute_next(self, value: float) -> Optional[float]:
        if self._current is None:
            return value
        return value * self.k + self._current * (1 - self.k)


class StandardDeviation(Indicator):
    """Population standard deviation of the last `period` inputs."""

    def __init__(self, period: int, name: Optional[str] = None):
        super().__init__(name or f"STD({period})", period)
        self._window: deque = deque(maxlen=period)

    def compute_next(self, value: float) -> Optional[float]:
        self._window.append(value)
        return float(np.std(np.fromiter(self._window, dtype=float), ddof=0))

    def reset(self) -> None:
        super().reset()
        self._window.clear()


class RateOfChange(Indicator):
    """
    Rate of change over `period` bars: (current - past) / past.

    Needs period + 1 inputs. A zero past value yields 0.0.
    """

    def __init__(self, period: int = 1, name: Optional[str] = None):
        super().__init__(name or f"ROC({period})", period)
        self._window: deque = deque(maxlen=period + 1)

    @property
    def warm_up_period(self) -> int:
        return self.period + 1

    def compute_next(self, value: float) -> Optional[float]:
        self._window.append(value)
        if len(self._window) <= self.period:
            return None
        past = self._window[0]
        if past == 0:
            return 0.0
        return (value - past) / past

    def reset(self) -> None:
        super().reset()
        self._window.clear()


class RelativeStrengthIndex(Indicator):
    """
    Relative Strength Index with Wilder smoothing.

    RSI = 100 - (100 / (1 + RS)), RS = average gain / average loss.
    The averages are seeded with the simple mean of the first period - 1
    price changes (one change for period 1), then smoothed as
    (average * (period - 1) + change) / period. Ready after `period`
    inputs. With no losses the RSI is 100 (50 when the price never moved).
    """

    def __init__(self, period: int, name: Optional[str] = None):
        super().__init__(name or f"RSI({period})", period)
        self._seed_size = max(period - 1, 1)
        self._previous: Optional[float] = None
        self._seed_gains: List[float] = []
        self._seed_losses: List[float] = []
        self._avg_gain: Optional[float] = None
        self._avg_loss: Optional[float] = None

    def compute_next(self, value: float) -> Optional[float]:
        previous, self._previous = self._previous, value
        if previous is None:
            return None

        change = value - previous
        gain = max(change, 0.0)
        loss = max(-change, 0.0)
        if self._avg_gain is None:
            self._seed_gains.append(gain)
            self._seed_losses.append(loss)
            if len(self._seed_gains) < self._seed_size:
                return None
            self._avg_gain = float(np.mean(self._seed_gains))
            self._avg_loss = float(np.mean(self._seed_losses))
        else:
            self._avg_gain = (self._avg_gain * (self.period - 1) + gain) / self.period
            self._avg_loss = (self._avg_loss * (self.period - 1) + loss) / self.period

        if self._avg_loss == 0:
            return 100.0 if self._avg_gain > 0 else 50.0
        rs = self._avg_gain / self._avg_loss
        return 100.0 - (100.0 / (1.0 + rs))

    def reset(self) -> None:
        super().reset()
        self._previous = None
        self._seed_gains = []
        self._seed_losses = []
        self._avg_gain = None
        self._avg_loss = None


# Export all indicator classes
__all__ = [
    'SimpleMovingAverage',
    'ExponentialMovingAverage',
    'StandardDeviation',
    'RateOfChange',
    'RelativeStrengthIndex',
]
