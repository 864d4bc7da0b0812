"""
Base indicator interface.

All indicators follow this pattern:
1. Receive one value per consolidated bar via update()
2. Maintain their rolling state incrementally
3. Expose the current value only once warmed up (reading earlier raises)
"""
from abc import ABC, abstractmethod
from typing import Optional

from ..shared.errors import WarmUpError


class Indicator(ABC):
    """
    Base class for all incremental indicators.

    Indicators are fed one value per bar and keep their own window. A value
    is defined once `samples >= warm_up_period`; before that, reading
    `current` raises WarmUpError instead of returning a default.
    """

    def __init__(self, name: str, period: int):
        self.name = name
        self.period = period
        self.samples = 0
        self._current: Optional[float] = None

    @property
    def warm_up_period(self) -> int:
        """Number of inputs required before the value is defined."""
        return self.period

    @property
    def is_ready(self) -> bool:
        return self.samples >= self.warm_up_period

    @property
    def current(self) -> float:
        """
        Current indicator value.

        Raises:
            WarmUpError: If fewer than warm_up_period inputs were seen
        """
        if not self.is_ready or self._current is None:
            raise WarmUpError(self.name, self.samples, self.warm_up_period)
        return self._current

    def update(self, value: float) -> bool:
        """
        Feed the next input value.

        Returns:
            True if the indicator is ready after this update
        """
        self.samples += 1
        self._current = self.compute_next(float(value))
        return self.is_ready

    @abstractmethod
    def compute_next(self, value: float) -> Optional[float]:
        """
        Update rolling state with `value` and return the new indicator value.

        Args:
            value: Next input value

        Returns:
            New value, or None if nothing can be computed yet
        """
        pass

    def reset(self) -> None:
        self.samples = 0
        self._current = None

    def of(self, inner: "Indicator") -> "CompositeIndicator":
        """Feed this indicator with the values of `inner` instead of raw inputs."""
        return CompositeIndicator(self, inner)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name}, samples={self.samples})"


class CompositeIndicator(Indicator):
    """
    Indicator applied to the output of another indicator.

    The outer indicator only receives a value once the inner one is ready,
    so the composite needs inner.warm_up_period + outer.warm_up_period - 1 inputs.
    """

    def __init__(self, outer: Indicator, inner: Indicator, name: Optional[str] = None):
        super().__init__(name or f"{outer.name} of {inner.name}", outer.period)
        self.outer = outer
        self.inner = inner

    @property
    def warm_up_period(self) -> int:
        return self.inner.warm_up_period + self.outer.warm_up_period - 1

    def compute_next(self, value: float) -> Optional[float]:
        if self.inner.update(value):
            self.outer.update(self.inner.current)
        return self.outer._current

    def reset(self) -> None:
        super().reset()
        self.inner.reset()
        self.outer.reset()
