"""
Fixed-capacity rolling window of daily closes.

Index 0 is the most recent close. Once the window is full, pushing a new
close evicts the oldest one.
"""
from collections import deque
from typing import Iterator, List

from ..shared.errors import ConfigurationError


class PriceHistory:
    """Ring buffer of closes ordered most recent first."""

    def __init__(self, capacity: int):
        if capacity < 1:
            raise ConfigurationError(f"PriceHistory capacity must be >= 1, got {capacity}")
        self.capacity = capacity
        self._closes: deque = deque(maxlen=capacity)
        # Total closes ever pushed (not capped by capacity)
        self.samples = 0

    def push(self, close: float) -> None:
        """Record a new close as the most recent entry."""
        self._closes.appendleft(float(close))
        self.samples += 1

    def __len__(self) -> int:
        return len(self._closes)

    def __getitem__(self, index: int) -> float:
        if index < 0 or index >= len(self._closes):
            raise IndexError(
                f"PriceHistory index {index} out of range (holds {len(self._closes)} closes)"
            )
        return self._closes[index]

    def __iter__(self) -> Iterator[float]:
        return iter(self._closes)

    @property
    def is_full(self) -> bool:
        return len(self._closes) == self.capacity

    def latest(self, count: int) -> List[float]:
        """Return the `count` most recent closes, most recent first."""
        if count > len(self._closes):
            raise IndexError(
                f"Requested {count} closes but PriceHistory holds {len(self._closes)}"
            )
        return [self._closes[i] for i in range(count)]

    def reset(self) -> None:
        self._closes.clear()
        self.samples = 0
