"""
Error taxonomy for the backtesting companion.

- Configuration errors fail at setup or call time, never silently defaulted.
- Warm-up errors fail an indicator read made before its window is filled.
- Feed ordering errors reject out-of-order prices at ingestion.

Nothing is retried internally; all errors propagate to the orchestrating caller.
"""
from typing import Optional


class SymphonyError(Exception):
    """Base class for all symphony errors."""
    pass


class ConfigurationError(SymphonyError, ValueError):
    """Raised when a strategy, indicator or algorithm setting is invalid."""
    pass


class WarmUpError(SymphonyError):
    """Raised when an indicator is read before enough bars were recorded."""

    def __init__(
        self,
        name: str,
        samples: int,
        required: int,
        symbol: Optional[str] = None,
    ):
        self.name = name
        self.samples = samples
        self.required = required
        self.symbol = symbol
        where = f" for {symbol}" if symbol else ""
        super().__init__(
            f"{name}{where} is not warmed up: {samples} of {required} bars recorded"
        )


class FeedOrderError(SymphonyError, ValueError):
    """Raised when a price arrives with a timestamp earlier than the latest seen."""
    pass
