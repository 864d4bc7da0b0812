"""
Ranking and selection of candidate tickers by one indicator.

All candidates are ranked from one descending sort: Top keeps the first
`count`, Bottom the last `count` (still in descending order). Equal values
keep their input order.
"""
from typing import Iterable, List, Mapping, Tuple, Union

from ..indicators.symbol_state import SymbolState
from ..shared.errors import ConfigurationError
from ..shared.types import IndicatorKind, Select


def rank_tickers(
    states: Mapping[str, SymbolState],
    tickers: Iterable[str],
    by: Union[IndicatorKind, str],
    window: int,
) -> List[Tuple[str, float]]:
    """
    Rank tickers by an indicator, highest value first.

    Args:
        states: SymbolState per ticker
        tickers: Candidate tickers (duplicates are ignored)
        by: Indicator kind to rank by
        window: Lookback window of the indicator

    Returns:
        List of (ticker, value), sorted descending

    Raises:
        ConfigurationError: If the candidate list is empty, the kind is unknown
            or a ticker has no registered state
        WarmUpError: If an indicator value is not defined yet
    """
    kind = IndicatorKind.coerce(by)
    candidates = list(dict.fromkeys(tickers))
    if not candidates:
        raise ConfigurationError("Cannot rank an empty candidate list")

    missing = [t for t in candidates if t not in states]
    if missing:
        raise ConfigurationError(f"No symbol data registered for {missing}")

    values = [(ticker, states[ticker].value(kind, window)) for ticker in candidates]
    # sorted() is stable with reverse=True
    return sorted(values, key=lambda item: item[1], reverse=True)


def filter_tickers(
    states: Mapping[str, SymbolState],
    tickers: Iterable[str],
    by: Union[IndicatorKind, str],
    window: int,
    select: Union[Select, str],
    count: int,
) -> List[str]:
    """
    Select `count` tickers ranked by an indicator.

    Args:
        states: SymbolState per ticker
        tickers: Candidate tickers
        by: Indicator kind to rank by
        window: Lookback window of the indicator
        select: Select.TOP (highest values) or Select.BOTTOM (lowest values)
        count: Number of tickers to keep (1 <= count <= number of candidates)

    Returns:
        Selected tickers in rank order
    """
    mode = Select.coerce(select)
    candidates = list(dict.fromkeys(tickers))
    if not 1 <= count <= len(candidates):
        raise ConfigurationError(
            f"Select count must be between 1 and {len(candidates)}, got {count}"
        )

    ranked = [ticker for ticker, _ in rank_tickers(states, candidates, by, window)]
    if mode is Select.TOP:
        return ranked[:count]
    return ranked[-count:]
