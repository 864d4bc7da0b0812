"""
Declarative symphony strategies.

A symphony is a tree of allocation nodes loaded from a plain dict (usually
a YAML document):

    name: SPY trend
    rebalance: weekly
    start_date: 2007-04-10
    logic:
      if:
        condition:
          lhs: {ticker: SPY, indicator: current_price}
          op: ">"
          rhs: {ticker: SPY, indicator: mov_avg_of_price, window: 200}
        then:
          filter: {tickers: [SSO, QLD], by: cumulative_return, window: 30, select: top, count: 1}
        else:
          weights: {VTI: 0.6, BND: 0.4}

Node types: `weights`, `equal_weight`, `filter` and `if`. Tickers and
lookback periods are collected from the tree, so they never have to be
listed twice. Every name is validated when the tree is built.
"""
import operator
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Set

from .base import StrategyBase
from .filter_select import filter_tickers
from ..indicators.symbol_state import SymbolState, indicator_label
from ..scheduling.date_rules import DATE_RULES, ALIASES
from ..shared.defaults import DEFAULT_BUDGET
from ..shared.errors import ConfigurationError
from ..shared.types import IndicatorKind, Select, TargetWeight


States = Mapping[str, SymbolState]

COMPARISONS: Dict[str, Callable[[float, float], bool]] = {
    '>': operator.gt,
    '<': operator.lt,
    '>=': operator.ge,
    '<=': operator.le,
}


# Operands

class Operand(ABC):
    @abstractmethod
    def value(self, states: States) -> float:
        pass

    def tickers(self) -> Set[str]:
        return set()

    def periods(self) -> Set[int]:
        return set()


@dataclass
class Constant(Operand):
    number: float

    def value(self, states: States) -> float:
        return self.number

    def __str__(self) -> str:
        return f"{self.number:g}"


@dataclass
class IndicatorRef(Operand):
    """Current value of one indicator of one ticker."""
    ticker: str
    kind: IndicatorKind
    window: Optional[int] = None

    def value(self, states: States) -> float:
        if self.ticker not in states:
            raise ConfigurationError(f"No symbol data registered for {self.ticker}")
        return states[self.ticker].value(self.kind, self.window)

    def tickers(self) -> Set[str]:
        return {self.ticker}

    def periods(self) -> Set[int]:
        return {self.window} if self.window is not None else set()

    def __str__(self) -> str:
        return f"{self.ticker}.{indicator_label(self.kind, self.window)}"


@dataclass
class Condition:
    lhs: Operand
    op: str
    rhs: Operand

    def holds(self, states: States) -> bool:
        return COMPARISONS[self.op](self.lhs.value(states), self.rhs.value(states))

    def __str__(self) -> str:
        return f"{self.lhs} {self.op} {self.rhs}"


# Allocation nodes

class Node(ABC):
    """One node of the allocation tree."""

    @abstractmethod
    def evaluate(self, states: States, budget: float = DEFAULT_BUDGET) -> List[TargetWeight]:
        """Target weights of this subtree, sharing `budget`."""
        pass

    @abstractmethod
    def tickers(self) -> Set[str]:
        pass

    def periods(self) -> Set[int]:
        return set()


@dataclass
class WeightsNode(Node):
    """Static allocation; no indicator dependency."""
    weights: Dict[str, float]

    def evaluate(self, states, budget=DEFAULT_BUDGET):
        return StrategyBase.static_weights(self.weights, budget)

    def tickers(self):
        return set(self.weights)


@dataclass
class EqualWeightNode(Node):
    symbols: List[str]

    def evaluate(self, states, budget=DEFAULT_BUDGET):
        return StrategyBase.equal_weight(self.symbols, budget)

    def tickers(self):
        return set(self.symbols)


@dataclass
class FilterNode(Node):
    """Rank candidates by an indicator, then equally weight the selection."""
    candidates: List[str]
    by: IndicatorKind
    window: int
    select: Select
    count: int

    def evaluate(self, states, budget=DEFAULT_BUDGET):
        selected = filter_tickers(states, self.candidates, self.by, self.window, self.select, self.count)
        return StrategyBase.equal_weight(selected, budget)

    def tickers(self):
        return set(self.candidates)

    def periods(self):
        return {self.window}


@dataclass
class IfNode(Node):
    condition: Condition
    then: Node
    otherwise: Node

    def evaluate(self, states, budget=DEFAULT_BUDGET):
        branch = self.then if self.condition.holds(states) else self.otherwise
        return branch.evaluate(states, budget)

    def tickers(self):
        return (
            self.condition.lhs.tickers() | self.condition.rhs.tickers()
            | self.then.tickers() | self.otherwise.tickers()
        )

    def periods(self):
        return (
            self.condition.lhs.periods() | self.condition.rhs.periods()
            | self.then.periods() | self.otherwise.periods()
        )


# Parsing

def _require(raw: Mapping[str, Any], key: str, where: str) -> Any:
    if key not in raw:
        raise ConfigurationError(f"'{where}' is missing '{key}'")
    return raw[key]


def _ticker_list(raw: Any, where: str) -> List[str]:
    if isinstance(raw, str):
        raw = [raw]
    if not isinstance(raw, list) or not raw or not all(isinstance(t, str) and t for t in raw):
        raise ConfigurationError(f"'{where}' needs a non-empty list of tickers, got {raw!r}")
    return list(dict.fromkeys(raw))


def _window(raw: Any, where: str) -> int:
    if isinstance(raw, bool) or not isinstance(raw, int) or raw < 1:
        raise ConfigurationError(f"'{where}' window must be a positive integer, got {raw!r}")
    return raw


def parse_operand(raw: Any) -> Operand:
    """Build an operand from a number or {ticker, indicator, window}."""
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        return Constant(float(raw))
    if not isinstance(raw, Mapping):
        raise ConfigurationError(f"Operand must be a number or an indicator reference, got {raw!r}")

    ticker = _require(raw, 'ticker', 'operand')
    kind = IndicatorKind.coerce(_require(raw, 'indicator', 'operand'))
    if kind is IndicatorKind.CURRENT_PRICE:
        return IndicatorRef(ticker, kind)
    return IndicatorRef(ticker, kind, _window(_require(raw, 'window', 'operand'), 'operand'))


def parse_node(raw: Any) -> Node:
    """
    Build an allocation node from its dict form.

    Raises:
        ConfigurationError: If the node is malformed or names an unknown
            indicator, select mode or comparison
    """
    if not isinstance(raw, Mapping) or len(raw) != 1:
        raise ConfigurationError(
            f"Node must be a mapping with exactly one of "
            f"'weights', 'equal_weight', 'filter', 'if'; got {raw!r}"
        )
    (node_type, body), = raw.items()

    if node_type == 'weights':
        if not isinstance(body, Mapping) or not body:
            raise ConfigurationError(f"'weights' needs a mapping of ticker to weight, got {body!r}")
        try:
            weights = {str(t): float(w) for t, w in body.items()}
        except (TypeError, ValueError):
            raise ConfigurationError(f"'weights' values must be numbers, got {body!r}") from None
        # Validates sum and range once, at load time
        StrategyBase.static_weights(weights)
        return WeightsNode(weights)

    if node_type == 'equal_weight':
        return EqualWeightNode(_ticker_list(body, 'equal_weight'))

    if node_type == 'filter':
        if not isinstance(body, Mapping):
            raise ConfigurationError(f"'filter' must be a mapping, got {body!r}")
        candidates = _ticker_list(_require(body, 'tickers', 'filter'), 'filter')
        count = body.get('count', 1)
        if isinstance(count, bool) or not isinstance(count, int) or not 1 <= count <= len(candidates):
            raise ConfigurationError(
                f"'filter' count must be between 1 and {len(candidates)}, got {count!r}"
            )
        by = IndicatorKind.coerce(_require(body, 'by', 'filter'))
        if by is IndicatorKind.CURRENT_PRICE:
            window = body.get('window', 1)
        else:
            window = _require(body, 'window', 'filter')
        return FilterNode(
            candidates=candidates,
            by=by,
            window=_window(window, 'filter'),
            select=Select.coerce(body.get('select', 'top')),
            count=count,
        )

    if node_type == 'if':
        if not isinstance(body, Mapping):
            raise ConfigurationError(f"'if' must be a mapping, got {body!r}")
        cond = _require(body, 'condition', 'if')
        if not isinstance(cond, Mapping):
            raise ConfigurationError(f"'condition' must be a mapping, got {cond!r}")
        op = str(_require(cond, 'op', 'condition')).strip()
        if op not in COMPARISONS:
            raise ConfigurationError(f"Unknown comparison '{op}'. Available: {list(COMPARISONS)}")
        condition = Condition(
            lhs=parse_operand(_require(cond, 'lhs', 'condition')),
            op=op,
            rhs=parse_operand(_require(cond, 'rhs', 'condition')),
        )
        return IfNode(
            condition=condition,
            then=parse_node(_require(body, 'then', 'if')),
            otherwise=parse_node(_require(body, 'else', 'if')),
        )

    raise ConfigurationError(f"Unknown node type '{node_type}'")


class SymphonyStrategy(StrategyBase):
    """Strategy evaluating a declarative allocation tree."""

    def __init__(
        self,
        name: str,
        logic: Node,
        rebalance: str = "daily",
        start_date: Optional[Any] = None,
        tickers: Optional[List[str]] = None,
        periods: Optional[List[int]] = None,
    ):
        key = str(rebalance).strip().lower()
        key = ALIASES.get(key, key)
        if key not in DATE_RULES:
            raise ConfigurationError(
                f"Unknown rebalance frequency: {rebalance}. Available: {list(DATE_RULES.keys())}"
            )
        self.name = name
        self.rebalance = key
        self.start_date = None if start_date is None else str(start_date)
        self.logic = logic
        self._tickers = sorted(logic.tickers() | set(tickers or []))
        # Static-only trees still need one period for their symbol state
        self._periods = sorted(logic.periods() | set(periods or [])) or [1]
        super().__init__()

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "SymphonyStrategy":
        """
        Build a symphony from its dict form.

        Raises:
            ConfigurationError: If the document is malformed
        """
        if not isinstance(raw, Mapping):
            raise ConfigurationError(f"Symphony must be a mapping, got {type(raw).__name__}")
        return cls(
            name=str(raw.get('name', 'symphony')),
            logic=parse_node(_require(raw, 'logic', 'symphony')),
            rebalance=raw.get('rebalance', 'daily'),
            start_date=raw.get('start_date'),
            tickers=_ticker_list(raw['tickers'], 'tickers') if 'tickers' in raw else None,
            periods=[_window(p, 'periods') for p in raw.get('periods', [])],
        )

    @property
    def periods(self) -> List[int]:
        return list(self._periods)

    @property
    def tickers(self) -> List[str]:
        return list(self._tickers)

    def evaluate(self) -> List[TargetWeight]:
        return self.logic.evaluate(self.symbol_data)
