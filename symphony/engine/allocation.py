"""
Allocation sinks receiving target weights from the engine.

The engine hands every evaluation's complete TargetWeight list plus a
liquidation flag to a sink. SimulatedPortfolio rebalances a cash and
share ledger at the last observed prices.
"""
import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Set

import pandas as pd

from ..shared.defaults import INITIAL_CAPITAL
from ..shared.errors import SymphonyError
from ..shared.types import TargetWeight


logger = logging.getLogger(__name__)

# Share counts below this are treated as flat
MIN_SHARES = 1e-9


class AllocationSink(ABC):
    """Receives target weights and performs rebalancing."""

    @property
    @abstractmethod
    def invested(self) -> Set[str]:
        """Symbols currently held."""
        pass

    @abstractmethod
    def set_holdings(
        self,
        targets: List[TargetWeight],
        liquidate_existing: bool,
        timestamp: Optional[pd.Timestamp] = None,
    ) -> None:
        """
        Rebalance to `targets`.

        Args:
            targets: Complete target weight list
            liquidate_existing: Sell holdings that are absent from `targets`
            timestamp: Evaluation time
        """
        pass

    def update_price(self, symbol: str, price: float) -> None:
        """Observe a raw price (no-op unless the sink values positions)."""
        pass

    @property
    def total_value(self) -> Optional[float]:
        """Portfolio value, or None if the sink does not track one."""
        return None


class SimulatedPortfolio(AllocationSink):
    """
    Cash plus fractional share positions, marked to the last observed price.

    No trading costs or slippage; every target is filled at the last price.
    """

    def __init__(self, initial_capital: float = INITIAL_CAPITAL):
        self.initial_capital = float(initial_capital)
        self.cash = float(initial_capital)
        self.positions: Dict[str, float] = {}
        self.prices: Dict[str, float] = {}
        self.trades = 0

    @property
    def invested(self) -> Set[str]:
        return {symbol for symbol, shares in self.positions.items() if abs(shares) > MIN_SHARES}

    def update_price(self, symbol: str, price: float) -> None:
        self.prices[symbol] = float(price)

    def position_value(self, symbol: str) -> float:
        shares = self.positions.get(symbol, 0.0)
        if shares == 0.0:
            return 0.0
        return shares * self._price(symbol)

    @property
    def holdings_value(self) -> float:
        return sum(self.position_value(symbol) for symbol in self.positions)

    @property
    def total_value(self) -> float:
        return self.cash + self.holdings_value

    def weights(self) -> Dict[str, float]:
        """Current weight of each held symbol."""
        total = self.total_value
        if total <= 0:
            return {}
        return {symbol: self.position_value(symbol) / total for symbol in sorted(self.invested)}

    def _price(self, symbol: str) -> float:
        if symbol not in self.prices:
            raise SymphonyError(f"No price observed for {symbol}")
        return self.prices[symbol]

    def _trade(self, symbol: str, target_shares: float) -> None:
        delta = target_shares - self.positions.get(symbol, 0.0)
        if abs(delta) <= MIN_SHARES:
            return
        self.cash -= delta * self._price(symbol)
        if abs(target_shares) <= MIN_SHARES:
            self.positions.pop(symbol, None)
        else:
            self.positions[symbol] = target_shares
        self.trades += 1

    def liquidate(self, symbol: str) -> None:
        self._trade(symbol, 0.0)

    def set_holdings(self, targets, liquidate_existing, timestamp=None):
        target_symbols = {target.ticker for target in targets}
        if liquidate_existing:
            for symbol in sorted(self.invested - target_symbols):
                logger.debug(f"Liquidating {symbol}")
                self.liquidate(symbol)

        total = self.total_value
        for target in targets:
            price = self._price(target.ticker)
            self._trade(target.ticker, target.weight * total / price)

        when = f"{timestamp.date()} " if timestamp is not None else ""
        logger.debug(f"{when}Rebalanced: value {total:,.2f}, cash {self.cash:,.2f}")
