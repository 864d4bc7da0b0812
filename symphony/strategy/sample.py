"""
Sample strategy.

Holds the better of two leveraged funds over the last 30 days while SPY
trades above its 200-day moving average, and a 60/40 VTI/BND portfolio
otherwise.
"""
from typing import List

from .base import StrategyBase
from ..shared.types import IndicatorKind, Select, TargetWeight


class SampleStrategy(StrategyBase):
    """SPY trend filter switching between leveraged momentum and 60/40."""

    name = "sample"
    rebalance = "daily"
    start_date = "2007-04-10"

    @property
    def periods(self) -> List[int]:
        return [90, 200]

    @property
    def tickers(self) -> List[str]:
        return ["SPY", "SSO", "QLD", "VTI", "BND"]

    def evaluate(self) -> List[TargetWeight]:
        spy = self.symbol_data["SPY"]
        if spy.current_price() > spy.mov_avg_of_price(200):
            ticker = self.filter(["SSO", "QLD"], IndicatorKind.CUMULATIVE_RETURN, 30, Select.TOP, 1)
            return self.equal_weight(ticker)
        return self.static_weights({"VTI": 0.6, "BND": 0.4})
