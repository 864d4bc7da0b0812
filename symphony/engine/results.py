"""
Backtest results and performance summary.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import numpy as np
import pandas as pd

from ..shared.types import TargetWeight


@dataclass
class Evaluation:
    """Targets produced on one evaluation."""
    timestamp: pd.Timestamp
    targets: List[TargetWeight]
    liquidate: bool = False

    def as_dict(self) -> Dict[str, float]:
        return {target.ticker: target.weight for target in self.targets}


def max_drawdown(values: pd.Series) -> float:
    """Largest peak-to-trough decline as a negative fraction (0.0 if none)."""
    if values.empty:
        return 0.0
    peak = values.cummax()
    drawdown = (values - peak) / peak
    return float(drawdown.min())


def total_return(values: pd.Series) -> float:
    if len(values) < 2 or values.iloc[0] == 0:
        return 0.0
    return float(values.iloc[-1] / values.iloc[0] - 1.0)


def annualized_return(values: pd.Series, periods_per_year: int = 252) -> float:
    """Compound annual growth rate from a daily series."""
    if len(values) < 2 or values.iloc[0] <= 0:
        return 0.0
    years = (len(values) - 1) / periods_per_year
    return float((values.iloc[-1] / values.iloc[0]) ** (1.0 / years) - 1.0)


def sharpe_ratio(values: pd.Series, periods_per_year: int = 252) -> float:
    """Annualized Sharpe ratio of daily returns (zero risk-free rate)."""
    returns = values.pct_change().dropna()
    if len(returns) < 2:
        return 0.0
    std = returns.std(ddof=1)
    if std == 0 or np.isnan(std):
        return 0.0
    return float(returns.mean() / std * np.sqrt(periods_per_year))


@dataclass
class BacktestResult:
    """Results from a backtest run."""
    strategy_name: str
    start_date: pd.Timestamp
    end_date: pd.Timestamp
    initial_capital: float
    evaluations: List[Evaluation] = field(default_factory=list)
    equity: pd.Series = field(default_factory=lambda: pd.Series(dtype=float))  # Daily portfolio value
    benchmark: pd.Series = field(default_factory=lambda: pd.Series(dtype=float))  # Scaled to initial capital
    benchmark_ticker: Optional[str] = None

    @property
    def final_value(self) -> float:
        return float(self.equity.iloc[-1]) if not self.equity.empty else self.initial_capital

    def summary(self) -> Dict[str, float]:
        """Headline metrics of the equity curve and the benchmark."""
        return {
            'final_value': self.final_value,
            'total_return': total_return(self.equity),
            'annualized_return': annualized_return(self.equity),
            'max_drawdown': max_drawdown(self.equity),
            'sharpe_ratio': sharpe_ratio(self.equity),
            'benchmark_return': total_return(self.benchmark),
            'benchmark_max_drawdown': max_drawdown(self.benchmark),
            'evaluations': float(len(self.evaluations)),
        }

    def weights_frame(self) -> pd.DataFrame:
        """Target weights per evaluation (rows) and ticker (columns)."""
        if not self.evaluations:
            return pd.DataFrame()
        rows = [evaluation.as_dict() for evaluation in self.evaluations]
        index = pd.DatetimeIndex([evaluation.timestamp for evaluation in self.evaluations])
        return pd.DataFrame(rows, index=index).fillna(0.0)
