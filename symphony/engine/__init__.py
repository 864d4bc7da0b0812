"""
Backtest engine module.

Provides:
- SymphonyAlgorithm: warm-up, scheduling and evaluation loop
- Allocation sinks (SimulatedPortfolio)
- Backtest results and performance summary
"""
from .allocation import AllocationSink, SimulatedPortfolio
from .results import BacktestResult, Evaluation, max_drawdown, total_return
from .algorithm import SymphonyAlgorithm

__all__ = [
    'AllocationSink',
    'SimulatedPortfolio',
    'BacktestResult',
    'Evaluation',
    'max_drawdown',
    'total_return',
    'SymphonyAlgorithm',
]
