"""
Reporting module.

Provides equity vs. benchmark charts for backtest results.
"""
from .charts import plot_equity

__all__ = ['plot_equity']
