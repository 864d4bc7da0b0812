"""
Charts for backtest results.

Draws the strategy equity curve against the benchmark, scaled to the same
initial capital, plus the drawdown of both.
"""
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
import matplotlib.dates as mdates
from pathlib import Path
from typing import Optional, Union

from ..engine.results import BacktestResult


def _drawdown(values):
    peak = values.cummax()
    return (values - peak) / peak * 100


def plot_equity(
    result: BacktestResult,
    output_path: Union[str, Path],
    title: Optional[str] = None,
    figsize: tuple = (12, 8),
) -> Path:
    """
    Plot strategy equity vs. benchmark.

    Args:
        result: Backtest result with equity and benchmark curves
        output_path: PNG file to write
        title: Chart title (default: strategy name and window)
        figsize: Figure size (width, height)

    Returns:
        Path to saved chart

    Raises:
        ValueError: If the result has no equity curve
    """
    if result.equity.empty:
        raise ValueError("Backtest result has no equity curve to plot")

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    if title is None:
        title = (
            f"{result.strategy_name}: "
            f"{result.start_date.strftime('%Y-%m-%d')} to {result.end_date.strftime('%Y-%m-%d')}"
        )

    fig, (ax1, ax2) = plt.subplots(
        2, 1, figsize=figsize, sharex=True, gridspec_kw={'height_ratios': [3, 1]}
    )

    ax1.plot(result.equity.index, result.equity.values, label='Strategy Equity', linewidth=2)
    if not result.benchmark.empty:
        label = f"Benchmark ({result.benchmark_ticker})" if result.benchmark_ticker else 'Benchmark'
        ax1.plot(result.benchmark.index, result.benchmark.values, label=label,
                 linewidth=1.5, alpha=0.8)
    ax1.set_title(title, fontsize=14, fontweight='bold')
    ax1.set_ylabel('Portfolio Value', fontsize=12)
    ax1.legend(loc='best')
    ax1.grid(True, alpha=0.3)

    ax2.fill_between(result.equity.index, _drawdown(result.equity).values, 0,
                     alpha=0.4, color='indianred', label='Strategy')
    if not result.benchmark.empty:
        ax2.plot(result.benchmark.index, _drawdown(result.benchmark).values,
                 linewidth=1, color='gray', label='Benchmark')
    ax2.set_ylabel('Drawdown (%)', fontsize=12)
    ax2.set_xlabel('Date', fontsize=12)
    ax2.grid(True, alpha=0.3)

    ax2.xaxis.set_major_formatter(mdates.DateFormatter('%Y-%m-%d'))
    ax2.xaxis.set_major_locator(mdates.AutoDateLocator())
    plt.xticks(rotation=45)

    plt.tight_layout()
    plt.savefig(output_path, dpi=150, bbox_inches='tight')
    plt.close(fig)

    return output_path
