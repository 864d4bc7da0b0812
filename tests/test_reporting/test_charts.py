"""
Tests for equity charts.
"""
import pandas as pd
import pytest

from symphony.engine.results import BacktestResult
from symphony.reporting.charts import plot_equity


def make_result(equity, benchmark=None):
    index = pd.bdate_range('2020-01-02', periods=len(equity))
    return BacktestResult(
        strategy_name='chart test',
        start_date=pd.Timestamp('2020-01-02'),
        end_date=pd.Timestamp('2020-01-31'),
        initial_capital=1000.0,
        equity=pd.Series(equity, index=index, dtype=float),
        benchmark=pd.Series(benchmark or [], index=index[:len(benchmark or [])], dtype=float),
        benchmark_ticker='SPY',
    )


def test_writes_png(tmp_path):
    result = make_result([1000, 1010, 990, 1030], [1000, 1005, 1000, 1010])
    path = plot_equity(result, tmp_path / "out" / "equity.png")
    assert path.exists()
    assert path.read_bytes()[:4] == b'\x89PNG'


def test_without_benchmark(tmp_path):
    path = plot_equity(make_result([1000, 1001]), str(tmp_path / "equity.png"), title="Custom")
    assert path.exists()


def test_empty_equity(tmp_path):
    with pytest.raises(ValueError, match="no equity curve"):
        plot_equity(make_result([]), tmp_path / "equity.png")
