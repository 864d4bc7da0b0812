#!/usr/bin/env python3
"""
Backtest CLI.

Runs a strategy (built-in or declarative symphony YAML) over per-ticker
CSV data and prints the performance summary.

Usage:
    python -m cli.backtest --config configs/sample_symphony.yaml --symphony configs/sample_symphony.yaml
    python -m cli.backtest --strategy sample --execution-time 15:45 --start 2015-01-01
"""
import sys
import logging
import argparse
from dataclasses import replace
from pathlib import Path
from typing import Optional

# Add project root to path
project_dir = Path(__file__).parent.parent
sys.path.insert(0, str(project_dir))

from symphony.data.feed import CsvPriceFeed
from symphony.engine.algorithm import SymphonyAlgorithm
from symphony.reporting.charts import plot_equity
from symphony.shared.errors import SymphonyError
from symphony.strategy import STRATEGIES
from symphony.strategy.config import AlgorithmConfig, parse_time_of_day
from symphony.strategy.config_loader import load_config_from_yaml, load_symphony_from_yaml


def setup_logging(log_path: Optional[Path] = None, verbose: bool = False):
    """
    Setup logging to stdout and optionally to file.

    Args:
        log_path: Path to log file (None = stdout only)
        verbose: If True, use DEBUG level, otherwise INFO
    """
    level = logging.DEBUG if verbose else logging.INFO

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_path:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path)
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)


def build_config(args: argparse.Namespace) -> AlgorithmConfig:
    """Algorithm config from --config (if given) with command-line overrides."""
    overrides = {
        'execution_time': parse_time_of_day(args.execution_time) if args.execution_time else None,
        'backtest_start_date': args.start,
        'backtest_end_date': args.end,
        'initial_capital': args.capital,
        'benchmark_ticker': args.benchmark,
    }
    overrides = {key: value for key, value in overrides.items() if value is not None}

    if args.config:
        return replace(load_config_from_yaml(args.config), **overrides)
    overrides.setdefault('execution_time', None)
    return AlgorithmConfig(**overrides)


def build_strategy(args: argparse.Namespace):
    if args.symphony:
        return load_symphony_from_yaml(args.symphony)
    return STRATEGIES[args.strategy]()


def print_summary(result) -> None:
    summary = result.summary()
    print("\n" + "=" * 60)
    print("BACKTEST RESULTS")
    print("=" * 60)
    print(f"Strategy:          {result.strategy_name}")
    print(f"Period:            {result.start_date.date()} to {result.end_date.date()}")
    print(f"Evaluations:       {len(result.evaluations)}")
    print(f"Initial Capital:   {result.initial_capital:,.2f}")
    print(f"Final Value:       {summary['final_value']:,.2f}")
    print(f"Total Return:      {summary['total_return']:.2%}")
    print(f"Annualized Return: {summary['annualized_return']:.2%}")
    print(f"Max Drawdown:      {summary['max_drawdown']:.2%}")
    print(f"Sharpe Ratio:      {summary['sharpe_ratio']:.2f}")
    print(f"Benchmark Return:  {summary['benchmark_return']:.2%} ({result.benchmark_ticker})")
    if result.evaluations:
        last = result.evaluations[-1]
        holdings = ", ".join(f"{t.ticker} {t.weight:.1%}" for t in last.targets)
        print(f"Last Targets:      {holdings} ({last.timestamp.date()})")
    print("=" * 60)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description="Backtest a symphony strategy on daily ticker data",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Declarative symphony with algorithm settings from the same file
    python -m cli.backtest --config configs/sample_symphony.yaml --symphony configs/sample_symphony.yaml

    # Built-in sample strategy
    python -m cli.backtest --strategy sample --execution-time 15:45 --start 2015-01-01

    # Save equity chart
    python -m cli.backtest --strategy sample --execution-time 15:45 --plot results/sample.png
        """
    )
    parser.add_argument("--config", "-c", help="YAML file with an 'algorithm' section")
    parser.add_argument("--symphony", help="YAML file with a 'symphony' section")
    parser.add_argument(
        "--strategy", "-s",
        default="sample",
        choices=sorted(STRATEGIES.keys()),
        help="Built-in strategy (used when --symphony is not given)",
    )
    parser.add_argument("--execution-time", "-t", help="Evaluation time of day, HH:MM")
    parser.add_argument("--start", help="Backtest start date (default: strategy start)")
    parser.add_argument("--end", help="Backtest end date (default: today)")
    parser.add_argument("--capital", type=float, help="Initial capital")
    parser.add_argument("--benchmark", help="Benchmark ticker")
    parser.add_argument("--data-dir", help="Directory with {TICKER}.csv files (default: data/tickers)")
    parser.add_argument("--plot", help="Write equity vs. benchmark chart to this PNG file")
    parser.add_argument("--log", help="Also write the log to this file")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable DEBUG logging")

    args = parser.parse_args(argv)
    setup_logging(Path(args.log) if args.log else None, args.verbose)
    logger = logging.getLogger(__name__)

    try:
        config = build_config(args)
        strategy = build_strategy(args)
        algorithm = SymphonyAlgorithm(strategy, config, CsvPriceFeed(args.data_dir))
        result = algorithm.run()
    except (SymphonyError, FileNotFoundError) as e:
        logger.error(f"Backtest failed: {e}")
        return 1

    print_summary(result)
    if args.plot:
        output_path = plot_equity(result, args.plot)
        print(f"Chart saved to {output_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
