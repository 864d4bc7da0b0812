#!/usr/bin/env python3
"""
Indicator inspection CLI.

Prints the latest value of every indicator kind for each ticker, computed
from the daily closes in data/tickers/{TICKER}.csv.
"""
import sys
import argparse
from pathlib import Path

import pandas as pd

# Add project root to path
project_dir = Path(__file__).parent.parent
sys.path.insert(0, str(project_dir))

from symphony.data.loader import DataLoader, list_available_tickers
from symphony.indicators.technical import TechnicalIndicators
from symphony.shared.errors import ConfigurationError


def indicator_table(tickers, periods, data_dir=None, start_date=None, end_date=None) -> pd.DataFrame:
    """
    Latest indicator values, one column per ticker.

    Tickers without a data file are skipped with a message.
    """
    calculator = TechnicalIndicators()
    columns = {}
    for ticker in tickers:
        try:
            closes = DataLoader.from_ticker(
                ticker, data_dir=data_dir, start_date=start_date, end_date=end_date
            )
        except FileNotFoundError as e:
            print(f"  Skipping {ticker}: {e}")
            continue
        columns[ticker] = calculator.latest_values(closes, periods)
    return pd.DataFrame(columns)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description="Show the latest symphony indicator values per ticker",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python -m cli.indicators SPY QLD --periods 30 200
    python -m cli.indicators --all --end 2020-03-31
        """
    )
    parser.add_argument("tickers", nargs="*", help="Tickers to inspect")
    parser.add_argument("--all", "-a", action="store_true", help="Inspect every ticker in the data directory")
    parser.add_argument(
        "--periods", "-p",
        nargs="+",
        type=int,
        default=[14, 30, 200],
        help="Lookback periods (default: 14 30 200)",
    )
    parser.add_argument("--start", help="Ignore closes before this date")
    parser.add_argument("--end", help="Ignore closes after this date")
    parser.add_argument("--data-dir", help="Directory with {TICKER}.csv files (default: data/tickers)")

    args = parser.parse_args(argv)

    tickers = list_available_tickers(args.data_dir) if args.all else args.tickers
    if not tickers:
        parser.error("Give at least one ticker or --all")

    try:
        table = indicator_table(tickers, args.periods, args.data_dir, args.start, args.end)
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if table.empty:
        print("No data found")
        return 1

    with pd.option_context('display.max_rows', None, 'display.float_format', '{:.4f}'.format):
        print(table)
    return 0


if __name__ == "__main__":
    sys.exit(main())
