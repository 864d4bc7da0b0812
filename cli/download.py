#!/usr/bin/env python3
"""
Data download CLI.

Downloads historical prices from Yahoo Finance into data/tickers/{TICKER}.csv
and updates tickers that are already cached.
"""
import argparse
import sys
from pathlib import Path

# Add project root to path
project_dir = Path(__file__).parent.parent
sys.path.insert(0, str(project_dir))

from cli.backtest import setup_logging
from symphony.data.download import download_ticker, INTERVALS
from symphony.data.loader import list_available_tickers
from symphony.strategy import STRATEGIES


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description="Download historical ticker data",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Download specific tickers
    python -m cli.download SPY QLD SSO

    # Download every ticker a built-in strategy uses
    python -m cli.download --strategy sample

    # Update all cached tickers
    python -m cli.download

    # Force refresh (re-download)
    python -m cli.download --refresh SPY
        """
    )
    parser.add_argument("tickers", nargs="*", help="Tickers to download (default: update cached tickers)")
    parser.add_argument(
        "--strategy",
        choices=sorted(STRATEGIES.keys()),
        help="Download the tickers of a built-in strategy",
    )
    parser.add_argument(
        "--refresh", "-r",
        action="store_true",
        help="Force refresh (re-download even if cached)",
    )
    parser.add_argument(
        "--start-date", "-s",
        default="2000-01-01",
        help="Start date for historical data (default: 2000-01-01)",
    )
    parser.add_argument("--interval", "-i", default="1d", choices=INTERVALS, help="Bar interval (default: 1d)")
    parser.add_argument("--data-dir", help="Target directory (default: data/tickers)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable DEBUG logging")

    args = parser.parse_args(argv)
    setup_logging(verbose=args.verbose)

    tickers = list(args.tickers)
    if args.strategy:
        tickers += STRATEGIES[args.strategy]().tickers
    if not tickers:
        tickers = list_available_tickers(args.data_dir)
        if not tickers:
            print("No tickers given and none cached in the data directory")
            return 1
        print(f"Updating {len(tickers)} cached tickers...")

    tickers = list(dict.fromkeys(tickers))
    failed = []
    for ticker in tickers:
        df = download_ticker(
            ticker,
            data_dir=args.data_dir,
            start_date=args.start_date,
            interval=args.interval,
            force_refresh=args.refresh,
        )
        if df is None:
            failed.append(ticker)

    print(f"Downloaded {len(tickers) - len(failed)}/{len(tickers)} tickers")
    if failed:
        print(f"Failed: {', '.join(failed)}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
