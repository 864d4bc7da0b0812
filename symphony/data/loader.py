"""
Price loader for per-ticker CSV files.

Loads data/tickers/{TICKER}.csv (datetime index, OHLCV columns) with:
- Date range filtering (end date covers the whole day for intraday files)
- Conversion of timezone-aware indexes to naive market-local time
- Optional restamping of daily rows to a fixed time-of-day
"""
import pandas as pd
from pathlib import Path
from typing import List, Optional, Union
from datetime import datetime, time

from .download import TICKERS_DIR
from ..shared.defaults import MARKET_TIMEZONE


DateLike = Union[str, datetime, pd.Timestamp]


def list_available_tickers(data_dir: Optional[Union[str, Path]] = None) -> List[str]:
    """Return sorted list of ticker symbols in `data_dir` (CSV stems). Empty if dir missing."""
    directory = Path(data_dir) if data_dir is not None else TICKERS_DIR
    if not directory.exists():
        return []
    return sorted(p.stem for p in directory.glob("*.csv"))


class DataLoader:
    """
    Loads price data from a CSV file.

    Supports date range filtering and daily or intraday resolution.
    """

    def __init__(self, data_path: Union[str, Path]):
        """
        Initialize the data loader.

        Args:
            data_path: Path to the CSV file containing the data
        """
        self.data_path = Path(data_path)
        if not self.data_path.exists():
            raise FileNotFoundError(f"Data file not found: {self.data_path}")

    def load(
        self,
        start_date: Optional[DateLike] = None,
        end_date: Optional[DateLike] = None,
        column: Optional[str] = "Close",
        bar_time: Optional[time] = None,
        timezone: str = MARKET_TIMEZONE,
    ) -> Union[pd.DataFrame, pd.Series]:
        """
        Load data from CSV file with optional filtering.

        Args:
            start_date: Start date for filtering (inclusive). If None, no start filter.
            end_date: End date for filtering (inclusive, whole day when given as a date).
            column: Return a Series for this column; None returns the full DataFrame.
            bar_time: If set, rows stamped at midnight are moved to this time-of-day.
            timezone: Market timezone used to convert timezone-aware indexes.

        Returns:
            DataFrame or Series with a naive datetime index in chronological order
        """
        df = pd.read_csv(self.data_path, index_col=0, parse_dates=True)

        if not isinstance(df.index, pd.DatetimeIndex):
            df.index = pd.to_datetime(df.index, utc=True)
        if df.index.tz is not None:
            df.index = df.index.tz_convert(timezone).tz_localize(None)

        df = df.sort_index()
        df = df[~df.index.duplicated(keep='last')]

        if bar_time is not None:
            midnight = df.index == df.index.normalize()
            offset = pd.Timedelta(hours=bar_time.hour, minutes=bar_time.minute, seconds=bar_time.second)
            df.index = df.index.where(~midnight, df.index + offset)

        if start_date is not None:
            df = df[df.index >= pd.Timestamp(start_date)]

        if end_date is not None:
            end_ts = pd.Timestamp(end_date)
            if end_ts == end_ts.normalize():
                df = df[df.index < end_ts + pd.Timedelta(days=1)]
            else:
                df = df[df.index <= end_ts]

        if column is not None:
            if column not in df.columns:
                raise ValueError(f"Column '{column}' not found. Available: {list(df.columns)}")
            return df[column].dropna().astype(float)

        return df

    @classmethod
    def from_ticker(
        cls,
        ticker: str,
        data_dir: Optional[Union[str, Path]] = None,
        start_date: Optional[DateLike] = None,
        end_date: Optional[DateLike] = None,
        column: Optional[str] = "Close",
        bar_time: Optional[time] = None,
    ) -> Union[pd.DataFrame, pd.Series]:
        """
        Load prices for a ticker from {data_dir}/{ticker}.csv.

        Args:
            ticker: Ticker symbol (e.g. SPY, BRK-B).
            data_dir: Directory holding the CSV files (default: data/tickers).
            start_date: Start date for filtering (inclusive).
            end_date: End date for filtering (inclusive).
            column: If specified, return Series for this column.
            bar_time: Time-of-day stamped on daily rows.

        Returns:
            DataFrame or Series with filtered data.
        """
        directory = Path(data_dir) if data_dir is not None else TICKERS_DIR
        path = directory / f"{ticker}.csv"
        if not path.exists():
            raise FileNotFoundError(
                f"Data file not found for ticker '{ticker}': {path}. "
                "Run `python -m cli.download TICKER` first."
            )
        return cls(path).load(
            start_date=start_date, end_date=end_date, column=column, bar_time=bar_time
        )
