"""Download historical prices for tickers from Yahoo Finance."""

import logging
import warnings
import pandas as pd
import yfinance as yf
from typing import Dict, Iterable, Optional, Union
from pathlib import Path

# Suppress yfinance's pandas deprecation warnings
warnings.filterwarnings('ignore', message='.*Timestamp.utcnow.*')

logger = logging.getLogger(__name__)

MODULE_DIR = Path(__file__).parent
DATA_DIR = MODULE_DIR.parent.parent / "data"  # Store data in project root /data
TICKERS_DIR = DATA_DIR / "tickers"

# Intervals Yahoo Finance serves; intraday history is limited to recent days
INTERVALS = ("1m", "2m", "5m", "15m", "30m", "60m", "90m", "1h", "1d")


def _fetch(ticker: str, start: str, interval: str) -> pd.DataFrame:
    df = yf.download(ticker, start=start, interval=interval, progress=False, auto_adjust=True)
    # Flatten multi-level columns if present (yfinance sometimes returns these)
    if isinstance(df.columns, pd.MultiIndex):
        df.columns = df.columns.get_level_values(0)
    return df


def download_ticker(
    ticker: str,
    data_dir: Optional[Union[str, Path]] = None,
    start_date: str = "2000-01-01",
    interval: str = "1d",
    force_refresh: bool = False,
) -> Optional[pd.DataFrame]:
    """
    Download prices for one ticker with cache reuse.

    Features:
    - Incremental updates: only downloads rows after the cached end
    - Full re-download when the cache does not cover the requested start

    Args:
        ticker: Yahoo Finance ticker symbol
        data_dir: Directory for {ticker}.csv (default: data/tickers)
        start_date: Start date for historical data
        interval: Bar interval (see INTERVALS)
        force_refresh: If True, re-download all data from scratch

    Returns:
        DataFrame with OHLCV data, or None if download failed
    """
    if interval not in INTERVALS:
        raise ValueError(f"Unknown interval '{interval}'. Available: {list(INTERVALS)}")

    directory = Path(data_dir) if data_dir is not None else TICKERS_DIR
    directory.mkdir(parents=True, exist_ok=True)
    csv_file = directory / f"{ticker}.csv"
    requested_start = pd.Timestamp(start_date)

    if csv_file.exists() and not force_refresh:
        try:
            df_cached = pd.read_csv(csv_file, index_col=0, parse_dates=True)
        except (OSError, ValueError) as e:
            logger.warning(f"{ticker}: error reading cache ({e}), re-downloading")
            df_cached = pd.DataFrame()

        if not df_cached.empty:
            if not isinstance(df_cached.index, pd.DatetimeIndex):
                df_cached.index = pd.to_datetime(df_cached.index, utc=True)
            cached_start = df_cached.index.min()
            cached_end = df_cached.index.max()
            if cached_start.tz is not None:
                requested_start = requested_start.tz_localize(cached_start.tz)

            if cached_start <= requested_start:
                update_start = (cached_end + pd.Timedelta(days=1)).strftime('%Y-%m-%d')
                logger.info(f"Updating {ticker} cache (last: {cached_end.date()})")
                try:
                    df_new = _fetch(ticker, update_start, interval)
                except Exception as e:
                    logger.error(f"{ticker}: error updating cache ({e}), using cached data")
                    return df_cached

                if df_new.empty:
                    logger.info(f"{ticker}: no new data available (market closed)")
                    return df_cached

                df = pd.concat([df_cached, df_new]).sort_index()
                df = df[~df.index.duplicated(keep='last')]
                df.to_csv(csv_file)
                logger.info(f"{ticker}: +{len(df_new)} rows, total {len(df)}")
                return df

            logger.info(
                f"{ticker}: cache start ({cached_start.date()}) after requested "
                f"({requested_start.date()}), re-downloading"
            )

    logger.info(f"Downloading {ticker} ({interval}) from {start_date}")
    try:
        df = _fetch(ticker, start_date, interval)
    except Exception as e:
        logger.error(f"Error downloading {ticker}: {e}")
        return None

    if df.empty:
        logger.warning(f"No data returned for {ticker}")
        return None

    df.to_csv(csv_file)
    logger.info(f"Saved {len(df)} rows to {csv_file} ({df.index.min()} to {df.index.max()})")
    return df


def download_tickers(
    tickers: Iterable[str],
    data_dir: Optional[Union[str, Path]] = None,
    start_date: str = "2000-01-01",
    interval: str = "1d",
    force_refresh: bool = False,
) -> Dict[str, pd.DataFrame]:
    """
    Download prices for several tickers.

    Returns:
        Dictionary mapping ticker to DataFrame (failed downloads are omitted)
    """
    results = {}
    for ticker in tickers:
        df = download_ticker(
            ticker,
            data_dir=data_dir,
            start_date=start_date,
            interval=interval,
            force_refresh=force_refresh,
        )
        if df is not None:
            results[ticker] = df
    return results
