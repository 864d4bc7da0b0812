"""
Data loading and consolidation module.

Provides:
- Raw price feeds (CSV files, in-memory series)
- Daily bar consolidation anchored to a time-of-day boundary
- Fixed-capacity price history
- Yahoo Finance download with cache reuse
"""
from .history import PriceHistory
from .consolidator import BarConsolidator
from .loader import DataLoader, list_available_tickers
from .feed import PriceFeed, DataFrameFeed, CsvPriceFeed, merge_streams
from .download import download_ticker, download_tickers, TICKERS_DIR

__all__ = [
    'PriceHistory',
    'BarConsolidator',
    'DataLoader',
    'list_available_tickers',
    'PriceFeed',
    'DataFrameFeed',
    'CsvPriceFeed',
    'merge_streams',
    'download_ticker',
    'download_tickers',
    'TICKERS_DIR',
]
