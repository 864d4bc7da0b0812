"""
Symphony backtesting companion.

Translates a declarative trading symphony (tickers, lookback periods,
filter/select rules, rebalance calendar) into target portfolio weights:
- Daily bar consolidation from raw price streams
- Rolling indicator maintenance per symbol and lookback period
- Filter/select ranking and equal-weight allocation
- Calendar-driven evaluation and simulated rebalancing
"""
__version__ = "1.0.0"
