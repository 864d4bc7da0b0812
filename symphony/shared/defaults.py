"""
Centralized default values for the backtesting companion.

This is the single source of truth for engine and allocation defaults.
All modules should import from here to ensure consistency.
"""

# Minutes before execution time at which daily bars are consolidated
CONSOLIDATION_TIME_OFFSET = 1

# Total weight handed out by equal weighting (1.0 = fully invested)
DEFAULT_BUDGET = 1.0

# Simulated portfolio
INITIAL_CAPITAL = 10000.0
BENCHMARK_TICKER = "SPY"

# Market session
MARKET_TIMEZONE = "America/New_York"
EXCHANGE = "NYSE"

# Extra trading days of history requested on top of the largest lookback period.
# Return-based statistics difference adjacent closes and need period + 1 bars.
WARMUP_EXTRA_DAYS = 1
