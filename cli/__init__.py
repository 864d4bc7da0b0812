"""
Command-line entry points.

Provides command-line interfaces for:
- Backtesting strategies and symphonies
- Indicator inspection
- Data download
"""
