"""
Strategy module.

Provides:
- Strategy capability and StrategyBase helpers (filter, equal weight, static weights)
- Filter/select ranking of candidate tickers
- Declarative symphony strategies loaded from YAML
- Sample strategy
- Algorithm configuration
"""
from .filter_select import rank_tickers, filter_tickers
from .base import Strategy, StrategyBase
from .symphony import SymphonyStrategy, parse_node, parse_operand
from .sample import SampleStrategy
from .config import AlgorithmConfig, parse_time_of_day
from .config_loader import load_config_from_yaml, load_symphony_from_yaml, save_config_to_yaml

STRATEGIES = {
    SampleStrategy.name: SampleStrategy,
}

__all__ = [
    'rank_tickers',
    'filter_tickers',
    'Strategy',
    'StrategyBase',
    'SymphonyStrategy',
    'parse_node',
    'parse_operand',
    'SampleStrategy',
    'STRATEGIES',
    'AlgorithmConfig',
    'parse_time_of_day',
    'load_config_from_yaml',
    'load_symphony_from_yaml',
    'save_config_to_yaml',
]
