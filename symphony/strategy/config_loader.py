"""
YAML configuration loader.

Loads the algorithm settings (`algorithm:` section) and the declarative
symphony (`symphony:` section) from YAML files, allowing strategies to be
shared and modified without code changes. Both sections may live in the
same file.
"""
import yaml
from pathlib import Path
from typing import Any, Dict, Union

from .config import AlgorithmConfig
from .symphony import SymphonyStrategy
from ..shared.defaults import *
from ..shared.errors import ConfigurationError


def _load_section(yaml_path: Union[str, Path], section: str) -> Dict[str, Any]:
    yaml_path = Path(yaml_path)

    if not yaml_path.exists():
        raise FileNotFoundError(f"Config file not found: {yaml_path}")

    with open(yaml_path, 'r') as f:
        try:
            config_dict = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {yaml_path}: {e}") from None

    if not config_dict:
        raise ConfigurationError(f"Empty config file: {yaml_path}")
    if not isinstance(config_dict, dict):
        raise ConfigurationError(f"Config file must contain a mapping: {yaml_path}")

    values = config_dict.get(section)
    if not isinstance(values, dict):
        raise ConfigurationError(f"Config file {yaml_path} has no '{section}' section")
    return values


def load_config_from_yaml(yaml_path: Union[str, Path]) -> AlgorithmConfig:
    """
    Load algorithm configuration from YAML file.

    Args:
        yaml_path: Path to YAML configuration file

    Returns:
        AlgorithmConfig object

    Raises:
        FileNotFoundError: If YAML file doesn't exist
        ConfigurationError: If YAML is invalid or missing required fields
    """
    algorithm = _load_section(yaml_path, 'algorithm')
    return AlgorithmConfig(
        execution_time=algorithm.get('execution_time'),
        consolidation_offset_minutes=algorithm.get('consolidation_offset_minutes', CONSOLIDATION_TIME_OFFSET),
        backtest_start_date=algorithm.get('start_date'),
        backtest_end_date=algorithm.get('end_date'),
        initial_capital=algorithm.get('initial_capital', INITIAL_CAPITAL),
        benchmark_ticker=algorithm.get('benchmark', BENCHMARK_TICKER),
        timezone=algorithm.get('timezone', MARKET_TIMEZONE),
        exchange=algorithm.get('exchange', EXCHANGE),
    )


def load_symphony_from_yaml(yaml_path: Union[str, Path]) -> SymphonyStrategy:
    """
    Load a declarative symphony from YAML file.

    Raises:
        FileNotFoundError: If YAML file doesn't exist
        ConfigurationError: If the symphony is malformed
    """
    symphony = _load_section(yaml_path, 'symphony')
    symphony.setdefault('name', Path(yaml_path).stem)
    return SymphonyStrategy.from_dict(symphony)


def save_config_to_yaml(config: AlgorithmConfig, yaml_path: Union[str, Path]):
    """
    Save algorithm configuration to YAML file (`algorithm:` section).

    Args:
        config: AlgorithmConfig object to save
        yaml_path: Path where to save YAML file
    """
    yaml_path = Path(yaml_path)

    config_dict = {
        'algorithm': {
            'execution_time': config.execution_time.strftime('%H:%M:%S'),
            'consolidation_offset_minutes': config.consolidation_offset_minutes,
            'start_date': (
                config.backtest_start_date.strftime('%Y-%m-%d')
                if config.backtest_start_date is not None else None
            ),
            'end_date': (
                config.backtest_end_date.strftime('%Y-%m-%d')
                if config.backtest_end_date is not None else None
            ),
            'initial_capital': config.initial_capital,
            'benchmark': config.benchmark_ticker,
            'timezone': config.timezone,
            'exchange': config.exchange,
        }
    }

    yaml_path.parent.mkdir(parents=True, exist_ok=True)
    with open(yaml_path, 'w') as f:
        yaml.dump(config_dict, f, default_flow_style=False, sort_keys=False)
