"""
Tests for AlgorithmConfig and the YAML loaders.
"""
from datetime import time

import pandas as pd
import pytest

from symphony.shared.errors import ConfigurationError
from symphony.strategy.config import AlgorithmConfig, parse_time_of_day
from symphony.strategy.config_loader import (
    load_config_from_yaml,
    load_symphony_from_yaml,
    save_config_to_yaml,
)


class TestAlgorithmConfig:
    def test_defaults(self):
        config = AlgorithmConfig(execution_time="15:45")
        assert config.execution_time == time(15, 45)
        assert config.consolidation_time == time(15, 44)
        assert config.initial_capital == 10000.0
        assert config.benchmark_ticker == "SPY"
        assert config.timezone == "America/New_York"
        assert config.exchange == "NYSE"

    def test_consolidation_offset(self):
        config = AlgorithmConfig(execution_time=time(9, 31), consolidation_offset_minutes=30)
        assert config.consolidation_time == time(9, 1)

    def test_dates_normalized(self):
        config = AlgorithmConfig("15:45", backtest_start_date="2020-01-02 10:00", backtest_end_date="2020-06-30")
        assert config.backtest_start_date == pd.Timestamp("2020-01-02")
        assert config.backtest_end_date == pd.Timestamp("2020-06-30")

    def test_missing_execution_time(self):
        with pytest.raises(ConfigurationError, match="Execution time must be set"):
            AlgorithmConfig(execution_time=None)

    @pytest.mark.parametrize("kwargs", [
        {"consolidation_offset_minutes": -1},
        {"consolidation_offset_minutes": 24 * 60},
        {"backtest_start_date": "2021-01-01", "backtest_end_date": "2020-01-01"},
        {"initial_capital": 0},
        {"benchmark_ticker": ""},
        {"timezone": "Mars/Olympus_Mons"},
        {"backtest_start_date": "not a date"},
    ])
    def test_invalid_settings(self, kwargs):
        with pytest.raises(ConfigurationError):
            AlgorithmConfig(execution_time="15:45", **kwargs)


class TestParseTimeOfDay:
    def test_formats(self):
        assert parse_time_of_day("09:31") == time(9, 31)
        assert parse_time_of_day(" 15:45:30 ") == time(15, 45, 30)
        assert parse_time_of_day(time(10, 0)) == time(10, 0)
        assert parse_time_of_day(None) is None

    @pytest.mark.parametrize("value", [945, "quarter to four", "25:00"])
    def test_invalid(self, value):
        with pytest.raises(ConfigurationError):
            parse_time_of_day(value)


class TestYamlLoader:
    def test_round_trip(self, tmp_path):
        config = AlgorithmConfig(
            execution_time="10:00",
            consolidation_offset_minutes=5,
            backtest_start_date="2015-01-02",
            initial_capital=25000,
            benchmark_ticker="QQQ",
        )
        path = tmp_path / "nested" / "config.yaml"
        save_config_to_yaml(config, path)
        assert load_config_from_yaml(path) == config

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config_from_yaml(tmp_path / "missing.yaml")

    def test_unquoted_time_rejected(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("algorithm:\n  execution_time: 15:45\n")
        with pytest.raises(ConfigurationError, match="quoted"):
            load_config_from_yaml(path)

    @pytest.mark.parametrize("text", ["", "- a\n- b\n", "symphony: {}\n", "algorithm: [\n"])
    def test_bad_documents(self, tmp_path, text):
        path = tmp_path / "config.yaml"
        path.write_text(text)
        with pytest.raises(ConfigurationError):
            load_config_from_yaml(path)

    def test_symphony_name_defaults_to_file_stem(self, tmp_path):
        path = tmp_path / "sixty_forty.yaml"
        path.write_text(
            "algorithm:\n"
            "  execution_time: '15:45'\n"
            "symphony:\n"
            "  rebalance: monthly\n"
            "  logic:\n"
            "    weights: {VTI: 0.6, BND: 0.4}\n"
        )
        strategy = load_symphony_from_yaml(path)
        assert strategy.name == "sixty_forty"
        assert strategy.rebalance == "monthly"
        assert strategy.tickers == ["BND", "VTI"]
        assert load_config_from_yaml(path).execution_time == time(15, 45)

    def test_bundled_configs_load(self):
        from pathlib import Path

        configs = Path(__file__).parent.parent.parent / "configs"
        for path in sorted(configs.glob("*.yaml")):
            load_config_from_yaml(path)
            strategy = load_symphony_from_yaml(path)
            assert strategy.tickers
