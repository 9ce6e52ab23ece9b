"""Unit tests for configuration loading and validation."""

import pytest
import yaml
from pydantic import ValidationError

from calmtrack.config import (
    AnalysisConfig,
    BufferConfig,
    Config,
    LoggingConfig,
    WeightsConfig,
    load_config,
)


class TestDefaults:
    def test_analysis_defaults(self):
        analysis = Config().analysis

        assert analysis.window_s == 60.0
        assert analysis.interval_s == 2.0
        assert analysis.retention_s == 120.0
        assert analysis.confidence_saturation == 100
        assert analysis.trend_threshold == 5

    def test_buffer_defaults(self):
        buffers = Config().buffers

        assert buffers.pointer_capacity == 100
        assert buffers.scroll_capacity == 50

    def test_weight_defaults(self):
        weights = Config().weights

        assert (weights.typing, weights.pointer, weights.scroll, weights.focus) == (
            0.3,
            0.3,
            0.3,
            0.1,
        )

    def test_salt_is_random_hex(self):
        first, second = Config().hashing.salt, Config().hashing.salt

        assert first != second
        bytes.fromhex(first)


class TestValidation:
    def test_weights_must_sum_to_one(self):
        with pytest.raises(ValidationError, match="weights must sum to 1.0"):
            WeightsConfig(typing=0.5, pointer=0.5, scroll=0.5, focus=0.1)

    def test_negative_weight_rejected(self):
        with pytest.raises(ValidationError):
            WeightsConfig(typing=1.2, pointer=-0.2, scroll=0.0, focus=0.0)

    def test_non_positive_interval_rejected(self):
        with pytest.raises(ValidationError):
            AnalysisConfig(interval_s=0)

    def test_retention_shorter_than_window_rejected(self):
        with pytest.raises(ValidationError):
            AnalysisConfig(retention_factor=0.5)

    def test_zero_capacity_rejected(self):
        with pytest.raises(ValidationError):
            BufferConfig(pointer_capacity=0)


class TestYaml:
    def test_round_trip(self, tmp_path):
        path = tmp_path / "config.yaml"
        config = Config(analysis=AnalysisConfig(window_s=30.0, interval_s=1.0))

        config.save_to_yaml_file(path)
        loaded = Config.from_yaml_file(path)

        assert loaded.analysis.window_s == 30.0
        assert loaded.analysis.interval_s == 1.0
        assert loaded.hashing.salt == config.hashing.salt

    def test_partial_file_fills_defaults(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(yaml.dump({"buffers": {"pointer_capacity": 10}}), encoding="utf-8")

        loaded = Config.from_yaml_file(path)

        assert loaded.buffers.pointer_capacity == 10
        assert loaded.buffers.scroll_capacity == 50

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            Config.from_yaml_file(tmp_path / "absent.yaml")


class TestLoadConfig:
    def test_creates_file_with_defaults(self, tmp_path):
        path = tmp_path / "nested" / "config.yaml"

        config = load_config(path)

        assert path.exists()
        assert load_config(path).hashing.salt == config.hashing.salt

    def test_corrupt_file_falls_back_to_defaults(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("weights:\n  typing: 0.9\n", encoding="utf-8")

        config = load_config(path)

        assert config.weights.typing == 0.3
        # left untouched for the user to fix
        assert "0.9" in path.read_text(encoding="utf-8")


class TestLoggingConfig:
    def test_levels_normalized(self):
        config = LoggingConfig(console_level="warning", file_level="debug")

        assert (config.console_level, config.file_level) == ("WARNING", "DEBUG")

    def test_unknown_level_rejected(self):
        with pytest.raises(ValidationError, match="unknown log level"):
            LoggingConfig(console_level="LOUD")
