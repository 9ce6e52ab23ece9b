"""Configuration management for calmtrack."""

import logging
import math
import secrets
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .logging_setup import get_logger


class AnalysisConfig(BaseModel):
    """Analysis cycle configuration."""

    window_s: float = Field(default=60.0, gt=0)
    interval_s: float = Field(default=2.0, gt=0)
    retention_factor: float = Field(default=2.0, ge=1)
    confidence_saturation: int = Field(default=100, gt=0)
    trend_threshold: int = Field(default=5, ge=0)

    @property
    def retention_s(self) -> float:
        """Age ceiling for buffered samples."""
        return self.window_s * self.retention_factor


class BufferConfig(BaseModel):
    """Sample buffer capacities."""

    pointer_capacity: int = Field(default=100, gt=0)
    scroll_capacity: int = Field(default=50, gt=0)


class WeightsConfig(BaseModel):
    """Composite score weights per sub-metric."""

    typing: float = Field(default=0.3, ge=0)
    pointer: float = Field(default=0.3, ge=0)
    scroll: float = Field(default=0.3, ge=0)
    focus: float = Field(default=0.1, ge=0)

    @model_validator(mode="after")
    def validate_total(self) -> "WeightsConfig":
        """Weights must form a convex combination."""
        total = self.typing + self.pointer + self.scroll + self.focus
        if not math.isclose(total, 1.0, abs_tol=1e-6):
            raise ValueError(f"weights must sum to 1.0, got {total:.4f}")
        return self


class PynputConfig(BaseModel):
    """OS-level event source configuration."""

    scroll_step_px: int = Field(default=120, gt=0)


class HashingConfig(BaseModel):
    """Hashing configuration."""

    salt: str = Field(default_factory=lambda: secrets.token_hex(32))


class LoggingConfig(BaseModel):
    """Logging configuration."""

    console_level: str = "INFO"
    file_level: str = "DEBUG"
    log_dir: Optional[str] = None

    @field_validator("console_level", "file_level")
    @classmethod
    def validate_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level: {value}")
        return level


class Config(BaseModel):
    """Main configuration class."""

    analysis: AnalysisConfig = Field(default_factory=AnalysisConfig)
    buffers: BufferConfig = Field(default_factory=BufferConfig)
    weights: WeightsConfig = Field(default_factory=WeightsConfig)
    pynput: PynputConfig = Field(default_factory=PynputConfig)
    hashing: HashingConfig = Field(default_factory=HashingConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def get_config_path(cls) -> Path:
        """Get the configuration file path."""
        return Path("./calmtrack_data/config.yaml").resolve()

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary for YAML serialization."""
        return self.model_dump()

    def to_yaml(self) -> str:
        """Convert config to YAML string."""
        return yaml.dump(self.to_dict(), default_flow_style=False, sort_keys=False)

    @classmethod
    def from_yaml_file(cls, config_path: Path) -> "Config":
        """Load configuration from YAML file."""
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        return cls(**data)

    def save_to_yaml_file(self, config_path: Path) -> None:
        """Save configuration to YAML file."""
        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, "w", encoding="utf-8") as f:
            f.write(self.to_yaml())


def load_config(config_path: Optional[Path] = None) -> Config:
    """Load configuration from file or create with defaults."""
    if config_path is None:
        config_path = Config.get_config_path()

    if config_path.exists():
        try:
            return Config.from_yaml_file(config_path)
        except Exception as e:
            # Corrupted file, fall back to defaults without overwriting it
            get_logger("config").warning(
                f"Failed to load config from {config_path}: {e}; using defaults"
            )
            return Config()

    config = Config()
    config.save_to_yaml_file(config_path)

    return config
