"""
Configuration settings using Pydantic v2.

Supports loading from YAML files and environment variable overrides.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field


class AnalysisConfig(BaseModel):
    """Structure analysis parameters."""

    segment_confirm_gap: int = Field(
        default=2,
        description="Opposite breakout must be more than this many strokes past the candidate",
        ge=1,
        le=10,
    )
    event_mode: Literal["trend", "bos_only"] = Field(
        default="trend",
        description="BOS/CHOCH by trend memory ('trend') or BOS only ('bos_only')",
    )

    model_config = {
        "validate_assignment": True,
        "extra": "forbid",
    }


class DataConfig(BaseModel):
    """Bar data sources."""

    data_raw_dir: str = Field(default="data/raw", description="Local bar files directory")
    binance_base_url: str = Field(
        default="https://fapi.binance.com", description="Binance USDT-M futures REST endpoint"
    )
    binance_limit: int = Field(default=500, description="Bars per kline request", ge=1, le=1500)
    request_timeout: float = Field(default=10.0, description="HTTP timeout in seconds", gt=0)

    model_config = {
        "validate_assignment": True,
        "extra": "forbid",
    }


class StorageConfig(BaseModel):
    """Market snapshot storage."""

    snapshot_dir: str = Field(default="data/snapshots", description="Snapshot directory")
    max_snapshots: int = Field(
        default=10, description="Most recent snapshots kept", ge=1, le=100
    )

    model_config = {
        "validate_assignment": True,
        "extra": "forbid",
    }


class AppConfig(BaseModel):
    """Application-wide configuration."""

    analysis: AnalysisConfig = Field(default_factory=AnalysisConfig)
    data: DataConfig = Field(default_factory=DataConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)

    log_dir: str = Field(default="logs", description="Log directory")
    log_level: str = Field(
        default="INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )
    log_to_file: bool = Field(default=False, description="Enable file logging")

    model_config = {
        "validate_assignment": True,
        "extra": "forbid",
    }

    @classmethod
    def from_yaml(cls, path: str | Path) -> AppConfig:
        """
        Load configuration from YAML file.

        Args:
            path: Path to YAML configuration file

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If YAML is invalid
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)

        if data is None:
            data = {}

        data = cls._apply_env_overrides(data)

        return cls(**data)

    @classmethod
    def from_yaml_or_default(cls, path: str | Path | None = None) -> AppConfig:
        """
        Load configuration from YAML file or use defaults.

        Args:
            path: Optional path to YAML configuration file

        Returns:
            AppConfig instance
        """
        if path is None:
            for default_path in (Path("config.yaml"), Path("config/config.yaml")):
                if default_path.exists():
                    path = default_path
                    break

        if path and Path(path).exists():
            return cls.from_yaml(path)

        data = cls._apply_env_overrides({})
        return cls(**data)

    @classmethod
    def _apply_env_overrides(cls, data: dict[str, Any]) -> dict[str, Any]:
        """
        Apply environment variable overrides to configuration.

        Environment variables are prefixed with APP_CONFIG_
        Example: APP_CONFIG_ANALYSIS_EVENT_MODE=bos_only
        """
        for section in ("analysis", "data", "storage"):
            if data.get(section) is None:
                data[section] = {}

        env_mappings = {
            "APP_CONFIG_ANALYSIS_SEGMENT_CONFIRM_GAP": ("analysis", "segment_confirm_gap", int),
            "APP_CONFIG_ANALYSIS_EVENT_MODE": ("analysis", "event_mode", str),
            "APP_CONFIG_DATA_BINANCE_BASE_URL": ("data", "binance_base_url", str),
            "APP_CONFIG_DATA_BINANCE_LIMIT": ("data", "binance_limit", int),
            "APP_CONFIG_STORAGE_SNAPSHOT_DIR": ("storage", "snapshot_dir", str),
            "APP_CONFIG_STORAGE_MAX_SNAPSHOTS": ("storage", "max_snapshots", int),
            "APP_CONFIG_LOG_LEVEL": ("log_level", None, str),
            "APP_CONFIG_LOG_TO_FILE": (
                "log_to_file",
                None,
                lambda x: x.lower() in ("true", "1", "yes"),
            ),
        }

        for env_var, mapping in env_mappings.items():
            env_value = os.getenv(env_var)
            if env_value is None:
                continue

            first, key, converter = mapping
            if key is not None:
                data[first][key] = converter(env_value)
            else:
                data[first] = converter(env_value)

        return data

    def to_yaml(self, path: str | Path) -> None:
        """
        Save configuration to YAML file.

        Args:
            path: Path where to save the configuration
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w", encoding="utf-8") as f:
            yaml.dump(self.model_dump(), f, default_flow_style=False, sort_keys=False)
