"""Configuration management module."""

from .settings import AnalysisConfig, AppConfig, DataConfig, StorageConfig

__all__ = ["AppConfig", "AnalysisConfig", "DataConfig", "StorageConfig"]
