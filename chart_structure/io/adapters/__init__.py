"""
adapters 模块
提供各种数据源的适配器，将原始数据转换为标准 OHLC 格式。
"""

from .base import DataAdapter
from .csv_adapter import CsvAdapter
from .json_adapter import JsonAdapter

__all__ = ["DataAdapter", "CsvAdapter", "JsonAdapter"]
