"""
chart_structure.io 模块
数据输入/输出层，包含数据模型、解析器、适配器、Binance 拉取与快照存储。
"""

from .binance import BinanceKlineQuery, fetch_binance_klines
from .errors import (
    CsvFormatError,
    IngestionError,
    JsonFormatError,
    RemoteFetchError,
    SnapshotStorageError,
    StorageQuotaError,
)
from .loader import list_adapters, load_ohlc, register_adapter
from .parsers import parse_csv_content, parse_json_content
from .schema import (
    COL_CLOSE,
    COL_DATETIME,
    COL_HIGH,
    COL_LOW,
    COL_OPEN,
    COL_TIMESTAMP,
    COL_VOLUME,
    REQUIRED_COLUMNS,
    Bar,
    OHLCData,
    bars_from_frame,
    bars_to_frame,
    coerce_bars,
)
from .snapshots import (
    FileBackend,
    MarketSnapshot,
    MarketSnapshotMeta,
    MemoryBackend,
    SnapshotStore,
    StorageBackend,
)

__all__ = [
    # 数据模型
    "Bar",
    "OHLCData",
    "COL_TIMESTAMP",
    "COL_DATETIME",
    "COL_OPEN",
    "COL_HIGH",
    "COL_LOW",
    "COL_CLOSE",
    "COL_VOLUME",
    "REQUIRED_COLUMNS",
    "bars_from_frame",
    "bars_to_frame",
    "coerce_bars",
    # 解析 / 加载
    "parse_csv_content",
    "parse_json_content",
    "load_ohlc",
    "list_adapters",
    "register_adapter",
    # Binance
    "BinanceKlineQuery",
    "fetch_binance_klines",
    # 快照
    "MarketSnapshot",
    "MarketSnapshotMeta",
    "StorageBackend",
    "MemoryBackend",
    "FileBackend",
    "SnapshotStore",
    # 异常
    "IngestionError",
    "CsvFormatError",
    "JsonFormatError",
    "RemoteFetchError",
    "StorageQuotaError",
    "SnapshotStorageError",
]
