"""
io/errors.py
数据接入层异常。

IngestionError 继承 ValueError，调用方可以统一捕获"数据无法使用"的情况，
并与"没有数据"区分开。
"""

from __future__ import annotations

from typing import Optional


class IngestionError(ValueError):
    """Bars could not be produced from the given source."""


class CsvFormatError(IngestionError):
    """Delimited text is missing columns or holds unparseable values."""


class JsonFormatError(IngestionError):
    """JSON payload is not an array of bar objects."""


class RemoteFetchError(IngestionError):
    """Remote market-data request failed."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class StorageQuotaError(OSError):
    """A storage backend refused a write for lack of space."""


class SnapshotStorageError(RuntimeError):
    """Snapshots could not be persisted even after evicting old entries."""
