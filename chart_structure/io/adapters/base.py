"""
adapters/base.py
数据适配器基类。

每个适配器负责把某一种文件格式转换为标准 OHLCData。
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from ..schema import OHLCData


class DataAdapter(ABC):
    """Base class for bar file adapters."""

    #: File extensions this adapter accepts (lower case, with dot)
    extensions: tuple[str, ...] = ()

    @property
    @abstractmethod
    def name(self) -> str:
        """Display name of the adapter."""

    def can_handle(self, path: Path) -> bool:
        """Whether this adapter accepts the file (by extension)."""
        return Path(path).suffix.lower() in self.extensions

    @abstractmethod
    def load(self, path: Path) -> OHLCData:
        """Load the file into standard OHLCData."""

    def _read_text(self, path: Path) -> str:
        path = Path(path)
        try:
            return path.read_text(encoding="utf-8-sig")
        except UnicodeDecodeError:
            return path.read_text(encoding="gbk")

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"
