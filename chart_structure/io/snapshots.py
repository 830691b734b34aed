"""
io/snapshots.py
行情快照存储：最近 N 份 K 线数据按来源去重保存，便于离线复用。

快照列表整体序列化为一个 JSON 文本，写入可替换的存储后端:
    - MemoryBackend: 进程内字典，可设置配额 (测试 / 临时使用)
    - FileBackend:   目录下的 <key>.json 文件

写入失败 (配额不足) 时从最旧的快照开始逐个淘汰，最少保留一份；
仍然失败则抛出 SnapshotStorageError。
"""

from __future__ import annotations

import json
import logging
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Literal, Optional, Protocol, Sequence

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from .binance import BinanceInterval
from .errors import SnapshotStorageError, StorageQuotaError
from .schema import Bar

logger = logging.getLogger(__name__)

STORAGE_KEY = "market_snapshots_v1"
MAX_SNAPSHOT_COUNT = 10

SnapshotSource = Literal["binance", "json"]


class SnapshotContext(BaseModel):
    """Where the bars came from."""

    symbol: Optional[str] = None
    interval: Optional[BinanceInterval] = None
    limit: Optional[int] = None
    file_name: Optional[str] = None


class MarketSnapshot(BaseModel):
    """A saved bar series."""

    id: str
    source: SnapshotSource
    label: str
    saved_at: int = Field(description="Save time in epoch milliseconds")
    context: SnapshotContext = Field(default_factory=SnapshotContext)
    data: list[Bar] = Field(default_factory=list)

    def meta(self) -> "MarketSnapshotMeta":
        return MarketSnapshotMeta(
            id=self.id,
            source=self.source,
            label=self.label,
            saved_at=self.saved_at,
            count=len(self.data),
            context=self.context,
        )


class MarketSnapshotMeta(BaseModel):
    """Snapshot summary without the bars."""

    id: str
    source: SnapshotSource
    label: str
    saved_at: int
    count: int
    context: SnapshotContext


_SNAPSHOT_LIST = TypeAdapter(list[MarketSnapshot])


# ============================================================================
# 存储后端
# ============================================================================


class StorageBackend(Protocol):
    """Key/value text storage."""

    def read(self, key: str) -> Optional[str]: ...

    def write(self, key: str, text: str) -> None: ...


class MemoryBackend:
    """In-process storage with an optional byte quota per key."""

    def __init__(self, quota_bytes: Optional[int] = None):
        self.quota_bytes = quota_bytes
        self._items: dict[str, str] = {}

    def read(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def write(self, key: str, text: str) -> None:
        size = len(text.encode("utf-8"))
        if self.quota_bytes is not None and size > self.quota_bytes:
            raise StorageQuotaError(f"存储空间不足: {size} > {self.quota_bytes} bytes")
        self._items[key] = text


class FileBackend:
    """Stores each key as `<directory>/<key>.json`."""

    def __init__(self, directory: str | Path):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def read(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def write(self, key: str, text: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self._path(key)
        tmp = path.with_suffix(".tmp")
        try:
            tmp.write_text(text, encoding="utf-8")
            tmp.replace(path)
        except OSError as e:
            # 磁盘满等写入失败统一视为配额不足
            raise StorageQuotaError(f"快照写入失败: {e}") from e


# ============================================================================
# 快照 ID
# ============================================================================


def build_binance_snapshot_id(symbol: str, interval: str, limit: int) -> str:
    return f"binance:{symbol.upper()}:{interval}:{limit}"


def build_json_snapshot_id(file_name: str) -> str:
    return f"json:{file_name.strip().lower()}"


def _now_ms() -> int:
    return int(time.time() * 1000)


class SnapshotStore:
    """
    Keeps the most recent market snapshots in a storage backend.

    Snapshots are deduplicated by id: saving the same source again replaces
    the previous entry and moves it to the front.

    Args:
        backend: Storage backend (MemoryBackend, FileBackend, ...)
        max_snapshots: How many snapshots to keep
        key: Backend key holding the serialized list
        clock: Returns the current time in epoch milliseconds
    """

    def __init__(
        self,
        backend: StorageBackend,
        max_snapshots: int = MAX_SNAPSHOT_COUNT,
        key: str = STORAGE_KEY,
        clock: Optional[Callable[[], int]] = None,
    ):
        if max_snapshots < 1:
            raise ValueError(f"max_snapshots must be >= 1, got {max_snapshots}")
        self.backend = backend
        self.max_snapshots = max_snapshots
        self.key = key
        self._clock = clock or _now_ms

    # ------------------------------------------------------------------
    # 读写
    # ------------------------------------------------------------------

    def _read(self) -> list[MarketSnapshot]:
        try:
            raw = self.backend.read(self.key)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"快照数据无法读取，按空列表处理: {e}")
            return []
        if not raw:
            return []

        try:
            items = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(f"快照数据无法解析，按空列表处理: {e}")
            return []
        if not isinstance(items, list):
            logger.warning("快照数据不是数组，按空列表处理")
            return []

        snapshots = []
        for item in items:
            try:
                snapshots.append(MarketSnapshot.model_validate(item))
            except ValidationError as e:
                logger.warning(f"跳过无效快照: {e.error_count()} errors")
        return sorted(snapshots, key=lambda s: s.saved_at, reverse=True)

    def _persist(self, snapshots: Sequence[MarketSnapshot]) -> None:
        ordered = sorted(snapshots, key=lambda s: s.saved_at, reverse=True)
        ordered = ordered[: self.max_snapshots]

        while True:
            text = _SNAPSHOT_LIST.dump_json(ordered).decode("utf-8")
            try:
                self.backend.write(self.key, text)
                logger.debug(f"Persisted {len(ordered)} snapshots")
                return
            except StorageQuotaError as e:
                if len(ordered) <= 1:
                    logger.error(f"本地存储空间不足，无法保存行情快照: {e}")
                    raise SnapshotStorageError("本地存储空间不足，无法保存行情快照") from e
                dropped = ordered.pop()
                logger.warning(f"存储空间不足，淘汰最旧快照: {dropped.id}")

    def _upsert(self, snapshot: MarketSnapshot) -> MarketSnapshot:
        others = [item for item in self._read() if item.id != snapshot.id]
        self._persist([snapshot, *others])
        logger.info(f"保存行情快照: {snapshot.id} ({len(snapshot.data)} bars)")
        return snapshot

    # ------------------------------------------------------------------
    # 保存
    # ------------------------------------------------------------------

    def save_binance_snapshot(
        self, symbol: str, interval: BinanceInterval, limit: int, data: Sequence[Bar]
    ) -> MarketSnapshot:
        symbol = symbol.upper()
        return self._upsert(
            MarketSnapshot(
                id=build_binance_snapshot_id(symbol, interval, limit),
                source="binance",
                label=f"{symbol} {interval} ({limit})",
                saved_at=self._clock(),
                context=SnapshotContext(symbol=symbol, interval=interval, limit=limit),
                data=list(data),
            )
        )

    def save_json_snapshot(self, file_name: str, data: Sequence[Bar]) -> MarketSnapshot:
        return self._upsert(
            MarketSnapshot(
                id=build_json_snapshot_id(file_name),
                source="json",
                label=f"JSON {file_name}",
                saved_at=self._clock(),
                context=SnapshotContext(file_name=file_name),
                data=list(data),
            )
        )

    def save_manual_snapshot(
        self,
        source: SnapshotSource,
        data: Sequence[Bar],
        symbol: Optional[str] = None,
        interval: Optional[BinanceInterval] = None,
        limit: Optional[int] = None,
        file_name: Optional[str] = None,
    ) -> MarketSnapshot:
        """Save under the id scheme of `source`; binance needs symbol/interval/limit."""
        if source == "binance":
            if not symbol or not interval or not limit:
                raise ValueError("缺少币安快照参数")
            return self.save_binance_snapshot(symbol, interval, limit, data)

        if file_name is None:
            file_name = f"manual-{datetime.now(timezone.utc).isoformat()}"
        return self.save_json_snapshot(file_name, data)

    # ------------------------------------------------------------------
    # 查询
    # ------------------------------------------------------------------

    def list_metas(self) -> list[MarketSnapshotMeta]:
        return [snapshot.meta() for snapshot in self._read()]

    def get(self, snapshot_id: str) -> Optional[MarketSnapshot]:
        return next((s for s in self._read() if s.id == snapshot_id), None)

    def latest(self) -> Optional[MarketSnapshot]:
        snapshots = self._read()
        return snapshots[0] if snapshots else None
