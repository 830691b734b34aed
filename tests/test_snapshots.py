"""
Tests for market snapshot storage.
"""

from __future__ import annotations

import itertools
import json
from pathlib import Path

import pytest

from chart_structure.io import (
    Bar,
    FileBackend,
    MemoryBackend,
    SnapshotStorageError,
    SnapshotStore,
    StorageQuotaError,
)
from chart_structure.io.snapshots import STORAGE_KEY


class LimitedBackend(MemoryBackend):
    """Refuses lists longer than `max_items`."""

    def __init__(self, max_items: int):
        super().__init__()
        self.max_items = max_items

    def write(self, key: str, text: str) -> None:
        if len(json.loads(text)) > self.max_items:
            raise StorageQuotaError("full")
        super().write(key, text)


def _bars(n: int = 3) -> list[Bar]:
    return [Bar(i * 60_000, 1.0 + i, 2.0 + i, 0.5 + i, 1.5 + i, 10.0) for i in range(n)]


@pytest.fixture
def store() -> SnapshotStore:
    clock = itertools.count(1_000)
    return SnapshotStore(MemoryBackend(), clock=lambda: next(clock))


def test_save_binance_snapshot(store: SnapshotStore) -> None:
    snapshot = store.save_binance_snapshot("btcusdt", "1h", 500, _bars())

    assert snapshot.id == "binance:BTCUSDT:1h:500"
    assert snapshot.source == "binance"
    assert snapshot.label == "BTCUSDT 1h (500)"
    assert snapshot.context.symbol == "BTCUSDT"
    assert snapshot.context.limit == 500
    assert store.get(snapshot.id) == snapshot


def test_save_json_snapshot_id(store: SnapshotStore) -> None:
    snapshot = store.save_json_snapshot("  Data.JSON ", _bars())

    assert snapshot.id == "json:data.json"
    assert snapshot.source == "json"
    assert snapshot.context.file_name == "  Data.JSON "


def test_upsert_replaces_and_moves_to_front(store: SnapshotStore) -> None:
    store.save_json_snapshot("a.json", _bars(1))
    store.save_json_snapshot("b.json", _bars(2))
    store.save_json_snapshot("A.json", _bars(5))

    metas = store.list_metas()

    assert [m.id for m in metas] == ["json:a.json", "json:b.json"]
    assert metas[0].count == 5
    assert store.latest().id == "json:a.json"


def test_keeps_most_recent(store: SnapshotStore) -> None:
    for i in range(12):
        store.save_json_snapshot(f"f{i}.json", _bars(1))

    metas = store.list_metas()

    assert len(metas) == 10
    assert metas[0].id == "json:f11.json"
    assert metas[-1].id == "json:f2.json"
    assert [m.saved_at for m in metas] == sorted((m.saved_at for m in metas), reverse=True)


def test_custom_capacity() -> None:
    store = SnapshotStore(MemoryBackend(), max_snapshots=2)
    for name in ("a", "b", "c"):
        store.save_json_snapshot(name, _bars(1))

    assert [m.id for m in store.list_metas()] == ["json:c", "json:b"]


def test_invalid_capacity() -> None:
    with pytest.raises(ValueError):
        SnapshotStore(MemoryBackend(), max_snapshots=0)


def test_quota_evicts_oldest() -> None:
    clock = itertools.count(1)
    store = SnapshotStore(LimitedBackend(max_items=2), clock=lambda: next(clock))

    store.save_json_snapshot("a", _bars())
    store.save_json_snapshot("b", _bars())
    store.save_json_snapshot("c", _bars())

    assert [m.id for m in store.list_metas()] == ["json:c", "json:b"]


def test_quota_failure_raises_after_eviction() -> None:
    store = SnapshotStore(LimitedBackend(max_items=0))

    with pytest.raises(SnapshotStorageError):
        store.save_json_snapshot("a", _bars())


def test_memory_backend_quota() -> None:
    backend = MemoryBackend(quota_bytes=10)

    backend.write("k", "x" * 10)
    with pytest.raises(StorageQuotaError):
        backend.write("k", "x" * 11)

    assert backend.read("k") == "x" * 10
    assert backend.read("missing") is None


def test_unreadable_data_reads_as_empty() -> None:
    backend = MemoryBackend()
    store = SnapshotStore(backend)

    backend.write(STORAGE_KEY, "not json")
    assert store.list_metas() == []
    assert store.latest() is None

    backend.write(STORAGE_KEY, '{"id": "x"}')
    assert store.list_metas() == []


def test_invalid_items_are_skipped(store: SnapshotStore) -> None:
    store.save_json_snapshot("good", _bars())
    raw = json.loads(store.backend.read(STORAGE_KEY))
    raw.append({"id": "broken", "data": "nope"})
    store.backend.write(STORAGE_KEY, json.dumps(raw))

    assert [m.id for m in store.list_metas()] == ["json:good"]


def test_manual_snapshot(store: SnapshotStore) -> None:
    binance = store.save_manual_snapshot("binance", _bars(), symbol="ethusdt", interval="15m", limit=100)
    assert binance.id == "binance:ETHUSDT:15m:100"

    manual = store.save_manual_snapshot("json", _bars())
    assert manual.id.startswith("json:manual-")

    named = store.save_manual_snapshot("json", _bars(), file_name="x.json")
    assert named.id == "json:x.json"


def test_manual_binance_snapshot_requires_context(store: SnapshotStore) -> None:
    with pytest.raises(ValueError, match="缺少币安快照参数"):
        store.save_manual_snapshot("binance", _bars(), symbol="BTCUSDT")


def test_get_missing(store: SnapshotStore) -> None:
    assert store.get("json:none") is None
    assert store.latest() is None


def test_file_backend_persists(tmp_path: Path) -> None:
    directory = tmp_path / "snapshots"
    bars = _bars(4)

    SnapshotStore(FileBackend(directory)).save_binance_snapshot("BTCUSDT", "4h", 4, bars)

    reopened = SnapshotStore(FileBackend(directory))
    snapshot = reopened.latest()

    assert (directory / f"{STORAGE_KEY}.json").exists()
    assert snapshot is not None
    assert snapshot.data == bars
    assert reopened.list_metas()[0].count == 4


def test_file_backend_missing_key(tmp_path: Path) -> None:
    assert FileBackend(tmp_path / "empty").read("anything") is None


def test_undecodable_file_reads_as_empty(tmp_path: Path) -> None:
    (tmp_path / f"{STORAGE_KEY}.json").write_bytes(b"\xff\xfe\x00garbage")
    store = SnapshotStore(FileBackend(tmp_path))

    assert store.latest() is None
    assert store.list_metas() == []

    # 损坏的文件被覆盖
    store.save_json_snapshot("a.json", _bars())
    assert store.latest().id == "json:a.json"


def test_unreadable_path_reads_as_empty(tmp_path: Path) -> None:
    (tmp_path / f"{STORAGE_KEY}.json").mkdir()
    store = SnapshotStore(FileBackend(tmp_path))

    assert store.latest() is None
    assert store.get("json:a.json") is None
