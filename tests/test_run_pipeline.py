"""
Tests for the command line entry point.
"""

from __future__ import annotations

from pathlib import Path

import pytest

import run_pipeline
from chart_structure.io import FileBackend, OHLCData, SnapshotStore
from chart_structure.io.schema import bars_to_frame
from chart_structure.logging import reset_logging
from conftest import SWING_PRICES, build_bars


@pytest.fixture(autouse=True)
def _isolated(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.chdir(tmp_path)
    reset_logging()
    yield
    reset_logging()


@pytest.fixture
def swing_csv(tmp_path: Path) -> Path:
    path = tmp_path / "swing.csv"
    df = bars_to_frame(build_bars(SWING_PRICES))
    df["timestamp"] = df["timestamp"] + 1_700_000_000_000
    df.to_csv(path, index=False)
    return path


def test_chan_mode_summary(swing_csv: Path, capsys: pytest.CaptureFixture) -> None:
    assert run_pipeline.main([str(swing_csv)]) == 0

    out = capsys.readouterr().out
    assert "线段: 2" in out
    assert "zs-3-6" in out


def test_ict_mode_summary(swing_csv: Path, capsys: pytest.CaptureFixture) -> None:
    assert run_pipeline.main([str(swing_csv), "--mode", "ict"]) == 0

    out = capsys.readouterr().out
    assert "CHOCH: 1" in out
    assert "bos-up-2-4" in out


def test_missing_file_returns_error(tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
    assert run_pipeline.main([str(tmp_path / "missing.csv")]) == 1
    assert "数据加载失败" in capsys.readouterr().out


def test_save_snapshot_for_file(swing_csv: Path, tmp_path: Path) -> None:
    assert run_pipeline.main([str(swing_csv), "--save-snapshot"]) == 0

    store = SnapshotStore(FileBackend(tmp_path / "data" / "snapshots"))
    latest = store.latest()
    assert latest is not None
    assert latest.id == "json:swing.csv"
    assert len(latest.data) == len(SWING_PRICES)


def test_binance_source(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    calls = []

    def fake_fetch(query, base_url, timeout):
        calls.append(query)
        return OHLCData(df=bars_to_frame(build_bars(SWING_PRICES)), symbol=query.symbol)

    monkeypatch.setattr(run_pipeline, "fetch_binance_klines", fake_fetch)

    code = run_pipeline.main(
        ["--binance", "btcusdt", "--interval", "4h", "--limit", "200", "--save-snapshot"]
    )

    assert code == 0
    assert calls[0].symbol == "BTCUSDT"
    assert calls[0].interval == "4h"
    assert calls[0].limit == 200

    latest = SnapshotStore(FileBackend(tmp_path / "data" / "snapshots")).latest()
    assert latest.id == "binance:BTCUSDT:4h:200"


def test_invalid_interval_returns_error(capsys: pytest.CaptureFixture) -> None:
    assert run_pipeline.main(["--binance", "BTCUSDT", "--interval", "7m"]) == 1
