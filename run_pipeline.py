"""
run_pipeline.py
K 线结构分析入口脚本。

流程:
1. 加载数据    - 本地 CSV/JSON (自动选择适配器) 或 Binance 永续 K 线
2. 结构分析    - chan: 分型 -> 笔 -> 线段 -> 中枢
                 ict:  分型 -> 笔 -> BOS/CHOCH
3. 保存快照    - 可选，保存最近的行情数据便于离线复用

用法:
    python run_pipeline.py                              # 交互式选择 data/raw 下的文件
    python run_pipeline.py data/raw/BTCUSDT_1h.csv      # 直接指定文件
    python run_pipeline.py --binance BTCUSDT --interval 4h --limit 300 --mode ict
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from chart_structure.analysis import run_breakout_analysis, run_structural_analysis
from chart_structure.config import AppConfig
from chart_structure.io import (
    BinanceKlineQuery,
    FileBackend,
    IngestionError,
    OHLCData,
    SnapshotStorageError,
    SnapshotStore,
    fetch_binance_klines,
    load_ohlc,
)
from chart_structure.io.file_discovery import select_file_interactive
from chart_structure.logging import configure_from_config

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="K 线结构分析 (Chan 笔/线段/中枢, ICT BOS/CHOCH)",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument('file', nargs='?', help='本地 CSV/JSON 数据文件')
    parser.add_argument('--binance', metavar='SYMBOL', help='从 Binance 拉取 K 线 (如 BTCUSDT)')
    parser.add_argument('--interval', default='1h', help='Binance K 线周期 (默认 1h)')
    parser.add_argument('--limit', type=int, default=None, help='Binance K 线数量')
    parser.add_argument('--mode', choices=['chan', 'ict'], default='chan', help='分析模式')
    parser.add_argument('--config', default=None, help='YAML 配置文件路径')
    parser.add_argument('--save-snapshot', action='store_true', help='保存行情快照')
    return parser


def load_bars(args: argparse.Namespace, config: AppConfig) -> OHLCData:
    if args.binance:
        query = BinanceKlineQuery(
            symbol=args.binance,
            interval=args.interval,
            limit=args.limit or config.data.binance_limit,
        )
        return fetch_binance_klines(
            query,
            base_url=config.data.binance_base_url,
            timeout=config.data.request_timeout,
        )

    input_file = args.file or select_file_interactive(Path(config.data.data_raw_dir))
    return load_ohlc(input_file)


def save_snapshot(args: argparse.Namespace, config: AppConfig, data: OHLCData) -> None:
    store = SnapshotStore(
        FileBackend(config.storage.snapshot_dir),
        max_snapshots=config.storage.max_snapshots,
    )
    bars = data.bars
    if args.binance:
        snapshot = store.save_binance_snapshot(
            data.symbol or args.binance,
            args.interval,
            args.limit or config.data.binance_limit,
            bars,
        )
    else:
        snapshot = store.save_json_snapshot(data.name or "manual", bars)
    print(f"  快照已保存: {snapshot.label} ({len(snapshot.data)} bars)")


def print_chan_summary(data: OHLCData, config: AppConfig) -> None:
    result = run_structural_analysis(data, config.analysis)
    print(f"  分型: {len(result.fractals)}")
    print(f"  笔:   {len(result.strokes)}")
    print(f"  线段: {len(result.segments)}")
    for i, seg in enumerate(result.segments):
        status = "确认" if seg.is_sure else "未确认"
        print(
            f"    [{i}] {seg.direction:<4} 笔 {seg.start_bi_index}-{seg.end_bi_index} "
            f"[{seg.low:.4f}, {seg.high:.4f}] {status}"
        )
    print(f"  中枢: {len(result.zones)}")
    for zone in result.zones:
        print(
            f"    {zone.id}: 笔 {zone.start_bi_index}-{zone.end_bi_index} "
            f"[{zone.low:.4f}, {zone.high:.4f}]"
        )


def print_ict_summary(data: OHLCData, config: AppConfig) -> None:
    result = run_breakout_analysis(data, config.analysis)
    print(f"  笔:    {len(result.strokes)}")
    print(f"  BOS:   {len(result.bos_events)}")
    print(f"  CHOCH: {len(result.choch_events)}")
    for event in result.events:
        print(f"    {event.kind.upper():<5} {event.direction:<4} @ {event.broken_price:.4f} ({event.id})")


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    config = AppConfig.from_yaml_or_default(args.config)
    configure_from_config(config)

    print("=" * 60)
    print(f"K 线结构分析 ({'Chan' if args.mode == 'chan' else 'ICT'})")
    print("=" * 60)

    print("\n[Step 1] 加载数据")
    try:
        data = load_bars(args, config)
    except (IngestionError, FileNotFoundError, ValueError) as e:
        logger.error(f"数据加载失败: {e}")
        print(f"❌ 数据加载失败: {e}")
        return 1

    print(f"  加载完成: {data}")
    if len(data) > 0:
        start, end = data.date_range
        print(f"  时间范围: {start} ~ {end}")

    print("\n[Step 2] 结构分析")
    if args.mode == 'chan':
        print_chan_summary(data, config)
    else:
        print_ict_summary(data, config)

    if args.save_snapshot:
        print("\n[Step 3] 保存快照")
        try:
            save_snapshot(args, config, data)
        except SnapshotStorageError as e:
            print(f"❌ {e}")
            return 1

    print("\n" + "=" * 60)
    print("分析完成！")
    print("=" * 60)
    return 0


if __name__ == "__main__":
    sys.exit(main())
