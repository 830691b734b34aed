"""
analysis/pipeline.py
结构分析入口 (Structural Pipelines)

    Chan: bars -> fractals -> strokes -> segments -> zones
    ICT:  bars -> fractals -> strokes -> events

每次调用都从完整的 K 线序列重新计算，不保留任何跨调用状态。
"""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np
import pandas as pd

from ..config.settings import AnalysisConfig
from ..io.schema import BarSource, coerce_bars
from .events import detect_structure_events, label_strokes
from .fractals import detect_fractals
from .segments import build_segments
from .strokes import build_strokes
from .types import BreakoutAnalysis, StructuralAnalysis
from .zones import build_pivot_zones

logger = logging.getLogger(__name__)


def run_structural_analysis(
    bars: BarSource, config: Optional[AnalysisConfig] = None
) -> StructuralAnalysis:
    """
    Run the Chan pipeline: fractals, strokes, segments and pivot zones.

    Args:
        bars: Bars ascending by time (sequence of Bar, DataFrame or OHLCData)
        config: Analysis parameters; defaults when omitted

    Returns:
        StructuralAnalysis. Short input degrades to empty layers, never raises.
    """
    config = config or AnalysisConfig()
    bar_list = coerce_bars(bars)

    fractals = detect_fractals(bar_list)
    strokes = build_strokes(fractals)
    segments = build_segments(strokes, confirm_gap=config.segment_confirm_gap)
    zones = build_pivot_zones(segments, strokes)

    logger.info(
        f"Structural analysis: {len(bar_list)} bars -> {len(fractals)} fractals, "
        f"{len(strokes)} strokes, {len(segments)} segments, {len(zones)} zones"
    )
    return StructuralAnalysis(tuple(fractals), tuple(strokes), tuple(segments), tuple(zones))


def run_breakout_analysis(
    bars: BarSource, config: Optional[AnalysisConfig] = None
) -> BreakoutAnalysis:
    """
    Run the ICT pipeline: fractals and strokes shared with Chan, then BOS/CHOCH.

    Args:
        bars: Bars ascending by time (sequence of Bar, DataFrame or OHLCData)
        config: Analysis parameters; `event_mode` picks the classification

    Returns:
        BreakoutAnalysis with events plus the ICT-labelled stroke view.
    """
    config = config or AnalysisConfig()
    bar_list = coerce_bars(bars)

    fractals = detect_fractals(bar_list)
    strokes = build_strokes(fractals)
    events = detect_structure_events(strokes, mode=config.event_mode)

    logger.info(
        f"Breakout analysis: {len(bar_list)} bars -> {len(strokes)} strokes, "
        f"{len(events)} events"
    )
    return BreakoutAnalysis(
        fractals=tuple(fractals),
        strokes=tuple(strokes),
        events=tuple(events),
        labeled_strokes=tuple(label_strokes(strokes)),
    )


def add_structure_columns(
    df: pd.DataFrame,
    config: Optional[AnalysisConfig] = None,
    prefix: str = "chan_",
) -> pd.DataFrame:
    """
    在原始 DataFrame 上添加结构特征列（原地修改）。

    Columns (positional, one value per bar):
        - {prefix}fractal: 'top' / 'bottom' / ''
        - {prefix}stroke_point: bool (bar is a stroke endpoint)
        - {prefix}segment: int (index of the segment covering the bar, -1 if none)
        - {prefix}zone_high / {prefix}zone_low: float (band of the covering zone)

    Args:
        df: DataFrame with OHLC(V) columns
        config: Analysis parameters
        prefix: Feature column prefix

    Returns:
        The input DataFrame with the feature columns added.
    """
    result = run_structural_analysis(df, config)
    n = len(df)

    fractal_col = np.full(n, "", dtype=object)
    for fractal in result.fractals:
        fractal_col[fractal.index] = fractal.kind

    stroke_point = np.zeros(n, dtype=bool)
    for stroke in result.strokes:
        stroke_point[stroke.start.index] = True
        stroke_point[stroke.end.index] = True

    segment_col = np.full(n, -1, dtype=int)
    for seg_index, segment in enumerate(result.segments):
        segment_col[segment.start.index : segment.end.index + 1] = seg_index

    zone_high = np.full(n, np.nan)
    zone_low = np.full(n, np.nan)
    for zone in result.zones:
        zone_high[zone.start.index : zone.end.index + 1] = zone.high
        zone_low[zone.start.index : zone.end.index + 1] = zone.low

    df[f"{prefix}fractal"] = fractal_col
    df[f"{prefix}stroke_point"] = stroke_point
    df[f"{prefix}segment"] = segment_col
    df[f"{prefix}zone_high"] = zone_high
    df[f"{prefix}zone_low"] = zone_low

    return df
