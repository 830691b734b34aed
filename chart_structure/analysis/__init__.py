"""
chart_structure.analysis 模块
结构分析核心：分型、笔、线段、中枢 (Chan) 与 BOS/CHOCH 结构事件 (ICT)。
"""

from .events import detect_structure_events, label_strokes, swings_from_strokes
from .fractals import detect_fractals
from .pipeline import add_structure_columns, run_breakout_analysis, run_structural_analysis
from .segments import build_segments
from .strokes import build_strokes, normalize_fractals
from .types import (
    BreakoutAnalysis,
    Fractal,
    LabeledStroke,
    PivotZone,
    Segment,
    Stroke,
    StructuralAnalysis,
    StructureEvent,
)
from .zones import build_pivot_zones

__all__ = [
    # 数据结构
    "Fractal",
    "Stroke",
    "Segment",
    "PivotZone",
    "StructureEvent",
    "LabeledStroke",
    "StructuralAnalysis",
    "BreakoutAnalysis",
    # Chan 流水线
    "detect_fractals",
    "normalize_fractals",
    "build_strokes",
    "build_segments",
    "build_pivot_zones",
    "run_structural_analysis",
    "add_structure_columns",
    # ICT
    "swings_from_strokes",
    "label_strokes",
    "detect_structure_events",
    "run_breakout_analysis",
]
