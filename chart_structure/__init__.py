"""
chart_structure
K 线结构分析：Chan 笔/线段/中枢 与 ICT BOS/CHOCH。
"""

from .analysis import (
    BreakoutAnalysis,
    StructuralAnalysis,
    add_structure_columns,
    run_breakout_analysis,
    run_structural_analysis,
)
from .io import Bar, OHLCData, load_ohlc

__version__ = "0.1.0"

__all__ = [
    "Bar",
    "OHLCData",
    "load_ohlc",
    "StructuralAnalysis",
    "BreakoutAnalysis",
    "run_structural_analysis",
    "run_breakout_analysis",
    "add_structure_columns",
]
