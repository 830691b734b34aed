"""
analysis/fractals.py
分型识别：三根 K 线的局部极值。

- 顶分型：中间 K 线的 High 严格高于左右两根
- 底分型：中间 K 线的 Low 严格低于左右两根

外包 K 线（同时满足两者）按顶分型处理，因此一根 K 线不会同时是顶和底。
"""

from __future__ import annotations

import logging
from typing import Sequence

from ..io.schema import Bar
from ._structure_utils import MIN_FRACTAL_BARS
from .types import Fractal

logger = logging.getLogger(__name__)


def detect_fractals(bars: Sequence[Bar]) -> list[Fractal]:
    """
    Scan interior bars for 3-bar tops and bottoms.

    Args:
        bars: Bars in ascending time order

    Returns:
        Fractals in ascending index order. Fewer than 3 bars yields [].

    Example:
        >>> # highs/lows 10,9,8,9,10 -> one bottom at index 2
        >>> [f.kind for f in detect_fractals(bars)]
        ['bottom']
    """
    n = len(bars)
    if n < MIN_FRACTAL_BARS:
        return []

    result: list[Fractal] = []

    for index in range(1, n - 1):
        left, middle, right = bars[index - 1], bars[index], bars[index + 1]

        if middle.high > left.high and middle.high > right.high:
            result.append(Fractal("top", index, middle))
        elif middle.low < left.low and middle.low < right.low:
            result.append(Fractal("bottom", index, middle))

    logger.debug(f"Detected {len(result)} fractals in {n} bars")
    return result
