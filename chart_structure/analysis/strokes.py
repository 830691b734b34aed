"""
Stroke ("bi") construction.

Two phases:
1. Normalization collapses runs of same-kind fractals to their extreme, so a
   noisy secondary top cannot split one upward move into two strokes.
2. Pairing turns each adjacent pair of the alternating sequence into a stroke
   whose direction comes from the origin fractal's kind, never from prices.
"""

from __future__ import annotations

import logging
from typing import Sequence

from ._structure_utils import direction_from_kind, is_better_fractal
from .types import Fractal, Stroke

logger = logging.getLogger(__name__)


def normalize_fractals(fractals: Sequence[Fractal]) -> list[Fractal]:
    """
    Keep only the extreme fractal of each same-kind run.

    Tops keep the higher high and bottoms the lower low; on a tie the later
    fractal wins. The result strictly alternates kinds.
    """
    if not fractals:
        return []

    normalized: list[Fractal] = []
    prev = fractals[0]

    for current in fractals[1:]:
        if current.kind == prev.kind:
            if is_better_fractal(current, prev):
                prev = current
            continue

        normalized.append(prev)
        prev = current

    normalized.append(prev)
    return normalized


def build_strokes(fractals: Sequence[Fractal]) -> list[Stroke]:
    """
    Pair normalized fractals into strokes.

    Args:
        fractals: Raw fractals in ascending index order

    Returns:
        Strokes in time order, alternating direction. Fewer than two
        normalized fractals yields [].
    """
    normalized = normalize_fractals(fractals)
    if len(normalized) < 2:
        return []

    strokes = [
        Stroke(direction_from_kind(start.kind), start, end)
        for start, end in zip(normalized, normalized[1:])
    ]

    logger.debug(
        f"Built {len(strokes)} strokes from {len(fractals)} fractals "
        f"({len(normalized)} after normalization)"
    )
    return strokes
