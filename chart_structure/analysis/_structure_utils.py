"""Comparison helpers and constants shared by the structure stages."""

from __future__ import annotations

from typing import Iterable, Optional

from .types import Direction, Fractal, FractalKind, Stroke

MIN_FRACTAL_BARS = 3
MIN_SEGMENT_STROKES = 3
MIN_EVENT_SWINGS = 3

# Opposite breakouts must be more than this many strokes past the candidate.
DEFAULT_SEGMENT_CONFIRM_GAP = 2


def direction_from_kind(kind: FractalKind) -> Direction:
    """A stroke leaving a bottom goes up, one leaving a top goes down."""
    return "up" if kind == "bottom" else "down"


def is_better_fractal(candidate: Fractal, current: Fractal) -> bool:
    """Same-kind comparison: higher top or lower bottom, ties favour the candidate."""
    if candidate.kind != current.kind:
        return False
    if candidate.kind == "top":
        return candidate.bar.high >= current.bar.high
    return candidate.bar.low <= current.bar.low


def exceeds(direction: Direction, candidate: Fractal, reference: Fractal) -> bool:
    """Strict breakout of `reference` by `candidate` in `direction`."""
    if direction == "up":
        return candidate.bar.high > reference.bar.high
    return candidate.bar.low < reference.bar.low


def at_least_as_extreme(direction: Direction, candidate: Fractal, reference: Fractal) -> bool:
    if direction == "up":
        return candidate.bar.high >= reference.bar.high
    return candidate.bar.low <= reference.bar.low


def stroke_envelope(strokes: Iterable[Stroke]) -> tuple[float, float]:
    """(high, low) over the endpoint bars of the given strokes."""
    high = float("-inf")
    low = float("inf")
    for stroke in strokes:
        high = max(high, stroke.start.bar.high, stroke.end.bar.high)
        low = min(low, stroke.start.bar.low, stroke.end.bar.low)
    return high, low


def overlap_range(bands: Iterable[tuple[float, float]]) -> Optional[tuple[float, float]]:
    """
    Intersect (high, low) bands.

    Returns (min(highs), max(lows)) when min(highs) > max(lows), else None.
    A boundary touch is not an overlap.
    """
    min_high = float("inf")
    max_low = float("-inf")
    empty = True
    for high, low in bands:
        empty = False
        min_high = min(min_high, high)
        max_low = max(max_low, low)

    if empty or min_high <= max_low:
        return None
    return min_high, max_low
