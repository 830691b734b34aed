"""
Pivot zone ("zhongshu") construction.

Only strokes counter to their segment's direction take part. A zone opens
from the last two buffered strokes whose envelopes strictly overlap, and the
most recent zone keeps absorbing overlapping strokes, narrowing its band to
the intersection. A zone is frozen once a newer zone opens after it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Sequence

from ._structure_utils import overlap_range
from .types import PivotZone, Segment, Stroke

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _RangeItem:
    bi_index: int
    stroke: Stroke
    high: float
    low: float


def _to_range_item(stroke: Stroke, bi_index: int) -> _RangeItem:
    return _RangeItem(bi_index, stroke, stroke.high, stroke.low)


def segment_index_for(bi_index: int, segments: Sequence[Segment]) -> int:
    """Index of the segment containing the stroke, or the last segment if none does."""
    for index, segment in enumerate(segments):
        if segment.start_bi_index <= bi_index <= segment.end_bi_index:
            return index
    return len(segments) - 1


def _try_extend(zones: list[PivotZone], item: _RangeItem, segments: Sequence[Segment]) -> bool:
    if not zones:
        return False

    last = zones[-1]
    overlap = overlap_range([(last.high, last.low), (item.high, item.low)])
    if overlap is None:
        return False

    high, low = overlap
    zones[-1] = replace(
        last,
        end_bi_index=item.bi_index,
        end_segment_index=segment_index_for(item.bi_index, segments),
        end=item.stroke.end,
        high=high,
        low=low,
    )
    return True


def _try_open(
    zones: list[PivotZone], free_items: list[_RangeItem], segments: Sequence[Segment]
) -> None:
    if len(free_items) < 2:
        return

    begin, end = free_items[-2:]
    overlap = overlap_range([(begin.high, begin.low), (end.high, end.low)])
    if overlap is None:
        return

    high, low = overlap
    zones.append(
        PivotZone(
            id=f"zs-{begin.bi_index}-{end.bi_index}",
            start_bi_index=begin.bi_index,
            end_bi_index=end.bi_index,
            start_segment_index=segment_index_for(begin.bi_index, segments),
            end_segment_index=segment_index_for(end.bi_index, segments),
            start=begin.stroke.start,
            end=end.stroke.end,
            high=high,
            low=low,
        )
    )
    free_items.clear()


def build_pivot_zones(segments: Sequence[Segment], strokes: Sequence[Stroke]) -> list[PivotZone]:
    """
    Build pivot zones from the counter-trend strokes of each segment.

    Args:
        segments: Output of build_segments
        strokes: The strokes the segments were built from

    Returns:
        Zones in order of creation. No segments or fewer than 2 strokes
        yields [].
    """
    if not segments or len(strokes) < 2:
        return []

    zones: list[PivotZone] = []
    free_items: list[_RangeItem] = []

    for segment in segments:
        for bi_index in range(segment.start_bi_index, segment.end_bi_index + 1):
            if bi_index >= len(strokes):
                break
            stroke = strokes[bi_index]
            if stroke.direction == segment.direction:
                continue

            item = _to_range_item(stroke, bi_index)
            if not _try_extend(zones, item, segments):
                free_items.append(item)
                _try_open(zones, free_items, segments)

    logger.debug(f"Built {len(zones)} pivot zones from {len(segments)} segments")
    return zones
