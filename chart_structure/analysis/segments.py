"""
analysis/segments.py
线段构建 (Segment Builder)

职责:
1. 用 idx 与 idx-2 的突破关系识别候选峰笔 (peak stroke)。
2. 反向候选峰之间至少相隔 gap+1 笔才确认上一条线段。
3. 收尾时把未消化的候选峰补成一条未确认线段 (is_sure=False)。
4. 后处理: 末段之后若有同向更高/更低的笔，把末段终点向后推。

线段按笔索引连续划分，不重叠、不留空。
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from ._structure_utils import (
    DEFAULT_SEGMENT_CONFIRM_GAP,
    MIN_SEGMENT_STROKES,
    at_least_as_extreme,
    exceeds,
    stroke_envelope,
)
from .types import Segment, Stroke

logger = logging.getLogger(__name__)


def is_breakout(strokes: Sequence[Stroke], index: int) -> bool:
    """
    Stroke `index` breaks out when its endpoint exceeds that of stroke index-2.

    Up strokes compare highs, down strokes compare lows; both strictly.
    Strokes before index 2 never break out.
    """
    if index < 2:
        return False
    current = strokes[index]
    return exceeds(current.direction, current.end, strokes[index - 2].end)


def is_confirmed_gap(
    peak_index: int, index: int, min_gap: int = DEFAULT_SEGMENT_CONFIRM_GAP
) -> bool:
    """An opposite breakout confirms the peak only when more than `min_gap` strokes away."""
    return index - peak_index > min_gap


def create_segment(
    strokes: Sequence[Stroke], start_bi_index: int, end_bi_index: int, is_sure: bool
) -> Segment:
    """Build a segment over strokes[start_bi_index:end_bi_index + 1] (inclusive)."""
    first = strokes[start_bi_index]
    last = strokes[end_bi_index]
    high, low = stroke_envelope(strokes[start_bi_index : end_bi_index + 1])

    return Segment(
        direction=first.direction,
        start=first.start,
        end=last.end,
        high=high,
        low=low,
        start_bi_index=start_bi_index,
        end_bi_index=end_bi_index,
        is_sure=is_sure,
    )


def _next_start(segments: list[Segment]) -> int:
    return 0 if not segments else segments[-1].end_bi_index + 1


def extend_last_segment(segments: list[Segment], strokes: Sequence[Stroke]) -> None:
    """
    Push the last segment's end through later same-direction strokes.

    Each later stroke sharing the segment's direction whose endpoint strictly
    exceeds the current segment end replaces the last element with a
    recomputed segment. The confirmation flag is kept.
    """
    if not segments:
        return

    for index in range(segments[-1].end_bi_index + 1, len(strokes)):
        last = segments[-1]
        stroke = strokes[index]
        if stroke.direction != last.direction:
            continue

        if exceeds(last.direction, stroke.end, last.end):
            segments[-1] = create_segment(strokes, last.start_bi_index, index, last.is_sure)
            logger.debug(f"Extended last segment to stroke {index}")


def build_segments(
    strokes: Sequence[Stroke], confirm_gap: int = DEFAULT_SEGMENT_CONFIRM_GAP
) -> list[Segment]:
    """
    Group strokes into segments with the breakout/confirmation state machine.

    Args:
        strokes: Alternating strokes in time order
        confirm_gap: An opposite breakout confirms the candidate only when
            `index - candidate > confirm_gap`

    Returns:
        Segments in ascending stroke order; only the last may be provisional.
        Fewer than 3 strokes yields [].
    """
    if len(strokes) < MIN_SEGMENT_STROKES:
        return []

    segments: list[Segment] = []
    peak_index: Optional[int] = None

    # -------------------------------------------------------------------------
    # 状态机: 只处理突破笔
    # -------------------------------------------------------------------------
    for index in range(2, len(strokes)):
        if not is_breakout(strokes, index):
            continue

        current = strokes[index]

        # 尚无候选峰: 首段或与上一段反向时才接纳
        if peak_index is None:
            if not segments or current.direction != segments[-1].direction:
                peak_index = index
            continue

        peak = strokes[peak_index]

        # 同向: 持续创新高/低则更新峰笔 (相等时取后者)
        if peak.direction == current.direction:
            if at_least_as_extreme(current.direction, current.end, peak.end):
                peak_index = index
            continue

        # 反向: 间隔不足则忽略，保留原候选
        if not is_confirmed_gap(peak_index, index, confirm_gap):
            continue

        start = _next_start(segments)
        if peak_index >= start:
            segments.append(create_segment(strokes, start, peak_index, True))

        peak_index = index

    # -------------------------------------------------------------------------
    # 收尾: 未确认的候选峰补一条未确认线段
    # -------------------------------------------------------------------------
    if peak_index is not None:
        start = _next_start(segments)
        if peak_index >= start:
            segments.append(create_segment(strokes, start, peak_index, False))

    extend_last_segment(segments, strokes)

    logger.debug(
        f"Built {len(segments)} segments from {len(strokes)} strokes "
        f"({sum(1 for s in segments if s.is_sure)} confirmed)"
    )
    return segments
