"""
ICT structure events: BOS / CHOCH.

Swings are the stroke endpoints in order (origin of the first stroke, then
the destination of every stroke). A top above the most extreme top so far, or
a bottom below the most extreme bottom so far, is a structure break.

Classification modes:
    trend     - CHOCH when the break opposes the direction of the previous
                break, BOS otherwise
    bos_only  - every break is a BOS
"""

from __future__ import annotations

import logging
from typing import Literal, Optional, Sequence

from ._structure_utils import MIN_EVENT_SWINGS, at_least_as_extreme, exceeds
from .types import (
    Direction,
    Fractal,
    LabeledStroke,
    Stroke,
    StructureEvent,
    StructureKind,
)

logger = logging.getLogger(__name__)

EventMode = Literal["trend", "bos_only"]


def swings_from_strokes(strokes: Sequence[Stroke]) -> list[Fractal]:
    """Collapse strokes back into their alternating endpoint sequence."""
    if not strokes:
        return []
    return [strokes[0].start] + [stroke.end for stroke in strokes]


def label_strokes(strokes: Sequence[Stroke]) -> list[LabeledStroke]:
    """Tag each stroke for the ICT layer, keeping a reference by index."""
    return [LabeledStroke(index, stroke) for index, stroke in enumerate(strokes)]


def create_structure_event(
    kind: StructureKind, direction: Direction, broken_from: Fractal, confirmed_by: Fractal
) -> StructureEvent:
    return StructureEvent(
        id=f"{kind}-{direction}-{broken_from.index}-{confirmed_by.index}",
        kind=kind,
        direction=direction,
        broken_from=broken_from,
        confirmed_by=confirmed_by,
        broken_price=broken_from.bar.high if direction == "up" else broken_from.bar.low,
    )


def _classify(
    direction: Direction, trend: Optional[Direction], mode: EventMode
) -> StructureKind:
    if mode == "trend" and trend is not None and trend != direction:
        return "choch"
    return "bos"


def detect_structure_events(
    strokes: Sequence[Stroke], mode: EventMode = "trend"
) -> list[StructureEvent]:
    """
    Detect structure breaks along the swing sequence.

    Args:
        strokes: Strokes in time order
        mode: "trend" (BOS/CHOCH by trend memory) or "bos_only"

    Returns:
        Events in the order they were confirmed. Fewer than 3 swings yields [].
    """
    swings = swings_from_strokes(strokes)
    if len(swings) < MIN_EVENT_SWINGS:
        return []

    last_top: Optional[Fractal] = None
    last_bottom: Optional[Fractal] = None
    trend: Optional[Direction] = None
    events: list[StructureEvent] = []

    for swing in swings:
        if swing.kind == "top":
            direction: Direction = "up"
            reference = last_top
        else:
            direction = "down"
            reference = last_bottom

        if reference is not None and exceeds(direction, swing, reference):
            kind = _classify(direction, trend, mode)
            events.append(create_structure_event(kind, direction, reference, swing))
            trend = direction

        if reference is None or at_least_as_extreme(direction, swing, reference):
            if swing.kind == "top":
                last_top = swing
            else:
                last_bottom = swing

    logger.debug(
        f"Detected {len(events)} structure events from {len(swings)} swings (mode={mode})"
    )
    return events
