"""
Structural entities shared by the Chan and ICT pipelines.

Every entity is a frozen dataclass. Stages never mutate an entity they have
returned; extending a segment or zone produces a new value that replaces the
last element of the stage's own output list.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from ..io.schema import Bar

FractalKind = Literal["top", "bottom"]
Direction = Literal["up", "down"]
StructureKind = Literal["bos", "choch"]

ICT_STROKE_LABEL = "ict-bi"


@dataclass(frozen=True)
class Fractal:
    """Local 3-bar extremum; `bar` is the middle bar of the window."""

    kind: FractalKind
    index: int
    bar: Bar

    @property
    def price(self) -> float:
        return self.bar.high if self.kind == "top" else self.bar.low


@dataclass(frozen=True)
class Stroke:
    """Directional move ("bi") between two alternating fractals."""

    direction: Direction
    start: Fractal
    end: Fractal

    @property
    def high(self) -> float:
        return max(self.start.bar.high, self.end.bar.high)

    @property
    def low(self) -> float:
        return min(self.start.bar.low, self.end.bar.low)


@dataclass(frozen=True)
class Segment:
    direction: Direction
    start: Fractal
    end: Fractal
    high: float
    low: float
    start_bi_index: int
    end_bi_index: int
    is_sure: bool

    @property
    def start_fractal_index(self) -> int:
        return self.start.index

    @property
    def end_fractal_index(self) -> int:
        return self.end.index


@dataclass(frozen=True)
class PivotZone:
    """Consolidation band ("zhongshu") built from overlapping counter-trend strokes."""

    id: str
    start_bi_index: int
    end_bi_index: int
    start_segment_index: int
    end_segment_index: int
    start: Fractal
    end: Fractal
    high: float
    low: float


@dataclass(frozen=True)
class StructureEvent:
    id: str
    kind: StructureKind
    direction: Direction
    broken_from: Fractal
    confirmed_by: Fractal
    broken_price: float


@dataclass(frozen=True)
class LabeledStroke:
    """ICT view of a stroke: tags the shared stroke without copying its shape."""

    stroke_index: int
    stroke: Stroke
    label: str = ICT_STROKE_LABEL


@dataclass(frozen=True)
class StructuralAnalysis:
    fractals: tuple[Fractal, ...] = ()
    strokes: tuple[Stroke, ...] = ()
    segments: tuple[Segment, ...] = ()
    zones: tuple[PivotZone, ...] = ()


@dataclass(frozen=True)
class BreakoutAnalysis:
    fractals: tuple[Fractal, ...] = ()
    strokes: tuple[Stroke, ...] = ()
    events: tuple[StructureEvent, ...] = ()
    labeled_strokes: tuple[LabeledStroke, ...] = field(default=(), compare=False)

    @property
    def bos_events(self) -> list[StructureEvent]:
        return [event for event in self.events if event.kind == "bos"]

    @property
    def choch_events(self) -> list[StructureEvent]:
        return [event for event in self.events if event.kind == "choch"]
