from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Protocol, Union

import numpy as np

from roundline.curve import ArcSegment, Curve, LineSegment
from roundline.validation import require_point


@dataclass(frozen=True)
class LinePrimitive:
    start: np.ndarray
    end: np.ndarray
    width: float = 0.0
    color: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "start", require_point(self.start, "start"))
        object.__setattr__(self, "end", require_point(self.end, "end"))


@dataclass(frozen=True)
class ArcPrimitive:
    start: np.ndarray
    end: np.ndarray
    bulge: float
    width: float = 0.0
    color: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "start", require_point(self.start, "start"))
        object.__setattr__(self, "end", require_point(self.end, "end"))

    def to_segment(self) -> ArcSegment:
        return ArcSegment(self.start, self.end, self.bulge)


@dataclass(frozen=True)
class PolygonPrimitive:
    points: np.ndarray
    filled: bool = True
    color: str | None = None

    def __post_init__(self) -> None:
        pts = np.vstack([require_point(p, "point") for p in self.points])
        if pts.shape[0] < 3:
            raise ValueError("PolygonPrimitive requires at least three points.")
        object.__setattr__(self, "points", pts)


@dataclass(frozen=True)
class CirclePrimitive:
    center: np.ndarray
    radius: float
    color: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "center", require_point(self.center, "center"))
        if not np.isfinite(self.radius) or self.radius <= 0:
            raise ValueError("radius must be positive.")


@dataclass(frozen=True)
class TextPrimitive:
    """Single-line label anchored at its bottom center."""

    position: np.ndarray
    text: str
    rotation: float = 0.0
    height: float = 2.5
    color: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "position", require_point(self.position, "position"))


Primitive = Union[LinePrimitive, ArcPrimitive, PolygonPrimitive, CirclePrimitive, TextPrimitive]


class DrawSurface(Protocol):
    def draw(self, primitive: Primitive) -> None: ...


@dataclass
class RecordingSurface:
    """Surface that keeps every primitive it receives, in order."""

    primitives: List[Primitive] = field(default_factory=list)

    def draw(self, primitive: Primitive) -> None:
        self.primitives.append(primitive)

    def of_type(self, kind: type) -> List[Primitive]:
        return [p for p in self.primitives if isinstance(p, kind)]

    def clear(self) -> None:
        self.primitives.clear()


def curve_primitives(curve: Curve, width: float = 0.0, color: str | None = None) -> List[Primitive]:
    """Translate a curve into one line or arc primitive per segment."""

    result: List[Primitive] = []
    for seg in curve.segments():
        if isinstance(seg, LineSegment):
            result.append(LinePrimitive(seg.start, seg.end, width=width, color=color))
        else:
            result.append(ArcPrimitive(seg.start, seg.end, seg.bulge, width=width, color=color))
    return result


__all__ = [
    "ArcPrimitive",
    "CirclePrimitive",
    "DrawSurface",
    "LinePrimitive",
    "PolygonPrimitive",
    "Primitive",
    "RecordingSurface",
    "TextPrimitive",
    "curve_primitives",
]
