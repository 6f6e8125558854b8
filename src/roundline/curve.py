from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Sequence

import numpy as np

from roundline.validation import EPSILON, ValidationError, require_point, validate_vertices


class SegmentType(Enum):
    LINE = "line"
    ARC = "arc"
    POINT = "point"
    EMPTY = "empty"


@dataclass(frozen=True)
class LineSegment:
    start: np.ndarray
    end: np.ndarray

    def __post_init__(self) -> None:
        object.__setattr__(self, "start", require_point(self.start, "start"))
        object.__setattr__(self, "end", require_point(self.end, "end"))

    @property
    def length(self) -> float:
        return float(np.linalg.norm(self.end - self.start))

    def point_at(self, distance: float) -> np.ndarray:
        length = self.length
        if length == 0.0:
            return self.start.copy()
        t = min(max(distance / length, 0.0), 1.0)
        return self.start + (self.end - self.start) * t

    def tangent_at(self, distance: float) -> np.ndarray:
        length = self.length
        if length == 0.0:
            return np.zeros(3)
        return (self.end - self.start) / length

    def sample(self) -> np.ndarray:
        return np.vstack([self.start, self.end])


@dataclass(frozen=True)
class ArcSegment:
    """Arc between two points, shaped by a bulge (tan of a quarter of the sweep).

    Positive bulges sweep counter-clockwise, negative ones clockwise.
    """

    start: np.ndarray
    end: np.ndarray
    bulge: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "start", require_point(self.start, "start"))
        object.__setattr__(self, "end", require_point(self.end, "end"))
        if not math.isfinite(self.bulge) or self.bulge == 0.0:
            raise ValidationError("bulge must be finite and non-zero.")
        object.__setattr__(self, "bulge", float(self.bulge))

    @property
    def chord(self) -> float:
        return float(np.hypot(*(self.end[:2] - self.start[:2])))

    @property
    def sweep(self) -> float:
        """Signed included angle in radians."""

        return 4.0 * math.atan(self.bulge)

    @property
    def radius(self) -> float:
        b = abs(self.bulge)
        return self.chord * (1.0 + b * b) / (4.0 * b)

    @property
    def center(self) -> np.ndarray:
        chord = self.chord
        u = (self.end[:2] - self.start[:2]) / chord
        left = np.array([-u[1], u[0]])
        mid = (self.start[:2] + self.end[:2]) * 0.5
        b = self.bulge
        offset = chord * (1.0 - b * b) / (4.0 * b)
        cx, cy = mid + left * offset
        return np.array([cx, cy, self.start[2]])

    @property
    def length(self) -> float:
        return self.radius * abs(self.sweep)

    def _angle_at(self, distance: float) -> float:
        center = self.center
        a0 = math.atan2(self.start[1] - center[1], self.start[0] - center[0])
        length = self.length
        t = min(max(distance / length, 0.0), 1.0) if length > 0.0 else 0.0
        return a0 + self.sweep * t

    def point_at(self, distance: float) -> np.ndarray:
        center = self.center
        angle = self._angle_at(distance)
        r = self.radius
        return np.array([center[0] + r * math.cos(angle), center[1] + r * math.sin(angle), self.start[2]])

    def tangent_at(self, distance: float) -> np.ndarray:
        angle = self._angle_at(distance)
        sign = 1.0 if self.sweep > 0 else -1.0
        return np.array([-math.sin(angle) * sign, math.cos(angle) * sign, 0.0])

    def sample(self, segments_per_circle: int) -> np.ndarray:
        if segments_per_circle < 3:
            raise ValueError("segments_per_circle must be >= 3.")
        sweep = self.sweep
        steps = max(int(np.ceil(segments_per_circle * (abs(sweep) / (2 * np.pi)))), 2)
        center = self.center
        a0 = math.atan2(self.start[1] - center[1], self.start[0] - center[0])
        angles = np.linspace(a0, a0 + sweep, steps, endpoint=True)
        r = self.radius
        x = center[0] + r * np.cos(angles)
        y = center[1] + r * np.sin(angles)
        pts = np.column_stack([x, y, np.full(steps, self.start[2])])
        pts[0] = self.start
        pts[-1] = self.end
        return pts


Segment = LineSegment | ArcSegment


@dataclass(frozen=True)
class Curve:
    """Polyline made of line and arc segments.

    ``bulges[i]`` shapes the segment that starts at vertex ``i``; a zero bulge
    is a straight line. Closed curves have a final segment back to vertex 0.
    """

    points: np.ndarray
    bulges: np.ndarray | None = None
    closed: bool = False

    def __post_init__(self) -> None:
        pts = np.vstack([require_point(p, "point") for p in self.points]) if len(self.points) else np.zeros((0, 3))
        if self.bulges is None:
            bulges = np.zeros(pts.shape[0], dtype=float)
        else:
            try:
                bulges = np.asarray(self.bulges, dtype=float).reshape(-1).copy()
            except (TypeError, ValueError) as exc:
                raise ValidationError("bulges must be numbers.") from exc
        validate_vertices(pts, bulges, self.closed)
        pts.setflags(write=False)
        bulges.setflags(write=False)
        object.__setattr__(self, "points", pts)
        object.__setattr__(self, "bulges", bulges)
        object.__setattr__(self, "closed", bool(self.closed))

    @classmethod
    def from_points(cls, points: Iterable[Sequence[float]], closed: bool = False) -> "Curve":
        pts = [require_point(p, "point") for p in points]
        if closed and len(pts) > 2 and np.allclose(pts[0], pts[-1], atol=EPSILON):
            pts = pts[:-1]
        return cls(points=pts, closed=closed)

    @property
    def n_vertices(self) -> int:
        return int(self.points.shape[0])

    @property
    def n_segments(self) -> int:
        return self.n_vertices if self.closed else self.n_vertices - 1

    @property
    def start_point(self) -> np.ndarray:
        return self.points[0].copy()

    @property
    def end_point(self) -> np.ndarray:
        return self.points[0].copy() if self.closed else self.points[-1].copy()

    @property
    def is_planar(self) -> bool:
        return bool(np.all(np.abs(self.points[:, 2] - self.points[0, 2]) < EPSILON))

    @property
    def has_bulges(self) -> bool:
        return bool(np.any(self.bulges != 0.0))

    def segment_type(self, index: int) -> SegmentType:
        if index < 0 or index >= self.n_segments:
            return SegmentType.EMPTY
        start = self.points[index]
        end = self.points[(index + 1) % self.n_vertices]
        if np.linalg.norm(end - start) < EPSILON:
            return SegmentType.POINT
        if self.bulges[index] != 0.0:
            return SegmentType.ARC
        return SegmentType.LINE

    def segment(self, index: int) -> Segment | None:
        kind = self.segment_type(index)
        if kind in (SegmentType.EMPTY, SegmentType.POINT):
            return None
        start = self.points[index]
        end = self.points[(index + 1) % self.n_vertices]
        if kind is SegmentType.ARC:
            return ArcSegment(start, end, float(self.bulges[index]))
        return LineSegment(start, end)

    def segments(self) -> List[Segment]:
        return [seg for seg in (self.segment(i) for i in range(self.n_segments)) if seg is not None]

    def line_segments(self) -> List[LineSegment]:
        return [seg for seg in self.segments() if isinstance(seg, LineSegment)]

    def segment_lengths(self) -> np.ndarray:
        return np.asarray([seg.length for seg in self.segments()], dtype=float)

    @property
    def length(self) -> float:
        return float(self.segment_lengths().sum())

    def _locate(self, distance: float) -> tuple[Segment, float]:
        segments = self.segments()
        if not segments:
            raise ValidationError("Curve has no measurable segments.")
        remaining = min(max(float(distance), 0.0), self.length)
        for seg in segments:
            seg_len = seg.length
            if remaining <= seg_len:
                return seg, remaining
            remaining -= seg_len
        last = segments[-1]
        return last, last.length

    def point_at_distance(self, distance: float) -> np.ndarray:
        """Point at arclength ``distance`` from the start, clamped to the curve."""

        seg, local = self._locate(distance)
        return seg.point_at(local)

    def tangent_at_distance(self, distance: float) -> np.ndarray:
        seg, local = self._locate(distance)
        return seg.tangent_at(local)

    def sample(self, segments_per_circle: int = 64) -> np.ndarray:
        segments = self.segments()
        if not segments:
            return np.zeros((0, 3), dtype=float)
        points = []
        for idx, seg in enumerate(segments):
            if isinstance(seg, LineSegment):
                seg_points = seg.sample()
            else:
                seg_points = seg.sample(segments_per_circle)
            if idx > 0:
                seg_points = seg_points[1:]
            points.append(seg_points)
        return np.vstack(points)


__all__ = ["ArcSegment", "Curve", "LineSegment", "Segment", "SegmentType"]
