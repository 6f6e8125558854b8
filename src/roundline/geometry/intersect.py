from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

import numpy as np

from roundline.geometry.vector import direction, is_null
from roundline.validation import EPSILON


class IntersectState(Enum):
    INVALID_POINTS = -1
    REAL = 0
    APPARENT = 1
    NO_INTERSECTION = 2
    OVERLAPPING = 3
    COLINEAR = 4


@dataclass(frozen=True)
class Intersection:
    state: IntersectState
    point: np.ndarray | None = None

    @property
    def found(self) -> bool:
        """True for real and apparent intersections, the only states with a point."""

        return self.state in (IntersectState.REAL, IntersectState.APPARENT)


def _xy(value) -> np.ndarray:
    return np.asarray(value, dtype=float).reshape(-1)[:2]


def _dist(a: np.ndarray, b: np.ndarray) -> float:
    return float(np.hypot(b[0] - a[0], b[1] - a[1]))


def intersect_segments(p1, p2, q1, q2) -> Intersection:
    """Classify the intersection of segments ``p1-p2`` and ``q1-q2`` in the XY plane.

    Non-parallel segments always produce a point: ``REAL`` when it lies on both
    segments (within ``EPSILON`` of their parameter range), ``APPARENT`` when it
    lies on the extension of either one.
    """

    p1, p2, q1, q2 = _xy(p1), _xy(p2), _xy(q1), _xy(q2)
    r1 = direction(p1, p2)
    r2 = direction(q1, q2)
    if is_null(r1) or is_null(r2):
        return Intersection(IntersectState.INVALID_POINTS)

    a1, a2 = r1[0], r1[1]
    b1, b2 = -r2[0], -r2[1]
    c1, c2 = q1[0] - p1[0], q1[1] - p1[1]
    det = a1 * b2 - a2 * b1

    if abs(det) > EPSILON:
        t = (c1 * b2 - c2 * b1) / det
        v = (c2 * a1 - c1 * a2) / det
        point = np.array([q1[0] + r2[0] * v, q1[1] + r2[1] * v])
        t /= _dist(p1, p2)
        v /= _dist(q1, q2)
        lo, hi = -EPSILON, 1.0 + EPSILON
        if lo < t < hi and lo < v < hi:
            return Intersection(IntersectState.REAL, point)
        return Intersection(IntersectState.APPARENT, point)

    # Parallel: a connecting pair of endpoints sharing the direction means one line.
    if _dist(p1, q1) > EPSILON:
        rx = direction(p1, q1)
    else:
        rx = direction(p1, q2)
    same = np.allclose(rx[:2], r1[:2], atol=EPSILON) or np.allclose(rx[:2], -r1[:2], atol=EPSILON)
    if not same:
        return Intersection(IntersectState.NO_INTERSECTION)

    if _outside(q1, p1, p2) and _outside(q2, p1, p2) and _outside(p1, q1, q2) and _outside(p2, q1, q2):
        return Intersection(IntersectState.COLINEAR)
    return Intersection(IntersectState.OVERLAPPING)


def _outside(point: np.ndarray, start: np.ndarray, end: np.ndarray) -> bool:
    return _dist(point, start) + _dist(point, end) > _dist(start, end) + EPSILON


def intersect_lines_3d(seg_a, seg_b) -> np.ndarray | None:
    """Intersect two line segments of a planar curve, keeping the curve's elevation."""

    result = intersect_segments(seg_a.start, seg_a.end, seg_b.start, seg_b.end)
    if not result.found:
        return None
    return np.array([result.point[0], result.point[1], float(seg_a.start[2])])


__all__ = ["IntersectState", "Intersection", "intersect_lines_3d", "intersect_segments"]
