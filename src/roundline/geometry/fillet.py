"""Rounded-corner geometry for two converging line segments.

A fillet is described the way polyline hosts store it: the two tangent points
where the arc meets the segments plus a bulge, the signed tangent of a quarter
of the arc's included angle. The arc center and the arc midpoint on the
bisector are kept as well because grip editing and drawing both need them.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

import numpy as np

from roundline.geometry.intersect import intersect_segments
from roundline.geometry.vector import bisector, cross2, direction, distance_from_line
from roundline.validation import EPSILON

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FilletSolution:
    corner: np.ndarray
    start: np.ndarray
    end: np.ndarray
    center: np.ndarray
    midpoint: np.ndarray
    bulge: float
    radius: float
    requested_radius: float
    swapped: bool

    @property
    def reduced(self) -> bool:
        return self.radius < self.requested_radius - 1e-12

    @property
    def tangent_distance(self) -> float:
        return float(np.linalg.norm(self.start[:2] - self.corner[:2]))


@dataclass(frozen=True)
class CornerVertex:
    """Fillet data for one corner of a rebuilt curve.

    ``start`` lies on the incoming segment and carries ``bulge``; ``end`` lies
    on the outgoing one. A sharp corner has all points equal and a zero bulge.
    """

    point: np.ndarray
    requested_radius: float
    radius: float
    start: np.ndarray
    end: np.ndarray
    center: np.ndarray
    midpoint: np.ndarray
    bulge: float = 0.0

    @classmethod
    def sharp(cls, point: np.ndarray, requested_radius: float = 0.0) -> "CornerVertex":
        pt = np.asarray(point, dtype=float)
        return cls(
            point=pt,
            requested_radius=float(requested_radius),
            radius=0.0,
            start=pt,
            end=pt,
            center=pt,
            midpoint=pt,
        )

    @classmethod
    def from_solution(cls, solution: FilletSolution) -> "CornerVertex":
        return cls(
            point=solution.corner,
            requested_radius=solution.requested_radius,
            radius=solution.radius,
            start=solution.start,
            end=solution.end,
            center=solution.center,
            midpoint=solution.midpoint,
            bulge=solution.bulge,
        )

    @property
    def is_sharp(self) -> bool:
        return self.radius == 0.0


def _planar(value, elevation: float) -> np.ndarray:
    arr = np.asarray(value, dtype=float).reshape(-1)
    return np.array([arr[0], arr[1], elevation])


def _xy_dist(a: np.ndarray, b: np.ndarray) -> float:
    return float(math.hypot(b[0] - a[0], b[1] - a[1]))


def solve_fillet(
    corner,
    first,
    second,
    radius: float,
    allow_reduction: bool = True,
) -> FilletSolution | None:
    """Compute the fillet between ``corner-first`` and ``corner-second``.

    The two adjacent points may be given in either order; the solver normalizes
    them and reports the decision in ``FilletSolution.swapped``. With
    ``allow_reduction`` the radius shrinks until the tangent points fit on the
    shorter segment. The requested radius is never modified; the effective one
    is returned in ``FilletSolution.radius``.

    Returns ``None`` when no fillet exists, callers fall back to a sharp corner.
    """

    try:
        return _solve(corner, first, second, float(radius), allow_reduction)
    except ArithmeticError as exc:
        logger.debug("Fillet at %s failed: %s", corner, exc)
        return None


def _solve(corner, first, second, radius: float, allow_reduction: bool) -> FilletSolution | None:
    org = np.asarray(corner, dtype=float).reshape(-1)
    elevation = float(org[2]) if org.shape[0] > 2 else 0.0
    org = _planar(org, elevation)
    first = _planar(first, elevation)
    second = _planar(second, elevation)

    d1 = _xy_dist(org, first)
    d2 = _xy_dist(org, second)
    dd = _xy_dist(first, second)
    if d1 < EPSILON or d2 < EPSILON:
        logger.debug("Fillet at %s rejected: null segment", org[:2])
        return None
    if dd < EPSILON:
        logger.debug("Fillet at %s rejected: overlapping segments", org[:2])
        return None
    if abs(dd - d1 - d2) < EPSILON:
        logger.debug("Fillet at %s rejected: colinear segments", org[:2])
        return None
    if radius < EPSILON:
        return None

    # One formula below: `p2` must lie counter-clockwise of `corner -> p1`.
    swapped = distance_from_line(org, first, second) > 0.0
    p1, p2 = (second, first) if swapped else (first, second)

    r1 = direction(org, p1)
    r2 = direction(org, p2)
    rb = bisector(r1, r2)
    if rb is None:
        logger.debug("Fillet at %s rejected: undefined bisector", org[:2])
        return None

    # Bisector in the frame of the first segment: the radius is the far side of
    # a right triangle whose hypotenuse runs along the bisector.
    cos_h = float(rb[0] * r1[0] + rb[1] * r1[1])
    sin_h = cross2(r1, rb)
    hypotenuse = radius / sin_h
    tangent = hypotenuse * cos_h

    effective = radius
    if allow_reduction:
        shortest = min(d1, d2)
        if tangent > shortest:
            effective = shortest * sin_h / cos_h
            hypotenuse = effective / sin_h
            tangent = hypotenuse * cos_h

    on_p1 = org + tangent * r1
    on_p2 = org + tangent * r2
    start, end = (on_p2, on_p1) if swapped else (on_p1, on_p2)

    midpoint = org + (hypotenuse - effective) * rb
    center = org + hypotenuse * rb

    chord = _xy_dist(start, end)
    bulge = 0.0
    if chord > EPSILON:
        sagitta = abs(distance_from_line(start, end, midpoint))
        bulge = 2.0 * sagitta / chord
    # Positive bulge winds counter-clockwise.
    if not swapped:
        bulge = -bulge

    values = np.concatenate([start, end, center, midpoint, [bulge, effective]])
    if not np.all(np.isfinite(values)):
        raise FloatingPointError("non-finite fillet geometry")

    return FilletSolution(
        corner=org,
        start=start,
        end=end,
        center=center,
        midpoint=midpoint,
        bulge=float(bulge),
        radius=float(effective),
        requested_radius=radius,
        swapped=swapped,
    )


def estimate_fillet_radius(seg_a, seg_b) -> float:
    """Estimate the fillet radius already present between two line segments.

    The perpendiculars raised at the endpoints nearest to the segments'
    intersection meet at the arc center. For an untouched fillet both
    endpoint-to-center distances equal the radius; after a stretch they differ
    and the smaller one is the largest radius that still fits.
    """

    hit = intersect_segments(seg_a.start, seg_a.end, seg_b.start, seg_b.end)
    if not hit.found:
        return 0.0

    a_end = _nearest_end(seg_a, hit.point)
    b_end = _nearest_end(seg_b, hit.point)
    da = direction(seg_a.start, seg_a.end)
    db = direction(seg_b.start, seg_b.end)
    perp_a = a_end + np.array([-da[1], da[0]])
    perp_b = b_end + np.array([-db[1], db[0]])

    center = intersect_segments(a_end, perp_a, b_end, perp_b)
    if not center.found:
        return 0.0
    return min(_xy_dist(a_end, center.point), _xy_dist(b_end, center.point))


def _nearest_end(segment, point: np.ndarray) -> np.ndarray:
    start = np.asarray(segment.start, dtype=float)[:2]
    end = np.asarray(segment.end, dtype=float)[:2]
    return start if _xy_dist(start, point) < _xy_dist(end, point) else end


__all__ = ["CornerVertex", "FilletSolution", "estimate_fillet_radius", "solve_fillet"]
