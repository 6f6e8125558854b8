"""Regenerate a line/arc curve from corner control points and fillet radii."""

from __future__ import annotations

import logging
from typing import Iterable, List, Sequence

import numpy as np

from roundline.curve import Curve
from roundline.geometry.fillet import CornerVertex, solve_fillet
from roundline.validation import EPSILON, DegenerateGeometryError, ValidationError, require_point

logger = logging.getLogger(__name__)


def _unpack(item) -> tuple[np.ndarray, float]:
    current = getattr(item, "current", None)
    if current is not None:
        return require_point(current, "grip"), float(item.radius)
    location, radius = item
    return require_point(location, "grip"), float(radius)


def _close(a: np.ndarray, b: np.ndarray) -> bool:
    return float(np.linalg.norm(a - b)) < EPSILON


def _corner(index: int, point, previous, following, radius: float, allow_reduction: bool) -> CornerVertex:
    if radius <= 0.0:
        return CornerVertex.sharp(point)
    solution = solve_fillet(point, previous, following, radius, allow_reduction=allow_reduction)
    if solution is None:
        logger.debug("Corner %d has no fillet for radius %.4g; keeping it sharp", index, radius)
        return CornerVertex.sharp(point, radius)
    if solution.reduced:
        logger.debug("Corner %d radius reduced from %.4g to %.4g", index, radius, solution.radius)
    return CornerVertex.from_solution(solution)


def solve_corners(locations: List[np.ndarray], radii: List[float], closed: bool) -> List[CornerVertex]:
    """Return the fillet data for every control point, in order.

    Open curves keep their first and last control points as plain endpoints.
    On a closed curve the last corner is solved with radius reduction and the
    first one without, so the first corner keeps the radius it was given.
    """

    n = len(locations)
    corners: List[CornerVertex | None] = [None] * n
    if not closed:
        corners[0] = CornerVertex.sharp(locations[0])
        corners[-1] = CornerVertex.sharp(locations[-1])

    for i in range(1, n - 1):
        corners[i] = _corner(i, locations[i], locations[i - 1], locations[i + 1], radii[i], True)

    if closed:
        last = n - 1
        previous = n - 2
        if _close(locations[last], locations[previous]) and n > 3:
            previous = n - 3
        corners[last] = _corner(last, locations[last], locations[previous], locations[0], radii[last], True)

        previous = n - 1
        if _close(locations[0], locations[previous]):
            previous = n - 2
        corners[0] = _corner(0, locations[0], locations[previous], locations[1], radii[0], False)

    return corners  # type: ignore[return-value]


def assemble(corners: List[CornerVertex], closed: bool) -> tuple[np.ndarray, np.ndarray]:
    """Walk the corners and emit vertices with their bulges."""

    points: list[np.ndarray] = []
    bulges: list[float] = []

    def emit(point: np.ndarray, bulge: float) -> None:
        if points and _close(points[-1], point):
            if bulge != 0.0:
                bulges[-1] = bulge
            return
        points.append(point)
        bulges.append(bulge)

    pairs = list(zip(corners[:-1], corners[1:]))
    if closed:
        pairs.append((corners[-1], corners[0]))

    for current, following in pairs:
        # Line between the fillets, unless the radius consumed the whole segment.
        if not _close(current.end, following.start):
            emit(current.end, 0.0)
        emit(following.start, following.bulge)

    if closed and len(points) > 1 and _close(points[-1], points[0]):
        if bulges[-1] != 0.0:
            bulges[0] = bulges[-1]
        points.pop()
        bulges.pop()

    return np.asarray(points, dtype=float), np.asarray(bulges, dtype=float)


def rebuild_curve(grips: Iterable, closed: bool) -> Curve:
    """Build a new curve from control points and their requested radii.

    ``grips`` holds ``GripPoint`` objects (their current location is used) or
    ``(location, radius)`` pairs. Corners without a fillet solution stay sharp.
    The result is a fresh ``Curve``; nothing is written back into ``grips``.
    """

    unpacked = [_unpack(item) for item in grips]
    minimum = 3 if closed else 2
    if len(unpacked) < minimum:
        raise DegenerateGeometryError(f"Rebuilding needs at least {minimum} control points.")

    locations = [loc for loc, _ in unpacked]
    radii = [rad for _, rad in unpacked]
    corners = solve_corners(locations, radii, closed)
    points, bulges = assemble(corners, closed)
    try:
        return Curve(points=points, bulges=bulges, closed=closed)
    except ValidationError as exc:
        raise DegenerateGeometryError(f"Rebuilt curve is degenerate: {exc}") from exc


def fillet_polyline(points: Iterable[Sequence[float]], radius: float, closed: bool = False) -> Curve:
    """Round every corner of a sharp polyline with the same radius."""

    pts = [require_point(p, "point") for p in points]
    if closed and len(pts) > 3 and _close(pts[0], pts[-1]):
        pts = pts[:-1]
    if radius < 0:
        raise ValidationError("radius must not be negative.")
    return rebuild_curve([(p, float(radius)) for p in pts], closed=closed)


__all__ = ["assemble", "fillet_polyline", "rebuild_curve", "solve_corners"]
