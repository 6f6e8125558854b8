"""Direction cosines and the small vector predicates the solvers are built on."""

from __future__ import annotations

import numpy as np

from roundline.validation import EPSILON

ZERO = np.zeros(3, dtype=float)


def _as_vec3(value) -> np.ndarray:
    arr = np.asarray(value, dtype=float).reshape(-1)
    if arr.shape[0] == 2:
        arr = np.append(arr, 0.0)
    return arr


def direction(p1, p2) -> np.ndarray:
    """Return the unit direction of ``p1 -> p2``.

    The zero vector is returned when the two points are closer than ``EPSILON``;
    callers treat it as an undefined direction.
    """

    delta = _as_vec3(p2) - _as_vec3(p1)
    dist = float(np.linalg.norm(delta))
    if dist > EPSILON:
        return delta / dist
    return ZERO.copy()


def is_null(vec: np.ndarray) -> bool:
    return bool(vec[0] == 0.0 and vec[1] == 0.0 and vec[2] == 0.0)


def cross2(a: np.ndarray, b: np.ndarray) -> float:
    """Z component of ``a x b`` in the XY plane."""

    return float(a[0] * b[1] - a[1] * b[0])


def distance_from_line(l1, l2, p) -> float:
    """Signed distance of ``p`` from the line ``l1 -> l2`` in the XY plane.

    Positive when ``p`` lies to the right of the vector, negative on its left.
    """

    c = direction(l1, l2)
    l1 = _as_vec3(l1)
    p = _as_vec3(p)
    return float((p[0] - l1[0]) * c[1] - (p[1] - l1[1]) * c[0])


def bisector(r1: np.ndarray, r2: np.ndarray) -> np.ndarray | None:
    """Return the unit bisector of two directions sharing an origin.

    ``r2`` is expected counter-clockwise of ``r1``. Returns ``None`` when the
    bisector is undefined.
    """

    diff = r2 - r1
    spread = float(np.hypot(diff[0], diff[1]))
    if spread < EPSILON:
        if spread == 0.0:
            return None
        half = (r1 + r2) * 0.5
        norm = float(np.hypot(half[0], half[1]))
        if norm < EPSILON:
            return None
        sign = -1.0 if cross2(r1, diff) < 0 else 1.0
        return np.array([sign * half[0] / norm, sign * half[1] / norm, 0.0])

    return np.array([diff[1] / spread, -diff[0] / spread, 0.0])


def polar_point(base: np.ndarray, angle: float, distance: float) -> np.ndarray:
    return np.array(
        [base[0] + distance * np.cos(angle), base[1] + distance * np.sin(angle), base[2]],
        dtype=float,
    )


def angle_of(vec: np.ndarray) -> float:
    """Angle of ``vec`` from the X axis, in ``[0, 2*pi)``."""

    angle = float(np.arctan2(vec[1], vec[0]))
    if angle < 0.0:
        angle += 2.0 * np.pi
    return angle


__all__ = [
    "angle_of",
    "bisector",
    "cross2",
    "direction",
    "distance_from_line",
    "is_null",
    "polar_point",
]
