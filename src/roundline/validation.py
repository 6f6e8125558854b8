from __future__ import annotations

from typing import Sequence

import numpy as np

EPSILON = 1e-3


class ValidationError(ValueError):
    """Raised when validation constraints are violated."""


class RoundlineError(RuntimeError):
    """Base class for recoverable engine failures."""


class DegenerateGeometryError(RoundlineError):
    """Zero-length, colinear or overlapping input, or an undefined bisector."""


class IneligibleTopologyError(RoundlineError):
    """The curve shape cannot be edited while preserving its fillets."""


class AbortedEditError(RoundlineError):
    """The user cancelled the drag that would have produced the result."""


def require_point(value: Sequence[float], label: str) -> np.ndarray:
    """Return ``value`` as a finite 3D point, promoting 2D input to ``z = 0``."""

    try:
        arr = np.asarray(value, dtype=float).reshape(-1)
    except Exception as exc:
        raise ValidationError(f"{label} must be a 2D or 3D coordinate.") from exc
    if arr.shape[0] == 2:
        arr = np.append(arr, 0.0)
    if arr.shape[0] != 3:
        raise ValidationError(f"{label} must be a 2D or 3D coordinate.")
    if not np.all(np.isfinite(arr)):
        raise ValidationError(f"{label} must be finite.")
    return arr


def validate_vertices(points: np.ndarray, bulges: np.ndarray, closed: bool) -> None:
    if points.ndim != 2 or points.shape[1] != 3:
        raise ValidationError("Curve points must be Nx3 coordinates.")
    if points.shape[0] < 2:
        raise ValidationError("Curve requires at least two points.")
    if bulges.shape != (points.shape[0],):
        raise ValidationError("Curve requires one bulge per vertex.")
    if np.any(~np.isfinite(points)) or np.any(~np.isfinite(bulges)):
        raise ValidationError("Curve contains invalid values.")

    gaps = np.linalg.norm(np.diff(points, axis=0), axis=1)
    if np.any(gaps < EPSILON):
        index = int(np.argmax(gaps < EPSILON))
        raise ValidationError(f"Curve vertices {index} and {index + 1} coincide.")
    if closed and points.shape[0] > 2 and np.linalg.norm(points[-1] - points[0]) < EPSILON:
        raise ValidationError("Closed curve must not repeat its first vertex.")
