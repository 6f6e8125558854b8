from __future__ import annotations

import math

from roundline.curve import Curve
from roundline.rebuild import fillet_polyline

QUARTER_BULGE = math.tan(math.pi / 8.0)
SQUARE = [(0.0, 0.0), (10.0, 0.0), (10.0, 10.0), (0.0, 10.0)]


def rounded_square(radius: float = 2.0) -> Curve:
    return fillet_polyline(SQUARE, radius, closed=True)


def rounded_elbow() -> Curve:
    """Open line-arc-line path turning left at (10, 0) with a radius of 2."""
    return Curve(
        points=[(0, 0), (8, 0), (10, 2), (10, 10)],
        bulges=[0.0, QUARTER_BULGE, 0.0, 0.0],
        closed=False,
    )
