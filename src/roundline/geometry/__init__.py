"""Tolerance-aware vector math, segment intersection and fillet solving."""

from __future__ import annotations

from .fillet import CornerVertex, FilletSolution, estimate_fillet_radius, solve_fillet
from .intersect import IntersectState, Intersection, intersect_lines_3d, intersect_segments
from .vector import bisector, direction, distance_from_line

__all__ = [
    "CornerVertex",
    "FilletSolution",
    "IntersectState",
    "Intersection",
    "bisector",
    "direction",
    "distance_from_line",
    "estimate_fillet_radius",
    "intersect_lines_3d",
    "intersect_segments",
    "solve_fillet",
]
