"""Roundline – fillet-preserving polyline editing and pipe decoration."""

from __future__ import annotations

from .curve import ArcSegment, Curve, LineSegment, SegmentType
from .grips import GripPoint, SessionManager, SessionState
from .pipe import PipeDecoration, render_pipe, segment_path
from .rebuild import fillet_polyline, rebuild_curve
from .topology import is_rounded_edge_curve

__all__ = [
    "ArcSegment",
    "Curve",
    "GripPoint",
    "LineSegment",
    "PipeDecoration",
    "SegmentType",
    "SessionManager",
    "SessionState",
    "__version__",
    "fillet_polyline",
    "is_rounded_edge_curve",
    "rebuild_curve",
    "render_pipe",
    "segment_path",
]

__version__ = "0.1.0"
