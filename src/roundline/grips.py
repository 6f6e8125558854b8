"""Grip editing sessions for rounded-edge curves.

Instead of one grip per polyline vertex, a rounded-edge curve shows one grip
per logical corner: the real or apparent intersection of the two straight
segments around each fillet. Dragging those grips rebuilds the whole curve with
the fillets recomputed, so the rounded corners survive the edit.

The host owns a ``SessionManager`` and forwards its selection and drag events:

* ``on_entity_selected`` when a curve gets selected,
* ``on_drag`` while grips move,
* ``on_abort`` / ``on_commit`` when the drag ends,
* ``on_deselect`` when nothing is selected anymore.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Hashable, Iterable, List, Sequence

import numpy as np

from roundline.curve import Curve
from roundline.geometry.fillet import estimate_fillet_radius
from roundline.geometry.intersect import intersect_lines_3d
from roundline.rebuild import rebuild_curve
from roundline.topology import is_rounded_edge_curve
from roundline.validation import AbortedEditError, DegenerateGeometryError, ValidationError, require_point

logger = logging.getLogger(__name__)


class SessionState(Enum):
    IDLE = "idle"
    DISPLAYED = "displayed"
    DRAGGING = "dragging"
    COMMITTED = "committed"
    ABORTED = "aborted"


@dataclass
class GripPoint:
    index: int
    key: Hashable
    original: np.ndarray
    current: np.ndarray
    radius: float = 0.0

    def reset(self) -> None:
        self.current = self.original.copy()


@dataclass
class GripSession:
    key: Hashable
    curve: Curve
    grips: List[GripPoint]
    state: SessionState = SessionState.IDLE
    rebuilt: Curve | None = field(default=None, repr=False)

    @property
    def closed(self) -> bool:
        return self.curve.closed

    @property
    def current_curve(self) -> Curve:
        return self.rebuilt if self.rebuilt is not None else self.curve


def compute_grips(curve: Curve) -> list[tuple[np.ndarray, float]] | None:
    """Return ``(location, radius)`` for every logical corner of ``curve``.

    Closed curves get one grip per pair of consecutive line segments, the first
    one joining the last segment back to the first. Open curves keep their two
    end points as grips. ``None`` when the curve is not a rounded-edge curve or
    two consecutive lines do not intersect.
    """

    if not is_rounded_edge_curve(curve):
        return None

    lines = curve.line_segments()
    if len(lines) < 2:
        return None

    pairs = list(zip(lines[:-1], lines[1:]))
    if curve.closed:
        pairs.insert(0, (lines[0], lines[-1]))

    grips: list[tuple[np.ndarray, float]] = []
    if not curve.closed:
        grips.append((lines[0].start.copy(), 0.0))
    for seg_a, seg_b in pairs:
        point = intersect_lines_3d(seg_a, seg_b)
        if point is None:
            logger.debug("Segments %s and %s do not intersect", seg_a, seg_b)
            return None
        grips.append((point, estimate_fillet_radius(seg_a, seg_b)))
    if not curve.closed:
        grips.append((lines[-1].end.copy(), 0.0))
    return grips


class SessionManager:
    """Registry of grip sessions, one per entity key."""

    def __init__(self) -> None:
        self._sessions: dict[Hashable, GripSession] = {}
        self._lock = threading.RLock()

    def __contains__(self, key: Hashable) -> bool:
        with self._lock:
            return key in self._sessions

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def session(self, key: Hashable) -> GripSession | None:
        with self._lock:
            return self._sessions.get(key)

    def on_entity_selected(self, key: Hashable, curve: Curve) -> List[GripPoint] | None:
        """Register grips for ``curve`` and return them.

        ``None`` means the curve is not handled here and the host should fall
        back to its default grip editing.
        """

        corners = compute_grips(curve)
        if corners is None:
            with self._lock:
                self._sessions.pop(key, None)
            return None

        grips = [
            GripPoint(index=i, key=key, original=loc.copy(), current=loc.copy(), radius=float(radius))
            for i, (loc, radius) in enumerate(corners)
        ]
        with self._lock:
            self._sessions[key] = GripSession(key=key, curve=curve, grips=grips, state=SessionState.DISPLAYED)
        logger.debug("Registered %d grips for %r", len(grips), key)
        return list(grips)

    def on_drag(
        self,
        key: Hashable,
        offset: Sequence[float],
        indices: Iterable[int] | None = None,
    ) -> Curve | None:
        """Move grips to ``original + offset`` and rebuild the curve.

        ``offset`` is the displacement since the drag started. When ``indices``
        is omitted every grip moves. If the rebuild fails the previous curve is
        returned unchanged.
        """

        delta = require_point(offset, "offset")
        with self._lock:
            session = self._sessions.get(key)
            if session is None:
                return None

            count = len(session.grips)
            selected = list(range(count)) if indices is None else [int(i) for i in indices]
            bad = [index for index in selected if index < 0 or index >= count]
            if bad:
                raise ValidationError(f"Grip index {bad[0]} is out of range.")
            for index in selected:
                grip = session.grips[index]
                grip.current = grip.original + delta
            session.state = SessionState.DRAGGING

            try:
                rebuilt = rebuild_curve(session.grips, closed=session.closed)
            except DegenerateGeometryError as exc:
                logger.warning("Keeping previous geometry for %r: %s", key, exc)
                return session.current_curve
            session.rebuilt = rebuilt
            return rebuilt

    def on_abort(self, key: Hashable) -> Curve | None:
        """Put every grip back on its original location; the session stays."""

        with self._lock:
            session = self._sessions.get(key)
            if session is None:
                return None
            for grip in session.grips:
                grip.reset()
            session.rebuilt = None
            session.state = SessionState.ABORTED
            logger.debug("Grip edit of %r aborted", key)
            return session.curve

    def on_commit(self, key: Hashable) -> Curve | None:
        """Finish the drag and return the curve the host should store."""

        with self._lock:
            session = self._sessions.get(key)
            if session is None:
                return None
            if session.state is SessionState.ABORTED:
                raise AbortedEditError(f"Grip edit of {key!r} was aborted.")
            session.state = SessionState.COMMITTED
            return session.current_curve

    def on_deselect(self) -> None:
        """Forget every session; the host reports an empty selection globally."""

        with self._lock:
            if self._sessions:
                logger.debug("Clearing %d grip sessions", len(self._sessions))
            self._sessions.clear()


__all__ = ["GripPoint", "GripSession", "SessionManager", "SessionState", "compute_grips"]
