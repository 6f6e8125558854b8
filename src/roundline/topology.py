"""Decide whether a curve can be grip-edited while preserving its fillets."""

from __future__ import annotations

from roundline.curve import Curve, SegmentType
from roundline.validation import IneligibleTopologyError


def classify(curve: Curve) -> None:
    """Raise ``IneligibleTopologyError`` unless ``curve`` is a rounded-edge curve.

    A rounded-edge curve is planar, has more than three vertices and at least
    one arc, starts with a line and alternates line and arc segments. An open
    curve must also end on a line since there is nothing after a trailing arc
    to round into.
    """

    if not curve.is_planar:
        raise IneligibleTopologyError("curve is not planar")
    if not curve.has_bulges:
        raise IneligibleTopologyError("curve has no arc segments")
    if curve.n_vertices <= 3:
        raise IneligibleTopologyError("curve needs more than three vertices")

    previous = curve.segment_type(0)
    if previous is not SegmentType.LINE:
        raise IneligibleTopologyError("first segment must be a line")

    for index in range(1, curve.n_vertices):
        current = curve.segment_type(index)
        if current not in (SegmentType.LINE, SegmentType.ARC):
            continue
        if current is previous:
            raise IneligibleTopologyError(f"segment {index} follows another {current.value}")
        previous = current

    if previous is SegmentType.ARC and not curve.closed:
        raise IneligibleTopologyError("open curve ends on an arc")


def is_rounded_edge_curve(curve: Curve | None) -> bool:
    if curve is None:
        return False
    try:
        classify(curve)
    except IneligibleTopologyError:
        return False
    return True


__all__ = ["classify", "is_rounded_edge_curve"]
