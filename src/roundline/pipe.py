"""Pipe-style decoration of open paths.

The path is drawn as a band as wide as the pipe's internal diameter, crossed by
evenly spaced ribs slightly wider than the band, with a small circle capping
each end and a length label beside the path midpoint.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Hashable, Iterator, List

import numpy as np

from roundline._config import PipeSettings, default_settings
from roundline.attributes import AttributeStore, pipe_diameter
from roundline.curve import Curve
from roundline.geometry.vector import angle_of, polar_point
from roundline.primitives import (
    CirclePrimitive,
    DrawSurface,
    PolygonPrimitive,
    Primitive,
    TextPrimitive,
    curve_primitives,
)

logger = logging.getLogger(__name__)

PATH_COLOR = "magenta"
BODY_COLOR = "#5b5b5b"
RIB_COLOR = "#808080"
STEP_TOLERANCE = 1e-4


@dataclass(frozen=True)
class PipeLayout:
    length: float
    diameter: float
    nominal_gap: float
    gap: float
    n_segments: int

    @property
    def external_diameter(self) -> float:
        return self.diameter + self.nominal_gap

    @property
    def element_width(self) -> float:
        return self.gap * 2.0


@dataclass(frozen=True)
class RibElement:
    """One tapered cross rib; ``outline`` runs start-left, end-left, end-right, start-right."""

    start: np.ndarray
    end: np.ndarray
    start_width: float
    end_width: float
    outline: np.ndarray = field(repr=False)


@dataclass(frozen=True)
class PipeDecoration:
    curve: Curve
    layout: PipeLayout
    ribs: List[RibElement]
    caps: List[CirclePrimitive]
    label: TextPrimitive

    def primitives(self) -> List[Primitive]:
        body = curve_primitives(self.curve, width=self.layout.diameter, color=BODY_COLOR)
        ribs = [PolygonPrimitive(rib.outline, filled=True, color=RIB_COLOR) for rib in self.ribs]
        return [*body, *ribs, *self.caps, self.label]


def plan_segments(length: float, diameter: float) -> PipeLayout | None:
    """Spread ``length`` into gaps of about a tenth of ``diameter``.

    The count starts from the nominal three-gap pitch and is corrected so the
    gaps never overrun the path; the corrected gap then absorbs the remainder,
    making ``n_segments * gap`` equal to ``length``. ``None`` when fewer than
    three segments fit.
    """

    if length <= 0.0 or diameter <= 0.0:
        return None
    gap = diameter / 10.0
    pitch = gap * 3.0
    count = int(round(length / pitch)) + 1
    if count * pitch > length:
        count -= 3
    if count < 3:
        return None
    corrected = gap + (length - count * gap) / count
    return PipeLayout(length=length, diameter=diameter, nominal_gap=gap, gap=corrected, n_segments=count)


def _cross_points(curve: Curve, distance: float, half_width: float) -> tuple[np.ndarray, np.ndarray]:
    point = curve.point_at_distance(distance)
    angle = angle_of(curve.tangent_at_distance(distance))
    left = polar_point(point, angle + math.pi * 0.5, half_width)
    right = polar_point(point, angle - math.pi * 0.5, half_width)
    return left, right


def iter_ribs(curve: Curve, layout: PipeLayout) -> Iterator[RibElement]:
    length = layout.length
    width = layout.element_width
    half = layout.external_diameter / 2.0
    min_width = round(width / 4.0, 2)
    max_width = round(width + width * 3.0 / 4.0, 2)

    step = layout.gap
    while step < length and abs(step - length) >= STEP_TOLERANCE:
        c1, c2 = _cross_points(curve, step, half)
        step += width
        c3, c4 = _cross_points(curve, min(step, length), half)

        start_width = float(np.linalg.norm(c3 - c1))
        end_width = float(np.linalg.norm(c4 - c2))
        if min_width <= round(start_width, 2) <= max_width and min_width <= round(end_width, 2) <= max_width:
            yield RibElement(
                start=(c1 + c3) * 0.5,
                end=(c2 + c4) * 0.5,
                start_width=start_width,
                end_width=end_width,
                outline=np.vstack([c1, c3, c4, c2]),
            )
        else:
            logger.debug("Skipping rib at %.4g: widths %.4g / %.4g out of range", step - width, start_width, end_width)
        step += layout.gap


def length_label(
    curve: Curve,
    diameter: float,
    offset: float = 1.5,
    height: float = 2.5,
    unit_label: str = "mm",
) -> TextPrimitive:
    """Label the path length beside its midpoint, rotated to read upright."""

    length = curve.length
    midpoint = curve.point_at_distance(length / 2.0)
    angle = angle_of(curve.tangent_at_distance(length / 2.0))
    distance = diameter / 2.0 + offset
    if math.pi * 0.5 < angle < math.pi * 1.5:
        position = polar_point(midpoint, angle - math.pi * 0.5, distance)
        angle += math.pi
    else:
        position = polar_point(midpoint, angle + math.pi * 0.5, distance)
    rotation = angle % (2.0 * math.pi)
    return TextPrimitive(position=position, text=f"{round(length)} {unit_label}", rotation=rotation, height=height)


def segment_path(
    curve: Curve,
    diameter: float,
    *,
    label_offset: float = 1.5,
    label_height: float = 2.5,
    unit_label: str = "mm",
) -> PipeDecoration | None:
    """Build the pipe decoration for an open path, or ``None`` to draw it plain."""

    if curve.closed or diameter <= 0.0:
        return None
    layout = plan_segments(curve.length, float(diameter))
    if layout is None:
        logger.info("Path of length %.4g too short for a %.4g pipe", curve.length, diameter)
        return None

    ribs = list(iter_ribs(curve, layout))
    cap_radius = diameter / 10.0
    caps = [CirclePrimitive(curve.start_point, cap_radius), CirclePrimitive(curve.end_point, cap_radius)]
    label = length_label(curve, diameter, offset=label_offset, height=label_height, unit_label=unit_label)
    return PipeDecoration(curve=curve, layout=layout, ribs=ribs, caps=caps, label=label)


def render_pipe(
    curve: Curve,
    key: Hashable,
    store: AttributeStore,
    surface: DrawSurface,
    settings: PipeSettings | None = None,
) -> bool:
    """Draw ``curve`` on ``surface``, decorated as a pipe when it has a diameter.

    The plain path is always drawn. Returns True when the decoration was added.
    Without ``settings`` the built-in defaults apply; roundline.cfg is only
    read by callers such as the CLI.
    """

    settings = settings or default_settings()
    for primitive in curve_primitives(curve, color=PATH_COLOR):
        surface.draw(primitive)

    diameter = pipe_diameter(store, key, settings.attribute_name)
    if diameter <= 0.0:
        return False
    decoration = segment_path(
        curve,
        diameter,
        label_offset=settings.label_offset,
        label_height=settings.label_height,
        unit_label=settings.units.label,
    )
    if decoration is None:
        return False
    for primitive in decoration.primitives():
        surface.draw(primitive)
    return True


__all__ = [
    "PipeDecoration",
    "PipeLayout",
    "RibElement",
    "iter_ribs",
    "length_label",
    "plan_segments",
    "render_pipe",
    "segment_path",
]
