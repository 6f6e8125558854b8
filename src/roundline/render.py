"""Preview draw primitives with PyVista."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Sequence

import numpy as np
from rich.console import Console

from roundline._config import UnitSettings, default_settings
from roundline.curve import ArcSegment
from roundline.primitives import (
    ArcPrimitive,
    CirclePrimitive,
    LinePrimitive,
    PolygonPrimitive,
    Primitive,
    TextPrimitive,
)

DEFAULT_COLOR = "#6ab0ff"


class PreviewBackendError(RuntimeError):
    """Raised when a preview backend cannot run."""


@dataclass
class RenderItem:
    dataset: object
    color: str
    is_label: bool = False
    text: str = ""


def _polyline_cells(n_points: int, closed: bool = False) -> np.ndarray:
    indices = list(range(n_points))
    if closed:
        indices.append(0)
    return np.array([len(indices), *indices], dtype=np.int64)


def _band(points: np.ndarray, width: float) -> tuple[np.ndarray, np.ndarray]:
    """Return vertices and quad faces of a strip of ``width`` around ``points``."""

    tangents = np.gradient(points[:, :2], axis=0)
    norms = np.linalg.norm(tangents, axis=1)
    norms[norms == 0] = 1.0
    tangents = tangents / norms[:, np.newaxis]
    normals = np.column_stack([-tangents[:, 1], tangents[:, 0], np.zeros(len(points))])
    left = points + normals * (width / 2.0)
    right = points - normals * (width / 2.0)
    vertices = np.vstack([left, right])
    n = len(points)
    faces = []
    for i in range(n - 1):
        faces.extend([4, i, i + 1, n + i + 1, n + i])
    return vertices, np.asarray(faces, dtype=np.int64)


def _circle_points(center: np.ndarray, radius: float, segments: int) -> np.ndarray:
    angles = np.linspace(0.0, 2.0 * np.pi, segments, endpoint=False)
    return np.column_stack(
        [center[0] + radius * np.cos(angles), center[1] + radius * np.sin(angles), np.full(segments, center[2])]
    )


def primitive_to_item(primitive: Primitive, pv, segments_per_circle: int = 64) -> RenderItem:
    color = primitive.color or DEFAULT_COLOR
    if isinstance(primitive, TextPrimitive):
        return RenderItem(pv.PolyData(primitive.position.reshape(1, 3)), color, is_label=True, text=primitive.text)
    if isinstance(primitive, CirclePrimitive):
        pts = _circle_points(primitive.center, primitive.radius, segments_per_circle)
        return RenderItem(pv.PolyData(pts, lines=_polyline_cells(len(pts), closed=True)), color)
    if isinstance(primitive, PolygonPrimitive):
        pts = primitive.points
        if primitive.filled:
            return RenderItem(pv.PolyData(pts, faces=_polyline_cells(len(pts))), color)
        return RenderItem(pv.PolyData(pts, lines=_polyline_cells(len(pts), closed=True)), color)
    if isinstance(primitive, ArcPrimitive):
        pts = ArcSegment(primitive.start, primitive.end, primitive.bulge).sample(segments_per_circle)
        width = primitive.width
    elif isinstance(primitive, LinePrimitive):
        pts = np.vstack([primitive.start, primitive.end])
        width = primitive.width
    else:
        raise PreviewBackendError(f"Unsupported primitive {type(primitive).__name__}.")

    if width > 0.0:
        vertices, faces = _band(pts, width)
        return RenderItem(pv.PolyData(vertices, faces=faces), color)
    return RenderItem(pv.PolyData(pts, lines=_polyline_cells(len(pts))), color)


class PyVistaRenderer:
    """Render draw primitives in a flat top-down PyVista view."""

    def __init__(self, console: Console | None = None, unit_settings: UnitSettings | None = None):
        self.console = console
        self._pv = None
        self._unit_settings = unit_settings or default_settings().units

    def _ensure_backend(self):
        if self._pv is None:
            try:
                import pyvista as pv
            except ImportError as exc:  # pragma: no cover - runtime dep
                raise PreviewBackendError(
                    "PyVista is required for previewing. Install roundline with `pip install -e .`."
                ) from exc
            pv.set_plot_theme("document")
            self._pv = pv
        return self._pv

    @property
    def unit_label(self) -> str:
        return self._unit_settings.label

    def build_items(self, primitives: Iterable[Primitive], segments_per_circle: int = 64) -> List[RenderItem]:
        pv = self._ensure_backend()
        items = [primitive_to_item(p, pv, segments_per_circle) for p in primitives]
        if not items:
            raise PreviewBackendError("Nothing to draw.")
        return items

    def show(
        self,
        primitives: Sequence[Primitive],
        screenshot_path: Path | None = None,
        title: str | None = None,
    ) -> None:
        pv = self._ensure_backend()
        title = title or f"Roundline Preview ({self.unit_label})"
        items = self.build_items(primitives)
        plotter = pv.Plotter(window_size=(1280, 800), off_screen=screenshot_path is not None)
        plotter.set_background("white")
        for index, item in enumerate(items):
            if item.is_label:
                plotter.add_point_labels(
                    item.dataset,
                    [item.text],
                    name=f"label-{index}",
                    point_size=1,
                    font_size=14,
                    shape_opacity=0.0,
                )
                continue
            plotter.add_mesh(item.dataset, name=f"item-{index}", color=item.color, line_width=2.0)
        plotter.view_xy()

        if screenshot_path is not None:
            screenshot_path.parent.mkdir(parents=True, exist_ok=True)
            plotter.show(title=title, auto_close=True, screenshot=str(screenshot_path))
            plotter.close()
            if self.console is not None:
                self.console.print(f"[green]Saved preview to {screenshot_path}[/green]")
            return

        plotter.show(title=title)
        plotter.close()


__all__ = ["PreviewBackendError", "PyVistaRenderer", "RenderItem", "primitive_to_item"]
