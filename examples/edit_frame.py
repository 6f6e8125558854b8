"""Round a sharp frame, drag one of its corners and decorate a pipe run."""

from __future__ import annotations

from pathlib import Path

from roundline import SessionManager, fillet_polyline, render_pipe
from roundline._config import get_settings
from roundline.attributes import InMemoryAttributeStore, set_pipe_diameter
from roundline.io import load_curve
from roundline.primitives import RecordingSurface

HERE = Path(__file__).resolve().parent


def build():
    """Return the primitives for the edited frame and the decorated run."""

    sharp = load_curve(HERE / "frame.json")
    frame = fillet_polyline(sharp.points, 8.0, closed=True)

    sessions = SessionManager()
    sessions.on_entity_selected("frame", frame)
    sessions.on_drag("frame", (15.0, 10.0), [2])
    edited = sessions.on_commit("frame")
    sessions.on_deselect()

    settings = get_settings()
    store = InMemoryAttributeStore()
    set_pipe_diameter(store, "run", settings.attribute_name, 12.0)

    surface = RecordingSurface()
    render_pipe(edited, "frame", store, surface, settings=settings)
    render_pipe(load_curve(HERE / "pipe_run.json"), "run", store, surface, settings=settings)
    return surface.primitives


if __name__ == "__main__":
    from roundline.render import PyVistaRenderer

    PyVistaRenderer().show(build())
