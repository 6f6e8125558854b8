from __future__ import annotations

import logging
import pathlib

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from roundline._config import get_settings
from roundline._logging import setup_logging
from roundline.attributes import InMemoryAttributeStore, set_pipe_diameter
from roundline.curve import Curve
from roundline.grips import SessionManager
from roundline.io.curve_json import dump_curve, load_curve
from roundline.pipe import render_pipe, segment_path
from roundline.primitives import RecordingSurface
from roundline.rebuild import fillet_polyline
from roundline.render import PreviewBackendError, PyVistaRenderer
from roundline.validation import RoundlineError, ValidationError

console = Console()
app = typer.Typer(help="Edit rounded polylines and decorate paths as pipes.")


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Log engine decisions.")) -> None:
    setup_logging(logging.DEBUG if verbose else logging.WARNING)


def _next_available_path(path: pathlib.Path) -> pathlib.Path:
    """Return a non-conflicting path by appending ' (n)' before the suffix."""

    if not path.exists():
        return path

    parent = path.parent
    stem = path.stem
    suffix = path.suffix
    n = 1
    while True:
        candidate = parent / f"{stem} ({n}){suffix}"
        if not candidate.exists():
            return candidate
        n += 1


def _read_curve(path: pathlib.Path) -> Curve:
    if not path.exists():
        raise typer.BadParameter(f"Curve file {path} does not exist.")
    try:
        return load_curve(path)
    except ValidationError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _write_curve(curve: Curve, output: pathlib.Path, overwrite: bool) -> pathlib.Path:
    final_output = output
    if output.exists() and not overwrite:
        final_output = _next_available_path(output)
        console.print(f"[yellow]Output {output} exists; writing to {final_output} instead.[/yellow]")
    final_output.parent.mkdir(parents=True, exist_ok=True)
    dump_curve(curve, final_output)
    return final_output


def _curve_table(curve: Curve, title: str) -> Table:
    table = Table(title=title)
    table.add_column("#", justify="right")
    table.add_column("x", justify="right")
    table.add_column("y", justify="right")
    table.add_column("bulge", justify="right")
    for index, (point, bulge) in enumerate(zip(curve.points, curve.bulges)):
        table.add_row(str(index), f"{point[0]:.4f}", f"{point[1]:.4f}", f"{bulge:.4f}")
    return table


@app.command()
def fillet(
    curve_path: pathlib.Path = typer.Argument(..., help="JSON curve whose corners should be rounded."),
    radius: float = typer.Option(..., "--radius", "-r", min=0.0, help="Fillet radius for every corner."),
    output: pathlib.Path = typer.Option(pathlib.Path("filleted.json"), "--output", "-o", help="Result curve."),
    overwrite: bool = typer.Option(False, "--overwrite", help="Allow replacing an existing output file."),
) -> None:
    """
    Round every corner of a sharp polyline with the same radius.
    """

    curve = _read_curve(curve_path)
    try:
        result = fillet_polyline(curve.points, radius, closed=curve.closed)
    except (RoundlineError, ValidationError) as exc:
        raise typer.BadParameter(str(exc)) from exc

    written = _write_curve(result, output, overwrite)
    console.print(_curve_table(result, f"Filleted curve ({result.n_vertices} vertices)"))
    console.print(Panel(f"Wrote [green]{written}[/green].", title="Fillet complete", border_style="green"))


@app.command()
def drag(
    curve_path: pathlib.Path = typer.Argument(..., help="JSON curve with rounded corners."),
    grip: list[int] = typer.Option(..., "--grip", "-g", help="Corner grip index to move (repeatable)."),
    dx: float = typer.Option(0.0, "--dx", help="Offset along X."),
    dy: float = typer.Option(0.0, "--dy", help="Offset along Y."),
    output: pathlib.Path = typer.Option(pathlib.Path("dragged.json"), "--output", "-o", help="Result curve."),
    overwrite: bool = typer.Option(False, "--overwrite", help="Allow replacing an existing output file."),
) -> None:
    """
    Move corner grips of a rounded curve while keeping its fillets.
    """

    curve = _read_curve(curve_path)
    sessions = SessionManager()
    key = str(curve_path)
    grips = sessions.on_entity_selected(key, curve)
    if grips is None:
        raise typer.BadParameter(f"{curve_path} is not a rounded-edge curve; nothing to drag.")

    table = Table(title="Corner grips")
    table.add_column("#", justify="right")
    table.add_column("location")
    table.add_column("radius", justify="right")
    for item in grips:
        table.add_row(str(item.index), f"({item.original[0]:.4f}, {item.original[1]:.4f})", f"{item.radius:.4f}")
    console.print(table)

    try:
        sessions.on_drag(key, (dx, dy), grip)
    except ValidationError as exc:
        raise typer.BadParameter(str(exc)) from exc
    result = sessions.on_commit(key)
    sessions.on_deselect()

    written = _write_curve(result, output, overwrite)
    console.print(_curve_table(result, f"Rebuilt curve ({result.n_vertices} vertices)"))
    console.print(Panel(f"Wrote [green]{written}[/green].", title="Drag complete", border_style="green"))


@app.command()
def pipe(
    curve_path: pathlib.Path = typer.Argument(..., help="Open JSON path to decorate."),
    diameter: float | None = typer.Option(None, "--diameter", "-d", help="Internal pipe diameter."),
    preview: bool = typer.Option(False, "--preview", help="Open an interactive PyVista window."),
    screenshot: pathlib.Path | None = typer.Option(
        None, "--screenshot", help="Optional path to save a screenshot of the preview."
    ),
) -> None:
    """
    Lay out the pipe decoration of a path and optionally preview it.
    """

    curve = _read_curve(curve_path)
    settings = get_settings()
    value = settings.diameter if diameter is None else diameter

    store = InMemoryAttributeStore()
    key = str(curve_path)
    try:
        set_pipe_diameter(store, key, settings.attribute_name, value)
    except ValidationError as exc:
        raise typer.BadParameter(str(exc)) from exc

    decoration = segment_path(
        curve,
        value,
        label_offset=settings.label_offset,
        label_height=settings.label_height,
        unit_label=settings.units.label,
    )
    if decoration is None:
        console.print("[yellow]Path cannot carry a pipe decoration; it will be drawn plain.[/yellow]")
    else:
        layout = decoration.layout
        console.print(
            Panel(
                "\n".join(
                    [
                        f"Length: {layout.length:.4f} {settings.units.label}",
                        f"Segments: {layout.n_segments}, gap {layout.gap:.4f}",
                        f"Ribs: {len(decoration.ribs)}",
                        f"Label: {decoration.label.text}",
                    ]
                ),
                title="Pipe layout",
                border_style="cyan",
            )
        )

    if not preview and screenshot is None:
        return

    surface = RecordingSurface()
    render_pipe(curve, key, store, surface, settings=settings)
    renderer = PyVistaRenderer(console=console, unit_settings=settings.units)
    try:
        renderer.show(surface.primitives, screenshot_path=screenshot)
    except PreviewBackendError as exc:
        raise typer.BadParameter(str(exc)) from exc
