from __future__ import annotations

import numpy as np
import pytest

from helpers import SQUARE, rounded_elbow, rounded_square
from roundline.curve import Curve
from roundline.grips import SessionManager, SessionState, compute_grips
from roundline.topology import is_rounded_edge_curve
from roundline.validation import AbortedEditError, ValidationError


@pytest.fixture
def manager() -> SessionManager:
    return SessionManager()


def test_closed_curve_grips_sit_on_logical_corners():
    corners = compute_grips(rounded_square())
    locations = [loc[:2] for loc, _ in corners]
    assert np.allclose(locations, SQUARE)
    assert [radius for _, radius in corners] == pytest.approx([2.0] * 4)


def test_open_curve_grips_include_endpoints():
    corners = compute_grips(rounded_elbow())
    locations = [loc[:2] for loc, _ in corners]
    assert np.allclose(locations, [(0, 0), (10, 0), (10, 10)])
    assert [radius for _, radius in corners] == pytest.approx([0.0, 2.0, 0.0])


def test_selecting_ineligible_curve_returns_none(manager):
    assert manager.on_entity_selected("sharp", Curve.from_points(SQUARE, closed=True)) is None
    assert "sharp" not in manager
    assert len(manager) == 0


def test_selection_registers_session(manager):
    grips = manager.on_entity_selected("square", rounded_square())
    assert len(grips) == 4
    assert "square" in manager
    session = manager.session("square")
    assert session.state is SessionState.DISPLAYED
    assert all(grip.key == "square" for grip in grips)
    assert [grip.index for grip in grips] == [0, 1, 2, 3]


def test_reselecting_replaces_session(manager):
    manager.on_entity_selected("square", rounded_square())
    manager.on_entity_selected("square", rounded_square(3.0))
    assert len(manager) == 1
    assert manager.session("square").grips[0].radius == pytest.approx(3.0)


def test_reselecting_as_ineligible_drops_session(manager):
    manager.on_entity_selected("square", rounded_square())
    manager.on_entity_selected("square", Curve.from_points(SQUARE, closed=True))
    assert "square" not in manager


def test_zero_offset_drag_reproduces_curve(manager):
    original = rounded_square()
    manager.on_entity_selected("square", original)
    rebuilt = manager.on_drag("square", (0, 0))
    assert np.allclose(rebuilt.points, original.points)
    assert np.allclose(rebuilt.bulges, original.bulges)


def test_drag_single_grip_keeps_fillets(manager):
    manager.on_entity_selected("square", rounded_square())
    rebuilt = manager.on_drag("square", (5, 5), [2])
    session = manager.session("square")
    assert session.state is SessionState.DRAGGING
    assert np.allclose(session.grips[2].current[:2], [15, 15])
    assert np.allclose(session.grips[2].original[:2], [10, 10])
    assert np.allclose(session.grips[0].current[:2], [0, 0])
    assert rebuilt.n_vertices == 8
    assert is_rounded_edge_curve(rebuilt)
    assert session.current_curve is rebuilt


def test_drag_offsets_are_measured_from_drag_start(manager):
    manager.on_entity_selected("square", rounded_square())
    manager.on_drag("square", (1, 0), [1])
    manager.on_drag("square", (2, 0), [1])
    grip = manager.session("square").grips[1]
    assert np.allclose(grip.current[:2], [12, 0])


def test_drag_moving_every_grip_translates_curve(manager):
    original = rounded_square()
    manager.on_entity_selected("square", original)
    moved = manager.on_drag("square", (3, -4))
    assert np.allclose(moved.points[:, :2], original.points[:, :2] + [3, -4])


def test_drag_of_open_curve(manager):
    manager.on_entity_selected("elbow", rounded_elbow())
    moved = manager.on_drag("elbow", (0, 5), [2])
    assert np.allclose(moved.end_point[:2], [10, 15])
    assert moved.bulges[1] == pytest.approx(np.tan(np.pi / 8))


def test_drag_unknown_entity_returns_none(manager):
    assert manager.on_drag("missing", (1, 1)) is None


def test_drag_rejects_bad_grip_index(manager):
    manager.on_entity_selected("square", rounded_square())
    with pytest.raises(ValidationError):
        manager.on_drag("square", (1, 1), [4])


def test_rejected_drag_moves_no_grip(manager):
    manager.on_entity_selected("square", rounded_square())
    with pytest.raises(ValidationError):
        manager.on_drag("square", (5, 5), [0, 9])
    session = manager.session("square")
    assert all(np.allclose(grip.current, grip.original) for grip in session.grips)
    assert session.state is SessionState.DISPLAYED
    assert session.rebuilt is None


def test_degenerate_drag_keeps_previous_curve(manager):
    manager.on_entity_selected("elbow", rounded_elbow())
    first = manager.on_drag("elbow", (10, 0), [0])
    assert first.n_vertices == 2
    second = manager.on_drag("elbow", (0, -10), [2])
    session = manager.session("elbow")
    assert second is first
    assert session.rebuilt is first
    assert session.state is SessionState.DRAGGING


def test_abort_restores_original(manager):
    original = rounded_square()
    manager.on_entity_selected("square", original)
    manager.on_drag("square", (5, 5), [2])
    restored = manager.on_abort("square")
    session = manager.session("square")
    assert restored is original
    assert session.state is SessionState.ABORTED
    assert all(np.allclose(grip.current, grip.original) for grip in session.grips)
    with pytest.raises(AbortedEditError):
        manager.on_commit("square")


def test_drag_after_abort_starts_again(manager):
    manager.on_entity_selected("square", rounded_square())
    manager.on_abort("square")
    manager.on_drag("square", (1, 0), [1])
    assert manager.session("square").state is SessionState.DRAGGING
    assert manager.on_commit("square") is not None


def test_commit_returns_rebuilt_curve(manager):
    manager.on_entity_selected("square", rounded_square())
    rebuilt = manager.on_drag("square", (5, 5), [2])
    assert manager.on_commit("square") is rebuilt
    assert manager.session("square").state is SessionState.COMMITTED


def test_commit_without_drag_returns_original(manager):
    original = rounded_square()
    manager.on_entity_selected("square", original)
    assert manager.on_commit("square") is original


def test_deselect_clears_every_session(manager):
    manager.on_entity_selected("a", rounded_square())
    manager.on_entity_selected("b", rounded_elbow())
    manager.on_deselect()
    assert len(manager) == 0
    assert manager.on_drag("a", (1, 1)) is None
    assert manager.on_abort("b") is None
    assert manager.on_commit("a") is None


def test_managers_are_independent():
    first = SessionManager()
    second = SessionManager()
    first.on_entity_selected("square", rounded_square())
    assert "square" not in second
