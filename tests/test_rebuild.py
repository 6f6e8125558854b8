from __future__ import annotations

import math

import numpy as np
import pytest

from helpers import QUARTER_BULGE, SQUARE
from roundline.curve import ArcSegment, SegmentType
from roundline.rebuild import fillet_polyline, rebuild_curve, solve_corners
from roundline.topology import is_rounded_edge_curve
from roundline.validation import DegenerateGeometryError, ValidationError


def test_rounded_square_vertices():
    curve = fillet_polyline(SQUARE, 2.0, closed=True)
    assert curve.closed
    assert curve.n_vertices == 8
    expected = [(2, 0), (8, 0), (10, 2), (10, 8), (8, 10), (2, 10), (0, 8), (0, 2)]
    assert np.allclose(curve.points[:, :2], expected)
    assert np.allclose(curve.bulges, [0, QUARTER_BULGE] * 4)
    kinds = [curve.segment_type(i) for i in range(curve.n_segments)]
    assert kinds == [SegmentType.LINE, SegmentType.ARC] * 4


def test_rounded_square_perimeter():
    curve = fillet_polyline(SQUARE, 2.0, closed=True)
    # Each corner trades 2 * r of straight edge for a quarter circle.
    assert curve.length == pytest.approx(40.0 - 4 * (4.0 - math.pi))


def test_rounded_square_arc_centers():
    curve = fillet_polyline(SQUARE, 2.0, closed=True)
    centers = [seg.center[:2] for seg in curve.segments() if isinstance(seg, ArcSegment)]
    assert np.allclose(centers, [(8, 2), (8, 8), (2, 8), (2, 2)])


def test_open_polyline_keeps_endpoints():
    curve = fillet_polyline([(0, 0), (10, 0), (10, 10)], 2.0)
    assert np.allclose(curve.points[:, :2], [(0, 0), (8, 0), (10, 2), (10, 10)])
    assert curve.bulges[1] == pytest.approx(QUARTER_BULGE)
    assert is_rounded_edge_curve(curve)


def test_right_turn_gets_negative_bulge():
    curve = fillet_polyline([(0, 0), (10, 0), (10, -10)], 2.0)
    assert curve.bulges[1] == pytest.approx(-QUARTER_BULGE)


def test_zero_radius_keeps_polyline():
    curve = fillet_polyline(SQUARE, 0.0, closed=True)
    assert curve.n_vertices == 4
    assert not curve.has_bulges


def test_unsolvable_corner_stays_sharp_without_duplicates():
    curve = fillet_polyline([(0, 0), (5, 0), (10, 0)], 2.0)
    assert np.allclose(curve.points[:, :2], [(0, 0), (5, 0), (10, 0)])
    assert not curve.has_bulges


def test_fillet_consuming_segment_drops_the_line():
    curve = fillet_polyline([(0, 0), (1, 0), (1, 10)], 5.0)
    assert np.allclose(curve.points[:, :2], [(0, 0), (1, 1), (1, 10)])
    assert curve.bulges[0] == pytest.approx(QUARTER_BULGE)
    assert curve.segment(0).radius == pytest.approx(1.0)


def test_closed_first_corner_keeps_requested_radius():
    locations = [np.array([x, y, 0.0]) for x, y in SQUARE]
    corners = solve_corners(locations, [12.0] * 4, closed=True)
    assert corners[0].radius == pytest.approx(12.0)
    assert corners[1].radius == pytest.approx(10.0)
    assert corners[2].radius == pytest.approx(10.0)
    assert corners[3].radius == pytest.approx(10.0)
    assert all(c.requested_radius == 12.0 for c in corners)


def test_open_ends_are_sharp():
    locations = [np.array([0.0, 0.0, 0.0]), np.array([10.0, 0.0, 0.0]), np.array([10.0, 10.0, 0.0])]
    corners = solve_corners(locations, [3.0, 2.0, 3.0], closed=False)
    assert corners[0].is_sharp
    assert corners[2].is_sharp
    assert corners[1].radius == pytest.approx(2.0)


def test_rebuild_accepts_location_radius_pairs():
    curve = rebuild_curve([((0, 0), 0.0), ((10, 0), 2.0), ((10, 10), 0.0)], closed=False)
    assert curve.n_vertices == 4


def test_rebuild_requires_enough_points():
    with pytest.raises(DegenerateGeometryError):
        rebuild_curve([((0, 0), 1.0)], closed=False)
    with pytest.raises(DegenerateGeometryError):
        rebuild_curve([((0, 0), 1.0), ((5, 0), 1.0)], closed=True)


def test_rebuild_of_collapsed_points_is_degenerate():
    with pytest.raises(DegenerateGeometryError):
        rebuild_curve([((0, 0), 0.0), ((0, 0), 0.0)], closed=False)


def test_negative_radius_is_rejected():
    with pytest.raises(ValidationError):
        fillet_polyline(SQUARE, -1.0)


def test_rebuild_keeps_elevation():
    curve = fillet_polyline([(0, 0, 4), (10, 0, 4), (10, 10, 4)], 2.0)
    assert np.allclose(curve.points[:, 2], 4.0)
