from __future__ import annotations

import math

import numpy as np
import pytest

from roundline.curve import LineSegment
from roundline.geometry.fillet import CornerVertex, estimate_fillet_radius, solve_fillet

QUARTER_BULGE = math.tan(math.pi / 8.0)


def test_right_angle_fillet():
    solution = solve_fillet((10, 0), (0, 0), (10, 10), 2.0)
    assert solution is not None
    assert np.allclose(solution.start, [8, 0, 0])
    assert np.allclose(solution.end, [10, 2, 0])
    assert np.allclose(solution.center, [8, 2, 0])
    assert np.allclose(solution.midpoint, [10 - (2 * math.sqrt(2) - 2) / math.sqrt(2), (2 * math.sqrt(2) - 2) / math.sqrt(2), 0])
    assert solution.bulge == pytest.approx(QUARTER_BULGE)
    assert solution.radius == pytest.approx(2.0)
    assert solution.swapped
    assert not solution.reduced


def test_neighbor_order_flips_bulge_sign():
    forward = solve_fillet((10, 0), (0, 0), (10, 10), 2.0)
    backward = solve_fillet((10, 0), (10, 10), (0, 0), 2.0)
    assert not backward.swapped
    assert backward.bulge == pytest.approx(-forward.bulge)
    assert np.allclose(backward.start, forward.end)
    assert np.allclose(backward.end, forward.start)
    assert np.allclose(backward.center, forward.center)


def test_start_point_lies_on_first_segment():
    solution = solve_fillet((0, 0), (0, 10), (10, 0), 3.0)
    assert np.allclose(solution.start, [0, 3, 0])
    assert np.allclose(solution.end, [3, 0, 0])


def test_radius_is_reduced_to_fit_shorter_segment():
    solution = solve_fillet((10, 0), (9, 0), (10, 10), 5.0)
    assert solution.reduced
    assert solution.requested_radius == 5.0
    assert solution.radius == pytest.approx(1.0)
    assert solution.tangent_distance == pytest.approx(1.0)
    assert np.allclose(solution.start, [9, 0, 0])


def test_reduction_can_be_disabled():
    solution = solve_fillet((10, 0), (9, 0), (10, 10), 5.0, allow_reduction=False)
    assert solution.radius == pytest.approx(5.0)
    assert np.allclose(solution.start, [5, 0, 0])


@pytest.mark.parametrize("angle_deg", [20, 45, 60, 90, 120, 150, 170])
def test_tangent_distance_never_exceeds_shorter_segment(angle_deg):
    angle = math.radians(angle_deg)
    second = (3.0 * math.cos(angle), 3.0 * math.sin(angle))
    solution = solve_fillet((0, 0), (8, 0), second, 50.0)
    assert solution is not None
    assert solution.tangent_distance <= 3.0 + 1e-9
    assert solution.radius <= 50.0


def test_tangent_distance_matches_half_angle():
    # 60 degree corner: tangent distance is r / tan(30 deg).
    second = (10 * math.cos(math.radians(60)), 10 * math.sin(math.radians(60)))
    solution = solve_fillet((0, 0), (10, 0), second, 1.0)
    assert solution.tangent_distance == pytest.approx(1.0 / math.tan(math.radians(30)))


def test_fillet_keeps_corner_elevation():
    solution = solve_fillet((10, 0, 3), (0, 0, 3), (10, 10, 3), 2.0)
    assert np.allclose(solution.start, [8, 0, 3])
    assert np.allclose(solution.center, [8, 2, 3])


@pytest.mark.parametrize(
    "corner, first, second, radius",
    [
        ((0, 0), (-5, 0), (5, 0), 2.0),
        ((0, 0), (0, 0), (5, 5), 2.0),
        ((0, 0), (5, 5), (5, 5), 2.0),
        ((10, 0), (0, 0), (10, 10), 0.0005),
    ],
)
def test_no_fillet_for_degenerate_input(corner, first, second, radius):
    assert solve_fillet(corner, first, second, radius) is None


def test_sharp_corner_vertex():
    corner = CornerVertex.sharp(np.array([1.0, 2.0, 0.0]), requested_radius=4.0)
    assert corner.is_sharp
    assert corner.bulge == 0.0
    assert corner.requested_radius == 4.0
    assert np.allclose(corner.start, corner.end)


def test_corner_vertex_from_solution():
    solution = solve_fillet((10, 0), (0, 0), (10, 10), 2.0)
    corner = CornerVertex.from_solution(solution)
    assert not corner.is_sharp
    assert corner.bulge == solution.bulge
    assert np.allclose(corner.point, [10, 0, 0])


def test_estimate_radius_of_untouched_fillet():
    seg_a = LineSegment((2, 0), (8, 0))
    seg_b = LineSegment((10, 2), (10, 8))
    assert estimate_fillet_radius(seg_a, seg_b) == pytest.approx(2.0)


def test_estimate_radius_after_stretch_takes_smaller_distance():
    seg_a = LineSegment((2, 0), (8, 0))
    seg_b = LineSegment((11, 2), (11, 8))
    assert estimate_fillet_radius(seg_a, seg_b) == pytest.approx(2.0)


def test_estimate_radius_of_parallel_segments_is_zero():
    seg_a = LineSegment((0, 0), (8, 0))
    seg_b = LineSegment((0, 2), (8, 2))
    assert estimate_fillet_radius(seg_a, seg_b) == 0.0
