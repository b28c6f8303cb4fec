import math

import pytest

from brush_compiler.geometry.plane_math import Plane, distance, dot
from brush_compiler.geometry.welding import contains_in_radius, weld
from brush_compiler.geometry.winding import (
    Back,
    CoplanarBack,
    CoplanarFront,
    Front,
    Split,
    Winding,
)

SQUARE = Winding([(-1, -1, 0), (1, -1, 0), (1, 1, 0), (-1, 1, 0)])


def test_seed_corners_at_exact_radius():
    plane = Plane.from_points((0, 0, 8), (1, 0, 8), (0, 1, 8))
    seed = Winding.seed(plane, 100.0)

    assert len(seed) == 4
    for p in seed:
        assert math.isclose(distance(p, plane.center), 100.0, rel_tol=1e-12)
        assert plane.has_point(p, 1e-9)
    assert seed.origin == pytest.approx(plane.center)


@pytest.mark.parametrize("normal", [(0, 0, 1), (0, 0, -1), (1, 0, 0), (0, -1, 0), (3, -1, 2)])
def test_seed_winds_around_plane_normal(normal):
    plane = Plane.from_normal_distance(normal, -12.0)
    seed = Winding.seed(plane, 10.0)
    assert seed.plane.normal == pytest.approx(plane.normal)


def test_shift_returns_translated_copy():
    moved = SQUARE.shift((10, 0, -2))
    assert moved.points[0] == (9.0, -1.0, -2.0)
    assert SQUARE.points[0] == (-1.0, -1.0, 0.0)


def test_square_properties():
    assert SQUARE.origin == (0.0, 0.0, 0.0)
    assert SQUARE.plane.normal == pytest.approx((0.0, 0.0, 1.0))
    assert SQUARE.area() == pytest.approx(4.0)
    assert SQUARE.is_valid(require_planar=True)
    assert not Winding([(0, 0, 0), (1, 0, 0)]).is_valid()
    box = SQUARE.bounds()
    assert box.mins == (-1.0, -1.0, 0.0)
    assert box.maxs == (1.0, 1.0, 0.0)


def test_split_through_middle():
    result = SQUARE.split(Plane.from_normal_distance((1, 0, 0), 0.0))

    assert isinstance(result, Split)
    assert list(result.back) == [(-1, -1, 0), (0, -1, 0), (0, 1, 0), (-1, 1, 0)]
    assert list(result.front) == [(0, -1, 0), (1, -1, 0), (1, 1, 0), (0, 1, 0)]
    assert result.back_winding is result.back


def test_split_partitions_vertices():
    plane = Plane.from_normal_distance((1, 2, 0.5), 0.3)
    result = SQUARE.split(plane)

    assert isinstance(result, Split)
    assert all(plane.distance_to(p) >= -1e-9 for p in result.front)
    assert all(plane.distance_to(p) <= 1e-9 for p in result.back)
    # Halves stay on the winding's own plane
    for p in list(result.front) + list(result.back):
        assert SQUARE.plane.has_point(p, 1e-9)
    assert result.front.area() + result.back.area() == pytest.approx(SQUARE.area())
    # Every original corner survives in one of the halves
    halves = list(result.front) + list(result.back)
    for corner in SQUARE:
        assert contains_in_radius(halves, corner, 0.125)


def test_vertices_on_plane_go_to_both_halves():
    # Diagonal through (-1, -1) and (1, 1)
    plane = Plane.from_normal_distance((1, -1, 0), 0.0)
    result = SQUARE.split(plane)

    assert isinstance(result, Split)
    assert len(result.front) == 3
    assert len(result.back) == 3
    for shared in [(-1.0, -1.0, 0.0), (1.0, 1.0, 0.0)]:
        assert shared in result.front.points
        assert shared in result.back.points


def test_split_welds_sliver_points():
    result = SQUARE.split(Plane.from_normal_distance((1, 0, 0), 0.95))

    assert isinstance(result, Split)
    # (0.95, y) crossings sit within the weld radius of the (1, y) corners
    assert len(result.front) == 2
    assert len(result.back) == 4


def test_front_and_back_classification():
    below = Plane.from_normal_distance((0, 0, 1), -1.0)
    above = Plane.from_normal_distance((0, 0, 1), 1.0)

    front = SQUARE.split(below)
    back = SQUARE.split(above)

    assert isinstance(front, Front)
    assert front.back_winding is None
    assert isinstance(back, Back)
    assert back.back_winding is SQUARE


def test_coplanar_classification():
    same = SQUARE.split(Plane.from_normal_distance((0, 0, 1), 0.0))
    opposite = SQUARE.split(Plane.from_normal_distance((0, 0, -1), 0.0))

    assert isinstance(same, CoplanarFront)
    assert same.winding is SQUARE
    assert isinstance(opposite, CoplanarBack)
    assert opposite.back_winding is None


def test_split_result_is_single_classification():
    result = SQUARE.split(Plane.from_normal_distance((0, 1, 0), 0.5))
    kinds = [Front, Back, Split, CoplanarFront, CoplanarBack]
    assert sum(isinstance(result, k) for k in kinds) == 1


def test_weld_keeps_first_occurrence():
    points = [(0, 0, 0), (0.1, 0, 0), (1, 0, 0), (1, 0.05, 0), (0, 0, 0.125)]
    assert weld(points, 0.125) == [(0, 0, 0), (1, 0, 0)]


def test_weld_is_idempotent():
    points = [(0, 0, 0), (0.2, 0, 0), (0.3, 0, 0), (0.41, 0.0, 0.0), (5, 5, 5), (5.1, 5, 5)]
    once = weld(points, 0.125)
    assert weld(once, 0.125) == once
    for i, a in enumerate(once):
        for b in once[i + 1:]:
            assert distance(a, b) > 0.125


def test_contains_in_radius_is_inclusive():
    assert contains_in_radius([(0, 0, 0)], (0.125, 0, 0), 0.125)
    assert not contains_in_radius([(0, 0, 0)], (0.126, 0, 0), 0.125)
    assert not contains_in_radius([], (0, 0, 0), 1.0)


def test_snapped_and_welded():
    noisy = Winding([(0.01, 0, 0), (1.02, 0, 0), (1.0, 0.99, 0), (1.0, 1.0, 1e-9)])
    clean = noisy.snapped(0.25).welded(0.125)
    assert list(clean) == [(0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (1.0, 1.0, 0.0)]
    assert dot(clean.plane.normal, (0, 0, 1)) == pytest.approx(1.0)
