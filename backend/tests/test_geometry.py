"""Tests for the geometry primitives."""

from __future__ import annotations

import math

import pytest

from urbassist.planning_engine.geometry import (
    InsufficientInputError,
    Point,
    as_point,
    great_circle_distance,
    initial_bearing,
    pixels_to_meters,
    polygon_area,
    polyline_length,
    ring_centroid,
    segment_lengths,
    square_pixels_to_square_meters,
)


def _transform(points, angle_deg: float, dx: float, dy: float):
    a = math.radians(angle_deg)
    return [
        (x * math.cos(a) - y * math.sin(a) + dx, x * math.sin(a) + y * math.cos(a) + dy)
        for x, y in points
    ]


class TestPolygonArea:
    def test_unit_square(self):
        assert polygon_area([(0, 0), (1, 0), (1, 1), (0, 1)]) == pytest.approx(1.0)

    def test_right_triangle(self):
        assert polygon_area([(0, 0), (4, 0), (0, 3)]) == pytest.approx(6.0)

    def test_winding_order_does_not_matter(self):
        ccw = [(0, 0), (4, 0), (4, 2), (0, 2)]
        assert polygon_area(ccw) == pytest.approx(polygon_area(list(reversed(ccw))))

    def test_closed_ring_same_as_open(self):
        ring = [(0, 0), (4, 0), (4, 2), (0, 2)]
        assert polygon_area(ring + [ring[0]]) == pytest.approx(8.0)

    def test_rigid_transform_invariance(self):
        shape = [(0, 0), (10, 0), (12, 7), (3, 9), (-2, 4)]
        moved = _transform(shape, 37, 150.5, -42.25)
        assert polygon_area(moved) == pytest.approx(polygon_area(shape))

    def test_accepts_point_dicts(self):
        pts = [{"x": 0, "y": 0}, {"x": 2, "y": 0}, {"x": 2, "y": 2}, {"x": 0, "y": 2}]
        assert polygon_area(pts) == pytest.approx(4.0)

    def test_two_points_raise(self):
        with pytest.raises(InsufficientInputError):
            polygon_area([(0, 0), (1, 1)])

    def test_insufficient_input_is_a_value_error(self):
        with pytest.raises(ValueError):
            polygon_area([])


class TestPolylines:
    def test_segment_lengths(self):
        assert segment_lengths([(0, 0), (3, 4), (3, 10)]) == pytest.approx([5.0, 6.0])

    def test_polyline_length(self):
        assert polyline_length([(0, 0), (3, 4), (3, 10)]) == pytest.approx(11.0)

    def test_single_point_raises(self):
        with pytest.raises(InsufficientInputError):
            segment_lengths([(0, 0)])

    def test_as_point_variants(self):
        assert as_point((1, 2)) == Point(1.0, 2.0)
        assert as_point({"x": 1, "y": 2}) == Point(1.0, 2.0)
        p = Point(3, 4)
        assert as_point(p) is p


class TestScale:
    def test_pixels_to_meters(self):
        assert pixels_to_meters(250, 100) == pytest.approx(2.5)

    def test_square_pixels(self):
        assert square_pixels_to_square_meters(10_000, 100) == pytest.approx(1.0)

    @pytest.mark.parametrize("scale", [0, -5])
    def test_non_positive_scale_rejected(self, scale):
        with pytest.raises(ValueError):
            pixels_to_meters(10, scale)


class TestGeographic:
    def test_one_degree_of_latitude(self):
        expected = 2 * math.pi * 6_371_000 / 360
        assert great_circle_distance((0, 0), (0, 1)) == pytest.approx(expected, rel=1e-9)

    def test_distance_is_symmetric(self):
        a, b = (2.3522, 48.8566), (4.8357, 45.7640)
        assert great_circle_distance(a, b) == pytest.approx(great_circle_distance(b, a))

    def test_zero_distance(self):
        assert great_circle_distance((2.35, 48.85), (2.35, 48.85)) == 0

    @pytest.mark.parametrize("target,expected", [
        ((0, 1), 0.0),
        ((1, 0), 90.0),
        ((0, -1), 180.0),
        ((-1, 0), -90.0),
    ])
    def test_cardinal_bearings(self, target, expected):
        assert initial_bearing((0, 0), target) == pytest.approx(expected)


class TestRingCentroid:
    def test_closed_square(self):
        c = ring_centroid([[(0, 0), (2, 0), (2, 2), (0, 2), (0, 0)]])
        assert c.x == pytest.approx(1.0)
        assert c.y == pytest.approx(1.0)

    def test_closing_point_excluded(self):
        open_ring = [(0, 0), (4, 0), (4, 2)]
        closed = open_ring + [(0, 0)]
        assert ring_centroid([closed]) == ring_centroid([open_ring])

    def test_empty_raises(self):
        with pytest.raises(InsufficientInputError):
            ring_centroid([[]])
