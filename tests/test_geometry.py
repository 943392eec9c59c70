# tests/test_geometry.py
"""Unit tests for coordinate conversion and hit testing."""

import math

import pytest

from spot_editor.geometry.hit_test import (
    centroid,
    find_spot_at,
    nearest_vertex,
    point_in_polygon,
    translate,
)
from spot_editor.geometry.transform import CoordinateTransform
from spot_editor.state.models import Point, SurfaceSize

from conftest import make_spot

SQUARE = [
    Point(x=0.1, y=0.1),
    Point(x=0.5, y=0.1),
    Point(x=0.5, y=0.5),
    Point(x=0.1, y=0.5),
]


class TestCoordinateTransform:
    def test_to_normalized_divides_by_surface(self):
        transform = CoordinateTransform(SurfaceSize(width=800, height=400))
        point = transform.to_normalized(200, 100)
        assert point == Point(x=0.25, y=0.25)

    def test_unmeasured_surface_gives_origin(self):
        transform = CoordinateTransform()
        assert transform.to_normalized(123, 456) == Point(x=0.0, y=0.0)

        transform.update_surface(0, 300)
        assert transform.to_normalized(123, 456) == Point(x=0.0, y=0.0)

    def test_to_pixels_multiplies_by_surface(self):
        transform = CoordinateTransform(SurfaceSize(width=800, height=400))
        assert transform.to_pixels(Point(x=0.5, y=0.25)) == (400, 100)

    def test_update_surface_is_used_on_next_call(self):
        transform = CoordinateTransform(SurfaceSize(width=100, height=100))
        transform.update_surface(200, 50)
        assert transform.to_pixels(Point(x=1, y=1)) == (200, 50)
        assert transform.to_normalized(100, 25) == Point(x=0.5, y=0.5)

    def test_polygon_to_pixels_rounds(self):
        transform = CoordinateTransform(SurfaceSize(width=1000, height=500))
        assert transform.polygon_to_pixels(SQUARE) == [(100, 50), (500, 50), (500, 250), (100, 250)]


class TestPointInPolygon:
    def test_inside_square(self):
        assert point_in_polygon(Point(x=0.3, y=0.3), SQUARE) is True

    def test_outside_square(self):
        assert point_in_polygon(Point(x=0.9, y=0.9), SQUARE) is False

    def test_vertex_counts_as_outside(self):
        assert point_in_polygon(Point(x=0.1, y=0.1), SQUARE) is False
        assert point_in_polygon(Point(x=0.5, y=0.5), SQUARE) is False

    def test_edge_counts_as_outside(self):
        assert point_in_polygon(Point(x=0.3, y=0.1), SQUARE) is False
        assert point_in_polygon(Point(x=0.1, y=0.3), SQUARE) is False

    def test_vertex_order_does_not_matter(self):
        reversed_square = list(reversed(SQUARE))
        assert point_in_polygon(Point(x=0.3, y=0.3), reversed_square) is True
        assert point_in_polygon(Point(x=0.9, y=0.3), reversed_square) is False

    def test_self_intersecting_bowtie_does_not_raise(self):
        bowtie = [
            Point(x=0.0, y=0.0),
            Point(x=1.0, y=1.0),
            Point(x=1.0, y=0.0),
            Point(x=0.0, y=1.0),
        ]
        # Right lobe of the bow tie is inside under even-odd
        assert point_in_polygon(Point(x=0.9, y=0.5), bowtie) is True
        assert point_in_polygon(Point(x=0.5, y=0.1), bowtie) is False

    def test_degenerate_polygon(self):
        collapsed = [Point(x=0.2, y=0.2)] * 4
        assert point_in_polygon(Point(x=0.2, y=0.2), collapsed) is False
        assert point_in_polygon(Point(x=0.3, y=0.3), collapsed) is False


class TestNearestVertex:
    def test_hit_within_tolerance(self, surface):
        transform = CoordinateTransform(surface)
        spots = [make_spot()]
        # (0.1, 0.1) is (100, 50) px; click 5 px to the right
        hit = nearest_vertex(Point(x=0.105, y=0.1), spots, transform, tolerance_px=10)
        assert hit == (0, 0)

    def test_miss_outside_tolerance(self, surface):
        transform = CoordinateTransform(surface)
        spots = [make_spot()]
        hit = nearest_vertex(Point(x=0.12, y=0.1), spots, transform, tolerance_px=10)
        assert hit is None

    def test_tolerance_is_strict(self):
        transform = CoordinateTransform(SurfaceSize(width=1024, height=512))
        spots = [make_spot(x=0.25, y=0.25)]
        # Corner at (256, 128) px, click at (266, 128) px: exactly 10 px away
        click = Point(x=266 / 1024, y=0.25)
        assert nearest_vertex(click, spots, transform, tolerance_px=10) is None
        assert nearest_vertex(click, spots, transform, tolerance_px=10.5) == (0, 0)

    def test_earlier_spot_wins_over_nearer_vertex(self, surface):
        transform = CoordinateTransform(surface)
        first = make_spot("A1", x=0.1, y=0.1)
        second = make_spot("A2", x=0.108, y=0.1)
        # Click at 107 px: 7 px from A1's corner, 1 px from A2's corner
        hit = nearest_vertex(Point(x=0.107, y=0.1), [first, second], transform, tolerance_px=10)
        assert hit == (0, 0)

    def test_first_vertex_in_list_order_wins(self, surface):
        transform = CoordinateTransform(surface)
        tiny = make_spot(size=0.004)
        # Both corner 0 (100, 50) and corner 1 (104, 50) are within 10 px
        hit = nearest_vertex(Point(x=0.103, y=0.1), [tiny], transform, tolerance_px=10)
        assert hit == (0, 0)


class TestSpotLookupAndTransforms:
    def test_find_spot_at_returns_first_match(self):
        spots = [make_spot("A1", x=0.1, y=0.1), make_spot("A2", x=0.2, y=0.2)]
        assert find_spot_at(Point(x=0.3, y=0.3), spots) == 0
        assert find_spot_at(Point(x=0.55, y=0.55), spots) == 1
        assert find_spot_at(Point(x=0.95, y=0.95), spots) is None

    def test_centroid(self):
        center = centroid(SQUARE)
        assert center.x == pytest.approx(0.3)
        assert center.y == pytest.approx(0.3)

    def test_translate_preserves_shape(self):
        moved = translate(SQUARE, 0.2, -0.05)

        def distances(vertices):
            return [
                math.hypot(a.x - b.x, a.y - b.y)
                for i, a in enumerate(vertices)
                for b in vertices[i + 1:]
            ]

        assert distances(moved) == pytest.approx(distances(SQUARE))
        assert centroid(moved).x == pytest.approx(0.5)
        assert centroid(moved).y == pytest.approx(0.25)
