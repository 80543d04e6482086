"""Tests for the pure-Python polygon / polyline helpers."""

from __future__ import annotations

import math
import unittest

from tapeboard.geometry import (
    ensure_ccw, is_self_intersecting, point_segment_dist, polygon_area,
    polygon_bounds, polygon_centroid, polyline_length, rotate_point,
    segment_distance, segment_intersection_point, segments_cross,
    segments_intersect, turn_angle,
)


SQUARE = [(0, 0), (10, 0), (10, 10), (0, 10)]


class TestPolygon(unittest.TestCase):

    def test_area_sign_follows_winding(self):
        self.assertAlmostEqual(polygon_area(SQUARE), 100.0)
        self.assertAlmostEqual(polygon_area(list(reversed(SQUARE))), -100.0)

    def test_ensure_ccw(self):
        self.assertGreater(polygon_area(ensure_ccw(list(reversed(SQUARE)))), 0)

    def test_bounds_and_centroid(self):
        self.assertEqual(polygon_bounds(SQUARE), (0, 0, 10, 10))
        cx, cy = polygon_centroid(SQUARE)
        self.assertAlmostEqual(cx, 5.0)
        self.assertAlmostEqual(cy, 5.0)

    def test_degenerate_centroid_is_vertex_average(self):
        self.assertEqual(polygon_centroid([(0, 0), (2, 0), (4, 0)]), (2.0, 0.0))

    def test_self_intersection(self):
        bowtie = [(0, 0), (10, 10), (10, 0), (0, 10)]
        self.assertTrue(is_self_intersecting(bowtie))
        self.assertFalse(is_self_intersecting(SQUARE))


class TestSegments(unittest.TestCase):

    def test_rotate_quarter_turn(self):
        x, y = rotate_point((1, 0), 90)
        self.assertAlmostEqual(x, 0.0)
        self.assertAlmostEqual(y, 1.0)

    def test_point_segment_distance(self):
        self.assertAlmostEqual(point_segment_dist((5, 3), (0, 0), (10, 0)), 3.0)
        self.assertAlmostEqual(point_segment_dist((13, 4), (0, 0), (10, 0)), 5.0)

    def test_segment_distance(self):
        self.assertAlmostEqual(segment_distance((0, 0), (10, 0), (0, 2), (10, 2)), 2.0)
        self.assertEqual(segment_distance((0, 0), (10, 10), (0, 10), (10, 0)), 0.0)

    def test_intersection_point(self):
        p = segment_intersection_point((0, 0), (10, 10), (0, 10), (10, 0))
        self.assertAlmostEqual(p[0], 5.0)
        self.assertAlmostEqual(p[1], 5.0)
        self.assertIsNone(segment_intersection_point((0, 0), (1, 0), (0, 1), (1, 1)))

    def test_shared_endpoint_is_not_a_crossing(self):
        self.assertTrue(segments_intersect((0, 0), (5, 5), (5, 5), (10, 0)))
        self.assertFalse(segments_cross((0, 0), (5, 5), (5, 5), (10, 0)))

    def test_turn_angle(self):
        self.assertAlmostEqual(turn_angle((0, 0), (1, 0), (2, 0)), 0.0)
        self.assertAlmostEqual(turn_angle((0, 0), (1, 0), (1, 1)), math.pi / 2)

    def test_polyline_length(self):
        self.assertAlmostEqual(polyline_length([(0, 0), (3, 4), (3, 10)]), 11.0)
