"""Tests for route post-processing."""

from __future__ import annotations

import math

import pytest

from tapeboard.pipeline.drc import local_bend_radius
from tapeboard.pipeline.router import collapse_colinear, fillet_corners, manhattanize


def test_collapse_drops_colinear_and_duplicates():
    pts = [(0, 0), (1, 0), (2, 0), (2, 0), (2, 3)]
    assert collapse_colinear(pts) == [(0, 0), (2, 0), (2, 3)]


def test_collapse_keeps_reversal():
    assert collapse_colinear([(0, 0), (5, 0), (2, 0)]) == [(0, 0), (5, 0), (2, 0)]


def test_manhattanize_inserts_horizontal_elbow():
    assert manhattanize([(0, 0), (3, 4)]) == [(0, 0), (3, 0), (3, 4)]


def test_manhattanize_leaves_axis_aligned_path():
    pts = [(0, 0), (5, 0), (5, 5)]
    assert manhattanize(pts) == pts


def test_fillet_stays_on_circle():
    out = fillet_corners([(0, 0), (20, 0), (20, 20)], 5.0)
    assert out[0] == (0, 0)
    assert out[-1] == (20, 20)
    arc = out[1:-1]
    assert len(arc) >= 3
    for x, y in arc:
        assert math.hypot(x - 15, y - 5) == pytest.approx(5.0)
    assert arc[0] == pytest.approx((15, 0))
    assert arc[-1] == pytest.approx((20, 5))


def test_fillet_respects_bend_radius():
    out = fillet_corners([(0, 0), (30, 0), (30, 30), (60, 30)], 5.0)
    radii = [local_bend_radius(out[i - 1], out[i], out[i + 1]) for i in range(1, len(out) - 1)]
    assert min(radii) >= 5.0 - 1e-6


def test_fillet_cuts_corner_on_short_legs():
    assert fillet_corners([(0, 0), (4, 0), (4, 4)], 5.0) == [(0, 0), (4, 4)]


def test_fillet_gives_up_when_every_cut_is_blocked():
    assert fillet_corners([(0, 0), (4, 0), (4, 4)], 5.0, clear=lambda a, b: False) is None


def test_fillet_drops_short_stub_before_a_corner():
    # 0.3 mm stub from the pad to the first node, then a right angle.
    pts = [(0.3, 0.1), (0, 0), (0, 30), (30, 30)]
    out = fillet_corners(pts, 5.0)
    assert out[0] == (0.3, 0.1)
    assert out[-1] == (30, 30)
    radii = [local_bend_radius(out[i - 1], out[i], out[i + 1]) for i in range(1, len(out) - 1)]
    assert min(radii) >= 5.0 - 1e-6


def test_fillet_noop_for_straight_or_zero_radius():
    assert fillet_corners([(0, 0), (5, 0), (10, 0)], 5.0) == [(0, 0), (10, 0)]
    assert fillet_corners([(0, 0), (5, 0), (5, 5)], 0.0) == [(0, 0), (5, 0), (5, 5)]
