"""
Pure-Python polygon and polyline geometry utilities.

All coordinates in mm, origin bottom-left, X = width, Y = length.
"""

from __future__ import annotations
import math
from typing import Sequence

Point = tuple[float, float]
Outline = Sequence[Point]

EPS = 1e-9


# ── core primitives ─────────────────────────────────────────────────


def polygon_area(outline: Outline) -> float:
    """Signed area via shoelace formula (positive = CCW)."""
    n = len(outline)
    if n < 3:
        return 0.0
    area = 0.0
    for i in range(n):
        x0, y0 = outline[i]
        x1, y1 = outline[(i + 1) % n]
        area += x0 * y1 - x1 * y0
    return area / 2.0


def ensure_ccw(outline: Outline) -> list[Point]:
    """Return a copy with counter-clockwise winding."""
    if polygon_area(outline) < 0:
        return list(reversed(outline))
    return list(outline)


def polygon_bounds(outline: Outline) -> tuple[float, float, float, float]:
    """Return (min_x, min_y, max_x, max_y)."""
    xs = [v[0] for v in outline]
    ys = [v[1] for v in outline]
    return min(xs), min(ys), max(xs), max(ys)


def polygon_centroid(outline: Outline) -> Point:
    """Area centroid of a simple polygon.

    Degenerate (zero-area) outlines fall back to the vertex average.
    """
    a = polygon_area(outline)
    n = len(outline)
    if n == 0:
        return (0.0, 0.0)
    if abs(a) < EPS:
        return (
            sum(v[0] for v in outline) / n,
            sum(v[1] for v in outline) / n,
        )
    cx = cy = 0.0
    for i in range(n):
        x0, y0 = outline[i]
        x1, y1 = outline[(i + 1) % n]
        cross = x0 * y1 - x1 * y0
        cx += (x0 + x1) * cross
        cy += (y0 + y1) * cross
    return (cx / (6.0 * a), cy / (6.0 * a))


def rotate_point(p: Point, rotation_deg: float) -> Point:
    """Rotate a point about the origin (counter-clockwise degrees)."""
    rad = math.radians(rotation_deg)
    cos_r, sin_r = math.cos(rad), math.sin(rad)
    return (p[0] * cos_r - p[1] * sin_r, p[0] * sin_r + p[1] * cos_r)


# ── distances ───────────────────────────────────────────────────────


def point_segment_dist(p: Point, a: Point, b: Point) -> float:
    """Distance from point *p* to segment *a*–*b*."""
    px, py = p
    x1, y1 = a
    x2, y2 = b
    dx, dy = x2 - x1, y2 - y1
    if dx == 0 and dy == 0:
        return math.hypot(px - x1, py - y1)
    t = max(0.0, min(1.0, ((px - x1) * dx + (py - y1) * dy) / (dx * dx + dy * dy)))
    proj_x = x1 + t * dx
    proj_y = y1 + t * dy
    return math.hypot(px - proj_x, py - proj_y)


def segment_distance(a1: Point, a2: Point, b1: Point, b2: Point) -> float:
    """Minimum distance between two segments (0 when they intersect)."""
    if segments_intersect(a1, a2, b1, b2):
        return 0.0
    return min(
        point_segment_dist(a1, b1, b2),
        point_segment_dist(a2, b1, b2),
        point_segment_dist(b1, a1, a2),
        point_segment_dist(b2, a1, a2),
    )


def polyline_length(points: Sequence[Point]) -> float:
    return sum(
        math.hypot(points[i + 1][0] - points[i][0], points[i + 1][1] - points[i][1])
        for i in range(len(points) - 1)
    )


def turn_angle(p0: Point, p1: Point, p2: Point) -> float:
    """Deflection at *p1* in radians: 0 = straight on, π = full reversal."""
    v1 = (p1[0] - p0[0], p1[1] - p0[1])
    v2 = (p2[0] - p1[0], p2[1] - p1[1])
    m1 = math.hypot(*v1)
    m2 = math.hypot(*v2)
    if m1 < EPS or m2 < EPS:
        return 0.0
    cos_t = (v1[0] * v2[0] + v1[1] * v2[1]) / (m1 * m2)
    return math.acos(max(-1.0, min(1.0, cos_t)))


# ── segment intersection ───────────────────────────────────────────


def _cross(o: Point, a: Point, b: Point) -> float:
    return (a[0] - o[0]) * (b[1] - o[1]) - (a[1] - o[1]) * (b[0] - o[0])


def _on_segment(p: Point, q: Point, r: Point) -> bool:
    """Check if point *q* lies on segment *p*–*r* (assuming collinear)."""
    return (
        min(p[0], r[0]) <= q[0] + EPS
        and q[0] <= max(p[0], r[0]) + EPS
        and min(p[1], r[1]) <= q[1] + EPS
        and q[1] <= max(p[1], r[1]) + EPS
    )


def segments_intersect(a1: Point, a2: Point, b1: Point, b2: Point) -> bool:
    """Check if segments (a1-a2) and (b1-b2) intersect or touch."""
    d1 = _cross(b1, b2, a1)
    d2 = _cross(b1, b2, a2)
    d3 = _cross(a1, a2, b1)
    d4 = _cross(a1, a2, b2)
    if ((d1 > EPS and d2 < -EPS) or (d1 < -EPS and d2 > EPS)) and \
       ((d3 > EPS and d4 < -EPS) or (d3 < -EPS and d4 > EPS)):
        return True
    if abs(d1) <= EPS and _on_segment(b1, a1, b2):
        return True
    if abs(d2) <= EPS and _on_segment(b1, a2, b2):
        return True
    if abs(d3) <= EPS and _on_segment(a1, b1, a2):
        return True
    if abs(d4) <= EPS and _on_segment(a1, b2, a2):
        return True
    return False


def same_point(a: Point, b: Point, tol: float = 1e-6) -> bool:
    return abs(a[0] - b[0]) <= tol and abs(a[1] - b[1]) <= tol


def segments_cross(a1: Point, a2: Point, b1: Point, b2: Point) -> bool:
    """Return True if two segments intersect anywhere but a shared endpoint.

    Segments meeting at a common endpoint are a junction, not a crossing.
    """
    for a in (a1, a2):
        for b in (b1, b2):
            if same_point(a, b):
                return False
    return segments_intersect(a1, a2, b1, b2)


def is_self_intersecting(outline: Outline) -> bool:
    """O(n²) edge-crossing check."""
    n = len(outline)
    for i in range(n):
        a1, a2 = outline[i], outline[(i + 1) % n]
        for j in range(i + 2, n):
            if i == 0 and j == n - 1:
                continue  # adjacent edges
            b1, b2 = outline[j], outline[(j + 1) % n]
            if segments_intersect(a1, a2, b1, b2):
                return True
    return False


def segment_intersection_point(a1: Point, a2: Point, b1: Point, b2: Point) -> Point | None:
    """Where two segments meet, or None.

    Colinear overlaps report the first overlapping endpoint found.
    """
    if not segments_intersect(a1, a2, b1, b2):
        return None
    d = (a2[0] - a1[0]) * (b2[1] - b1[1]) - (a2[1] - a1[1]) * (b2[0] - b1[0])
    if abs(d) > EPS:
        t = ((b1[0] - a1[0]) * (b2[1] - b1[1]) - (b1[1] - a1[1]) * (b2[0] - b1[0])) / d
        return (a1[0] + t * (a2[0] - a1[0]), a1[1] + t * (a2[1] - a1[1]))
    for p, s1, s2 in ((a1, b1, b2), (a2, b1, b2), (b1, a1, a2), (b2, a1, a2)):
        if _on_segment(s1, p, s2):
            return p
    return None
