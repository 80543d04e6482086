"""Path post-processing: colinear collapse, Manhattan elbows, fillets."""

from __future__ import annotations

import math
from typing import Callable

from tapeboard.geometry import same_point, turn_angle

Point = tuple[float, float]

# Arc resolution: one segment per this many radians of turn.
ARC_STEP_RAD = math.pi / 16
# Corners flatter than this keep their vertex; sharper than pi minus this
# cannot take an arc at all.
MIN_FILLET_TURN_RAD = 1e-3


def dedupe(points: list[Point]) -> list[Point]:
    """Drop consecutive duplicate points."""
    out: list[Point] = []
    for p in points:
        if not out or not same_point(out[-1], p):
            out.append(p)
    return out


def collapse_colinear(points: list[Point]) -> list[Point]:
    """Remove colinear intermediate points.

    Keeps the start, end, and every point where the direction changes.
    """
    pts = dedupe(points)
    if len(pts) <= 2:
        return pts
    out = [pts[0]]
    for i in range(1, len(pts) - 1):
        if turn_angle(out[-1], pts[i], pts[i + 1]) > 1e-9:
            out.append(pts[i])
    out.append(pts[-1])
    return out


def manhattanize(points: list[Point]) -> list[Point]:
    """Insert an elbow into every diagonal segment.

    The elbow goes horizontal-first, so each segment ends up axis-aligned.
    """
    pts = dedupe(points)
    if len(pts) < 2:
        return pts
    out = [pts[0]]
    for p in pts[1:]:
        q = out[-1]
        if abs(p[0] - q[0]) > 1e-9 and abs(p[1] - q[1]) > 1e-9:
            out.append((p[0], q[1]))
        out.append(p)
    return collapse_colinear(out)


def fillet_corners(
    points: list[Point],
    radius: float,
    clear: Callable[[Point, Point], bool] | None = None,
) -> list[Point] | None:
    """Replace every corner with a circular arc of exactly *radius*.

    A corner whose arc does not fit its legs is cut: the vertex is
    dropped and its neighbours are joined directly, until every remaining
    corner fits.  ``clear(a, b)`` may veto a shortcut that would cross an
    obstacle; when every cut for a misfit is vetoed the path cannot be
    smoothed and None is returned.
    """
    pts = collapse_colinear(points)
    if radius <= 0:
        return pts
    while len(pts) >= 3:
        misfit = _misfit_corners(pts, radius)
        if not misfit:
            break
        for k in misfit:
            if clear is None or clear(pts[k - 1], pts[k + 1]):
                pts = collapse_colinear(pts[:k] + pts[k + 1:])
                break
        else:
            return None
    if len(pts) < 3:
        return pts
    out: list[Point] = [pts[0]]
    for i in range(1, len(pts) - 1):
        out.extend(_fillet(pts[i - 1], pts[i], pts[i + 1], radius))
    out.append(pts[-1])
    return dedupe(out)


def _tangent_length(p0: Point, p1: Point, p2: Point, radius: float) -> float:
    """Distance from *p1* to where an arc of *radius* leaves each leg."""
    theta = turn_angle(p0, p1, p2)
    if theta < MIN_FILLET_TURN_RAD:
        return 0.0
    if theta > math.pi - MIN_FILLET_TURN_RAD:
        return math.inf
    return radius * math.tan(theta / 2)


def _misfit_corners(pts: list[Point], radius: float) -> list[int]:
    """Corners of the first leg too short for its arcs, sharpest first.

    Each leg must hold both tangent lengths plus one arc chord of
    straight run, so the corners where an arc meets a straight segment
    stay at least *radius* wide as well.
    """
    chord = 2 * radius * math.sin(ARC_STEP_RAD / 2)
    last = len(pts) - 1
    t = [0.0] + [_tangent_length(pts[i - 1], pts[i], pts[i + 1], radius)
                 for i in range(1, last)] + [0.0]
    for j in range(last):
        leg = math.hypot(pts[j + 1][0] - pts[j][0], pts[j + 1][1] - pts[j][1])
        if t[j] + t[j + 1] + chord > leg + 1e-9:
            corners = [k for k in (j, j + 1) if 0 < k < last]
            return sorted(corners, key=lambda k: -t[k])
    return []


def _fillet(p0: Point, p1: Point, p2: Point, radius: float) -> list[Point]:
    theta = turn_angle(p0, p1, p2)
    if theta < MIN_FILLET_TURN_RAD:
        return [p1]

    leg_a = math.hypot(p0[0] - p1[0], p0[1] - p1[1])
    leg_b = math.hypot(p2[0] - p1[0], p2[1] - p1[1])
    r = radius
    t = r * math.tan(theta / 2)

    u1 = ((p0[0] - p1[0]) / leg_a, (p0[1] - p1[1]) / leg_a)
    u2 = ((p2[0] - p1[0]) / leg_b, (p2[1] - p1[1]) / leg_b)
    t1 = (p1[0] + u1[0] * t, p1[1] + u1[1] * t)
    t2 = (p1[0] + u2[0] * t, p1[1] + u2[1] * t)

    bis = (u1[0] + u2[0], u1[1] + u2[1])
    bl = math.hypot(*bis)
    d = r / math.cos(theta / 2)
    c = (p1[0] + bis[0] / bl * d, p1[1] + bis[1] / bl * d)

    a1 = math.atan2(t1[1] - c[1], t1[0] - c[0])
    a2 = math.atan2(t2[1] - c[1], t2[0] - c[0])
    sweep = a2 - a1
    while sweep > math.pi:
        sweep -= 2 * math.pi
    while sweep < -math.pi:
        sweep += 2 * math.pi

    n = max(2, int(math.ceil(abs(sweep) / ARC_STEP_RAD)))
    return [
        (c[0] + r * math.cos(a1 + sweep * k / n), c[1] + r * math.sin(a1 + sweep * k / n))
        for k in range(n + 1)
    ]
