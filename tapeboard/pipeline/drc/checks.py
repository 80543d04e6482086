"""Individual design-rule checks.

Each check takes the design (and the footprint library where pads are
involved) and returns its violations in discovery order.  A check whose
rule is unset (``None``) returns nothing; pad clearances treat an unset
rule as zero, so overlapping pads are still reported.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from shapely.geometry import LineString, Point as ShapelyPoint
from shapely.ops import nearest_points
from shapely.prepared import prep

from tapeboard.catalog import FootprintLibrary
from tapeboard.geometry import same_point, segment_distance, turn_angle
from tapeboard.pipeline.config import PROFILE_BEND_FACTOR
from tapeboard.pipeline.design.models import Design, Route
from tapeboard.pipeline.placer.geometry import pad_world_xy

from .models import DRCViolation

Point = tuple[float, float]

# Segments whose directions differ by less than this count as parallel
# for the wall-thickness check.
PARALLEL_TOLERANCE_RAD = math.radians(10)

# Numerical slack when comparing against a rule value.
_TOL = 1e-6


@dataclass(frozen=True)
class _WorldPad:
    component_id: str
    pad_id: str
    position: Point
    radius: float


def _line(route: Route) -> LineString:
    return LineString(route.polyline)


def _midpoint(a: Point, b: Point) -> Point:
    return ((a[0] + b[0]) / 2, (a[1] + b[1]) / 2)


def _closest(la: LineString, lb: LineString) -> tuple[float, Point]:
    """Distance between two lines and the midpoint of their closest points."""
    pa, pb = nearest_points(la, lb)
    return la.distance(lb), _midpoint((pa.x, pa.y), (pb.x, pb.y))


def _competing_pairs(routes: tuple[Route, ...]):
    """Route pairs that must stay apart: different nets, same layer."""
    for i, a in enumerate(routes):
        for b in routes[i + 1:]:
            if a.net != b.net and a.layer == b.layer:
                yield a, b


def world_pads(design: Design, footprints: FootprintLibrary) -> list[_WorldPad]:
    out: list[_WorldPad] = []
    for c in design.components:
        fp = footprints.resolve(c.type)
        for pad in fp.pads:
            out.append(_WorldPad(
                component_id=c.id,
                pad_id=pad.id,
                position=pad_world_xy(pad.offset, c.position[0], c.position[1], c.rotation),
                radius=pad.radius,
            ))
    return out


# ── spacing ────────────────────────────────────────────────────────


def check_spacing(design: Design) -> list[DRCViolation]:
    min_spacing = design.rules.min_spacing
    if min_spacing is None:
        return []
    out: list[DRCViolation] = []
    for a, b in _competing_pairs(design.routes):
        dist, mid = _closest(_line(a), _line(b))
        if dist < min_spacing - _TOL:
            out.append(DRCViolation(
                type="spacing",
                severity="error",
                message=f"Routes too close: {dist:.2f}mm (min: {min_spacing}mm)",
                fix="Reroute one of the channels further away",
                position=mid,
                refs=(a.id, b.id),
            ))
    return out


# ── wall ───────────────────────────────────────────────────────────


def _parallel(a1: Point, a2: Point, b1: Point, b2: Point) -> bool:
    ax, ay = a2[0] - a1[0], a2[1] - a1[1]
    bx, by = b2[0] - b1[0], b2[1] - b1[1]
    la, lb = math.hypot(ax, ay), math.hypot(bx, by)
    if la < _TOL or lb < _TOL:
        return False
    return abs(ax * by - ay * bx) / (la * lb) < math.sin(PARALLEL_TOLERANCE_RAD)


def check_wall(design: Design) -> list[DRCViolation]:
    limits = [v for v in (design.rules.min_wall, design.rules.nozzle_width) if v is not None]
    if not limits:
        return []
    min_wall = max(limits)
    out: list[DRCViolation] = []
    for a, b in _competing_pairs(design.routes):
        worst: tuple[float, Point] | None = None
        pa, pb = a.polyline, b.polyline
        for i in range(len(pa) - 1):
            for j in range(len(pb) - 1):
                if not _parallel(pa[i], pa[i + 1], pb[j], pb[j + 1]):
                    continue
                wall = segment_distance(pa[i], pa[i + 1], pb[j], pb[j + 1]) - (a.width + b.width) / 2
                if worst is None or wall < worst[0]:
                    _, mid = _closest(LineString([pa[i], pa[i + 1]]), LineString([pb[j], pb[j + 1]]))
                    worst = (wall, mid)
        if worst is not None and worst[0] < min_wall - _TOL:
            out.append(DRCViolation(
                type="wall",
                severity="error",
                message=f"Wall too thin: {worst[0]:.2f}mm (min: {min_wall}mm)",
                fix="Increase the distance between the parallel channels",
                position=worst[1],
                refs=(a.id, b.id),
            ))
    return out


# ── bend ───────────────────────────────────────────────────────────


def local_bend_radius(p0: Point, p1: Point, p2: Point) -> float:
    """Radius of the tightest arc that fits the corner at *p1*.

    Straight runs report infinity.
    """
    theta = turn_angle(p0, p1, p2)
    if theta < 1e-9:
        return math.inf
    leg = min(math.hypot(p1[0] - p0[0], p1[1] - p0[1]),
              math.hypot(p2[0] - p1[0], p2[1] - p1[1]))
    return leg / (2 * math.sin(theta / 2))


def check_bend(design: Design) -> list[DRCViolation]:
    base = design.rules.min_bend_radius
    if base is None:
        return []
    out: list[DRCViolation] = []
    for route in design.routes:
        required = base * PROFILE_BEND_FACTOR.get(route.profile, 1.0)
        pts = route.polyline
        for i in range(1, len(pts) - 1):
            radius = local_bend_radius(pts[i - 1], pts[i], pts[i + 1])
            if radius < required - _TOL:
                out.append(DRCViolation(
                    type="bend",
                    severity="warning",
                    message=(f"Bend too sharp: {radius:.2f}mm radius "
                             f"(min: {required:.2f}mm for profile {route.profile})"),
                    fix="Use spline routing or move the corner to lengthen its legs",
                    position=pts[i],
                    refs=(route.id,),
                ))
    return out


# ── overhang ───────────────────────────────────────────────────────


def check_overhang(design: Design, footprints: FootprintLibrary) -> list[DRCViolation]:
    """Route points and pads not strictly inside the board outline.

    A pad already reported through a route point at the same spot is
    not reported again.
    """
    board = prep(design.board.polygon)
    out: list[DRCViolation] = []
    for ri, route in enumerate(design.routes):
        for pi, p in enumerate(route.polyline):
            if not board.contains(ShapelyPoint(p)):
                out.append(DRCViolation(
                    type="overhang",
                    severity="error",
                    message="Route extends beyond board boundary",
                    fix="Move the point inside the board",
                    position=p,
                    refs=(route.id,),
                    auto_fixable=True,
                    route_index=ri,
                    point_index=pi,
                ))
    for pad in world_pads(design, footprints):
        if board.contains(ShapelyPoint(pad.position)):
            continue
        if any(v.position is not None and same_point(v.position, pad.position) for v in out):
            continue
        out.append(DRCViolation(
            type="overhang",
            severity="error",
            message=f"Pad {pad.component_id}:{pad.pad_id} lies outside the board boundary",
            fix="Move the component inside the board",
            position=pad.position,
            refs=(pad.component_id,),
        ))
    return out


# ── collision ──────────────────────────────────────────────────────


def check_collision(design: Design, footprints: FootprintLibrary) -> list[DRCViolation]:
    clearance = design.rules.min_pad_clearance or 0.0
    by_component: dict[str, list[_WorldPad]] = {}
    for pad in world_pads(design, footprints):
        by_component.setdefault(pad.component_id, []).append(pad)

    out: list[DRCViolation] = []
    ids = [c.id for c in design.components]
    for i, a_id in enumerate(ids):
        for b_id in ids[i + 1:]:
            worst: tuple[float, _WorldPad, _WorldPad] | None = None
            for pa in by_component.get(a_id, ()):
                for pb in by_component.get(b_id, ()):
                    gap = math.dist(pa.position, pb.position) - pa.radius - pb.radius
                    if worst is None or gap < worst[0]:
                        worst = (gap, pa, pb)
            if worst is None or worst[0] >= clearance - _TOL:
                continue
            gap, pa, pb = worst
            out.append(DRCViolation(
                type="collision",
                severity="error",
                message=(f"Pads collide: {a_id}:{pa.pad_id} and {b_id}:{pb.pad_id} "
                         f"{gap:.2f}mm apart (min: {clearance}mm)"),
                fix="Move the components apart",
                position=_midpoint(pa.position, pb.position),
                refs=(a_id, b_id),
            ))
    return out


# ── overlap ────────────────────────────────────────────────────────


def check_overlap(design: Design) -> list[DRCViolation]:
    """Vias that no route ends on."""
    out: list[DRCViolation] = []
    for via in design.vias:
        touching = False
        for route in design.routes:
            reach = via.diameter / 2 + route.width / 2
            if any(math.dist(via.position, e) <= reach for e in (route.polyline[0], route.polyline[-1])):
                touching = True
                break
        if not touching:
            out.append(DRCViolation(
                type="overlap",
                severity="warning",
                message="Via not connected to any tape route",
                fix="End a route on the via or remove it",
                position=via.position,
                refs=(via.id,),
            ))
    return out


# ── pad ────────────────────────────────────────────────────────────


def check_pad(design: Design, footprints: FootprintLibrary) -> list[DRCViolation]:
    """Routes running over pads they do not belong to."""
    clearance = design.rules.min_pad_clearance or 0.0
    ends_by_net: dict[str, list[Point]] = {}
    for route in design.routes:
        ends_by_net.setdefault(route.net, []).extend((route.polyline[0], route.polyline[-1]))

    pads = world_pads(design, footprints)
    out: list[DRCViolation] = []
    for route in design.routes:
        line = _line(route)
        ends = ends_by_net[route.net]
        for pad in pads:
            if any(math.dist(e, pad.position) <= pad.radius + _TOL for e in ends):
                continue
            dist = line.distance(ShapelyPoint(pad.position))
            limit = pad.radius + route.width / 2 + clearance
            if dist < limit - _TOL:
                out.append(DRCViolation(
                    type="pad",
                    severity="error",
                    message=(f"Route too close to pad {pad.component_id}:{pad.pad_id}: "
                             f"{dist:.2f}mm (min: {limit:.2f}mm)"),
                    fix="Reroute the channel around the pad",
                    position=pad.position,
                    refs=(route.id, pad.component_id),
                ))
    return out
