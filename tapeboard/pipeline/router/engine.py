"""Main routing engine — one obstacle-aware path per connection.

Connections never block each other: every path is searched on the same
footprint-only grid, so connections are independent and may be routed
concurrently.  Crossings are counted afterwards, once every path exists.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Sequence

from tapeboard.catalog import FootprintLibrary, default_library
from tapeboard.geometry import same_point, segment_intersection_point
from tapeboard.pipeline.design.models import (
    ArrangementMetrics, Board, ConnectionDef, DesignError, PlacedComponent, Route,
)
from tapeboard.pipeline.design.validation import validate_routing
from tapeboard.pipeline.placer.geometry import (
    board_utilization, expand_box, pad_world_xy, world_box,
)

from .grid import RoutingGrid
from .models import RouterConfig, RoutingResult
from .pathfinder import find_path, nearest_node
from .smoothing import collapse_colinear, fillet_corners, manhattanize


log = logging.getLogger(__name__)

Point = tuple[float, float]


def route_arrangement(
    components: Sequence[PlacedComponent],
    connections: list[ConnectionDef],
    board: Board,
    config: RouterConfig | None = None,
    manual_paths: dict[str, list[Point]] | None = None,
    footprints: FootprintLibrary | None = None,
) -> RoutingResult:
    """Route every connection of one placed arrangement.

    Parameters
    ----------
    components : sequence of PlacedComponent
        Placed instances; their inflated footprints are the obstacles.
    connections : list[ConnectionDef]
        What to route, in order.  Result routes follow this order.
    board : Board
        Board outline.
    config : RouterConfig
        Grid, channel and mode settings.
    manual_paths : dict
        ``connection_id -> polyline`` used verbatim in ``manual`` mode.

    Returns
    -------
    RoutingResult
        Routes, unrouted connection ids and the arrangement metrics.

    Raises
    ------
    DesignError
        If the mode, profile or layer is not a known one.
    """
    cfg = config or RouterConfig()
    errors = validate_routing(cfg.mode, cfg.profile, cfg.layer)
    if errors:
        raise DesignError("; ".join(errors), errors=errors)
    lib = footprints or default_library()
    manual_paths = manual_paths or {}

    grid = RoutingGrid(board, cfg.cell_mm, cfg.edge_clearance_mm)
    by_id = {c.id: c for c in components}
    for c in components:
        fp = lib.resolve(c.type)
        box = world_box(fp, c.position[0], c.position[1], c.rotation)
        grid.block_box(expand_box(box, cfg.obstacle_inflation_mm), c.id)

    def route_one(conn: ConnectionDef) -> Route | None:
        return _route_connection(conn, grid, by_id, lib, cfg, manual_paths)

    if cfg.max_workers > 1 and len(connections) > 1:
        with ThreadPoolExecutor(max_workers=min(cfg.max_workers, len(connections))) as pool:
            results = list(pool.map(route_one, connections))
    else:
        results = [route_one(conn) for conn in connections]

    routes: list[Route] = []
    unrouted: list[str] = []
    for conn, route in zip(connections, results):
        if route is None:
            unrouted.append(conn.id)
        else:
            routes.append(route)

    metrics = ArrangementMetrics(
        total_route_length=sum(r.length for r in routes),
        route_crossings=count_crossings(routes),
        board_utilization=board_utilization(components, lib, board),
        unrouted=len(unrouted),
    )
    log.info("Routed %d/%d connection(s) (%s mode), %d crossing(s), %.1f mm total",
             len(routes), len(connections), cfg.mode, metrics.route_crossings,
             metrics.total_route_length)
    if unrouted:
        log.warning("Unrouted connections: %s", ", ".join(unrouted))
    return RoutingResult(routes=routes, unrouted=unrouted, metrics=metrics)


def resolve_pad(
    ref_instance: str, ref_pad: str,
    by_id: dict[str, PlacedComponent],
    lib: FootprintLibrary,
) -> Point | None:
    """World position of a pad, or None if instance/pad is unknown."""
    comp = by_id.get(ref_instance)
    if comp is None:
        return None
    pad = lib.resolve(comp.type).pad(ref_pad)
    if pad is None:
        return None
    return pad_world_xy(pad.offset, comp.position[0], comp.position[1], comp.rotation)


def _route_connection(
    conn: ConnectionDef,
    grid: RoutingGrid,
    by_id: dict[str, PlacedComponent],
    lib: FootprintLibrary,
    cfg: RouterConfig,
    manual_paths: dict[str, list[Point]],
) -> Route | None:
    if cfg.mode == "manual":
        path = manual_paths.get(conn.id)
        if not path or len(path) < 2:
            log.debug("No manual path for %s", conn.id)
            return None
        return _make_route(conn, [tuple(p) for p in path], cfg)

    src = resolve_pad(conn.source.instance_id, conn.source.pad_id, by_id, lib)
    dst = resolve_pad(conn.target.instance_id, conn.target.pad_id, by_id, lib)
    if src is None or dst is None:
        log.warning("Connection %s references an unplaced pad", conn.id)
        return None

    released = grid.released_for({conn.source.instance_id, conn.target.instance_id})
    start = nearest_node(grid, src, released)
    goal = nearest_node(grid, dst, released)
    if start is None or goal is None:
        log.debug("%s: pad has no reachable grid node", conn.id)
        return None

    nodes = find_path(
        grid, start, goal,
        released=released,
        diagonal=(cfg.mode != "manhattan"),
        turn_penalty=cfg.turn_penalty,
    )
    if nodes is None:
        log.debug("%s: no path", conn.id)
        return None

    raw = [src] + [grid.grid_to_world(gx, gy) for gx, gy in nodes] + [dst]
    if cfg.mode == "manhattan":
        polyline = manhattanize(raw)
    elif cfg.mode == "spline":
        ends = (src, dst)
        polyline = fillet_corners(
            raw, cfg.bend_radius_mm,
            clear=lambda a, b: grid.segment_clear(a, b, released, skip=ends),
        )
        if polyline is None:
            log.debug("%s: no path keeps the %.1f mm bend radius", conn.id, cfg.bend_radius_mm)
            return None
    else:
        polyline = collapse_colinear(raw)

    if len(polyline) < 2:
        # Both pads coincide: keep a degenerate two-point route.
        polyline = [src, dst]
    return _make_route(conn, polyline, cfg)


def _make_route(conn: ConnectionDef, polyline: list[Point], cfg: RouterConfig) -> Route:
    return Route(
        id=f"route:{conn.id}",
        net=conn.net,
        polyline=tuple(polyline),
        layer=cfg.layer,
        width=cfg.channel_width_mm,
        profile=cfg.profile,
        depth=cfg.channel_depth_mm,
        connection_id=conn.id,
    )


# ── Crossing detection ─────────────────────────────────────────────


def _endpoints(route: Route) -> tuple[Point, Point]:
    return route.polyline[0], route.polyline[-1]


def route_crossings(a: Route, b: Route) -> int:
    """Distinct points where two routes meet, shared endpoints excluded."""
    seen: set[tuple[float, float]] = set()
    pa, pb = a.polyline, b.polyline
    for i in range(len(pa) - 1):
        for j in range(len(pb) - 1):
            hit = segment_intersection_point(pa[i], pa[i + 1], pb[j], pb[j + 1])
            if hit is None:
                continue
            if _shares_endpoint(a, b, hit):
                continue
            seen.add((round(hit[0], 6), round(hit[1], 6)))
    return len(seen)


def _shares_endpoint(a: Route, b: Route, p: Point) -> bool:
    return any(same_point(p, e) for e in _endpoints(a)) and any(same_point(p, e) for e in _endpoints(b))


def count_crossings(routes: list[Route]) -> int:
    """Pairwise crossings between routes of different nets."""
    total = 0
    for i, a in enumerate(routes):
        for b in routes[i + 1:]:
            if a.net == b.net:
                continue
            total += route_crossings(a, b)
    return total
