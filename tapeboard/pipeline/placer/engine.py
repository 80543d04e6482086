"""Main placement engine — deterministic grid-search placer.

Each strategy produces one candidate.  Instances are placed one at a
time on a fixed candidate grid; the accepted position is the cheapest
one whose footprint lies inside the board and keeps the required
clearance from everything already placed.  The placer never raises on
crowded boards: it nudges, then shrinks the clearance, then accepts an
overlap and flags the result as best effort.
"""

from __future__ import annotations

import logging
import math
from collections import Counter
from dataclasses import dataclass, field

from shapely.prepared import prep as shapely_prep

from tapeboard.catalog import Footprint, FootprintLibrary, default_library
from tapeboard.geometry import rotate_point
from tapeboard.pipeline.connections import classify_role
from tapeboard.pipeline.design.models import (
    AssemblyComponent, Board, ComponentInstance, ConnectionDef,
    PlacedComponent, expand_components,
)

from .geometry import footprint_extent, world_box, box_gap, box_inside
from .models import (
    Box, Placed, Placement, PlacementOptions,
    VALID_ROTATIONS, W_WIRE, W_GROUP_SPREAD, W_TIE_BREAK, MAX_NUDGE_STEPS,
)
from .nets import build_net_graph, build_placement_groups, keep_together_groups
from .strategies import PlacementContext, PlacementStrategy, get_strategy
from .zones import zone_bands, feasible_centers, edge_strips, clip_region


log = logging.getLogger(__name__)

# Slack for boxes that sit exactly on the board margin.
_EPS = 1e-6


@dataclass
class _Candidate:
    cost: float
    x: float            # footprint origin
    y: float
    rotation: int
    box: Box


@dataclass
class _PassState:
    clearances: list[float] = field(default_factory=list)
    gave_up: list[str] = field(default_factory=list)


def _norm_rotation(rotation: int | None) -> int:
    if rotation is None:
        return 0
    return int(round(rotation / 90.0)) * 90 % 360


def _axis(lo: float, hi: float, step: float) -> list[float]:
    """Grid values from *lo* to *hi* inclusive (hi appended if off-grid)."""
    if hi < lo - 1e-9:
        return []
    n = int(math.floor((hi - lo) / step + 1e-9))
    vals = [lo + k * step for k in range(n + 1)]
    if hi - vals[-1] > 1e-6:
        vals.append(hi)
    return vals


# ── Public API ─────────────────────────────────────────────────────


def place_candidates(
    components: list[AssemblyComponent],
    board: Board,
    connections: list[ConnectionDef],
    options: PlacementOptions | None = None,
    footprints: FootprintLibrary | None = None,
) -> list[Placement]:
    """Produce one placement per configured strategy.

    Parameters
    ----------
    components : list[AssemblyComponent]
        The parts to place; each expands to ``quantity`` instances.
    board : Board
        Board outline.
    connections : list[ConnectionDef]
        Wiring used to pull connected parts together.
    options : PlacementOptions
        Grid step, clearances, rotation search and strategy list.

    Returns
    -------
    list[Placement]
        In strategy order; empty when there is nothing to place.
    """
    options = options or PlacementOptions()
    lib = footprints or default_library()
    instances = expand_components(components)
    if not instances:
        log.info("No components to place")
        return []

    placements = [
        place_with_strategy(get_strategy(name), instances, board, connections, options, lib)
        for name in options.strategies
    ]
    log.info("Generated %d placement candidate(s) for %d instance(s)",
             len(placements), len(instances))
    return placements


def place_with_strategy(
    strategy: PlacementStrategy,
    instances: list[ComponentInstance],
    board: Board,
    connections: list[ConnectionDef],
    options: PlacementOptions,
    footprints: FootprintLibrary,
) -> Placement:
    net_graph = build_net_graph(connections)
    area_map = {inst.id: footprints.resolve(inst.type).area for inst in instances}
    keep = keep_together_groups(instances)
    groups = build_placement_groups([i.id for i in instances], net_graph, area_map, keep)
    ctx = PlacementContext(
        board=board,
        footprints=footprints,
        bands=zone_bands(board),
        net_graph=net_graph,
        base_order=[iid for g in groups for iid in g],
        type_counts=dict(Counter(inst.type for inst in instances)),
    )
    group_of = {iid: name for name, members in keep.items() for iid in members}
    prep_board = shapely_prep(board.polygon)
    state = _PassState()

    # ── 1. Locked parts with a fixed position go in verbatim ──────
    for inst in instances:
        c = inst.constraint
        if c is not None and c.locked and c.locked_position is not None:
            fp = footprints.resolve(inst.type)
            rot = _norm_rotation(c.locked_rotation)
            x, y = c.locked_position
            ctx.placed[inst.id] = Placed(inst.id, inst.type, x, y, rot,
                                         world_box(fp, x, y, rot), locked=True)
            log.debug("Locked %s at (%.1f, %.1f) rot=%d°", inst.id, x, y, rot)

    # ── 2. Everything else in strategy order ──────────────────────
    todo = [i for i in instances if i.id not in ctx.placed]
    for inst in strategy.order(todo, ctx):
        ctx.placed[inst.id] = _place_one(
            inst, strategy, ctx, options, prep_board, group_of, state)

    # ── 3. Build output ───────────────────────────────────────────
    clearance = min(state.clearances) if state.clearances else options.clearance
    placed = [ctx.placed[i.id] for i in instances]
    overlaps: list[tuple[str, str]] = []
    for i, a in enumerate(placed):
        for b in placed[i + 1:]:
            if box_gap(a.box, b.box) < clearance - 1e-9:
                overlaps.append((a.instance_id, b.instance_id))

    best_effort = bool(state.gave_up or overlaps)
    description = strategy.description
    if best_effort:
        description += " Best effort: some parts overlap."
        log.warning("%s: residual overlap between %s", strategy.display_name, overlaps)

    return Placement(
        strategy=strategy.name,
        name=strategy.display_name,
        description=description,
        components=[
            PlacedComponent(id=p.instance_id, type=p.type, position=(p.x, p.y), rotation=p.rotation)
            for p in placed
        ],
        clearance=clearance,
        best_effort=best_effort,
        overlaps=overlaps,
    )


# ── Single-instance placement ──────────────────────────────────────


def _place_one(
    inst: ComponentInstance,
    strategy: PlacementStrategy,
    ctx: PlacementContext,
    options: PlacementOptions,
    prep_board,
    group_of: dict[str, str],
    state: _PassState,
) -> Placed:
    fp = ctx.footprints.resolve(inst.type)
    c = inst.constraint
    if c is not None and c.locked:
        rotations: tuple[int, ...] = (_norm_rotation(c.locked_rotation),)
    elif options.optimize_orientation:
        rotations = VALID_ROTATIONS
    else:
        rotations = (0,)

    candidates = _candidates(inst, fp, rotations, strategy, ctx, options, prep_board, group_of)
    others = list(ctx.placed.values())

    clearance = options.clearance
    fallback = candidates[0] if candidates else None
    while True:
        for cand in candidates:
            if all(box_gap(cand.box, p.box) >= clearance for p in others):
                state.clearances.append(clearance)
                log.debug("Placed %s at (%.1f, %.1f) rot=%d° cost=%.2f",
                          inst.id, cand.x, cand.y, cand.rotation, cand.cost)
                return Placed(inst.id, inst.type, cand.x, cand.y, cand.rotation, cand.box)

        if fallback is not None:
            shift = _nudge(fallback.box, others, clearance, prep_board, options.edge_margin)
            if shift is not None:
                dx, dy = shift
                state.clearances.append(clearance)
                log.debug("Nudged %s by (%.1f, %.1f)", inst.id, dx, dy)
                return Placed(
                    inst.id, inst.type, fallback.x + dx, fallback.y + dy, fallback.rotation,
                    (fallback.box[0] + dx, fallback.box[1] + dy,
                     fallback.box[2] + dx, fallback.box[3] + dy),
                )

        if clearance <= options.min_clearance + 1e-9:
            break
        clearance = max(options.min_clearance, clearance / 2)
        log.debug("Shrinking clearance for %s to %.2f mm", inst.id, clearance)

    state.gave_up.append(inst.id)
    state.clearances.append(clearance)
    if fallback is None:
        # Does not fit the board at all: centre it and let DRC complain.
        rot = rotations[0]
        ex0, ey0, ex1, ey1 = footprint_extent(fp, rot)
        cx, cy = ctx.board_center
        x, y = cx - (ex0 + ex1) / 2, cy - (ey0 + ey1) / 2
        log.warning("%s does not fit inside the board", inst.id)
        return Placed(inst.id, inst.type, x, y, rot, world_box(fp, x, y, rot))
    log.warning("Could not clear %s; leaving an overlap", inst.id)
    return Placed(inst.id, inst.type, fallback.x, fallback.y, fallback.rotation, fallback.box)


def _regions(
    inst: ComponentInstance, ctx: PlacementContext,
    half_w: float, half_h: float, margin: float,
) -> list[list[Box]]:
    """Centre regions in priority order: the constrained one, then the board."""
    whole = feasible_centers(ctx.board, half_w, half_h, margin)
    tiers: list[list[Box]] = []
    c = inst.constraint
    if c is not None:
        if c.edge and classify_role(inst.type) == "connector":
            tiers.append(edge_strips(ctx.board, c.edge, half_w, half_h, margin))
        elif c.zone and c.zone in ctx.bands:
            band = clip_region(ctx.bands[c.zone], whole)
            if band is not None:
                tiers.append([band])
    tiers.append([whole])
    return tiers


def _candidates(
    inst: ComponentInstance,
    fp: Footprint,
    rotations: tuple[int, ...],
    strategy: PlacementStrategy,
    ctx: PlacementContext,
    options: PlacementOptions,
    prep_board,
    group_of: dict[str, str],
) -> list[_Candidate]:
    """All in-board positions of the first tier that has any, cheapest first."""
    # Connected pads already on the board: (my pad offset, other pad world xy)
    links: list[tuple[tuple[float, float], tuple[float, float]]] = []
    for edge in ctx.net_graph.get(inst.id, []):
        other = ctx.placed.get(edge.other_iid)
        mine = fp.pad(edge.my_pad)
        if other is None or mine is None:
            continue
        other_pad = ctx.footprints.resolve(other.type).pad(edge.other_pad)
        if other_pad is None:
            continue
        ox, oy = rotate_point(other_pad.offset, other.rotation)
        links.append((mine.offset, (other.x + ox, other.y + oy)))

    group = group_of.get(inst.id)
    mates = [p.center for iid, p in ctx.placed.items() if group and group_of.get(iid) == group]
    mates_center = (
        (sum(m[0] for m in mates) / len(mates), sum(m[1] for m in mates) / len(mates))
        if mates else None
    )

    per_rotation = []
    for rot in rotations:
        ex0, ey0, ex1, ey1 = footprint_extent(fp, rot)
        per_rotation.append((rot, (ex0, ey0, ex1, ey1),
                             [(rotate_point(off, rot), world) for off, world in links]))

    max_tiers = max(
        len(_regions(inst, ctx, (e[2] - e[0]) / 2, (e[3] - e[1]) / 2, options.edge_margin))
        for _, e, _ in per_rotation
    )
    for tier in range(max_tiers):
        found: list[_Candidate] = []
        for rot, (ex0, ey0, ex1, ey1), rlinks in per_rotation:
            hw, hh = (ex1 - ex0) / 2, (ey1 - ey0) / 2
            lcx, lcy = (ex0 + ex1) / 2, (ey0 + ey1) / 2
            tiers = _regions(inst, ctx, hw, hh, options.edge_margin)
            regions = tiers[min(tier, len(tiers) - 1)]
            for region in regions:
                for cx in _axis(region[0], region[2], options.grid_step):
                    for cy in _axis(region[1], region[3], options.grid_step):
                        box = (cx - hw, cy - hh, cx + hw, cy + hh)
                        if not box_inside(prep_board, box, options.edge_margin - _EPS):
                            continue
                        x, y = cx - lcx, cy - lcy
                        wire = sum(
                            math.hypot(x + off[0] - wx, y + off[1] - wy)
                            for off, (wx, wy) in rlinks
                        )
                        spread = (
                            math.hypot(cx - mates_center[0], cy - mates_center[1])
                            if mates_center else 0.0
                        )
                        tie = strategy.tie_break(inst, (cx, cy), ctx)
                        cost = W_WIRE * wire + W_GROUP_SPREAD * spread + W_TIE_BREAK * tie
                        found.append(_Candidate(cost, x, y, rot, box))
        if found:
            # Stable sort: equal costs keep scan order.
            found.sort(key=lambda cand: cand.cost)
            return found
    return []


def _nudge(
    box: Box, others: list[Placed], clearance: float, prep_board, margin: float,
) -> tuple[float, float] | None:
    """Shift *box* off its neighbours along the cheapest axis.

    Returns the total (dx, dy) or None when the overlap cannot be
    cleared without leaving the board.
    """
    dx_total = dy_total = 0.0
    cur = box
    for _ in range(MAX_NUDGE_STEPS):
        blockers = [p for p in others if box_gap(cur, p.box) < clearance]
        if not blockers:
            return dx_total, dy_total
        b = blockers[0].box
        moves = [
            (b[2] + clearance - cur[0], 0.0),
            (b[0] - clearance - cur[2], 0.0),
            (0.0, b[3] + clearance - cur[1]),
            (0.0, b[1] - clearance - cur[3]),
        ]
        for dx, dy in sorted(moves, key=lambda m: abs(m[0]) + abs(m[1])):
            moved = (cur[0] + dx, cur[1] + dy, cur[2] + dx, cur[3] + dy)
            if box_inside(prep_board, moved, margin - _EPS):
                cur = moved
                dx_total += dx
                dy_total += dy
                break
        else:
            return None
    if any(box_gap(cur, p.box) < clearance for p in others):
        return None
    return dx_total, dy_total
