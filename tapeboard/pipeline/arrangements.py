"""Arrangement pipeline — place, route and score every candidate.

Candidates are independent, so they may be routed in a thread pool.
Ids and order are fixed when the request is made; the pool's
completion order never shows in the result.
"""

from __future__ import annotations

import logging
import re
from concurrent.futures import ThreadPoolExecutor

from tapeboard.catalog import FootprintLibrary, default_library
from tapeboard.pipeline.design import (
    AssemblyComponent, Arrangement, Board, ConnectionDef, DesignError,
    expand_components, require_valid, validate_board, validate_routing,
)
from tapeboard.pipeline.placer import Placement, PlacementOptions, get_strategy, place_candidates
from tapeboard.pipeline.router import RouterConfig, route_arrangement
from tapeboard.pipeline.scoring import ScoreWeights, DEFAULT_WEIGHTS, score_metrics, rank_arrangements


log = logging.getLogger(__name__)


def slugify(name: str) -> str:
    return re.sub(r"[^a-z0-9]+", "_", name.lower()).strip("_")


def generate_arrangements(
    components: list[AssemblyComponent],
    board: Board,
    connections: list[ConnectionDef],
    options: PlacementOptions | None = None,
    router_config: RouterConfig | None = None,
    *,
    weights: ScoreWeights = DEFAULT_WEIGHTS,
    manual_paths: dict[str, list[tuple[float, float]]] | None = None,
    footprints: FootprintLibrary | None = None,
    max_workers: int = 1,
) -> list[Arrangement]:
    """Generate, route, score and rank candidate arrangements.

    Raises
    ------
    DesignError
        If the board is malformed, the router settings name an unknown
        mode, profile or layer, or a connection references a missing or
        duplicated pad.  Nothing else raises.
    """
    lib = footprints or default_library()
    cfg = router_config or RouterConfig()
    board_errors = validate_board(board)
    if board_errors:
        raise DesignError("; ".join(board_errors), errors=board_errors)
    routing_errors = validate_routing(cfg.mode, cfg.profile, cfg.layer)
    if routing_errors:
        raise DesignError("; ".join(routing_errors), errors=routing_errors)
    require_valid(connections, expand_components(components), lib)

    placements = place_candidates(components, board, connections, options, lib)
    if not placements:
        return []

    # Ids are assigned here, in request order.
    ids = [f"arr_{n}_{slugify(p.strategy)}" for n, p in enumerate(placements, start=1)]

    def build(job: tuple[str, Placement]) -> Arrangement:
        arr_id, placement = job
        return build_arrangement(arr_id, placement, board, connections,
                                 cfg, weights, manual_paths, lib)

    jobs = list(zip(ids, placements))
    if max_workers > 1 and len(jobs) > 1:
        with ThreadPoolExecutor(max_workers=min(max_workers, len(jobs))) as pool:
            arrangements = list(pool.map(build, jobs))
    else:
        arrangements = [build(job) for job in jobs]

    ranked = rank_arrangements(arrangements)
    log.info("Ranked %d arrangement(s); best %s (%.1f)",
             len(ranked), ranked[0].id, ranked[0].score)
    return ranked


def build_arrangement(
    arr_id: str,
    placement: Placement,
    board: Board,
    connections: list[ConnectionDef],
    router_config: RouterConfig | None = None,
    weights: ScoreWeights = DEFAULT_WEIGHTS,
    manual_paths: dict[str, list[tuple[float, float]]] | None = None,
    footprints: FootprintLibrary | None = None,
) -> Arrangement:
    """Route and score a single placement."""
    result = route_arrangement(placement.components, connections, board,
                               router_config, manual_paths, footprints)
    score = score_metrics(result.metrics, weights)
    log.debug("%s: score %.1f", arr_id, score)
    return Arrangement(
        id=arr_id,
        name=placement.name,
        description=placement.description,
        components=tuple(placement.components),
        routes=tuple(result.routes),
        metrics=result.metrics,
        score=score,
        unrouted_connections=tuple(result.unrouted),
        best_effort=placement.best_effort,
    )


# ── Request options ────────────────────────────────────────────────


def parse_placement_options(data: dict | None) -> PlacementOptions:
    """PlacementOptions from a request dict.

    Unknown keys and unknown strategy names raise DesignError.
    """
    data = dict(data or {})
    try:
        if "strategies" in data:
            data["strategies"] = tuple(data["strategies"])
            for name in data["strategies"]:
                get_strategy(name)
        return PlacementOptions(**data)
    except (TypeError, ValueError) as exc:
        raise DesignError(f"Invalid placement options: {exc}") from exc


def parse_router_config(data: dict | None) -> RouterConfig:
    """RouterConfig from a request dict; unknown keys raise DesignError."""
    try:
        return RouterConfig(**(data or {}))
    except TypeError as exc:
        raise DesignError(f"Invalid router config: {exc}") from exc
