"""Design serialization — convert design dataclasses to JSON-safe dicts."""

from __future__ import annotations

from .models import (
    Arrangement, ArrangementMetrics, Board, ConnectionDef, Design,
    PlacedComponent, Route,
)


def _r(v: float, nd: int = 3) -> float:
    return round(v, nd)


def board_to_dict(board: Board) -> dict:
    return {
        "boundary": [[_r(x), _r(y)] for x, y in board.boundary],
        "thickness": board.thickness,
        "shape": board.shape,
    }


def component_to_dict(c: PlacedComponent) -> dict:
    return {
        "id": c.id,
        "type": c.type,
        "position": [_r(c.position[0]), _r(c.position[1])],
        "rotation": c.rotation,
    }


def route_to_dict(r: Route) -> dict:
    return {
        "id": r.id,
        "net": r.net,
        "layer": r.layer,
        "polyline": [[_r(x), _r(y)] for x, y in r.polyline],
        "width": r.width,
        "profile": r.profile,
        "depth": r.depth,
        **({"connection_id": r.connection_id} if r.connection_id else {}),
    }


def connection_to_dict(c: ConnectionDef) -> dict:
    return {
        "id": c.id,
        "source": str(c.source),
        "target": str(c.target),
        **({"net_name": c.net_name} if c.net_name else {}),
        "is_power": c.is_power,
        "is_ground": c.is_ground,
        "auto_detected": c.auto_detected,
    }


def metrics_to_dict(m: ArrangementMetrics) -> dict:
    return {
        "total_route_length": _r(m.total_route_length, 2),
        "route_crossings": m.route_crossings,
        "board_utilization": _r(m.board_utilization, 4),
        "unrouted": m.unrouted,
    }


def arrangement_to_dict(a: Arrangement) -> dict:
    """Convert an Arrangement to the preview dict handed to callers."""
    return {
        "id": a.id,
        "name": a.name,
        "description": a.description,
        "components": [component_to_dict(c) for c in a.components],
        "routes": [route_to_dict(r) for r in a.routes],
        "metrics": metrics_to_dict(a.metrics),
        "score": a.score,
        "unrouted_connections": list(a.unrouted_connections),
        "best_effort": a.best_effort,
    }


def design_to_dict(d: Design) -> dict:
    """Convert a Design snapshot to a JSON-serializable dict."""
    rules = {
        k: v for k, v in (
            ("min_spacing", d.rules.min_spacing),
            ("min_wall", d.rules.min_wall),
            ("min_bend_radius", d.rules.min_bend_radius),
            ("min_pad_clearance", d.rules.min_pad_clearance),
            ("nozzle_width", d.rules.nozzle_width),
            ("layer_height", d.rules.layer_height),
        ) if v is not None
    }
    return {
        "board": board_to_dict(d.board),
        "components": [component_to_dict(c) for c in d.components],
        "routes": [route_to_dict(r) for r in d.routes],
        "vias": [
            {"id": v.id, "position": [_r(v.position[0]), _r(v.position[1])],
             "diameter": v.diameter}
            for v in d.vias
        ],
        "rules": rules,
    }
