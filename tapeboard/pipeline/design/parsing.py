"""Design parsing — convert raw dicts/JSON into design dataclasses.

Every parser raises DesignError for malformed input, naming the
offending entry.
"""

from __future__ import annotations

from .models import (
    AssemblyComponent, Board, ConnectionDef, Design, DesignError, DRCRules,
    PadRef, PlacedComponent, PlacementConstraint, Route, Via,
)
from .validation import validate_routing


def _point(v) -> tuple[float, float]:
    return (float(v[0]), float(v[1]))


def _pad_ref(v) -> PadRef:
    """Accept ``"inst:pad"`` or ``{"instance": ..., "pad": ...}``."""
    if isinstance(v, str):
        return PadRef.parse(v)
    return PadRef(str(v["instance"]), str(v["pad"]))


def parse_board(data: dict) -> Board:
    """Parse a board given either as an outline or as width/height.

    Formats:
        {"boundary": [[0, 0], [100, 0], [100, 60], [0, 60]], "thickness": 2}
        {"width": 100, "height": 60}
    """
    try:
        thickness = float(data.get("thickness", 2.0))
        if "boundary" in data:
            return Board(
                boundary=tuple(_point(v) for v in data["boundary"]),
                thickness=thickness,
                shape=data.get("shape", "custom"),
            )
        return Board.rect(float(data["width"]), float(data["height"]), thickness)
    except (KeyError, TypeError, ValueError, IndexError) as exc:
        raise DesignError(f"Invalid board: {exc}") from exc


def _parse_constraint(data: dict | None) -> PlacementConstraint | None:
    if not data:
        return None
    pos = data.get("locked_position")
    rot = data.get("locked_rotation")
    return PlacementConstraint(
        zone=data.get("zone"),
        edge=data.get("edge"),
        locked=bool(data.get("locked", False)),
        locked_position=_point(pos) if pos is not None else None,
        locked_rotation=int(rot) if rot is not None else None,
        group=data.get("group"),
    )


def parse_constraint(data: dict | None) -> PlacementConstraint | None:
    """A placement constraint on its own, as the session endpoints receive it."""
    try:
        return _parse_constraint(data)
    except (TypeError, ValueError, IndexError, AttributeError) as exc:
        raise DesignError(f"Invalid constraint: {exc}") from exc


def parse_components(data: list) -> list[AssemblyComponent]:
    out: list[AssemblyComponent] = []
    for i, c in enumerate(data):
        try:
            quantity = int(c.get("quantity", 1))
            if quantity < 1:
                raise ValueError(f"quantity must be >= 1, got {quantity}")
            out.append(AssemblyComponent(
                id=str(c.get("id", c["type"])),
                type=c["type"],
                quantity=quantity,
                constraint=_parse_constraint(c.get("constraint")),
            ))
        except (KeyError, TypeError, ValueError, IndexError) as exc:
            raise DesignError(f"Invalid component #{i}: {exc}") from exc
    return out


def parse_connections(data: list) -> list[ConnectionDef]:
    out: list[ConnectionDef] = []
    for i, c in enumerate(data):
        cid = c.get("id", f"conn_{i + 1}") if isinstance(c, dict) else f"conn_{i + 1}"
        try:
            out.append(ConnectionDef(
                id=str(cid),
                source=_pad_ref(c["source"]),
                target=_pad_ref(c["target"]),
                net_name=c.get("net_name"),
                is_power=bool(c.get("is_power", False)),
                is_ground=bool(c.get("is_ground", False)),
                auto_detected=bool(c.get("auto_detected", False)),
            ))
        except (KeyError, TypeError, ValueError) as exc:
            raise DesignError(f"Invalid connection: {exc}", connection_id=str(cid)) from exc
    return out


def parse_manual_paths(data: dict | None) -> dict[str, list[tuple[float, float]]]:
    """``{"connection_id": [[x, y], ...]}`` → polylines."""
    if not data:
        return {}
    try:
        return {str(k): [_point(v) for v in pts] for k, pts in data.items()}
    except (TypeError, ValueError, IndexError) as exc:
        raise DesignError(f"Invalid manual path: {exc}") from exc


def parse_design(data: dict) -> Design:
    """Parse a full design snapshot (board, components, routes, vias, rules)."""
    board = parse_board(data["board"]) if "board" in data else None
    if board is None:
        raise DesignError("Design has no board")
    try:
        components = tuple(
            PlacedComponent(
                id=str(c["id"]),
                type=c["type"],
                position=_point(c["position"]),
                rotation=int(c.get("rotation", 0)),
            )
            for c in data.get("components", [])
        )
        routes = tuple(
            Route(
                id=str(r.get("id", f"route_{i + 1}")),
                net=str(r.get("net", f"net_{i + 1}")),
                polyline=tuple(_point(p) for p in r["polyline"]),
                layer=r.get("layer", "top"),
                width=float(r.get("width", 5.0)),
                profile=r.get("profile", "U"),
                depth=float(r.get("depth", 0.8)),
                connection_id=r.get("connection_id"),
            )
            for i, r in enumerate(data.get("routes", []))
        )
        vias = tuple(
            Via(
                id=str(v.get("id", f"via_{i + 1}")),
                position=_point(v["position"]),
                diameter=float(v.get("diameter", 3.0)),
            )
            for i, v in enumerate(data.get("vias", []))
        )
        rules_data = data.get("rules") or {}
        rules = DRCRules(**{k: (float(v) if v is not None else None)
                            for k, v in rules_data.items()})
    except (KeyError, TypeError, ValueError, IndexError) as exc:
        raise DesignError(f"Invalid design: {exc}") from exc

    for r in routes:
        if len(r.polyline) < 2:
            raise DesignError(f"Route '{r.id}': polyline needs at least 2 points")
        errors = validate_routing(None, r.profile, r.layer)
        if errors:
            raise DesignError(f"Route '{r.id}': " + "; ".join(errors), errors=errors)

    return Design(board=board, components=components, routes=routes,
                  vias=vias, rules=rules)
