"""Design validation — structural preconditions checked at the boundary."""

from __future__ import annotations

from tapeboard.catalog import FootprintLibrary
from tapeboard.geometry import is_self_intersecting, polygon_area
from tapeboard.pipeline.config import VALID_LAYERS
from .models import (
    ZONES, EDGES, PROFILES, ROUTING_MODES, Board, ComponentInstance, ConnectionDef, DesignError,
)


def validate_board(board: Board) -> list[str]:
    """Check the board outline. Returns error messages (empty = valid)."""
    errors: list[str] = []
    if len(board.boundary) < 3:
        errors.append(f"Board outline needs at least 3 vertices, got {len(board.boundary)}")
        return errors
    if abs(polygon_area(board.boundary)) < 1e-6:
        errors.append("Board outline has zero area")
    if is_self_intersecting(board.boundary):
        errors.append("Board outline is self-intersecting")
    return errors


def validate_instances(instances: list[ComponentInstance]) -> list[str]:
    errors: list[str] = []
    seen: set[str] = set()
    for inst in instances:
        if inst.id in seen:
            errors.append(f"Duplicate instance id '{inst.id}'")
        seen.add(inst.id)
        c = inst.constraint
        if c is None:
            continue
        if c.zone is not None and c.zone not in ZONES:
            errors.append(f"Instance '{inst.id}': unknown zone '{c.zone}'")
        if c.edge is not None and c.edge not in EDGES:
            errors.append(f"Instance '{inst.id}': unknown edge preference '{c.edge}'")
        if c.locked_rotation is not None and c.locked_rotation % 90 != 0:
            errors.append(f"Instance '{inst.id}': locked rotation must be a multiple of 90")
    return errors


def validate_connections(
    connections: list[ConnectionDef],
    instances: list[ComponentInstance],
    footprints: FootprintLibrary,
) -> list[str]:
    """Check every connection references two distinct, existing pads.

    Unknown component types resolve to the fallback footprint, so their
    only valid pad is "1".
    """
    errors: list[str] = []
    types = {inst.id: inst.type for inst in instances}

    seen_ids: set[str] = set()
    for conn in connections:
        if conn.id in seen_ids:
            errors.append(f"Connection '{conn.id}': duplicate connection id")
        seen_ids.add(conn.id)

        for end in (conn.source, conn.target):
            if end.instance_id not in types:
                errors.append(f"Connection '{conn.id}': unknown instance '{end.instance_id}'")
                continue
            fp = footprints.resolve(types[end.instance_id])
            if fp.pad(end.pad_id) is None:
                errors.append(
                    f"Connection '{conn.id}': unknown pad '{end.pad_id}' on "
                    f"'{end.instance_id}' ({fp.type})"
                )

        if conn.source == conn.target:
            errors.append(f"Connection '{conn.id}': source and target are the same pad '{conn.source}'")

    return errors


def validate_routing(mode: str | None, profile: str, layer: str) -> list[str]:
    """Check router settings against the known modes, profiles and layers.

    A *mode* of None skips the mode check (routes read from a design).
    """
    errors: list[str] = []
    if mode is not None and mode not in ROUTING_MODES:
        errors.append(f"Unknown routing mode '{mode}' (expected one of: {', '.join(ROUTING_MODES)})")
    if profile not in PROFILES:
        errors.append(f"Unknown channel profile '{profile}' (expected one of: {', '.join(PROFILES)})")
    if layer not in VALID_LAYERS:
        errors.append(f"Unknown layer '{layer}' (expected one of: {', '.join(VALID_LAYERS)})")
    return errors


def require_valid(
    connections: list[ConnectionDef],
    instances: list[ComponentInstance],
    footprints: FootprintLibrary,
) -> None:
    """Raise DesignError listing every problem, or return silently."""
    errors = validate_instances(instances) + validate_connections(connections, instances, footprints)
    if errors:
        first_bad = None
        for conn in connections:
            if any(f"'{conn.id}'" in e for e in errors):
                first_bad = conn.id
                break
        raise DesignError("; ".join(errors), connection_id=first_bad, errors=errors)
