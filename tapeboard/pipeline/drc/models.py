"""DRC result types."""

from __future__ import annotations

from dataclasses import dataclass


VIOLATION_TYPES = ("spacing", "wall", "bend", "overhang", "collision", "overlap", "pad")
SEVERITIES = ("error", "warning")

# Fraction of the way toward the board centroid an overhanging route
# point is moved by one auto-fix.
OVERHANG_NUDGE_FRACTION = 0.25


@dataclass(frozen=True)
class DRCViolation:
    """A single manufacturability problem.

    Attributes:
        type: One of VIOLATION_TYPES.
        severity: ``"error"`` or ``"warning"``.
        message: Human-readable description with measured values.
        fix: Advisory remediation text.
        position: Where the problem is, when it has a location.
        refs: Ids of the offending routes / components / vias.
        auto_fixable: True only for route overhangs.
        route_index: Index into ``Design.routes`` of an overhanging route.
        point_index: Index into that route's polyline.
    """

    type: str
    severity: str
    message: str
    fix: str = ""
    position: tuple[float, float] | None = None
    refs: tuple[str, ...] = ()
    auto_fixable: bool = False
    route_index: int | None = None
    point_index: int | None = None

    @property
    def is_error(self) -> bool:
        return self.severity == "error"


def violation_to_dict(v: DRCViolation) -> dict:
    d: dict = {
        "type": v.type,
        "severity": v.severity,
        "message": v.message,
        "fix": v.fix,
        "refs": list(v.refs),
        "auto_fixable": v.auto_fixable,
    }
    if v.position is not None:
        d["position"] = [round(v.position[0], 3), round(v.position[1], 3)]
    if v.route_index is not None:
        d["route_index"] = v.route_index
        d["point_index"] = v.point_index
    return d
