"""Design dataclasses — the shared vocabulary of every pipeline stage.

Coordinates are millimetres, origin bottom-left, +y towards the back
("top") edge of the board.  Component instances and pads are referred to
by stable string ids (instance id + pad id); positions are resolved only
when a stage needs them.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from functools import cached_property

from shapely.geometry import Polygon

from tapeboard.geometry import polygon_bounds, polygon_centroid, ensure_ccw


ZONES = ("center", "top", "bottom", "left", "right")
EDGES = ("front", "back", "left", "right", "any")
PROFILES = ("U", "V", "square")
ROUTING_MODES = ("auto", "manhattan", "spline", "manual")


class DesignError(Exception):
    """A structural precondition violation (bad reference, malformed input).

    This is the only exception the pipeline raises on purpose; everything
    else degrades to a best-effort result.
    """

    def __init__(self, reason: str, connection_id: str | None = None,
                 errors: list[str] | None = None):
        self.reason = reason
        self.connection_id = connection_id
        self.errors = errors if errors is not None else [reason]
        super().__init__(reason)


# ── Board ──────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Board:
    boundary: tuple[tuple[float, float], ...]
    thickness: float = 2.0
    shape: str = "custom"               # informational only

    @classmethod
    def rect(cls, width: float, height: float, thickness: float = 2.0) -> Board:
        return cls(
            boundary=((0.0, 0.0), (width, 0.0), (width, height), (0.0, height)),
            thickness=thickness,
            shape="rect",
        )

    @cached_property
    def polygon(self) -> Polygon:
        return Polygon(ensure_ccw(self.boundary))

    @property
    def bounds(self) -> tuple[float, float, float, float]:
        return polygon_bounds(self.boundary)

    @property
    def area(self) -> float:
        return self.polygon.area

    @property
    def centroid(self) -> tuple[float, float]:
        return polygon_centroid(ensure_ccw(self.boundary))


# ── Wizard input ───────────────────────────────────────────────────


@dataclass(frozen=True)
class PlacementConstraint:
    zone: str | None = None             # one of ZONES
    edge: str | None = None             # one of EDGES; front = bottom edge
    locked: bool = False
    locked_position: tuple[float, float] | None = None
    locked_rotation: int | None = None
    group: str | None = None            # keep-together group name


@dataclass(frozen=True)
class ComponentInstance:
    """One physical unit of an AssemblyComponent."""
    id: str
    type: str
    component_id: str
    constraint: PlacementConstraint | None = None


@dataclass
class AssemblyComponent:
    id: str
    type: str
    quantity: int = 1
    constraint: PlacementConstraint | None = None

    def expand(self) -> list[ComponentInstance]:
        return [
            ComponentInstance(
                id=f"{self.id}_{n}",
                type=self.type,
                component_id=self.id,
                constraint=self.constraint,
            )
            for n in range(1, max(1, self.quantity) + 1)
        ]


def expand_components(components: list[AssemblyComponent]) -> list[ComponentInstance]:
    """Expand every component into its instances, preserving order."""
    out: list[ComponentInstance] = []
    for c in components:
        out.extend(c.expand())
    return out


@dataclass(frozen=True)
class PadRef:
    instance_id: str
    pad_id: str

    def __str__(self) -> str:
        return f"{self.instance_id}:{self.pad_id}"

    @classmethod
    def parse(cls, ref: str) -> PadRef:
        """Parse ``"instance_id:pad_id"``."""
        if ":" not in ref:
            raise ValueError(f"invalid pad reference '{ref}' (expected 'instance_id:pad_id')")
        iid, pid = ref.rsplit(":", 1)
        return cls(iid, pid)


@dataclass(frozen=True)
class ConnectionDef:
    id: str
    source: PadRef
    target: PadRef
    net_name: str | None = None
    is_power: bool = False
    is_ground: bool = False
    auto_detected: bool = False

    @property
    def net(self) -> str:
        """Net this connection belongs to (its own id when unnamed)."""
        return self.net_name or self.id

    def touches(self, instance_id: str) -> bool:
        return instance_id in (self.source.instance_id, self.target.instance_id)

    def same_pads(self, other: ConnectionDef) -> bool:
        """True when both join the same pad pair, in either direction."""
        return {self.source, self.target} == {other.source, other.target}


# ── Pipeline output ────────────────────────────────────────────────


@dataclass(frozen=True)
class PlacedComponent:
    id: str
    type: str
    position: tuple[float, float]
    rotation: int = 0                   # 0 | 90 | 180 | 270


@dataclass(frozen=True)
class Route:
    id: str
    net: str
    polyline: tuple[tuple[float, float], ...]
    layer: str = "top"
    width: float = 5.0
    profile: str = "U"
    depth: float = 0.8
    connection_id: str | None = None

    @property
    def length(self) -> float:
        pts = self.polyline
        return sum(
            math.hypot(pts[i + 1][0] - pts[i][0], pts[i + 1][1] - pts[i][1])
            for i in range(len(pts) - 1)
        )


@dataclass(frozen=True)
class Via:
    id: str
    position: tuple[float, float]
    diameter: float = 3.0


@dataclass(frozen=True)
class ArrangementMetrics:
    total_route_length: float = 0.0
    route_crossings: int = 0
    board_utilization: float = 0.0
    unrouted: int = 0


@dataclass(frozen=True)
class Arrangement:
    """One complete candidate: placement + routing + score.  Never mutated."""
    id: str
    name: str
    description: str
    components: tuple[PlacedComponent, ...]
    routes: tuple[Route, ...]
    metrics: ArrangementMetrics
    score: float
    unrouted_connections: tuple[str, ...] = ()
    best_effort: bool = False


# ── Persistent design ──────────────────────────────────────────────


@dataclass(frozen=True)
class DRCRules:
    """Manufacturing rules.  ``None`` means the rule is not enforced."""
    min_spacing: float | None = None
    min_wall: float | None = None
    min_bend_radius: float | None = None
    min_pad_clearance: float | None = None
    nozzle_width: float | None = None
    layer_height: float | None = None


@dataclass(frozen=True)
class Design:
    """Snapshot of a finished board.  Edits return a new Design."""
    board: Board
    components: tuple[PlacedComponent, ...] = ()
    routes: tuple[Route, ...] = ()
    vias: tuple[Via, ...] = ()
    rules: DRCRules = field(default_factory=DRCRules)

    def component(self, component_id: str) -> PlacedComponent | None:
        for c in self.components:
            if c.id == component_id:
                return c
        return None

    def with_arrangement(self, arrangement: Arrangement) -> Design:
        """Append an arrangement's components and routes."""
        return replace(
            self,
            components=self.components + arrangement.components,
            routes=self.routes + arrangement.routes,
        )
