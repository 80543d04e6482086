"""Router dataclasses and configuration."""

from __future__ import annotations

from dataclasses import dataclass, field

from tapeboard.pipeline.config import CHANNEL_RULES, PROFILE_BEND_FACTOR
from tapeboard.pipeline.design.models import ArrangementMetrics, Route


# ── Output dataclasses ─────────────────────────────────────────────


@dataclass
class RoutingResult:
    """All routes of one arrangement plus what could not be routed."""

    routes: list[Route]
    unrouted: list[str]                 # connection ids, in connection order
    metrics: ArrangementMetrics = field(default_factory=ArrangementMetrics)

    @property
    def ok(self) -> bool:
        return len(self.unrouted) == 0


# ── Router configuration ──────────────────────────────────────────
#
# Physical channel rules come from the shared pipeline config
# (tapeboard.pipeline.config.CHANNEL_RULES).  Router-only knobs live here.


@dataclass(frozen=True)
class RouterConfig:
    """All tuneable router parameters in one place."""

    # ── Physical rules (from shared config) ─────────────────────
    cell_mm: float = CHANNEL_RULES.grid_cell_mm
    channel_width_mm: float = CHANNEL_RULES.channel_width_mm
    channel_depth_mm: float = CHANNEL_RULES.channel_depth_mm
    profile: str = CHANNEL_RULES.channel_profile
    routing_clearance_mm: float = CHANNEL_RULES.routing_clearance_mm
    edge_clearance_mm: float = CHANNEL_RULES.edge_clearance_mm
    min_bend_radius_mm: float = CHANNEL_RULES.min_bend_radius_mm

    # ── Router-only knobs ──────────────────────────────────────
    mode: str = "auto"                  # auto | manhattan | spline | manual
    layer: str = "top"
    turn_penalty: float = 0.5           # A* cost per direction change, in cells
    max_workers: int = 1                # >1 routes connections in a thread pool

    @property
    def obstacle_inflation_mm(self) -> float:
        """Footprints grow by half a channel plus the routing clearance."""
        return self.channel_width_mm / 2 + self.routing_clearance_mm

    @property
    def bend_radius_mm(self) -> float:
        """Minimum fillet radius for this profile."""
        return self.min_bend_radius_mm * PROFILE_BEND_FACTOR.get(self.profile, 1.0)
