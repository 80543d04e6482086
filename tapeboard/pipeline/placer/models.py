"""Placer dataclasses and configuration constants."""

from __future__ import annotations

from dataclasses import dataclass, field

from tapeboard.pipeline.config import CHANNEL_RULES
from tapeboard.pipeline.design.models import PlacedComponent


Box = tuple[float, float, float, float]     # (min_x, min_y, max_x, max_y)

VALID_ROTATIONS = (0, 90, 180, 270)

# Cost weights: higher absolute value means more influence.
W_WIRE = 1.0            # MAIN driver: pad-to-pad distance to placed neighbours
W_GROUP_SPREAD = 10.0   # keep-together groups dominate everything else
W_TIE_BREAK = 0.2       # strategy preference, decides unconnected parts

MAX_NUDGE_STEPS = 8


@dataclass(frozen=True)
class PlacementOptions:
    optimize_orientation: bool = False
    grid_step: float = CHANNEL_RULES.placement_grid_mm
    clearance: float = CHANNEL_RULES.placement_clearance_mm
    min_clearance: float = CHANNEL_RULES.min_placement_clearance_mm
    edge_margin: float = CHANNEL_RULES.board_margin_mm
    strategies: tuple[str, ...] = ("compact", "zone-priority", "symmetric", "signal-flow")


@dataclass
class Placed:
    """Tracking info for a placed instance during the algorithm."""

    instance_id: str
    type: str
    x: float            # footprint origin
    y: float
    rotation: int
    box: Box            # world bounding box of the rotated footprint extent
    locked: bool = False

    @property
    def center(self) -> tuple[float, float]:
        return ((self.box[0] + self.box[2]) / 2, (self.box[1] + self.box[3]) / 2)


@dataclass
class Placement:
    """One candidate produced by one strategy."""

    strategy: str
    name: str
    description: str
    components: list[PlacedComponent]
    clearance: float                    # smallest clearance actually enforced
    best_effort: bool = False
    overlaps: list[tuple[str, str]] = field(default_factory=list)
