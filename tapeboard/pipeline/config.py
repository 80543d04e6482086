"""Shared physical constants for the layout pipeline.

These values describe the conductive channels cut into the board
(copper tape or conductive-ink channels), the spacing the placer keeps
between component footprints, and the grid the router searches on.
The **placer**, the **router** and the **DRC** all derive their
defaults from this single source of truth.

Change a value here and all stages stay in sync automatically.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ChannelRules:
    """Physical design rules for routed channels and placed parts.

    All distances are in millimetres.
    """

    channel_width_mm: float = 5.0
    """Width of a single routed channel (standard copper tape width)."""

    channel_depth_mm: float = 0.8
    """Depth of the channel cut into the board surface."""

    channel_profile: str = "U"
    """Default cross-section profile: "U", "V" or "square"."""

    grid_cell_mm: float = 5.0
    """Routing-grid cell size."""

    routing_clearance_mm: float = 1.0
    """Gap kept between a channel and a foreign component footprint."""

    edge_clearance_mm: float = 2.5
    """Minimum distance from a channel centre line to the board edge."""

    placement_clearance_mm: float = 3.0
    """Preferred gap between two placed footprints."""

    min_placement_clearance_mm: float = 0.5
    """Hard minimum the placer may shrink the gap to before giving up."""

    board_margin_mm: float = 2.0
    """Minimum distance between a footprint and the board edge."""

    placement_grid_mm: float = 2.5
    """Candidate-position scan resolution for the placer."""

    min_bend_radius_mm: float = 5.0
    """Smallest radius the tape tolerates without creasing."""

    # ── Derived helpers ────────────────────────────────────────────

    @property
    def channel_half_width_mm(self) -> float:
        return self.channel_width_mm / 2

    @property
    def obstacle_inflation_mm(self) -> float:
        """How far a footprint is grown before it blocks grid nodes.

        A node is unusable when a channel centred on it would touch the
        footprint, so the footprint grows by half a channel plus the
        routing clearance.
        """
        return self.channel_half_width_mm + self.routing_clearance_mm


# Module-level singleton.
CHANNEL_RULES = ChannelRules()


# Cross-section profiles.  Stiffer profiles need gentler bends: the
# factor scales min_bend_radius_mm for the bend check and the smoother.
PROFILE_BEND_FACTOR: dict[str, float] = {
    "U": 1.0,
    "V": 1.25,
    "square": 1.5,
}

VALID_LAYERS = ("top", "bottom")
