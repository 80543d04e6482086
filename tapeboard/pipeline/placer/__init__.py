"""Placer — generates candidate component placements on the board.

Submodules:
  models        Dataclasses, options and cost weights.
  geometry      Footprint extents, pad transforms, AABB gaps, utilization.
  nets          Connectivity graph and hub-first placement groups.
  zones         Zone bands and edge strips.
  strategies    Named ordering / tie-break rules (Compact, Zone-Priority, …).
  engine        Grid-search placement with overlap resolution.
"""

from .models import Placed, Placement, PlacementOptions, VALID_ROTATIONS
from .engine import place_candidates, place_with_strategy
from .geometry import (
    footprint_extent, world_box, pad_world_xy, box_gap, board_utilization,
)
from .nets import build_net_graph, build_placement_groups
from .strategies import (
    PlacementContext, PlacementStrategy, STRATEGIES, get_strategy, flow_stage,
)
from .zones import zone_bands, edge_strips

__all__ = [
    # Models
    "Placed", "Placement", "PlacementOptions", "VALID_ROTATIONS",
    # Engine
    "place_candidates", "place_with_strategy",
    # Geometry
    "footprint_extent", "world_box", "pad_world_xy", "box_gap",
    "board_utilization",
    # Nets
    "build_net_graph", "build_placement_groups",
    # Strategies
    "PlacementContext", "PlacementStrategy", "STRATEGIES", "get_strategy",
    "flow_stage",
    # Zones
    "zone_bands", "edge_strips",
]
