"""Router — obstacle-aware channel routing between component pads.

Submodules:
  models        RoutingResult and RouterConfig.
  grid          Node lattice with free / blocked / permanently blocked nodes.
  pathfinder    A* search (8- or 4-connected, turn penalty).
  smoothing     Colinear collapse, Manhattan elbows, bend-radius fillets.
  engine        Per-connection routing, crossings and metrics.
"""

from .models import RoutingResult, RouterConfig
from .grid import RoutingGrid, FREE, BLOCKED, PERMANENTLY_BLOCKED
from .pathfinder import find_path, nearest_node
from .smoothing import collapse_colinear, manhattanize, fillet_corners
from .engine import route_arrangement, resolve_pad, count_crossings, route_crossings

__all__ = [
    # Models
    "RoutingResult", "RouterConfig",
    # Grid / search
    "RoutingGrid", "FREE", "BLOCKED", "PERMANENTLY_BLOCKED",
    "find_path", "nearest_node",
    # Smoothing
    "collapse_colinear", "manhattanize", "fillet_corners",
    # Engine
    "route_arrangement", "resolve_pad", "count_crossings", "route_crossings",
]
