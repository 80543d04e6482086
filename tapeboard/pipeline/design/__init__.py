"""Design model — dataclasses, parsing, validation, and serialization.

Submodules
----------
- **models**         — Board, AssemblyComponent, ConnectionDef, Route, Arrangement, Design, …
- **validation**     — validate_board, validate_connections, validate_routing,
                       require_valid
- **parsing**        — parse_board, parse_components, parse_connections, parse_design
- **serialization**  — arrangement_to_dict, design_to_dict, …
"""

from .models import (
    ZONES, EDGES, PROFILES, ROUTING_MODES,
    DesignError, Board, PlacementConstraint, ComponentInstance,
    AssemblyComponent, expand_components, PadRef, ConnectionDef,
    PlacedComponent, Route, Via, ArrangementMetrics, Arrangement,
    DRCRules, Design,
)
from .validation import (
    validate_board, validate_instances, validate_connections, validate_routing,
    require_valid,
)
from .parsing import (
    parse_board, parse_constraint, parse_components, parse_connections,
    parse_manual_paths, parse_design,
)
from .serialization import (
    board_to_dict, component_to_dict, route_to_dict, connection_to_dict,
    metrics_to_dict, arrangement_to_dict, design_to_dict,
)

__all__ = [
    # Models
    "ZONES", "EDGES", "PROFILES", "ROUTING_MODES",
    "DesignError", "Board", "PlacementConstraint", "ComponentInstance",
    "AssemblyComponent", "expand_components", "PadRef", "ConnectionDef",
    "PlacedComponent", "Route", "Via", "ArrangementMetrics", "Arrangement",
    "DRCRules", "Design",
    # Validation
    "validate_board", "validate_instances", "validate_connections",
    "validate_routing", "require_valid",
    # Parsing
    "parse_board", "parse_constraint", "parse_components", "parse_connections",
    "parse_manual_paths", "parse_design",
    # Serialization
    "board_to_dict", "component_to_dict", "route_to_dict",
    "connection_to_dict", "metrics_to_dict", "arrangement_to_dict",
    "design_to_dict",
]
