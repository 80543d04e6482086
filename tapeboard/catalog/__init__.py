"""Footprint catalog — load, validate, query and serialize footprints.json.

Submodules
----------
- **models**         — FootprintPad, Footprint, FootprintLibrary
- **loader**         — load_footprints, default_library
- **serialization**  — footprint_to_dict, library_to_dict
"""

from .models import (
    PAD_ROLES, FootprintPad, Footprint, FootprintLibrary, ValidationError,
    fallback_footprint,
)
from .loader import (
    FOOTPRINTS_FILE, load_footprints, default_library, library_from_dicts,
    parse_footprint,
)
from .serialization import footprint_to_dict, library_to_dict

__all__ = [
    # Models
    "PAD_ROLES", "FootprintPad", "Footprint", "FootprintLibrary",
    "ValidationError", "fallback_footprint",
    # Loader
    "FOOTPRINTS_FILE", "load_footprints", "default_library",
    "library_from_dicts", "parse_footprint",
    # Serialization
    "footprint_to_dict", "library_to_dict",
]
