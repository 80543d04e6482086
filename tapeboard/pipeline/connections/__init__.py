"""Connection detection — pinout tables and net inference.

Submodules
----------
- **pinouts**   — PINOUTS, ROLE_KEYWORDS, Pinout / PinInfo
- **detector**  — classify_role, pad_label, detect_connections, clear_auto_detected
"""

from .pinouts import (
    COMPONENT_ROLES, PAD_LABELS, PINOUTS, ROLE_KEYWORDS, PinInfo, Pinout,
)
from .detector import (
    DetectionStats, DetectionResult, classify_role, pad_label, pin_name,
    generate_net_name, detect_connections, clear_auto_detected,
)

__all__ = [
    # Pinouts
    "COMPONENT_ROLES", "PAD_LABELS", "PINOUTS", "ROLE_KEYWORDS",
    "PinInfo", "Pinout",
    # Detector
    "DetectionStats", "DetectionResult", "classify_role", "pad_label",
    "pin_name", "generate_net_name", "detect_connections",
    "clear_auto_detected",
]
