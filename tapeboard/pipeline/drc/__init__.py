"""Design rule checker — manufacturability validation of a finished board.

Submodules:
  models    DRCViolation, violation types, auto-fix constant.
  checks    One function per rule (spacing, wall, bend, overhang,
            collision, overlap, pad).
  engine    run_drc, auto_fix and fix_overhangs.
"""

from .models import (
    DRCViolation, VIOLATION_TYPES, SEVERITIES, OVERHANG_NUDGE_FRACTION,
    violation_to_dict,
)
from .checks import local_bend_radius
from .engine import run_drc, auto_fix, fix_overhangs

__all__ = [
    "DRCViolation", "VIOLATION_TYPES", "SEVERITIES", "OVERHANG_NUDGE_FRACTION",
    "violation_to_dict", "local_bend_radius",
    "run_drc", "auto_fix", "fix_overhangs",
]
