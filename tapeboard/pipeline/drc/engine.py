"""DRC runner and the overhang auto-fix.

``run_drc`` is pure: it reads a Design and returns a fresh, ordered
violation list.  Ordering is by check (spacing, wall, bend, overhang,
collision, overlap, pad), then discovery order, so two runs over the
same design give identical results.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from tapeboard.catalog import FootprintLibrary, default_library
from tapeboard.pipeline.design.models import Design

from .checks import (
    check_bend, check_collision, check_overhang, check_overlap, check_pad,
    check_spacing, check_wall,
)
from .models import DRCViolation, OVERHANG_NUDGE_FRACTION


log = logging.getLogger(__name__)


def run_drc(design: Design, footprints: FootprintLibrary | None = None) -> list[DRCViolation]:
    lib = footprints or default_library()
    violations: list[DRCViolation] = []
    violations.extend(check_spacing(design))
    violations.extend(check_wall(design))
    violations.extend(check_bend(design))
    violations.extend(check_overhang(design, lib))
    violations.extend(check_collision(design, lib))
    violations.extend(check_overlap(design))
    violations.extend(check_pad(design, lib))

    errors = sum(1 for v in violations if v.is_error)
    log.info("DRC: %d error(s), %d warning(s)", errors, len(violations) - errors)
    return violations


def _nudged(design: Design, fixes: list[tuple[int, int]]) -> Design:
    """Move each (route_index, point_index) toward the board centroid."""
    cx, cy = design.board.centroid
    routes = list(design.routes)
    for ri, pi in fixes:
        route = routes[ri]
        pts = list(route.polyline)
        x, y = pts[pi]
        pts[pi] = (
            x + (cx - x) * OVERHANG_NUDGE_FRACTION,
            y + (cy - y) * OVERHANG_NUDGE_FRACTION,
        )
        routes[ri] = replace(route, polyline=tuple(pts))
    return replace(design, routes=tuple(routes))


def _fix_target(design: Design, violation: DRCViolation) -> tuple[int, int]:
    if violation.type != "overhang" or not violation.auto_fixable:
        raise ValueError(f"no automatic fix for '{violation.type}' violations")
    ri, pi = violation.route_index, violation.point_index
    if ri is None or pi is None or not (0 <= ri < len(design.routes)) \
            or not (0 <= pi < len(design.routes[ri].polyline)):
        raise ValueError("violation does not point at a route point of this design")
    return ri, pi


def auto_fix(
    design: Design,
    violation: DRCViolation,
    footprints: FootprintLibrary | None = None,
) -> tuple[Design, list[DRCViolation]]:
    """Apply the automatic fix for one overhang and re-run DRC.

    Raises
    ------
    ValueError
        If the violation is not an auto-fixable overhang of *design*.
    """
    ri, pi = _fix_target(design, violation)
    fixed = _nudged(design, [(ri, pi)])
    log.debug("Nudged %s point %d toward the board centroid", design.routes[ri].id, pi)
    return fixed, run_drc(fixed, footprints)


def fix_overhangs(
    design: Design,
    max_passes: int = 20,
    footprints: FootprintLibrary | None = None,
) -> tuple[Design, list[DRCViolation]]:
    """Nudge every overhanging route point until none are left.

    Each pass nudges all currently reported points at once.  Stops early
    when a pass finds nothing to fix.
    """
    violations = run_drc(design, footprints)
    for n in range(max_passes):
        targets = [(v.route_index, v.point_index) for v in violations if v.auto_fixable]
        if not targets:
            break
        design = _nudged(design, targets)
        violations = run_drc(design, footprints)
        log.debug("Overhang pass %d fixed %d point(s)", n + 1, len(targets))
    return design, violations
