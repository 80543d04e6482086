"""Low-level geometry helpers for the placer."""

from __future__ import annotations

from shapely.geometry import box as shapely_box

from tapeboard.catalog import Footprint
from tapeboard.geometry import rotate_point
from tapeboard.pipeline.design.models import Board, PlacedComponent

from .models import Box


def footprint_extent(fp: Footprint, rotation_deg: int) -> Box:
    """Local bounding box of the footprint extent at a given rotation."""
    x0, y0, x1, y1 = fp.extent
    corners = [rotate_point(c, rotation_deg) for c in ((x0, y0), (x1, y0), (x1, y1), (x0, y1))]
    xs = [c[0] for c in corners]
    ys = [c[1] for c in corners]
    return min(xs), min(ys), max(xs), max(ys)


def world_box(fp: Footprint, x: float, y: float, rotation_deg: int) -> Box:
    ex0, ey0, ex1, ey1 = footprint_extent(fp, rotation_deg)
    return (x + ex0, y + ey0, x + ex1, y + ey1)


def pad_world_xy(
    pad_offset: tuple[float, float],
    x: float, y: float,
    rotation_deg: int,
) -> tuple[float, float]:
    """Transform a footprint-local pad offset to world coordinates."""
    ox, oy = rotate_point(pad_offset, rotation_deg)
    return (x + ox, y + oy)


def expand_box(b: Box, margin: float) -> Box:
    return (b[0] - margin, b[1] - margin, b[2] + margin, b[3] + margin)


def box_gap(a: Box, b: Box) -> float:
    """Chebyshev gap between two AABBs.

    Negative values mean overlap.
    """
    gap_x = max(a[0], b[0]) - min(a[2], b[2])
    gap_y = max(a[1], b[1]) - min(a[3], b[3])
    return max(gap_x, gap_y)


def box_inside(prepared_board, b: Box, margin: float = 0.0) -> bool:
    """Check if an AABB grown by *margin* lies inside a prepared polygon."""
    return prepared_board.contains(shapely_box(*expand_box(b, margin)))


def board_utilization(
    components: list[PlacedComponent] | tuple[PlacedComponent, ...],
    footprints,
    board: Board,
) -> float:
    """Σ footprint extent areas / board area, clamped to [0, 1].

    Both board faces share the one outline, so parts on either layer
    count against the same area.
    """
    area = board.area
    if area <= 0:
        return 0.0
    used = sum(footprints.resolve(c.type).area for c in components)
    return max(0.0, min(1.0, used / area))
