"""Zone bands and edge strips — where a constrained part may go.

The board bounding box is cut into thirds.  ``top`` and ``bottom`` take
the full width of the outer thirds in y; ``left`` and ``right`` take the
outer thirds in x of the middle y third; ``center`` is what remains.
Regions are expressed as boxes of allowed footprint *centres*.
"""

from __future__ import annotations

from tapeboard.pipeline.design.models import Board

from .models import Box


def zone_bands(board: Board) -> dict[str, Box]:
    x0, y0, x1, y1 = board.bounds
    w3 = (x1 - x0) / 3
    h3 = (y1 - y0) / 3
    return {
        "center": (x0 + w3, y0 + h3, x1 - w3, y1 - h3),
        "top": (x0, y1 - h3, x1, y1),
        "bottom": (x0, y0, x1, y0 + h3),
        "left": (x0, y0 + h3, x0 + w3, y1 - h3),
        "right": (x1 - w3, y0 + h3, x1, y1 - h3),
    }


def box_center(b: Box) -> tuple[float, float]:
    return ((b[0] + b[2]) / 2, (b[1] + b[3]) / 2)


def feasible_centers(board: Board, half_w: float, half_h: float, margin: float) -> Box:
    """Centres for which a footprint box fits the board bounding box."""
    x0, y0, x1, y1 = board.bounds
    return (x0 + half_w + margin, y0 + half_h + margin,
            x1 - half_w - margin, y1 - half_h - margin)


def edge_strips(
    board: Board, edge: str, half_w: float, half_h: float, margin: float,
) -> list[Box]:
    """Centre lines that put a footprint flush against the matching edge(s).

    ``front`` is the bottom edge, ``back`` the top edge.  The footprint
    is inset by half its extent plus *margin*.
    """
    fx0, fy0, fx1, fy1 = feasible_centers(board, half_w, half_h, margin)
    strips = {
        "front": (fx0, fy0, fx1, fy0),
        "back": (fx0, fy1, fx1, fy1),
        "left": (fx0, fy0, fx0, fy1),
        "right": (fx1, fy0, fx1, fy1),
    }
    if edge == "any":
        return [strips[e] for e in ("front", "back", "left", "right")]
    if edge in strips:
        return [strips[edge]]
    return []


def clip_region(region: Box, limit: Box) -> Box | None:
    """Intersect two centre regions; None when empty."""
    r = (max(region[0], limit[0]), max(region[1], limit[1]),
         min(region[2], limit[2]), min(region[3], limit[3]))
    if r[0] > r[2] + 1e-9 or r[1] > r[3] + 1e-9:
        return None
    return r
