"""A* pathfinder on the routing grid.

Supports:
  - 8-connected search (any-angle routing) or 4-connected (Manhattan)
  - Turn penalty to prefer straight runs; heap ties go to fewer turns
  - Per-call released nodes, so one grid serves every connection
"""

from __future__ import annotations

import heapq
import math

from .grid import RoutingGrid, FREE


# (dx, dy); orthogonal first so equal-cost ties favour straight moves
ORTHOGONAL = ((1, 0), (-1, 0), (0, 1), (0, -1))
DIAGONAL = ((1, 1), (1, -1), (-1, 1), (-1, -1))

SQRT2 = math.sqrt(2.0)


def _passable(cells: bytearray, key: int, released: set[int]) -> bool:
    return cells[key] == FREE or key in released


def nearest_node(
    grid: RoutingGrid,
    point: tuple[float, float],
    released: set[int] = frozenset(),
) -> tuple[int, int] | None:
    """Closest passable node within one cell (each axis) of *point*."""
    px, py = point
    cells = grid._cells
    gx0 = int(math.floor((px - grid.origin_x) / grid.cell))
    gy0 = int(math.floor((py - grid.origin_y) / grid.cell))
    best: tuple[float, int, int] | None = None
    for gy in range(gy0 - 1, gy0 + 3):
        for gx in range(gx0 - 1, gx0 + 3):
            if not grid.in_bounds(gx, gy):
                continue
            wx, wy = grid.grid_to_world(gx, gy)
            if abs(wx - px) > grid.cell + 1e-9 or abs(wy - py) > grid.cell + 1e-9:
                continue
            if not _passable(cells, grid.key(gx, gy), released):
                continue
            d = math.hypot(wx - px, wy - py)
            cand = (d, gy, gx)
            if best is None or cand < best:
                best = cand
    if best is None:
        return None
    return (best[2], best[1])


def find_path(
    grid: RoutingGrid,
    source: tuple[int, int],
    sink: tuple[int, int],
    *,
    released: set[int] = frozenset(),
    diagonal: bool = True,
    turn_penalty: float = 0.5,
) -> list[tuple[int, int]] | None:
    """A* point-to-point routing.

    Returns a list of (gx, gy) nodes from source to sink, or None if no
    path exists.  Diagonal steps may not cut the corner of a blocked
    node.
    """
    sx, sy = source
    tx, ty = sink

    # Grid internals cached as locals for the inner loop.
    W = grid.width
    H = grid.height
    cells = grid._cells

    if not (0 <= sx < W and 0 <= sy < H and 0 <= tx < W and 0 <= ty < H):
        return None
    if not _passable(cells, sy * W + sx, released) or not _passable(cells, ty * W + tx, released):
        return None
    if source == sink:
        return [source]

    dirs = ORTHOGONAL + DIAGONAL if diagonal else ORTHOGONAL

    def h(x: int, y: int) -> float:
        dx, dy = abs(x - tx), abs(y - ty)
        if diagonal:
            return max(dx, dy) + (SQRT2 - 1) * min(dx, dy)
        return dx + dy

    start_key = sy * W + sx
    sink_key = ty * W + tx
    counter = 0
    # (f, turns, counter, x, y, direction, parent_key)
    heap: list[tuple[float, int, int, int, int, int, int]] = [
        (h(sx, sy), 0, counter, sx, sy, -1, -1)
    ]
    g_scores: dict[int, float] = {start_key: 0.0}
    turns_at: dict[int, int] = {start_key: 0}
    parents: dict[int, int] = {}
    closed: set[int] = set()

    while heap:
        _f, turns, _cnt, cx, cy, direction, parent_key = heapq.heappop(heap)
        key = cy * W + cx

        if key in closed:
            continue
        closed.add(key)
        if parent_key >= 0:
            parents[key] = parent_key

        if key == sink_key:
            path = [(cx, cy)]
            k = key
            while k in parents:
                k = parents[k]
                path.append((k % W, k // W))
            path.reverse()
            return path

        cur_g = g_scores[key]

        for d, (dx, dy) in enumerate(dirs):
            nx, ny = cx + dx, cy + dy
            if not (0 <= nx < W and 0 <= ny < H):
                continue
            nkey = ny * W + nx
            if nkey in closed or not _passable(cells, nkey, released):
                continue
            if dx and dy and not (
                _passable(cells, cy * W + nx, released)
                and _passable(cells, ny * W + cx, released)
            ):
                continue

            is_turn = direction != -1 and direction != d
            step = SQRT2 if (dx and dy) else 1.0
            tentative_g = cur_g + step + (turn_penalty if is_turn else 0.0)
            n_turns = turns + (1 if is_turn else 0)

            if nkey not in g_scores or tentative_g < g_scores[nkey] - 1e-12 or (
                abs(tentative_g - g_scores[nkey]) <= 1e-12 and n_turns < turns_at[nkey]
            ):
                g_scores[nkey] = tentative_g
                turns_at[nkey] = n_turns
                counter += 1
                heapq.heappush(heap, (tentative_g + h(nx, ny), n_turns, counter, nx, ny, d, key))

    return None
