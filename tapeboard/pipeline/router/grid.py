"""Discretized routing grid — a lattice of nodes marked free or blocked.

Nodes sit at ``origin + k * cell`` where the origin is the lower-left
corner of the board bounding box, so pads on the lattice map exactly to
a node.  Nodes outside the board (shrunk by the edge clearance) are
permanently blocked.  Nodes covered by an inflated footprint are
blocked and remember which instance(s) blocked them, so a connection
can pass through its own two components.
"""

from __future__ import annotations

import math

from shapely.geometry import Point
from shapely.prepared import prep as shapely_prep

from tapeboard.pipeline.design.models import Board


# Node states
FREE = 0
BLOCKED = 1
PERMANENTLY_BLOCKED = 2


class RoutingGrid:
    """A 2-D node lattice over the board bounding box."""

    def __init__(self, board: Board, cell: float, edge_clearance: float) -> None:
        self.cell = cell
        self.edge_clearance = edge_clearance

        xmin, ymin, xmax, ymax = board.bounds
        self.origin_x = xmin
        self.origin_y = ymin
        self.width = int(math.floor((xmax - xmin) / cell + 1e-9)) + 1
        self.height = int(math.floor((ymax - ymin) / cell + 1e-9)) + 1

        self._cells = bytearray(self.width * self.height)
        # node key -> instance ids whose footprint blocks it
        self.owners: dict[int, set[str]] = {}

        inset = shapely_prep(board.polygon.buffer(-edge_clearance))
        for gy in range(self.height):
            for gx in range(self.width):
                if not inset.contains(Point(self.grid_to_world(gx, gy))):
                    self._cells[gy * self.width + gx] = PERMANENTLY_BLOCKED

    # ── Coordinate conversion ──────────────────────────────────────

    def world_to_grid(self, wx: float, wy: float) -> tuple[int, int]:
        """Nearest node to a world point (clamped to bounds)."""
        gx = int(round((wx - self.origin_x) / self.cell))
        gy = int(round((wy - self.origin_y) / self.cell))
        gx = max(0, min(self.width - 1, gx))
        gy = max(0, min(self.height - 1, gy))
        return (gx, gy)

    def grid_to_world(self, gx: int, gy: int) -> tuple[float, float]:
        return (self.origin_x + gx * self.cell, self.origin_y + gy * self.cell)

    def key(self, gx: int, gy: int) -> int:
        return gy * self.width + gx

    # ── Node queries ───────────────────────────────────────────────

    def in_bounds(self, gx: int, gy: int) -> bool:
        return 0 <= gx < self.width and 0 <= gy < self.height

    def state(self, gx: int, gy: int) -> int:
        if not self.in_bounds(gx, gy):
            return PERMANENTLY_BLOCKED
        return self._cells[gy * self.width + gx]

    def is_free(self, gx: int, gy: int) -> bool:
        return self.state(gx, gy) == FREE

    # ── Area blocking ──────────────────────────────────────────────

    def block_box(self, box: tuple[float, float, float, float], owner: str) -> None:
        """Block every node strictly inside a world-space box."""
        x0, y0, x1, y1 = box
        gx_min = max(0, int(math.floor((x0 - self.origin_x) / self.cell)))
        gx_max = min(self.width - 1, int(math.ceil((x1 - self.origin_x) / self.cell)))
        gy_min = max(0, int(math.floor((y0 - self.origin_y) / self.cell)))
        gy_max = min(self.height - 1, int(math.ceil((y1 - self.origin_y) / self.cell)))

        for gy in range(gy_min, gy_max + 1):
            for gx in range(gx_min, gx_max + 1):
                wx, wy = self.grid_to_world(gx, gy)
                if not (x0 < wx < x1 and y0 < wy < y1):
                    continue
                k = gy * self.width + gx
                self.owners.setdefault(k, set()).add(owner)
                if self._cells[k] == FREE:
                    self._cells[k] = BLOCKED

    def released_for(self, instance_ids: set[str]) -> set[int]:
        """Blocked nodes owned only by *instance_ids*.

        A connection may use these: they lie inside its own endpoint
        components and nobody else's.
        """
        return {
            k for k, who in self.owners.items()
            if self._cells[k] == BLOCKED and who <= instance_ids
        }

    # ── Line of sight ──────────────────────────────────────────────

    def segment_clear(
        self,
        a: tuple[float, float],
        b: tuple[float, float],
        released: set[int] = frozenset(),
        skip: tuple[tuple[float, float], ...] = (),
    ) -> bool:
        """True if the node nearest every sample along *a*-*b* is passable.

        Samples are a quarter cell apart.  Samples within one cell of a
        point in *skip* (the pads a route ends on) are not checked.
        """
        length = math.hypot(b[0] - a[0], b[1] - a[1])
        n = max(1, int(math.ceil(length / (self.cell / 4))))
        for i in range(n + 1):
            x = a[0] + (b[0] - a[0]) * i / n
            y = a[1] + (b[1] - a[1]) * i / n
            if any(math.hypot(x - s[0], y - s[1]) <= self.cell for s in skip):
                continue
            gx = int(round((x - self.origin_x) / self.cell))
            gy = int(round((y - self.origin_y) / self.cell))
            if not self.in_bounds(gx, gy):
                return False
            k = gy * self.width + gx
            if self._cells[k] != FREE and k not in released:
                return False
        return True
