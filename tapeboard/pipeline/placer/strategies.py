"""Named placement strategies.

Every strategy runs the same placement pass (see ``engine``); it only
decides the order instances are placed in and a small tie-break cost
that steers otherwise equal candidates.  No randomness anywhere: the
same input always yields the same layout.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from tapeboard.catalog import FootprintLibrary
from tapeboard.pipeline.connections import classify_role
from tapeboard.pipeline.design.models import Board, ComponentInstance

from .models import Placed
from .nets import NetEdge
from .zones import box_center


INPUT_KEYWORDS = ("switch", "button", "pot", "encoder", "sensor")
OUTPUT_KEYWORDS = ("led", "display", "buzzer", "speaker")


@dataclass
class PlacementContext:
    """Read-mostly state shared by the engine and a strategy."""
    board: Board
    footprints: FootprintLibrary
    bands: dict[str, tuple[float, float, float, float]]
    net_graph: dict[str, list[NetEdge]]
    base_order: list[str]               # hub-first connectivity order
    type_counts: dict[str, int] = field(default_factory=dict)
    placed: dict[str, Placed] = field(default_factory=dict)

    @property
    def board_center(self) -> tuple[float, float]:
        x0, y0, x1, y1 = self.board.bounds
        return ((x0 + x1) / 2, (y0 + y1) / 2)


def flow_stage(type_: str) -> int:
    """0 = input, 1 = processing, 2 = output."""
    lower = type_.lower()
    if classify_role(type_) in ("connector", "power-source") or any(k in lower for k in INPUT_KEYWORDS):
        return 0
    if any(k in lower for k in OUTPUT_KEYWORDS):
        return 2
    return 1


class PlacementStrategy:
    """Shared interface: an ordering rule plus a tie-break cost."""

    name = "base"
    display_name = "Base"
    description = ""

    def order(self, instances: list[ComponentInstance], ctx: PlacementContext) -> list[ComponentInstance]:
        by_id = {inst.id: inst for inst in instances}
        return [by_id[iid] for iid in ctx.base_order if iid in by_id]

    def tie_break(self, inst: ComponentInstance, center: tuple[float, float],
                  ctx: PlacementContext) -> float:
        return 0.0


class CompactStrategy(PlacementStrategy):
    name = "compact"
    display_name = "Compact"
    description = "Connected parts clustered tightly around the busiest component."

    def tie_break(self, inst, center, ctx):
        if ctx.placed:
            cs = [p.center for p in ctx.placed.values()]
            target = (sum(c[0] for c in cs) / len(cs), sum(c[1] for c in cs) / len(cs))
        else:
            target = ctx.board_center
        return math.hypot(center[0] - target[0], center[1] - target[1])


class ZonePriorityStrategy(PlacementStrategy):
    name = "zone-priority"
    display_name = "Zone-Priority"
    description = "Constrained parts placed first, each pulled to the middle of its zone."

    def order(self, instances, ctx):
        base = super().order(instances, ctx)

        def constrained(inst: ComponentInstance) -> bool:
            c = inst.constraint
            return c is not None and bool(c.zone or c.edge or c.locked)

        return [i for i in base if constrained(i)] + [i for i in base if not constrained(i)]

    def tie_break(self, inst, center, ctx):
        zone = inst.constraint.zone if inst.constraint else None
        target = box_center(ctx.bands[zone]) if zone in ctx.bands else ctx.board_center
        return math.hypot(center[0] - target[0], center[1] - target[1])


class SymmetricStrategy(PlacementStrategy):
    name = "symmetric"
    display_name = "Symmetric"
    description = "Repeated parts mirrored about the vertical centre line."

    def order(self, instances, ctx):
        base = super().order(instances, ctx)
        out: list[ComponentInstance] = []
        done: set[str] = set()
        for inst in base:
            if inst.id in done:
                continue
            for same in base:
                if same.type == inst.type and same.id not in done:
                    out.append(same)
                    done.add(same.id)
        return out

    def tie_break(self, inst, center, ctx):
        axis_x, mid_y = ctx.board_center
        x0, _, x1, _ = ctx.board.bounds
        same = [p for p in ctx.placed.values() if p.type == inst.type]
        if len(same) % 2 == 1:
            # Partner of the previous unpaired twin: its mirror image.
            px, py = same[-1].center
            target = (2 * axis_x - px, py)
        elif ctx.type_counts.get(inst.type, 0) > 1:
            target = (axis_x - (x1 - x0) / 4, mid_y)
        else:
            target = (axis_x, mid_y)
        return math.hypot(center[0] - target[0], center[1] - target[1])


class SignalFlowStrategy(PlacementStrategy):
    name = "signal-flow"
    display_name = "Signal-Flow"
    description = "Inputs on the left, processing in the middle, outputs on the right."

    def order(self, instances, ctx):
        base = super().order(instances, ctx)
        return sorted(base, key=lambda i: flow_stage(i.type))

    def tie_break(self, inst, center, ctx):
        x0, _, x1, _ = ctx.board.bounds
        column = x0 + (x1 - x0) * (2 * flow_stage(inst.type) + 1) / 6
        return abs(center[0] - column) + 0.25 * abs(center[1] - ctx.board_center[1])


STRATEGIES: dict[str, PlacementStrategy] = {
    s.name: s for s in (
        CompactStrategy(), ZonePriorityStrategy(),
        SymmetricStrategy(), SignalFlowStrategy(),
    )
}


def get_strategy(name: str) -> PlacementStrategy:
    try:
        return STRATEGIES[name]
    except KeyError:
        raise ValueError(
            f"Unknown placement strategy '{name}', expected one of {sorted(STRATEGIES)}"
        ) from None
