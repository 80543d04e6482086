"""
Assembly session — the in-memory state of one auto-assembly run.

A session collects the components the user picked and the connections
between their pads, generates ranked arrangements from them, and merges
the chosen arrangement into a design.  It holds nothing on disk and is
discarded with ``reset()``.

Ids handed out by a session are counters (``ac_1``, ``conn_3``), so a
replayed sequence of edits always produces the same ids.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from tapeboard.catalog import FootprintLibrary, default_library
from tapeboard.pipeline.arrangements import generate_arrangements
from tapeboard.pipeline.connections import (
    DetectionResult, clear_auto_detected, detect_connections,
)
from tapeboard.pipeline.design import (
    Arrangement, AssemblyComponent, Board, ConnectionDef, Design, PadRef,
    PlacementConstraint,
)


log = logging.getLogger(__name__)


def _as_ref(ref: PadRef | str) -> PadRef:
    return ref if isinstance(ref, PadRef) else PadRef.parse(ref)


@dataclass
class AssemblySession:
    footprints: FootprintLibrary = field(default_factory=default_library)
    components: list[AssemblyComponent] = field(default_factory=list)
    connections: list[ConnectionDef] = field(default_factory=list)
    arrangements: list[Arrangement] = field(default_factory=list)
    selected_id: str | None = None
    board: Board | None = None
    _next_component: int = field(default=1, init=False, repr=False)
    _next_connection: int = field(default=1, init=False, repr=False)

    # ── components ─────────────────────────────────────────────────

    def add_component(
        self,
        type_: str,
        constraint: PlacementConstraint | None = None,
    ) -> AssemblyComponent:
        """Add one unit of *type_*; an already selected type gets quantity + 1."""
        for c in self.components:
            if c.type == type_:
                c.quantity += 1
                return c
        comp = AssemblyComponent(
            id=f"ac_{self._next_component}", type=type_, constraint=constraint,
        )
        self._next_component += 1
        self.components.append(comp)
        if type_ not in self.footprints:
            log.warning("Unknown component type '%s'; a fallback footprint will be used", type_)
        return comp

    def remove_component(self, component_id: str) -> None:
        """Remove a component and every connection touching its instances."""
        comp = self.component(component_id)
        if comp is None:
            return
        self.components.remove(comp)
        gone = {inst.id for inst in comp.expand()}
        self._drop_connections(gone)

    def set_quantity(self, component_id: str, quantity: int) -> None:
        """Change a component's quantity; below 1 removes it.

        Connections on instances that no longer exist are dropped.
        """
        if quantity < 1:
            self.remove_component(component_id)
            return
        comp = self.component(component_id)
        if comp is None:
            return
        before = {inst.id for inst in comp.expand()}
        comp.quantity = quantity
        after = {inst.id for inst in comp.expand()}
        self._drop_connections(before - after)

    def component(self, component_id: str) -> AssemblyComponent | None:
        for c in self.components:
            if c.id == component_id:
                return c
        return None

    def _drop_connections(self, instance_ids: set[str]) -> None:
        if not instance_ids:
            return
        self.connections = [
            c for c in self.connections
            if not any(c.touches(iid) for iid in instance_ids)
        ]

    # ── connections ────────────────────────────────────────────────

    def add_connection(
        self,
        source: PadRef | str,
        target: PadRef | str,
        net_name: str | None = None,
        is_power: bool = False,
        is_ground: bool = False,
    ) -> ConnectionDef | None:
        """Add a manual connection.

        Returns None when the same pad pair (in either direction) is
        already connected.
        """
        src, dst = _as_ref(source), _as_ref(target)
        conn = ConnectionDef(
            id=f"conn_{self._next_connection}",
            source=src,
            target=dst,
            net_name=net_name,
            is_power=is_power,
            is_ground=is_ground,
        )
        if any(c.same_pads(conn) for c in self.connections):
            return None
        self._next_connection += 1
        self.connections.append(conn)
        return conn

    def remove_connection(self, connection_id: str) -> None:
        self.connections = [c for c in self.connections if c.id != connection_id]

    def clear_connections(self) -> None:
        self.connections = []

    def auto_detect(self) -> DetectionResult:
        """Add the power, ground and analog connections the detector finds."""
        result = detect_connections(self.components, self.connections, self.footprints)
        self.connections.extend(result.connections)
        log.info("Auto-detected %d connection(s)", len(result.connections))
        return result

    def clear_auto_detected(self) -> None:
        self.connections = clear_auto_detected(self.connections)

    # ── arrangements ───────────────────────────────────────────────

    def generate(self, board: Board, **kwargs) -> list[Arrangement]:
        """Generate arrangements, replacing any previous ones.

        Keyword arguments go to ``generate_arrangements``.  The best
        arrangement is selected.
        """
        self.board = board
        self.arrangements = generate_arrangements(
            self.components, board, self.connections,
            footprints=self.footprints, **kwargs,
        )
        self.selected_id = self.arrangements[0].id if self.arrangements else None
        return self.arrangements

    def select(self, arrangement_id: str) -> Arrangement:
        arr = self._arrangement(arrangement_id)
        if arr is None:
            raise KeyError(f"no arrangement '{arrangement_id}'")
        self.selected_id = arr.id
        return arr

    @property
    def selected(self) -> Arrangement | None:
        if self.selected_id is None:
            return None
        return self._arrangement(self.selected_id)

    def _arrangement(self, arrangement_id: str) -> Arrangement | None:
        for a in self.arrangements:
            if a.id == arrangement_id:
                return a
        return None

    def accept(self, design: Design | None = None) -> Design:
        """Merge the selected arrangement into *design* and clear the list.

        Without a design, a fresh one on the generation board is used.
        """
        arr = self.selected
        if arr is None:
            raise ValueError("no arrangement selected")
        if design is None:
            if self.board is None:
                raise ValueError("no board to build a design on")
            design = Design(board=self.board)
        merged = design.with_arrangement(arr)
        log.info("Accepted %s: %d component(s), %d route(s)",
                 arr.id, len(arr.components), len(arr.routes))
        self.arrangements = []
        self.selected_id = None
        return merged

    def reset(self) -> None:
        self.components = []
        self.connections = []
        self.arrangements = []
        self.selected_id = None
        self.board = None
        self._next_component = 1
        self._next_connection = 1
