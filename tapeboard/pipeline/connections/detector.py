"""Connection detector — infer power, ground and analog nets.

Every VCC pad in the assembly is joined into one implicit power net and
every GND pad into one implicit ground net.  Each pad is star-connected
to the first pad of its net unless the two are already electrically
joined through existing connections (manual or previously detected),
which makes the detector idempotent.

A smaller heuristic joins the output pin of a potentiometer, encoder or
sensor to the first free analog-capable pin of an IC.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from tapeboard.catalog import FootprintLibrary, default_library
from tapeboard.pipeline.design import (
    AssemblyComponent, ComponentInstance, ConnectionDef, PadRef,
    expand_components,
)
from .pinouts import (
    PINOUTS, Pinout, ROLE_KEYWORDS, ROLE_TO_LABEL,
    ANALOG_SOURCE_KEYWORDS, ANALOG_OUTPUT_NAMES,
)

log = logging.getLogger(__name__)


@dataclass
class DetectionStats:
    power_connections: int = 0
    ground_connections: int = 0
    signal_connections: int = 0
    unknown_types: list[str] = field(default_factory=list)


@dataclass
class DetectionResult:
    connections: list[ConnectionDef]    # new connections only
    stats: DetectionStats


# ── Classification ─────────────────────────────────────────────────


def classify_role(type_: str, pinouts: dict[str, Pinout] | None = None) -> str:
    """Component role from the pinout table, then the keyword table."""
    table = PINOUTS if pinouts is None else pinouts
    if type_ in table:
        return table[type_].role
    lower = type_.lower()
    for role, keywords in ROLE_KEYWORDS:
        if any(k in lower for k in keywords):
            return role
    return "unknown"


def pad_label(
    type_: str,
    pad_index: int,
    footprints: FootprintLibrary | None = None,
    pinouts: dict[str, Pinout] | None = None,
) -> str:
    """VCC / GND / SIGNAL / DATA for a pad, or ``"PIN n"`` (1-based)."""
    table = PINOUTS if pinouts is None else pinouts
    pinout = table.get(type_)
    if pinout is not None:
        info = pinout.pin(pad_index)
        if info is not None and info.label != "NC":
            return info.label
    fp = (footprints or default_library()).lookup(type_)
    if fp is not None and 0 <= pad_index < len(fp.pads):
        label = ROLE_TO_LABEL.get(fp.pads[pad_index].role)
        if label:
            return label
    return f"PIN {pad_index + 1}"


def pin_name(type_: str, pad_index: int, pinouts: dict[str, Pinout] | None = None) -> str | None:
    table = PINOUTS if pinouts is None else pinouts
    pinout = table.get(type_)
    info = pinout.pin(pad_index) if pinout else None
    return info.name if info else None


def generate_net_name(
    source_type: str, source_index: int,
    target_type: str, target_index: int,
    is_power: bool = False, is_ground: bool = False,
    pinouts: dict[str, Pinout] | None = None,
) -> str:
    """Readable net name for a connection between two pads.

    Power and ground nets are always ``VCC`` / ``GND``.  Otherwise pin
    names are joined (``Wiper_A3/PB3``), falling back to short type
    prefixes plus 1-based pad numbers (``RESISTOR1_LED2``).
    """
    if is_power:
        return "VCC"
    if is_ground:
        return "GND"
    a = pin_name(source_type, source_index, pinouts)
    b = pin_name(target_type, target_index, pinouts)
    if a and b:
        return f"{a}_{b}"
    a_short = source_type.split("_")[0].upper()
    b_short = target_type.split("_")[0].upper()
    return f"{a_short}{source_index + 1}_{b_short}{target_index + 1}"


# ── Detection ──────────────────────────────────────────────────────


def detect_connections(
    components: list[AssemblyComponent],
    existing: list[ConnectionDef] | None = None,
    footprints: FootprintLibrary | None = None,
    pinouts: dict[str, Pinout] | None = None,
) -> DetectionResult:
    """Propose the connections implied by pad roles.

    Returns only the new connections; *existing* is never modified.
    """
    lib = footprints or default_library()
    table = PINOUTS if pinouts is None else pinouts
    existing = existing or []
    instances = expand_components(components)
    stats = DetectionStats()

    # ── Union-find over pads already joined ──
    parent: dict[PadRef, PadRef] = {}

    def find(x: PadRef) -> PadRef:
        parent.setdefault(x, x)
        while parent[x] != x:
            parent[x] = parent[parent[x]]
            x = parent[x]
        return x

    def union(a: PadRef, b: PadRef) -> bool:
        ra, rb = find(a), find(b)
        if ra == rb:
            return False
        parent[ra] = rb
        return True

    used: set[PadRef] = set()
    for conn in existing:
        union(conn.source, conn.target)
        used.add(conn.source)
        used.add(conn.target)

    # ── Gather VCC / GND pads ──
    vcc: list[PadRef] = []
    gnd: list[PadRef] = []
    for inst in instances:
        if classify_role(inst.type, table) == "unknown" and inst.type not in stats.unknown_types:
            stats.unknown_types.append(inst.type)
            log.warning("Cannot classify component type '%s'", inst.type)
        fp = lib.resolve(inst.type)
        for idx, pad in enumerate(fp.pads):
            label = pad_label(inst.type, idx, lib, table)
            if label == "VCC":
                vcc.append(PadRef(inst.id, pad.id))
            elif label == "GND":
                gnd.append(PadRef(inst.id, pad.id))

    new: list[ConnectionDef] = []

    def join_net(net: str, pads: list[PadRef]) -> int:
        count = 0
        if len(pads) < 2:
            return 0
        hub = pads[0]
        for pad in pads[1:]:
            if not union(hub, pad):
                continue
            new.append(ConnectionDef(
                id=f"auto:{net}:{hub}->{pad}",
                source=hub,
                target=pad,
                net_name=net,
                is_power=(net == "VCC"),
                is_ground=(net == "GND"),
                auto_detected=True,
            ))
            used.add(hub)
            used.add(pad)
            count += 1
        return count

    stats.power_connections = join_net("VCC", vcc)
    stats.ground_connections = join_net("GND", gnd)

    stats.signal_connections = _join_analog_sources(instances, lib, table, used, new)

    log.info(
        "Detected %d connection(s): %d power, %d ground, %d signal",
        len(new), stats.power_connections, stats.ground_connections,
        stats.signal_connections,
    )
    return DetectionResult(connections=new, stats=stats)


def _join_analog_sources(
    instances: list[ComponentInstance],
    lib: FootprintLibrary,
    table: dict[str, Pinout],
    used: set[PadRef],
    new: list[ConnectionDef],
) -> int:
    """Wire pot/encoder/sensor outputs to free IC analog inputs."""
    ics = [inst for inst in instances if classify_role(inst.type, table) == "ic"]
    if not ics:
        return 0

    def free_analog_pin() -> tuple[ComponentInstance, int, PadRef] | None:
        for ic in ics:
            fp = lib.resolve(ic.type)
            for idx, pad in enumerate(fp.pads):
                name = pin_name(ic.type, idx, table) or ""
                ref = PadRef(ic.id, pad.id)
                if (name.upper().startswith("A") and ref not in used
                        and pad_label(ic.type, idx, lib, table) == "SIGNAL"):
                    return ic, idx, ref
        return None

    count = 0
    for inst in instances:
        lower = inst.type.lower()
        if not any(k in lower for k in ANALOG_SOURCE_KEYWORDS):
            continue
        fp = lib.resolve(inst.type)
        for idx, pad in enumerate(fp.pads):
            name = (pin_name(inst.type, idx, table) or "").upper()
            src = PadRef(inst.id, pad.id)
            if name not in ANALOG_OUTPUT_NAMES or src in used:
                continue
            target = free_analog_pin()
            if target is None:
                return count
            ic, ic_idx, dst = target
            new.append(ConnectionDef(
                id=f"auto:SIG:{src}->{dst}",
                source=src,
                target=dst,
                net_name=generate_net_name(inst.type, idx, ic.type, ic_idx, pinouts=table),
                auto_detected=True,
            ))
            used.add(src)
            used.add(dst)
            count += 1
            log.debug("Analog source %s -> %s", src, dst)
    return count


def clear_auto_detected(connections: list[ConnectionDef]) -> list[ConnectionDef]:
    """Drop detector-made connections; manual ones are never touched."""
    return [c for c in connections if not c.auto_detected]
