"""Small designs built in code, shared by the test modules.

``make_library()`` returns a tiny footprint library:
  - ``pad1``   single centre pad "1", size 2 → extent ±2.25
  - ``bar2``   two pads "1"/"2" at x = ∓5, size 2
  - ``psu``    pads "1" (vcc) and "2" (gnd)
  - ``chip``   pads "1" (vcc) and "2" (signal)
"""

from __future__ import annotations

from tapeboard.catalog import library_from_dicts
from tapeboard.pipeline.connections import Pinout, PinInfo
from tapeboard.pipeline.design import (
    AssemblyComponent, Board, ConnectionDef, PadRef, PlacementConstraint,
)


def make_library():
    return library_from_dicts([
        {"type": "pad1", "pads": [{"id": "1", "offset": [0, 0], "size": 2.0, "role": "signal"}]},
        {"type": "bar2", "pads": [
            {"id": "1", "offset": [-5, 0], "size": 2.0, "role": "signal"},
            {"id": "2", "offset": [5, 0], "size": 2.0, "role": "signal"},
        ]},
        {"type": "psu", "pads": [
            {"id": "1", "offset": [-2.5, 0], "size": 2.0, "role": "vcc"},
            {"id": "2", "offset": [2.5, 0], "size": 2.0, "role": "gnd"},
        ]},
        {"type": "chip", "pads": [
            {"id": "1", "offset": [-2.5, 0], "size": 2.0, "role": "vcc"},
            {"id": "2", "offset": [2.5, 0], "size": 2.0, "role": "signal"},
        ]},
    ])


def make_pinouts() -> dict[str, Pinout]:
    """A power source exposing only VCC, an IC consuming only VCC."""
    return {
        "psu": Pinout("psu", "power-source", (PinInfo("OUT+", "VCC"), PinInfo("NC", "NC"))),
        "chip": Pinout("chip", "ic", (PinInfo("VDD", "VCC"), PinInfo("IO", "SIGNAL"))),
    }


def locked(x: float, y: float, rotation: int = 0) -> PlacementConstraint:
    return PlacementConstraint(locked=True, locked_position=(x, y), locked_rotation=rotation)


def connect(cid: str, a: str, b: str, net: str | None = None) -> ConnectionDef:
    """``connect("c1", "a_1:1", "b_1:1")``"""
    return ConnectionDef(id=cid, source=PadRef.parse(a), target=PadRef.parse(b), net_name=net)


def make_two_pad_request():
    """100×60 board, two single-pad parts locked 20 mm apart, one link."""
    board = Board.rect(100, 60)
    components = [
        AssemblyComponent("a", "pad1", constraint=locked(40, 30)),
        AssemblyComponent("b", "pad1", constraint=locked(60, 30)),
    ]
    connections = [connect("c1", "a_1:1", "b_1:1")]
    return board, components, connections


def make_chain_request(n: int = 4):
    """*n* free bar2 parts wired in a chain on a 120×80 board."""
    board = Board.rect(120, 80)
    components = [AssemblyComponent("bar", "bar2", quantity=n)]
    connections = [
        connect(f"c{i}", f"bar_{i}:2", f"bar_{i + 1}:1")
        for i in range(1, n)
    ]
    return board, components, connections
