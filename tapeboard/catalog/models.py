"""Footprint dataclasses — typed representations of footprints.json entries."""

from __future__ import annotations

from dataclasses import dataclass, field


PAD_ROLES = ("vcc", "gnd", "signal", "data", "nc", "unknown")

# A footprint without an outline is assumed to have a body reaching this
# far past its outermost pad edges.
PAD_BODY_MARGIN_MM = 1.25


@dataclass(frozen=True)
class FootprintPad:
    id: str
    offset: tuple[float, float]         # relative to the footprint origin
    size: float                         # pad diameter
    role: str = "unknown"               # one of PAD_ROLES

    @property
    def radius(self) -> float:
        return self.size / 2


@dataclass(frozen=True)
class Footprint:
    type: str
    name: str
    pads: tuple[FootprintPad, ...]
    outline: tuple[tuple[float, float], ...] | None = None
    fallback: bool = False              # True for the synthetic unknown-type footprint

    def pad(self, pad_id: str) -> FootprintPad | None:
        for p in self.pads:
            if p.id == pad_id:
                return p
        return None

    def pad_index(self, pad_id: str) -> int | None:
        for i, p in enumerate(self.pads):
            if p.id == pad_id:
                return i
        return None

    @property
    def extent(self) -> tuple[float, float, float, float]:
        """Local bounding box (min_x, min_y, max_x, max_y) at rotation 0.

        The union of the pad envelopes and the outline.  Without an
        outline the pad envelope is grown by PAD_BODY_MARGIN_MM.
        """
        m = PAD_BODY_MARGIN_MM
        if not self.pads and not self.outline:
            return -m, -m, m, m
        xs: list[float] = []
        ys: list[float] = []
        for p in self.pads:
            xs += [p.offset[0] - p.radius, p.offset[0] + p.radius]
            ys += [p.offset[1] - p.radius, p.offset[1] + p.radius]
        if self.outline:
            xs += [v[0] for v in self.outline]
            ys += [v[1] for v in self.outline]
            return min(xs), min(ys), max(xs), max(ys)
        return min(xs) - m, min(ys) - m, max(xs) + m, max(ys) + m

    @property
    def area(self) -> float:
        x0, y0, x1, y1 = self.extent
        return (x1 - x0) * (y1 - y0)


@dataclass
class ValidationError:
    footprint_type: str
    field: str
    message: str

    def __str__(self) -> str:
        return f"[{self.footprint_type}] {self.field}: {self.message}"


@dataclass
class FootprintLibrary:
    """Read-only footprint provider.

    ``lookup`` answers ``None`` for unknown types; ``resolve`` never
    fails and hands out the fallback footprint instead.
    """
    footprints: dict[str, Footprint] = field(default_factory=dict)
    errors: list[ValidationError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return len(self.errors) == 0

    def __contains__(self, type_: str) -> bool:
        return type_ in self.footprints

    def types(self) -> list[str]:
        return sorted(self.footprints)

    def lookup(self, type_: str) -> Footprint | None:
        return self.footprints.get(type_)

    def resolve(self, type_: str) -> Footprint:
        fp = self.footprints.get(type_)
        if fp is None:
            return fallback_footprint(type_)
        return fp


def fallback_footprint(type_: str) -> Footprint:
    """Minimal stand-in for a type the library does not know.

    One centre pad "1"; the extent comes out as (-2, -2, 2, 2).
    """
    return Footprint(
        type=type_,
        name=type_,
        pads=(FootprintPad(id="1", offset=(0.0, 0.0), size=1.5, role="unknown"),),
        outline=None,
        fallback=True,
    )
