"""Footprint serialization — convert dataclasses to JSON-safe dicts."""

from __future__ import annotations

from typing import Any

from .models import Footprint, FootprintLibrary


def footprint_to_dict(fp: Footprint) -> dict:
    d: dict[str, Any] = {
        "type": fp.type,
        "name": fp.name,
        "pads": [
            {"id": p.id, "offset": list(p.offset), "size": p.size, "role": p.role}
            for p in fp.pads
        ],
        "extent": list(fp.extent),
    }
    if fp.outline:
        d["outline"] = [list(v) for v in fp.outline]
    return d


def library_to_dict(lib: FootprintLibrary) -> dict:
    """Serialize a FootprintLibrary (sorted by type)."""
    return {
        "ok": lib.ok,
        "footprint_count": len(lib.footprints),
        "footprints": [footprint_to_dict(lib.footprints[t]) for t in lib.types()],
        "errors": [{"type": e.footprint_type, "field": e.field, "message": e.message}
                   for e in lib.errors],
    }
