"""Footprint loader — reads footprints.json, parses and validates it."""

from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path

from .models import (
    PAD_ROLES, Footprint, FootprintPad, FootprintLibrary, ValidationError,
)

log = logging.getLogger(__name__)

FOOTPRINTS_FILE = Path(__file__).resolve().parent / "footprints.json"


# ── Validation ─────────────────────────────────────────────────────

def _validate_footprint(fp: Footprint) -> list[ValidationError]:
    errs: list[ValidationError] = []
    ft = fp.type

    if not fp.pads:
        errs.append(ValidationError(ft, "pads", "Footprint has no pads"))

    seen: set[str] = set()
    for pad in fp.pads:
        if pad.id in seen:
            errs.append(ValidationError(ft, f"pads.{pad.id}", "Duplicate pad ID"))
        seen.add(pad.id)
        if pad.size <= 0:
            errs.append(ValidationError(ft, f"pads.{pad.id}.size", "Must be > 0"))
        if pad.role not in PAD_ROLES:
            errs.append(ValidationError(ft, f"pads.{pad.id}.role",
                                        f"Unknown role '{pad.role}'"))

    if fp.outline is not None and len(fp.outline) < 3:
        errs.append(ValidationError(ft, "outline", "Needs at least 3 vertices"))

    return errs


# ── Parsing ────────────────────────────────────────────────────────

def _parse_pad(data: dict) -> FootprintPad:
    off = data.get("offset", [0, 0])
    return FootprintPad(
        id=str(data["id"]),
        offset=(float(off[0]), float(off[1])),
        size=float(data["size"]),
        role=data.get("role", "unknown"),
    )


def parse_footprint(data: dict) -> Footprint:
    outline = data.get("outline")
    return Footprint(
        type=data["type"],
        name=data.get("name", data["type"]),
        pads=tuple(_parse_pad(p) for p in data["pads"]),
        outline=tuple((float(v[0]), float(v[1])) for v in outline) if outline else None,
    )


# ── Public API ─────────────────────────────────────────────────────

def load_footprints(path: Path | None = None) -> FootprintLibrary:
    """Load a footprint file, parse and validate every entry.

    Entries that fail to parse are skipped (error recorded).  Entries
    that parse but have validation issues are still included.
    """
    p = path or FOOTPRINTS_FILE
    lib = FootprintLibrary()

    try:
        raw = json.loads(p.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        lib.errors.append(ValidationError("_library", "json", f"Parse error: {exc}"))
        return lib
    except OSError as exc:
        lib.errors.append(ValidationError("_library", "file", f"Read error: {exc}"))
        return lib

    for entry in raw.get("footprints", []):
        try:
            fp = parse_footprint(entry)
        except (KeyError, TypeError, ValueError, IndexError) as exc:
            lib.errors.append(ValidationError(
                entry.get("type", "?"), "parse", f"Missing/invalid field: {exc}"))
            continue
        if fp.type in lib.footprints:
            lib.errors.append(ValidationError(fp.type, "type", "Duplicate footprint type"))
            continue
        lib.errors.extend(_validate_footprint(fp))
        lib.footprints[fp.type] = fp

    if lib.errors:
        for e in lib.errors:
            log.warning("Footprint library: %s", e)
    log.debug("Loaded %d footprints from %s", len(lib.footprints), p)
    return lib


@lru_cache(maxsize=1)
def default_library() -> FootprintLibrary:
    """The built-in library, loaded once per process."""
    return load_footprints()


def library_from_dicts(entries: list[dict]) -> FootprintLibrary:
    """Build a library from in-memory dicts (tests, custom parts)."""
    lib = FootprintLibrary()
    for entry in entries:
        fp = parse_footprint(entry)
        lib.errors.extend(_validate_footprint(fp))
        lib.footprints[fp.type] = fp
    return lib
