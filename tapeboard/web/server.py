"""
FastAPI web server — JSON endpoints over the layout pipeline.

Stateless endpoints take everything in the request body.  The
``/api/session/*`` endpoints drive one shared AssemblySession, the way a
single-user wizard would.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from tapeboard.catalog import default_library, library_to_dict
from tapeboard.pipeline.arrangements import (
    generate_arrangements, parse_placement_options, parse_router_config,
)
from tapeboard.pipeline.connections import detect_connections
from tapeboard.pipeline.design import (
    DesignError, arrangement_to_dict, connection_to_dict, design_to_dict,
    parse_board, parse_components, parse_connections, parse_constraint,
    parse_design, parse_manual_paths,
)
from tapeboard.pipeline.drc import auto_fix, fix_overhangs, run_drc, violation_to_dict
from tapeboard.session import AssemblySession


log = logging.getLogger(__name__)

# ── App ────────────────────────────────────────────────────────────

app = FastAPI(title="tapeboard")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Session state (persists across requests) ───────────────────────

_session = AssemblySession()


# ── Models ─────────────────────────────────────────────────────────

class DetectRequest(BaseModel):
    components: list[dict]
    connections: list[dict] = []


class ArrangeRequest(BaseModel):
    board: dict
    components: list[dict] = []
    connections: list[dict] = []
    placement: dict = {}
    router: dict = {}
    manual_paths: dict | None = None
    auto_detect: bool = False
    max_workers: int = 1


class DRCRequest(BaseModel):
    design: dict


class FixRequest(BaseModel):
    design: dict
    violation_index: int | None = None      # None = fix every overhang
    max_passes: int = 20


class AddComponentRequest(BaseModel):
    type: str
    constraint: dict | None = None


class QuantityRequest(BaseModel):
    quantity: int


class AddConnectionRequest(BaseModel):
    source: str
    target: str
    net_name: str | None = None
    is_power: bool = False
    is_ground: bool = False


class GenerateRequest(BaseModel):
    board: dict
    placement: dict = {}
    router: dict = {}
    max_workers: int = 1


def _bad_request(exc: DesignError) -> HTTPException:
    return HTTPException(400, {"reason": exc.reason, "errors": exc.errors,
                               "connection_id": exc.connection_id})


# ── Stateless routes ───────────────────────────────────────────────

@app.get("/api/footprints")
def get_footprints():
    return library_to_dict(default_library())


@app.post("/api/connections/detect")
def detect(req: DetectRequest):
    try:
        components = parse_components(req.components)
        existing = parse_connections(req.connections)
    except DesignError as exc:
        raise _bad_request(exc) from exc
    result = detect_connections(components, existing)
    return {
        "connections": [connection_to_dict(c) for c in result.connections],
        "stats": {
            "power_connections": result.stats.power_connections,
            "ground_connections": result.stats.ground_connections,
            "signal_connections": result.stats.signal_connections,
            "unknown_types": list(result.stats.unknown_types),
        },
    }


@app.post("/api/arrangements")
def arrange(req: ArrangeRequest):
    try:
        board = parse_board(req.board)
        components = parse_components(req.components)
        connections = parse_connections(req.connections)
        if req.auto_detect:
            connections += detect_connections(components, connections).connections
        arrangements = generate_arrangements(
            components, board, connections,
            parse_placement_options(req.placement), parse_router_config(req.router),
            manual_paths=parse_manual_paths(req.manual_paths),
            max_workers=req.max_workers,
        )
    except DesignError as exc:
        raise _bad_request(exc) from exc
    return {"arrangements": [arrangement_to_dict(a) for a in arrangements]}


@app.post("/api/drc")
def drc(req: DRCRequest):
    try:
        design = parse_design(req.design)
    except DesignError as exc:
        raise _bad_request(exc) from exc
    return {"violations": [violation_to_dict(v) for v in run_drc(design)]}


@app.post("/api/drc/fix")
def drc_fix(req: FixRequest):
    """Apply overhang auto-fixes and return the new design with fresh DRC."""
    try:
        design = parse_design(req.design)
    except DesignError as exc:
        raise _bad_request(exc) from exc

    if req.violation_index is None:
        design, violations = fix_overhangs(design, req.max_passes)
    else:
        current = run_drc(design)
        if not 0 <= req.violation_index < len(current):
            raise HTTPException(404, f"No violation #{req.violation_index}.")
        try:
            design, violations = auto_fix(design, current[req.violation_index])
        except ValueError as exc:
            raise HTTPException(400, str(exc)) from exc
    return {
        "design": design_to_dict(design),
        "violations": [violation_to_dict(v) for v in violations],
    }


# ── Session routes ─────────────────────────────────────────────────

def _session_state() -> dict:
    return {
        "components": [
            {"id": c.id, "type": c.type, "quantity": c.quantity}
            for c in _session.components
        ],
        "connections": [connection_to_dict(c) for c in _session.connections],
        "arrangements": [arrangement_to_dict(a) for a in _session.arrangements],
        "selected": _session.selected_id,
    }


@app.get("/api/session")
def get_session():
    return _session_state()


@app.post("/api/session/reset")
def reset_session():
    _session.reset()
    return {"status": "ok"}


@app.post("/api/session/components")
def add_component(req: AddComponentRequest):
    try:
        constraint = parse_constraint(req.constraint)
    except DesignError as exc:
        raise _bad_request(exc) from exc
    comp = _session.add_component(req.type, constraint)
    return {"id": comp.id, "type": comp.type, "quantity": comp.quantity}


@app.put("/api/session/components/{component_id}")
def set_quantity(component_id: str, req: QuantityRequest):
    if _session.component(component_id) is None:
        raise HTTPException(404, f"No component {component_id}.")
    _session.set_quantity(component_id, req.quantity)
    return _session_state()


@app.delete("/api/session/components/{component_id}")
def remove_component(component_id: str):
    _session.remove_component(component_id)
    return _session_state()


@app.post("/api/session/connections")
def add_connection(req: AddConnectionRequest):
    try:
        conn = _session.add_connection(req.source, req.target, req.net_name,
                                       req.is_power, req.is_ground)
    except ValueError as exc:
        raise HTTPException(400, str(exc)) from exc
    return {"added": conn is not None, **_session_state()}


@app.delete("/api/session/connections/{connection_id}")
def remove_connection(connection_id: str):
    _session.remove_connection(connection_id)
    return _session_state()


@app.post("/api/session/detect")
def session_detect():
    result = _session.auto_detect()
    return {"added": len(result.connections), **_session_state()}


@app.post("/api/session/clear_auto")
def session_clear_auto():
    _session.clear_auto_detected()
    return _session_state()


@app.post("/api/session/generate")
def session_generate(req: GenerateRequest):
    try:
        _session.generate(
            parse_board(req.board),
            options=parse_placement_options(req.placement),
            router_config=parse_router_config(req.router),
            max_workers=req.max_workers,
        )
    except DesignError as exc:
        raise _bad_request(exc) from exc
    return _session_state()


@app.post("/api/session/select/{arrangement_id}")
def session_select(arrangement_id: str):
    try:
        _session.select(arrangement_id)
    except KeyError as exc:
        raise HTTPException(404, f"No arrangement {arrangement_id}.") from exc
    return _session_state()


@app.post("/api/session/accept")
def session_accept():
    try:
        design = _session.accept()
    except ValueError as exc:
        raise HTTPException(400, str(exc)) from exc
    return {"design": design_to_dict(design)}


# ── Entry point ────────────────────────────────────────────────────

def main(host: str = "127.0.0.1", port: int = 8000):
    import uvicorn
    uvicorn.run("tapeboard.web.server:app", host=host, port=port, reload=False)


if __name__ == "__main__":
    main()
