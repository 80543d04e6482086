"""
tapeboard — entry point.

Usage:
    python -m tapeboard arrange request.json      # ranked arrangements as JSON
    python -m tapeboard drc design.json [--fix]   # ordered DRC violations
    python -m tapeboard footprints                # list footprint types
    python -m tapeboard serve [--port PORT] [--host HOST]
    add -v for info logging
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

USAGE = (
    "Usage: python -m tapeboard arrange REQUEST.json [-v]\n"
    "       python -m tapeboard drc DESIGN.json [--fix] [-v]\n"
    "       python -m tapeboard footprints\n"
    "       python -m tapeboard serve [--port PORT] [--host HOST]"
)


def _read_json(path: str) -> dict:
    return json.loads(Path(path).read_text(encoding="utf-8"))


def _arrange(path: str) -> dict:
    from tapeboard.pipeline.arrangements import (
        generate_arrangements, parse_placement_options, parse_router_config,
    )
    from tapeboard.pipeline.connections import detect_connections
    from tapeboard.pipeline.design import (
        arrangement_to_dict, parse_board, parse_components, parse_connections,
        parse_manual_paths,
    )

    data = _read_json(path)
    board = parse_board(data["board"])
    components = parse_components(data.get("components", []))
    connections = parse_connections(data.get("connections", []))
    if data.get("auto_detect", False):
        connections += detect_connections(components, connections).connections

    options = parse_placement_options(data.get("placement"))
    router_config = parse_router_config(data.get("router"))
    arrangements = generate_arrangements(
        components, board, connections, options, router_config,
        manual_paths=parse_manual_paths(data.get("manual_paths")),
        max_workers=int(data.get("max_workers", 1)),
    )
    return {"arrangements": [arrangement_to_dict(a) for a in arrangements]}


def _drc(path: str, fix: bool) -> dict:
    from tapeboard.pipeline.design import design_to_dict, parse_design
    from tapeboard.pipeline.drc import fix_overhangs, run_drc, violation_to_dict

    design = parse_design(_read_json(path))
    if fix:
        design, violations = fix_overhangs(design)
    else:
        violations = run_drc(design)
    out = {"violations": [violation_to_dict(v) for v in violations]}
    if fix:
        out["design"] = design_to_dict(design)
    return out


def main():
    args = sys.argv[1:]
    if "-v" in args:
        args.remove("-v")
        logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    cmd = args[0] if args else ""

    from tapeboard.pipeline.design import DesignError

    if cmd == "serve":
        port = 8000
        host = "127.0.0.1"
        for i, a in enumerate(args):
            if a == "--port" and i + 1 < len(args):
                port = int(args[i + 1])
            elif a == "--host" and i + 1 < len(args):
                host = args[i + 1]

        from tapeboard.web.server import main as serve
        serve(host=host, port=port)
        return

    try:
        if cmd == "arrange" and len(args) >= 2:
            result = _arrange(args[1])
        elif cmd == "drc" and len(args) >= 2:
            result = _drc(args[1], "--fix" in args[2:])
        elif cmd == "footprints":
            from tapeboard.catalog import default_library
            result = {"types": default_library().types()}
        else:
            print(f"Unknown command: {cmd}" if cmd else "No command given")
            print(USAGE)
            sys.exit(1)
    except DesignError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(2)

    print(json.dumps(result, indent=2))


if __name__ == "__main__":
    main()
