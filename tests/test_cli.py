"""Tests for the command-line entry point."""

from __future__ import annotations

import json
import sys

import pytest

from tapeboard.__main__ import main


def _run(monkeypatch, *argv):
    monkeypatch.setattr(sys, "argv", ["tapeboard", *argv])
    main()


def _write(tmp_path, name, data):
    path = tmp_path / name
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


def test_footprints(monkeypatch, capsys):
    _run(monkeypatch, "footprints")
    types = json.loads(capsys.readouterr().out)["types"]
    assert "resistor_th" in types
    assert types == sorted(types)


def test_arrange(monkeypatch, capsys, tmp_path):
    request = _write(tmp_path, "req.json", {
        "board": {"width": 100, "height": 60},
        "components": [{"id": "jack", "type": "connector_barrel"},
                       {"id": "mcu", "type": "mcu_attiny85"}],
        "auto_detect": True,
        "placement": {"strategies": ["compact", "symmetric"]},
    })
    _run(monkeypatch, "arrange", request)
    out = json.loads(capsys.readouterr().out)
    scores = [a["score"] for a in out["arrangements"]]
    assert scores == sorted(scores, reverse=True)
    assert {a["id"] for a in out["arrangements"]} == {"arr_1_compact", "arr_2_symmetric"}
    assert all(len(a["routes"]) + len(a["unrouted_connections"]) == 2
               for a in out["arrangements"])


def test_drc_and_fix(monkeypatch, capsys, tmp_path):
    design = _write(tmp_path, "design.json", {
        "board": {"width": 100, "height": 60},
        "routes": [{"id": "r1", "net": "n", "polyline": [[-10, 30], [20, 30]]}],
    })
    _run(monkeypatch, "drc", design)
    out = json.loads(capsys.readouterr().out)
    assert [v["type"] for v in out["violations"]] == ["overhang"]
    assert "design" not in out

    _run(monkeypatch, "drc", design, "--fix")
    out = json.loads(capsys.readouterr().out)
    assert out["violations"] == []
    assert out["design"]["routes"][0]["polyline"][0][0] > 0


def test_bad_request_exits_2(monkeypatch, capsys, tmp_path):
    request = _write(tmp_path, "req.json", {
        "board": {"width": 100, "height": 60},
        "components": [{"id": "r", "type": "resistor_th"}],
        "connections": [{"id": "x", "source": "r_1:1", "target": "q_1:1"}],
    })
    with pytest.raises(SystemExit) as exc:
        _run(monkeypatch, "arrange", request)
    assert exc.value.code == 2
    assert "Error:" in capsys.readouterr().err


def test_unknown_command(monkeypatch, capsys):
    with pytest.raises(SystemExit) as exc:
        _run(monkeypatch, "frobnicate")
    assert exc.value.code == 1
    assert "Usage" in capsys.readouterr().out


@pytest.mark.parametrize("section, body", [
    ("placement", {"wobble": 3}),
    ("placement", {"strategies": ["random"]}),
    ("router", {"speed": 9}),
    ("router", {"mode": "splne"}),
])
def test_bad_options_exit_2(monkeypatch, capsys, tmp_path, section, body):
    request = _write(tmp_path, "req.json", {
        "board": {"width": 100, "height": 60},
        "components": [{"id": "r", "type": "resistor_th"}],
        section: body,
    })
    with pytest.raises(SystemExit) as exc:
        _run(monkeypatch, "arrange", request)
    assert exc.value.code == 2
    assert "Error:" in capsys.readouterr().err
