"""Tests for design models, parsing, validation and serialization."""

from __future__ import annotations

import json
import unittest

import pytest

from tapeboard.pipeline.design import (
    Arrangement, ArrangementMetrics, AssemblyComponent, Board, Design,
    DesignError, PadRef, PlacedComponent, Route, arrangement_to_dict,
    design_to_dict, expand_components, parse_board, parse_components,
    parse_connections, parse_design, require_valid, validate_board,
    validate_connections, validate_routing,
)
from tests.fixtures import connect, make_library


class TestModels(unittest.TestCase):

    def test_expand_gives_stable_instance_ids(self):
        comps = [AssemblyComponent("led", "led_th", quantity=3),
                 AssemblyComponent("r", "resistor_th")]
        ids = [i.id for i in expand_components(comps)]
        self.assertEqual(ids, ["led_1", "led_2", "led_3", "r_1"])
        self.assertEqual(expand_components(comps)[1].component_id, "led")

    def test_pad_ref_parse(self):
        ref = PadRef.parse("led_1:2")
        self.assertEqual(ref, PadRef("led_1", "2"))
        self.assertEqual(str(ref), "led_1:2")
        with self.assertRaises(ValueError):
            PadRef.parse("nocolon")

    def test_connection_same_pads_either_direction(self):
        a = connect("c1", "x_1:1", "y_1:2")
        b = connect("c2", "y_1:2", "x_1:1")
        self.assertTrue(a.same_pads(b))
        self.assertEqual(a.net, "c1")

    def test_board_rect(self):
        board = Board.rect(100, 60)
        self.assertAlmostEqual(board.area, 6000.0)
        self.assertEqual(board.bounds, (0.0, 0.0, 100.0, 60.0))
        self.assertEqual(board.centroid, (50.0, 30.0))

    def test_route_length(self):
        r = Route("r", "n", ((0, 0), (3, 4), (3, 10)))
        self.assertAlmostEqual(r.length, 11.0)

    def test_with_arrangement_appends(self):
        board = Board.rect(50, 50)
        existing = PlacedComponent("old_1", "pad1", (5, 5))
        design = Design(board=board, components=(existing,))
        arr = Arrangement(
            id="arr_1_compact", name="Compact", description="",
            components=(PlacedComponent("new_1", "pad1", (20, 20)),),
            routes=(Route("r", "n", ((0, 0), (1, 1))),),
            metrics=ArrangementMetrics(), score=90.0,
        )
        merged = design.with_arrangement(arr)
        self.assertEqual([c.id for c in merged.components], ["old_1", "new_1"])
        self.assertEqual(len(merged.routes), 1)
        self.assertEqual(len(design.routes), 0)


class TestValidation(unittest.TestCase):

    def setUp(self):
        self.lib = make_library()
        self.instances = expand_components([
            AssemblyComponent("a", "bar2"), AssemblyComponent("b", "pad1"),
        ])

    def test_valid_connections(self):
        conns = [connect("c1", "a_1:2", "b_1:1")]
        self.assertEqual(validate_connections(conns, self.instances, self.lib), [])

    def test_unknown_instance(self):
        errors = validate_connections([connect("c1", "zz_1:1", "b_1:1")], self.instances, self.lib)
        self.assertEqual(len(errors), 1)
        self.assertIn("unknown instance 'zz_1'", errors[0])

    def test_unknown_pad(self):
        errors = validate_connections([connect("c1", "a_1:9", "b_1:1")], self.instances, self.lib)
        self.assertIn("unknown pad '9'", errors[0])

    def test_same_pad_both_ends(self):
        errors = validate_connections([connect("c1", "a_1:1", "a_1:1")], self.instances, self.lib)
        self.assertIn("same pad", errors[0])

    def test_require_valid_raises_with_connection_id(self):
        with self.assertRaises(DesignError) as ctx:
            require_valid([connect("bad", "a_1:7", "b_1:1")], self.instances, self.lib)
        self.assertEqual(ctx.exception.connection_id, "bad")
        self.assertEqual(len(ctx.exception.errors), 1)

    def test_board_validation(self):
        self.assertEqual(validate_board(Board.rect(10, 10)), [])
        self.assertTrue(validate_board(Board(((0, 0), (1, 1)))))
        self.assertTrue(validate_board(Board(((0, 0), (5, 0), (10, 0)))))

    def test_routing_settings(self):
        self.assertEqual(validate_routing("spline", "V", "bottom"), [])
        errors = validate_routing("splne", "W", "middle")
        self.assertEqual(len(errors), 3)
        self.assertIn("'splne'", errors[0])
        self.assertEqual(validate_routing(None, "U", "top"), [])


class TestParsing(unittest.TestCase):

    def test_board_formats(self):
        self.assertEqual(parse_board({"width": 80, "height": 40}).bounds, (0.0, 0.0, 80.0, 40.0))
        b = parse_board({"boundary": [[0, 0], [30, 0], [15, 20]]})
        self.assertEqual(len(b.boundary), 3)

    def test_components_with_constraint(self):
        comps = parse_components([
            {"id": "led", "type": "led_th", "quantity": 2,
             "constraint": {"zone": "top", "group": "leds"}},
        ])
        self.assertEqual(comps[0].quantity, 2)
        self.assertEqual(comps[0].constraint.zone, "top")
        self.assertEqual(comps[0].constraint.group, "leds")

    def test_connections_both_ref_forms(self):
        conns = parse_connections([
            {"source": "a_1:1", "target": {"instance": "b_1", "pad": "2"}},
        ])
        self.assertEqual(conns[0].id, "conn_1")
        self.assertEqual(conns[0].target, PadRef("b_1", "2"))

    def test_design_round_trip_through_dict(self):
        data = {
            "board": {"width": 100, "height": 60},
            "components": [{"id": "a_1", "type": "pad1", "position": [10, 10]}],
            "routes": [{"id": "r1", "net": "n", "polyline": [[10, 10], [20, 10]]}],
            "vias": [{"position": [20, 10]}],
            "rules": {"min_spacing": 1.0},
        }
        design = parse_design(data)
        self.assertEqual(design.rules.min_spacing, 1.0)
        self.assertIsNone(design.rules.min_wall)
        out = design_to_dict(design)
        json.dumps(out)
        self.assertEqual(parse_design(out), design)


@pytest.mark.parametrize("bad", [
    {"width": "wide", "height": 10},
    {"boundary": [[0, 0], [1]]},
])
def test_parse_board_rejects_malformed(bad):
    with pytest.raises(DesignError):
        parse_board(bad)


def test_parse_components_rejects_zero_quantity():
    with pytest.raises(DesignError):
        parse_components([{"type": "led_th", "quantity": 0}])


def test_parse_design_rejects_single_point_route():
    with pytest.raises(DesignError):
        parse_design({"board": {"width": 10, "height": 10},
                      "routes": [{"polyline": [[1, 1]]}]})


@pytest.mark.parametrize("field, value", [("layer", "middle"), ("profile", "W")])
def test_parse_design_rejects_unknown_route_settings(field, value):
    route = {"polyline": [[1, 1], [5, 5]], field: value}
    with pytest.raises(DesignError, match=value):
        parse_design({"board": {"width": 10, "height": 10}, "routes": [route]})


def test_arrangement_dict_shape():
    arr = Arrangement(
        id="arr_1_compact", name="Compact", description="d",
        components=(PlacedComponent("a_1", "pad1", (1.23456, 2.0), 90),),
        routes=(Route("r", "n", ((0, 0), (1, 1))),),
        metrics=ArrangementMetrics(12.3456, 1, 0.5, 0), score=88.8,
    )
    d = arrangement_to_dict(arr)
    assert set(d) >= {"id", "name", "description", "components", "routes", "metrics", "score"}
    assert d["components"][0]["rotation"] == 90
    assert set(d["routes"][0]) >= {"net", "layer", "polyline", "width", "profile", "depth"}
    json.dumps(d)
