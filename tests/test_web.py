"""Tests for the HTTP API endpoint functions.

The endpoint functions are called directly with their request models;
routing and JSON encoding are FastAPI's business.
"""

from __future__ import annotations

import json
import unittest

from fastapi import HTTPException

from tapeboard.web import server
from tapeboard.web.server import (
    AddComponentRequest, AddConnectionRequest, ArrangeRequest, DetectRequest,
    DRCRequest, FixRequest, GenerateRequest, QuantityRequest,
)


TWO_LEDS = {
    "board": {"width": 100, "height": 60},
    "components": [
        {"id": "a", "type": "led_th", "constraint": {"locked": True, "locked_position": [40, 30]}},
        {"id": "b", "type": "led_th", "constraint": {"locked": True, "locked_position": [60, 30]}},
    ],
    "connections": [{"id": "c1", "source": "a_1:2", "target": "b_1:1"}],
}

OVERHANG_DESIGN = {
    "board": {"width": 100, "height": 60},
    "routes": [{"id": "r1", "net": "n", "polyline": [[-10, 30], [20, 30]]}],
}


class TestStatelessEndpoints(unittest.TestCase):

    def test_footprints(self):
        data = server.get_footprints()
        self.assertIn("footprints", data)
        json.dumps(data)

    def test_detect(self):
        out = server.detect(DetectRequest(components=[
            {"id": "jack", "type": "connector_barrel"},
            {"id": "mcu", "type": "mcu_attiny85"},
        ]))
        self.assertEqual(out["stats"]["power_connections"], 1)
        self.assertEqual(out["stats"]["ground_connections"], 1)
        self.assertEqual(len(out["connections"]), 2)

    def test_arrange(self):
        out = server.arrange(ArrangeRequest(**TWO_LEDS))
        arrangements = out["arrangements"]
        self.assertEqual(len(arrangements), 4)
        self.assertEqual(arrangements[0]["id"], "arr_1_compact")
        self.assertEqual(len(arrangements[0]["routes"]), 1)
        json.dumps(out)

    def test_arrange_bad_connection(self):
        body = dict(TWO_LEDS, connections=[{"id": "bad", "source": "a_1:7", "target": "b_1:1"}])
        with self.assertRaises(HTTPException) as ctx:
            server.arrange(ArrangeRequest(**body))
        self.assertEqual(ctx.exception.status_code, 400)
        self.assertEqual(ctx.exception.detail["connection_id"], "bad")

    def test_arrange_bad_options(self):
        with self.assertRaises(HTTPException) as ctx:
            server.arrange(ArrangeRequest(**TWO_LEDS, placement={"wobble": 3}))
        self.assertEqual(ctx.exception.status_code, 400)

    def test_arrange_unknown_router_mode(self):
        with self.assertRaises(HTTPException) as ctx:
            server.arrange(ArrangeRequest(**TWO_LEDS, router={"mode": "splne"}))
        self.assertEqual(ctx.exception.status_code, 400)
        self.assertIn("splne", ctx.exception.detail["reason"])

    def test_drc(self):
        out = server.drc(DRCRequest(design=OVERHANG_DESIGN))
        self.assertEqual([v["type"] for v in out["violations"]], ["overhang"])
        self.assertTrue(out["violations"][0]["auto_fixable"])

    def test_drc_fix_single(self):
        out = server.drc_fix(FixRequest(design=OVERHANG_DESIGN, violation_index=0))
        self.assertEqual(out["design"]["routes"][0]["polyline"][0], [5.0, 30.0])
        self.assertEqual(out["violations"], [])

    def test_drc_fix_all(self):
        out = server.drc_fix(FixRequest(design=OVERHANG_DESIGN))
        self.assertEqual(out["violations"], [])

    def test_drc_fix_missing_violation(self):
        with self.assertRaises(HTTPException) as ctx:
            server.drc_fix(FixRequest(design=OVERHANG_DESIGN, violation_index=5))
        self.assertEqual(ctx.exception.status_code, 404)


class TestSessionEndpoints(unittest.TestCase):

    def setUp(self):
        server.reset_session()

    def tearDown(self):
        server.reset_session()

    def test_wizard_flow(self):
        self.assertEqual(server.add_component(AddComponentRequest(type="led_th"))["id"], "ac_1")
        self.assertEqual(server.add_component(AddComponentRequest(type="led_th"))["quantity"], 2)
        state = server.add_connection(AddConnectionRequest(source="ac_1_1:2", target="ac_1_2:1"))
        self.assertTrue(state["added"])
        again = server.add_connection(AddConnectionRequest(source="ac_1_2:1", target="ac_1_1:2"))
        self.assertFalse(again["added"])

        state = server.session_generate(GenerateRequest(board={"width": 100, "height": 60}))
        self.assertEqual(len(state["arrangements"]), 4)
        self.assertEqual(state["selected"], state["arrangements"][0]["id"])

        server.session_select("arr_2_zone_priority")
        design = server.session_accept()["design"]
        self.assertEqual(len(design["components"]), 2)
        self.assertEqual(server.get_session()["arrangements"], [])

    def test_quantity_and_removal(self):
        server.add_component(AddComponentRequest(type="led_th"))
        server.add_component(AddComponentRequest(type="led_th"))
        server.add_connection(AddConnectionRequest(source="ac_1_1:2", target="ac_1_2:1"))
        state = server.set_quantity("ac_1", QuantityRequest(quantity=1))
        self.assertEqual(state["connections"], [])
        with self.assertRaises(HTTPException) as ctx:
            server.set_quantity("ac_9", QuantityRequest(quantity=1))
        self.assertEqual(ctx.exception.status_code, 404)
        self.assertEqual(server.remove_component("ac_1")["components"], [])

    def test_component_constraint_is_parsed(self):
        server.add_component(AddComponentRequest(
            type="led_th", constraint={"locked": True, "locked_position": [40, 30]}))
        constraint = server._session.component("ac_1").constraint
        self.assertTrue(constraint.locked)
        self.assertEqual(constraint.locked_position, (40.0, 30.0))

    def test_bad_constraint(self):
        with self.assertRaises(HTTPException) as ctx:
            server.add_component(AddComponentRequest(
                type="led_th", constraint={"locked_position": "nowhere"}))
        self.assertEqual(ctx.exception.status_code, 400)
        self.assertEqual(server.get_session()["components"], [])

    def test_bad_pad_ref(self):
        with self.assertRaises(HTTPException) as ctx:
            server.add_connection(AddConnectionRequest(source="nocolon", target="ac_1_1:1"))
        self.assertEqual(ctx.exception.status_code, 400)

    def test_detect_and_clear(self):
        server.add_component(AddComponentRequest(type="connector_barrel"))
        server.add_component(AddComponentRequest(type="mcu_attiny85"))
        self.assertEqual(server.session_detect()["added"], 2)
        self.assertEqual(server.session_clear_auto()["connections"], [])

    def test_select_unknown(self):
        with self.assertRaises(HTTPException) as ctx:
            server.session_select("arr_1_compact")
        self.assertEqual(ctx.exception.status_code, 404)

    def test_accept_nothing(self):
        with self.assertRaises(HTTPException) as ctx:
            server.session_accept()
        self.assertEqual(ctx.exception.status_code, 400)
