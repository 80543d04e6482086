"""Tests for the in-memory assembly session."""

from __future__ import annotations

import unittest

from tapeboard.pipeline.design import Board, Design, PadRef, PlacedComponent
from tapeboard.session import AssemblySession
from tests.fixtures import make_library


class TestComponents(unittest.TestCase):

    def setUp(self):
        self.session = AssemblySession(footprints=make_library())

    def test_same_type_bumps_quantity(self):
        a = self.session.add_component("pad1")
        b = self.session.add_component("pad1")
        c = self.session.add_component("bar2")
        self.assertIs(a, b)
        self.assertEqual(a.quantity, 2)
        self.assertEqual([x.id for x in self.session.components], ["ac_1", "ac_2"])
        self.assertEqual(c.id, "ac_2")

    def test_unknown_type_is_kept(self):
        with self.assertLogs("tapeboard.session", level="WARNING"):
            comp = self.session.add_component("mystery")
        self.assertEqual(comp.type, "mystery")

    def test_lowering_quantity_drops_orphaned_connections(self):
        self.session.add_component("pad1")
        self.session.add_component("pad1")
        self.session.add_component("bar2")
        self.session.add_connection("ac_1_1:1", "ac_2_1:1")
        self.session.add_connection("ac_1_2:1", "ac_2_1:2")
        self.session.set_quantity("ac_1", 1)
        self.assertEqual([c.id for c in self.session.connections], ["conn_1"])

    def test_zero_quantity_removes(self):
        self.session.add_component("pad1")
        self.session.add_component("bar2")
        self.session.add_connection("ac_1_1:1", "ac_2_1:1")
        self.session.set_quantity("ac_1", 0)
        self.assertIsNone(self.session.component("ac_1"))
        self.assertEqual(self.session.connections, [])

    def test_remove_unknown_is_noop(self):
        self.session.add_component("pad1")
        self.session.remove_component("ac_99")
        self.assertEqual(len(self.session.components), 1)


class TestConnections(unittest.TestCase):

    def setUp(self):
        self.session = AssemblySession(footprints=make_library())
        self.session.add_component("bar2")
        self.session.add_component("pad1")

    def test_ids_and_duplicates(self):
        first = self.session.add_connection("ac_1_1:2", "ac_2_1:1", net_name="SIG")
        self.assertEqual(first.id, "conn_1")
        self.assertEqual(first.source, PadRef("ac_1_1", "2"))
        self.assertIsNone(self.session.add_connection("ac_2_1:1", "ac_1_1:2"))
        second = self.session.add_connection(PadRef("ac_1_1", "1"), PadRef("ac_2_1", "1"))
        self.assertEqual(second.id, "conn_2")

    def test_remove_and_clear(self):
        self.session.add_connection("ac_1_1:2", "ac_2_1:1")
        self.session.add_connection("ac_1_1:1", "ac_2_1:1")
        self.session.remove_connection("conn_1")
        self.assertEqual([c.id for c in self.session.connections], ["conn_2"])
        self.session.clear_connections()
        self.assertEqual(self.session.connections, [])


class TestAutoDetect(unittest.TestCase):

    def test_detect_then_clear(self):
        session = AssemblySession()
        session.add_component("connector_barrel")
        session.add_component("mcu_attiny85")
        session.add_connection("ac_2_1:2", "ac_2_1:3")
        result = session.auto_detect()
        self.assertEqual(len(result.connections), 2)
        self.assertEqual(len(session.connections), 3)
        self.assertEqual(session.auto_detect().connections, [])
        session.clear_auto_detected()
        self.assertEqual([c.id for c in session.connections], ["conn_1"])


class TestArrangements(unittest.TestCase):

    def setUp(self):
        self.session = AssemblySession(footprints=make_library())
        self.session.add_component("pad1")
        self.session.add_component("pad1")
        self.session.add_connection("ac_1_1:1", "ac_1_2:1")
        self.board = Board.rect(100, 60)

    def test_generate_selects_best(self):
        arrangements = self.session.generate(self.board)
        self.assertEqual(len(arrangements), 4)
        self.assertEqual(self.session.selected_id, arrangements[0].id)
        self.assertIs(self.session.selected, arrangements[0])

    def test_select(self):
        self.session.generate(self.board)
        self.assertEqual(self.session.select("arr_3_symmetric").id, "arr_3_symmetric")
        with self.assertRaises(KeyError):
            self.session.select("arr_9_nothing")

    def test_accept_builds_design_and_clears(self):
        self.session.generate(self.board)
        design = self.session.accept()
        self.assertEqual([c.id for c in design.components], ["ac_1_1", "ac_1_2"])
        self.assertEqual(len(design.routes), 1)
        self.assertEqual(self.session.arrangements, [])
        self.assertIsNone(self.session.selected)
        with self.assertRaises(ValueError):
            self.session.accept()

    def test_accept_into_existing_design(self):
        self.session.generate(self.board)
        base = Design(board=self.board, components=(PlacedComponent("old_1", "bar2", (80, 50)),))
        merged = self.session.accept(base)
        self.assertEqual(merged.components[0].id, "old_1")
        self.assertEqual(len(merged.components), 3)

    def test_accept_without_generate(self):
        with self.assertRaises(ValueError):
            AssemblySession().accept()

    def test_reset(self):
        self.session.generate(self.board)
        self.session.reset()
        self.assertEqual(self.session.components, [])
        self.assertIsNone(self.session.board)
        self.assertEqual(self.session.add_component("bar2").id, "ac_1")
