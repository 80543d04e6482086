"""Tests for the connection detector.

Validates:
  - role classification (pinout table first, then keywords)
  - pad labels (pinout, footprint role, "PIN n")
  - power / ground star nets, provenance flags and deterministic ids
  - idempotence: running on its own output adds nothing
  - unknown types are reported, never fatal
"""

from __future__ import annotations

import unittest

from tapeboard.pipeline.connections import (
    classify_role, clear_auto_detected, detect_connections, generate_net_name,
    pad_label,
)
from tapeboard.pipeline.design import AssemblyComponent, PadRef
from tests.fixtures import connect, make_library, make_pinouts


class TestClassification(unittest.TestCase):

    def test_pinout_table_roles(self):
        self.assertEqual(classify_role("connector_barrel"), "power-source")
        self.assertEqual(classify_role("mcu_attiny85"), "ic")
        self.assertEqual(classify_role("connector_usb"), "connector")

    def test_keyword_fallback(self):
        self.assertEqual(classify_role("lipo_battery_holder"), "power-source")
        self.assertEqual(classify_role("midi_connector_din5"), "connector")
        self.assertEqual(classify_role("esp32_devkit"), "ic")
        self.assertEqual(classify_role("thermistor_sensor"), "passive")
        self.assertEqual(classify_role("widget"), "unknown")

    def test_pad_labels(self):
        self.assertEqual(pad_label("mcu_attiny85", 3), "GND")
        self.assertEqual(pad_label("mcu_attiny85", 7), "VCC")
        self.assertEqual(pad_label("connector_usb", 1), "DATA")

    def test_pad_label_falls_back_to_footprint_then_pin_number(self):
        lib = make_library()
        self.assertEqual(pad_label("psu", 0, lib, pinouts={}), "VCC")
        self.assertEqual(pad_label("unheard_of", 2, lib, pinouts={}), "PIN 3")

    def test_net_names(self):
        self.assertEqual(generate_net_name("a", 0, "b", 1, is_power=True), "VCC")
        self.assertEqual(generate_net_name("a", 0, "b", 1, is_ground=True), "GND")
        self.assertEqual(generate_net_name("pot_9mm", 1, "mcu_attiny85", 1), "Wiper_A3/PB3")
        self.assertEqual(generate_net_name("resistor_x", 0, "led_y", 1, pinouts={}),
                         "RESISTOR1_LED2")


class TestDetection(unittest.TestCase):

    def test_single_power_link(self):
        """A power source and an IC sharing VCC give exactly one power link."""
        comps = [AssemblyComponent("psu", "psu"), AssemblyComponent("chip", "chip")]
        result = detect_connections(comps, [], make_library(), make_pinouts())
        self.assertEqual(len(result.connections), 1)
        conn = result.connections[0]
        self.assertTrue(conn.is_power)
        self.assertTrue(conn.auto_detected)
        self.assertFalse(conn.is_ground)
        self.assertEqual(conn.net_name, "VCC")
        self.assertEqual(conn.source, PadRef("psu_1", "1"))
        self.assertEqual(conn.target, PadRef("chip_1", "1"))
        self.assertEqual(conn.id, "auto:VCC:psu_1:1->chip_1:1")
        self.assertEqual(result.stats.power_connections, 1)
        self.assertEqual(result.stats.ground_connections, 0)

    def test_barrel_and_attiny(self):
        comps = [AssemblyComponent("jack", "connector_barrel"),
                 AssemblyComponent("mcu", "mcu_attiny85")]
        result = detect_connections(comps)
        self.assertEqual(result.stats.power_connections, 1)
        self.assertEqual(result.stats.ground_connections, 1)
        nets = {c.net_name: c for c in result.connections}
        self.assertEqual(nets["VCC"].source, PadRef("jack_1", "2"))
        self.assertEqual(nets["VCC"].target, PadRef("mcu_1", "8"))
        self.assertEqual(nets["GND"].target, PadRef("mcu_1", "4"))

    def test_star_to_first_pad(self):
        comps = [AssemblyComponent("jack", "connector_barrel"),
                 AssemblyComponent("mcu", "mcu_attiny85", quantity=2)]
        result = detect_connections(comps)
        vcc = [c for c in result.connections if c.is_power]
        self.assertEqual(len(vcc), 2)
        self.assertTrue(all(c.source == PadRef("jack_1", "2") for c in vcc))

    def test_idempotent(self):
        comps = [AssemblyComponent("jack", "connector_barrel"),
                 AssemblyComponent("mcu", "mcu_attiny85", quantity=2),
                 AssemblyComponent("pot", "pot_9mm")]
        first = detect_connections(comps)
        second = detect_connections(comps, first.connections)
        self.assertEqual(second.connections, [])
        self.assertEqual(second.stats.power_connections, 0)

    def test_existing_manual_link_is_respected(self):
        comps = [AssemblyComponent("psu", "psu"), AssemblyComponent("chip", "chip")]
        manual = [connect("m1", "chip_1:1", "psu_1:1")]
        result = detect_connections(comps, manual, make_library(), make_pinouts())
        self.assertEqual(result.connections, [])

    def test_joined_through_third_pad(self):
        """Pads already joined transitively are not linked again."""
        lib = make_library()
        comps = [AssemblyComponent("psu", "psu"), AssemblyComponent("chip", "chip"),
                 AssemblyComponent("bar", "bar2")]
        manual = [connect("m1", "psu_1:1", "bar_1:1"), connect("m2", "bar_1:1", "chip_1:1")]
        result = detect_connections(comps, manual, lib, make_pinouts())
        self.assertEqual(result.connections, [])

    def test_pot_wiper_to_analog_pin(self):
        comps = [AssemblyComponent("pot", "pot_9mm"), AssemblyComponent("mcu", "mcu_attiny85")]
        result = detect_connections(comps)
        self.assertEqual(result.stats.signal_connections, 1)
        sig = [c for c in result.connections if c.id.startswith("auto:SIG:")][0]
        self.assertEqual(sig.source, PadRef("pot_1", "2"))
        self.assertEqual(sig.target, PadRef("mcu_1", "2"))
        self.assertEqual(sig.net_name, "Wiper_A3/PB3")
        self.assertFalse(sig.is_power)

    def test_unknown_types_reported_once(self):
        comps = [AssemblyComponent("w", "widget", quantity=3)]
        result = detect_connections(comps)
        self.assertEqual(result.stats.unknown_types, ["widget"])
        self.assertEqual(result.connections, [])

    def test_clear_auto_detected_keeps_manual(self):
        comps = [AssemblyComponent("jack", "connector_barrel"),
                 AssemblyComponent("mcu", "mcu_attiny85")]
        manual = [connect("m1", "mcu_1:2", "mcu_1:3")]
        merged = manual + detect_connections(comps, manual).connections
        self.assertEqual(clear_auto_detected(merged), manual)
