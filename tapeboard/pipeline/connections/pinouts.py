"""Known pinouts and component-role keywords for connection detection.

A pinout lists, in footprint pad order, the name and electrical label of
every pin.  Labels are one of VCC, GND, SIGNAL, DATA or NC.  Types with
no pinout entry fall back to the footprint pad roles and finally to the
keyword table below.
"""

from __future__ import annotations

from dataclasses import dataclass


COMPONENT_ROLES = ("power-source", "ground", "connector", "passive", "ic", "unknown")
PAD_LABELS = ("VCC", "GND", "SIGNAL", "DATA", "NC")


@dataclass(frozen=True)
class PinInfo:
    name: str
    label: str                          # one of PAD_LABELS


@dataclass(frozen=True)
class Pinout:
    type: str
    role: str                           # one of COMPONENT_ROLES
    pins: tuple[PinInfo, ...]

    def pin(self, index: int) -> PinInfo | None:
        if 0 <= index < len(self.pins):
            return self.pins[index]
        return None


def _pinout(type_: str, role: str, *pins: tuple[str, str]) -> Pinout:
    return Pinout(type_, role, tuple(PinInfo(name, label) for name, label in pins))


_DIP8_POWER = (("GND", "GND"), ("VCC", "VCC"))

PINOUTS: dict[str, Pinout] = {p.type: p for p in (
    # Discretes
    _pinout("resistor_th", "passive", ("A", "SIGNAL"), ("B", "SIGNAL")),
    _pinout("capacitor_th", "passive", ("+", "SIGNAL"), ("-", "GND")),
    _pinout("led_th", "passive", ("Cathode", "SIGNAL"), ("Anode", "SIGNAL")),
    _pinout("diode_1n4148", "passive", ("Cathode", "SIGNAL"), ("Anode", "SIGNAL")),
    _pinout("transistor_npn", "passive", ("E", "SIGNAL"), ("B", "SIGNAL"), ("C", "SIGNAL")),
    _pinout("buzzer_12mm", "passive", ("+", "SIGNAL"), ("-", "GND")),

    # Inputs
    _pinout("switch_spst", "passive", ("A", "SIGNAL"), ("B", "SIGNAL")),
    _pinout("button_6mm", "passive",
            ("A1", "SIGNAL"), ("A2", "SIGNAL"), ("B1", "SIGNAL"), ("B2", "SIGNAL")),
    _pinout("pot_9mm", "passive", ("CW", "VCC"), ("Wiper", "SIGNAL"), ("CCW", "GND")),

    # ICs (DIP-8 share the GND-on-4 / VCC-on-8 convention)
    _pinout("ic_dip8", "ic",
            ("Pin1", "SIGNAL"), ("Pin2", "SIGNAL"), ("Pin3", "SIGNAL"), _DIP8_POWER[0],
            ("Pin5", "SIGNAL"), ("Pin6", "SIGNAL"), ("Pin7", "SIGNAL"), _DIP8_POWER[1]),
    _pinout("opamp_tl072", "ic",
            ("OUT1", "SIGNAL"), ("IN1-", "SIGNAL"), ("IN1+", "SIGNAL"), ("V-", "GND"),
            ("IN2+", "SIGNAL"), ("IN2-", "SIGNAL"), ("OUT2", "SIGNAL"), ("V+", "VCC")),
    _pinout("mcu_attiny85", "ic",
            ("RESET/PB5", "SIGNAL"), ("A3/PB3", "SIGNAL"), ("A2/PB4", "SIGNAL"), _DIP8_POWER[0],
            ("PB0", "SIGNAL"), ("PB1", "SIGNAL"), ("A1/PB2", "SIGNAL"), _DIP8_POWER[1]),
    _pinout("display_oled_128x32", "ic",
            ("GND", "GND"), ("VCC", "VCC"), ("SCL", "DATA"), ("SDA", "DATA")),

    # Power
    # The regulator input is deliberately not VCC: it sits on the raw
    # supply, not on the regulated rail.
    _pinout("regulator_7805", "power-source", ("VIN", "SIGNAL"), ("GND", "GND"), ("VOUT", "VCC")),
    _pinout("regulator_ams1117", "power-source", ("GND", "GND"), ("VOUT", "VCC"), ("VIN", "SIGNAL")),
    _pinout("connector_barrel", "power-source", ("Sleeve", "GND"), ("Center", "VCC"), ("Switch", "NC")),

    # Connectors
    _pinout("connector_usb", "connector",
            ("VBUS", "VCC"), ("D-", "DATA"), ("D+", "DATA"), ("GND", "GND")),
    _pinout("jack_trs_35mm", "connector", ("Tip", "SIGNAL"), ("Ring", "SIGNAL"), ("Sleeve", "GND")),
    _pinout("header_1x2", "connector", ("Pin1", "SIGNAL"), ("Pin2", "SIGNAL")),
    _pinout("header_1x4", "connector",
            ("Pin1", "SIGNAL"), ("Pin2", "SIGNAL"), ("Pin3", "SIGNAL"), ("Pin4", "SIGNAL")),
)}


# Checked in order; the first role with a matching keyword wins, so
# "connector_barrel" classifies as a power source, not a connector.
ROLE_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("power-source", ("barrel", "battery", "regulator", "psu", "supply")),
    ("ground", ("ground", "gnd")),
    ("connector", ("connector", "usb", "jack", "header", "midi", "terminal")),
    ("ic", ("ic_", "mcu", "opamp", "arduino", "esp32", "pico", "attiny", "display")),
    ("passive", ("resistor", "capacitor", "inductor", "led", "diode", "transistor",
                 "switch", "button", "pot", "encoder", "sensor", "buzzer", "speaker")),
)

# Footprint pad role → pad label, used when a type has no pinout.
ROLE_TO_LABEL = {"vcc": "VCC", "gnd": "GND", "signal": "SIGNAL", "data": "DATA"}

# Types whose output pin feeds an IC analog input.
ANALOG_SOURCE_KEYWORDS = ("pot", "encoder", "sensor")
ANALOG_OUTPUT_NAMES = ("WIPER", "OUT")
