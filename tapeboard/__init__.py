"""tapeboard — automated layout for copper-tape channel boards."""

__version__ = "0.1.0"
