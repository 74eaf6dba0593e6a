"""BusWatch: real-time bus arrival board for BusTime stops."""

__version__ = "0.1.0"
