"""Shiftboard: shift-handover task tracker on Redis."""

__version__ = "0.1.0"
