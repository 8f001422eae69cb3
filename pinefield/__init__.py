"""Pinefield: procedural particle tree with gesture-driven morphing."""

__version__ = "0.1.0"
