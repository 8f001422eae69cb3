"""Pinefield particle tree generation and morph engine."""

from pinefield.engine.context import Archetype, Category, Field, GestureMode, OrientationTarget, OrnamentBatch, Zone
from pinefield.engine.decorations import generate_decorations, generate_placements
from pinefield.engine.field_generator import generate_field
from pinefield.engine.morph import MorphEngine
from pinefield.engine.orientation import OrientationSmoother
from pinefield.engine.scene import Scene, create_scene

__all__ = [
    "Archetype",
    "Category",
    "Field",
    "GestureMode",
    "OrientationTarget",
    "OrnamentBatch",
    "Zone",
    "generate_decorations",
    "generate_placements",
    "generate_field",
    "MorphEngine",
    "OrientationSmoother",
    "Scene",
    "create_scene",
]
