"""Fixed color palette keyed by material role.

Base colors come from the reference artwork; each role applies a fixed
brightness multiplier on top of its base color.
"""

from __future__ import annotations

from pinefield.utils.math_helpers import hex_to_rgb, scale_rgb

RGB = tuple[float, float, float]

# Base colors
PINE_DEEP = "#051f18"
PINE_FRESH = "#1a473e"
SNOW = "#ffffff"
GOLD = "#eebb44"
RED = "#8a1c1c"
SILVER = "#a0b8c4"
WOOD = "#291b12"
ORANGE = "#ffaa00"
BLUE = "#88ccff"
RIBBON_GOLD = "#d4af37"
BEAR_TAN = "#c4a484"
CANDY_RED = "#ff2222"
CANDY_WHITE = "#ffffff"
GIFT_BLUE = "#4488ff"
GIFT_PINK = "#ff88cc"

TOP_POINT: RGB = (1.0, 0.8, 0.0)

# Particle material roles
WOOD_RGB: RGB = scale_rgb(hex_to_rgb(WOOD), 0.6)
SHADOW_RGB: RGB = scale_rgb(hex_to_rgb(PINE_DEEP), 0.5)
MID_RGB: RGB = hex_to_rgb(PINE_DEEP)
TIP_RGB: RGB = scale_rgb(hex_to_rgb(PINE_FRESH), 1.2)
SNOW_RGB: RGB = scale_rgb(hex_to_rgb(SNOW), 0.873)

# Light string colors, in weight order
LIGHT_RED_RGB: RGB = hex_to_rgb(RED)
LIGHT_GOLD_RGB: RGB = scale_rgb(hex_to_rgb(GOLD), 0.85)
LIGHT_ORANGE_RGB: RGB = scale_rgb(hex_to_rgb(ORANGE), 0.9)
LIGHT_BLUE_RGB: RGB = scale_rgb(hex_to_rgb(BLUE), 0.9)

LIGHT_COLORS: tuple[RGB, ...] = (LIGHT_RED_RGB, LIGHT_GOLD_RGB, LIGHT_ORANGE_RGB, LIGHT_BLUE_RGB)
LIGHT_WEIGHTS: tuple[float, ...] = (0.4, 0.2, 0.2, 0.2)

# Ornaments
TREE_GIFT_COLORS: tuple[str, ...] = (RED, GOLD, GIFT_BLUE, GIFT_PINK)
FLOOR_GIFT_COLORS: tuple[str, ...] = (
    "#D6001C",  # vivid red
    "#008F39",  # vivid green
    "#FFD700",  # bright gold
    "#0047AB",  # cobalt blue
    "#800080",  # deep purple
    "#FF00FF",  # magenta
    "#00FFFF",  # cyan
)
