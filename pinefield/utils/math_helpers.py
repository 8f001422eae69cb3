"""Math helpers: clamped draws, lerp, hex colors, weighted picks. No engine imports."""

from __future__ import annotations

import math

import numpy as np
from numpy.typing import NDArray

# Largest float below 1.0; upper bound for a clamped unit draw.
_UNIT_MAX = math.nextafter(1.0, 0.0)


def unit_draw(values: NDArray[np.float64] | float) -> NDArray[np.float64] | float:
    """Clamp random draws into [0, 1). NaN draws collapse to 0."""
    if isinstance(values, np.ndarray):
        return np.clip(np.nan_to_num(values, nan=0.0), 0.0, _UNIT_MAX)
    v = float(values)
    if not math.isfinite(v):
        return 0.0 if math.isnan(v) else (_UNIT_MAX if v > 0 else 0.0)
    return min(max(v, 0.0), _UNIT_MAX)


def lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


def finite_or_zero(value: float) -> float:
    """Return value if finite and non-negative, else 0."""
    try:
        v = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(v) or v < 0.0:
        return 0.0
    return v


def hex_to_rgb(color: str) -> tuple[float, float, float]:
    """'#rrggbb' -> (r, g, b) floats in [0, 1]."""
    text = color.strip().lstrip("#")
    if len(text) == 3:
        text = "".join(ch * 2 for ch in text)
    if len(text) != 6:
        raise ValueError(f"Invalid hex color: {color!r}")
    return (
        int(text[0:2], 16) / 255.0,
        int(text[2:4], 16) / 255.0,
        int(text[4:6], 16) / 255.0,
    )


def scale_rgb(rgb: tuple[float, float, float], factor: float) -> tuple[float, float, float]:
    """Multiply a color by a brightness factor (no clamping, same as a renderer would)."""
    return (rgb[0] * factor, rgb[1] * factor, rgb[2] * factor)


def weighted_index(draws: NDArray[np.float64], weights: tuple[float, ...]) -> NDArray[np.int64]:
    """Map uniform draws onto bucket indices by cumulative weight.

    Draws are clamped first, so anything out of range lands in the first
    or last bucket instead of raising.
    """
    w = np.asarray(weights, dtype=np.float64)
    total = float(w.sum())
    if total <= 0:
        raise ValueError("weights must sum to a positive value")
    edges = np.cumsum(w / total)[:-1]
    return np.searchsorted(edges, unit_draw(np.asarray(draws, dtype=np.float64)), side="right")
