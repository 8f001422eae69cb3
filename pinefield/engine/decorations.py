"""Decoration placement generator.

Two placement families:
  - tree: one point per ornament on the silhouette envelope (same lobe
    factor and lift/droop curve as the particle branches), clamped above
    the floor and hung slightly below the branch line;
  - floor: an annulus around the trunk at a fixed floor elevation.

Scale and color come from a per-archetype style registered with
``@archetype_style``. Everything else is archetype-agnostic.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

import numpy as np
from numpy.typing import NDArray

from pinefield.engine import palette
from pinefield.engine.config import DEFAULT_ORNAMENT_COUNTS, ShapeProfile
from pinefield.engine.context import Archetype, OrnamentBatch, Zone
from pinefield.utils.geometry import lobe_factor, polar_to_xz
from pinefield.utils.math_helpers import hex_to_rgb, unit_draw

logger = logging.getLogger(__name__)

# Tree family envelope
TREE_RADIUS = 6.5
TREE_MIN_RADIUS = 0.1
TREE_LIFT_SLOPE = 0.45
TREE_DROOP_RATIO = 0.3
TREE_HANG_OFFSET = -0.4
TREE_SCALE_MULTIPLIER = 2.0

# Floor family
FLOOR_INNER_RADIUS = 2.5
FLOOR_OUTER_RADIUS = 7.0
FLOOR_ELEVATION = 0.35  # above base_y


@dataclass
class StyleResult:
    scales: NDArray[np.float64]  # (M,)
    colors: NDArray[np.float64]  # (M, 3)
    # Added to the placement rotation
    rotations: NDArray[np.float64] | None = None  # (M, 3)


@dataclass
class ArchetypeStyle:
    archetype: Archetype
    zone: Zone
    fn: Callable[[int, np.random.Generator], StyleResult]


_styles: dict[Archetype, ArchetypeStyle] = {}


def archetype_style(archetype: Archetype, *, zone: Zone = Zone.TREE):
    """Decorator to register the scale/color style of an archetype."""

    def decorator(fn: Callable[[int, np.random.Generator], StyleResult]):
        if archetype in _styles:
            raise ValueError(f"Duplicate archetype style: {archetype.value}")
        _styles[archetype] = ArchetypeStyle(archetype=archetype, zone=zone, fn=fn)
        logger.debug("Registered style %s (%s)", archetype.value, zone.value)
        return fn

    return decorator


def get_style(archetype: Archetype) -> ArchetypeStyle:
    return _styles[archetype]


def _flat(color: str, n: int) -> NDArray[np.float64]:
    return np.tile(np.asarray(hex_to_rgb(color)), (n, 1))


def _choose(colors: tuple[str, ...], n: int, rng: np.random.Generator) -> NDArray[np.float64]:
    table = np.asarray([hex_to_rgb(c) for c in colors])
    idx = np.minimum((unit_draw(rng.random(n)) * len(colors)).astype(np.int64), len(colors) - 1)
    return table[idx]


def _uniform(lo: float, hi: float, n: int, rng: np.random.Generator) -> NDArray[np.float64]:
    return lo + unit_draw(rng.random(n)) * (hi - lo)


@archetype_style(Archetype.BEAR)
def _bear(n: int, rng: np.random.Generator) -> StyleResult:
    return StyleResult(scales=_uniform(0.25, 0.40, n, rng), colors=_flat(palette.BEAR_TAN, n))


@archetype_style(Archetype.STAR)
def _star(n: int, rng: np.random.Generator) -> StyleResult:
    rot = np.zeros((n, 3))
    rot[:, 2] = unit_draw(rng.random(n)) * 0.5
    return StyleResult(scales=_uniform(0.2, 0.3, n, rng), colors=_flat(palette.GOLD, n), rotations=rot)


@archetype_style(Archetype.CANDY_CANE)
def _candy_cane(n: int, rng: np.random.Generator) -> StyleResult:
    rot = np.zeros((n, 3))
    rot[:, 2] = np.pi  # hook hangs downward
    red = unit_draw(rng.random(n)) > 0.5
    colors = _flat(palette.CANDY_WHITE, n)
    colors[red] = hex_to_rgb(palette.CANDY_RED)
    return StyleResult(scales=np.full(n, 0.3), colors=colors, rotations=rot)


@archetype_style(Archetype.BULB)
def _bulb(n: int, rng: np.random.Generator) -> StyleResult:
    return StyleResult(scales=_uniform(0.2, 0.3, n, rng), colors=_flat(palette.SILVER, n))


@archetype_style(Archetype.GIFT_BOX)
def _gift_box(n: int, rng: np.random.Generator) -> StyleResult:
    return StyleResult(scales=_uniform(0.18, 0.33, n, rng), colors=_choose(palette.TREE_GIFT_COLORS, n, rng))


@archetype_style(Archetype.RIBBON)
def _ribbon(n: int, rng: np.random.Generator) -> StyleResult:
    return StyleResult(scales=_uniform(0.18, 0.33, n, rng), colors=_flat(palette.RIBBON_GOLD, n))


@archetype_style(Archetype.FLOOR_GIFT, zone=Zone.FLOOR)
def _floor_gift(n: int, rng: np.random.Generator) -> StyleResult:
    return StyleResult(scales=_uniform(0.5, 1.2, n, rng), colors=_choose(palette.FLOOR_GIFT_COLORS, n, rng))


def tree_positions(count: int, profile: ShapeProfile, rng: np.random.Generator) -> NDArray[np.float64]:
    """One point per ornament on the outer half of the silhouette envelope."""
    p = profile
    h = unit_draw(rng.random(count))
    y_base = p.base_y + h * p.tree_height

    max_radius = (
        ((1.0 - h) * TREE_RADIUS + TREE_MIN_RADIUS)
        * lobe_factor(h, p.silhouette_lobes)
        * (0.8 + unit_draw(rng.random(count)) * 0.4)
    )
    dist = 0.5 + unit_draw(rng.random(count)) * 0.5
    r = dist * max_radius
    theta = unit_draw(rng.random(count)) * 2.0 * np.pi

    droop_factor = max_radius * TREE_DROOP_RATIO * (1.1 - h * 0.4)
    y = y_base + r * TREE_LIFT_SLOPE - dist**3 * droop_factor

    # Discrete objects clamp at base + clearance, then hang below the branch
    low = y < p.floor_guard
    n_low = int(low.sum())
    if n_low:
        y[low] = p.floor_guard + unit_draw(rng.random(n_low)) * p.floor_jitter
    y += TREE_HANG_OFFSET

    x, z = polar_to_xz(r, theta)
    return np.column_stack([x, y, z])


def floor_positions(count: int, profile: ShapeProfile, rng: np.random.Generator) -> NDArray[np.float64]:
    r = FLOOR_INNER_RADIUS + unit_draw(rng.random(count)) * (FLOOR_OUTER_RADIUS - FLOOR_INNER_RADIUS)
    theta = unit_draw(rng.random(count)) * 2.0 * np.pi
    x, z = polar_to_xz(r, theta)
    return np.column_stack([x, np.full(count, profile.base_y + FLOOR_ELEVATION), z])


def generate_placements(
    count: int,
    archetype: Archetype,
    profile: ShapeProfile | None = None,
    rng: np.random.Generator | None = None,
) -> OrnamentBatch:
    """Generate ``count`` home placements for one archetype."""
    if count <= 0:
        raise ValueError(f"count must be positive, got {count}")
    profile = profile or ShapeProfile()
    rng = rng if rng is not None else np.random.default_rng()
    style = get_style(archetype)

    rotations = np.zeros((count, 3))
    if style.zone is Zone.FLOOR:
        positions = floor_positions(count, profile, rng)
        rotations[:, 1] = unit_draw(rng.random(count)) * np.pi
        result = style.fn(count, rng)
        scales = result.scales
    else:
        positions = tree_positions(count, profile, rng)
        rotations[:, 1] = unit_draw(rng.random(count)) * 2.0 * np.pi
        result = style.fn(count, rng)
        scales = result.scales * TREE_SCALE_MULTIPLIER

    if result.rotations is not None:
        rotations += result.rotations

    return OrnamentBatch(
        archetype=archetype,
        zone=style.zone,
        positions=positions,
        rotations=rotations,
        scales=np.asarray(scales, dtype=np.float64),
        colors=np.asarray(result.colors, dtype=np.float64),
    )


def generate_decorations(
    counts: dict[Archetype, int] | None = None,
    profile: ShapeProfile | None = None,
    rng: np.random.Generator | None = None,
) -> list[OrnamentBatch]:
    """Default ornament set. Gift boxes (tree and floor) get a ribbon overlay
    that shares their home placements."""
    counts = counts if counts is not None else DEFAULT_ORNAMENT_COUNTS
    rng = rng if rng is not None else np.random.default_rng()
    ribbon = hex_to_rgb(palette.RIBBON_GOLD)

    batches: list[OrnamentBatch] = []
    for archetype, count in counts.items():
        if archetype is Archetype.RIBBON:
            continue
        batch = generate_placements(count, archetype, profile, rng)
        batches.append(batch)
        if archetype in (Archetype.GIFT_BOX, Archetype.FLOOR_GIFT):
            batches.append(batch.with_color(Archetype.RIBBON, ribbon))

    logger.info(
        "Decorations: %d batches, %d ornaments",
        len(batches),
        sum(b.count for b in batches),
    )
    return batches
