"""Field generator: tree silhouette (gathered) and sphere cloud (scattered) targets.

Layout of the gathered target, by index:
  0                 fixed top-of-tree point
  1 .. trunk        tapering trunk cone, wood colored
  trunk+1 .. N-1    foliage spread over golden-angle branches

Foliage on each branch follows a lift-then-droop core line with a volume
cloud around it, then goes through the overlay rules in
``pinefield.engine.classification`` (depth -> snow -> lights).
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from pinefield.engine import palette
from pinefield.engine.classification import BranchSample, get_registry, pick_light_color
from pinefield.engine.config import ShapeProfile
from pinefield.engine.context import Category, Field
from pinefield.utils.geometry import GOLDEN_ANGLE, lobe_factor, polar_to_xz, uniform_ball
from pinefield.utils.math_helpers import unit_draw

logger = logging.getLogger(__name__)


@dataclass
class TreeArrays:
    """Gathered-target attributes before they are frozen into a Field."""

    positions: NDArray[np.float64]
    colors: NDArray[np.float64]
    sizes: NDArray[np.float64]
    categories: NDArray[np.int8]
    branch_ids: NDArray[np.int32]
    branch_has_lights: NDArray[np.bool_]


def trunk_count(count: int, profile: ShapeProfile) -> int:
    return int(np.floor(count * profile.trunk_ratio))


def branch_sizes(count: int, profile: ShapeProfile) -> NDArray[np.int64]:
    """Particles per branch. The floor share goes to every branch, the remainder
    one each to the lowest branches so no index is left unfilled."""
    foliage = max(0, count - trunk_count(count, profile) - 1)
    per_branch, remainder = divmod(foliage, profile.branch_count)
    sizes = np.full(profile.branch_count, per_branch, dtype=np.int64)
    sizes[:remainder] += 1
    return sizes


def protect_floor(y: NDArray[np.float64], profile: ShapeProfile, rng: np.random.Generator) -> None:
    """Lift anything under the floor guard, in place, with a fresh random offset."""
    low = y < profile.floor_guard
    n_low = int(low.sum())
    if n_low:
        y[low] = profile.floor_guard + unit_draw(rng.random(n_low)) * profile.floor_jitter


def _trunk(n: int, profile: ShapeProfile, rng: np.random.Generator) -> NDArray[np.float64]:
    h = unit_draw(rng.random(n)) * profile.tree_height
    taper = 1.0 - (h / profile.tree_height) ** profile.trunk_taper_exp
    r = taper * profile.trunk_radius * (0.8 + unit_draw(rng.random(n)) * 0.4)
    theta = unit_draw(rng.random(n)) * 2.0 * np.pi
    x, z = polar_to_xz(r, theta)
    pos = np.column_stack([x, profile.base_y + h, z])
    protect_floor(pos[:, 1], profile, rng)
    return pos


def _branch(b: int, n: int, profile: ShapeProfile, rng: np.random.Generator) -> tuple[BranchSample, NDArray[np.float64]]:
    """Sample and classify one branch. Returns the classified sample and (n, 3) positions."""
    p = profile
    t = b / p.branch_count  # 0 bottom -> 1 top

    root_y = p.base_y + t * p.tree_height + (unit_draw(rng.random()) - 0.5) * p.branch_root_jitter
    max_len = ((1.0 - t) ** p.branch_length_exp * p.branch_length + p.branch_min_length) * lobe_factor(
        t, p.silhouette_lobes
    )
    angle = b * GOLDEN_ANGLE
    droop_factor = max_len * p.droop_ratio * (1.1 - t * 0.3)

    has_lights = bool(unit_draw(rng.random()) < p.light_branch_probability)
    light_color = pick_light_color(rng.random())

    # Square root biases samples toward the outer shell
    d = np.sqrt(unit_draw(rng.random(n)))
    r = d * max_len
    core_x, core_z = polar_to_xz(r, angle)
    core_y = root_y + r * p.lift_slope - d**3 * droop_factor

    # Volume cloud: tighter near the tip and toward the top of the tree
    volume_radius = (0.3 + np.sin(d * np.pi) * 0.8) * (1.0 - t * 0.5)
    v_theta = unit_draw(rng.random(n)) * 2.0 * np.pi
    v_r = unit_draw(rng.random(n)) * volume_radius
    rel_y = (unit_draw(rng.random(n)) - 0.5) * volume_radius

    sample = BranchSample(
        d=d,
        rel_y=rel_y,
        volume_radius=volume_radius,
        y=core_y + rel_y,
        has_lights=has_lights,
        light_color=light_color,
        rng=rng,
        profile=p,
    )
    get_registry().apply(sample)
    protect_floor(sample.y, p, rng)

    pos = np.column_stack([core_x + np.cos(v_theta) * v_r, sample.y, core_z + np.sin(v_theta) * v_r])
    return sample, pos


def generate_tree(count: int, profile: ShapeProfile, rng: np.random.Generator) -> TreeArrays:
    """Gathered target: top point, trunk cone and classified foliage."""
    positions = np.zeros((count, 3))
    colors = np.zeros((count, 3))
    sizes = np.zeros(count)
    categories = np.full(count, Category.PINE, dtype=np.int8)
    branch_ids = np.full(count, -1, dtype=np.int32)
    has_lights = np.zeros(profile.branch_count, dtype=np.bool_)

    # Top-of-tree placeholder
    positions[0] = profile.top_position
    colors[0] = palette.TOP_POINT
    sizes[0] = profile.top_size

    n_trunk = min(trunk_count(count, profile), count - 1)
    start, stop = 1, 1 + n_trunk
    if n_trunk:
        positions[start:stop] = _trunk(n_trunk, profile, rng)
        colors[start:stop] = palette.WOOD_RGB
        sizes[start:stop] = profile.trunk_size

    cursor = stop
    for b, n in enumerate(branch_sizes(count, profile)):
        n = int(n)
        sample, pos = _branch(b, n, profile, rng)
        has_lights[b] = sample.has_lights
        if n == 0:
            continue
        sl = slice(cursor, cursor + n)
        positions[sl] = pos
        colors[sl] = sample.colors
        sizes[sl] = sample.sizes
        categories[sl] = sample.categories
        branch_ids[sl] = b
        cursor += n

    if cursor != count:
        # Branch split must account for every index
        raise RuntimeError(f"tree layout filled {cursor} of {count} particles")

    return TreeArrays(
        positions=positions,
        colors=colors,
        sizes=sizes,
        categories=categories,
        branch_ids=branch_ids,
        branch_has_lights=has_lights,
    )


def generate_scattered(count: int, radius: float, rng: np.random.Generator) -> NDArray[np.float64]:
    """Scattered target: uniform cloud inside a sphere of the given radius."""
    if count <= 0:
        raise ValueError(f"count must be positive, got {count}")
    return uniform_ball(count, radius, rng)


def generate_field(
    count: int,
    profile: ShapeProfile | None = None,
    rng: np.random.Generator | None = None,
) -> Field:
    """Build both index-aligned target configurations for ``count`` particles."""
    if count <= 0:
        raise ValueError(f"count must be positive, got {count}")
    profile = profile or ShapeProfile()
    profile.validate()
    rng = rng if rng is not None else np.random.default_rng()

    start = time.perf_counter()
    tree = generate_tree(count, profile, rng)
    scattered = generate_scattered(count, profile.scatter_radius, rng)
    phase_seeds = unit_draw(rng.random(count))

    result = Field(
        gathered=tree.positions,
        scattered=scattered,
        colors=tree.colors,
        sizes=tree.sizes,
        categories=tree.categories,
        branch_ids=tree.branch_ids,
        branch_has_lights=tree.branch_has_lights,
        phase_seeds=phase_seeds,
    )

    elapsed = (time.perf_counter() - start) * 1000
    counts = result.category_counts()
    logger.info(
        "Field: %d particles (%d trunk, %d pine, %d snow, %d light) in %.0fms",
        count,
        trunk_count(count, profile),
        counts["PINE"],
        counts["SNOW"],
        counts["LIGHT"],
        elapsed,
    )
    return result
