"""Overlay rule registry: every classification rule is a function registered via decorator.

Usage:
    @overlay(order=20, name="snow")
    def snow(sample: BranchSample) -> None:
        mask = sample.unclaimed() & (sample.rel_y > ...)
        sample.categories[mask] = Category.SNOW

Rules run in ascending order. A rule only claims particles that are still
PINE, so at most one overlay lands on any particle.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable

import numpy as np
from numpy.typing import NDArray

from pinefield.engine import palette
from pinefield.engine.config import ShapeProfile
from pinefield.engine.context import Category
from pinefield.utils.math_helpers import unit_draw, weighted_index

logger = logging.getLogger(__name__)


@dataclass
class BranchSample:
    """Working arrays for the particles of one branch."""

    # Distance fraction along the branch, 0 at trunk, 1 at tip
    d: NDArray[np.float64]
    # Vertical offset from the branch core line
    rel_y: NDArray[np.float64]
    # Local volume radius around the core line
    volume_radius: NDArray[np.float64]
    # Final heights (snow nudges these)
    y: NDArray[np.float64]
    has_lights: bool
    light_color: tuple[float, float, float]
    rng: np.random.Generator
    profile: ShapeProfile
    categories: NDArray[np.int8] = field(default_factory=lambda: np.empty(0, dtype=np.int8))
    colors: NDArray[np.float64] = field(default_factory=lambda: np.empty((0, 3)))
    sizes: NDArray[np.float64] = field(default_factory=lambda: np.empty(0))

    def __post_init__(self) -> None:
        n = len(self.d)
        if len(self.categories) != n:
            self.categories = np.full(n, Category.PINE, dtype=np.int8)
        if len(self.colors) != n:
            self.colors = np.tile(np.asarray(palette.MID_RGB), (n, 1))
        if len(self.sizes) != n:
            self.sizes = np.zeros(n)

    def __len__(self) -> int:
        return len(self.d)

    def draw(self) -> NDArray[np.float64]:
        """Fresh uniform draws for every particle, clamped into [0, 1)."""
        return unit_draw(self.rng.random(len(self)))

    def unclaimed(self) -> NDArray[np.bool_]:
        return self.categories == Category.PINE


@dataclass
class OverlayRule:
    order: int
    name: str
    fn: Callable[[BranchSample], None]
    description: str = ""


class OverlayRegistry:
    """Ordered set of classification rules."""

    def __init__(self) -> None:
        self._rules: dict[str, OverlayRule] = {}

    def register(self, rule: OverlayRule) -> None:
        if rule.name in self._rules:
            raise ValueError(f"Duplicate overlay rule: {rule.name}")
        if any(r.order == rule.order for r in self._rules.values()):
            raise ValueError(f"Overlay order {rule.order} already taken")
        self._rules[rule.name] = rule
        logger.debug("Registered overlay %s (order %d)", rule.name, rule.order)

    def get(self, name: str) -> OverlayRule:
        return self._rules[name]

    def ordered(self) -> list[OverlayRule]:
        return sorted(self._rules.values(), key=lambda r: r.order)

    def apply(self, sample: BranchSample) -> BranchSample:
        for rule in self.ordered():
            rule.fn(sample)
        return sample

    @property
    def count(self) -> int:
        return len(self._rules)


# Module-level singleton
_registry = OverlayRegistry()


def get_registry() -> OverlayRegistry:
    return _registry


def overlay(*, order: int, name: str, description: str = ""):
    """Decorator to register a classification rule."""

    def decorator(fn: Callable[[BranchSample], None]):
        _registry.register(OverlayRule(order=order, name=name, fn=fn, description=description))
        return fn

    return decorator


def pick_light_color(draw: float) -> tuple[float, float, float]:
    """Weighted light color: red 40%, gold / orange / blue 20% each."""
    idx = int(weighted_index(np.array([draw]), palette.LIGHT_WEIGHTS)[0])
    return palette.LIGHT_COLORS[idx]


@overlay(order=10, name="depth", description="Wood/shadow core, mid body, tip highlights")
def depth_shading(sample: BranchSample) -> None:
    p = sample.profile
    n = len(sample)
    sample.sizes[:] = sample.draw() * 0.08 + 0.04

    inner = sample.d < p.inner_depth
    tips = sample.d > p.tip_depth
    mid = ~inner & ~tips

    wood_flip = sample.draw() > 0.5
    tip_flip = sample.draw() < p.tip_mix_probability

    colors = np.empty((n, 3))
    colors[:] = palette.MID_RGB
    colors[inner & wood_flip] = palette.WOOD_RGB
    colors[inner & ~wood_flip] = palette.SHADOW_RGB
    colors[tips] = palette.TIP_RGB
    colors[mid & tip_flip] = palette.TIP_RGB
    sample.colors[:] = colors

    sample.sizes[inner] *= 1.2
    sample.sizes[tips] *= 0.8


@overlay(order=20, name="snow", description="Snow settles on the upper surface of a branch")
def snow_overlay(sample: BranchSample) -> None:
    p = sample.profile
    top_surface = sample.rel_y > sample.volume_radius * p.snow_surface
    mask = sample.unclaimed() & top_surface & (sample.draw() < p.snow_probability)
    if not mask.any():
        return
    sample.categories[mask] = Category.SNOW
    sample.colors[mask] = palette.SNOW_RGB
    sample.sizes[mask] *= 1.1
    sample.y[mask] += p.snow_lift


@overlay(order=30, name="lights", description="Periodic light nodes along lit branches")
def light_overlay(sample: BranchSample) -> None:
    if not sample.has_lights:
        return
    p = sample.profile
    phase = np.mod(sample.d * p.light_spacing, 1.0)
    mask = sample.unclaimed() & (phase < p.light_phase_window) & (sample.draw() < p.light_probability)
    if not mask.any():
        return
    sample.categories[mask] = Category.LIGHT
    sample.colors[mask] = sample.light_color
    sample.sizes[mask] = p.light_size + sample.draw()[mask] * p.light_size_jitter
