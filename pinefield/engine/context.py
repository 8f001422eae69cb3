"""Field and ornament data model shared by the generators and the morph engine.

Per-particle attributes live in index-aligned numpy arrays (struct of arrays).
Colors, sizes and categories exist once and are read by both target
configurations, so gathered and scattered targets share identity per index.
"""

from __future__ import annotations

import enum
from collections.abc import Iterator
from dataclasses import dataclass, field

import numpy as np
from numpy.typing import NDArray

from pinefield.utils.geometry import compose_matrices


class IndexAlignmentError(RuntimeError):
    """Target arrays disagree on length. Corrupts every later tick, never recovered."""


class Category(enum.IntEnum):
    PINE = 0
    SNOW = 1
    LIGHT = 2


class Zone(enum.Enum):
    TREE = "tree"
    FLOOR = "floor"


class Archetype(enum.Enum):
    BEAR = "bear"
    STAR = "star"
    CANDY_CANE = "candy_cane"
    BULB = "bulb"
    GIFT_BOX = "gift_box"
    RIBBON = "ribbon"
    FLOOR_GIFT = "floor_gift"


class GestureMode(enum.Enum):
    GATHERED = "gathered"
    SCATTERED = "scattered"

    @classmethod
    def from_gesture(cls, label: str) -> GestureMode:
        """Map a classifier label (OPEN / FIST / PINCH / IDLE) to a mode."""
        key = label.strip().upper()
        if key == "OPEN":
            return cls.SCATTERED
        if key in ("FIST", "PINCH", "IDLE"):
            return cls.GATHERED
        raise ValueError(f"Unknown gesture label: {label!r}")


@dataclass(frozen=True)
class OrientationTarget:
    """External rotation signal in radians."""

    yaw: float = 0.0
    pitch: float = 0.0


def _freeze(*arrays: NDArray) -> None:
    for arr in arrays:
        arr.flags.writeable = False


@dataclass(frozen=True)
class Particle:
    """Read-only view of one particle at one target configuration."""

    index: int
    position: tuple[float, float, float]
    color: tuple[float, float, float]
    size: float
    category: Category


@dataclass
class Field:
    """The full particle set and its two target configurations."""

    # (N, 3) tree silhouette positions
    gathered: NDArray[np.float64]
    # (N, 3) sphere cloud positions
    scattered: NDArray[np.float64]
    # (N, 3) RGB in [0, ~1.2]
    colors: NDArray[np.float64]
    # (N,) point sizes, all > 0
    sizes: NDArray[np.float64]
    # (N,) Category values
    categories: NDArray[np.int8]
    # (N,) branch index per particle, -1 for top point and trunk
    branch_ids: NDArray[np.int32]
    # (branch_count,) which branches carry a light string
    branch_has_lights: NDArray[np.bool_]
    # (N,) per-particle phase in [0, 1) for renderer flicker / glisten
    phase_seeds: NDArray[np.float64] = field(default_factory=lambda: np.empty(0))

    def __post_init__(self) -> None:
        n = len(self.gathered)
        if len(self.phase_seeds) == 0 and n > 0:
            self.phase_seeds = np.zeros(n)
        shapes = {
            "gathered": (self.gathered.shape, (n, 3)),
            "scattered": (self.scattered.shape, (n, 3)),
            "colors": (self.colors.shape, (n, 3)),
            "sizes": (self.sizes.shape, (n,)),
            "categories": (self.categories.shape, (n,)),
            "branch_ids": (self.branch_ids.shape, (n,)),
            "phase_seeds": (self.phase_seeds.shape, (n,)),
        }
        for name, (actual, expected) in shapes.items():
            if actual != expected:
                raise IndexAlignmentError(f"{name} has shape {actual}, expected {expected}")
        _freeze(
            self.gathered,
            self.scattered,
            self.colors,
            self.sizes,
            self.categories,
            self.branch_ids,
            self.branch_has_lights,
            self.phase_seeds,
        )

    @property
    def count(self) -> int:
        return len(self.gathered)

    def __len__(self) -> int:
        return self.count

    def _particle(self, i: int, positions: NDArray[np.float64]) -> Particle:
        p = positions[i]
        c = self.colors[i]
        return Particle(
            index=i,
            position=(float(p[0]), float(p[1]), float(p[2])),
            color=(float(c[0]), float(c[1]), float(c[2])),
            size=float(self.sizes[i]),
            category=Category(int(self.categories[i])),
        )

    def particle(self, i: int) -> Particle:
        """Particle i at the gathered (tree) target."""
        return self._particle(i, self.gathered)

    def scattered_particle(self, i: int) -> Particle:
        """Particle i at the scattered target. Same color/size/category as gathered."""
        return self._particle(i, self.scattered)

    def category_counts(self) -> dict[str, int]:
        counts = np.bincount(self.categories.astype(np.int64), minlength=len(Category))
        return {cat.name: int(counts[cat]) for cat in Category}


@dataclass(frozen=True)
class Ornament:
    """One decorative instance at its home transform."""

    position: tuple[float, float, float]
    rotation: tuple[float, float, float]
    scale: float
    color: tuple[float, float, float]
    archetype: Archetype
    zone: Zone


@dataclass
class OrnamentBatch:
    """Home placements for one archetype, generated once."""

    archetype: Archetype
    zone: Zone
    positions: NDArray[np.float64]  # (M, 3)
    rotations: NDArray[np.float64]  # (M, 3) Euler XYZ
    scales: NDArray[np.float64]  # (M,)
    colors: NDArray[np.float64]  # (M, 3)

    def __post_init__(self) -> None:
        m = len(self.positions)
        if (
            self.positions.shape != (m, 3)
            or self.rotations.shape != (m, 3)
            or self.scales.shape != (m,)
            or self.colors.shape != (m, 3)
        ):
            raise IndexAlignmentError(f"{self.archetype.value} batch arrays are not aligned")
        _freeze(self.positions, self.rotations, self.scales, self.colors)

    @property
    def count(self) -> int:
        return len(self.positions)

    def __len__(self) -> int:
        return self.count

    def ornament(self, i: int) -> Ornament:
        p, r, c = self.positions[i], self.rotations[i], self.colors[i]
        return Ornament(
            position=(float(p[0]), float(p[1]), float(p[2])),
            rotation=(float(r[0]), float(r[1]), float(r[2])),
            scale=float(self.scales[i]),
            color=(float(c[0]), float(c[1]), float(c[2])),
            archetype=self.archetype,
            zone=self.zone,
        )

    def __iter__(self) -> Iterator[Ornament]:
        for i in range(self.count):
            yield self.ornament(i)

    def with_color(self, archetype: Archetype, color: tuple[float, float, float]) -> OrnamentBatch:
        """Overlay batch on the same homes (shared arrays) with one flat color."""
        colors = np.tile(np.asarray(color, dtype=np.float64), (self.count, 1))
        return OrnamentBatch(
            archetype=archetype,
            zone=self.zone,
            positions=self.positions,
            rotations=self.rotations,
            scales=self.scales,
            colors=colors,
        )


@dataclass
class OrnamentPose:
    """Per-tick rendered transform of a batch, derived fresh from its homes."""

    archetype: Archetype
    zone: Zone
    positions: NDArray[np.float64]
    rotations: NDArray[np.float64]
    scales: NDArray[np.float64]
    colors: NDArray[np.float64]

    def matrices(self) -> NDArray[np.float64]:
        """(M, 4, 4) instance matrices: translate * rotate(XYZ) * scale."""
        return compose_matrices(self.positions, self.rotations, self.scales)
