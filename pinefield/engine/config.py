"""Engine configuration: tree silhouette shape and morph tuning."""

from __future__ import annotations

from dataclasses import dataclass

from pinefield.engine.context import Archetype


@dataclass(frozen=True)
class ShapeProfile:
    """Silhouette geometry and classification odds for the particle tree."""

    # Silhouette
    tree_height: float = 13.5
    base_y: float = -6.5
    floor_limit: float = -6.5
    top_position: tuple[float, float, float] = (0.0, 8.5, 0.0)
    top_size: float = 0.1

    # Trunk
    trunk_ratio: float = 0.06
    trunk_taper_exp: float = 1.2
    trunk_radius: float = 1.2
    trunk_size: float = 0.5

    # Branches
    branch_count: int = 140
    branch_length: float = 7.5
    branch_length_exp: float = 1.4
    branch_min_length: float = 0.1
    branch_root_jitter: float = 0.8
    silhouette_lobes: float = 9.0
    lift_slope: float = 0.5
    droop_ratio: float = 0.35

    # Floor protection
    floor_clearance: float = 0.5
    floor_jitter: float = 0.5

    # Classification
    inner_depth: float = 0.3  # d below this -> wood/shadow
    tip_depth: float = 0.85  # d above this -> tip highlight
    tip_mix_probability: float = 0.3
    snow_surface: float = 0.2  # fraction of volume radius
    snow_probability: float = 0.6
    snow_lift: float = 0.05
    light_branch_probability: float = 0.35
    light_probability: float = 0.5
    light_phase_window: float = 0.15
    light_spacing: float = 10.0
    light_size: float = 0.12
    light_size_jitter: float = 0.05

    # Scattered cloud
    scatter_radius: float = 40.0

    def validate(self) -> None:
        """Raise ValueError for a profile that cannot produce a field."""
        if self.tree_height <= 0:
            raise ValueError(f"tree_height must be positive, got {self.tree_height}")
        if self.branch_count <= 0:
            raise ValueError(f"branch_count must be positive, got {self.branch_count}")
        if not 0.0 < self.trunk_ratio < 1.0:
            raise ValueError(f"trunk_ratio must be in (0, 1), got {self.trunk_ratio}")
        if self.scatter_radius <= 0:
            raise ValueError(f"scatter_radius must be positive, got {self.scatter_radius}")
        for name in (
            "tip_mix_probability",
            "snow_probability",
            "light_branch_probability",
            "light_probability",
            "light_phase_window",
        ):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be in [0, 1], got {value}")
        if not 0.0 <= self.inner_depth <= self.tip_depth <= 1.0:
            raise ValueError("depth thresholds must satisfy 0 <= inner_depth <= tip_depth <= 1")

    @property
    def floor_guard(self) -> float:
        """Lowest height a generated particle may sit at."""
        return self.floor_limit + self.floor_clearance


@dataclass(frozen=True)
class MorphConfig:
    """Per-tick interpolation and procedural motion constants."""

    gather_speed: float = 3.0
    scatter_speed: float = 2.5

    # Wind on the gathered target: amplitude = base + |y + offset| * gain
    wind_base: float = 0.01
    wind_height_gain: float = 0.001
    wind_height_offset: float = 10.0
    wind_freq_x: float = 1.0
    wind_freq_z: float = 0.8
    wind_phase_y: float = 0.3

    # Ornaments
    tree_push: float = 3.5
    tree_push_swing: float = 1.5
    tree_push_freq: float = 1.5
    spin_x: float = 1.0
    spin_z: float = 0.5
    floor_push: float = 1.6
    wobble_amp: float = 0.05
    wobble_freq_z: float = 1.5
    wobble_freq_y: float = 0.5
    wobble_index_z: float = 10.0
    wobble_index_y: float = 5.0

    # Group orientation
    orientation_blend: float = 0.1
    pitch_damping: float = 0.2

    # Top star
    star_gathered_scale: float = 0.85
    star_scattered_scale: float = 0.1
    star_speed: float = 3.0

    def validate(self) -> None:
        if self.gather_speed <= 0 or self.scatter_speed <= 0:
            raise ValueError("morph speeds must be positive")
        if not 0.0 < self.orientation_blend <= 1.0:
            raise ValueError(f"orientation_blend must be in (0, 1], got {self.orientation_blend}")


DEFAULT_ORNAMENT_COUNTS: dict[Archetype, int] = {
    Archetype.BEAR: 35,
    Archetype.STAR: 40,
    Archetype.CANDY_CANE: 50,
    Archetype.BULB: 60,
    Archetype.GIFT_BOX: 40,
    Archetype.FLOOR_GIFT: 30,
}
