"""Morph engine: per-tick chase of the selected target configuration.

There is no transition state. Every tick moves the live positions a
delta-scaled fraction of the way toward whichever target the current mode
selects, so a mode switch mid-flight just redirects the chase.

Ornaments do not chase a second target. Their rendered pose is derived
fresh every tick from the home placement, so toggling modes never drifts.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence

import numpy as np
from numpy.typing import NDArray

from pinefield.engine.config import MorphConfig
from pinefield.engine.context import Field, GestureMode, OrnamentBatch, OrnamentPose, Zone
from pinefield.utils.geometry import normalize_rows
from pinefield.utils.math_helpers import finite_or_zero

logger = logging.getLogger(__name__)


def _readonly(arr: NDArray) -> NDArray:
    view = arr.view()
    view.flags.writeable = False
    return view


class MorphEngine:
    """Owns the live particle positions and derives ornament poses."""

    def __init__(
        self,
        field: Field,
        batches: Sequence[OrnamentBatch] = (),
        config: MorphConfig | None = None,
    ) -> None:
        self.config = config or MorphConfig()
        self.config.validate()
        self.field = field
        self.batches = list(batches)

        # Sole mutable per-particle state
        self._current = np.array(field.gathered, dtype=np.float64, copy=True)
        self._target = np.empty_like(self._current)
        self._scratch = np.empty(field.count)
        self.star_scale = self.config.star_gathered_scale

        # Wind amplitude and phase depend only on the gathered height
        y = field.gathered[:, 1]
        self._wind_amp = self.config.wind_base + np.abs(y + self.config.wind_height_offset) * self.config.wind_height_gain
        self._wind_phase = y * self.config.wind_phase_y

    # --- Read-only views for the renderer ---

    @property
    def positions(self) -> NDArray[np.float64]:
        return _readonly(self._current)

    @property
    def colors(self) -> NDArray[np.float64]:
        return self.field.colors

    @property
    def sizes(self) -> NDArray[np.float64]:
        return self.field.sizes

    @property
    def categories(self) -> NDArray[np.int8]:
        return self.field.categories

    @property
    def phase_seeds(self) -> NDArray[np.float64]:
        return self.field.phase_seeds

    # --- Targets ---

    def speed(self, mode: GestureMode) -> float:
        return self.config.scatter_speed if mode is GestureMode.SCATTERED else self.config.gather_speed

    def _fill_target(self, mode: GestureMode, elapsed: float) -> NDArray[np.float64]:
        target = self._target
        if mode is GestureMode.SCATTERED:
            np.copyto(target, self.field.scattered)
            return target

        cfg = self.config
        np.copyto(target, self.field.gathered)
        # Wind sways the target on X/Z only; the live position never accumulates it
        np.add(self._wind_phase, elapsed * cfg.wind_freq_x, out=self._scratch)
        np.sin(self._scratch, out=self._scratch)
        self._scratch *= self._wind_amp
        target[:, 0] += self._scratch
        np.add(self._wind_phase, elapsed * cfg.wind_freq_z, out=self._scratch)
        np.cos(self._scratch, out=self._scratch)
        self._scratch *= self._wind_amp
        target[:, 2] += self._scratch
        return target

    def target_positions(self, mode: GestureMode, elapsed: float) -> NDArray[np.float64]:
        """Copy of the chase target for ``mode`` at time ``elapsed``."""
        return self._fill_target(mode, elapsed).copy()

    # --- Tick ---

    def step(self, mode: GestureMode, delta_time: float, elapsed_time: float) -> float:
        """Advance live positions toward the mode's target. Returns the blend used."""
        dt = finite_or_zero(delta_time)
        if dt != delta_time:
            logger.warning("Rejected delta_time %r, holding positions this tick", delta_time)
        elapsed = float(elapsed_time) if math.isfinite(elapsed_time) else 0.0

        alpha = min(self.speed(mode) * dt, 1.0)
        if alpha > 0.0:
            target = self._fill_target(mode, elapsed)
            # current = lerp(current, target, alpha), in place
            target -= self._current
            target *= alpha
            self._current += target

        star_goal = self.config.star_scattered_scale if mode is GestureMode.SCATTERED else self.config.star_gathered_scale
        star_alpha = min(dt * self.config.star_speed, 1.0)
        self.star_scale += (star_goal - self.star_scale) * star_alpha
        return alpha

    def reset(self) -> None:
        """Snap live positions back onto the gathered target."""
        np.copyto(self._current, self.field.gathered)
        self.star_scale = self.config.star_gathered_scale

    # --- Ornaments ---

    def ornament_pose(self, batch: OrnamentBatch, mode: GestureMode, elapsed: float) -> OrnamentPose:
        cfg = self.config
        positions = np.array(batch.positions, copy=True)
        rotations = np.array(batch.rotations, copy=True)
        idx = np.arange(batch.count, dtype=np.float64)

        if mode is GestureMode.SCATTERED:
            if batch.zone is Zone.TREE:
                push = cfg.tree_push + np.sin(elapsed * cfg.tree_push_freq + idx) * cfg.tree_push_swing
                positions += normalize_rows(batch.positions) * push[:, None]
                rotations[:, 0] += elapsed * cfg.spin_x
                rotations[:, 2] += elapsed * cfg.spin_z
            else:
                positions[:, 0] *= cfg.floor_push
                positions[:, 2] *= cfg.floor_push
        elif batch.zone is Zone.TREE:
            rotations[:, 2] += np.sin(elapsed * cfg.wobble_freq_z + idx * cfg.wobble_index_z) * cfg.wobble_amp
            rotations[:, 1] += np.cos(elapsed * cfg.wobble_freq_y + idx * cfg.wobble_index_y) * cfg.wobble_amp

        return OrnamentPose(
            archetype=batch.archetype,
            zone=batch.zone,
            positions=positions,
            rotations=rotations,
            scales=batch.scales,
            colors=batch.colors,
        )

    def ornament_poses(self, mode: GestureMode, elapsed: float) -> list[OrnamentPose]:
        return [self.ornament_pose(b, mode, elapsed) for b in self.batches]
