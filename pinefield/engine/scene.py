"""Scene orchestrator: the single tick entry point the host render loop drives."""

from __future__ import annotations

import logging
import math
import threading
import time
from dataclasses import dataclass

import numpy as np

from pinefield.engine.config import MorphConfig, ShapeProfile
from pinefield.engine.context import Archetype, Field, GestureMode, OrientationTarget, OrnamentBatch, OrnamentPose
from pinefield.engine.decorations import generate_decorations
from pinefield.engine.field_generator import generate_field
from pinefield.engine.morph import MorphEngine
from pinefield.engine.orientation import OrientationSmoother

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SceneSnapshot:
    mode: GestureMode
    yaw: float
    pitch: float
    star_scale: float
    elapsed: float
    ticks: int
    particle_count: int
    ornament_count: int
    focused: bool


class Scene:
    """Holds the morph engine, the orientation smoother and the external signals.

    External collaborators write signals (mode, orientation target) at any
    cadence; ``tick`` reads them once per frame. Not reentrant.
    """

    def __init__(
        self,
        field: Field,
        batches: list[OrnamentBatch] | None = None,
        config: MorphConfig | None = None,
    ) -> None:
        self.config = config or MorphConfig()
        self.engine = MorphEngine(field, batches or [], self.config)
        self.orientation = OrientationSmoother(self.config.orientation_blend, self.config.pitch_damping)
        self.mode = GestureMode.GATHERED
        self.target = OrientationTarget()
        self.elapsed = 0.0
        self.ticks = 0
        self.focused = False
        self._tick_lock = threading.Lock()

    @property
    def field(self) -> Field:
        return self.engine.field

    @property
    def batches(self) -> list[OrnamentBatch]:
        return self.engine.batches

    # --- External signals ---

    def set_mode(self, mode: GestureMode) -> None:
        if self.focused:
            logger.debug("Focused, ignoring mode %s", mode.value)
            return
        self.mode = mode

    def set_gesture(self, label: str) -> GestureMode:
        """Apply a classifier label. Unknown labels raise ValueError."""
        self.set_mode(GestureMode.from_gesture(label))
        return self.mode

    def set_orientation(self, yaw: float, pitch: float) -> None:
        self.target = OrientationTarget(yaw=float(yaw), pitch=float(pitch))

    def focus(self, on: bool) -> None:
        """Focus on a single item: mode is pinned to GATHERED and gestures are ignored."""
        if on:
            self.mode = GestureMode.GATHERED
        self.focused = bool(on)

    # --- Tick ---

    def tick(self, delta_time: float, elapsed_time: float) -> None:
        if not self._tick_lock.acquire(blocking=False):
            raise RuntimeError("Scene.tick is not reentrant")
        try:
            elapsed = float(elapsed_time)
            if not math.isfinite(elapsed) or elapsed < self.elapsed:
                logger.warning("elapsed_time %r went backwards, holding %.3f", elapsed_time, self.elapsed)
                elapsed = self.elapsed
            self.elapsed = elapsed
            self.engine.step(self.mode, delta_time, elapsed)
            self.orientation.step(self.target)
            self.ticks += 1
        finally:
            self._tick_lock.release()

    def run(self, frames: int, delta_time: float) -> None:
        """Drive ``frames`` ticks at a fixed delta (headless host loop)."""
        for _ in range(frames):
            self.tick(delta_time, self.elapsed + delta_time)

    # --- Outputs ---

    def ornament_poses(self) -> list[OrnamentPose]:
        return self.engine.ornament_poses(self.mode, self.elapsed)

    def snapshot(self) -> SceneSnapshot:
        return SceneSnapshot(
            mode=self.mode,
            yaw=self.orientation.yaw,
            pitch=self.orientation.pitch,
            star_scale=self.engine.star_scale,
            elapsed=self.elapsed,
            ticks=self.ticks,
            particle_count=self.field.count,
            ornament_count=sum(b.count for b in self.batches),
            focused=self.focused,
        )


def create_scene(
    particle_count: int,
    seed: int | None = None,
    profile: ShapeProfile | None = None,
    config: MorphConfig | None = None,
    ornament_counts: dict[Archetype, int] | None = None,
) -> Scene:
    """Factory: generate the field and decorations once, wrap them in a Scene."""
    start = time.perf_counter()
    rng = np.random.default_rng(seed)
    field = generate_field(particle_count, profile, rng)
    batches = generate_decorations(ornament_counts, profile, rng)
    scene = Scene(field, batches, config)
    logger.info("Scene ready in %.0fms", (time.perf_counter() - start) * 1000)
    return scene
