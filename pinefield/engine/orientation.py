"""Orientation smoother: group yaw/pitch chasing an external target."""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray
from scipy.spatial.transform import Rotation

from pinefield.engine.context import OrientationTarget
from pinefield.utils.math_helpers import lerp


class OrientationSmoother:
    """Exponential approach of (yaw, pitch) toward a target, one step per tick.

    Pitch is damped before blending so vertical hand motion tilts the scene
    less than horizontal motion turns it.
    """

    def __init__(self, blend: float = 0.1, pitch_damping: float = 0.2) -> None:
        if not 0.0 < blend <= 1.0:
            raise ValueError(f"blend must be in (0, 1], got {blend}")
        self.blend = blend
        self.pitch_damping = pitch_damping
        self.yaw = 0.0
        self.pitch = 0.0

    def step(self, target: OrientationTarget) -> tuple[float, float]:
        yaw_goal = float(target.yaw)
        pitch_goal = float(target.pitch) * self.pitch_damping
        if np.isfinite(yaw_goal):
            self.yaw = lerp(self.yaw, yaw_goal, self.blend)
        if np.isfinite(pitch_goal):
            self.pitch = lerp(self.pitch, pitch_goal, self.blend)
        return self.yaw, self.pitch

    def rotation(self) -> Rotation:
        # Pitch about X, then yaw about Y (intrinsic XYZ)
        return Rotation.from_euler("XYZ", [self.pitch, self.yaw, 0.0])

    def matrix(self) -> NDArray[np.float64]:
        """3x3 rigid rotation for the whole field and ornament group."""
        return self.rotation().as_matrix()

    def apply(self, points: NDArray[np.float64]) -> NDArray[np.float64]:
        """Rotated copy of (N, 3) points. The input is never modified."""
        return np.asarray(points, dtype=np.float64) @ self.matrix().T
