"""Leaf-node geometry helpers. No engine imports."""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray
from scipy.spatial.transform import Rotation

# Golden angle in radians: pi * (3 - sqrt(5)).
GOLDEN_ANGLE = float(np.pi * (3.0 - np.sqrt(5.0)))


def polar_to_xz(radius: NDArray[np.float64], angle: NDArray[np.float64]) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    """Polar coordinates in the ground plane -> (x, z)."""
    return np.cos(angle) * radius, np.sin(angle) * radius


def uniform_ball(count: int, radius: float, rng: np.random.Generator) -> NDArray[np.float64]:
    """Uniform points inside a ball: r = R * cbrt(U), theta = U(0, 2pi), phi = acos(2U - 1)."""
    r = radius * np.cbrt(rng.random(count))
    theta = rng.random(count) * 2.0 * np.pi
    phi = np.arccos(np.clip(2.0 * rng.random(count) - 1.0, -1.0, 1.0))
    out = np.empty((count, 3), dtype=np.float64)
    out[:, 0] = r * np.sin(phi) * np.cos(theta)
    out[:, 1] = r * np.sin(phi) * np.sin(theta)
    out[:, 2] = r * np.cos(phi)
    return out


def lobe_factor(t: NDArray[np.float64] | float, lobes: float) -> NDArray[np.float64] | float:
    """Scalloped silhouette modulation: 0.85 + 0.25 * sin(lobes * pi * t)."""
    return 0.85 + 0.25 * np.sin(t * np.pi * lobes)


def normalize_rows(vectors: NDArray[np.float64]) -> NDArray[np.float64]:
    """Unit vectors per row. Zero rows stay zero."""
    norms = np.linalg.norm(vectors, axis=1, keepdims=True)
    return np.divide(vectors, norms, out=np.zeros_like(vectors), where=norms > 1e-12)


def euler_matrices(rotations: NDArray[np.float64]) -> NDArray[np.float64]:
    """(M, 3) intrinsic XYZ Euler angles -> (M, 3, 3) rotation matrices."""
    if len(rotations) == 0:
        return np.zeros((0, 3, 3))
    return Rotation.from_euler("XYZ", rotations).as_matrix()


def compose_matrices(
    positions: NDArray[np.float64],
    rotations: NDArray[np.float64],
    scales: NDArray[np.float64],
) -> NDArray[np.float64]:
    """Translation * Rotation * uniform Scale, as (M, 4, 4) instance matrices."""
    m = len(positions)
    out = np.zeros((m, 4, 4), dtype=np.float64)
    out[:, :3, :3] = euler_matrices(rotations) * scales[:, None, None]
    out[:, :3, 3] = positions
    out[:, 3, 3] = 1.0
    return out


def radial_xz(points: NDArray[np.float64]) -> NDArray[np.float64]:
    """Distance from the vertical axis."""
    return np.sqrt(points[:, 0] ** 2 + points[:, 2] ** 2)
