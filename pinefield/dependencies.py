"""FastAPI dependency injection."""

from __future__ import annotations

from functools import lru_cache

from pinefield.config import settings
from pinefield.engine.scene import Scene, create_scene


@lru_cache(maxsize=1)
def get_scene() -> Scene:
    """Process-wide scene, generated on first use and never rebuilt."""
    return create_scene(settings.pinefield_particle_count, seed=settings.pinefield_seed)
