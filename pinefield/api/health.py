"""Health check."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from pinefield import __version__
from pinefield.dependencies import get_scene
from pinefield.engine.scene import Scene
from pinefield.models.responses import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health(scene: Scene = Depends(get_scene)) -> HealthResponse:
    return HealthResponse(
        status="ok",
        version=__version__,
        particle_count=scene.field.count,
        ornament_batches=len(scene.batches),
    )
