"""Scene endpoints: signals in (gesture, orientation, tick), frame data out."""

from __future__ import annotations

import numpy as np
from fastapi import APIRouter, Depends, HTTPException, Query

from pinefield.engine.context import GestureMode
from pinefield.engine.scene import Scene
from pinefield.dependencies import get_scene
from pinefield.models.requests import FocusRequest, GestureRequest, OrientationRequest, TickRequest
from pinefield.models.responses import OrnamentPoseModel, OrnamentsResponse, ParticlesResponse, SceneResponse

router = APIRouter(prefix="/scene")


def _scene_response(scene: Scene) -> SceneResponse:
    snap = scene.snapshot()
    return SceneResponse(
        mode=snap.mode,
        yaw=snap.yaw,
        pitch=snap.pitch,
        star_scale=snap.star_scale,
        elapsed=snap.elapsed,
        ticks=snap.ticks,
        particle_count=snap.particle_count,
        ornament_count=snap.ornament_count,
        focused=snap.focused,
    )


@router.get("", response_model=SceneResponse)
def get_state(scene: Scene = Depends(get_scene)) -> SceneResponse:
    return _scene_response(scene)


@router.get("/particles", response_model=ParticlesResponse)
def get_particles(
    stride: int = Query(default=1, ge=1, description="Return every k-th particle"),
    scene: Scene = Depends(get_scene),
) -> ParticlesResponse:
    engine = scene.engine
    sl = slice(None, None, stride)
    return ParticlesResponse(
        count=scene.field.count,
        stride=stride,
        positions=np.round(engine.positions[sl], 4).tolist(),
        colors=np.round(engine.colors[sl], 4).tolist(),
        sizes=np.round(engine.sizes[sl], 4).tolist(),
        categories=engine.categories[sl].astype(int).tolist(),
        phase_seeds=np.round(engine.phase_seeds[sl], 4).tolist(),
    )


@router.get("/ornaments", response_model=OrnamentsResponse)
def get_ornaments(scene: Scene = Depends(get_scene)) -> OrnamentsResponse:
    batches = [
        OrnamentPoseModel(
            archetype=pose.archetype.value,
            zone=pose.zone.value,
            positions=np.round(pose.positions, 4).tolist(),
            rotations=np.round(pose.rotations, 4).tolist(),
            scales=np.round(pose.scales, 4).tolist(),
            colors=np.round(pose.colors, 4).tolist(),
        )
        for pose in scene.ornament_poses()
    ]
    return OrnamentsResponse(
        mode=scene.mode,
        elapsed=scene.elapsed,
        star_scale=scene.engine.star_scale,
        group_rotation=scene.orientation.matrix().tolist(),
        batches=batches,
    )


@router.post("/gesture", response_model=SceneResponse)
def post_gesture(req: GestureRequest, scene: Scene = Depends(get_scene)) -> SceneResponse:
    if req.mode is not None:
        scene.set_mode(GestureMode(req.mode))
    else:
        try:
            scene.set_gesture(req.gesture or "")
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
    return _scene_response(scene)


@router.post("/orientation", response_model=SceneResponse)
def post_orientation(req: OrientationRequest, scene: Scene = Depends(get_scene)) -> SceneResponse:
    scene.set_orientation(req.yaw, req.pitch)
    return _scene_response(scene)


@router.post("/focus", response_model=SceneResponse)
def post_focus(req: FocusRequest, scene: Scene = Depends(get_scene)) -> SceneResponse:
    scene.focus(req.focused)
    return _scene_response(scene)


@router.post("/tick", response_model=SceneResponse)
def post_tick(req: TickRequest, scene: Scene = Depends(get_scene)) -> SceneResponse:
    try:
        scene.tick(req.delta_time, req.elapsed_time)
        if req.frames > 1:
            scene.run(req.frames - 1, req.delta_time)
    except RuntimeError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return _scene_response(scene)
