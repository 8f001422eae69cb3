"""API response models."""

from __future__ import annotations

from pydantic import BaseModel, Field

from pinefield.engine.context import GestureMode


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str = "0.1.0"
    particle_count: int = 0
    ornament_batches: int = 0


class SceneResponse(BaseModel):
    mode: GestureMode
    yaw: float
    pitch: float
    star_scale: float
    elapsed: float
    ticks: int
    particle_count: int
    ornament_count: int
    focused: bool


class ParticlesResponse(BaseModel):
    count: int
    stride: int
    positions: list[list[float]] = Field(default_factory=list)
    colors: list[list[float]] = Field(default_factory=list)
    sizes: list[float] = Field(default_factory=list)
    categories: list[int] = Field(default_factory=list)
    phase_seeds: list[float] = Field(default_factory=list)


class OrnamentPoseModel(BaseModel):
    archetype: str
    zone: str
    positions: list[list[float]] = Field(default_factory=list)
    rotations: list[list[float]] = Field(default_factory=list)
    scales: list[float] = Field(default_factory=list)
    colors: list[list[float]] = Field(default_factory=list)


class OrnamentsResponse(BaseModel):
    mode: GestureMode
    elapsed: float
    star_scale: float
    group_rotation: list[list[float]] = Field(default_factory=list)
    batches: list[OrnamentPoseModel] = Field(default_factory=list)
