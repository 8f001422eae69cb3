"""API request models."""

from __future__ import annotations

from pydantic import BaseModel, Field, model_validator

from pinefield.engine.context import GestureMode


class GestureRequest(BaseModel):
    gesture: str | None = Field(default=None, description="Classifier label: OPEN, FIST, PINCH or IDLE")
    mode: GestureMode | None = Field(default=None, description="Explicit mode, bypassing label mapping")

    @model_validator(mode="after")
    def _one_of(self) -> GestureRequest:
        if (self.gesture is None) == (self.mode is None):
            raise ValueError("Provide exactly one of 'gesture' or 'mode'")
        return self


class OrientationRequest(BaseModel):
    yaw: float = Field(..., description="Target yaw in radians", allow_inf_nan=False)
    pitch: float = Field(default=0.0, description="Target pitch in radians", allow_inf_nan=False)


class TickRequest(BaseModel):
    delta_time: float = Field(..., description="Seconds since the previous tick")
    elapsed_time: float = Field(..., description="Seconds since start, non-decreasing")
    frames: int = Field(default=1, ge=1, le=10000, description="Repeat the tick this many times")


class FocusRequest(BaseModel):
    focused: bool
