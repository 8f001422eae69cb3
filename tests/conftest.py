"""Shared test fixtures."""

from __future__ import annotations

import numpy as np
import pytest

from pinefield.engine.config import ShapeProfile
from pinefield.engine.context import Field
from pinefield.engine.field_generator import generate_field
from pinefield.engine.scene import Scene, create_scene

# Seeds keep statistical assertions stable run to run
FIELD_SEED = 11
SCENE_SEED = 3


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(1234)


@pytest.fixture
def profile() -> ShapeProfile:
    return ShapeProfile()


@pytest.fixture(scope="session")
def field() -> Field:
    return generate_field(5000, rng=np.random.default_rng(FIELD_SEED))


@pytest.fixture
def small_field() -> Field:
    return generate_field(1000, rng=np.random.default_rng(FIELD_SEED))


@pytest.fixture
def scene() -> Scene:
    return create_scene(1500, seed=SCENE_SEED)
