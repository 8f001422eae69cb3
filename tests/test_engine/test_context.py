"""Tests for the field / ornament data model."""

from __future__ import annotations

import numpy as np
import pytest

from pinefield.engine.context import (
    Archetype,
    Category,
    Field,
    GestureMode,
    IndexAlignmentError,
    OrnamentBatch,
    OrnamentPose,
    Zone,
)


def _field_arrays(n: int) -> dict:
    return dict(
        gathered=np.zeros((n, 3)),
        scattered=np.ones((n, 3)),
        colors=np.full((n, 3), 0.5),
        sizes=np.full(n, 0.1),
        categories=np.zeros(n, dtype=np.int8),
        branch_ids=np.full(n, -1, dtype=np.int32),
        branch_has_lights=np.zeros(4, dtype=bool),
    )


def _batch(m: int = 3) -> OrnamentBatch:
    return OrnamentBatch(
        archetype=Archetype.GIFT_BOX,
        zone=Zone.TREE,
        positions=np.arange(m * 3, dtype=np.float64).reshape(m, 3),
        rotations=np.zeros((m, 3)),
        scales=np.full(m, 0.5),
        colors=np.zeros((m, 3)),
    )


def test_field_defaults_phase_seeds():
    f = Field(**_field_arrays(4))
    assert f.count == len(f) == 4
    assert np.array_equal(f.phase_seeds, np.zeros(4))


@pytest.mark.parametrize("name", ["scattered", "colors", "sizes", "categories"])
def test_misaligned_field_rejected(name):
    arrays = _field_arrays(4)
    arrays[name] = arrays[name][:3]
    with pytest.raises(IndexAlignmentError):
        Field(**arrays)


def test_category_counts():
    arrays = _field_arrays(5)
    arrays["categories"] = np.array([0, 1, 1, 2, 0], dtype=np.int8)
    assert Field(**arrays).category_counts() == {"PINE": 2, "SNOW": 2, "LIGHT": 1}


def test_particle_view():
    p = Field(**_field_arrays(2)).scattered_particle(1)
    assert p.index == 1
    assert p.position == (1.0, 1.0, 1.0)
    assert p.category is Category.PINE


@pytest.mark.parametrize(
    "label, mode",
    [(" open ", GestureMode.SCATTERED), ("Fist", GestureMode.GATHERED), ("idle", GestureMode.GATHERED)],
)
def test_mode_from_gesture(label, mode):
    assert GestureMode.from_gesture(label) is mode


def test_mode_from_unknown_gesture():
    with pytest.raises(ValueError):
        GestureMode.from_gesture("THUMBS_UP")


def test_batch_iteration():
    ornaments = list(_batch())
    assert len(ornaments) == 3
    assert ornaments[1].position == (3.0, 4.0, 5.0)
    assert ornaments[1].archetype is Archetype.GIFT_BOX
    assert ornaments[1].scale == 0.5


def test_misaligned_batch_rejected():
    with pytest.raises(IndexAlignmentError):
        OrnamentBatch(
            archetype=Archetype.BULB,
            zone=Zone.TREE,
            positions=np.zeros((3, 3)),
            rotations=np.zeros((3, 3)),
            scales=np.zeros(2),
            colors=np.zeros((3, 3)),
        )


def test_with_color_shares_homes():
    base = _batch()
    ribbon = base.with_color(Archetype.RIBBON, (1.0, 0.5, 0.0))
    assert ribbon.archetype is Archetype.RIBBON
    assert ribbon.positions is base.positions
    assert ribbon.scales is base.scales
    assert np.allclose(ribbon.colors, [1.0, 0.5, 0.0])


def test_pose_matrices_apply_scale():
    pose = OrnamentPose(
        archetype=Archetype.STAR,
        zone=Zone.TREE,
        positions=np.array([[1.0, 2.0, 3.0]]),
        rotations=np.zeros((1, 3)),
        scales=np.array([2.0]),
        colors=np.zeros((1, 3)),
    )
    m = pose.matrices()[0]
    assert np.allclose(m[:3, :3], 2.0 * np.eye(3))
    assert np.allclose(m[:3, 3], [1.0, 2.0, 3.0])
    assert m[3, 3] == 1.0
