"""Tests for the morph engine chase and ornament poses."""

from __future__ import annotations

import logging

import numpy as np
import pytest

from pinefield.engine.context import GestureMode, Zone
from pinefield.engine.decorations import generate_decorations
from pinefield.engine.morph import MorphEngine

DT = 0.016


@pytest.fixture
def engine(small_field, rng) -> MorphEngine:
    return MorphEngine(small_field, generate_decorations(rng=rng))


def _mean_dist(a, b) -> float:
    return float(np.linalg.norm(a - b, axis=1).mean())


def test_starts_on_gathered_and_is_read_only(engine, small_field):
    assert np.array_equal(engine.positions, small_field.gathered)
    with pytest.raises(ValueError):
        engine.positions[0, 0] = 5.0


def test_step_strictly_approaches_fixed_target(engine):
    target = engine.target_positions(GestureMode.SCATTERED, 0.0)
    prev = np.linalg.norm(engine.positions - target, axis=1)
    for _ in range(5):
        engine.step(GestureMode.SCATTERED, DT, 0.0)
        dist = np.linalg.norm(engine.positions - target, axis=1)
        moving = prev > 1e-12
        assert np.all(dist[moving] < prev[moving])
        prev = dist


def test_scatter_converges(engine, small_field):
    elapsed = 0.0
    for _ in range(500):
        elapsed += DT
        engine.step(GestureMode.SCATTERED, DT, elapsed)
    assert _mean_dist(engine.positions, small_field.scattered) < 0.01
    assert _mean_dist(engine.positions, small_field.gathered) > 20.0


def test_gather_reverses_scatter(engine, small_field):
    for _ in range(500):
        engine.step(GestureMode.SCATTERED, DT, 1.0)
    for _ in range(500):
        engine.step(GestureMode.GATHERED, DT, 1.0)
    target = engine.target_positions(GestureMode.GATHERED, 1.0)
    assert np.abs(engine.positions - target).max() < 1e-3
    # Wind keeps the live tree within a few hundredths of the rest pose
    assert np.abs(engine.positions - small_field.gathered).max() < 0.05


def test_mode_switch_mid_flight_redirects(engine, small_field):
    for _ in range(10):
        engine.step(GestureMode.SCATTERED, DT, 0.0)
    before = _mean_dist(engine.positions, small_field.gathered)
    engine.step(GestureMode.GATHERED, DT, 0.0)
    assert _mean_dist(engine.positions, small_field.gathered) < before


@pytest.mark.parametrize("bad_dt", [float("nan"), float("inf"), -0.5])
def test_bad_delta_holds_positions(engine, caplog, bad_dt):
    before = np.array(engine.positions)
    with caplog.at_level(logging.WARNING, logger="pinefield.engine.morph"):
        alpha = engine.step(GestureMode.SCATTERED, bad_dt, 0.0)
    assert alpha == 0.0
    assert np.array_equal(engine.positions, before)
    assert "Rejected delta_time" in caplog.text


def test_large_delta_snaps_without_overshoot(engine, small_field):
    alpha = engine.step(GestureMode.SCATTERED, 10.0, 0.0)
    assert alpha == 1.0
    assert np.allclose(engine.positions, small_field.scattered)


def test_speeds_per_mode(engine):
    assert engine.step(GestureMode.GATHERED, 0.1, 0.0) == pytest.approx(0.3)
    assert engine.step(GestureMode.SCATTERED, 0.1, 0.0) == pytest.approx(0.25)


def test_wind_only_sways_gathered_xz(engine, small_field):
    gathered = engine.target_positions(GestureMode.GATHERED, 2.3)
    assert np.array_equal(gathered[:, 1], small_field.gathered[:, 1])
    sway = gathered - small_field.gathered
    assert np.abs(sway[:, [0, 2]]).max() > 0.0
    # amplitude = 0.01 + |y + 10| * 0.001, and y stays below 8.5
    assert np.abs(sway).max() <= 0.0285 + 1e-9

    scattered = engine.target_positions(GestureMode.SCATTERED, 2.3)
    assert np.array_equal(scattered, small_field.scattered)


def test_target_positions_returns_copy(engine):
    t = engine.target_positions(GestureMode.GATHERED, 0.0)
    t[:] = 0.0
    assert not np.array_equal(engine.target_positions(GestureMode.GATHERED, 0.0), t)


def test_reset(engine, small_field):
    engine.step(GestureMode.SCATTERED, 10.0, 0.0)
    engine.reset()
    assert np.array_equal(engine.positions, small_field.gathered)
    assert engine.star_scale == engine.config.star_gathered_scale


def test_star_scale_follows_mode(engine):
    start = engine.star_scale
    engine.step(GestureMode.SCATTERED, 0.1, 0.0)
    assert engine.config.star_scattered_scale < engine.star_scale < start


def test_ornament_homes_never_drift(engine):
    homes = [np.array(b.positions) for b in engine.batches]
    for t in np.linspace(0.0, 20.0, 15):
        engine.ornament_poses(GestureMode.SCATTERED, float(t))
        engine.ornament_poses(GestureMode.GATHERED, float(t))
    for batch, home in zip(engine.batches, homes):
        assert np.array_equal(batch.positions, home)

    a = engine.ornament_poses(GestureMode.GATHERED, 3.0)
    b = engine.ornament_poses(GestureMode.GATHERED, 3.0)
    for pa, pb in zip(a, b):
        assert np.array_equal(pa.positions, pb.positions)
        assert np.array_equal(pa.rotations, pb.rotations)


def test_floor_ornaments_push_outward_when_scattered(engine):
    floor = [b for b in engine.batches if b.zone is Zone.FLOOR][0]
    pose = engine.ornament_pose(floor, GestureMode.SCATTERED, 4.0)
    assert np.allclose(pose.positions[:, [0, 2]], floor.positions[:, [0, 2]] * 1.6)
    assert np.array_equal(pose.positions[:, 1], floor.positions[:, 1])
    assert np.array_equal(pose.rotations, floor.rotations)


def test_floor_ornaments_rigid_when_gathered(engine):
    floor = [b for b in engine.batches if b.zone is Zone.FLOOR][0]
    pose = engine.ornament_pose(floor, GestureMode.GATHERED, 4.0)
    assert np.array_equal(pose.positions, floor.positions)
    assert np.array_equal(pose.rotations, floor.rotations)


def test_tree_ornaments_push_and_spin_when_scattered(engine):
    tree = [b for b in engine.batches if b.zone is Zone.TREE][0]
    t = 2.0
    pose = engine.ornament_pose(tree, GestureMode.SCATTERED, t)
    push = np.linalg.norm(pose.positions - tree.positions, axis=1)
    assert push.min() >= 2.0 - 1e-9
    assert push.max() <= 5.0 + 1e-9
    assert np.allclose(pose.rotations[:, 0] - tree.rotations[:, 0], t)
    assert np.allclose(pose.rotations[:, 2] - tree.rotations[:, 2], 0.5 * t)


def test_tree_ornaments_wobble_when_gathered(engine):
    tree = [b for b in engine.batches if b.zone is Zone.TREE][0]
    pose = engine.ornament_pose(tree, GestureMode.GATHERED, 7.5)
    assert np.array_equal(pose.positions, tree.positions)
    wobble = pose.rotations - tree.rotations
    assert np.array_equal(wobble[:, 0], np.zeros(tree.count))
    assert np.abs(wobble).max() <= 0.05 + 1e-12


def test_pose_matrices(engine):
    pose = engine.ornament_poses(GestureMode.GATHERED, 0.0)[0]
    m = pose.matrices()
    assert m.shape == (pose.positions.shape[0], 4, 4)
    assert np.allclose(m[:, :3, 3], pose.positions)
    assert np.allclose(m[:, 3], [0.0, 0.0, 0.0, 1.0])
