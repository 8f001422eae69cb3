"""Tests for the overlay rule pipeline (depth -> snow -> lights)."""

from __future__ import annotations

from dataclasses import replace

import numpy as np
import pytest

from pinefield.engine import palette
from pinefield.engine.classification import (
    BranchSample,
    OverlayRegistry,
    OverlayRule,
    get_registry,
    pick_light_color,
)
from pinefield.engine.config import ShapeProfile
from pinefield.engine.context import Category


def _sample(d, rel_y=None, *, has_lights=False, profile=None, seed=0) -> BranchSample:
    d = np.asarray(d, dtype=np.float64)
    volume = np.ones_like(d)
    rel = np.zeros_like(d) if rel_y is None else np.asarray(rel_y, dtype=np.float64)
    return BranchSample(
        d=d,
        rel_y=rel,
        volume_radius=volume,
        y=np.zeros_like(d),
        has_lights=has_lights,
        light_color=palette.LIGHT_BLUE_RGB,
        rng=np.random.default_rng(seed),
        profile=profile or ShapeProfile(),
    )


def _noop(sample: BranchSample) -> None:
    pass


def test_rules_run_in_order():
    names = [r.name for r in get_registry().ordered()]
    assert names == ["depth", "snow", "lights"]


def test_duplicate_rule_rejected():
    reg = OverlayRegistry()
    reg.register(OverlayRule(order=1, name="a", fn=_noop))
    with pytest.raises(ValueError):
        reg.register(OverlayRule(order=2, name="a", fn=_noop))
    with pytest.raises(ValueError):
        reg.register(OverlayRule(order=1, name="b", fn=_noop))


def test_inner_depth_is_wood_or_shadow():
    p = replace(ShapeProfile(), snow_probability=0.0)
    s = get_registry().apply(_sample(np.full(400, 0.1), profile=p))
    assert np.all(s.categories == Category.PINE)
    allowed = np.asarray([palette.WOOD_RGB, palette.SHADOW_RGB])
    for c in s.colors:
        assert np.any(np.all(np.isclose(allowed, c), axis=1))
    # Base size U(0.04, 0.12) scaled by 1.2
    assert s.sizes.min() >= 0.04 * 1.2 - 1e-12
    assert s.sizes.max() <= 0.12 * 1.2 + 1e-12


def test_tips_are_highlighted():
    p = replace(ShapeProfile(), snow_probability=0.0)
    s = get_registry().apply(_sample(np.full(200, 0.95), profile=p))
    assert np.allclose(s.colors, palette.TIP_RGB)
    assert s.sizes.max() <= 0.12 * 0.8 + 1e-12


def test_mid_body_mixes_tip_and_mid():
    p = replace(ShapeProfile(), snow_probability=0.0)
    s = get_registry().apply(_sample(np.full(2000, 0.6), profile=p))
    tip_share = np.mean(np.all(np.isclose(s.colors, palette.TIP_RGB), axis=1))
    assert 0.2 < tip_share < 0.4


def test_snow_settles_on_upper_surface_only():
    p = replace(ShapeProfile(), snow_probability=1.0)
    rel = np.concatenate([np.full(50, 0.4), np.full(50, -0.4)])
    s = get_registry().apply(_sample(np.full(100, 0.6), rel, profile=p))
    assert np.all(s.categories[:50] == Category.SNOW)
    assert np.all(s.categories[50:] != Category.SNOW)
    assert np.allclose(s.y[:50], p.snow_lift)
    assert np.allclose(s.y[50:], 0.0)
    assert np.allclose(s.colors[:50], palette.SNOW_RGB)


def test_lights_never_overwrite_snow():
    p = replace(ShapeProfile(), snow_probability=1.0, light_probability=1.0)
    # d = 0.5 puts every particle on a light node: (0.5 * 10) mod 1 == 0
    s = get_registry().apply(_sample(np.full(100, 0.5), np.full(100, 0.4), has_lights=True, profile=p))
    assert np.all(s.categories == Category.SNOW)


def test_lights_on_lit_branch():
    p = replace(ShapeProfile(), snow_probability=0.0, light_probability=1.0)
    s = get_registry().apply(_sample(np.full(100, 0.5), has_lights=True, profile=p))
    assert np.all(s.categories == Category.LIGHT)
    assert np.allclose(s.colors, palette.LIGHT_BLUE_RGB)
    assert s.sizes.min() >= p.light_size
    assert s.sizes.max() <= p.light_size + p.light_size_jitter


def test_no_lights_off_phase_or_unlit():
    p = replace(ShapeProfile(), snow_probability=0.0, light_probability=1.0)
    off_phase = get_registry().apply(_sample(np.full(100, 0.55), has_lights=True, profile=p))
    assert not np.any(off_phase.categories == Category.LIGHT)
    unlit = get_registry().apply(_sample(np.full(100, 0.5), has_lights=False, profile=p))
    assert not np.any(unlit.categories == Category.LIGHT)


def test_pick_light_color_weights():
    assert pick_light_color(0.1) == palette.LIGHT_RED_RGB
    assert pick_light_color(0.39) == palette.LIGHT_RED_RGB
    assert pick_light_color(0.5) == palette.LIGHT_GOLD_RGB
    assert pick_light_color(0.7) == palette.LIGHT_ORANGE_RGB
    assert pick_light_color(0.95) == palette.LIGHT_BLUE_RGB


@pytest.mark.parametrize(
    "draw, expected",
    [(-0.3, palette.LIGHT_RED_RGB), (1.7, palette.LIGHT_BLUE_RGB), (float("nan"), palette.LIGHT_RED_RGB)],
)
def test_pick_light_color_clamps_bad_draws(draw, expected):
    assert pick_light_color(draw) == expected
