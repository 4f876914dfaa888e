"""Window grid placement, insets and the closed variant type."""

from __future__ import annotations

import random

import pytest

from tajimi_core import (
    WindowVariant,
    make_building,
    make_settings,
    make_window,
    make_window_grid,
    window_inset,
)


def _windows(settings, seeds=range(30), size=(120.0, 300.0)):
    windows = []
    for seed in seeds:
        building = make_building((15.0, 40.0), size, settings, random.Random(seed))
        windows.extend((building, w) for w in building.windows)
    return windows


def test_window_inset_takes_the_largest_candidate() -> None:
    settings = make_settings()
    # fraction wins on large windows
    assert window_inset(100.0, settings) == pytest.approx(13.5)
    # hard minimum wins on small ones
    assert window_inset(20.0, settings) == pytest.approx(3.0)
    # rescaled term wins on tiny ones
    assert window_inset(5.0, settings) == pytest.approx(1.25 / 5.0 * 0.135 * 190.0)


def test_glass_sits_strictly_inside_frame() -> None:
    settings = make_settings()
    pairs = _windows(settings)
    assert pairs
    for _, window in pairs:
        assert window.frame.contains_properly(window.glass)
        assert window.inset >= settings['window_min_frame_offset']


def test_windows_stay_inside_their_building() -> None:
    settings = make_settings()
    for building, window in _windows(settings):
        assert building.footprint.buffer(1e-9).contains(window.frame)


def test_variant_parts_match_the_variant() -> None:
    settings = make_settings()
    seen = set()
    for _, window in _windows(settings):
        variant = window.variant
        seen.add(variant)
        assert not (variant.shine and variant.silhouette)
        assert bool(window.shines) == variant.shine
        assert (window.head is not None) == variant.silhouette
        assert (window.torso is not None) == variant.silhouette
        expected = settings['stroke_width'] if variant.divided else 0.0
        assert window.division_width == expected
    assert {WindowVariant.DIVIDED_SHINE, WindowVariant.SHINE, WindowVariant.SILHOUETTE} <= seen


def test_division_line_spans_the_glass_center() -> None:
    settings = make_settings()
    for _, window in _windows(settings, seeds=range(5)):
        minx, miny, maxx, maxy = window.glass.bounds
        (x1, y1), (x2, y2) = window.division
        assert x1 == pytest.approx((minx + maxx) / 2)
        assert x2 == pytest.approx(x1)
        assert (y1, y2) == pytest.approx((miny, maxy))


def test_disabling_shine_leaves_plain_or_silhouette_windows() -> None:
    settings = make_settings({'window_shine': False})
    variants = {w.variant for _, w in _windows(settings)}
    assert variants
    assert not any(v.shine for v in variants)
    assert WindowVariant.DIVIDED in variants


def test_zero_weights_produce_no_windows() -> None:
    settings = make_settings({'window_weights': {
        'wide_divided': 0.0, 'square_divided': 0.0, 'small_square': 0.0, 'small_tall': 0.0,
    }})
    assert make_window_grid((0.0, 0.0), (120.0, 300.0), settings, random.Random(0)) == []


def test_single_preset_weight_fixes_the_window_shape() -> None:
    settings = make_settings({'window_weights': {
        'wide_divided': 0.0, 'square_divided': 1.0, 'small_square': 0.0, 'small_tall': 0.0,
    }})
    for _, window in _windows(settings, seeds=range(5)):
        minx, miny, maxx, maxy = window.frame.bounds
        assert maxx - minx == pytest.approx(maxy - miny)
        assert window.variant.divided


def test_window_probability_bounds() -> None:
    settings = make_settings({'window_probability': 0.0})
    assert make_window_grid((0.0, 0.0), (120.0, 300.0), settings, random.Random(0)) == []

    full = make_settings({'window_probability': 1.0})
    # 2 columns; edge 12, column 48, rows floor(288 / 48)
    assert len(make_window_grid((0.0, 0.0), (120.0, 300.0), full, random.Random(0))) == 12


def test_zero_columns_or_width_give_no_windows() -> None:
    settings = make_settings({'window_grid_cols': 0})
    assert make_window_grid((0.0, 0.0), (120.0, 300.0), settings, random.Random(0)) == []
    assert make_window_grid((0.0, 0.0), (0.0, 300.0), make_settings(), random.Random(0)) == []


def test_zero_width_building_is_empty() -> None:
    building = make_building((10.0, 10.0), (0.0, 80.0), make_settings(), random.Random(0))
    assert building.tiles == []
    assert building.windows == []
    assert building.width == 0.0


def test_window_too_small_for_glass_is_dropped() -> None:
    window = make_window((0.0, 0.0), (5.0, 5.0), make_settings(), WindowVariant.PLAIN, random.Random(0))
    assert window is None


def test_silhouette_sits_at_the_glass_bottom() -> None:
    window = make_window((0.0, 0.0), (40.0, 40.0), make_settings(),
                         WindowVariant.SILHOUETTE, random.Random(0))
    minx, miny, maxx, maxy = window.glass.bounds
    hx, hy, hr = window.head
    assert (hx, hy) == pytest.approx(((minx + maxx) / 2, (miny + maxy) / 2))
    assert hr == pytest.approx((maxx - minx) * 0.2)
    assert window.torso['start'][1] == pytest.approx(maxy)
    assert window.torso['end'][1] == pytest.approx(maxy)
    assert window.torso['radius'] > 0


def test_variant_compose() -> None:
    assert WindowVariant.compose(True, 'shine') is WindowVariant.DIVIDED_SHINE
    assert WindowVariant.compose(False) is WindowVariant.PLAIN
    assert WindowVariant.DIVIDED_SILHOUETTE.divided
    assert WindowVariant.DIVIDED_SILHOUETTE.silhouette
    with pytest.raises(ValueError):
        WindowVariant.compose(False, 'sparkle')
