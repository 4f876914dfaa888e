"""Settings merging/clamping and the hex color helpers."""

from __future__ import annotations

import logging

import pytest

from tajimi_core import (
    DEFAULT_SETTINGS,
    MIN_FACTOR,
    brighten,
    hex_to_rgb,
    make_settings,
    mix_colors,
    rgb_to_hex,
)


def test_make_settings_without_overrides_matches_defaults() -> None:
    assert make_settings() == DEFAULT_SETTINGS


def test_make_settings_does_not_mutate_defaults() -> None:
    make_settings({'stroke_width': 3.0})
    assert DEFAULT_SETTINGS['stroke_width'] == 1.5


def test_make_settings_rejects_unknown_key() -> None:
    with pytest.raises(KeyError):
        make_settings({'building_colour': '#000000'})


def test_make_settings_swaps_inverted_range(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING):
        settings = make_settings({
            'building_height_min_factor': 0.8,
            'building_height_max_factor': 0.2,
        })
    assert settings['building_height_min_factor'] == 0.2
    assert settings['building_height_max_factor'] == 0.8
    assert "swapping" in caplog.text


def test_make_settings_clamps_non_positive_factors() -> None:
    settings = make_settings({'building_shrink_factor': 0, 'tile_count_min': -3})
    assert settings['building_shrink_factor'] == MIN_FACTOR
    assert settings['tile_count_min'] == 1


def test_make_settings_clamps_probabilities() -> None:
    settings = make_settings({'window_probability': 1.5, 'silhouette_probability': -0.2})
    assert settings['window_probability'] == 1.0
    assert settings['silhouette_probability'] == 0.0


def test_make_settings_keeps_zero_window_columns() -> None:
    assert make_settings({'window_grid_cols': 0})['window_grid_cols'] == 0


def test_make_settings_keeps_exit_inside_cycle() -> None:
    settings = make_settings({'exit_end': 400})
    assert settings['exit_end'] == settings['cycle_length']
    assert settings['exit_start'] <= settings['exit_end']


def test_hex_to_rgb_accepts_short_and_bare_forms() -> None:
    assert hex_to_rgb('#abc') == (170, 187, 204)
    assert hex_to_rgb('FDEBED') == (253, 235, 237)


@pytest.mark.parametrize('color', ['#12345', 'white', '#zzzzzz'])
def test_hex_to_rgb_rejects_invalid(color: str) -> None:
    with pytest.raises(ValueError):
        hex_to_rgb(color)


def test_rgb_to_hex_rounds_and_clamps() -> None:
    assert rgb_to_hex((300, -5, 127.6)) == '#FF0080'


def test_brighten_moves_lightness() -> None:
    lighter = hex_to_rgb(brighten('#808080', 1.0))
    darker = hex_to_rgb(brighten('#808080', -1.0))
    assert all(c > 128 for c in lighter)
    assert all(c < 128 for c in darker)
    assert brighten('#FFFFFF', 1.0) == '#FFFFFF'


def test_mix_colors_endpoints_and_clamp() -> None:
    a, b = '#ffcefe', '#AAE3E2'
    assert mix_colors(a, b, 0.0) == rgb_to_hex(hex_to_rgb(a))
    assert mix_colors(a, b, 1.0) == rgb_to_hex(hex_to_rgb(b))
    assert mix_colors(a, b, 2.0) == mix_colors(a, b, 1.0)
    assert mix_colors(a, b, -1.0) == mix_colors(a, b, 0.0)


def test_mix_colors_stays_on_the_segment() -> None:
    a, b = '#FFCEFE', '#2A63E2'
    ra, rb = hex_to_rgb(a), hex_to_rgb(b)
    for step in range(11):
        t = step / 10
        mixed = hex_to_rgb(mix_colors(a, b, t))
        for ca, cb, cm in zip(ra, rb, mixed):
            assert min(ca, cb) <= cm <= max(ca, cb)
            assert cm == pytest.approx(ca + (cb - ca) * t, abs=0.5)
