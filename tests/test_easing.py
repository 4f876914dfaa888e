"""Easing curves and clamped progress."""

from __future__ import annotations

import pytest

from tajimi_motion import (
    EASINGS,
    clamp,
    ease_in_back,
    ease_out_back,
    progress,
    pulse_sine_squared,
)


@pytest.mark.parametrize('name', sorted(EASINGS))
def test_easing_boundaries(name: str) -> None:
    """Every curve starts at 0 and ends at 1, overshooting or not."""
    fn = EASINGS[name]
    assert fn(0.0) == pytest.approx(0.0, abs=1e-9)
    assert fn(1.0) == pytest.approx(1.0, abs=1e-9)


@pytest.mark.parametrize('name', ['in_cubic', 'in_out_cubic', 'in_out_sine', 'out_circ', 'in_out_expo'])
def test_monotonic_easings_never_decrease(name: str) -> None:
    fn = EASINGS[name]
    values = [fn(i / 100) for i in range(101)]
    assert all(b >= a - 1e-12 for a, b in zip(values, values[1:]))
    assert all(-1e-12 <= v <= 1 + 1e-12 for v in values)


def test_back_easings_leave_the_unit_range_transiently() -> None:
    assert max(ease_out_back(i / 100) for i in range(101)) > 1.0
    assert min(ease_in_back(i / 100) for i in range(101)) < 0.0


def test_pulse_sine_squared_peaks_mid_period() -> None:
    assert pulse_sine_squared(0.0) == 0.0
    assert pulse_sine_squared(0.5) == pytest.approx(1.0)
    assert pulse_sine_squared(1.0) == pytest.approx(0.0, abs=1e-12)


def test_clamp() -> None:
    assert clamp(-0.5) == 0.0
    assert clamp(1.5) == 1.0
    assert clamp(0.25) == 0.25
    assert clamp(12, 0, 10) == 10


def test_progress_is_clamped_outside_the_window() -> None:
    assert progress(5, 10, 40) == 0.0
    assert progress(30, 10, 40) == pytest.approx(0.5)
    assert progress(50, 10, 40) == 1.0
    assert progress(500, 10, 40) == 1.0


def test_progress_zero_duration_is_a_step() -> None:
    assert progress(9, 10, 0) == 0.0
    assert progress(10, 10, 0) == 1.0
