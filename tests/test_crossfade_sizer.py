import numpy as np
import pytest

from crossfade_sizer import get_adaptive_crossfade_duration

SR = 44100


def test_silence_keeps_requested_duration():
    data = np.zeros(SR * 2)
    assert get_adaptive_crossfade_duration(data, 0, SR, SR, 0.05) == pytest.approx(0.05)


def test_long_request_is_capped(make_sine):
    data = make_sine(20.0, 2.0, SR)
    assert get_adaptive_crossfade_duration(data, 0, len(data) - 1, SR, 1.0) == pytest.approx(0.15)


def test_busy_material_gets_longer_fade(rng):
    data = rng.uniform(-1.0, 1.0, SR * 2)
    duration = get_adaptive_crossfade_duration(data, 0, SR, SR, 0.05)
    assert duration > 0.089
    assert duration <= 0.15


def test_short_loop_is_scaled_down():
    data = np.zeros(SR)
    duration = get_adaptive_crossfade_duration(data, 0, SR // 10, SR, 0.05)
    assert duration == pytest.approx(0.015)
    assert duration <= 0.1 * 0.45


def test_very_short_loop_never_exceeds_loop(rng):
    data = rng.uniform(-1.0, 1.0, 1000)
    duration = get_adaptive_crossfade_duration(data, 100, 200, SR, 0.05)
    assert 0 < duration <= 100 / SR


@pytest.mark.parametrize("requested", [0.001, 0.05, 0.2, 5.0])
def test_result_within_bounds(make_sine, requested):
    data = make_sine(220.0, 3.0, SR)
    duration = get_adaptive_crossfade_duration(data, 1000, 1000 + SR, SR, requested)
    assert 0.01 <= duration <= 0.15
