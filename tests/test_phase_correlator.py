import numpy as np

from phase_correlator import find_phase_matched_point


def test_aligns_with_start_phase():
    n = np.arange(60000)
    data = np.sin(2 * np.pi * (n + 0.3) / 1000)
    result = find_phase_matched_point(data, 5000, 20300, 2000)
    assert (result - 5000) % 1000 == 0
    assert abs(result - 20300) <= 2000


def test_skips_silent_windows():
    pattern = np.sin(2 * np.pi * (np.arange(1024) + 0.3) / 97)
    data = np.zeros(30000)
    data[5000:6024] = pattern
    data[20000:21024] = pattern
    assert find_phase_matched_point(data, 5000, 20300, 2000) == 20000


def test_all_silent_keeps_end():
    data = np.zeros(30000)
    assert find_phase_matched_point(data, 5000, 20300, 2000) == 20300


def test_degenerate_range_keeps_end():
    data = np.ones(1500)
    assert find_phase_matched_point(data, 0, 1200, 2000) == 1200
