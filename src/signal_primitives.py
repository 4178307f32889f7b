#!/usr/bin/env python
"""
Windowed measurements over raw sample arrays.

Every window is clamped to the buffer bounds, so callers can pass
positions near the edges without checking them first.
"""
import numpy as np

EPSILON = 1e-6


def clamp(value: float, lo: float, hi: float) -> float:
    """Clamp value into [lo, hi]. When hi < lo the lower bound wins."""
    return max(lo, min(hi, value))


def rms(data: np.ndarray, start: int, window_size: int = 2048) -> float:
    """
    Root-mean-square energy of a window.

    Args:
        data: Sample array
        start: First sample of the window
        window_size: Number of samples to analyze

    Returns:
        RMS value, 0.0 for an empty window
    """
    start = max(0, start)
    end = min(start + window_size, len(data))
    window = data[start:end]
    return float(np.sqrt(np.sum(np.square(window, dtype=np.float64)) / max(1, end - start)))


def average_abs_derivative(data: np.ndarray, start: int, window_size: int) -> float:
    """
    Mean absolute first difference over a window, a measure of how busy
    the signal is locally.
    """
    start = max(0, start)
    end = min(start + window_size, len(data) - 1)
    if end <= start:
        return 0.0
    diffs = np.abs(np.diff(data[start:end + 1].astype(np.float64)))
    return float(np.sum(diffs) / max(1, end - start))


def cross_correlation(data: np.ndarray, start1: int, start2: int, window_size: int = 1024) -> float:
    """
    Normalized cross-correlation between two windows of the same array.

    The windows are truncated where either would run past the end of the
    buffer. Returns NaN when either window has zero energy.
    """
    n = max(0, min(window_size, len(data) - start1, len(data) - start2))
    a = data[start1:start1 + n].astype(np.float64)
    b = data[start2:start2 + n].astype(np.float64)
    norm = np.sqrt(np.dot(a, a) * np.dot(b, b))
    if norm == 0:
        return float("nan")
    return float(np.dot(a, b) / norm)


def remove_dc_offset(data: np.ndarray) -> np.ndarray:
    """Return a float64 copy of data with its mean removed."""
    analysis = np.array(data, dtype=np.float64, copy=True)
    if analysis.size:
        analysis -= analysis.mean()
    return analysis
