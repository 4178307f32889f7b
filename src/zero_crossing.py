#!/usr/bin/env python
import numpy as np

from signal_primitives import EPSILON, clamp, rms

# Score weights for a crossing candidate. Lower total score is better.
AMPLITUDE_WEIGHT = 0.35
DISTANCE_WEIGHT = 0.25
RMS_WEIGHT = 0.25
SLOPE_WEIGHT = 0.15

MAX_REFERENCE_WINDOW = 1024
MAX_RMS_DEVIATION = 2.0


def _window_rms(cumulative: np.ndarray, starts: np.ndarray, window_size: int) -> np.ndarray:
    """RMS of many equally sized windows from a cumulative sum of squares."""
    length = len(cumulative) - 1
    ends = np.minimum(starts + window_size, length)
    energy = cumulative[ends] - cumulative[starts]
    return np.sqrt(np.maximum(energy, 0.0) / np.maximum(1, ends - starts))


def find_nearest_zero_crossing(data: np.ndarray, target_sample: int, search_radius: int = 2000) -> int:
    """
    Find the best zero-crossing around a target sample.

    Closest-to-zero alone tends to pick crossings whose surroundings differ
    in loudness or slope from the target, so every crossing in the window is
    scored on four terms: amplitude at the crossing, distance from the
    target, RMS deviation of the local window and slope deviation.

    Args:
        data: Analysis samples (DC offset already removed)
        target_sample: Sample index to search around
        search_radius: Number of samples to search on each side

    Returns:
        Index i of the winning pair (data[i], data[i + 1]), or target_sample
        unchanged if the window holds no crossing
    """
    length = len(data)
    start = max(0, target_sample - search_radius)
    end = min(length - 1, target_sample + search_radius)
    if end - 1 <= start:
        return target_sample

    current = data[start:end - 1]
    following = data[start + 1:end]
    is_crossing = ((current <= 0) & (following >= 0)) | ((current >= 0) & (following <= 0))
    candidates = np.flatnonzero(is_crossing)
    if candidates.size == 0:
        return target_sample

    reference_window = min(MAX_REFERENCE_WINDOW, search_radius // 2)
    half_window = reference_window // 2
    max_window_start = length - reference_window
    reference_start = int(clamp(target_sample - half_window, 0, max_window_start))
    reference_rms = rms(data, reference_start, reference_window)
    reference_slope = (
        data[min(target_sample + 1, length - 1)] - data[min(max(target_sample - 1, 0), length - 1)]
    )

    indices = candidates + start
    cur = current[candidates]
    nxt = following[candidates]

    local_starts = np.clip(indices - half_window, 0, max(0, max_window_start))
    lo = int(local_starts.min())
    hi = int(min(local_starts.max() + reference_window, length))
    cumulative = np.concatenate(([0.0], np.cumsum(np.square(data[lo:hi], dtype=np.float64))))
    local_rms = _window_rms(cumulative, local_starts - lo, reference_window)
    rms_deviation = np.clip(
        np.abs(reference_rms - local_rms) / (reference_rms + EPSILON), 0.0, MAX_RMS_DEVIATION
    )

    scores = (
        (np.abs(cur) + np.abs(nxt)) * AMPLITUDE_WEIGHT
        + (np.abs(indices - target_sample) / (search_radius + EPSILON)) * DISTANCE_WEIGHT
        + rms_deviation * RMS_WEIGHT
        + np.abs((nxt - cur) - reference_slope) * SLOPE_WEIGHT
    )
    # argmin keeps the lowest index on ties
    return int(indices[np.argmin(scores)])
