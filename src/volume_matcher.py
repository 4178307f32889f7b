#!/usr/bin/env python
from typing import Tuple

import numpy as np

from signal_primitives import rms

# Keeps the RMS windows of every candidate inside the buffer.
EDGE_MARGIN = 1000
SCAN_STEP = 100


def find_volume_matched_points(
    data: np.ndarray,
    start_sample: int,
    end_sample: int,
    search_radius: int = 5000,
    step: int = SCAN_STEP,
    window_size: int = 2048,
) -> Tuple[int, int]:
    """
    Move the loop end to the position whose loudness best matches the start.

    Args:
        data: Analysis samples
        start_sample: Fixed loop start
        end_sample: Initial loop end
        search_radius: Samples to search on each side of end_sample
        step: Distance between scanned candidates
        window_size: RMS window length

    Returns:
        Tuple of (start_sample, best_end_sample)
    """
    start_rms = rms(data, start_sample, window_size)
    search_start = max(start_sample + EDGE_MARGIN, end_sample - search_radius)
    search_end = min(len(data) - EDGE_MARGIN, end_sample + search_radius)

    best_end = end_sample
    min_diff = np.inf
    for candidate in range(search_start, search_end, step):
        diff = abs(start_rms - rms(data, candidate, window_size))
        if diff < min_diff:
            min_diff = diff
            best_end = candidate

    return start_sample, best_end
