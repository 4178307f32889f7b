#!/usr/bin/env python
import logging

import numpy as np

from volume_matcher import EDGE_MARGIN

SCAN_STEP = 50
CORRELATION_WINDOW = 1024


def find_phase_matched_point(
    data: np.ndarray,
    start_sample: int,
    end_sample: int,
    search_radius: int = 3000,
    step: int = SCAN_STEP,
    window_size: int = CORRELATION_WINDOW,
) -> int:
    """
    Move the loop end to the position whose waveform best lines up in phase
    with the loop start.

    Each candidate end window is compared to the start window by normalized
    cross-correlation. Silent windows have no defined correlation and are
    never selected.

    Args:
        data: Analysis samples
        start_sample: Fixed loop start
        end_sample: Initial loop end
        search_radius: Samples to search on each side of end_sample
        step: Distance between scanned candidates
        window_size: Correlation window length

    Returns:
        Best end sample, or end_sample if no candidate correlates
    """
    search_start = max(start_sample + EDGE_MARGIN, end_sample - search_radius)
    search_end = min(len(data) - window_size, end_sample + search_radius)
    candidates = np.arange(search_start, search_end, step)
    if candidates.size == 0:
        return end_sample

    # Candidates never reach past len - window_size, so only the start
    # window can be cut short by the end of the buffer.
    n = min(window_size, len(data) - start_sample)
    if n <= 0:
        return end_sample
    reference = data[start_sample:start_sample + n].astype(np.float64)
    windows = np.lib.stride_tricks.sliding_window_view(data, window_size)[candidates, :n].astype(np.float64)

    with np.errstate(invalid="ignore", divide="ignore"):
        correlations = windows @ reference / np.sqrt(
            np.sum(windows * windows, axis=1) * np.dot(reference, reference)
        )

    valid = np.isfinite(correlations)
    if not valid.any():
        logging.debug("Phase matching found no correlated window, keeping end sample")
        return end_sample

    # argmax keeps the first maximum, matching a strict-greater scan
    best = int(np.argmax(np.where(valid, correlations, -np.inf)))
    return int(candidates[best])
