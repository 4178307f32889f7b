#!/usr/bin/env python
"""
Loop point optimization.

Coarse loop boundaries go through a fixed pipeline on a DC-free copy of the
first channel: zero-crossing snap, volume matching, a tighter snap, phase
matching, a final snap and finally adaptive crossfade sizing. Every stage
falls back to the previous value when it cannot improve on it.
"""
import logging
import math

from crossfade_sizer import get_adaptive_crossfade_duration
from models import LoopPoints, MultiChannelBuffer, OptimizedLoopPoints
from phase_correlator import find_phase_matched_point
from signal_primitives import remove_dc_offset
from volume_matcher import find_volume_matched_points
from zero_crossing import find_nearest_zero_crossing

INITIAL_SNAP_RADIUS = 2000
VOLUME_SNAP_RADIUS = 500
PHASE_SEARCH_RADIUS = 2000
FINAL_SNAP_RADIUS = 200


def validate_loop_request(buffer: MultiChannelBuffer, loop_points: LoopPoints, crossfade_duration: float) -> None:
    """
    Reject requests the optimizer cannot work with.

    Raises:
        ValueError: If the buffer is too short, the loop points are out of
            order or out of range, or the crossfade is not a positive number
    """
    if buffer.length == 0:
        raise ValueError("Audio buffer is empty")
    if buffer.length < 2:
        raise ValueError("Audio buffer must hold at least two samples to form a loop")
    if not (math.isfinite(loop_points.start) and math.isfinite(loop_points.end)):
        raise ValueError(f"Loop points must be finite, got {loop_points}")
    if loop_points.start < 0 or loop_points.end > buffer.duration:
        raise ValueError(
            f"Loop points {loop_points.start:.3f}s-{loop_points.end:.3f}s fall outside "
            f"the audio (0-{buffer.duration:.3f}s)"
        )
    if loop_points.start >= loop_points.end:
        raise ValueError(f"Loop start ({loop_points.start:.3f}s) must be before loop end ({loop_points.end:.3f}s)")
    if not math.isfinite(crossfade_duration) or crossfade_duration <= 0:
        raise ValueError(f"Crossfade duration must be a positive number, got {crossfade_duration}")


def _keep_end(start: int, candidate: int, previous: int, length: int) -> int:
    return candidate if start < candidate <= length - 1 else previous


def optimize_loop_points(
    buffer: MultiChannelBuffer,
    loop_points: LoopPoints,
    crossfade_duration: float = 0.05,
) -> OptimizedLoopPoints:
    """
    Refine coarse loop points into sample-exact, seam-friendly boundaries.

    Args:
        buffer: Decoded audio; only the first channel is analyzed
        loop_points: Requested boundaries in seconds
        crossfade_duration: Requested crossfade in seconds, used as a hint

    Returns:
        OptimizedLoopPoints with 0 <= start_sample < end_sample <= length - 1

    Raises:
        ValueError: If the request is invalid (see validate_loop_request)
    """
    validate_loop_request(buffer, loop_points, crossfade_duration)

    sr = buffer.sample_rate
    length = buffer.length
    data = remove_dc_offset(buffer.channel(0))

    requested_start = math.floor(loop_points.start * sr)
    requested_end = math.floor(loop_points.end * sr)
    start_sample = min(max(requested_start, 0), length - 2)
    end_sample = min(max(requested_end, start_sample + 1), length - 1)

    logging.debug("Finding zero-crossings...")
    snapped_start = find_nearest_zero_crossing(data, start_sample, INITIAL_SNAP_RADIUS)
    snapped_end = find_nearest_zero_crossing(data, end_sample, INITIAL_SNAP_RADIUS)
    if 0 <= snapped_start < end_sample:
        start_sample = snapped_start
    end_sample = _keep_end(start_sample, snapped_end, end_sample, length)

    logging.debug("Matching volumes...")
    _, matched_end = find_volume_matched_points(data, start_sample, end_sample)
    end_sample = _keep_end(start_sample, matched_end, end_sample, length)
    end_sample = _keep_end(
        start_sample, find_nearest_zero_crossing(data, end_sample, VOLUME_SNAP_RADIUS), end_sample, length
    )

    logging.debug("Phase matching...")
    phase_end = find_phase_matched_point(data, start_sample, end_sample, PHASE_SEARCH_RADIUS)
    end_sample = _keep_end(start_sample, phase_end, end_sample, length)
    end_sample = _keep_end(
        start_sample, find_nearest_zero_crossing(data, end_sample, FINAL_SNAP_RADIUS), end_sample, length
    )

    crossfade_seconds = get_adaptive_crossfade_duration(data, start_sample, end_sample, sr, crossfade_duration)

    optimized = OptimizedLoopPoints(
        start=start_sample / sr,
        end=end_sample / sr,
        start_sample=start_sample,
        end_sample=end_sample,
        crossfade_duration=crossfade_seconds,
    )
    logging.info(
        f"Optimization complete: {loop_points.start:.3f}s-{loop_points.end:.3f}s -> "
        f"{optimized.start:.3f}s-{optimized.end:.3f}s "
        f"(shift start {start_sample - requested_start:+d}, end {end_sample - requested_end:+d} samples), "
        f"crossfade {crossfade_seconds * 1000:.1f} ms"
    )
    return optimized
