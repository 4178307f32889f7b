#!/usr/bin/env python
import numpy as np

from signal_primitives import EPSILON, average_abs_derivative, clamp, rms

MIN_BASE_DURATION = 0.015
MAX_BASE_DURATION = 0.2
ENERGY_BONUS = 0.03
DYNAMIC_BONUS = 0.04
DERIVATIVE_REFERENCE = 0.5
SHORT_LOOP_SECONDS = 0.4
MIN_CROSSFADE = 0.01


def get_adaptive_crossfade_duration(
    data: np.ndarray,
    start_sample: int,
    end_sample: int,
    sample_rate: int,
    requested_duration: float,
) -> float:
    """
    Derive a crossfade duration from the loop content.

    Seams that differ in loudness, or sit in busy material, get a slightly
    longer fade. Short loops get a proportionally shorter one so the fade
    never eats most of the loop.

    Args:
        data: Analysis samples
        start_sample: Final loop start
        end_sample: Final loop end
        sample_rate: Sample rate in Hz
        requested_duration: User-requested crossfade in seconds (a hint)

    Returns:
        Crossfade duration in seconds
    """
    loop_samples = max(1, end_sample - start_sample)
    loop_duration = loop_samples / sample_rate

    analysis_window = min(4096, loop_samples // 2)
    start_rms = rms(data, start_sample, analysis_window)
    end_rms = rms(data, max(start_sample, end_sample - analysis_window), analysis_window)

    derivative_window = min(2048, analysis_window)
    start_derivative = average_abs_derivative(data, start_sample, derivative_window)
    end_derivative = average_abs_derivative(
        data, max(start_sample, end_sample - derivative_window - 1), derivative_window
    )

    energy_score = clamp(abs(start_rms - end_rms) / max(start_rms, EPSILON), 0.0, 1.0)
    dynamic_score = clamp(max(start_derivative, end_derivative) / DERIVATIVE_REFERENCE, 0.0, 1.0)

    duration = (
        clamp(requested_duration, MIN_BASE_DURATION, MAX_BASE_DURATION)
        + energy_score * ENERGY_BONUS
        + dynamic_score * DYNAMIC_BONUS
    )

    if loop_duration < SHORT_LOOP_SECONDS:
        duration *= clamp(loop_duration / SHORT_LOOP_SECONDS, 0.3, 1.0)

    lower = min(0.015, loop_duration * 0.2)
    upper = min(0.15, loop_duration * 0.45)
    duration = clamp(duration, max(MIN_CROSSFADE, lower), max(lower, upper))

    # Loops under 10 ms cannot hold the minimum fade.
    return min(duration, loop_duration)
