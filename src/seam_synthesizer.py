#!/usr/bin/env python
"""
Seam synthesis: turns an optimized sample range into a buffer that can be
played back-to-back with itself without an audible click.
"""
import logging
import math
from typing import Tuple

import numpy as np
from scipy.ndimage import convolve1d

from models import MultiChannelBuffer, OptimizedLoopPoints

HANN_THRESHOLD_SECONDS = 0.075
STITCH_FRACTION = 0.2
STITCH_BLEND = 0.35
MIN_STITCH_SAMPLES = 4
DC_TOLERANCE = 1e-6
SEAM_WINDOW = 2048
SEAM_WINDOW_FRACTION = 0.1
SMOOTHING_SPAN = 64
SMOOTHING_KERNEL = np.array([0.25, 0.5, 0.25])


def equal_power_gains(progress: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Quarter-wave sine/cosine fade-in and fade-out gains."""
    return np.sin(progress * np.pi / 2), np.cos(progress * np.pi / 2)


def hann_power_gains(progress: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Square-rooted Hann fade-in and fade-out gains."""
    return (
        np.sqrt(np.maximum(0.0, 0.5 - 0.5 * np.cos(np.pi * progress))),
        np.sqrt(np.maximum(0.0, 0.5 + 0.5 * np.cos(np.pi * progress))),
    )


def _progress(count: int) -> np.ndarray:
    return np.arange(count) / max(1, count - 1)


def _smooth_seam(output: np.ndarray) -> None:
    """
    Bend the end of the loop so it runs into its first samples with matching
    level and slope, then low-pass the last few samples across the seam.
    The head of the loop is left untouched.
    """
    loop_length = len(output)
    window = min(SEAM_WINDOW, int(loop_length * SEAM_WINDOW_FRACTION))
    if window < MIN_STITCH_SAMPLES:
        return

    head = output[:window]
    tail = output[loop_length - window:]
    ramp = np.linspace(0.0, 1.0, window)
    smoothstep = ramp * ramp * (3.0 - 2.0 * ramp)

    tail -= smoothstep * (tail.mean() - head.mean())
    tail -= smoothstep * (tail[-1] - head[0])

    # Zero at both ends of the window, end derivative equal to the slope error.
    head_slope = head[1] - head[0]
    slope_error = (tail[-1] - tail[-2]) - head_slope
    tail -= slope_error * (window - 1) * (ramp ** 3 - ramp ** 2)

    # Narrower than the seam window so repeats don't dull the loop's end.
    span = min(window, SMOOTHING_SPAN)
    for _ in range(2):
        segment = np.concatenate((output[loop_length - span - 1:], output[:1]))
        output[loop_length - span:] = convolve1d(segment, SMOOTHING_KERNEL, mode="nearest")[1:-1]

    # The filter pulls the last sample off head[0]; close the seam again.
    tail -= smoothstep * (tail[-1] - head[0])


def _synthesize_channel(
    input_data: np.ndarray,
    start_sample: int,
    end_sample: int,
    fade_length: int,
    stitch_length: int,
    use_hann: bool,
) -> np.ndarray:
    input_length = len(input_data)
    loop_length = end_sample - start_sample
    output = input_data[start_sample:end_sample].astype(np.float64)
    gains = hann_power_gains if use_hann else equal_power_gains

    if stitch_length >= MIN_STITCH_SAMPLES:
        i = np.arange(stitch_length)
        blend = STITCH_BLEND * (1.0 - _progress(stitch_length))
        tail_index = np.maximum(start_sample, end_sample - stitch_length + i)
        output[:stitch_length] = output[:stitch_length] * (1.0 - blend) + input_data[tail_index] * blend

    if fade_length > 0:
        i = np.arange(fade_length)
        fade_in, fade_out = gains(_progress(fade_length))

        source = np.clip(end_sample - fade_length + i, 0, input_length - 1)
        output[:fade_length] = fade_in * output[:fade_length] + fade_out * input_data[source]

        head = np.clip(start_sample + i, 0, input_length - 1)
        tail = output[loop_length - fade_length:]
        output[loop_length - fade_length:] = fade_out * tail + fade_in * input_data[head]

    if stitch_length >= MIN_STITCH_SAMPLES:
        i = np.arange(stitch_length)
        blend = STITCH_BLEND * _progress(stitch_length)
        output[loop_length - stitch_length:] = (
            output[loop_length - stitch_length:] * (1.0 - blend) + input_data[start_sample + i] * blend
        )

    mean = output.mean()
    if abs(mean) > DC_TOLERANCE:
        output -= mean

    _smooth_seam(output)
    return output


def synthesize_loop(buffer: MultiChannelBuffer, loop_points: OptimizedLoopPoints) -> MultiChannelBuffer:
    """
    Build a seamless loop from a source buffer and optimized loop points.

    The same sample range is used for every channel. Each channel is
    crossfaded across the seam independently.

    Args:
        buffer: Source audio
        loop_points: Output of the loop optimizer

    Returns:
        New MultiChannelBuffer of length end_sample - start_sample

    Raises:
        ValueError: If the loop points do not describe a range inside the buffer
    """
    start_sample = loop_points.start_sample
    end_sample = loop_points.end_sample
    if not 0 <= start_sample < end_sample <= buffer.length:
        raise ValueError(
            f"Loop range {start_sample}-{end_sample} does not fit a buffer of {buffer.length} samples"
        )
    if not math.isfinite(loop_points.crossfade_duration) or loop_points.crossfade_duration < 0:
        raise ValueError(f"Invalid crossfade duration: {loop_points.crossfade_duration}")

    loop_length = end_sample - start_sample
    fade_length = min(math.floor(loop_points.crossfade_duration * buffer.sample_rate), loop_length)
    stitch_length = min(fade_length, math.floor(loop_length * STITCH_FRACTION))
    use_hann = loop_points.crossfade_duration >= HANN_THRESHOLD_SECONDS

    logging.info(
        f"Synthesizing {loop_length}-sample loop across {buffer.num_channels} channel(s), "
        f"{fade_length}-sample {'Hann' if use_hann else 'equal-power'} crossfade"
    )
    channels = [
        _synthesize_channel(
            buffer.channel(channel).astype(np.float64),
            start_sample,
            end_sample,
            fade_length,
            stitch_length,
            use_hann,
        )
        for channel in range(buffer.num_channels)
    ]
    return MultiChannelBuffer.from_array(np.stack(channels), buffer.sample_rate)


def create_loopable_segment(buffer: MultiChannelBuffer, loop_points: OptimizedLoopPoints) -> MultiChannelBuffer:
    """Prepare a single loopable segment without extending it."""
    return synthesize_loop(buffer, loop_points)
