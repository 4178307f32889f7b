#!/usr/bin/env python
import logging
import math

import numpy as np

from models import MultiChannelBuffer

MIN_PRODUCT_DURATION = 60.0
MAX_PRODUCT_DURATION = 3600.0


def tile(loop_buffer: MultiChannelBuffer, target_duration_sec: float) -> MultiChannelBuffer:
    """
    Repeat a seamless loop until it fills the target duration.

    No crossfade is applied between repetitions; the loop is expected to
    be seamless at its own boundary already.

    Args:
        loop_buffer: Seamless loop from the seam synthesizer
        target_duration_sec: Length of the result in seconds

    Returns:
        New MultiChannelBuffer of floor(target_duration_sec * sample_rate) samples

    Raises:
        ValueError: If the target duration is not a positive number or the loop is empty
    """
    if not math.isfinite(target_duration_sec) or target_duration_sec <= 0:
        raise ValueError(f"Target duration must be a positive number, got {target_duration_sec}")
    if loop_buffer.length == 0:
        raise ValueError("Cannot tile an empty loop")

    total_samples = math.floor(target_duration_sec * loop_buffer.sample_rate)
    extended = MultiChannelBuffer.allocate(loop_buffer.num_channels, total_samples, loop_buffer.sample_rate)
    positions = np.arange(total_samples) % loop_buffer.length
    extended.samples[:, :] = loop_buffer.samples[:, positions]

    num_reps = total_samples / loop_buffer.length
    logging.info(
        f"Loop duration: {loop_buffer.duration:.2f} seconds, repeating {num_reps:.2f} times "
        f"to reach {target_duration_sec:.2f} seconds."
    )
    return extended
