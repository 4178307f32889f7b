#!/usr/bin/env python
import logging
import struct
from pathlib import Path
from typing import Union

import numpy as np

from models import MultiChannelBuffer

HEADER_SIZE = 44
PCM_FORMAT = 1
BIT_DEPTH = 16


def interleave_channels(buffer: MultiChannelBuffer) -> np.ndarray:
    """Flatten (channels, length) samples into frame-major order: L0 R0 L1 R1 ..."""
    return buffer.samples.T.reshape(-1)


def encode_to_container(buffer: MultiChannelBuffer) -> bytes:
    """
    Encode a buffer as a canonical 16-bit PCM WAV byte string.

    Samples are clipped to [-1, 1]; negative values scale by 0x8000 and the
    rest by 0x7FFF, truncating toward zero.

    Args:
        buffer: Audio to encode

    Returns:
        44-byte RIFF header followed by little-endian interleaved samples
    """
    num_channels = buffer.num_channels
    bytes_per_sample = BIT_DEPTH // 8
    block_align = num_channels * bytes_per_sample

    data = np.clip(interleave_channels(buffer).astype(np.float64), -1.0, 1.0)
    pcm = np.where(data < 0, data * 0x8000, data * 0x7FFF).astype("<i2")
    data_length = pcm.size * bytes_per_sample

    header = struct.pack(
        "<4sI4s4sIHHIIHH4sI",
        b"RIFF",
        36 + data_length,
        b"WAVE",
        b"fmt ",
        16,
        PCM_FORMAT,
        num_channels,
        buffer.sample_rate,
        buffer.sample_rate * block_align,
        block_align,
        BIT_DEPTH,
        b"data",
        data_length,
    )
    return header + pcm.tobytes()


def write_wav(path: Union[str, Path], buffer: MultiChannelBuffer) -> Path:
    """
    Encode a buffer and write it to disk.

    Returns:
        Path of the written file
    """
    path = Path(path)
    path.write_bytes(encode_to_container(buffer))
    logging.info(f"Wrote {buffer.duration:.2f}s of {buffer.num_channels}-channel PCM16 audio to {path}")
    return path
