#!/usr/bin/env python
from dataclasses import dataclass
from enum import Enum

import numpy as np


@dataclass(frozen=True)
class MultiChannelBuffer:
    """
    Immutable container for multichannel audio.

    Samples are stored as a (channels, length) float array. All channels
    share the same sample rate and length.
    """
    samples: np.ndarray
    sample_rate: int

    def __post_init__(self) -> None:
        if self.samples.ndim != 2:
            raise ValueError(f"Expected a (channels, length) array, got shape {self.samples.shape}")
        if self.sample_rate <= 0:
            raise ValueError(f"Sample rate must be positive, got {self.sample_rate}")

    @classmethod
    def allocate(cls, channels: int, length: int, sample_rate: int) -> "MultiChannelBuffer":
        """
        Allocate a silent buffer.

        Args:
            channels: Number of channels
            length: Number of samples per channel
            sample_rate: Sample rate in Hz

        Returns:
            Zero-filled MultiChannelBuffer
        """
        return cls(samples=np.zeros((channels, length), dtype=np.float32), sample_rate=sample_rate)

    @classmethod
    def from_array(cls, array: np.ndarray, sample_rate: int) -> "MultiChannelBuffer":
        """
        Build a buffer from a mono (length,) or (channels, length) array.
        The samples are copied so the buffer never aliases the caller's data.
        """
        samples = np.array(array, dtype=np.float32, copy=True)
        if samples.ndim == 1:
            samples = samples.reshape(1, -1)
        return cls(samples=samples, sample_rate=sample_rate)

    @property
    def num_channels(self) -> int:
        return self.samples.shape[0]

    @property
    def length(self) -> int:
        return self.samples.shape[1]

    @property
    def duration(self) -> float:
        """Duration in seconds."""
        return self.length / self.sample_rate

    def channel(self, index: int) -> np.ndarray:
        """Return the samples of a single channel."""
        return self.samples[index]


@dataclass(frozen=True)
class LoopPoints:
    """
    Coarse, user-supplied loop boundaries in seconds.
    """
    start: float
    end: float


@dataclass(frozen=True)
class OptimizedLoopPoints:
    """
    Loop boundaries refined to exact sample positions, plus the crossfade
    duration to use when stitching the seam.
    """
    start: float
    end: float
    start_sample: int
    end_sample: int
    crossfade_duration: float

    @property
    def loop_samples(self) -> int:
        """
        Calculate loop length in samples.
        """
        return self.end_sample - self.start_sample

    def loop_duration(self, sr: int) -> float:
        """
        Calculate loop duration in seconds.

        Args:
            sr: Sample rate

        Returns:
            Duration in seconds
        """
        return self.loop_samples / sr


class ExportMode(str, Enum):
    SINGLE = "single"
    EXTENDED = "extended"


@dataclass(frozen=True)
class ProcessResult:
    """
    Immutable container for audio processing results.
    """
    looped_audio: MultiChannelBuffer
    loop_points: OptimizedLoopPoints
    audio_path: str
