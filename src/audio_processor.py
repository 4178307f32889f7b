#!/usr/bin/env python
import logging
from pathlib import Path
from typing import Optional, Union

import librosa
import numpy as np

from fs import FS
from loop_optimizer import optimize_loop_points
from loop_tiler import tile
from models import ExportMode, LoopPoints, MultiChannelBuffer, OptimizedLoopPoints, ProcessResult
from seam_synthesizer import synthesize_loop
from wav_encoder import write_wav


def load_audio(audio_file: Union[str, Path]) -> MultiChannelBuffer:
    """
    Decode an audio file into a MultiChannelBuffer at its native sample rate.

    Raises:
        RuntimeError: If the file is missing or cannot be decoded
    """
    path = Path(audio_file)
    if not path.exists():
        raise RuntimeError(f"Could not load audio: file not found: {path}")
    try:
        y, sr = librosa.load(str(path), sr=None, mono=False)
    except Exception as e:
        raise RuntimeError(f"Could not load audio: {e}") from e
    if np.asarray(y).size == 0:
        raise RuntimeError(f"Could not load audio: {path} contains no samples")
    return MultiChannelBuffer.from_array(y, int(sr))


class SeamlessLooper:
    """
    Class responsible for turning a recording into a seamless loop:
    - Refining coarse loop points
    - Stitching the seam
    - Extending the loop and saving the result
    """
    def __init__(self, audio_file: str, fs: FS) -> None:
        """
        Load an audio file for looping.

        Args:
            audio_file: File name inside the input folder, or a path
            fs: File system manager
        """
        self.fs = fs
        self.audio_file: Path = self.fs.resolve_input(audio_file)
        self.buffer: MultiChannelBuffer = load_audio(self.audio_file)
        self.loop_points: Optional[OptimizedLoopPoints] = None
        logging.info(
            f"Loaded {self.audio_file.name}: {self.buffer.duration:.2f}s, "
            f"{self.buffer.sample_rate} Hz, {self.buffer.num_channels} channel(s)"
        )

    def optimize(self, loop_points: LoopPoints, crossfade_duration: float = 0.05) -> OptimizedLoopPoints:
        """
        Refine the requested loop points and remember the result.

        Raises:
            ValueError: If the loop points or crossfade are invalid
        """
        self.loop_points = optimize_loop_points(self.buffer, loop_points, crossfade_duration)
        return self.loop_points

    def create_loopable_segment(self) -> MultiChannelBuffer:
        """
        Build the single seamless loop.

        Raises:
            ValueError: If no loop points have been optimized yet
        """
        if self.loop_points is None:
            raise ValueError("Loop points not optimized")
        return synthesize_loop(self.buffer, self.loop_points)

    def create_extended_loop(self, target_duration_sec: float) -> MultiChannelBuffer:
        """
        Build the seamless loop and repeat it to the target duration.
        """
        return tile(self.create_loopable_segment(), target_duration_sec)

    def _default_output_name(self, mode: ExportMode, target_duration_sec: Optional[float]) -> str:
        base_name = self.audio_file.stem
        if mode is ExportMode.EXTENDED:
            minutes, seconds = divmod(int(target_duration_sec), 60)
            if minutes and not seconds:
                return f"{base_name}_loop_{minutes}min.wav"
            return f"{base_name}_loop_{int(target_duration_sec)}s.wav"
        return f"{base_name}_loop.wav"

    def process_and_save(
        self,
        mode: ExportMode = ExportMode.SINGLE,
        target_duration_sec: Optional[float] = None,
        output_file: Optional[str] = None,
        loop_points: Optional[LoopPoints] = None,
        crossfade_duration: float = 0.05,
    ) -> ProcessResult:
        """
        Produce the loop in the requested export mode and save it as WAV.

        Args:
            mode: SINGLE for one loop, EXTENDED to repeat it to target_duration_sec
            target_duration_sec: Required for EXTENDED mode
            output_file: Optional filename, auto-generated if None
            loop_points: Coarse points to optimize when none are remembered yet;
                the whole file is used if both are missing
            crossfade_duration: Requested crossfade when optimizing here

        Returns:
            ProcessResult object with processing results

        Raises:
            ValueError: If EXTENDED mode is requested without a target duration
        """
        mode = ExportMode(mode)
        if mode is ExportMode.EXTENDED and target_duration_sec is None:
            raise ValueError("Extended export needs a target duration")

        if loop_points is not None or self.loop_points is None:
            self.optimize(loop_points or LoopPoints(0.0, self.buffer.duration), crossfade_duration)

        if mode is ExportMode.EXTENDED:
            looped_audio = self.create_extended_loop(target_duration_sec)
        else:
            looped_audio = self.create_loopable_segment()

        if output_file is None:
            output_file = self._default_output_name(mode, target_duration_sec)
        output_path = write_wav(self.fs.sound_output_folder / output_file, looped_audio)
        logging.info(f"Looped audio saved to: {output_path}")

        return ProcessResult(looped_audio=looped_audio, loop_points=self.loop_points, audio_path=str(output_path))
