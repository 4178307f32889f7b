import numpy as np
import pytest

from models import MultiChannelBuffer


def sine(freq: float, duration: float, sr: int, offset: float = 0.3, amplitude: float = 1.0) -> np.ndarray:
    """Sine sampled between its zero-crossings, so no sample is exactly zero."""
    n = np.arange(int(round(duration * sr)))
    return amplitude * np.sin(2 * np.pi * freq * (n + offset) / sr)


@pytest.fixture
def make_sine():
    return sine


@pytest.fixture
def sine_buffer():
    def _build(freq: float = 20.0, duration: float = 2.0, sr: int = 44100, channels: int = 1) -> MultiChannelBuffer:
        mono = sine(freq, duration, sr)
        stacked = np.stack([np.roll(mono, 37 * ch) for ch in range(channels)])
        return MultiChannelBuffer.from_array(stacked, sr)
    return _build


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def fs(tmp_path):
    from fs import FS
    return FS(root=tmp_path)


@pytest.fixture
def ambience_file(fs):
    import soundfile as sf

    sr = 22050
    left = sine(20.0, 3.0, sr, amplitude=0.6)
    right = sine(20.0, 3.0, sr, offset=100.3, amplitude=0.4)
    path = fs.sound_input_folder / "ambience.wav"
    sf.write(str(path), np.stack([left, right], axis=1), sr)
    return path
