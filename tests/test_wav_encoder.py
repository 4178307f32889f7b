import io
import struct
import wave

import numpy as np
import soundfile as sf

from models import MultiChannelBuffer
from wav_encoder import HEADER_SIZE, encode_to_container, write_wav


def decode_pcm16(data: bytes) -> np.ndarray:
    """Reference reader: inverse of the encoder's asymmetric scaling."""
    ints, _ = sf.read(io.BytesIO(data), dtype="int16", always_2d=True)
    ints = ints.T.astype(np.float64)
    return np.where(ints < 0, ints / 0x8000, ints / 0x7FFF)


def test_header_fields():
    buffer = MultiChannelBuffer.allocate(2, 1000, 48000)
    data = encode_to_container(buffer)

    assert len(data) == HEADER_SIZE + 1000 * 2 * 2
    riff, riff_size, wave_tag, fmt, fmt_size, audio_format, channels, rate, byte_rate, block_align, bits, data_tag, data_size = struct.unpack(
        "<4sI4s4sIHHIIHH4sI", data[:HEADER_SIZE]
    )
    assert (riff, wave_tag, fmt, data_tag) == (b"RIFF", b"WAVE", b"fmt ", b"data")
    assert riff_size == 36 + data_size
    assert (fmt_size, audio_format, channels, rate) == (16, 1, 2, 48000)
    assert (byte_rate, block_align, bits) == (48000 * 4, 4, 16)
    assert data_size == 4000


def test_standard_reader_agrees_with_header():
    buffer = MultiChannelBuffer.allocate(3, 777, 22050)
    with wave.open(io.BytesIO(encode_to_container(buffer))) as reader:
        assert reader.getnchannels() == 3
        assert reader.getframerate() == 22050
        assert reader.getsampwidth() == 2
        assert reader.getnframes() == 777


def test_round_trip_within_one_step():
    # Multiples of 1/64 are exact in float32, including values outside [-1, 1].
    values = np.arange(-96, 97) / 64.0
    samples = np.stack([values, values[::-1]])
    buffer = MultiChannelBuffer.from_array(samples, 44100)

    decoded = decode_pcm16(encode_to_container(buffer))

    assert decoded.shape == samples.shape
    np.testing.assert_array_less(np.abs(decoded - np.clip(samples, -1.0, 1.0)), 1 / 32768)


def test_extremes_and_interleaving():
    buffer = MultiChannelBuffer.from_array(np.array([[1.0, -1.0, 0.0], [0.5, -0.5, 2.0]]), 8000)
    payload = encode_to_container(buffer)[HEADER_SIZE:]
    assert list(np.frombuffer(payload, dtype="<i2")) == [32767, 16383, -32768, -16384, 0, 32767]


def test_write_wav(tmp_path):
    buffer = MultiChannelBuffer.from_array(np.linspace(-0.5, 0.5, 100), 16000)
    path = write_wav(tmp_path / "loop.wav", buffer)
    assert path.read_bytes() == encode_to_container(buffer)
    info = sf.info(str(path))
    assert (info.samplerate, info.channels, info.frames) == (16000, 1, 100)
