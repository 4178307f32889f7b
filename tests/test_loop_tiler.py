import numpy as np
import pytest

from loop_tiler import tile
from models import MultiChannelBuffer


@pytest.fixture
def loop(rng):
    # Half a second at a power-of-two rate keeps durations exact in binary.
    return MultiChannelBuffer.from_array(rng.uniform(-1.0, 1.0, (2, 512)), 1024)


def test_integer_repeats_are_exact_copies(loop):
    repeats = 7
    extended = tile(loop, repeats * loop.duration)
    assert extended.length == repeats * loop.length
    for k in range(repeats):
        np.testing.assert_array_equal(extended.samples[:, k * loop.length:(k + 1) * loop.length], loop.samples)


def test_partial_repeat_wraps_around(loop):
    extended = tile(loop, 1.25)
    assert extended.length == 1280
    assert extended.num_channels == 2
    np.testing.assert_array_equal(extended.samples[:, 1024:], loop.samples[:, :256])


def test_output_does_not_alias_loop(loop):
    extended = tile(loop, 0.75)
    assert not np.shares_memory(extended.samples, loop.samples)


def test_product_range_duration(loop):
    extended = tile(loop, 60.0)
    assert extended.length == 60 * 1024
    assert extended.duration == pytest.approx(60.0)


@pytest.mark.parametrize("duration", [0.0, -1.0, float("nan"), float("inf")])
def test_rejects_invalid_duration(loop, duration):
    with pytest.raises(ValueError):
        tile(loop, duration)
