import random

import pytest

from udformat.compress import DecompressError
from udformat.simple_u32 import compress, decompress


@pytest.mark.parametrize(
    "data",
    [
        [0, 1],
        [16209, 59, 3994, 59],
        [45, 11],
    ],
)
def test_regressions(data):
    stream = compress(data)
    assert decompress(stream, len(data)) == data


def test_empty():
    assert compress([]) == b""
    assert decompress(b"", 0) == []


def test_max_repeat_of_zeros():
    stream = compress([0] * 16)
    assert stream == b"\xef"
    assert decompress(stream, 16) == [0] * 16


@pytest.mark.parametrize("seed", range(10))
def test_random_round_trip(seed):
    rng = random.Random(seed)
    max_bits = rng.randrange(2, 33)
    data = [rng.getrandbits(rng.randrange(0, max_bits)) for _ in range(rng.randrange(10, 300))]
    stream = compress(data)
    assert decompress(stream, len(data)) == data


def test_large_values_round_trip():
    data = [0xFFFFFFFF, 0, 0x80000000, 0x7FFFFFFF, 0x12345678, 0x12345678, 0xA0908070]
    assert decompress(compress(data), len(data)) == data


def test_count_too_small_raises():
    data = [5, 900, 70000, 3]
    with pytest.raises(DecompressError):
        decompress(compress(data), len(data) - 1)


def test_count_too_large_raises():
    data = [5, 900, 70000, 3]
    with pytest.raises(DecompressError):
        decompress(compress(data), len(data) + 1)


def test_truncated_stream_raises():
    data = [0xDEADBEEF]
    stream = compress(data)
    with pytest.raises(DecompressError):
        decompress(stream[:-1], 1)


def test_out_of_range_value_rejected():
    with pytest.raises(ValueError):
        compress([1 << 32])
    with pytest.raises(ValueError):
        compress([-1])