import random

import pytest

from udformat.compress import DecompressError
from udformat.simple_u16 import compress, decompress


@pytest.mark.parametrize(
    "data",
    [
        [0, 1],
        [16209, 59, 3994, 59],
    ],
)
def test_regressions(data):
    stream = compress(data)
    assert decompress(stream, len(data)) == data


def test_empty():
    assert compress([]) == b""
    assert decompress(b"", 0) == []


def test_max_repeat_of_zeros():
    stream = compress([0] * 32)
    assert stream == b"\xdf"
    assert decompress(stream, 32) == [0] * 32


def test_backwards_deltas_round_trip():
    data = [1000, 999, 10, 65535, 0, 65535, 12]
    assert decompress(compress(data), len(data)) == data


@pytest.mark.parametrize("seed", range(10))
def test_random_round_trip(seed):
    rng = random.Random(seed)
    max_bits = rng.randrange(2, 17)
    data = [rng.getrandbits(rng.randrange(0, max_bits)) for _ in range(rng.randrange(10, 300))]
    assert decompress(compress(data), len(data)) == data


def test_long_repeats_round_trip():
    data = [7] * 100 + [8] * 33 + [9]
    stream = compress(data)
    assert len(stream) < 20
    assert decompress(stream, len(data)) == data


def test_count_mismatch_raises():
    data = [3, 40000, 2]
    stream = compress(data)
    with pytest.raises(DecompressError):
        decompress(stream, 2)
    with pytest.raises(DecompressError):
        decompress(stream, 4)


def test_truncated_stream_raises():
    stream = compress([40000])
    with pytest.raises(DecompressError):
        decompress(stream[:-1], 1)


def test_out_of_range_value_rejected():
    with pytest.raises(ValueError):
        compress([1 << 16])