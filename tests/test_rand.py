import statistics

import pytest

from lcforge import rand
from lcforge.rand import Random, SecureRandom, SystemRandom, Unspecified, generate


def mean_and_deviation(values):
    data = [float(v) for v in values]
    return statistics.fmean(data), statistics.pstdev(data)


class _CountingRandom(SecureRandom):
    def fill(self, dest):
        view = memoryview(dest)
        for i in range(len(view)):
            view[i] = i % 256


class _FailingRandom(SecureRandom):
    def fill(self, dest):
        raise Unspecified("no randomness")


def test_secure_random_fill():
    random_array = bytearray(173)
    rng = SystemRandom()
    rng.fill(random_array)
    mean, deviation = mean_and_deviation(random_array)
    assert 106.0 <= mean < 150.0, f"Mean: {mean}"
    assert deviation > 8.0


def test_rand_fill():
    random_array = bytearray(173)
    rand.fill(random_array)
    mean, deviation = mean_and_deviation(random_array)
    assert 106.0 <= mean < 150.0, f"Mean: {mean}"
    assert deviation > 8.0


def test_randomly_constructable():
    rng = SystemRandom()
    random_array = generate(rng, 173).expose()
    assert len(random_array) == 173
    mean, deviation = mean_and_deviation(random_array)
    assert 106.0 <= mean < 150.0, f"Mean: {mean}"
    assert deviation > 8.0


LINUX_LIMIT = 256
WEB_LIMIT = 65536


@pytest.mark.parametrize(
    "length",
    [
        0,
        1,
        2,
        3,
        96,
        LINUX_LIMIT - 1,
        LINUX_LIMIT,
        LINUX_LIMIT + 1,
        LINUX_LIMIT * 2,
        511,
        512,
        513,
        4096,
        WEB_LIMIT - 1,
        WEB_LIMIT,
        WEB_LIMIT + 1,
        WEB_LIMIT * 2,
    ],
)
def test_system_random_lengths(length):
    buf = bytearray(length)
    SystemRandom().fill(buf)
    assert len(buf) == length
    if length >= 96:
        assert any(buf)


def test_system_random_repr_and_equality():
    assert repr(SystemRandom()) == "SystemRandom()"
    assert SystemRandom() == SystemRandom()


def test_fill_memoryview_writes_into_underlying_buffer():
    backing = bytearray(200)
    rand.fill(memoryview(backing)[50:150])
    assert backing[:50] == bytes(50)
    assert backing[150:] == bytes(50)
    assert any(backing[50:150])


def test_fill_readonly_buffer_rejected():
    with pytest.raises(TypeError):
        rand.fill(b"\x00" * 8)


def test_generate_uses_given_rng():
    value = generate(_CountingRandom(), 5).expose()
    assert value == bytes([0, 1, 2, 3, 4])


def test_generate_zero_length():
    assert generate(SystemRandom(), 0).expose() == b""


def test_generate_negative_length_rejected():
    with pytest.raises(ValueError):
        generate(SystemRandom(), -1)


def test_generate_propagates_failure():
    with pytest.raises(Unspecified):
        generate(_FailingRandom(), 16)


def test_random_expose_and_repr_hides_value():
    wrapped = Random(b"abc")
    assert wrapped.expose() == b"abc"
    assert "abc" not in repr(wrapped)


def test_secure_random_is_abstract():
    with pytest.raises(TypeError):
        SecureRandom()