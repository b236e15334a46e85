"""Cryptographically secure random byte generation.

An application should create a single :class:`SystemRandom` and pass it to
every function that needs randomness, rather than having each function draw
from the operating system on its own. Taking a :class:`SecureRandom` argument
documents where non-deterministic output happens. It also lets tests swap in
a deterministic generator.
"""

from __future__ import annotations

import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Generic, TypeVar

__all__ = ["Unspecified", "SecureRandom", "SystemRandom", "Random", "generate", "fill"]

T = TypeVar("T")


class Unspecified(Exception):
    """An operation failed for a reason that is deliberately not disclosed."""


def _write_into(dest, data: bytes) -> None:
    """Copy ``data`` over the whole of the writable buffer ``dest``.

    The buffer is never resized: a length mismatch raises ``ValueError`` and
    a read-only buffer raises ``TypeError``.
    """
    view = memoryview(dest).cast("B")
    if view.readonly:
        raise TypeError("destination buffer is read-only")
    if len(view) != len(data):
        raise ValueError(
            f"destination length {len(view)} does not match source length {len(data)}"
        )
    view[:] = data


class SecureRandom(ABC):
    """A source of secure random bytes."""

    @abstractmethod
    def fill(self, dest) -> None:
        """Fill the writable buffer ``dest`` with random bytes.

        Raises :class:`Unspecified` if the bytes cannot be produced.
        """


@dataclass(frozen=True)
class SystemRandom(SecureRandom):
    """Random bytes drawn from the operating system's secure generator.

    A single instance may be shared freely between threads.
    """

    def fill(self, dest) -> None:
        fill(dest)


class Random(Generic[T]):
    """A random value that has not yet been handed out."""

    __slots__ = ("_value",)

    def __init__(self, value: T) -> None:
        self._value = value

    def expose(self) -> T:
        """Return the random value."""
        return self._value

    def __repr__(self) -> str:
        return "Random(<hidden>)"


def generate(rng: SecureRandom, length: int) -> Random[bytes]:
    """Produce ``length`` random bytes from ``rng``, wrapped in :class:`Random`."""
    if length < 0:
        raise ValueError("length must not be negative")
    buf = bytearray(length)
    rng.fill(buf)
    return Random(bytes(buf))


def fill(dest) -> None:
    """Fill the writable buffer ``dest`` with bytes from the system generator.

    Raises :class:`Unspecified` if the system generator is unavailable.
    """
    size = memoryview(dest).nbytes
    try:
        data = os.urandom(size)
    except NotImplementedError as exc:
        raise Unspecified("system random source unavailable") from exc
    _write_into(dest, data)