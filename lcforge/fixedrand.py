"""Deterministic :class:`~lcforge.rand.SecureRandom` implementations.

These exist only for known-answer tests where an operation would otherwise
consume random bytes.
"""

from __future__ import annotations

from collections.abc import Sequence

from lcforge.rand import SecureRandom, _write_into

__all__ = ["FixedByteRandom", "FixedSliceRandom", "FixedSliceSequenceRandom"]


class FixedByteRandom(SecureRandom):
    """Fills every output buffer with the same byte."""

    def __init__(self, byte: int) -> None:
        if not 0 <= byte <= 0xFF:
            raise ValueError("byte must be in range 0..255")
        self.byte = byte

    def fill(self, dest) -> None:
        size = memoryview(dest).nbytes
        _write_into(dest, bytes([self.byte]) * size)

    def __repr__(self) -> str:
        return f"FixedByteRandom(byte={self.byte})"


class FixedSliceRandom(SecureRandom):
    """Fills the output with a fixed byte string of exactly the same length."""

    def __init__(self, data: bytes) -> None:
        self.data = bytes(data)

    def fill(self, dest) -> None:
        _write_into(dest, self.data)

    def __repr__(self) -> str:
        return f"FixedSliceRandom(data={self.data!r})"


class FixedSliceSequenceRandom(SecureRandom):
    """Returns one byte string per call to :meth:`fill`, in order.

    Each output buffer must have exactly the length of its byte string, and
    :meth:`fill` must be called once for every entry. Used as a context
    manager, it checks on exit that every entry was consumed. Not thread-safe.
    """

    def __init__(self, chunks: Sequence[bytes]) -> None:
        self.chunks = [bytes(chunk) for chunk in chunks]
        self.current = 0

    def fill(self, dest) -> None:
        if self.current >= len(self.chunks):
            raise IndexError("no fixed random values remain")
        _write_into(dest, self.chunks[self.current])
        self.current += 1

    def check_exhausted(self) -> None:
        """Raise ``ValueError`` unless every entry has been handed out."""
        if self.current != len(self.chunks):
            raise ValueError(
                f"fill() called {self.current} times, expected {len(self.chunks)}"
            )

    def __enter__(self) -> FixedSliceSequenceRandom:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.check_exhausted()

    def __repr__(self) -> str:
        return f"FixedSliceSequenceRandom(chunks={len(self.chunks)}, current={self.current})"