"""Reader for known-answer test vector files.

A vector file is a sequence of cases separated by blank lines. Each case is
a list of ``Key = Value`` attributes. Lines starting with ``#`` are comments,
and a line of the form ``[name]`` at the start of a case opens a named
section that lasts until the next one::

    # This is a comment.

    HMAC = SHA1
    Input = "My test data"
    Key = ""
    Output = 61afdecb95429ef494d61fdee15990cabf0826fc

Byte values are written either as hex digits or as a double-quoted string;
the empty byte string can only be written as ``""``. Every attribute of a
case must be consumed exactly once, which catches typos and omissions.
"""

from __future__ import annotations

import logging
import re
import string
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from os import PathLike
from pathlib import Path

from lcforge.rand import Unspecified

__all__ = [
    "VectorError",
    "VectorCase",
    "VectorFile",
    "load_file",
    "parse_cases",
    "run",
    "to_hex",
    "to_hex_upper",
    "from_hex",
    "from_dirty_hex",
]

_log = logging.getLogger(__name__)

_HEX_DIGITS = frozenset(string.hexdigits)
_UNSIGNED = re.compile(r"\+?[0-9]+")

_DIGEST_ALGORITHMS = {
    "SHA1": "sha1",
    "SHA224": "sha224",
    "SHA256": "sha256",
    "SHA384": "sha384",
    "SHA512": "sha512",
    "SHA512_256": "sha512_256",
    "SHA3_256": "sha3_256",
    "SHA3_384": "sha3_384",
    "SHA3_512": "sha3_512",
}

_ESCAPES = {ord("0"): 0, ord("t"): ord("\t"), ord("n"): ord("\n")}


class VectorError(Exception):
    """A vector file is malformed, or a test run over it failed."""


@dataclass
class _Attribute:
    name: str
    value: str
    consumed: bool = False


@dataclass
class VectorCase:
    """One test case: named attributes, each to be consumed exactly once."""

    attributes: list[_Attribute] = field(default_factory=list)

    def consume_digest_alg(self, key: str) -> str:
        """Return the ``hashlib`` name of the digest algorithm named by ``key``."""
        name = self.consume_string(key)
        try:
            return _DIGEST_ALGORITHMS[name]
        except KeyError:
            raise VectorError(f"Unsupported digest algorithm: {name}") from None

    def consume_bytes(self, key: str) -> bytes:
        """Return an attribute written as hex digits or as a quoted string."""
        value = self.consume_optional_bytes(key)
        if value is None:
            raise VectorError(f'No attribute named "{key}"')
        return value

    def consume_optional_bytes(self, key: str) -> bytes | None:
        """Like :meth:`consume_bytes`, but ``None`` if the attribute is absent."""
        text = self.consume_optional_string(key)
        if text is None:
            return None
        if text.startswith('"'):
            return _unquote(text)
        try:
            return from_hex(text)
        except ValueError as exc:
            raise VectorError(f"{exc} in {text}") from None

    def consume_usize(self, key: str) -> int:
        """Return an attribute holding a non-negative decimal integer."""
        text = self.consume_string(key)
        if not _UNSIGNED.fullmatch(text):
            raise VectorError(f"Invalid unsigned integer: {text}")
        return int(text)

    def consume_string(self, key: str) -> str:
        """Return the raw text of an attribute."""
        value = self.consume_optional_string(key)
        if value is None:
            raise VectorError(f'No attribute named "{key}"')
        return value

    def consume_optional_string(self, key: str) -> str | None:
        """Like :meth:`consume_string`, but ``None`` if the attribute is absent."""
        for attribute in self.attributes:
            if attribute.name == key:
                if attribute.consumed:
                    raise VectorError(f"Attribute {key} was already consumed")
                attribute.consumed = True
                return attribute.value
        return None

    @property
    def unconsumed(self) -> list[str]:
        """Names of the attributes not yet consumed."""
        return [a.name for a in self.attributes if not a.consumed]


def _unquote(text: str) -> bytes:
    data = iter(text.encode("utf-8")[1:])
    out = bytearray()
    for byte in data:
        if byte == ord("\\"):
            escaped = next(data, None)
            if escaped not in _ESCAPES:
                raise VectorError("Invalid hex escape sequence in string.")
            out.append(_ESCAPES[escaped])
        elif byte == ord('"'):
            if next(data, None) is not None:
                raise VectorError(
                    "characters after the closing quote of a quoted string."
                )
            return bytes(out)
        else:
            out.append(byte)
    raise VectorError("Missing terminating '\"' in string literal.")


@dataclass(frozen=True)
class VectorFile:
    """A vector file: its name, used in messages, and its text."""

    file_name: str
    contents: str


def load_file(path: str | PathLike[str]) -> VectorFile:
    """Read a vector file from disk."""
    path = Path(path)
    return VectorFile(file_name=str(path), contents=path.read_text(encoding="utf-8"))


def _lines(contents: str) -> Iterator[str]:
    pieces = contents.split("\n")
    if pieces and pieces[-1] == "":
        pieces.pop()
    for piece in pieces:
        yield piece.removesuffix("\r")


def parse_cases(contents: str) -> Iterator[tuple[str, VectorCase]]:
    """Yield ``(section, case)`` pairs from the text of a vector file.

    Parsing is lazy: a syntax error is raised when the case holding it is
    reached.
    """
    section = ""
    attributes: list[_Attribute] = []
    for line in _lines(contents):
        if not line:
            if attributes:
                yield section, VectorCase(attributes)
                attributes = []
        elif line.startswith("#"):
            continue
        elif line.startswith("["):
            if attributes:
                raise VectorError("Section header inside a test case.")
            if not line.endswith("]") or len(line) < 2:
                raise VectorError(f"Malformed section header: {line}")
            section = line[1:-1]
        else:
            name, sep, value = line.partition(" = ")
            if not sep:
                raise VectorError("Syntax error: Expected Key = Value.")
            value = value.strip()
            if not value:
                raise VectorError(f"Empty value for attribute {name.strip()}")
            attributes.append(_Attribute(name.strip(), value))
    if attributes:
        yield section, VectorCase(attributes)


def run(
    test_file: VectorFile, f: Callable[[str, VectorCase], object]
) -> int:
    """Call ``f(section, case)`` on every case of ``test_file``.

    A case fails when ``f`` raises :class:`~lcforge.rand.Unspecified` or
    leaves an attribute unconsumed; every case is still run. Any other
    exception from ``f`` propagates at once. Raises :class:`VectorError`
    with the message ``"Test failed."`` if any case failed, and otherwise
    returns the number of cases run.
    """
    failed = False
    count = 0
    for section, case in parse_cases(test_file.contents):
        count += 1
        try:
            f(section, case)
        except Unspecified:
            message = "Test returned Unspecified."
        else:
            message = (
                "Test didn't consume all attributes." if case.unconsumed else None
            )
        if message is not None:
            failed = True
            _log.warning("%s: %s", test_file.file_name, message)
            for attribute in case.attributes:
                note = "" if attribute.consumed else " (unconsumed)"
                _log.warning("%s%s = %s", attribute.name, note, attribute.value)
    if failed:
        raise VectorError("Test failed.")
    return count


def to_hex(data: bytes) -> str:
    """Lower-case hex encoding of ``data``."""
    return bytes(data).hex()


def to_hex_upper(data: bytes) -> str:
    """Upper-case hex encoding of ``data``."""
    return to_hex(data).upper()


def from_hex(hex_str: str) -> bytes:
    """Decode hex digits; an odd trailing digit becomes a byte's high nibble.

    Raises ``ValueError`` on any character that is not a hex digit.
    """
    if any(ch not in _HEX_DIGITS for ch in hex_str):
        raise ValueError("Invalid hex string")
    if len(hex_str) % 2:
        hex_str += "0"
    return bytes.fromhex(hex_str)


def from_dirty_hex(hex_str: str) -> bytes:
    """Decode hex digits, ignoring every other character."""
    return from_hex("".join(ch for ch in hex_str if ch in _HEX_DIGITS))