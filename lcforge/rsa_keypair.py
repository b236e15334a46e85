"""RSA key pairs for signing.

Only two-prime keys are accepted. Each prime must be 1024 to 2048 bits long
and a multiple of 512 bits, both primes the same size. The public exponent
must be at least 65537.
"""

from __future__ import annotations

from dataclasses import dataclass

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from lcforge.rand import SecureRandom, Unspecified
from lcforge.rsa_params import (
    KeyRejected,
    RsaSignatureEncoding,
    _hash_algorithm,
    _padding_for,
    _parse_unsigned,
    _read_tlv,
)

__all__ = ["RsaSubjectPublicKey", "RsaKeyPair"]

_MIN_PRIME_BITS = 1024
_MAX_PRIME_BITS = 2048
_MIN_EXPONENT = 65537


def _to_be_bytes(value: int) -> bytes:
    return value.to_bytes(max(1, (value.bit_length() + 7) // 8), "big")


@dataclass(frozen=True, repr=False)
class RsaSubjectPublicKey:
    """A serialized RSA public key: a DER ``RSAPublicKey`` structure."""

    key: bytes
    _n: int
    _e: int

    @classmethod
    def _from_public_key(cls, public: rsa.RSAPublicKey) -> RsaSubjectPublicKey:
        numbers = public.public_numbers()
        der = public.public_bytes(
            serialization.Encoding.DER, serialization.PublicFormat.PKCS1
        )
        return cls(der, numbers.n, numbers.e)

    def modulus(self) -> bytes:
        """The public modulus (n), big-endian without leading zeros."""
        return _to_be_bytes(self._n)

    def exponent(self) -> bytes:
        """The public exponent (e), big-endian without leading zeros."""
        return _to_be_bytes(self._e)

    def __bytes__(self) -> bytes:
        return self.key

    def __repr__(self) -> str:
        return f'RsaSubjectPublicKey("{self.key.hex()}")'


def _validate(p: int, q: int, e: int, n: int) -> None:
    p_bits, q_bits = p.bit_length(), q.bit_length()
    if p_bits != q_bits:
        raise KeyRejected.inconsistent_components()
    if p_bits % 512 != 0:
        raise KeyRejected.private_modulus_len_not_multiple_of_512_bits()
    if p_bits < _MIN_PRIME_BITS:
        raise KeyRejected.too_small()
    if p_bits > _MAX_PRIME_BITS:
        raise KeyRejected.too_large()
    if e < _MIN_EXPONENT:
        raise KeyRejected.too_small()
    if p * q != n:
        raise KeyRejected.inconsistent_components()


def _parse_private_key(der: bytes) -> rsa.RSAPrivateNumbers:
    """Parse a two-prime ``RSAPrivateKey`` SEQUENCE into its numbers."""
    try:
        tag, body, _ = _read_tlv(der, 0)
        if tag != 0x30:
            raise KeyRejected.invalid_encoding()
        values = []
        pos = 0
        for _ in range(9):
            tag, value, pos = _read_tlv(body, pos)
            if tag != 0x02:
                raise KeyRejected.invalid_encoding()
            values.append(_parse_unsigned(value))
    except KeyRejected:
        raise
    except Unspecified:
        raise KeyRejected.invalid_encoding() from None
    if pos != len(body) or values[0] != 0:
        raise KeyRejected.invalid_encoding()
    _, n, e, d, p, q, dp, dq, qinv = values
    return rsa.RSAPrivateNumbers(p, q, d, dp, dq, qinv, rsa.RSAPublicNumbers(e, n))


def _looks_like_pkcs8(der: bytes) -> bool:
    try:
        tag, body, _ = _read_tlv(der, 0)
        if tag != 0x30:
            return False
        tag, _, pos = _read_tlv(body, 0)
        if tag != 0x02:
            return False
        tag, _, _ = _read_tlv(body, pos)
    except Unspecified:
        return False
    return tag == 0x30


class RsaKeyPair:
    """An RSA key pair, used for signing."""

    __slots__ = ("_key", "_public")

    def __init__(self, key: rsa.RSAPrivateKey) -> None:
        self._key = key
        self._public = RsaSubjectPublicKey._from_public_key(key.public_key())

    @classmethod
    def from_pkcs8(cls, pkcs8: bytes) -> RsaKeyPair:
        """Parse an unencrypted PKCS#8 DER-encoded RSA private key.

        Raises :class:`~lcforge.rsa_params.KeyRejected` if the bytes do not
        encode an acceptable RSA private key.
        """
        pkcs8 = bytes(pkcs8)
        if not _looks_like_pkcs8(pkcs8):
            raise KeyRejected.invalid_encoding()
        try:
            key = serialization.load_der_private_key(pkcs8, password=None)
        except (ValueError, TypeError, UnsupportedAlgorithm):
            raise KeyRejected.invalid_encoding() from None
        if not isinstance(key, rsa.RSAPrivateKey):
            raise KeyRejected.wrong_algorithm()
        numbers = key.private_numbers()
        public = numbers.public_numbers
        _validate(numbers.p, numbers.q, public.e, public.n)
        return cls(key)

    @classmethod
    def from_der(cls, der: bytes) -> RsaKeyPair:
        """Parse a DER-encoded ``RSAPrivateKey`` structure (RFC 8017).

        Raises :class:`~lcforge.rsa_params.KeyRejected` on error.
        """
        numbers = _parse_private_key(bytes(der))
        public = numbers.public_numbers
        _validate(numbers.p, numbers.q, public.e, public.n)
        try:
            key = numbers.private_key()
        except (ValueError, UnsupportedAlgorithm):
            raise KeyRejected.inconsistent_components() from None
        return cls(key)

    def sign(
        self, padding_alg: RsaSignatureEncoding, rng: SecureRandom, msg: bytes
    ) -> bytes:
        """Digest ``msg``, pad it per ``padding_alg`` and return the signature.

        The signature is :meth:`public_modulus_len` bytes long. ``rng`` is
        accepted for interface compatibility and not used. Raises
        :class:`~lcforge.rand.Unspecified` on error.
        """
        hash_alg = _hash_algorithm(padding_alg.digest)
        try:
            signature = self._key.sign(
                bytes(msg), _padding_for(padding_alg.padding, hash_alg), hash_alg
            )
        except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
            raise Unspecified("signing failed") from exc
        if len(signature) != self.public_modulus_len():
            raise Unspecified("signature has unexpected length")
        return signature

    def public_modulus_len(self) -> int:
        """Length in bytes of the public modulus, and of every signature."""
        return (self._key.key_size + 7) // 8

    def public_key(self) -> RsaSubjectPublicKey:
        """The serialized public key."""
        return self._public

    def __repr__(self) -> str:
        return f"RsaKeyPair {{ public_key: {self._public!r} }}"