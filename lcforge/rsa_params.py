"""RSA signature algorithms, verification parameters and public-key checks.

Public keys are DER-encoded ``RSAPublicKey`` structures (RFC 8017). Every
verification failure raises :class:`~lcforge.rand.Unspecified`: a bad
encoding, a modulus outside the allowed range and a bad signature all look
the same to the caller.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding as asym_padding
from cryptography.hazmat.primitives.asymmetric import rsa

from lcforge.rand import Unspecified

__all__ = [
    "KeyRejected",
    "RsaPadding",
    "RsaSigningAlgorithmId",
    "RsaVerificationAlgorithmId",
    "RsaSignatureEncoding",
    "RsaParameters",
    "public_modulus_bits",
    "RsaPublicKeyComponents",
    "RSA_PKCS1_SHA256",
    "RSA_PKCS1_SHA384",
    "RSA_PKCS1_SHA512",
    "RSA_PSS_SHA256",
    "RSA_PSS_SHA384",
    "RSA_PSS_SHA512",
    "RSA_PKCS1_1024_8192_SHA1_FOR_LEGACY_USE_ONLY",
    "RSA_PKCS1_1024_8192_SHA256_FOR_LEGACY_USE_ONLY",
    "RSA_PKCS1_1024_8192_SHA512_FOR_LEGACY_USE_ONLY",
    "RSA_PKCS1_2048_8192_SHA1_FOR_LEGACY_USE_ONLY",
    "RSA_PKCS1_2048_8192_SHA256",
    "RSA_PKCS1_2048_8192_SHA384",
    "RSA_PKCS1_2048_8192_SHA512",
    "RSA_PKCS1_3072_8192_SHA384",
    "RSA_PSS_2048_8192_SHA256",
    "RSA_PSS_2048_8192_SHA384",
    "RSA_PSS_2048_8192_SHA512",
]

_MAX_MODULUS_BITS = 16384


class KeyRejected(Unspecified):
    """A key was rejected; the message names the reason."""

    def __init__(self, description: str) -> None:
        super().__init__(description)
        self.description = description

    def __str__(self) -> str:
        return self.description

    @classmethod
    def inconsistent_components(cls) -> KeyRejected:
        return cls("InconsistentComponents")

    @classmethod
    def invalid_encoding(cls) -> KeyRejected:
        return cls("InvalidEncoding")

    @classmethod
    def too_small(cls) -> KeyRejected:
        return cls("TooSmall")

    @classmethod
    def too_large(cls) -> KeyRejected:
        return cls("TooLarge")

    @classmethod
    def private_modulus_len_not_multiple_of_512_bits(cls) -> KeyRejected:
        return cls("PrivateModulusLenNotMultipleOf512Bits")

    @classmethod
    def wrong_algorithm(cls) -> KeyRejected:
        return cls("WrongAlgorithm")

    @classmethod
    def unexpected_error(cls) -> KeyRejected:
        return cls("UnexpectedError")


class RsaPadding(Enum):
    """How a digest is padded before the RSA operation."""

    RSA_PKCS1_PADDING = "pkcs1"
    RSA_PKCS1_PSS_PADDING = "pss"


class RsaSigningAlgorithmId(Enum):
    RSA_PSS_SHA256 = "RSA_PSS_SHA256"
    RSA_PSS_SHA384 = "RSA_PSS_SHA384"
    RSA_PSS_SHA512 = "RSA_PSS_SHA512"
    RSA_PKCS1_SHA256 = "RSA_PKCS1_SHA256"
    RSA_PKCS1_SHA384 = "RSA_PKCS1_SHA384"
    RSA_PKCS1_SHA512 = "RSA_PKCS1_SHA512"


class RsaVerificationAlgorithmId(Enum):
    RSA_PKCS1_1024_8192_SHA1_FOR_LEGACY_USE_ONLY = "RSA_PKCS1_1024_8192_SHA1_FOR_LEGACY_USE_ONLY"
    RSA_PKCS1_1024_8192_SHA256_FOR_LEGACY_USE_ONLY = "RSA_PKCS1_1024_8192_SHA256_FOR_LEGACY_USE_ONLY"
    RSA_PKCS1_1024_8192_SHA512_FOR_LEGACY_USE_ONLY = "RSA_PKCS1_1024_8192_SHA512_FOR_LEGACY_USE_ONLY"
    RSA_PKCS1_2048_8192_SHA1_FOR_LEGACY_USE_ONLY = "RSA_PKCS1_2048_8192_SHA1_FOR_LEGACY_USE_ONLY"
    RSA_PKCS1_2048_8192_SHA256 = "RSA_PKCS1_2048_8192_SHA256"
    RSA_PKCS1_2048_8192_SHA384 = "RSA_PKCS1_2048_8192_SHA384"
    RSA_PKCS1_2048_8192_SHA512 = "RSA_PKCS1_2048_8192_SHA512"
    RSA_PKCS1_3072_8192_SHA384 = "RSA_PKCS1_3072_8192_SHA384"
    RSA_PSS_2048_8192_SHA256 = "RSA_PSS_2048_8192_SHA256"
    RSA_PSS_2048_8192_SHA384 = "RSA_PSS_2048_8192_SHA384"
    RSA_PSS_2048_8192_SHA512 = "RSA_PSS_2048_8192_SHA512"


_HASHES: dict[str, type[hashes.HashAlgorithm]] = {
    "sha1": hashes.SHA1,
    "sha256": hashes.SHA256,
    "sha384": hashes.SHA384,
    "sha512": hashes.SHA512,
}


def _hash_algorithm(digest: str) -> hashes.HashAlgorithm:
    try:
        return _HASHES[digest]()
    except KeyError:
        raise Unspecified(f"unsupported digest: {digest}") from None


def _padding_for(padding: RsaPadding, hash_alg: hashes.HashAlgorithm):
    if padding is RsaPadding.RSA_PKCS1_PSS_PADDING:
        # The salt is as long as the digest, with MGF1 over the same hash.
        return asym_padding.PSS(
            mgf=asym_padding.MGF1(hash_alg),
            salt_length=asym_padding.PSS.DIGEST_LENGTH,
        )
    return asym_padding.PKCS1v15()


@dataclass(frozen=True, repr=False)
class RsaSignatureEncoding:
    """A digest algorithm and padding used to produce RSA signatures."""

    digest: str
    padding: RsaPadding
    id: RsaSigningAlgorithmId

    def __repr__(self) -> str:
        return f"{{ {self.id.name} }}"


@dataclass(frozen=True, repr=False)
class RsaParameters:
    """Digest, padding and allowed modulus sizes for RSA verification."""

    digest: str
    padding: RsaPadding
    bit_range: tuple[int, int]
    id: RsaVerificationAlgorithmId

    def __repr__(self) -> str:
        return f"{{ {self.id.name} }}"

    def min_modulus_len(self) -> int:
        """Minimum modulus length in bits."""
        return self.bit_range[0]

    def max_modulus_len(self) -> int:
        """Maximum modulus length in bits."""
        return self.bit_range[1]

    def verify_sig(self, public_key: bytes, msg: bytes, signature: bytes) -> None:
        """Verify ``signature`` over ``msg`` with a DER ``RSAPublicKey``.

        Raises :class:`~lcforge.rand.Unspecified` on any failure.
        """
        n, e = _parse_public_key(bytes(public_key))
        _verify(self, _public_key(n, e), n, msg, signature)


def _verify(
    params: RsaParameters,
    key: rsa.RSAPublicKey,
    n: int,
    msg: bytes,
    signature: bytes,
) -> None:
    low, high = params.bit_range
    if not low <= n.bit_length() <= high:
        raise Unspecified("modulus size out of range")
    hash_alg = _hash_algorithm(params.digest)
    try:
        key.verify(
            bytes(signature), bytes(msg), _padding_for(params.padding, hash_alg), hash_alg
        )
    except (InvalidSignature, ValueError, UnsupportedAlgorithm) as exc:
        raise Unspecified("signature verification failed") from exc


def _public_key(n: int, e: int) -> rsa.RSAPublicKey:
    if n.bit_length() > _MAX_MODULUS_BITS or e <= 1 or e % 2 == 0 or e >= n:
        raise Unspecified("invalid RSA public key")
    try:
        return rsa.RSAPublicNumbers(e, n).public_key()
    except (ValueError, UnsupportedAlgorithm) as exc:
        raise Unspecified("invalid RSA public key") from exc


def _read_tlv(data: bytes, pos: int) -> tuple[int, bytes, int]:
    """Read one DER element at ``pos``; return its tag, contents and end."""
    if pos + 2 > len(data):
        raise Unspecified("truncated DER element")
    tag = data[pos]
    if tag & 0x1F == 0x1F:
        raise Unspecified("unsupported DER tag")
    first = data[pos + 1]
    if first < 0x80:
        length, start = first, pos + 2
    else:
        count = first & 0x7F
        if count == 0 or count > 4:
            raise Unspecified("unsupported DER length")
        raw = data[pos + 2 : pos + 2 + count]
        if len(raw) != count or raw[0] == 0:
            raise Unspecified("invalid DER length")
        length = int.from_bytes(raw, "big")
        if length < 0x80:
            raise Unspecified("non-minimal DER length")
        start = pos + 2 + count
    end = start + length
    if end > len(data):
        raise Unspecified("truncated DER element")
    return tag, data[start:end], end


def _parse_unsigned(value: bytes) -> int:
    if not value or value[0] & 0x80:
        raise Unspecified("integer is empty or negative")
    if len(value) > 1 and value[0] == 0 and value[1] < 0x80:
        raise Unspecified("integer is not minimally encoded")
    return int.from_bytes(value, "big")


def _parse_public_key(der: bytes) -> tuple[int, int]:
    """Parse an ``RSAPublicKey`` SEQUENCE into ``(n, e)``.

    Bytes after the outer SEQUENCE are left unread, as a streaming parser
    would leave them.
    """
    tag, body, _ = _read_tlv(der, 0)
    if tag != 0x30:
        raise Unspecified("expected a SEQUENCE")
    values = []
    pos = 0
    for _name in ("n", "e"):
        tag, value, pos = _read_tlv(body, pos)
        if tag != 0x02:
            raise Unspecified("expected an INTEGER")
        values.append(_parse_unsigned(value))
    if pos != len(body):
        raise Unspecified("trailing data in RSAPublicKey")
    n, e = values
    return n, e


def public_modulus_bits(public_key: bytes) -> int:
    """Return the modulus size in bits of a DER ``RSAPublicKey``."""
    n, e = _parse_public_key(bytes(public_key))
    _public_key(n, e)
    return n.bit_length()


@dataclass(frozen=True)
class RsaPublicKeyComponents:
    """An RSA public key given as big-endian modulus and exponent bytes."""

    n: bytes
    e: bytes

    def _build(self) -> tuple[rsa.RSAPublicKey, int]:
        n_bytes, e_bytes = bytes(self.n), bytes(self.e)
        if not n_bytes or n_bytes[0] == 0:
            raise Unspecified("modulus is empty or has a leading zero")
        if not e_bytes or e_bytes[0] == 0:
            raise Unspecified("exponent is empty or has a leading zero")
        n = int.from_bytes(n_bytes, "big")
        e = int.from_bytes(e_bytes, "big")
        return _public_key(n, e), n

    def verify(self, params: RsaParameters, message: bytes, signature: bytes) -> None:
        """Verify ``signature`` over ``message`` with these components.

        Raises :class:`~lcforge.rand.Unspecified` if it does not verify.
        """
        key, n = self._build()
        _verify(params, key, n, message, signature)


def _signing(digest: str, padding: RsaPadding, ident: RsaSigningAlgorithmId):
    return RsaSignatureEncoding(digest, padding, ident)


def _params(digest: str, padding: RsaPadding, low: int, high: int, ident):
    return RsaParameters(digest, padding, (low, high), ident)


_PKCS1 = RsaPadding.RSA_PKCS1_PADDING
_PSS = RsaPadding.RSA_PKCS1_PSS_PADDING
_S = RsaSigningAlgorithmId
_V = RsaVerificationAlgorithmId

RSA_PKCS1_SHA256 = _signing("sha256", _PKCS1, _S.RSA_PKCS1_SHA256)
RSA_PKCS1_SHA384 = _signing("sha384", _PKCS1, _S.RSA_PKCS1_SHA384)
RSA_PKCS1_SHA512 = _signing("sha512", _PKCS1, _S.RSA_PKCS1_SHA512)
RSA_PSS_SHA256 = _signing("sha256", _PSS, _S.RSA_PSS_SHA256)
RSA_PSS_SHA384 = _signing("sha384", _PSS, _S.RSA_PSS_SHA384)
RSA_PSS_SHA512 = _signing("sha512", _PSS, _S.RSA_PSS_SHA512)

RSA_PKCS1_1024_8192_SHA1_FOR_LEGACY_USE_ONLY = _params(
    "sha1", _PKCS1, 1024, 8192, _V.RSA_PKCS1_1024_8192_SHA1_FOR_LEGACY_USE_ONLY
)
RSA_PKCS1_1024_8192_SHA256_FOR_LEGACY_USE_ONLY = _params(
    "sha256", _PKCS1, 1024, 8192, _V.RSA_PKCS1_1024_8192_SHA256_FOR_LEGACY_USE_ONLY
)
RSA_PKCS1_1024_8192_SHA512_FOR_LEGACY_USE_ONLY = _params(
    "sha512", _PKCS1, 1024, 8192, _V.RSA_PKCS1_1024_8192_SHA512_FOR_LEGACY_USE_ONLY
)
RSA_PKCS1_2048_8192_SHA1_FOR_LEGACY_USE_ONLY = _params(
    "sha1", _PKCS1, 2048, 8192, _V.RSA_PKCS1_2048_8192_SHA1_FOR_LEGACY_USE_ONLY
)
RSA_PKCS1_2048_8192_SHA256 = _params("sha256", _PKCS1, 2048, 8192, _V.RSA_PKCS1_2048_8192_SHA256)
RSA_PKCS1_2048_8192_SHA384 = _params("sha384", _PKCS1, 2048, 8192, _V.RSA_PKCS1_2048_8192_SHA384)
RSA_PKCS1_2048_8192_SHA512 = _params("sha512", _PKCS1, 2048, 8192, _V.RSA_PKCS1_2048_8192_SHA512)
RSA_PKCS1_3072_8192_SHA384 = _params("sha384", _PKCS1, 3072, 8192, _V.RSA_PKCS1_3072_8192_SHA384)
RSA_PSS_2048_8192_SHA256 = _params("sha256", _PSS, 2048, 8192, _V.RSA_PSS_2048_8192_SHA256)
RSA_PSS_2048_8192_SHA384 = _params("sha384", _PSS, 2048, 8192, _V.RSA_PSS_2048_8192_SHA384)
RSA_PSS_2048_8192_SHA512 = _params("sha512", _PSS, 2048, 8192, _V.RSA_PSS_2048_8192_SHA512)