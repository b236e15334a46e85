# lcforge

A small cryptography toolkit and a few helpers for the people who maintain it:

- **`lcforge.rand`**: secure random bytes from the operating system, behind a
  `SecureRandom` interface so that code needing randomness can be handed a
  deterministic source in tests.
- **`lcforge.fixedrand`**: deterministic `SecureRandom` implementations
  (`FixedByteRandom`, `FixedSliceRandom`, `FixedSliceSequenceRandom`) for
  known-answer tests.
- **`lcforge.vectors`**: a reader for the plain-text `Key = Value` test-vector
  format, with hex helpers.
- **`lcforge.rsa_params`** and **`lcforge.rsa_keypair`**: RSA PKCS#1 v1.5 and
  PSS signing and verification, with key-size and exponent checks.
- **`lcforge.criterion`**: turns raw benchmark CSV output into a comparison table.
- **`lcforge.tools`**: release helpers that pick the newest semver tag, read a
  field out of a `Cargo.toml` and print the current platform.

## Installation

```sh
pip install lcforge
```

Python 3.11 or later is required.

## Random bytes

```python
from lcforge import rand

buf = bytearray(32)
rand.fill(buf)                      # fill in place from the system generator

rng = rand.SystemRandom()
rng.fill(buf)

value = rand.generate(rng, 64).expose()   # 64 fresh random bytes
```

`fill` writes over the whole of any writable buffer. If the system generator
is unavailable it raises `rand.Unspecified`.

Functions that need randomness should accept any `SecureRandom` rather than
creating their own. In tests, pass a deterministic source instead:

```python
from lcforge.fixedrand import FixedByteRandom, FixedSliceSequenceRandom

rng = FixedByteRandom(42)
buf = bytearray(8)
rng.fill(buf)
assert buf == bytearray([42] * 8)

with FixedSliceSequenceRandom([b"\x07" * 7, b"\x2a" * 42]) as seq:
    first, second = bytearray(7), bytearray(42)
    seq.fill(first)
    seq.fill(second)
```

- `FixedSliceRandom(data)` requires the buffer to be exactly `len(data)` long.
- `FixedSliceSequenceRandom` hands out one chunk per call, in order. Asking
  for more chunks than it holds raises `IndexError`. On leaving the `with`
  block, or on calling `check_exhausted()`, it raises `ValueError` unless
  every chunk was used.
- Every source raises `ValueError` when the buffer length does not match.

## Test vectors

Vector files are blank-line separated blocks of `Key = Value` lines. Values are
either hex or a double-quoted string (`""` is the empty value; only the
escapes `\0`, `\t` and `\n` are accepted). Lines starting with `#` are
comments, and `[Name]` at the start of a case opens a named section.

```text
# HMAC vectors
HMAC = SHA256
Input = "Sample message"
Key = 000102030405060708090A0B0C0D0E0F
```

```python
from lcforge import vectors

def check(section, case):
    algorithm = case.consume_digest_alg("HMAC")   # e.g. "sha256", a hashlib name
    data = case.consume_bytes("Input")
    key = case.consume_bytes("Key")
    ...

count = vectors.run(vectors.load_file("hmac_tests.txt"), check)
```

A `VectorCase` offers `consume_string`, `consume_optional_string`,
`consume_bytes`, `consume_optional_bytes`, `consume_usize` and
`consume_digest_alg`. Every attribute must be consumed exactly once. Consuming
the same attribute twice, asking for a missing one, or a malformed file
raises `VectorError`.

`run` calls the callback on every case and returns the number of cases. A
case fails when the callback raises `rand.Unspecified` or leaves attributes
unconsumed. All cases are still tried, and then `run` raises
`VectorError("Test failed.")`. The failing cases are logged through the
`logging` module. Any other exception from the callback propagates at once.
`parse_cases(text)` yields the `(section, case)` pairs lazily.

`to_hex`, `to_hex_upper`, `from_hex` and `from_dirty_hex` convert between bytes
and hex text. `from_hex` raises `ValueError` on a non-hex character.
`from_dirty_hex` ignores anything that is not a hex digit.

## RSA

```python
from lcforge.rand import SystemRandom
from lcforge.rsa_keypair import RsaKeyPair
from lcforge.rsa_params import (
    RSA_PKCS1_2048_8192_SHA256,
    RSA_PKCS1_SHA256,
    RsaPublicKeyComponents,
)

key_pair = RsaKeyPair.from_pkcs8(pkcs8_der_bytes)   # or RsaKeyPair.from_der(rsa_private_key_der)
signature = key_pair.sign(RSA_PKCS1_SHA256, SystemRandom(), b"message")
assert len(signature) == key_pair.public_modulus_len()

public_key = key_pair.public_key()
RSA_PKCS1_2048_8192_SHA256.verify_sig(bytes(public_key), b"message", signature)
RsaPublicKeyComponents(public_key.modulus(), public_key.exponent()).verify(
    RSA_PKCS1_2048_8192_SHA256, b"message", signature
)
```

The signing encodings are `RSA_PKCS1_SHA256`, `RSA_PKCS1_SHA384`,
`RSA_PKCS1_SHA512`, `RSA_PSS_SHA256`, `RSA_PSS_SHA384` and `RSA_PSS_SHA512`.
PSS uses MGF1 over the same hash, with a salt as long as the digest. The
random generator passed to `sign` is accepted but not used.

Keys are rejected with `KeyRejected` unless:

- they are two-prime keys,
- both primes are the same size, a multiple of 512 bits and 1024 to 2048
  bits long,
- and the public exponent is at least 65537.

The error message names the reason, for example `TooSmall` or
`InvalidEncoding`. `KeyRejected` is a subclass of `rand.Unspecified`.

Verification uses `RsaParameters`. Each pairs a digest and a padding with the
range of modulus sizes it accepts (`min_modulus_len()`, `max_modulus_len()`):

- `RSA_PKCS1_1024_8192_SHA1_FOR_LEGACY_USE_ONLY`,
  `RSA_PKCS1_1024_8192_SHA256_FOR_LEGACY_USE_ONLY`,
  `RSA_PKCS1_1024_8192_SHA512_FOR_LEGACY_USE_ONLY`
- `RSA_PKCS1_2048_8192_SHA1_FOR_LEGACY_USE_ONLY`,
  `RSA_PKCS1_2048_8192_SHA256`, `RSA_PKCS1_2048_8192_SHA384`,
  `RSA_PKCS1_2048_8192_SHA512`
- `RSA_PKCS1_3072_8192_SHA384`
- `RSA_PSS_2048_8192_SHA256`, `RSA_PSS_2048_8192_SHA384`,
  `RSA_PSS_2048_8192_SHA512`

`verify_sig` takes a DER-encoded `RSAPublicKey`. `RsaPublicKeyComponents(n, e)`
takes the big-endian modulus and exponent without leading zeros. Any failure
raises `rand.Unspecified`, whatever its cause. `public_modulus_bits(der)`
reports the modulus size of a DER-encoded public key.

## Command-line tools

### Benchmark comparison

Collect the raw CSV files from a benchmark run into one file, then:

```sh
lcforge-criterion bench.csv --median --min --max -p 90 -p 99
```

Each CSV line must have eight fields: the group, the library (`AWS-LC` or
`Ring`), and the measured time and iteration count in fields six and eight.
Lines starting with `group` are skipped.

The command prints a header and then one row per benchmark. Rows are ordered
so that numbers inside names compare by value. Each requested statistic gets
the AWS-LC value, the Ring value and their percentage difference, to two
decimals. At least one of `--median`, `--min`, `--max` or `--percentile` is
required. A malformed file, or a benchmark with no Ring results, is reported
on standard error with exit status 1.

### Newest release tag

```sh
git tag -l | xargs lcforge-semver
```

Prints the highest `vX.Y.Z` tag among its arguments and ignores tags that are
not valid semantic versions. It exits with status 1 if none are.

### Package name or version

```sh
lcforge-cargo-dig path/to/Cargo.toml --name
lcforge-cargo-dig path/to/Cargo.toml --version
```

Reads `Cargo.toml` in the current directory when no path is given. It prints
`package.name` unless only `--version` is given, in which case it prints
`package.version`.

### Platform

```sh
lcforge-target-platform
```

Prints the operating system and architecture, for example `linux x86_64`.

## What is not included

The package has no RSA key generation: key pairs are only loaded from PKCS#8
or `RSAPrivateKey` DER. It offers no digest, HMAC, HKDF, PBKDF2, AEAD or key
agreement API of its own. Digest names from the vector reader are plain
`hashlib` names. The benchmark tool only summarises CSV results; it does not
run benchmarks.