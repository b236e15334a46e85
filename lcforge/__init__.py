"""Secure randomness, RSA signatures, test-vector parsing and release tools."""

__version__ = "0.1.0"

__all__ = [
    "criterion",
    "fixedrand",
    "rand",
    "rsa_keypair",
    "rsa_params",
    "tools",
    "vectors",
]