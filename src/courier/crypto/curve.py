"""Ed25519 group operations over libsodium (PyNaCl bindings).

Points are 32-byte compressed encodings in the prime-order subgroup.
Scalars are 32-byte little-endian integers reduced modulo the group
order. Scalar multiplication is unclamped so that the algebra of
nullifier proofs holds exactly.
"""

from __future__ import annotations

import hashlib
import struct

import nacl.bindings
import nacl.exceptions
import nacl.utils


# Ed25519 prime-order subgroup size (L)
CURVE_ORDER = 2**252 + 27742317777372353535851937790883648493

POINT_SIZE = 32
SCALAR_SIZE = 32

_COFACTOR = (8).to_bytes(SCALAR_SIZE, "little")
_HASH_TO_POINT_ATTEMPTS = 1024


class CurveError(ValueError):
    """Raised when a group operation receives or produces an unusable point."""


def is_valid_point(point: bytes) -> bool:
    if not isinstance(point, bytes) or len(point) != POINT_SIZE:
        return False
    return nacl.bindings.crypto_core_ed25519_is_valid_point(point)


def is_valid_scalar(scalar: bytes) -> bool:
    if not isinstance(scalar, bytes) or len(scalar) != SCALAR_SIZE:
        return False
    value = int.from_bytes(scalar, "little")
    return 0 < value < CURVE_ORDER


def random_scalar() -> bytes:
    while True:
        scalar = nacl.bindings.crypto_core_ed25519_scalar_reduce(nacl.utils.random(64))
        if is_valid_scalar(scalar):
            return scalar


def hash_to_scalar(*parts: bytes) -> bytes:
    """Reduce SHA-512 of the concatenated parts to a scalar."""
    digest = hashlib.sha512(b"".join(parts)).digest()
    return nacl.bindings.crypto_core_ed25519_scalar_reduce(digest)


def scalar_add(a: bytes, b: bytes) -> bytes:
    return nacl.bindings.crypto_core_ed25519_scalar_add(a, b)


def scalar_mul(a: bytes, b: bytes) -> bytes:
    return nacl.bindings.crypto_core_ed25519_scalar_mul(a, b)


def base_mul(scalar: bytes) -> bytes:
    """scalar * G"""
    try:
        return nacl.bindings.crypto_scalarmult_ed25519_base_noclamp(scalar)
    except nacl.exceptions.CryptoError as e:
        raise CurveError(f"Base point multiplication failed: {e}") from e


def point_mul(scalar: bytes, point: bytes) -> bytes:
    """scalar * P"""
    try:
        return nacl.bindings.crypto_scalarmult_ed25519_noclamp(scalar, point)
    except nacl.exceptions.CryptoError as e:
        raise CurveError(f"Scalar multiplication failed: {e}") from e


def point_sub(p: bytes, q: bytes) -> bytes:
    try:
        return nacl.bindings.crypto_core_ed25519_sub(p, q)
    except nacl.exceptions.CryptoError as e:
        raise CurveError(f"Point subtraction failed: {e}") from e


def hash_to_point(domain: bytes, data: bytes) -> bytes:
    """Hash to a subgroup point by try-and-increment.

    Each candidate encoding is accepted only if libsodium validates it,
    then the cofactor is cleared.
    """
    for counter in range(_HASH_TO_POINT_ATTEMPTS):
        candidate = hashlib.sha256(domain + data + struct.pack(">I", counter)).digest()
        if is_valid_point(candidate):
            return point_mul(_COFACTOR, candidate)
    raise CurveError(f"Hash to point failed after {_HASH_TO_POINT_ATTEMPTS} attempts")
