"""Field elements and the hash-to-field function H.

Values committed on-chain are elements of the Pallas base field. H is
SHA-256 over the 32-byte big-endian encoding of each element, reduced
modulo the field order. It is not an algebraic hash, but it gives the
same interface: a list of field elements in, one field element out.
"""

from __future__ import annotations

import hashlib
from typing import Iterable


FIELD_MODULUS = 0x40000000000000000000000000000000224698FC094CF91B992D30ED00000001

ZERO = 0


def is_field_element(value: object) -> bool:
    return (
        isinstance(value, int)
        and not isinstance(value, bool)
        and 0 <= value < FIELD_MODULUS
    )


def to_field(value: int) -> int:
    """Validate that an integer is a canonical field element and return it."""
    if not is_field_element(value):
        raise ValueError(f"Not a field element: {value!r}")
    return value


def hash_fields(elements: Iterable[int]) -> int:
    """H(elements): hash a sequence of field elements to a field element."""
    data = b"".join(to_field(e).to_bytes(32, "big") for e in elements)
    return int(hashlib.sha256(data).hexdigest(), 16) % FIELD_MODULUS


def field_from_text(text: str) -> int:
    """Map a domain string to a field element."""
    digest = hashlib.sha256(text.encode("utf-8")).hexdigest()
    return int(digest, 16) % FIELD_MODULUS


def field_to_hex(value: int) -> str:
    return "0x" + to_field(value).to_bytes(32, "big").hex()


def field_from_hex(text: str) -> int:
    return to_field(int(text.removeprefix("0x"), 16))


def bytes_to_limbs(data: bytes) -> tuple[int, int]:
    """Split a 32-byte encoding into two 128-bit big-endian limbs."""
    if len(data) != 32:
        raise ValueError(f"Expected 32 bytes, got {len(data)}")
    return int.from_bytes(data[:16], "big"), int.from_bytes(data[16:], "big")
