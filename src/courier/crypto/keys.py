"""Participant key pairs.

A private key is a nonzero scalar; its public key is ``scalar * G``.
Public keys are validated on construction, so every ``PublicKey`` in
the system is a point of the prime-order subgroup.
"""

from __future__ import annotations

from dataclasses import dataclass

from courier.crypto import curve
from courier.crypto.field import bytes_to_limbs


@dataclass(frozen=True)
class PublicKey:
    point: bytes

    def __post_init__(self) -> None:
        if not curve.is_valid_point(self.point):
            raise ValueError("Public key is not a valid subgroup point")

    def to_fields(self) -> tuple[int, int]:
        return bytes_to_limbs(self.point)

    def to_hex(self) -> str:
        return self.point.hex()

    @classmethod
    def from_hex(cls, text: str) -> PublicKey:
        return cls(bytes.fromhex(text))

    def __str__(self) -> str:
        return self.to_hex()


@dataclass(frozen=True, repr=False)
class PrivateKey:
    scalar: bytes

    def __post_init__(self) -> None:
        if not curve.is_valid_scalar(self.scalar):
            raise ValueError("Private key must be a nonzero reduced scalar")

    @classmethod
    def random(cls) -> PrivateKey:
        return cls(curve.random_scalar())

    @classmethod
    def from_hex(cls, text: str) -> PrivateKey:
        return cls(bytes.fromhex(text))

    def to_hex(self) -> str:
        return self.scalar.hex()

    def public_key(self) -> PublicKey:
        return PublicKey(curve.base_mul(self.scalar))

    def __repr__(self) -> str:
        return f"PrivateKey(public_key={self.public_key().to_hex()})"
