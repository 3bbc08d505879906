"""Deterministic nullifiers with a proof of honest derivation.

For a key pair ``(sk, pk)`` and a public domain message ``m``:

    Hm = HashToCurve(m, pk)
    N  = sk * Hm

``N`` depends only on the key and the domain, so the same key always
yields the same nullifier for the same domain. A Chaum-Pedersen proof
``(c, s)`` shows that ``log_G(pk) == log_Hm(N)`` without revealing sk:

    r random,  A = r*G,  B = r*Hm
    c = Hs(G-tag, pk, Hm, N, A, B)
    s = r + c*sk

Verification recomputes ``A = s*G - c*pk`` and ``B = s*Hm - c*N`` and
checks the challenge. The ledger lookup key is a field hash of ``N``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from courier.crypto import curve
from courier.crypto.field import bytes_to_limbs, field_from_text, hash_fields, to_field
from courier.crypto.keys import PrivateKey, PublicKey
from courier.errors import NullifierMalformed


DOMAIN_HASH_TO_CURVE = b"courier.nullifier.hash_to_curve.v1"
DOMAIN_CHALLENGE = b"courier.nullifier.challenge.v1"
NULLIFIER_KEY_TAG = field_from_text("courier.nullifier.key")


def _message_point(message: int, public_key: PublicKey) -> bytes:
    return curve.hash_to_point(
        DOMAIN_HASH_TO_CURVE,
        to_field(message).to_bytes(32, "big") + public_key.point,
    )


def _challenge(public_key: PublicKey, hm: bytes, point: bytes, a: bytes, b: bytes) -> bytes:
    return curve.hash_to_scalar(DOMAIN_CHALLENGE, public_key.point, hm, point, a, b)


@dataclass(frozen=True)
class Nullifier:
    public_key: PublicKey
    point: bytes
    c: bytes
    s: bytes

    @classmethod
    def create(cls, private_key: PrivateKey, message: int) -> Nullifier:
        public_key = private_key.public_key()
        hm = _message_point(message, public_key)
        point = curve.point_mul(private_key.scalar, hm)

        r = curve.random_scalar()
        a = curve.base_mul(r)
        b = curve.point_mul(r, hm)
        c = _challenge(public_key, hm, point, a, b)
        s = curve.scalar_add(r, curve.scalar_mul(c, private_key.scalar))
        return cls(public_key=public_key, point=point, c=c, s=s)

    def verify(self, message: int) -> None:
        """Check the derivation proof against ``message``.

        Raises NullifierMalformed if the proof does not hold.
        """
        if not curve.is_valid_point(self.point):
            raise NullifierMalformed("Nullifier point is not a valid subgroup point")
        if not (curve.is_valid_scalar(self.c) and curve.is_valid_scalar(self.s)):
            raise NullifierMalformed("Nullifier proof scalars are out of range")

        try:
            hm = _message_point(message, self.public_key)
            a = curve.point_sub(
                curve.base_mul(self.s),
                curve.point_mul(self.c, self.public_key.point),
            )
            b = curve.point_sub(
                curve.point_mul(self.s, hm),
                curve.point_mul(self.c, self.point),
            )
        except curve.CurveError as e:
            raise NullifierMalformed(f"Nullifier proof does not evaluate: {e}") from e

        if _challenge(self.public_key, hm, self.point, a, b) != self.c:
            raise NullifierMalformed("Nullifier was not derived from this key and message")

    def key(self) -> int:
        """Lookup key of this nullifier in the nullifier ledger."""
        return hash_fields((NULLIFIER_KEY_TAG, *bytes_to_limbs(self.point)))

    def to_dict(self) -> dict[str, Any]:
        return {
            "public_key": self.public_key.to_hex(),
            "point": self.point.hex(),
            "c": self.c.hex(),
            "s": self.s.hex(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Nullifier:
        return cls(
            public_key=PublicKey.from_hex(data["public_key"]),
            point=bytes.fromhex(data["point"]),
            c=bytes.fromhex(data["c"]),
            s=bytes.fromhex(data["s"]),
        )
