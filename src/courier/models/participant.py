"""Participant value types — eligible addresses and the messages they deposit.

Both are immutable. Their hashes are the leaves of the eligibility tree
and the message tree respectively.
"""

from __future__ import annotations

from dataclasses import dataclass

from courier.crypto.field import hash_fields, to_field
from courier.crypto.keys import PublicKey


@dataclass(frozen=True)
class Address:
    public_key: PublicKey

    def to_fields(self) -> tuple[int, ...]:
        return self.public_key.to_fields()

    def hash(self) -> int:
        return hash_fields(self.to_fields())


@dataclass(frozen=True)
class Message:
    """A deposited message.

    ``data`` is a field element. Its low six bits carry the flags
    f1..f6; the bits above are committed in the hash but not validated.
    """
    public_key: PublicKey
    data: int

    def __post_init__(self) -> None:
        to_field(self.data)

    def to_fields(self) -> tuple[int, ...]:
        return (*self.public_key.to_fields(), self.data)

    def hash(self) -> int:
        return hash_fields(self.to_fields())
