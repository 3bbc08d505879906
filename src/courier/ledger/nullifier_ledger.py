"""Nullifier ledger — the off-chain mirror of the nullifier map.

Keys are nullifier lookup keys, values are 0 (unused) or 1 (used). The
map's root is what the commitment store holds as ``nullifier_root``.
The mirror is advisory: the validator treats the stored root as ground
truth, and a mirror that falls behind only produces witnesses that fail
with NullifierLedgerMismatch.
"""

from __future__ import annotations

from typing import Iterable, Protocol

from courier.crypto.merkle_map import MerkleMap, MerkleMapWitness


UNUSED = 0
USED = 1


class NullifierWitnessSource(Protocol):
    """What the validator needs from a ledger mirror."""

    def witness_for(self, key: int) -> MerkleMapWitness: ...


class NullifierLedger:
    def __init__(self, used_keys: Iterable[int] = ()) -> None:
        self._map = MerkleMap()
        for key in used_keys:
            self._map.set(key, USED)

    def witness_for(self, key: int) -> MerkleMapWitness:
        return self._map.witness(key)

    def is_used(self, key: int) -> bool:
        return self._map.get(key) == USED

    def mark_used(self, key: int) -> None:
        if self.is_used(key):
            raise ValueError(f"Nullifier key {key:#x} is already marked used")
        self._map.set(key, USED)

    def used_keys(self) -> list[int]:
        return self._map.keys()

    @property
    def root(self) -> int:
        return self._map.root
