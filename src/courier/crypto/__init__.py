"""Cryptographic primitives — field hashing, Merkle trees and maps, keys, nullifiers."""

from courier.crypto.keys import PrivateKey, PublicKey
from courier.crypto.merkle import EligibilityTree, EligibilityWitness, MessageTree, MessageWitness
from courier.crypto.merkle_map import EMPTY_MAP_ROOT, MerkleMap, MerkleMapWitness
from courier.crypto.nullifier import Nullifier

__all__ = [
    "PrivateKey",
    "PublicKey",
    "EligibilityTree",
    "EligibilityWitness",
    "MessageTree",
    "MessageWitness",
    "EMPTY_MAP_ROOT",
    "MerkleMap",
    "MerkleMapWitness",
    "Nullifier",
]
