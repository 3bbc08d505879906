"""Commitment store model — the four authoritative scalars.

Everything else (eligible addresses, messages, used nullifiers) lives in
off-chain mirrors and can be rebuilt from the sequence of accepted
operations; these four values are the whole of persisted on-chain state.
"""

from __future__ import annotations

import enum
import hashlib
import json
from dataclasses import dataclass

from courier.crypto.field import field_to_hex


class CommitmentField(str, enum.Enum):
    """Names of the scalars held by the commitment store."""
    ELIGIBLE_ADDRESSES = "eligible_addresses_commitment"
    MESSAGES = "messages_commitment"
    NULLIFIER_ROOT = "nullifier_root"
    NULLIFIER_MESSAGE = "nullifier_message"


@dataclass(frozen=True)
class CommitmentSnapshot:
    """A consistent view of the store at one version."""
    version: int
    eligible_addresses_commitment: int
    messages_commitment: int
    nullifier_root: int
    nullifier_message: int

    def value(self, name: CommitmentField) -> int:
        return getattr(self, name.value)

    def canonical_fields(self) -> dict[str, str]:
        """All fields in canonical form for hashing and display."""
        return {
            "version": str(self.version),
            **{f.value: field_to_hex(self.value(f)) for f in CommitmentField},
        }

    def digest(self) -> str:
        """SHA-256 of the canonical JSON form (sorted keys)."""
        canonical = json.dumps(self.canonical_fields(), sort_keys=True).encode("utf-8")
        return hashlib.sha256(canonical).hexdigest()
