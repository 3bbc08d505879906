"""Tests for commitment anchoring — transaction construction only, no network."""

import hashlib
import json

from courier.crypto.anchor import build_anchor_transaction
from courier.models.commitment import CommitmentSnapshot


def _snapshot(version: int = 3) -> CommitmentSnapshot:
    return CommitmentSnapshot(
        version=version,
        eligible_addresses_commitment=1,
        messages_commitment=2,
        nullifier_root=3,
        nullifier_message=4,
    )


class TestSnapshotDigest:
    def test_digest_is_canonical_sha256(self) -> None:
        snapshot = _snapshot()
        canonical = json.dumps(snapshot.canonical_fields(), sort_keys=True).encode("utf-8")
        assert snapshot.digest() == hashlib.sha256(canonical).hexdigest()

    def test_digest_covers_version(self) -> None:
        assert _snapshot(3).digest() != _snapshot(4).digest()


class TestAnchorTransaction:
    def test_self_send_carries_digest(self) -> None:
        snapshot = _snapshot()
        sender = "0x" + "ab" * 20
        tx = build_anchor_transaction(
            snapshot, sender=sender, nonce=7, chain_id=11155111,
            gas=30_000, gas_price_wei=2_000_000_000,
        )
        assert tx["to"] == sender
        assert tx["value"] == 0
        assert tx["nonce"] == 7
        assert tx["chainId"] == 11155111
        assert tx["data"] == bytes.fromhex(snapshot.digest())
