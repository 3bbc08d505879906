"""Tests for the off-chain nullifier ledger."""

import pytest

from courier.crypto.merkle_map import EMPTY_MAP_ROOT
from courier.ledger.nullifier_ledger import UNUSED, USED, NullifierLedger


class TestNullifierLedger:
    def test_empty(self) -> None:
        ledger = NullifierLedger()
        assert ledger.root == EMPTY_MAP_ROOT
        assert not ledger.is_used(5)

    def test_mark_used(self) -> None:
        ledger = NullifierLedger()
        ledger.mark_used(5)
        assert ledger.is_used(5)
        assert ledger.used_keys() == [5]

    def test_mark_twice_rejected(self) -> None:
        ledger = NullifierLedger()
        ledger.mark_used(5)
        with pytest.raises(ValueError):
            ledger.mark_used(5)

    def test_rebuild_from_keys(self) -> None:
        ledger = NullifierLedger()
        ledger.mark_used(5)
        ledger.mark_used(9)
        assert NullifierLedger(ledger.used_keys()).root == ledger.root

    def test_witness_proves_unused_then_used(self) -> None:
        ledger = NullifierLedger()
        ledger.mark_used(3)
        witness = ledger.witness_for(8)
        before, key = witness.compute_root_and_key(UNUSED)
        assert (before, key) == (ledger.root, 8)
        after, _ = witness.compute_root_and_key(USED)
        ledger.mark_used(8)
        assert after == ledger.root
