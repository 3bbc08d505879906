"""Tests for the sparse Merkle map behind the nullifier ledger."""

import pytest

from courier.crypto.field import FIELD_MODULUS, ZERO
from courier.crypto.merkle_map import MAP_DEPTH, EMPTY_MAP_ROOT, MerkleMap, MerkleMapWitness


class TestMerkleMap:
    def test_empty_root(self) -> None:
        assert MerkleMap().root == EMPTY_MAP_ROOT

    def test_get_absent_is_zero(self) -> None:
        assert MerkleMap().get(42) == ZERO

    def test_set_changes_root(self) -> None:
        m = MerkleMap()
        m.set(42, 1)
        assert m.get(42) == 1
        assert m.root != EMPTY_MAP_ROOT
        assert m.keys() == [42]

    def test_setting_zero_restores_empty_root(self) -> None:
        m = MerkleMap()
        m.set(42, 1)
        m.set(42, 0)
        assert m.root == EMPTY_MAP_ROOT
        assert m.keys() == []

    def test_insertion_order_irrelevant(self) -> None:
        a, b = MerkleMap(), MerkleMap()
        a.set(1, 1)
        a.set(FIELD_MODULUS - 1, 1)
        b.set(FIELD_MODULUS - 1, 1)
        b.set(1, 1)
        assert a.root == b.root


class TestMerkleMapWitness:
    def test_proves_absence_and_update(self) -> None:
        m = MerkleMap()
        m.set(7, 1)
        witness = m.witness(99)
        root, key = witness.compute_root_and_key(0)
        assert key == 99
        assert root == m.root

        m.set(99, 1)
        updated, _ = witness.compute_root_and_key(1)
        assert updated == m.root

    def test_proves_presence(self) -> None:
        m = MerkleMap()
        m.set(5, 1)
        root, key = m.witness(5).compute_root_and_key(1)
        assert (root, key) == (m.root, 5)

    def test_large_key(self) -> None:
        m = MerkleMap()
        key = FIELD_MODULUS - 2
        assert m.witness(key).key() == key

    def test_wrong_length_rejected(self) -> None:
        with pytest.raises(ValueError):
            MerkleMapWitness(siblings=(0,) * (MAP_DEPTH - 1), is_left=(True,) * (MAP_DEPTH - 1))

    def test_dict_form(self) -> None:
        m = MerkleMap()
        m.set(3, 1)
        witness = m.witness(8)
        assert MerkleMapWitness.from_dict(witness.to_dict()) == witness
