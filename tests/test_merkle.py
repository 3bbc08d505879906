"""Tests for the fixed-height commitment trees and their witnesses."""

import pytest

from courier.crypto.field import ZERO, hash_fields
from courier.crypto.merkle import (
    TREE_CAPACITY,
    TREE_HEIGHT,
    EligibilityTree,
    EligibilityWitness,
    MerkleWitness,
    MessageTree,
    MessageWitness,
)


def _leaf(n: int) -> int:
    return hash_fields((n,))


class TestMerkleTree:
    def test_capacity(self) -> None:
        assert TREE_HEIGHT == 8
        assert EligibilityTree().capacity == TREE_CAPACITY == 256

    def test_empty_root(self) -> None:
        tree = MessageTree()
        assert tree.compute_root() == tree.empty_root()
        assert tree.leaf_count == 0

    def test_add_leaf_returns_index(self) -> None:
        tree = MessageTree()
        assert tree.add_leaf(_leaf(1)) == 0
        assert tree.add_leaf(_leaf(2)) == 1
        assert tree.leaf_count == 2
        assert tree.get_leaf(1) == _leaf(2)
        assert tree.get_leaf(5) == ZERO

    def test_order_matters(self) -> None:
        a, b = MessageTree(), MessageTree()
        a.add_leaf(_leaf(1))
        a.add_leaf(_leaf(2))
        b.add_leaf(_leaf(2))
        b.add_leaf(_leaf(1))
        assert a.compute_root() != b.compute_root()

    def test_set_leaf_refuses_overwrite(self) -> None:
        tree = EligibilityTree()
        tree.add_leaf(_leaf(1))
        with pytest.raises(ValueError):
            tree.set_leaf(0, _leaf(2))

    def test_set_leaf_out_of_range(self) -> None:
        with pytest.raises(ValueError):
            EligibilityTree().set_leaf(TREE_CAPACITY, _leaf(1))

    def test_same_leaves_different_domains(self) -> None:
        eligible, messages = EligibilityTree(), MessageTree()
        eligible.add_leaf(_leaf(1))
        messages.add_leaf(_leaf(1))
        assert eligible.compute_root() != messages.compute_root()


class TestWitness:
    def test_witness_folds_to_root(self) -> None:
        tree = EligibilityTree()
        for n in range(5):
            tree.add_leaf(_leaf(n))
        root = tree.compute_root()
        for n in range(5):
            witness = tree.witness(n)
            assert witness.index() == n
            assert witness.calculate_root(_leaf(n)) == root

    def test_wrong_leaf_misses_root(self) -> None:
        tree = EligibilityTree()
        tree.add_leaf(_leaf(1))
        assert tree.witness(0).calculate_root(_leaf(2)) != tree.compute_root()

    def test_root_advancement_matches_sequential_append(self) -> None:
        """Folding each new leaf into the previous state gives the appended tree's root."""
        tree = MessageTree()
        for n in range(10):
            witness = tree.witness(tree.leaf_count)
            predicted = witness.calculate_root(_leaf(n))
            tree.add_leaf(_leaf(n))
            assert predicted == tree.compute_root()

    def test_empty_slot_witness_folds_to_current_root(self) -> None:
        tree = MessageTree()
        tree.add_leaf(_leaf(1))
        assert tree.witness(1).calculate_root(ZERO) == tree.compute_root()

    def test_last_slot(self) -> None:
        tree = MessageTree()
        witness = tree.witness(TREE_CAPACITY - 1)
        assert witness.index() == TREE_CAPACITY - 1
        assert all(not left for left in witness.is_left)

    def test_witness_type_follows_tree(self) -> None:
        assert isinstance(EligibilityTree().witness(0), EligibilityWitness)
        assert isinstance(MessageTree().witness(0), MessageWitness)

    def test_witnesses_not_interchangeable(self) -> None:
        tree = EligibilityTree()
        tree.add_leaf(_leaf(1))
        witness = tree.witness(0)
        foreign = MessageWitness(siblings=witness.siblings, is_left=witness.is_left)
        assert foreign.calculate_root(_leaf(1)) != tree.compute_root()

    def test_wrong_length_rejected(self) -> None:
        with pytest.raises(ValueError):
            EligibilityWitness(siblings=(0,) * 7, is_left=(True,) * 7)

    def test_base_witness_unusable(self) -> None:
        with pytest.raises(TypeError):
            MerkleWitness(siblings=(0,) * 8, is_left=(True,) * 8)

    def test_dict_form(self) -> None:
        tree = MessageTree()
        tree.add_leaf(_leaf(3))
        witness = tree.witness(1)
        assert MessageWitness.from_dict(witness.to_dict()) == witness
