"""Fixed-height Merkle trees and their membership witnesses.

Both commitment trees have height 8 (256 leaves). Leaves are field
elements, the empty leaf is 0, and inner nodes hash as
H(domain, left, right). The domain tag differs per tree, so a witness
taken from one tree never folds to a root of the other, even over the
same leaf.

Usage:
    tree = EligibilityTree()
    index = tree.leaf_count
    witness = tree.witness(index)
    tree.add_leaf(address.hash())
    assert witness.calculate_root(address.hash()) == tree.compute_root()
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Optional, Sequence

from courier.crypto.field import ZERO, field_from_text, field_to_hex, field_from_hex, hash_fields, to_field


TREE_HEIGHT = 8
TREE_CAPACITY = 2 ** TREE_HEIGHT


def fold_path(
    leaf: int,
    siblings: Sequence[int],
    is_left: Sequence[bool],
    domain: int,
) -> int:
    """Fold a leaf up an authentication path and return the root."""
    node = to_field(leaf)
    for sibling, left in zip(siblings, is_left):
        if left:
            node = hash_fields((domain, node, sibling))
        else:
            node = hash_fields((domain, sibling, node))
    return node


def path_index(is_left: Sequence[bool]) -> int:
    """Leaf index encoded by a bit-path (bit i set when the node is a right child)."""
    return sum(1 << level for level, left in enumerate(is_left) if not left)


def empty_subtree_roots(domain: int, height: int) -> list[int]:
    """zeros[d] is the root of an all-empty subtree of depth d."""
    zeros = [ZERO]
    for _ in range(height):
        zeros.append(hash_fields((domain, zeros[-1], zeros[-1])))
    return zeros


@dataclass(frozen=True)
class MerkleWitness:
    """An authentication path for one leaf of a fixed-height tree.

    ``siblings`` and ``is_left`` run from the leaf level upward.
    ``is_left[i]`` is True when the path node at level i is a left child.
    Only the concrete subclasses are usable; each binds its own tree domain.
    """

    siblings: tuple[int, ...]
    is_left: tuple[bool, ...]

    DOMAIN: ClassVar[Optional[int]] = None
    HEIGHT: ClassVar[int] = TREE_HEIGHT

    def __post_init__(self) -> None:
        if self.DOMAIN is None:
            raise TypeError("MerkleWitness has no tree domain; use a concrete witness type")
        object.__setattr__(self, "siblings", tuple(to_field(s) for s in self.siblings))
        object.__setattr__(self, "is_left", tuple(bool(b) for b in self.is_left))
        if len(self.siblings) != self.HEIGHT or len(self.is_left) != self.HEIGHT:
            raise ValueError(
                f"{type(self).__name__} needs {self.HEIGHT} levels, got "
                f"{len(self.siblings)} siblings and {len(self.is_left)} path bits"
            )

    def index(self) -> int:
        return path_index(self.is_left)

    def calculate_root(self, leaf: int) -> int:
        return fold_path(leaf, self.siblings, self.is_left, self.DOMAIN)

    def to_dict(self) -> dict[str, Any]:
        return {
            "siblings": [field_to_hex(s) for s in self.siblings],
            "is_left": list(self.is_left),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MerkleWitness:
        return cls(
            siblings=tuple(field_from_hex(s) for s in data["siblings"]),
            is_left=tuple(data["is_left"]),
        )


@dataclass(frozen=True)
class EligibilityWitness(MerkleWitness):
    DOMAIN: ClassVar[Optional[int]] = field_from_text("courier.merkle.eligible_addresses")


@dataclass(frozen=True)
class MessageWitness(MerkleWitness):
    DOMAIN: ClassVar[Optional[int]] = field_from_text("courier.merkle.messages")


class MerkleTree:
    """An append-only Merkle tree of fixed height.

    Leaves are appended in increasing index order starting at 0.
    ``set_leaf`` exists for rebuilding a mirror from stored leaves; it
    refuses to overwrite an occupied slot.
    """

    WITNESS_CLASS: ClassVar[type[MerkleWitness]]

    def __init__(self) -> None:
        self._domain = self.WITNESS_CLASS.DOMAIN
        self._height = self.WITNESS_CLASS.HEIGHT
        self._zeros = empty_subtree_roots(self._domain, self._height)
        self._leaves: dict[int, int] = {}
        self._levels: Optional[list[list[int]]] = None

    @property
    def capacity(self) -> int:
        return 2 ** self._height

    @property
    def leaf_count(self) -> int:
        """Index the next appended leaf will occupy."""
        return max(self._leaves) + 1 if self._leaves else 0

    def add_leaf(self, value: int) -> int:
        """Append a leaf and return its index."""
        index = self.leaf_count
        self.set_leaf(index, value)
        return index

    def set_leaf(self, index: int, value: int) -> None:
        if not 0 <= index < self.capacity:
            raise ValueError(f"Leaf index {index} outside tree of {self.capacity} leaves")
        if index in self._leaves:
            raise ValueError(f"Leaf {index} is already set; the tree is append-only")
        self._leaves[index] = to_field(value)
        self._levels = None

    def get_leaf(self, index: int) -> int:
        return self._leaves.get(index, ZERO)

    def empty_root(self) -> int:
        return self._zeros[self._height]

    def compute_root(self) -> int:
        return self._compute_levels()[-1][0]

    def witness(self, index: int) -> MerkleWitness:
        """Authentication path for the slot at ``index`` (occupied or not)."""
        if not 0 <= index < self.capacity:
            raise ValueError(f"Leaf index {index} outside tree of {self.capacity} leaves")
        levels = self._compute_levels()
        siblings: list[int] = []
        is_left: list[bool] = []
        position = index
        for level in levels[:-1]:
            left = position % 2 == 0
            siblings.append(level[position + 1] if left else level[position - 1])
            is_left.append(left)
            position //= 2
        return self.WITNESS_CLASS(siblings=tuple(siblings), is_left=tuple(is_left))

    def _compute_levels(self) -> list[list[int]]:
        if self._levels is not None:
            return self._levels

        current = [self._leaves.get(i, ZERO) for i in range(self.capacity)]
        levels = [current]
        for depth in range(self._height):
            zero = self._zeros[depth]
            next_level: list[int] = []
            for i in range(0, len(current), 2):
                left, right = current[i], current[i + 1]
                if left == zero and right == zero:
                    next_level.append(self._zeros[depth + 1])
                else:
                    next_level.append(hash_fields((self._domain, left, right)))
            levels.append(next_level)
            current = next_level

        self._levels = levels
        return levels


class EligibilityTree(MerkleTree):
    WITNESS_CLASS = EligibilityWitness


class MessageTree(MerkleTree):
    WITNESS_CLASS = MessageWitness
