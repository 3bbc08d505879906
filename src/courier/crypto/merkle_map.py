"""Sparse Merkle map over field-element keys.

A binary tree of depth 256 whose leaf at position ``key`` holds the value
stored under that key (0 when absent). Only non-default nodes are kept;
empty subtrees fold to precomputed default hashes, so a missing key
proves as 0 against the root.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from courier.crypto.field import ZERO, field_from_hex, field_from_text, field_to_hex, to_field
from courier.crypto.merkle import empty_subtree_roots, fold_path, path_index


MAP_DEPTH = 256
MAP_DOMAIN = field_from_text("courier.merkle.nullifier_map")

_DEFAULTS = empty_subtree_roots(MAP_DOMAIN, MAP_DEPTH)

# Root of the map with every key at 0.
EMPTY_MAP_ROOT = _DEFAULTS[MAP_DEPTH]


@dataclass(frozen=True)
class MerkleMapWitness:
    """Authentication path for one key of a ``MerkleMap``.

    The key is not stored separately: it is the leaf position encoded by
    the path bits, so a witness cannot claim one key and prove another.
    """

    siblings: tuple[int, ...]
    is_left: tuple[bool, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "siblings", tuple(to_field(s) for s in self.siblings))
        object.__setattr__(self, "is_left", tuple(bool(b) for b in self.is_left))
        if len(self.siblings) != MAP_DEPTH or len(self.is_left) != MAP_DEPTH:
            raise ValueError(f"MerkleMapWitness needs {MAP_DEPTH} levels")

    def key(self) -> int:
        return path_index(self.is_left)

    def compute_root_and_key(self, value: int) -> tuple[int, int]:
        """Root of the map if ``key()`` held ``value``, together with the key."""
        return fold_path(value, self.siblings, self.is_left, MAP_DOMAIN), self.key()

    def to_dict(self) -> dict[str, Any]:
        return {
            "siblings": [field_to_hex(s) for s in self.siblings],
            "is_left": list(self.is_left),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MerkleMapWitness:
        return cls(
            siblings=tuple(field_from_hex(s) for s in data["siblings"]),
            is_left=tuple(data["is_left"]),
        )


class MerkleMap:
    """Mutable sparse Merkle map (key and value are field elements)."""

    def __init__(self) -> None:
        self._values: dict[int, int] = {}
        # (depth above leaves, position) -> hash, non-default nodes only
        self._nodes: dict[tuple[int, int], int] = {}

    def get(self, key: int) -> int:
        return self._values.get(to_field(key), ZERO)

    def set(self, key: int, value: int) -> None:
        key = to_field(key)
        value = to_field(value)
        if value == ZERO:
            self._values.pop(key, None)
        else:
            self._values[key] = value
        self._update_path(key, value)

    def keys(self) -> list[int]:
        return sorted(self._values)

    @property
    def root(self) -> int:
        return self._node(MAP_DEPTH, 0)

    def witness(self, key: int) -> MerkleMapWitness:
        key = to_field(key)
        siblings: list[int] = []
        is_left: list[bool] = []
        position = key
        for depth in range(MAP_DEPTH):
            left = position % 2 == 0
            siblings.append(self._node(depth, position ^ 1))
            is_left.append(left)
            position >>= 1
        return MerkleMapWitness(siblings=tuple(siblings), is_left=tuple(is_left))

    def _node(self, depth: int, position: int) -> int:
        return self._nodes.get((depth, position), _DEFAULTS[depth])

    def _set_node(self, depth: int, position: int, value: int) -> None:
        if value == _DEFAULTS[depth]:
            self._nodes.pop((depth, position), None)
        else:
            self._nodes[(depth, position)] = value

    def _update_path(self, key: int, value: int) -> None:
        self._set_node(0, key, value)
        position = key
        node = value
        for depth in range(MAP_DEPTH):
            sibling = self._node(depth, position ^ 1)
            node = fold_path(node, (sibling,), (position % 2 == 0,), MAP_DOMAIN)
            position >>= 1
            self._set_node(depth + 1, position, node)
