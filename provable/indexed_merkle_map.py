"""Indexed Merkle Map: a sorted linked list stored in the leaves of a Merkle tree.

Every leaf is (key, value, next_key, next_index). Slot 0 holds a sentinel
with key 0, so keys must be positive. Following next_index from the
sentinel visits all live keys in increasing order; the tail has
next_key = next_index = 0. Leaves are appended, so a key's slot index never
changes.

Non-membership of a key k is witnessed by its low node: the leaf with the
greatest key <= k. If low.key < k and k < low.next_key (or low is the tail),
no leaf holds k. The sentinel is the low node of every key below the
smallest live key, so every answer is backed by a leaf in the tree.

The all-zero leaf hashes to 0, the empty leaf. The sentinel starts out as
that leaf, so the root of an empty map is the empty root. Only allocated
slots (index < length) are accepted as witnesses, and slot 0 is the only
allocated slot that can hold a zero key.

Node hashes are cached per level. An absent entry is an empty subtree whose
hash depends only on the level (see `empty`).
"""

import logging
import threading
from dataclasses import dataclass, field, replace
from typing import Callable, Dict, List, Optional, Tuple, Union

from primitives.errors import InvariantViolationError
from primitives.field import Constant, Field, Variable
from primitives.hashing import HashFunction, hash_fields

logger = logging.getLogger(__name__)

KeyLike = Union[int, Field]


# --- Data Classes ---

@dataclass(frozen=True)
class Leaf:
    """One node of the linked list, stored as a tree leaf."""
    key: int
    value: int
    next_key: int
    next_index: int

    @property
    def is_tail(self) -> bool:
        return self.next_key == 0 and self.next_index == 0

    def hash(self, hash_fn: HashFunction = hash_fields) -> int:
        if self == SENTINEL:
            return 0
        return hash_fn([self.key, self.value, self.next_key, self.next_index])


# slot 0 of an empty map: key 0, the tail
SENTINEL = Leaf(0, 0, 0, 0)


@dataclass(frozen=True)
class Option:
    """Optional field value returned by IndexedMerkleMap.get."""
    is_some: bool
    value: Constant = Constant(0)

    def assert_some(self, message: Optional[str] = None) -> Constant:
        if not self.is_some:
            raise KeyError(message or "Option is empty")
        return self.value

    def or_else(self, default: KeyLike) -> Field:
        if self.is_some:
            return self.value
        return default if isinstance(default, (Constant, Variable)) else Constant.from_int(default)


@dataclass
class MerklePath:
    """Sibling hashes from level 0 up to the level below the root.

    siblings[l] is the sibling of the path node at level l.
    """
    siblings: List[int] = field(default_factory=list)


# --- Empty Subtrees ---

# cache of empty nodes (zero leaves and nodes with only empty nodes below them),
# one table per hash function object, kept for the life of the process
_EMPTY_NODES: Dict[Callable, List[int]] = {}
_EMPTY_LOCK = threading.Lock()


def empty(level: int, hash_fn: HashFunction = hash_fields) -> int:
    """Hash of an empty subtree of the given level: empty(0) = 0,
    empty(l) = hash(empty(l-1), empty(l-1)).

    Computed once per (hash function, level) and never invalidated. Tables
    are keyed by the function object itself, so pass a module-level function:
    every new lambda or closure allocates a table that is never freed.
    """
    if level < 0:
        raise ValueError(f"empty: level must be non-negative, got {level}")
    table = _EMPTY_NODES.get(hash_fn)
    if table is None or len(table) <= level:
        with _EMPTY_LOCK:
            table = _EMPTY_NODES.get(hash_fn, [0])
            extended = list(table)
            for _ in range(len(extended), level + 1):
                zero = extended[-1]
                extended.append(hash_fn([zero, zero]))
            # publish a complete table; readers never see a half-built level
            _EMPTY_NODES[hash_fn] = extended
            table = extended
    return table[level]


# --- Search ---

def bisect_unique(target: int, get_value: Callable[[int], int], length: int) -> Tuple[int, bool]:
    """Bisect indices in an array of unique values sorted in ascending order.

    `get_value(i)` returns the value at index i.

    Returns:
        (low_index, found) where
        low_index = max { i in [0, length) | get_value(i) <= target }, or -1
        found = whether get_value(low_index) == target
    """
    if length == 0:
        return -1, False
    i_low, i_high = 0, length - 1
    if get_value(i_low) > target:
        return -1, False
    if get_value(i_high) < target:
        return i_high, False

    # invariant: 0 <= i_low <= low_index <= i_high < length
    while i_high != i_low:
        # ceiling: either i_low + 1 = i_high = i_mid, or i_low < i_mid < i_high,
        # so the interval strictly shrinks
        i_mid = (i_low + i_high + 1) // 2
        if get_value(i_mid) <= target:
            i_low = i_mid
        else:
            i_high = i_mid - 1
    return i_low, get_value(i_low) == target


# --- Indexed Merkle Map ---

class IndexedMerkleMap:
    """Authenticated key-value map of fixed height.

    The tree has `height` levels including the leaves, so it holds up to
    2^(height-1) leaves and the root sits at level height - 1. The sentinel
    takes one leaf, which leaves room for 2^(height-1) - 1 keys.

    Keys and values are field integers; `int` and `Constant` are accepted.
    Key 0 belongs to the sentinel and cannot be stored. The operations
    maintain the witness data and root. They do not emit in-circuit
    constraints, so `Variable` inputs are rejected.

    `hash_fn` should be a module-level function (see `empty`).
    """

    def __init__(self, height: int, hash_fn: HashFunction = hash_fields):
        if height < 1:
            raise ValueError(f"height must be at least 1, got {height}")
        self.height = height
        self.hash_fn = hash_fn
        self.root = empty(height - 1, hash_fn)

        self._leaves: List[Leaf] = [SENTINEL]
        # for every level, a sparse index -> hash mapping
        self._nodes: List[Dict[int, int]] = [{} for _ in range(height)]
        # slot indices of live leaves (sentinel first), sorted by key
        self._sorted: List[int] = [0]
        self._write_leaf(0, SENTINEL)

    # --- Properties ---

    @property
    def capacity(self) -> int:
        return 1 << (self.height - 1)

    @property
    def length(self) -> int:
        """Number of allocated leaf slots, including the sentinel and removed leaves."""
        return len(self._leaves)

    @property
    def leaves(self) -> Tuple[Leaf, ...]:
        return tuple(self._leaves)

    def __len__(self) -> int:
        return len(self._sorted) - 1

    def __contains__(self, key: KeyLike) -> bool:
        k = _concrete(key, "contains")
        return k != 0 and self._find(k)[1]

    # --- Core Operations ---

    def insert(self, key: KeyLike, value: KeyLike) -> None:
        """Insert a new leaf (key, value).

        Raises:
            ValueError: If key is 0, key is already present, or the map is full
        """
        k, v = _stored_key(key, "insert"), _concrete(value, "insert")
        low_pos, found = self._find(k)
        if found:
            raise ValueError(f"insert: key {k} already present")
        if self.length >= self.capacity:
            raise ValueError(f"insert: map of height {self.height} is full ({self.capacity} leaves)")

        new_index = self.length
        low_index = self._sorted[low_pos]
        low = self._assert_low_node(low_index, k)
        new_leaf = Leaf(k, v, low.next_key, low.next_index)
        self._write_leaf(low_index, replace(low, next_key=k, next_index=new_index))

        self._leaves.append(new_leaf)
        self._write_leaf(new_index, new_leaf)
        self._sorted.insert(low_pos + 1, new_index)
        logger.debug("insert: key=%d at index %d, root=%x", k, new_index, self.root)

    def update(self, key: KeyLike, value: KeyLike) -> None:
        """Replace the value of an existing key.

        Raises:
            KeyError: If key is not present
        """
        k, v = _stored_key(key, "update"), _concrete(value, "update")
        index = self._index_of(k, "update")
        leaf = self._leaves[index]
        self._assert_included(index, leaf)
        self._write_leaf(index, replace(leaf, value=v))
        logger.debug("update: key=%d at index %d, root=%x", k, index, self.root)

    def set(self, key: KeyLike, value: KeyLike) -> None:
        """Insert or update, depending on whether key is present."""
        k = _stored_key(key, "set")
        if self._find(k)[1]:
            self.update(k, value)
        else:
            self.insert(k, value)

    def get(self, key: KeyLike) -> Option:
        """Look up key.

        Membership is checked by re-hashing the found leaf up to the root,
        non-membership by re-hashing the low node and checking that key
        falls strictly between it and its successor. Key 0 is never stored.
        """
        k = _concrete(key, "get")
        if k == 0:
            return Option(False)
        low_pos, found = self._find(k)

        if found:
            index = self._sorted[low_pos]
            leaf = self._leaves[index]
            self._assert_included(index, leaf)
            return Option(True, Constant(leaf.value))

        self._assert_low_node(self._sorted[low_pos], k)
        return Option(False)

    def remove(self, key: KeyLike) -> None:
        """Unlink key from the list; its slot stays allocated but unreachable.

        Raises:
            ValueError: If key is 0
            KeyError: If key is not present
        """
        k = _stored_key(key, "remove")
        low_pos, found = self._find(k)
        if not found:
            raise KeyError(f"remove: key {k} not present")

        index = self._sorted[low_pos]
        leaf = self._leaves[index]
        self._assert_included(index, leaf)

        # the sentinel sits at position 0, so every stored key has a predecessor
        prev_index = self._sorted[low_pos - 1]
        prev = self._leaves[prev_index]
        self._assert_included(prev_index, prev)
        if prev.next_index != index or prev.next_key != k:
            raise InvariantViolationError(
                f"remove: leaf {prev_index} does not link to key {k} at index {index}"
            )
        self._write_leaf(prev_index, replace(prev, next_key=leaf.next_key, next_index=leaf.next_index))

        del self._sorted[low_pos]
        logger.debug("remove: key=%d at index %d, root=%x", k, index, self.root)

    # --- Merkle Paths ---

    def get_path(self, index: int) -> MerklePath:
        """Sibling hashes authenticating leaf slot `index` against the root."""
        self._check_index(index)
        siblings = []
        for level in range(self.height - 1):
            siblings.append(self.get_node(level, index ^ 1, False))
            index //= 2
        return MerklePath(siblings)

    def compute_root(self, leaf_hash: int, index: int, path: MerklePath) -> int:
        """Hash leaf_hash up along path to the root it implies."""
        node = leaf_hash
        for sibling in path.siblings:
            if index % 2 == 0:
                node = self.hash_fn([node, sibling])
            else:
                node = self.hash_fn([sibling, node])
            index //= 2
        return node

    # --- Node Cache ---

    def get_node(self, level: int, index: int, non_empty: bool) -> int:
        """Cached hash of node (level, index).

        Absent nodes are empty subtrees, unless `non_empty` says the node must
        already be known.

        Raises:
            InvariantViolationError: If non_empty and the node is not cached
        """
        node = self._nodes[level].get(index)
        if node is None:
            if non_empty:
                raise InvariantViolationError(
                    f"node at level={level}, index={index} was expected to be known, but isn't."
                )
            node = empty(level, self.hash_fn)
        return node

    # invariant: for every cached node, its descendants are either empty or cached
    def set_leaf_node(self, index: int, leaf_hash: int) -> None:
        """Write a leaf hash and recompute its ancestors and the root."""
        self._check_index(index)
        nodes = self._nodes

        nodes[0][index] = leaf_hash
        is_left = index % 2 == 0

        for level in range(1, self.height):
            index //= 2

            left = self.get_node(level - 1, index * 2, is_left)
            right = self.get_node(level - 1, index * 2 + 1, not is_left)
            nodes[level][index] = self.hash_fn([left, right])

            is_left = index % 2 == 0

        self.root = self.get_node(self.height - 1, 0, True)

    # --- Internal Helpers ---

    def _find(self, key: int) -> Tuple[int, bool]:
        """Low node position in the sorted index, and whether it holds key."""
        return bisect_unique(key, lambda i: self._leaves[self._sorted[i]].key, len(self._sorted))

    def _index_of(self, key: int, op: str) -> int:
        low_pos, found = self._find(key)
        if not found:
            raise KeyError(f"{op}: key {key} not present")
        return self._sorted[low_pos]

    def _write_leaf(self, index: int, leaf: Leaf) -> None:
        self._leaves[index] = leaf
        self.set_leaf_node(index, leaf.hash(self.hash_fn))

    def _assert_included(self, index: int, leaf: Leaf) -> None:
        """Re-hash leaf along its path and compare with the root."""
        self._check_allocated(index)
        root = self.compute_root(leaf.hash(self.hash_fn), index, self.get_path(index))
        if root != self.root:
            raise InvariantViolationError(f"leaf at index {index} is not included in the root")

    def _assert_low_node(self, index: int, key: int) -> Leaf:
        """Check that the leaf at index is the low node of key; returns it."""
        self._check_allocated(index)
        low = self._leaves[index]
        self._assert_included(index, low)
        if not low.key < key:
            raise InvariantViolationError(f"low node key {low.key} is not below {key}")
        if not (low.is_tail or key < low.next_key):
            raise InvariantViolationError(f"key {key} is not below the low node's successor {low.next_key}")
        return low

    def _check_index(self, index: int) -> None:
        if not 0 <= index < self.capacity:
            raise ValueError(f"leaf index {index} out of range [0, {self.capacity})")

    def _check_allocated(self, index: int) -> None:
        # empty slots hash like the untouched sentinel, so they are never witnesses
        if not 0 <= index < self.length:
            raise InvariantViolationError(f"leaf slot {index} is not allocated (length {self.length})")


def _concrete(x: KeyLike, op: str) -> int:
    if isinstance(x, Variable):
        raise NotImplementedError(
            f"{op}: in-circuit constraints for indexed map operations are not implemented"
        )
    if isinstance(x, Constant):
        return x.value
    return Constant.from_int(x).value


def _stored_key(x: KeyLike, op: str) -> int:
    k = _concrete(x, op)
    if k == 0:
        raise ValueError(f"{op}: key 0 is reserved for the sentinel leaf")
    return k
