"""Provable data structures."""

from .indexed_merkle_map import (
    IndexedMerkleMap,
    Leaf,
    MerklePath,
    Option,
    SENTINEL,
    bisect_unique,
    empty,
)

__all__ = [
    "IndexedMerkleMap",
    "Leaf",
    "MerklePath",
    "Option",
    "SENTINEL",
    "bisect_unique",
    "empty",
]
