"""Hashing of field elements.

The map and the empty-node table only need a pure function from a sequence
of field integers to one field integer. `hash_fields` is the default; any
callable with the same signature can be passed instead (e.g. a Poseidon
binding).
"""

import hashlib
from typing import Callable, Sequence

from primitives.field import PALLAS_PRIME

HashFunction = Callable[[Sequence[int]], int]

# p < 2^255, so every element fits in 32 bytes
ELEMENT_BYTES = 32


def hash_fields(inputs: Sequence[int]) -> int:
    """SHA-256 over fixed-width big-endian encodings, reduced into the field."""
    h = hashlib.sha256()
    for v in inputs:
        h.update((int(v) % PALLAS_PRIME).to_bytes(ELEMENT_BYTES, byteorder="big"))
    return int.from_bytes(h.digest(), byteorder="big") % PALLAS_PRIME
