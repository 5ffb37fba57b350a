"""Primitives - field values, bit slicing, hashing and error types."""

from primitives.bit_slice import bit_slice
from primitives.errors import (
    ConstraintViolationError,
    InvariantViolationError,
    RangeViolationError,
    WitnessUnavailableError,
)
from primitives.field import (
    FF,
    PALLAS_PRIME,
    Constant,
    Field,
    Variable,
    ff,
    to_field,
)
from primitives.hashing import HashFunction, hash_fields

__all__ = [
    # Field
    "FF",
    "PALLAS_PRIME",
    "Constant",
    "Variable",
    "Field",
    "ff",
    "to_field",
    # Bits
    "bit_slice",
    # Hashing
    "HashFunction",
    "hash_fields",
    # Errors
    "RangeViolationError",
    "InvariantViolationError",
    "WitnessUnavailableError",
    "ConstraintViolationError",
]
