"""Pallas base field GF(p) and the tagged field values used by gadgets.

Uses galois for field arithmetic. FF is the field type.

Circuit values are an explicit tagged variant:

- Constant: a concrete integer known while the circuit is being built.
- Variable: a handle into the witness vector of a CircuitContext; its value
  only exists during witness generation.

Gadgets branch on the tag with isinstance() rather than asking a value
whether it happens to be constant.
"""

from dataclasses import dataclass
from typing import Union

import galois

# --- Field Construction ---

PALLAS_PRIME = 0x40000000000000000000000000000000224698FC094CF91B992D30ED00000001

# 5 generates the multiplicative group; passing it skips factoring p - 1
FF = galois.GF(PALLAS_PRIME, primitive_element=5, verify=False)
"""Base field GF(p) - Pallas base field."""


# --- Tagged Values ---

@dataclass(frozen=True)
class Constant:
    """Field value known at circuit construction time."""
    value: int

    def __post_init__(self):
        if not 0 <= self.value < PALLAS_PRIME:
            raise ValueError(f"Constant out of field range: {self.value}")

    @classmethod
    def from_int(cls, value: int) -> 'Constant':
        """Reduce an arbitrary integer into the field."""
        return cls(int(value) % PALLAS_PRIME)

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Variable:
    """Handle to a witness cell. `index` is the position in the owning context."""
    index: int

    def __str__(self) -> str:
        return f"v{self.index}"


Field = Union[Constant, Variable]


def to_field(value: Union[int, Field]) -> Field:
    """Lift plain integers to Constant, pass Field values through."""
    if isinstance(value, (Constant, Variable)):
        return value
    return Constant.from_int(value)


def ff(value: int) -> FF:
    """Embed an integer into FF, reducing mod p."""
    return FF(int(value) % PALLAS_PRIME)
