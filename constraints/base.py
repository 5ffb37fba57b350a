"""Base classes for gate rows and their constraint evaluation.

A circuit is a list of Gate rows. Each row has a gate type, up to
GATE_WIDTH wire cells and a few coefficients. A ConstraintModule turns a row
(plus, for multi-row gates, the rows after it) into:

- polynomial constraints: field elements that must all be zero, and
- lookups: integers that must appear in the 12-bit lookup table.

Example:
    module = get_constraint_module(rows[i].kind)
    residuals = module.constraints(RowView(rows, i, ctx.read))
    assert all(r == 0 for r in residuals)
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Sequence, Tuple

from primitives.field import FF, Field, ff

GATE_WIDTH = 15


class GateType(Enum):
    """Gate kinds emitted by this library."""
    ZERO = 0
    RANGE_CHECK_0 = 1
    RANGE_CHECK_1 = 2


@dataclass(frozen=True)
class Gate:
    """One constraint row.

    Attributes:
        kind: Gate type selecting the constraint module
        wires: Cells of the row; a Variable shared by two rows is wired
        coeffs: Gate coefficients (RANGE_CHECK_0 carries the compact flag)
    """
    kind: GateType
    wires: Tuple[Field, ...]
    coeffs: Tuple[int, ...] = field(default_factory=tuple)

    def __post_init__(self):
        if len(self.wires) > GATE_WIDTH:
            raise ValueError(f"{self.kind.name}: {len(self.wires)} wires exceed row width {GATE_WIDTH}")


class RowView:
    """Row accessor with concrete values, relative to a current row."""

    def __init__(self, rows: Sequence[Gate], row: int, read: Callable[[Field], int]):
        self._rows = rows
        self._row = row
        self._read = read

    @property
    def gate(self) -> Gate:
        return self._rows[self._row]

    def has_next(self) -> bool:
        return self._row + 1 < len(self._rows)

    def next_gate(self) -> Gate:
        return self._rows[self._row + 1]

    def w(self, i: int) -> int:
        """Concrete value of wire i of the current row (0 past the row end)."""
        wires = self.gate.wires
        return self._read(wires[i]) if i < len(wires) else 0

    def next_w(self, i: int) -> int:
        """Concrete value of wire i of the next row."""
        wires = self.next_gate().wires
        return self._read(wires[i]) if i < len(wires) else 0

    def coeff(self, i: int) -> int:
        coeffs = self.gate.coeffs
        return coeffs[i] if i < len(coeffs) else 0


class ConstraintModule(ABC):
    """Per-gate constraint evaluation."""

    @abstractmethod
    def constraints(self, view: RowView) -> List[FF]:
        """Polynomial constraints of the row; all must evaluate to zero."""
        pass

    def lookups(self, view: RowView) -> List[int]:
        """Values the row looks up in the 12-bit table."""
        return []


def crumb(x: int) -> FF:
    """x(x-1)(x-2)(x-3): zero iff x is a 2-bit value."""
    v = ff(x)
    return v * (v - FF(1)) * (v - FF(2)) * (v - FF(3))
