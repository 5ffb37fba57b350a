"""Custom gate emitters.

Each function appends fixed-shape rows to the circuit context. The wire
order matches the layouts documented in constraints/range_check.py.
"""

from typing import Sequence

from primitives.field import Field
from witness.base import CircuitContext
from .base import Gate, GateType


def _expect(name: str, cells: Sequence[Field], n: int) -> None:
    if len(cells) != n:
        raise ValueError(f"{name}: expected {n} cells, got {len(cells)}")


def range_check_0(
    ctx: CircuitContext,
    v0: Field,
    limbs: Sequence[Field],
    crumbs: Sequence[Field],
    compact: bool,
) -> None:
    """Append one RangeCheck0 row.

    Args:
        ctx: Circuit context receiving the row
        v0: Value being decomposed
        limbs: Six 12-bit limbs, most significant first [x76, ..., x16]
        crumbs: Eight crumbs, most significant first [x14, ..., x0]
        compact: Whether v0 is the low half of a packed pair checked by
            the following RangeCheck1 row
    """
    _expect("range_check_0 limbs", limbs, 6)
    _expect("range_check_0 crumbs", crumbs, 8)
    ctx.add_gate(Gate(GateType.RANGE_CHECK_0, (v0, *limbs, *crumbs), (int(compact),)))


def range_check_1(
    ctx: CircuitContext,
    v2: Field,
    v12: Field,
    current: Sequence[Field],
    following: Sequence[Field],
) -> None:
    """Append a RangeCheck1 row and its ZERO continuation row.

    Args:
        ctx: Circuit context receiving the rows
        v2: Value fully range-checked by the two rows
        v12: Packed value checked by a preceding compact RangeCheck0 row
        current: 13 limbs of v2 for the first row [z86, z74, ..., z22]
        following: 15 cells of the second row
            [z20, z18, z16, x76, x64, y76, y64, z14, ..., z0]
    """
    _expect("range_check_1 current row", current, 13)
    _expect("range_check_1 next row", following, 15)
    ctx.add_gate(Gate(GateType.RANGE_CHECK_1, (v2, v12, *current)))
    ctx.add_gate(Gate(GateType.ZERO, tuple(following)))
