"""Range-check gadgets built on the RangeCheck0 / RangeCheck1 custom gates.

- range_check_64: x in [0, 2^64), one RangeCheck0 row.
- multi_range_check: x, y, z in [0, 2^88), four rows.
- compact_multi_range_check: xy = x + 2^88 * y and z, four rows, returns
  the split limbs (x, y, z).

The 88-bit scheme shares the two highest 12-bit limbs of x and y with the
RangeCheck1 rows that check z, so three values cost four rows instead of six.
"""

from typing import Tuple

from constraints.gates import range_check_0, range_check_1
from primitives.bit_slice import bit_slice
from primitives.errors import RangeViolationError
from primitives.field import Constant, Field
from witness.base import CircuitContext

# default bigint limb size
L = 88
TWO_L = 2 * L
L_MASK = (1 << L) - 1

ZERO = Constant(0)


def range_check_64(ctx: CircuitContext, x: Field) -> Tuple[Field, Field, Field, Field]:
    """Assert that x is in the range [0, 2^64).

    Returns the 4 highest 12-bit limbs of x in reverse order: (x52, x40, x28, x16).

    Raises:
        RangeViolationError: If x is a constant with 64 or more bits
    """
    if isinstance(x, Constant):
        xx = x.value
        if xx >= 1 << 64:
            raise RangeViolationError(f"range_check_64: expected field to fit in 64 bits, got {x}")
        # returned for consistency with the provable case
        return (
            Constant(bit_slice(xx, 52, 12)),
            Constant(bit_slice(xx, 40, 12)),
            Constant(bit_slice(xx, 28, 12)),
            Constant(bit_slice(xx, 16, 12)),
        )

    # crumbs (2-bit limbs)
    x0, x2, x4, x6, x8, x10, x12, x14 = ctx.exists(
        8, lambda: [bit_slice(ctx.read(x), i, 2) for i in range(0, 16, 2)]
    )

    # 12-bit limbs
    x16, x28, x40, x52 = ctx.exists(
        4, lambda: [bit_slice(ctx.read(x), i, 12) for i in range(16, 64, 12)]
    )

    range_check_0(
        ctx,
        x,
        [ZERO, ZERO, x52, x40, x28, x16],
        [x14, x12, x10, x8, x6, x4, x2, x0],
        False,  # not using compact mode
    )

    return x52, x40, x28, x16


def multi_range_check(ctx: CircuitContext, x: Field, y: Field, z: Field) -> None:
    """Assert that x, y, z are all in [0, 2^88).

    Raises:
        RangeViolationError: If all three are constants and any has 88 or more bits
    """
    if isinstance(x, Constant) and isinstance(y, Constant) and isinstance(z, Constant):
        if x.value >> L or y.value >> L or z.value >> L:
            raise RangeViolationError(f"Expected fields to fit in {L} bits, got {x}, {y}, {z}")
        return

    x64, x76 = range_check_0_helper(ctx, x)
    y64, y76 = range_check_0_helper(ctx, y)
    range_check_1_helper(ctx, x64, x76, y64, y76, z, ZERO)


def compact_multi_range_check(ctx: CircuitContext, xy: Field, z: Field) -> Tuple[Field, Field, Field]:
    """Compact multi-range-check.

    Checks
    - xy = x + 2^88 * y
    - x, y, z in [0, 2^88)

    Returns the full limbs (x, y, z).

    Raises:
        RangeViolationError: If both inputs are constants and xy has 176 or
            more bits or z has 88 or more bits
    """
    if isinstance(xy, Constant) and isinstance(z, Constant):
        if xy.value >> TWO_L or z.value >> L:
            raise RangeViolationError(
                f"Expected fields to fit in {TWO_L} and {L} bits respectively, got {xy}, {z}"
            )
        x, y = split_compact_limb(xy.value)
        return Constant(x), Constant(y), z

    x, y = ctx.exists(2, lambda: split_compact_limb(ctx.read(xy)))

    z64, z76 = range_check_0_helper(ctx, z, compact=False)
    x64, x76 = range_check_0_helper(ctx, x, compact=True)
    range_check_1_helper(ctx, z64, z76, x64, x76, y, xy)

    return x, y, z


def split_compact_limb(x01: int) -> Tuple[int, int]:
    """Split x01 = x0 + 2^88 * x1 into (x0, x1)."""
    return x01 & L_MASK, x01 >> L


def range_check_0_helper(ctx: CircuitContext, x: Field, compact: bool = False) -> Tuple[Field, Field]:
    """Decompose x into 88 bits with one RangeCheck0 row.

    Returns (x64, x76), the two highest 12-bit limbs. Their lookups are not
    part of this row; pass them to range_check_1_helper.
    """
    # crumbs (2-bit limbs)
    x0, x2, x4, x6, x8, x10, x12, x14 = ctx.exists(
        8, lambda: [bit_slice(ctx.read(x), i, 2) for i in range(0, 16, 2)]
    )

    # 12-bit limbs
    x16, x28, x40, x52, x64, x76 = ctx.exists(
        6, lambda: [bit_slice(ctx.read(x), i, 12) for i in range(16, 88, 12)]
    )

    range_check_0(
        ctx,
        x,
        [x76, x64, x52, x40, x28, x16],
        [x14, x12, x10, x8, x6, x4, x2, x0],
        compact,
    )

    # the two highest 12-bit limbs are returned because another gate
    # is needed to add lookups for them
    return x64, x76


def range_check_1_helper(
    ctx: CircuitContext,
    x64: Field,
    x76: Field,
    y64: Field,
    y76: Field,
    z: Field,
    yz: Field,
) -> None:
    """Range-check z over 88 bits and complete the deferred limbs of x and y.

    yz is only constrained when the preceding row is a compact RangeCheck0,
    which asserts yz = v + 2^88 * z for that row's value v.
    """
    # limbs for the current row
    z22, z24, z26, z28, z30, z32, z34, z36, z38, z50, z62, z74, z86 = ctx.exists(
        13,
        lambda: (
            [bit_slice(ctx.read(z), i, 2) for i in range(22, 38, 2)]
            + [bit_slice(ctx.read(z), i, 12) for i in range(38, 86, 12)]
            + [bit_slice(ctx.read(z), 86, 2)]
        ),
    )

    # limbs for the next row
    z0, z2, z4, z6, z8, z10, z12, z14, z16, z18, z20 = ctx.exists(
        11, lambda: [bit_slice(ctx.read(z), i, 2) for i in range(0, 22, 2)]
    )

    range_check_1(
        ctx,
        z,
        yz,
        [z86, z74, z62, z50, z38, z36, z34, z32, z30, z28, z26, z24, z22],
        [z20, z18, z16, x76, x64, y76, y64, z14, z12, z10, z8, z6, z4, z2, z0],
    )
