"""Range-check gate constraint evaluation.

RangeCheck0 (one row) decomposes v0 into six 12-bit limbs and eight crumbs:

    w0   w1   w2   w3   w4   w5   w6   w7   ...  w14
    v0   x76  x64  x52  x40  x28  x16  x14  ...  x0

    v0 = sum(limbs * 2^offset)
    crumbs are 2-bit, x52..x16 are looked up in the 12-bit table.
    x76, x64 are NOT looked up here; RangeCheck1 does it.

    compact (coeff 0): the following RangeCheck1 row holds (v2, v12) and
    v12 = v0 + 2^88 * v2 is enforced.

RangeCheck1 (two rows) decomposes v2 into 88 bits and carries four
deferred 12-bit limbs of two earlier RangeCheck0 rows:

    cur:  v2   v12  z86  z74  z62  z50  z38  z36  ...  z22
    next: z20  z18  z16  x76  x64  y76  y64  z14  ...  z0

The next row is emitted as a ZERO gate and has no constraints of its own.
"""

from typing import List

import numpy as np

from primitives.field import FF, ff
from .base import ConstraintModule, GateType, RowView, crumb

LIMB_BITS = 88
LOOKUP_BITS = 12


def _weights(offsets) -> np.ndarray:
    return np.array([1 << o for o in offsets], dtype=object)


# Bit offsets of wires 1..14 of a RangeCheck0 row
RC0_OFFSETS = [76, 64, 52, 40, 28, 16] + [14 - 2 * i for i in range(8)]
RC0_WEIGHTS = _weights(RC0_OFFSETS)

# Bit offsets of wires 2..14 of the RangeCheck1 row
RC1_CUR_OFFSETS = [86, 74, 62, 50, 38] + [36 - 2 * i for i in range(8)]
RC1_CUR_WEIGHTS = _weights(RC1_CUR_OFFSETS)

# Bit offsets of the z-limbs of the following row (wires 0..2, 7..14)
RC1_NEXT_WIRES = [0, 1, 2] + list(range(7, 15))
RC1_NEXT_OFFSETS = [20, 18, 16] + [14 - 2 * i for i in range(8)]
RC1_NEXT_WEIGHTS = _weights(RC1_NEXT_OFFSETS)

CRUMB_WIRES = list(range(7, 15))
LOOKUP_WIRES = [3, 4, 5, 6]


def _weighted_sum(values: List[int], weights: np.ndarray) -> FF:
    return ff(int(np.dot(np.array(values, dtype=object), weights)))


class RangeCheck0Constraints(ConstraintModule):
    """Constraint evaluation for the RangeCheck0 gate."""

    def constraints(self, view: RowView) -> List[FF]:
        limbs = [view.w(i) for i in range(1, 15)]
        constraints = [_weighted_sum(limbs, RC0_WEIGHTS) - ff(view.w(0))]
        constraints += [crumb(view.w(i)) for i in CRUMB_WIRES]

        if view.coeff(0):
            # Packed pair: v12 = v0 + 2^88 * v2 on the following RangeCheck1 row
            if not view.has_next() or view.next_gate().kind != GateType.RANGE_CHECK_1:
                constraints.append(FF(1))
            else:
                packed = ff(view.w(0)) + ff(1 << LIMB_BITS) * ff(view.next_w(0))
                constraints.append(ff(view.next_w(1)) - packed)
        return constraints

    def lookups(self, view: RowView) -> List[int]:
        return [view.w(i) for i in LOOKUP_WIRES]


class RangeCheck1Constraints(ConstraintModule):
    """Constraint evaluation for the RangeCheck1 gate (current and next row)."""

    def constraints(self, view: RowView) -> List[FF]:
        if not view.has_next():
            return [FF(1)]

        cur = [view.w(i) for i in range(2, 15)]
        nxt = [view.next_w(i) for i in RC1_NEXT_WIRES]
        total = _weighted_sum(cur, RC1_CUR_WEIGHTS) + _weighted_sum(nxt, RC1_NEXT_WEIGHTS)
        constraints = [total - ff(view.w(0))]

        constraints += [crumb(view.w(i)) for i in [2] + CRUMB_WIRES]
        constraints += [crumb(view.next_w(i)) for i in [0, 1, 2] + CRUMB_WIRES]
        return constraints

    def lookups(self, view: RowView) -> List[int]:
        current = [view.w(i) for i in LOOKUP_WIRES]
        if not view.has_next():
            return current
        return current + [view.next_w(i) for i in LOOKUP_WIRES]


class ZeroConstraints(ConstraintModule):
    """Rows without constraints of their own (e.g. the second RangeCheck1 row)."""

    def constraints(self, view: RowView) -> List[FF]:
        return []
