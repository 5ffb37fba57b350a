"""Tests for the range-check gadgets.

Constant inputs take the direct path. Variable inputs emit gate rows, which
are checked against the witness assignment with assert_satisfied().
"""

import pytest

from constraints import GateType, assert_satisfied, check_rows
from gadgets.range_check import (
    L,
    compact_multi_range_check,
    multi_range_check,
    range_check_64,
    split_compact_limb,
)
from primitives.bit_slice import bit_slice
from primitives.errors import RangeViolationError
from primitives.field import Constant
from witness import CompileContext, WitnessContext


def _var(ctx, value: int):
    [v] = ctx.exists(1, lambda: [value])
    return v


def _kinds(ctx):
    return [gate.kind for gate in ctx.rows]


class TestRangeCheck64Constant:
    """Test range_check_64 on constants."""

    @pytest.mark.parametrize("x", [0, 1, 3, 1 << 16, 0xDEADBEEFCAFEBABE, (1 << 64) - 1])
    def test_returns_high_limbs(self, compile_ctx: CompileContext, x: int) -> None:
        """Returns (x52, x40, x28, x16) and emits no rows."""
        limbs = range_check_64(compile_ctx, Constant(x))
        expected = tuple(Constant(bit_slice(x, o, 12)) for o in (52, 40, 28, 16))
        assert limbs == expected
        assert compile_ctx.rows == []

    def test_random_values(self, compile_ctx: CompileContext, random_bits) -> None:
        """Limbs match bit_slice for random 64-bit values."""
        for _ in range(50):
            x = random_bits(64)
            limbs = range_check_64(compile_ctx, Constant(x))
            assert [l.value for l in limbs] == [bit_slice(x, o, 12) for o in (52, 40, 28, 16)]

    @pytest.mark.parametrize("x", [1 << 64, (1 << 64) + 5, 1 << 200])
    def test_too_large_rejected(self, compile_ctx: CompileContext, x: int) -> None:
        """Values of 64 or more bits raise RangeViolationError naming the value."""
        with pytest.raises(RangeViolationError, match=str(x)):
            range_check_64(compile_ctx, Constant(x))


class TestRangeCheck64Variable:
    """Test range_check_64 on variables."""

    def test_single_row(self, witness_ctx: WitnessContext) -> None:
        """Emits exactly one non-compact RangeCheck0 row."""
        range_check_64(witness_ctx, _var(witness_ctx, 12345))
        assert _kinds(witness_ctx) == [GateType.RANGE_CHECK_0]
        assert witness_ctx.rows[0].coeffs == (0,)

    @pytest.mark.parametrize("x", [0, 0xDEADBEEFCAFEBABE, (1 << 64) - 1])
    def test_satisfied_in_range(self, witness_ctx: WitnessContext, x: int) -> None:
        """In-range values satisfy the row and the returned limbs hold the slices."""
        limbs = range_check_64(witness_ctx, _var(witness_ctx, x))
        assert_satisfied(witness_ctx)
        assert [witness_ctx.read(l) for l in limbs] == [bit_slice(x, o, 12) for o in (52, 40, 28, 16)]

    def test_high_slots_are_zero_constants(self, witness_ctx: WitnessContext) -> None:
        """The two unused 12-bit slots are wired to the constant 0."""
        range_check_64(witness_ctx, _var(witness_ctx, 99))
        assert witness_ctx.rows[0].wires[1:3] == (Constant(0), Constant(0))

    @pytest.mark.parametrize("x", [1 << 64, (1 << 70) + 3])
    def test_violated_out_of_range(self, witness_ctx: WitnessContext, x: int) -> None:
        """Out-of-range values build fine but do not satisfy the row."""
        range_check_64(witness_ctx, _var(witness_ctx, x))
        assert check_rows(witness_ctx)


class TestMultiRangeCheck:
    """Test multi_range_check."""

    def test_constants_in_range(self, compile_ctx: CompileContext, random_bits) -> None:
        """Constants below 2^88 pass without emitting rows."""
        for _ in range(20):
            values = [Constant(random_bits(L)) for _ in range(3)]
            multi_range_check(compile_ctx, *values)
        multi_range_check(compile_ctx, *[Constant((1 << L) - 1)] * 3)
        assert compile_ctx.rows == []

    @pytest.mark.parametrize("position", [0, 1, 2])
    def test_constant_too_large(self, compile_ctx: CompileContext, position: int) -> None:
        """Any constant of 88 or more bits fails, reporting all three values."""
        values = [Constant(1), Constant(2), Constant(3)]
        values[position] = Constant(1 << L)
        with pytest.raises(RangeViolationError) as excinfo:
            multi_range_check(compile_ctx, *values)
        for v in values:
            assert str(v.value) in str(excinfo.value)

    def test_row_layout(self, witness_ctx: WitnessContext) -> None:
        """Variables emit RangeCheck0, RangeCheck0, RangeCheck1, Zero."""
        x, y, z = (_var(witness_ctx, v) for v in (1, 2, 3))
        multi_range_check(witness_ctx, x, y, z)
        assert _kinds(witness_ctx) == [
            GateType.RANGE_CHECK_0,
            GateType.RANGE_CHECK_0,
            GateType.RANGE_CHECK_1,
            GateType.ZERO,
        ]
        assert [g.coeffs for g in witness_ctx.rows[:2]] == [(0,), (0,)]

    def test_deferred_limbs_wired_to_completion_rows(self, witness_ctx: WitnessContext) -> None:
        """x76, x64, y76, y64 of the RangeCheck0 rows reappear in the Zero row."""
        x, y, z = (_var(witness_ctx, v) for v in (1, 2, 3))
        multi_range_check(witness_ctx, x, y, z)
        rc0_x, rc0_y, rc1, nxt = witness_ctx.rows
        assert nxt.wires[3:7] == (rc0_x.wires[1], rc0_x.wires[2], rc0_y.wires[1], rc0_y.wires[2])
        assert rc1.wires[0] == z
        assert rc1.wires[1] == Constant(0)

    def test_satisfied_random(self, random_bits) -> None:
        """Random 88-bit variables satisfy every row."""
        for _ in range(10):
            ctx = WitnessContext()
            multi_range_check(ctx, *(_var(ctx, random_bits(L)) for _ in range(3)))
            assert_satisfied(ctx)

    def test_satisfied_at_bound(self, witness_ctx: WitnessContext) -> None:
        """2^88 - 1 is accepted in every position."""
        top = (1 << L) - 1
        multi_range_check(witness_ctx, *(_var(witness_ctx, top) for _ in range(3)))
        assert_satisfied(witness_ctx)

    @pytest.mark.parametrize("position", [0, 1, 2])
    def test_violated_out_of_range(self, witness_ctx: WitnessContext, position: int) -> None:
        """A value of 88 bits or more in any position violates the rows."""
        values = [5, 6, 7]
        values[position] = (1 << L) + 1
        multi_range_check(witness_ctx, *(_var(witness_ctx, v) for v in values))
        assert check_rows(witness_ctx)

    def test_mixed_constant_and_variable(self, witness_ctx: WitnessContext) -> None:
        """If any input is a variable, all three go through the gates."""
        multi_range_check(witness_ctx, Constant(17), _var(witness_ctx, 1 << 80), Constant(3))
        assert len(witness_ctx.rows) == 4
        assert_satisfied(witness_ctx)


class TestCompactMultiRangeCheck:
    """Test compact_multi_range_check."""

    def test_constant_roundtrip(self, compile_ctx: CompileContext, random_bits) -> None:
        """Splitting x + 2^88 y returns (x, y, z)."""
        for _ in range(50):
            x, y, z = random_bits(L), random_bits(L), random_bits(L)
            result = compact_multi_range_check(compile_ctx, Constant(x + (y << L)), Constant(z))
            assert result == (Constant(x), Constant(y), Constant(z))
        assert compile_ctx.rows == []

    @pytest.mark.parametrize("xy, z", [(1 << 176, 0), (0, 1 << 88), ((1 << 180) + 1, 1 << 90)])
    def test_constant_too_large(self, compile_ctx: CompileContext, xy: int, z: int) -> None:
        """xy of 176+ bits or z of 88+ bits raise RangeViolationError."""
        with pytest.raises(RangeViolationError, match="176 and 88 bits"):
            compact_multi_range_check(compile_ctx, Constant(xy), Constant(z))

    def test_row_layout(self, witness_ctx: WitnessContext) -> None:
        """z's row is plain, x's row is compact and directly precedes RangeCheck1."""
        xy, z = _var(witness_ctx, 5 + (6 << L)), _var(witness_ctx, 7)
        x, y, _ = compact_multi_range_check(witness_ctx, xy, z)
        rc0_z, rc0_x, rc1, _nxt = witness_ctx.rows
        assert (rc0_z.wires[0], rc0_z.coeffs) == (z, (0,))
        assert (rc0_x.wires[0], rc0_x.coeffs) == (x, (1,))
        assert rc1.wires[:2] == (y, xy)

    def test_variable_roundtrip(self, random_bits) -> None:
        """Returned variables hold the split limbs and all rows are satisfied."""
        for _ in range(10):
            ctx = WitnessContext()
            x, y, z = random_bits(L), random_bits(L), random_bits(L)
            xy_var, z_var = _var(ctx, x + (y << L)), _var(ctx, z)
            rx, ry, rz = compact_multi_range_check(ctx, xy_var, z_var)
            assert (ctx.read(rx), ctx.read(ry), ctx.read(rz)) == (x, y, z)
            assert rz == z_var
            assert_satisfied(ctx)

    def test_violated_when_xy_too_large(self, witness_ctx: WitnessContext) -> None:
        """xy of 176 bits leaves y with 88+ bits, which RangeCheck1 rejects."""
        compact_multi_range_check(witness_ctx, _var(witness_ctx, 1 << 176), _var(witness_ctx, 1))
        assert check_rows(witness_ctx)

    def test_violated_when_z_too_large(self, witness_ctx: WitnessContext) -> None:
        """z of 88 bits violates its RangeCheck0 row."""
        compact_multi_range_check(witness_ctx, _var(witness_ctx, 1), _var(witness_ctx, 1 << L))
        assert check_rows(witness_ctx)

    def test_split_compact_limb(self) -> None:
        """split_compact_limb separates low and high 88 bits."""
        assert split_compact_limb(3 + (9 << L)) == (3, 9)


class TestCompileShape:
    """The compile phase produces the same rows as the witness phase."""

    @pytest.mark.parametrize("gadget, n_inputs", [
        (range_check_64, 1),
        (multi_range_check, 3),
        (compact_multi_range_check, 2),
    ])
    def test_same_rows(self, gadget, n_inputs: int) -> None:
        """Identical gate kinds, wiring and coefficients in both phases."""
        contexts = [CompileContext(), WitnessContext()]
        for ctx in contexts:
            inputs = [_var(ctx, 1000 + i) for i in range(n_inputs)]
            gadget(ctx, *inputs)
        compiled, witnessed = contexts
        assert compiled.rows == witnessed.rows
        assert compiled.num_vars == witnessed.num_vars
