"""Gate rows, gate emitters and per-gate constraint evaluation.

Each gate type has its own ConstraintModule. check_rows() walks a circuit
context's rows with its witness assignment and reports every failing
constraint or lookup; assert_satisfied() raises on the first report.
"""

import logging
from typing import Dict, List

from primitives.errors import ConstraintViolationError
from witness.base import CircuitContext
from .base import GATE_WIDTH, ConstraintModule, Gate, GateType, RowView
from .gates import range_check_0, range_check_1
from .range_check import (
    LOOKUP_BITS,
    RangeCheck0Constraints,
    RangeCheck1Constraints,
    ZeroConstraints,
)

logger = logging.getLogger(__name__)

# Registry mapping gate types to constraint module classes
CONSTRAINT_REGISTRY: Dict[GateType, type] = {
    GateType.ZERO: ZeroConstraints,
    GateType.RANGE_CHECK_0: RangeCheck0Constraints,
    GateType.RANGE_CHECK_1: RangeCheck1Constraints,
}


def get_constraint_module(kind: GateType) -> ConstraintModule:
    """Get constraint module instance for a gate type.

    Raises:
        KeyError: If no constraint module is registered for the gate type
    """
    if kind in CONSTRAINT_REGISTRY:
        return CONSTRAINT_REGISTRY[kind]()
    raise KeyError(
        f"No constraint module for gate '{kind}'. "
        f"Available: {[k.name for k in CONSTRAINT_REGISTRY]}"
    )


def check_rows(ctx: CircuitContext) -> List[str]:
    """Evaluate every row of ctx against its witness assignment.

    Returns:
        One message per failing constraint or lookup, empty if satisfied
    """
    failures = []
    for i, gate in enumerate(ctx.rows):
        module = get_constraint_module(gate.kind)
        view = RowView(ctx.rows, i, ctx.read)
        for j, residual in enumerate(module.constraints(view)):
            if residual != 0:
                failures.append(f"row {i} ({gate.kind.name}): constraint {j} not satisfied")
        for value in module.lookups(view):
            if not 0 <= value < 1 << LOOKUP_BITS:
                failures.append(f"row {i} ({gate.kind.name}): lookup of {value} failed")
    for failure in failures:
        logger.debug(failure)
    return failures


def assert_satisfied(ctx: CircuitContext) -> None:
    """Raise ConstraintViolationError if any row of ctx is not satisfied."""
    failures = check_rows(ctx)
    if failures:
        raise ConstraintViolationError(
            f"{len(failures)} constraint(s) violated; first: {failures[0]}"
        )


__all__ = [
    "GATE_WIDTH",
    "Gate",
    "GateType",
    "RowView",
    "ConstraintModule",
    "RangeCheck0Constraints",
    "RangeCheck1Constraints",
    "ZeroConstraints",
    "CONSTRAINT_REGISTRY",
    "get_constraint_module",
    "range_check_0",
    "range_check_1",
    "check_rows",
    "assert_satisfied",
]
