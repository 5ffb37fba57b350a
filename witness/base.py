"""Circuit contexts: the two phases of building a circuit.

A circuit is built twice. The compile phase only fixes the constraint shape:
which rows exist and which cells they wire together. The witness phase runs
the same gadget code again and additionally fills in concrete values for
every variable. Gadgets are written once against CircuitContext and work in
both phases.

Example:
    def square_root_gadget(ctx: CircuitContext, x: Field):
        [r] = ctx.exists(1, lambda: [sqrt_mod_p(ctx.read(x))])
        ...

    # Shape only, the compute callback is never invoked
    square_root_gadget(CompileContext(), x)

    # Concrete values for every variable
    square_root_gadget(WitnessContext(), x)

The compute callback passed to exists() is the only place concrete values of
variables may be read. It must be deterministic and side-effect free, since
the witness phase can be replayed.
"""

import logging
from abc import ABC, abstractmethod
from typing import Callable, List, Sequence

from primitives.errors import WitnessUnavailableError
from primitives.field import PALLAS_PRIME, Constant, Field, Variable

logger = logging.getLogger(__name__)

WitnessCompute = Callable[[], Sequence[int]]


class CircuitContext(ABC):
    """Uniform interface for gadgets - works for compile and witness phases."""

    def __init__(self):
        self.rows: List = []
        self._num_vars = 0

    @property
    def num_vars(self) -> int:
        """Number of variables introduced so far."""
        return self._num_vars

    def exists(self, n: int, compute: WitnessCompute) -> List[Variable]:
        """Introduce n fresh, unconstrained variables.

        Args:
            n: Number of variables
            compute: Returns the n concrete values. Called in the witness
                phase only.

        Returns:
            The n new Variable handles, in order
        """
        if n < 0:
            raise ValueError(f"exists: n must be non-negative, got {n}")
        variables = [Variable(self._num_vars + i) for i in range(n)]
        self._assign(variables, compute)
        self._num_vars += n
        return variables

    def add_gate(self, gate) -> None:
        """Append one constraint row. Rows are kept in program order."""
        self.rows.append(gate)

    @abstractmethod
    def _assign(self, variables: List[Variable], compute: WitnessCompute) -> None:
        """Bind concrete values to freshly introduced variables (or not)."""
        pass

    @abstractmethod
    def read(self, x: Field) -> int:
        """Concrete integer value of x.

        Returns:
            Compile phase: the value of a Constant; raises for a Variable
            Witness phase: the value of either
        """
        pass


class CompileContext(CircuitContext):
    """Shape-only implementation - variables never receive values."""

    def _assign(self, variables: List[Variable], compute: WitnessCompute) -> None:
        pass

    def read(self, x: Field) -> int:
        if isinstance(x, Constant):
            return x.value
        raise WitnessUnavailableError(
            f"value of {x} is not known while compiling the constraint shape"
        )


class WitnessContext(CircuitContext):
    """Witness implementation - runs every compute callback and stores the values."""

    def __init__(self):
        super().__init__()
        self._values: List[int] = []

    @property
    def values(self) -> List[int]:
        """Witness vector, indexed by Variable.index."""
        return list(self._values)

    def _assign(self, variables: List[Variable], compute: WitnessCompute) -> None:
        computed = [int(v) % PALLAS_PRIME for v in compute()]
        if len(computed) != len(variables):
            raise ValueError(
                f"exists: compute returned {len(computed)} values, expected {len(variables)}"
            )
        self._values.extend(computed)
        logger.debug("witness: assigned %d variables (total %d)", len(computed), len(self._values))

    def read(self, x: Field) -> int:
        if isinstance(x, Constant):
            return x.value
        return self._values[x.index]
