"""Exception types raised by gadgets and the indexed map."""


class RangeViolationError(ValueError):
    """A constant value does not fit in the declared bit-width."""


class InvariantViolationError(RuntimeError):
    """Internal state contradicts an invariant (caller or programming bug)."""


class WitnessUnavailableError(RuntimeError):
    """A concrete witness value was requested while only building constraint shape."""


class ConstraintViolationError(AssertionError):
    """A gate row is not satisfied by the witness assignment."""
