"""Bit extraction on unsigned integers."""


def bit_slice(x: int, start: int, length: int) -> int:
    """Return the `length`-bit unsigned integer at bit offset `start` of x.

    Bits above the significant range of x read as 0, so slicing past the end
    is allowed and yields 0.
    """
    if start < 0 or length < 0:
        raise ValueError(f"bit_slice: negative start or length ({start}, {length})")
    return (x >> start) & ((1 << length) - 1)
