"""Provable gadgets."""

from .range_check import (
    L,
    compact_multi_range_check,
    multi_range_check,
    range_check_64,
)

__all__ = [
    "L",
    "range_check_64",
    "multi_range_check",
    "compact_multi_range_check",
]
