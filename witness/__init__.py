"""Witness introduction.

CircuitContext is the interface gadgets are written against. CompileContext
builds constraint shape only; WitnessContext also computes the assignment.
"""

from .base import CircuitContext, CompileContext, WitnessCompute, WitnessContext

__all__ = [
    "CircuitContext",
    "CompileContext",
    "WitnessContext",
    "WitnessCompute",
]
