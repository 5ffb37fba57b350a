"""Pytest configuration and shared fixtures."""

import sys
from pathlib import Path

import numpy as np
import pytest

# tests/ is inside the repository root, so parent is the root
root_dir = Path(__file__).parent.parent
if str(root_dir) not in sys.path:
    sys.path.insert(0, str(root_dir))

from witness import CompileContext, WitnessContext  # noqa: E402


@pytest.fixture
def witness_ctx() -> WitnessContext:
    return WitnessContext()


@pytest.fixture
def compile_ctx() -> CompileContext:
    return CompileContext()


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(20240611)


@pytest.fixture
def random_bits(rng: np.random.Generator):
    """Uniform random integer in [0, 2^bits)."""
    def sample(bits: int) -> int:
        n_bytes = (bits + 7) // 8
        return int.from_bytes(rng.bytes(n_bytes), "little") >> (8 * n_bytes - bits)
    return sample
