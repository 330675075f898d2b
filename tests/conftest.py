"""
Pytest fixtures shared across test modules.
"""
import numpy as np
import pytest

from rtin_terrain.world.height import HeightField


@pytest.fixture
def flat5():
    """5x5 heightfield with every elevation at 1.0."""
    return HeightField(np.ones((5, 5), dtype=np.float32))


@pytest.fixture
def spike5():
    """5x5 heightfield, zero everywhere except 10.0 at the center."""
    data = np.zeros((5, 5), dtype=np.float32)
    data[2, 2] = 10.0
    return HeightField(data)


@pytest.fixture
def bowl9():
    """9x9 integer paraboloid; strictly convex so no midpoint error is zero."""
    x, y = np.meshgrid(np.arange(9), np.arange(9), indexing="ij")
    return HeightField(((x - 4) ** 2 + (y - 4) ** 2).astype(np.float32))


@pytest.fixture
def plane5():
    """5x5 tilted plane h = 0.5*x + 0.25*y."""
    x, y = np.meshgrid(np.arange(5), np.arange(5), indexing="ij")
    return HeightField((0.5 * x + 0.25 * y).astype(np.float32))


@pytest.fixture
def rough17():
    """17x17 heightfield of uniform random values."""
    rng = np.random.default_rng(7)
    return HeightField(rng.random((17, 17), dtype=np.float32))
