from __future__ import annotations

import logging
import numpy as np

from rtin_terrain.errors import InvalidDimensions
from rtin_terrain.world.height import HeightField
from rtin_terrain.world.mesh import TerrainMeshData

logger = logging.getLogger(__name__)


def build_indices(width: int, height: int) -> np.ndarray:
    """Two triangles per cell for a (width x height) grid, vertex (x, y) at x + y*width."""
    idx: list[int] = []
    for x in range(width - 1):
        for y in range(height - 1):
            a = x + y * width
            b = a + 1
            c = b + width
            d = a + width
            idx.extend([a, b, c, a, c, d])
    return np.array(idx, dtype=np.uint32)


def grid_mesh(heightfield: HeightField) -> TerrainMeshData:
    """Full-resolution mesh with every sample as a vertex; the baseline for RTIN."""
    width, height = heightfield.shape
    if width < 2 or height < 2:
        raise InvalidDimensions(heightfield.shape, "grid mesh needs at least 2x2 samples")

    xs = np.tile(np.arange(width, dtype=np.int64), height)
    ys = np.repeat(np.arange(height, dtype=np.int64), width)

    vertices = heightfield.positions(xs, ys)
    normals = heightfield.normals()[xs, ys]
    triangles = build_indices(width, height)

    logger.debug("grid mesh %dx%d vertices=%d triangles=%d", width, height, vertices.shape[0], triangles.shape[0] // 3)
    return TerrainMeshData(vertices=vertices, normals=normals.astype(np.float32), triangles=triangles)
