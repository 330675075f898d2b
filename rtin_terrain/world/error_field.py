from __future__ import annotations

import logging
import numpy as np

from rtin_terrain.world.height import HeightField
from rtin_terrain.world.triangle import (
    Coord,
    RightTriangle,
    decode_triangles,
    parent_triangle_count,
    triangle_count,
)

logger = logging.getLogger(__name__)


def _levels(tile_size: int) -> list[tuple[int, int]]:
    """Id ranges [lo, hi) of each hierarchy level, coarsest first."""
    end = triangle_count(tile_size) + 2
    levels = []
    lo = 2
    while lo < end:
        levels.append((lo, 2 * lo))
        lo *= 2
    return levels


class ErrorField:
    """Worst-case interpolation error, indexed by hypotenuse midpoint.

    Built bottom-up: every triangle writes |lerp(a, b) - h(m)| at its
    midpoint m, and parents fold in their children's errors, so a
    triangle's error never drops below that of any descendant.
    """

    def __init__(self, heightfield: HeightField, errors: np.ndarray) -> None:
        self.heightfield = heightfield
        self.errors = errors

    @classmethod
    def build(cls, heightfield: HeightField) -> "ErrorField":
        tile_size = heightfield.rtin_tile_size()
        h = heightfield.data
        errors = np.zeros(h.shape, dtype=np.float32)
        num_parents = parent_triangle_count(tile_size)

        # Finest to coarsest so children are final before parents read them.
        # Each grid point is the midpoint of triangles on a single level only.
        for lo, hi in reversed(_levels(tile_size)):
            ids = np.arange(lo, hi, dtype=np.int64)
            ax, ay, bx, by, cx, cy = decode_triangles(ids, tile_size)
            mx = (ax + bx) // 2
            my = (ay + by) // 2

            interpolated = (h[ax, ay] + h[bx, by]) / np.float32(2.0)
            err = np.abs(interpolated - h[mx, my])

            if lo < num_parents + 2:
                err = np.maximum(err, errors[(ax + cx) // 2, (ay + cy) // 2])
                err = np.maximum(err, errors[(bx + cx) // 2, (by + cy) // 2])

            np.maximum.at(errors, (mx, my), err.astype(np.float32))

        field = cls(heightfield, errors)
        logger.debug(
            "built error field grid=%d triangles=%d max_error=%g",
            tile_size + 1, triangle_count(tile_size), field.max_error,
        )
        return field

    @property
    def tile_size(self) -> int:
        return int(self.errors.shape[0]) - 1

    @property
    def max_error(self) -> float:
        return float(self.errors.max()) if self.errors.size else 0.0

    def __getitem__(self, coord: Coord) -> float:
        return float(self.errors[coord])

    def triangle_error(self, tri_id: int) -> float:
        """Stored error of the triangle with the given id."""
        return self[RightTriangle.from_id(tri_id, self.tile_size).midpoint()]
