from __future__ import annotations

import logging
import math
from typing import Callable

import numpy as np

from rtin_terrain.errors import InvalidDimensions, MeshError
from rtin_terrain.util.math import normalize_rows
from rtin_terrain.world.error_field import ErrorField
from rtin_terrain.world.height import HeightField
from rtin_terrain.world.mesh import TerrainMeshData
from rtin_terrain.world.triangle import RightTriangle

logger = logging.getLogger(__name__)


class RtinExtractor:
    """Adaptive mesh extraction over the right-triangle hierarchy.

    A triangle is split while it is not a leaf and the error stored at its
    hypotenuse midpoint is strictly greater than the threshold. Both passes
    (count, then emit) go through ``_walk`` so they visit the same output
    triangles in the same order.

    The heightfield and error field are only read, so one extractor can
    serve several thresholds, also from several threads at once. Recursion
    depth is 2*log2(N-1) + 1.
    """

    def __init__(self, heightfield: HeightField, error_field: ErrorField | None = None) -> None:
        self.tile_size = heightfield.rtin_tile_size()
        if error_field is None:
            error_field = ErrorField.build(heightfield)
        elif error_field.errors.shape != heightfield.shape:
            raise InvalidDimensions(
                error_field.errors.shape,
                f"error field does not match heightfield {heightfield.shape}",
            )
        self.heightfield = heightfield
        self.error_field = error_field

    def roots(self) -> tuple[RightTriangle, RightTriangle]:
        return (
            RightTriangle.bottom_left_root(self.tile_size),
            RightTriangle.top_right_root(self.tile_size),
        )

    def _walk(self, tri: RightTriangle, threshold: np.float32, visit: Callable[[RightTriangle], None]) -> None:
        if not tri.is_leaf() and self.error_field.errors[tri.midpoint()] > threshold:
            self._walk(tri.left_child(), threshold, visit)
            self._walk(tri.right_child(), threshold, visit)
        else:
            visit(tri)

    def extract(self, max_error: float) -> TerrainMeshData:
        max_error = float(max_error)
        if math.isnan(max_error) or max_error < 0:
            raise ValueError(f"max_error must be >= 0, got {max_error}")
        threshold = np.float32(max_error)
        size = self.tile_size + 1

        # Pass 1: assign vertex indices in first-seen order and count triangles.
        indices = np.full((size, size), -1, dtype=np.int64)
        coords: list[tuple[int, int]] = []
        num_triangles = 0

        def count(tri: RightTriangle) -> None:
            nonlocal num_triangles
            for corner in (tri.a, tri.b, tri.c):
                if indices[corner] < 0:
                    indices[corner] = len(coords)
                    coords.append(corner)
            num_triangles += 1

        for root in self.roots():
            self._walk(root, threshold, count)

        # Pass 2: emit index triples into the preallocated list.
        triangles = np.empty(num_triangles * 3, dtype=np.uint32)
        cursor = 0

        def emit(tri: RightTriangle) -> None:
            nonlocal cursor
            triangles[cursor:cursor + 3] = (indices[tri.a], indices[tri.b], indices[tri.c])
            cursor += 3

        for root in self.roots():
            self._walk(root, threshold, emit)

        if cursor != triangles.shape[0]:
            raise MeshError(f"emit pass wrote {cursor // 3} triangles, count pass found {num_triangles}")

        xy = np.array(coords, dtype=np.int64).reshape(-1, 2)
        vertices = self.heightfield.positions(xy[:, 0], xy[:, 1])
        normals = _vertex_normals(vertices, triangles)

        logger.debug(
            "rtin mesh max_error=%g vertices=%d triangles=%d",
            max_error, vertices.shape[0], num_triangles,
        )
        return TerrainMeshData(vertices=vertices, normals=normals, triangles=triangles)


def _vertex_normals(vertices: np.ndarray, triangles: np.ndarray) -> np.ndarray:
    """Average of the face normals around each vertex, unit length."""
    tri = triangles.reshape(-1, 3).astype(np.int64)
    v = vertices.astype(np.float64)
    va, vb, vc = v[tri[:, 0]], v[tri[:, 1]], v[tri[:, 2]]
    face = np.cross(vb - va, vc - va)

    accum = np.zeros_like(v)
    for k in range(3):
        np.add.at(accum, tri[:, k], face)
    counts = np.bincount(tri.reshape(-1), minlength=v.shape[0])
    if np.any(counts == 0):
        raise MeshError(f"{int(np.count_nonzero(counts == 0))} vertices are not used by any triangle")

    return normalize_rows(accum / counts[:, None]).astype(np.float32)


def extract(heightfield: HeightField, error_field: ErrorField, max_error: float) -> TerrainMeshData:
    return RtinExtractor(heightfield, error_field).extract(max_error)


def heightfield_to_rtin_mesh(heightfield: HeightField, max_error: float) -> TerrainMeshData:
    """Build the error field for `heightfield` and extract one mesh from it."""
    return RtinExtractor(heightfield).extract(max_error)
