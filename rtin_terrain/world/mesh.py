from __future__ import annotations

from dataclasses import dataclass
import numpy as np

from rtin_terrain.errors import MeshError


@dataclass(eq=False)
class TerrainMeshData:
    vertices: np.ndarray  # (V,3) float32 positions
    normals: np.ndarray  # (V,3) float32 unit normals
    triangles: np.ndarray  # (3T,) uint32, stride 3

    @property
    def num_vertices(self) -> int:
        return int(self.vertices.shape[0])

    @property
    def num_triangles(self) -> int:
        return int(self.triangles.shape[0]) // 3

    def validate(self, *, atol: float = 1e-4) -> None:
        """Raise MeshError if the buffers are inconsistent."""
        if self.vertices.shape != self.normals.shape or self.vertices.ndim != 2 or self.vertices.shape[1:] != (3,):
            raise MeshError(f"vertex/normal buffers mismatch: {self.vertices.shape} vs {self.normals.shape}")
        if self.triangles.shape[0] % 3 != 0:
            raise MeshError(f"triangle list length {self.triangles.shape[0]} is not a multiple of 3")
        if self.triangles.size and int(self.triangles.max()) >= self.num_vertices:
            raise MeshError(f"triangle index {int(self.triangles.max())} out of range for {self.num_vertices} vertices")
        lengths = np.linalg.norm(self.normals, axis=1)
        if lengths.size and not np.allclose(lengths, 1.0, atol=atol):
            raise MeshError("normals are not unit length")

    def simplification_ratio(self, baseline: "TerrainMeshData") -> float:
        """How many times fewer triangles this mesh has than `baseline`."""
        return baseline.num_triangles / max(1, self.num_triangles)
