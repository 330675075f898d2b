from __future__ import annotations


class TerrainError(Exception):
    """Base class for terrain and meshing errors."""


class InvalidDimensions(TerrainError, ValueError):
    """Heightfield shape cannot be meshed (not square, or side is not 2^k+1)."""

    def __init__(self, shape: tuple[int, ...], reason: str) -> None:
        self.shape = tuple(int(s) for s in shape)
        self.reason = reason
        super().__init__(f"invalid heightfield dimensions {self.shape}: {reason}")


class MeshError(TerrainError, RuntimeError):
    """A produced mesh violates its structural invariants."""
