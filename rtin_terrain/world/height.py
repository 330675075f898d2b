from __future__ import annotations

from dataclasses import dataclass, field
import logging
import numpy as np

from rtin_terrain.config import DEFAULT_NOISE
from rtin_terrain.errors import InvalidDimensions
from rtin_terrain.util.math import is_power_of_two, normalize_rows
from rtin_terrain.world.noise import NoiseConfig, OctaveNoise

logger = logging.getLogger(__name__)


def rtin_tile_size(shape: tuple[int, int]) -> int:
    """Return N - 1 for a square 2^k+1 grid shape, else raise InvalidDimensions."""
    w, h = shape
    if w != h:
        raise InvalidDimensions(shape, "heightfield must be square")
    tile_size = w - 1
    if not is_power_of_two(tile_size):
        raise InvalidDimensions(shape, "side length must be 2^k+1")
    return tile_size


class HeightField:
    """Dense grid of elevations indexed ``[x, y]``.

    Positions are centered on the grid: sample (x, y) sits at
    ``(x - W/2, h[x, y], y - H/2)`` with Y up. Normals use central
    differences inside the grid and one-sided differences on its border.
    """

    def __init__(self, data: np.ndarray) -> None:
        data = np.array(data, dtype=np.float32)
        if data.ndim != 2:
            raise InvalidDimensions(data.shape, "heightfield must be a 2D grid")
        self.data = data

    @property
    def width(self) -> int:
        return int(self.data.shape[0])

    @property
    def height(self) -> int:
        return int(self.data.shape[1])

    @property
    def shape(self) -> tuple[int, int]:
        return (self.width, self.height)

    def copy(self) -> "HeightField":
        return HeightField(self.data)

    def elevation_at(self, x: int, y: int) -> float:
        return float(self.data[x, y])

    def position_at(self, x: int, y: int) -> np.ndarray:
        return np.array(
            [x - self.width / 2.0, self.data[x, y], y - self.height / 2.0],
            dtype=np.float32,
        )

    def positions(self, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
        """Vectorized position_at for matching arrays of grid coordinates -> (N, 3)."""
        xs = np.asarray(xs, dtype=np.int64)
        ys = np.asarray(ys, dtype=np.int64)
        return np.stack(
            [
                xs.astype(np.float32) - np.float32(self.width / 2.0),
                self.data[xs, ys],
                ys.astype(np.float32) - np.float32(self.height / 2.0),
            ],
            axis=-1,
        ).astype(np.float32)

    def _slope(self, axis_len: int, i: int, lo: float, mid: float, hi: float) -> float:
        if axis_len < 2:
            return 0.0
        if i == 0:
            return hi - mid
        if i == axis_len - 1:
            return mid - lo
        return (hi - lo) / 2.0

    def normal_at(self, x: int, y: int) -> np.ndarray:
        h = self.data
        w, hh = self.shape
        dx = self._slope(
            w, x,
            float(h[x - 1, y]) if x > 0 else 0.0,
            float(h[x, y]),
            float(h[x + 1, y]) if x < w - 1 else 0.0,
        )
        dy = self._slope(
            hh, y,
            float(h[x, y - 1]) if y > 0 else 0.0,
            float(h[x, y]),
            float(h[x, y + 1]) if y < hh - 1 else 0.0,
        )
        n = np.array([-dx, 1.0, -dy], dtype=np.float64)
        return (n / np.linalg.norm(n)).astype(np.float32)

    def normals(self) -> np.ndarray:
        """Normal for every sample, shape (W, H, 3)."""
        h = self.data.astype(np.float64)
        dhdx = np.zeros_like(h)
        dhdy = np.zeros_like(h)
        if self.width >= 2:
            dhdx[1:-1, :] = (h[2:, :] - h[:-2, :]) / 2.0
            dhdx[0, :] = h[1, :] - h[0, :]
            dhdx[-1, :] = h[-1, :] - h[-2, :]
        if self.height >= 2:
            dhdy[:, 1:-1] = (h[:, 2:] - h[:, :-2]) / 2.0
            dhdy[:, 0] = h[:, 1] - h[:, 0]
            dhdy[:, -1] = h[:, -1] - h[:, -2]

        n = np.stack([-dhdx, np.ones_like(h), -dhdy], axis=-1)
        return normalize_rows(n).astype(np.float32)

    def multiply(self, k: float) -> None:
        self.data *= np.float32(k)

    def clamp(self, lo: float, hi: float) -> None:
        if lo > hi:
            raise ValueError(f"clamp bounds out of order: min={lo} > max={hi}")
        np.clip(self.data, np.float32(lo), np.float32(hi), out=self.data)

    def rtin_tile_size(self) -> int:
        return rtin_tile_size(self.shape)


@dataclass
class NoiseTerrainGenerator:
    seed: int
    cfg: NoiseConfig = field(default_factory=NoiseConfig)
    mode: str = DEFAULT_NOISE  # "fast" | "simplex"

    def __post_init__(self) -> None:
        self.noise = OctaveNoise(self.seed, self.cfg, mode=self.mode)

    def generate(self, dimensions: tuple[int, int]) -> HeightField:
        """Octave noise over a (width, height) grid, normalized to [0, 1]."""
        width, height = (int(d) for d in dimensions)
        if width < 1 or height < 1:
            raise ValueError(f"dimensions must be positive, got {dimensions}")

        xs = np.arange(width, dtype=np.float64)
        ys = np.arange(height, dtype=np.float64)
        data = self.noise.normalized_grid(xs, ys)
        logger.debug(
            "generated %dx%d heightfield seed=%d mode=%s scale=%g range=[%.4f, %.4f]",
            width, height, self.seed, self.mode, self.cfg.scale, float(data.min()), float(data.max()),
        )
        return HeightField(data.astype(np.float32))


def generate(
    dimensions: tuple[int, int],
    seed: int,
    config: NoiseConfig | None = None,
    *,
    mode: str = DEFAULT_NOISE,
) -> HeightField:
    return NoiseTerrainGenerator(seed=seed, cfg=config or NoiseConfig(), mode=mode).generate(dimensions)
