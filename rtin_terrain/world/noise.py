from __future__ import annotations

from dataclasses import dataclass
import numpy as np
from opensimplex import OpenSimplex

from rtin_terrain.config import DEFAULT_SCALE, NOISE_OCTAVES, OCTAVE_OFFSET


@dataclass(frozen=True)
class NoiseConfig:
    scale: float = DEFAULT_SCALE
    octaves: int = NOISE_OCTAVES
    octave_offset: float = OCTAVE_OFFSET


class FastValueNoise2D:
    """Fast 2D value noise with fully vectorized numpy implementation.

    Uses an integer hash on lattice points and smooth interpolation.
    Deterministic for a given seed, output in [-1, 1).

    Note: This is not simplex/perlin; it's value noise. It is much faster
    than the simplex backend and good enough for most terrain.
    """

    def __init__(self, seed: int) -> None:
        self.seed = int(seed)

    @staticmethod
    def _fade(t: np.ndarray) -> np.ndarray:
        # smootherstep
        return t * t * t * (t * (t * 6 - 15) + 10)

    def _hash(self, xi: np.ndarray, yi: np.ndarray) -> np.ndarray:
        # Vectorized integer hash -> uint32 -> [0,1)
        x = (xi.astype(np.uint32) * np.uint32(374761393)) ^ (yi.astype(np.uint32) * np.uint32(668265263)) ^ np.uint32(self.seed & 0xFFFFFFFF)
        x ^= (x >> np.uint32(13))
        x *= np.uint32(1274126177)
        x ^= (x >> np.uint32(16))
        return x.astype(np.float64) / 2.0**32

    def noise(self, x: np.ndarray, y: np.ndarray) -> np.ndarray:
        # x,y: float arrays (same shape)
        xi0 = np.floor(x).astype(np.int64)
        yi0 = np.floor(y).astype(np.int64)
        xi1 = xi0 + 1
        yi1 = yi0 + 1

        u = self._fade(x - xi0)
        v = self._fade(y - yi0)

        a = self._hash(xi0, yi0)
        b = self._hash(xi1, yi0)
        c = self._hash(xi0, yi1)
        d = self._hash(xi1, yi1)

        # bilinear interpolation with fade
        ab = a + (b - a) * u
        cd = c + (d - c) * u
        return (ab + (cd - ab) * v) * 2.0 - 1.0

    def grid(self, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
        """Sample the lattice spanned by 1-D axes; result is indexed [x, y]."""
        gx, gy = np.meshgrid(np.asarray(xs, dtype=np.float64), np.asarray(ys, dtype=np.float64), indexing="ij")
        return self.noise(gx, gy)


class SimplexNoise2D:
    """OpenSimplex gradient noise. Slower, smoother than value noise."""

    def __init__(self, seed: int) -> None:
        self.seed = int(seed)
        self._simp = OpenSimplex(self.seed)

    def grid(self, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
        # noise2array returns (len(ys), len(xs)); transpose to [x, y]
        n = self._simp.noise2array(np.asarray(xs, dtype=np.float64), np.asarray(ys, dtype=np.float64))
        return np.clip(n.T, -1.0, 1.0)


NOISE_BACKENDS = {
    "fast": FastValueNoise2D,
    "simplex": SimplexNoise2D,
}


def make_noise(mode: str, seed: int):
    try:
        backend = NOISE_BACKENDS[mode]
    except KeyError:
        raise ValueError(f"unknown noise mode {mode!r} (expected one of {sorted(NOISE_BACKENDS)})") from None
    return backend(seed)


def octave_magnitude(octaves: int) -> float:
    """Largest possible |sum| of `octaves` layers weighted 1, 1/2, 1/4, ..."""
    return sum(1.0 / 2**i for i in range(octaves))


class OctaveNoise:
    """Multi-octave sum of a 2D noise backend.

    Octave i samples at frequency scale * 2^i, shifted by i * octave_offset
    along x, and is weighted 1/2^i.
    """

    def __init__(self, seed: int, cfg: NoiseConfig | None = None, *, mode: str = "fast") -> None:
        self.seed = int(seed)
        self.cfg = cfg or NoiseConfig()
        self.mode = mode
        self.base = make_noise(mode, self.seed)

    def grid(self, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
        xs = np.asarray(xs, dtype=np.float64)
        ys = np.asarray(ys, dtype=np.float64)
        total = np.zeros((xs.size, ys.size), dtype=np.float64)
        weight = 1.0
        for i in range(self.cfg.octaves):
            freq = self.cfg.scale / weight
            total += weight * self.base.grid(i * self.cfg.octave_offset + freq * xs, freq * ys)
            weight /= 2.0
        return total

    def normalized_grid(self, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
        """Octave sum remapped from [-max, max] to [0, 1]."""
        max_mag = max(octave_magnitude(self.cfg.octaves), 1e-9)
        return np.clip((self.grid(xs, ys) / max_mag + 1.0) / 2.0, 0.0, 1.0)
