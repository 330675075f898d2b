from __future__ import annotations
import numpy as np

UP = np.array([0.0, 1.0, 0.0], dtype=np.float32)


def normalize_rows(v: np.ndarray, eps: float = 1e-8) -> np.ndarray:
    """Normalize vectors along the last axis; zero-length rows become +Y."""
    n = np.linalg.norm(v, axis=-1, keepdims=True)
    out = v / np.maximum(n, eps)
    degenerate = n[..., 0] <= eps
    if np.any(degenerate):
        out[degenerate] = UP
    return out


def is_power_of_two(n: int) -> bool:
    return n > 0 and (n & (n - 1)) == 0
