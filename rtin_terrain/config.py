from __future__ import annotations

# App
APP_VERSION = "0.3.0"

# Generation
DEFAULT_SEED = 2
DEFAULT_SIZE = 513  # 2^9 + 1, the largest grid the demo pipeline uses
DEFAULT_NOISE = "fast"  # "fast" | "simplex"

# Noise (fixed algorithm; only scale is user facing)
DEFAULT_SCALE = 5e-3  # base frequency of the first octave
NOISE_OCTAVES = 8
OCTAVE_OFFSET = 1000.0  # shifts each octave to decorrelate integer-ratio frequencies

# Post-processing before meshing
DEFAULT_CLAMP_MIN = 0.4
DEFAULT_CLAMP_MAX = 1.0
HEIGHT_MULT_FACTOR = 0.25  # height multiplier = factor * grid width

# Meshing
ERROR_FACTOR = 0.001  # max error = factor * height multiplier

# v0.3: LOD tiers built on worker threads
DEFAULT_LOD_WORKERS = 2
