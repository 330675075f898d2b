from __future__ import annotations

import argparse
import logging
import random
import sys
import time

from rtin_terrain.config import (
    APP_VERSION,
    DEFAULT_CLAMP_MAX,
    DEFAULT_CLAMP_MIN,
    DEFAULT_LOD_WORKERS,
    DEFAULT_NOISE,
    DEFAULT_SCALE,
    DEFAULT_SEED,
    DEFAULT_SIZE,
    ERROR_FACTOR,
    HEIGHT_MULT_FACTOR,
)
from rtin_terrain.errors import InvalidDimensions
from rtin_terrain.world.height import NoiseTerrainGenerator, rtin_tile_size
from rtin_terrain.world.lod import LodBuilder
from rtin_terrain.world.mesh import TerrainMeshData
from rtin_terrain.world.mesh_builder import grid_mesh
from rtin_terrain.world.noise import NoiseConfig, NOISE_BACKENDS
from rtin_terrain.world.rtin import RtinExtractor

logger = logging.getLogger("rtin_terrain")


def _parse_tiers(text: str) -> list[float]:
    try:
        return [float(t) for t in text.split(",") if t.strip()]
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected comma separated numbers, got {text!r}") from None


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="rtin-terrain", description=f"Procedural terrain to adaptive RTIN mesh v{APP_VERSION}")
    p.add_argument("--seed", default=str(DEFAULT_SEED), help=f"int seed or 'random' (default: {DEFAULT_SEED})")
    p.add_argument("--size", type=int, default=DEFAULT_SIZE, help=f"grid side, must be 2^k+1 (default: {DEFAULT_SIZE})")
    p.add_argument("--width", type=int, default=None, help="grid width (overrides --size)")
    p.add_argument("--height", type=int, default=None, help="grid height (overrides --size)")
    p.add_argument("--scale", type=float, default=DEFAULT_SCALE, help="base noise frequency of the first octave")
    p.add_argument("--noise", choices=sorted(NOISE_BACKENDS), default=DEFAULT_NOISE, help="noise backend (fast or simplex)")
    p.add_argument("--clamp-min", type=float, default=DEFAULT_CLAMP_MIN, help="lower clamp applied before scaling")
    p.add_argument("--clamp-max", type=float, default=DEFAULT_CLAMP_MAX, help="upper clamp applied before scaling")
    p.add_argument("--height-mult", type=float, default=None, help=f"elevation multiplier (default: {HEIGHT_MULT_FACTOR} * width)")
    p.add_argument("--max-error", type=float, default=None, help=f"RTIN error threshold (default: {ERROR_FACTOR} * height multiplier)")
    p.add_argument("--tiers", type=_parse_tiers, default=None, help="extra comma separated thresholds built as LOD tiers")
    p.add_argument("--workers", type=int, default=DEFAULT_LOD_WORKERS, help="worker threads for LOD tiers")
    p.add_argument("--grid", action="store_true", help="also build the uniform grid mesh and report the simplification ratio")
    p.add_argument("--debug", action="store_true", help="enable debug logs")
    return p.parse_args(argv)


def _describe(label: str, mesh: TerrainMeshData) -> str:
    return f"{label}: vertices={mesh.num_vertices} triangles={mesh.num_triangles}"


def run(args: argparse.Namespace) -> int:
    if isinstance(args.seed, str) and args.seed.lower() == "random":
        seed = random.randint(0, 2**31 - 1)
    else:
        seed = int(args.seed)

    width = int(args.width or args.size)
    height = int(args.height or args.size)
    height_mult = float(args.height_mult) if args.height_mult is not None else width * HEIGHT_MULT_FACTOR
    max_error = float(args.max_error) if args.max_error is not None else ERROR_FACTOR * height_mult

    try:
        rtin_tile_size((width, height))
    except InvalidDimensions as e:
        print(f"rtin-terrain: error: {e}", file=sys.stderr)
        return 2

    t0 = time.perf_counter()
    generator = NoiseTerrainGenerator(seed=seed, cfg=NoiseConfig(scale=float(args.scale)), mode=str(args.noise))
    terrain = generator.generate((width, height))
    terrain.clamp(float(args.clamp_min), float(args.clamp_max))
    terrain.multiply(height_mult)
    logger.debug("terrain ready in %.2fs", time.perf_counter() - t0)

    extractor = RtinExtractor(terrain)
    t1 = time.perf_counter()
    mesh = extractor.extract(max_error)
    mesh.validate()
    logger.debug("rtin extraction in %.2fs", time.perf_counter() - t1)

    print(f"rtin-terrain v{APP_VERSION} seed={seed} noise={args.noise} grid={width}x{height}")
    print(f"error field: max={extractor.error_field.max_error:.4f}")
    print(_describe(f"rtin max_error={max_error:g}", mesh))

    if args.grid:
        baseline = grid_mesh(terrain)
        print(_describe("grid", baseline))
        print(f"simplification: {mesh.simplification_ratio(baseline):.1f}x fewer triangles")

    if args.tiers:
        with LodBuilder(terrain, workers=int(args.workers), error_field=extractor.error_field) as builder:
            tiers = builder.build(args.tiers)
        for tier_error, tier_mesh in tiers.items():
            print(_describe(f"tier max_error={tier_error:g}", tier_mesh))

    return 0


def main(argv: list[str] | None = None) -> None:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="[rtin] %(message)s",
    )
    sys.exit(run(args))
