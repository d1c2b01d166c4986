"""CLI entry point for diamond-square heightmap generation."""

from __future__ import annotations

import argparse
from datetime import datetime, timezone
from pathlib import Path
import platform
import shutil
import tempfile
import time
from typing import Iterator

import matplotlib
import numpy as np
from heightmap.config import (
    DEFAULT_HEIGHT_SCALING,
    DEFAULT_ITERATIONS,
    DEFAULT_OUTSIDE_HEIGHT,
    DEFAULT_SEEDS,
    DEFAULT_SMOOTHNESS,
    DEFAULT_VARIATION,
    DiamondSquareParameters,
    GeneratorConfig,
    ParameterError,
    RenderConfig,
)
from heightmap.derive import colormap_rgb, height_preview_u16, height_preview_u8, upscale_nearest
from heightmap.diamond_square import DiamondSquareEngine, IterativeGenerator
from heightmap.io import (
    clear_output_dir,
    move_tree_contents,
    resolve_output_dir,
    write_height_npy,
    write_json,
    write_png_rgb,
    write_png_u16,
    write_png_u8,
)
from heightmap.rng import engine_generator


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Diamond-square heightmap generator")
    parser.add_argument("--rng-seed", type=int, default=0, help="Seed of the subdivision noise")
    parser.add_argument("--out", default="out", help="Output root directory")
    parser.add_argument(
        "--iterations",
        type=int,
        default=DEFAULT_ITERATIONS,
        help="Subdivision iterations; grid side is 2**iterations + 1",
    )
    parser.add_argument(
        "--seeds",
        type=float,
        nargs=4,
        default=list(DEFAULT_SEEDS),
        metavar=("TL", "TR", "BL", "BR"),
        help="Initial corner elevations",
    )
    parser.add_argument("--variation", type=float, default=DEFAULT_VARIATION, help="Initial random amplitude")
    parser.add_argument(
        "--smoothness",
        type=float,
        default=DEFAULT_SMOOTHNESS,
        help="Variation decays by 2**-smoothness per iteration",
    )
    parser.add_argument(
        "--outside-height",
        type=float,
        default=DEFAULT_OUTSIDE_HEIGHT,
        help="Elevation assumed beyond the map border",
    )
    parser.add_argument(
        "--height-scaling",
        type=float,
        default=DEFAULT_HEIGHT_SCALING,
        help="Multiplier applied after normalization",
    )
    parser.add_argument("--colormap", default=RenderConfig().colormap, help="Matplotlib colormap for the RGB preview")
    parser.add_argument(
        "--snapshots",
        action="store_true",
        help="Write an intermediate preview after every iteration",
    )
    parser.add_argument("--overwrite", action="store_true", help="Overwrite files in existing output directory")
    parser.add_argument(
        "--json",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Write metadata JSON files",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    parameters = DiamondSquareParameters(
        iteration_count=args.iterations,
        seeds=tuple(args.seeds),
        variation=args.variation,
        smoothness=args.smoothness,
        outside_height=args.outside_height,
        height_scaling=args.height_scaling,
    )
    if args.colormap not in matplotlib.colormaps:
        parser.error(f"Unknown colormap: {args.colormap}")
    config = GeneratorConfig(parameters=parameters, render=RenderConfig(colormap=args.colormap))

    try:
        engine = DiamondSquareEngine(parameters, rng=engine_generator(args.rng_seed))
    except ParameterError as exc:
        parser.error(str(exc))

    resolution = engine.resolution
    out_dir = resolve_output_dir(args.out, args.rng_seed, resolution, overwrite=args.overwrite)
    stage_dir = Path(tempfile.mkdtemp(prefix=".staging-", dir=str(out_dir.parent)))
    try:
        generation_start = time.perf_counter()
        snapshot_names: list[str] = []
        for generator in _iterations(engine):
            print(
                f"Iteration {generator.current_iteration}/{parameters.iteration_count}: "
                f"{generator.intermediate_resolution}x{generator.intermediate_resolution}"
            )
            if args.snapshots:
                name = f"snapshot_iter_{generator.current_iteration:02d}.png"
                preview = height_preview_u8(generator.intermediate_heights, height_scaling=parameters.height_scaling)
                write_png_u8(stage_dir / name, upscale_nearest(preview, resolution))
                snapshot_names.append(name)
        generation_seconds = time.perf_counter() - generation_start

        heights = engine.heights
        min_height, max_height = engine.height_bounds
        write_height_npy(stage_dir / "height.npy", heights)
        write_png_u16(stage_dir / "height_16.png", height_preview_u16(heights, height_scaling=parameters.height_scaling))
        write_png_u8(stage_dir / "height_8.png", height_preview_u8(heights, height_scaling=parameters.height_scaling))
        write_png_rgb(
            stage_dir / "height_color.png",
            colormap_rgb(heights, height_scaling=parameters.height_scaling, colormap=config.render.colormap),
        )

        if args.json:
            deterministic_meta = {
                "rng_seed": args.rng_seed,
                "resolution": resolution,
                "iterations": engine.current_iteration,
                "config": config.to_dict(),
                "normalization": {
                    "min_height": _finite_or_none(min_height),
                    "max_height": _finite_or_none(max_height),
                },
                "metrics": {
                    "mean_height": float(np.mean(heights)),
                    "std_height": float(np.std(heights)),
                },
                "snapshots": snapshot_names,
            }
            meta = {
                **deterministic_meta,
                "generated_at_utc": datetime.now(timezone.utc).isoformat(),
                "generation_seconds": generation_seconds,
                "python_version": platform.python_version(),
                "numpy_version": np.__version__,
            }
            write_json(stage_dir / "deterministic_meta.json", deterministic_meta)
            write_json(stage_dir / "meta.json", meta)

        clear_output_dir(out_dir, out_root=Path(args.out))
        move_tree_contents(stage_dir, out_dir)
    finally:
        shutil.rmtree(stage_dir, ignore_errors=True)

    print(f"Generated heightmap: {out_dir}")
    print(f"Resolution {resolution}x{resolution}; iterations {engine.current_iteration}")
    print(f"Normalization bounds: min={min_height:.4f}, max={max_height:.4f}")
    print(f"Generation time: {generation_seconds:.3f} s")
    file_count = sum(1 for child in out_dir.iterdir() if child.is_file())
    print(f"Output files: {file_count}")
    return 0


def _iterations(generator: IterativeGenerator) -> Iterator[IterativeGenerator]:
    """Advance `generator` to completion, yielding it after every iteration."""

    generator.advance()
    yield generator
    while generator.in_progress:
        generator.advance()
        yield generator


def _finite_or_none(value: float) -> float | None:
    return float(value) if np.isfinite(value) else None


if __name__ == "__main__":
    raise SystemExit(main())
