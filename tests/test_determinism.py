from __future__ import annotations

import hashlib

import numpy as np

from heightmap.config import DiamondSquareParameters
from heightmap.derive import height_preview_u16
from heightmap.diamond_square import DiamondSquareEngine, generate_heightmap
from heightmap.rng import engine_generator


def _hash_bytes(payload: bytes) -> str:
    return hashlib.sha256(payload).hexdigest()


def test_heights_and_preview_are_deterministic() -> None:
    params = DiamondSquareParameters(iteration_count=6, seeds=(0.0, 1.0, 0.5, 0.25), variation=0.8)

    run_a = generate_heightmap(params, rng=engine_generator(2024))
    run_b = generate_heightmap(params, rng=engine_generator(2024))

    preview_a = height_preview_u16(run_a.heights)
    preview_b = height_preview_u16(run_b.heights)

    assert np.array_equal(run_a.heights, run_b.heights)
    assert np.array_equal(preview_a, preview_b)
    assert _hash_bytes(run_a.raw_heights.tobytes()) == _hash_bytes(run_b.raw_heights.tobytes())
    assert (run_a.min_height, run_a.max_height) == (run_b.min_height, run_b.max_height)


def test_stepwise_run_matches_one_shot_generation() -> None:
    params = DiamondSquareParameters(iteration_count=5, variation=1.2, smoothness=0.7, outside_height=-0.3)

    stepwise = DiamondSquareEngine(params, rng=engine_generator(5))
    stepwise.advance()
    while stepwise.in_progress:
        stepwise.advance()
    one_shot = DiamondSquareEngine(params, rng=engine_generator(5)).generate()

    assert stepwise.current_iteration == one_shot.current_iteration == 5
    assert _hash_bytes(stepwise.heights.tobytes()) == _hash_bytes(one_shot.heights.tobytes())
