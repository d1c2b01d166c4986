"""Diamond-square heightmap subdivision.

The grid has side ``2**n + 1`` so every midpoint taken during subdivision
falls on an integer index. Each iteration visits every sub-square at the
current spacing, writes its centre (diamond step) and its four edge
midpoints (square step), then halves the spacing.

Edge midpoints need a fourth corner that lies outside the sub-square. That
corner is reconstructed by reflection and its elevation is read back from the
grid, or replaced by ``outside_height`` when it falls off the map. The outside
height is therefore what shapes the falloff along the map border.
"""

from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Protocol, Union

import numpy as np

from heightmap.config import DiamondSquareParameters, validate_parameters


@dataclass(frozen=True)
class GridPoint:
    """Grid index with a known elevation."""

    x: int
    y: int
    height: float


@dataclass(frozen=True)
class ReflectedPoint:
    """Square-step corner reconstructed by reflection; elevation unresolved."""

    x: int
    y: int


Corner = Union[GridPoint, ReflectedPoint]


@dataclass(frozen=True)
class HeightmapResult:
    """Normalized output of a completed run together with its raw grid."""

    heights: np.ndarray
    raw_heights: np.ndarray
    min_height: float
    max_height: float
    iterations: int


class IterativeGenerator(Protocol):
    """Heightmap generator that can be driven one refinement at a time."""

    @property
    def resolution(self) -> int: ...

    @property
    def current_iteration(self) -> int: ...

    @property
    def intermediate_resolution(self) -> int: ...

    @property
    def heights(self) -> np.ndarray: ...

    @property
    def in_progress(self) -> bool: ...

    @property
    def intermediate_heights(self) -> np.ndarray: ...

    def generate(self) -> "IterativeGenerator": ...

    def advance(self) -> None: ...


def reflect(known: int, opposite: int) -> int:
    """Mirror `opposite` across `known` along one axis."""

    return 2 * known - opposite


def is_inside(x: int, y: int, resolution: int) -> bool:
    return 0 <= x < resolution and 0 <= y < resolution


def resolve_corner(corner: Corner, grid: np.ndarray, outside_height: float) -> GridPoint:
    """Return `corner` with a known elevation.

    Reflected corners inside the grid take whatever is stored there, which can
    still be the initial zero when the neighbouring sub-square has not been
    visited yet in this iteration.
    """

    if isinstance(corner, GridPoint):
        return corner
    if is_inside(corner.x, corner.y, grid.shape[0]):
        height = float(grid[corner.x, corner.y])
    else:
        height = float(outside_height)
    return GridPoint(corner.x, corner.y, height)


def normalize_heights(
    raw: np.ndarray,
    min_height: float,
    max_height: float,
    height_scaling: float,
) -> np.ndarray:
    """Remap `raw` from [min_height, max_height] to [0, height_scaling].

    A zero or non-finite span (flat terrain, or no iteration run yet) maps
    every cell to 0.
    """

    span = max_height - min_height
    if span == 0.0 or not math.isfinite(span):
        return np.zeros(raw.shape, dtype=np.float64)
    norm = np.clip((raw.astype(np.float64) - min_height) / span, 0.0, 1.0)
    return norm * float(height_scaling)


class DiamondSquareEngine:
    """Stateful diamond-square generator.

    Not thread-safe. All array accessors return new arrays, never the live
    grid. Pass a seeded ``numpy.random.Generator`` for reproducible output;
    without one a fresh unseeded generator is used.
    """

    def __init__(
        self,
        parameters: DiamondSquareParameters,
        *,
        rng: np.random.Generator | None = None,
    ) -> None:
        validate_parameters(parameters)
        self._parameters = parameters
        self._rng = rng if rng is not None else np.random.default_rng()
        self.reset()

    def reset(self) -> None:
        params = self._parameters
        self._resolution = 2**params.iteration_count + 1
        self._grid = np.zeros((self._resolution, self._resolution), dtype=np.float64)
        last = self._resolution - 1
        top_left, top_right, bottom_left, bottom_right = (float(s) for s in params.seeds)
        self._grid[0, 0] = top_left
        self._grid[0, last] = top_right
        self._grid[last, 0] = bottom_left
        self._grid[last, last] = bottom_right

        self._step = last
        self._current_iteration = 0
        self._in_progress = False

        self._variation = float(params.variation)
        self._smoothness = float(params.smoothness)
        self._outside_height = float(params.outside_height)
        self._height_scaling = float(params.height_scaling)

        self._min_height = math.inf
        self._max_height = -math.inf

    @property
    def parameters(self) -> DiamondSquareParameters:
        return self._parameters

    @property
    def resolution(self) -> int:
        return self._resolution

    @property
    def current_iteration(self) -> int:
        return self._current_iteration

    @property
    def step(self) -> int:
        return self._step

    @property
    def variation(self) -> float:
        return self._variation

    @property
    def in_progress(self) -> bool:
        return self._in_progress

    @property
    def is_complete(self) -> bool:
        return self._step <= 1

    @property
    def height_bounds(self) -> tuple[float, float]:
        return self._min_height, self._max_height

    @property
    def intermediate_resolution(self) -> int:
        return (self._resolution - 1) // self._step + 1

    @property
    def raw_heights(self) -> np.ndarray:
        return self._grid.copy()

    @property
    def heights(self) -> np.ndarray:
        return normalize_heights(self._grid, self._min_height, self._max_height, self._height_scaling)

    @property
    def intermediate_heights(self) -> np.ndarray:
        step = self._step
        return normalize_heights(
            self._grid[::step, ::step],
            self._min_height,
            self._max_height,
            self._height_scaling,
        )

    def generate(self) -> "DiamondSquareEngine":
        """Run every remaining iteration of a fresh run."""

        self.reset()
        self._in_progress = True
        self.advance()
        while self._in_progress:
            self.advance()
        return self

    def advance(self) -> None:
        """Run one subdivision iteration, starting a fresh run if none is active."""

        if not self._in_progress:
            self.reset()
            self._in_progress = True
        if self._step <= 1:
            # A 2x2 grid has no midpoints to fill.
            self._in_progress = False
            return

        self._min_height = math.inf
        self._max_height = -math.inf

        step = self._step
        grid = self._grid
        for i in range(0, self._resolution - 1, step):
            for j in range(0, self._resolution - 1, step):
                self._process(
                    GridPoint(i, j, float(grid[i, j])),
                    GridPoint(i + step, j, float(grid[i + step, j])),
                    GridPoint(i, j + step, float(grid[i, j + step])),
                    GridPoint(i + step, j + step, float(grid[i + step, j + step])),
                )

        self._variation *= 2.0 ** (-self._smoothness)
        self._step //= 2
        self._current_iteration += 1
        if self._step <= 1:
            self._in_progress = False

    def _process(self, p1: GridPoint, p2: GridPoint, p3: GridPoint, p4: GridPoint) -> None:
        # p1 (i, j), p2 (i + step, j), p3 (i, j + step), p4 (i + step, j + step)
        mid = self._diamond_step(p1, p2, p3, p4)

        # Edge midpoints in order: (mid.x, j), (i, mid.y), (i + step, mid.y), (mid.x, j + step)
        self._square_step((ReflectedPoint(mid.x, reflect(p1.y, mid.y)), p1, p2, mid))
        self._square_step((p1, ReflectedPoint(reflect(p1.x, mid.x), mid.y), mid, p3))
        self._square_step((p2, mid, ReflectedPoint(reflect(p2.x, mid.x), mid.y), p4))
        self._square_step((mid, p3, p4, ReflectedPoint(mid.x, reflect(p3.y, mid.y))))

    def _diamond_step(self, p1: GridPoint, p2: GridPoint, p3: GridPoint, p4: GridPoint) -> GridPoint:
        x = (p1.x + p2.x) // 2
        y = (p1.y + p3.y) // 2
        height = (p1.height + p2.height + p3.height + p4.height) / 4.0 + self._random_variation()
        self._write(x, y, height)
        return GridPoint(x, y, height)

    def _square_step(self, corners: tuple[Corner, Corner, Corner, Corner]) -> GridPoint:
        # corners[1] and corners[2] span the x axis, corners[0] and corners[3] the y axis.
        c0, c1, c2, c3 = (resolve_corner(c, self._grid, self._outside_height) for c in corners)
        x = (c1.x + c2.x) // 2
        y = (c0.y + c3.y) // 2
        height = (c0.height + c1.height + c2.height + c3.height) / 4.0 + self._random_variation()
        self._write(x, y, height)
        return GridPoint(x, y, height)

    def _random_variation(self) -> float:
        return float(self._rng.uniform(-self._variation, self._variation))

    def _write(self, x: int, y: int, height: float) -> None:
        self._grid[x, y] = height
        self._track_bounds(height)

    def _track_bounds(self, height: float) -> None:
        if height > self._max_height:
            self._max_height = height
        # The floor never drops below zero, however negative the noise gets.
        if self._min_height > 0.0 and height < self._min_height:
            self._min_height = max(height, 0.0)


def generate_heightmap(
    parameters: DiamondSquareParameters,
    *,
    rng: np.random.Generator | None = None,
) -> HeightmapResult:
    """Run a complete diamond-square generation and collect its outputs."""

    engine = DiamondSquareEngine(parameters, rng=rng).generate()
    min_height, max_height = engine.height_bounds
    return HeightmapResult(
        heights=engine.heights,
        raw_heights=engine.raw_heights,
        min_height=min_height,
        max_height=max_height,
        iterations=engine.current_iteration,
    )
