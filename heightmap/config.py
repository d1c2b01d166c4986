"""Configuration models for diamond-square generation."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
import math
import numbers
from typing import Any


DEFAULT_ITERATIONS = 7
DEFAULT_SEEDS = (0.0, 0.0, 0.0, 0.0)
DEFAULT_VARIATION = 1.0
DEFAULT_SMOOTHNESS = 1.0
DEFAULT_OUTSIDE_HEIGHT = 0.0
DEFAULT_HEIGHT_SCALING = 1.0

SEED_COUNT = 4


class ParameterError(ValueError):
    """Raised when a parameter record cannot drive a generation run."""


@dataclass(frozen=True)
class DiamondSquareParameters:
    """Inputs of one diamond-square run.

    Seeds are the initial corner elevations in grid index order:
    (0, 0), (0, res - 1), (res - 1, 0), (res - 1, res - 1).
    """

    iteration_count: int = DEFAULT_ITERATIONS
    seeds: tuple[float, ...] = DEFAULT_SEEDS
    variation: float = DEFAULT_VARIATION
    smoothness: float = DEFAULT_SMOOTHNESS
    outside_height: float = DEFAULT_OUTSIDE_HEIGHT
    height_scaling: float = DEFAULT_HEIGHT_SCALING

    @property
    def resolution(self) -> int:
        return 2**self.iteration_count + 1

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["seeds"] = [float(s) for s in self.seeds]
        return payload


@dataclass(frozen=True)
class RenderConfig:
    """Preview rendering configuration for exported heightmaps."""

    colormap: str = "terrain"


@dataclass(frozen=True)
class GeneratorConfig:
    """Primary generation configuration."""

    parameters: DiamondSquareParameters = field(default_factory=DiamondSquareParameters)
    render: RenderConfig = field(default_factory=RenderConfig)

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["parameters"] = self.parameters.to_dict()
        return payload


def validate_parameters(parameters: DiamondSquareParameters) -> None:
    """Raise ParameterError if `parameters` is malformed."""

    count = parameters.iteration_count
    if isinstance(count, bool) or not isinstance(count, numbers.Integral):
        raise ParameterError(f"iteration_count must be an integer, got {count!r}")
    if count < 0:
        raise ParameterError(f"iteration_count must be >= 0, got {count}")

    try:
        seeds = tuple(parameters.seeds)
    except TypeError as exc:
        raise ParameterError(f"seeds must be a sequence, got {parameters.seeds!r}") from exc
    if len(seeds) != SEED_COUNT:
        raise ParameterError(f"expected exactly {SEED_COUNT} seeds, got {len(seeds)}")

    numeric = {
        "variation": parameters.variation,
        "smoothness": parameters.smoothness,
        "outside_height": parameters.outside_height,
        "height_scaling": parameters.height_scaling,
    }
    for index, seed in enumerate(seeds):
        numeric[f"seeds[{index}]"] = seed
    for name, value in numeric.items():
        try:
            number = float(value)
        except (TypeError, ValueError) as exc:
            raise ParameterError(f"{name} must be a number, got {value!r}") from exc
        if not math.isfinite(number):
            raise ParameterError(f"{name} must be finite, got {value!r}")
