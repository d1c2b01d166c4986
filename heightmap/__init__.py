"""Diamond-square heightmap generation package."""

from .config import DEFAULT_ITERATIONS, DiamondSquareParameters, GeneratorConfig, ParameterError
from .diamond_square import DiamondSquareEngine, HeightmapResult, generate_heightmap

__all__ = [
    "DEFAULT_ITERATIONS",
    "DiamondSquareEngine",
    "DiamondSquareParameters",
    "GeneratorConfig",
    "HeightmapResult",
    "ParameterError",
    "generate_heightmap",
]
