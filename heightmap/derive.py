"""Preview encodings of normalized heightmaps."""

from __future__ import annotations

import matplotlib
import numpy as np


def _unit_interval(heights: np.ndarray, height_scaling: float) -> np.ndarray:
    if heights.ndim != 2:
        raise ValueError("heights must be a 2D array")
    if height_scaling <= 0:
        return np.zeros(heights.shape, dtype=np.float64)
    return np.clip(heights.astype(np.float64) / float(height_scaling), 0.0, 1.0)


def height_preview_u16(heights: np.ndarray, *, height_scaling: float = 1.0) -> np.ndarray:
    """Map heights in [0, height_scaling] to 16-bit grayscale."""

    return np.round(_unit_interval(heights, height_scaling) * 65535.0).astype(np.uint16)


def height_preview_u8(heights: np.ndarray, *, height_scaling: float = 1.0) -> np.ndarray:
    """Map heights in [0, height_scaling] to 8-bit grayscale."""

    return np.round(_unit_interval(heights, height_scaling) * 255.0).astype(np.uint8)


def colormap_rgb(heights: np.ndarray, *, height_scaling: float = 1.0, colormap: str = "terrain") -> np.ndarray:
    """Colour heights with a named matplotlib colormap."""

    cmap = matplotlib.colormaps[colormap]
    rgba = cmap(_unit_interval(heights, height_scaling))
    return np.round(rgba[..., :3] * 255.0).astype(np.uint8)


def upscale_nearest(raster: np.ndarray, size: int) -> np.ndarray:
    """Nearest-neighbour upscale of a square raster to `size` pixels per side.

    Intermediate snapshots are much smaller than the final grid; this keeps
    every snapshot image the same size.
    """

    if raster.ndim != 2 or raster.shape[0] != raster.shape[1]:
        raise ValueError("raster must be a square 2D array")
    if size < raster.shape[0]:
        raise ValueError("size must not be smaller than the raster")
    idx = (np.arange(size) * raster.shape[0]) // size
    return raster[idx[:, None], idx[None, :]]
