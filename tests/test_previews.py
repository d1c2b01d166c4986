from __future__ import annotations

from PIL import Image
import numpy as np
import pytest

from heightmap.config import DiamondSquareParameters
from heightmap.derive import colormap_rgb, height_preview_u16, height_preview_u8, upscale_nearest
from heightmap.diamond_square import generate_heightmap
from heightmap.io import write_png_rgb, write_png_u16, write_png_u8
from heightmap.rng import engine_generator


def _small_heights(height_scaling: float = 1.0) -> np.ndarray:
    params = DiamondSquareParameters(iteration_count=5, variation=1.0, height_scaling=height_scaling)
    return generate_heightmap(params, rng=engine_generator(3)).heights


def test_preview_encodings_cover_range() -> None:
    heights = _small_heights(height_scaling=40.0)

    u16 = height_preview_u16(heights, height_scaling=40.0)
    u8 = height_preview_u8(heights, height_scaling=40.0)

    assert u16.dtype == np.uint16
    assert u8.dtype == np.uint8
    peak = np.unravel_index(np.argmax(heights), heights.shape)
    assert u16[peak] == u16.max() > 0
    assert u8[peak] == u8.max() > 0
    assert int(u16.min()) == 0


def test_png_writers_round_trip_size(tmp_path) -> None:
    heights = _small_heights()

    write_png_u16(tmp_path / "h16.png", height_preview_u16(heights))
    write_png_u8(tmp_path / "h8.png", height_preview_u8(heights))
    write_png_rgb(tmp_path / "rgb.png", colormap_rgb(heights))

    with Image.open(tmp_path / "h16.png") as image:
        assert image.mode in {"I", "I;16"}
        assert image.size == (33, 33)
    with Image.open(tmp_path / "h8.png") as image:
        assert image.mode == "L"
    with Image.open(tmp_path / "rgb.png") as image:
        assert image.mode == "RGB"
        assert image.size == (33, 33)


def test_upscale_nearest_repeats_cells() -> None:
    raster = np.array([[1, 2], [3, 4]], dtype=np.uint8)
    out = upscale_nearest(raster, 4)

    assert out.shape == (4, 4)
    assert np.array_equal(out[:2, :2], np.ones((2, 2)))
    assert np.array_equal(out[2:, 2:], np.full((2, 2), 4))

    with pytest.raises(ValueError):
        upscale_nearest(raster, 1)
