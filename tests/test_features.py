"""Tests for canonical preprocessing and the handcrafted feature extractor."""

from __future__ import annotations

import numpy as np
import pytest
from PIL import Image

from conftest import make_image
from core.errors import StructuralError
from core.extractors.features import (
    color_histogram,
    edge_strength,
    fit_dimension,
    grayscale,
    spatial_grid,
    texture_features,
    to_pixels,
)
from core.extractors.handcrafted import SimpleFeatureExtractor
from core.imaging import load_image, preprocess_image, to_rgb


def _gradient_image(width: int = 64, height: int = 48) -> Image.Image:
    xs = np.linspace(0, 255, width, dtype=np.float64)
    ys = np.linspace(0, 255, height, dtype=np.float64)
    red = np.tile(xs, (height, 1))
    green = np.tile(ys[:, None], (1, width))
    blue = (red + green) / 2
    return Image.fromarray(np.stack([red, green, blue], axis=-1).astype(np.uint8))


def test_solid_red_scenario(extractor: SimpleFeatureExtractor) -> None:
    """A 32x32 solid red image yields the documented histogram, texture, and normalized layout."""

    image = make_image((255, 0, 0), (32, 32))
    pixels = to_pixels(extractor.canonicalize(image))

    hist = color_histogram(pixels)
    assert hist[15] == pytest.approx(1.0)
    assert np.allclose(hist[:15], 0.0)
    assert hist[16] == pytest.approx(1.0)
    assert np.allclose(hist[17:32], 0.0)
    assert hist[32] == pytest.approx(1.0)
    assert np.allclose(hist[33:48], 0.0)

    contrast, energy, uniformity, edges = texture_features(pixels)
    assert contrast == pytest.approx(0.0, abs=1e-12)
    assert edges == pytest.approx(0.0, abs=1e-9)
    assert energy == pytest.approx(0.299**2, rel=1e-6)
    assert uniformity == energy

    vector = extractor.extract(image)
    raw_norm = np.sqrt(3 + 16 + 2 * (0.299**2) ** 2)
    assert vector.shape == (512,)
    assert vector[15] == pytest.approx(1.0 / raw_norm, rel=1e-5)
    assert vector[15] == pytest.approx(vector[:48].max())
    assert np.allclose(vector[100:], 0.0)
    assert np.linalg.norm(vector) == pytest.approx(1.0, abs=1e-5)


def test_histogram_top_value_lands_in_last_bin() -> None:
    pixels = np.array([[[255, 15, 16]]], dtype=np.uint8)

    hist = color_histogram(pixels, bins=16)

    assert hist[15] == 1.0
    assert hist[16 + 0] == 1.0
    assert hist[32 + 1] == 1.0
    assert hist.sum() == pytest.approx(3.0)


def test_texture_contrast_and_energy_on_tiny_image() -> None:
    """Right/below differences over the (h-1)x(w-1) region; energy over every pixel."""

    pixels = np.zeros((2, 2, 3), dtype=np.uint8)
    pixels[:, 1, :] = 255

    contrast, energy, uniformity, edges = texture_features(pixels)

    assert contrast == pytest.approx(1.0)
    assert energy == pytest.approx(0.5)
    assert uniformity == pytest.approx(0.5)
    assert edges == 0.0


def test_edge_strength_matches_sobel_response() -> None:
    gray = np.array([[0.0, 0.0, 1.0], [0.0, 0.0, 1.0], [0.0, 0.0, 1.0]])

    assert edge_strength(gray) == pytest.approx(4.0)


def test_grayscale_uses_luma_weights() -> None:
    pixels = np.array([[[255, 0, 0], [0, 255, 0], [0, 0, 255]]], dtype=np.uint8)

    assert np.allclose(grayscale(pixels)[0], [0.299, 0.587, 0.114])


def test_spatial_grid_last_cells_absorb_remainder() -> None:
    pixels = np.zeros((10, 10, 3), dtype=np.uint8)
    pixels[8:, :, 0] = 255

    grid = spatial_grid(pixels, grid_size=4).reshape(4, 4, 3)

    # Cells are 2 pixels tall; the last row spans rows 6-9, half of which are red.
    assert np.allclose(grid[3, :, 0], 0.5)
    assert np.allclose(grid[:3, :, 0], 0.0)
    assert np.allclose(grid[..., 1:], 0.0)


def test_fit_dimension_pads_and_truncates() -> None:
    parts = [np.ones(3), np.full(2, 2.0)]

    padded = fit_dimension(parts, 8)
    truncated = fit_dimension(parts, 4)

    assert padded.tolist() == [1, 1, 1, 2, 2, 0, 0, 0]
    assert truncated.tolist() == [1, 1, 1, 2]


def test_extract_has_configured_length_and_unit_norm() -> None:
    image = _gradient_image()

    for dim in (16, 100, 512, 2048):
        vector = SimpleFeatureExtractor(dim=dim).extract(image)
        assert vector.shape == (dim,)
        assert vector.dtype == np.float32
        assert np.linalg.norm(vector) == pytest.approx(1.0, abs=1e-5)


def test_extract_is_deterministic(extractor: SimpleFeatureExtractor) -> None:
    image = _gradient_image()

    first = extractor.extract(image)
    second = extractor.extract(image.copy())

    assert np.array_equal(first, second)


def test_extracted_vector_is_read_only(extractor: SimpleFeatureExtractor) -> None:
    vector = extractor.extract(make_image())

    with pytest.raises(ValueError):
        vector[0] = 1.0


def test_zero_norm_vector_is_returned_unchanged() -> None:
    zeros = np.zeros(8, dtype=np.float32)

    assert np.array_equal(SimpleFeatureExtractor._normalize(zeros), zeros)


def test_uniform_scaling_gives_same_canonical_size() -> None:
    small = _gradient_image(40, 30)
    large = _gradient_image(400, 300)
    tall = _gradient_image(30, 90)

    for image in (small, large, tall):
        canonical = preprocess_image(image, size=224, margin=50)
        assert canonical.size == (224, 224)
        assert canonical.mode == "RGB"


def test_preprocess_converts_non_rgb_modes() -> None:
    canonical = preprocess_image(Image.new("L", (50, 80), color=128), size=32, margin=4)

    assert canonical.size == (32, 32)
    assert canonical.mode == "RGB"


def test_zero_area_image_raises_structural_error(extractor: SimpleFeatureExtractor) -> None:
    with pytest.raises(StructuralError):
        extractor.extract(Image.new("RGB", (0, 0)))


def test_extract_all_reports_first_failing_index(extractor: SimpleFeatureExtractor) -> None:
    images = [make_image(), _gradient_image(), Image.new("RGB", (0, 5)), Image.new("RGB", (0, 0))]

    with pytest.raises(StructuralError) as info:
        extractor.extract_all(images)

    assert info.value.index == 2


def test_extract_all_returns_vector_per_image(extractor: SimpleFeatureExtractor) -> None:
    vectors = extractor.extract_all([make_image(), _gradient_image()])

    assert len(vectors) == 2
    assert extractor.dimension() == 512
    assert extractor.natural_dimension == 100


def test_sixteen_bit_png_is_scaled_not_clipped(tmp_path) -> None:
    target = tmp_path / "deep.png"
    Image.fromarray(np.full((32, 32), 32768, dtype=np.uint16)).save(target)

    pixels = to_pixels(load_image(target))

    assert pixels[0, 0].tolist() == [128, 128, 128]
    assert np.all(pixels == 128)


def test_sixteen_bit_levels_stay_distinguishable(tmp_path, extractor: SimpleFeatureExtractor) -> None:
    dark = tmp_path / "dark.png"
    bright = tmp_path / "bright.png"
    Image.fromarray(np.full((32, 32), 20000, dtype=np.uint16)).save(dark)
    Image.fromarray(np.full((32, 32), 60000, dtype=np.uint16)).save(bright)

    assert not np.allclose(extractor.extract(load_image(dark)), extractor.extract(load_image(bright)))


def test_to_rgb_scales_32_bit_integer_mode() -> None:
    image = Image.new("I", (4, 4), color=65535)

    rgb = to_rgb(image)

    assert rgb.mode == "RGB"
    assert rgb.getpixel((0, 0)) == (255, 255, 255)
    assert to_rgb(Image.new("I", (4, 4), color=256)).getpixel((0, 0)) == (1, 1, 1)
