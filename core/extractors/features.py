# Path: core/extractors/features.py
# Purpose: Pure handcrafted feature functions over a canonical RGB pixel array.
# Layer: core/extractors.
# Details: Color histogram, texture/edge statistics, and a spatial color grid, each deterministic.

from __future__ import annotations

from typing import Sequence

import numpy as np
from PIL import Image

from core.errors import StructuralError
from core.imaging import to_rgb

LUMA_WEIGHTS = np.array([0.299, 0.587, 0.114], dtype=np.float64)
SOBEL_X = np.array([[-1, 0, 1], [-2, 0, 2], [-1, 0, 1]], dtype=np.float64)
SOBEL_Y = np.array([[-1, -2, -1], [0, 0, 0], [1, 2, 1]], dtype=np.float64)
TEXTURE_FEATURES = 4


def to_pixels(image: Image.Image) -> np.ndarray:
    """Return the image as a ``(height, width, 3)`` uint8 array."""

    rgb = to_rgb(image)
    pixels = np.asarray(rgb, dtype=np.uint8)
    if pixels.ndim != 3 or pixels.shape[0] == 0 or pixels.shape[1] == 0:
        raise StructuralError(f"Image has zero area ({rgb.width}x{rgb.height}).")
    return pixels


def color_histogram(pixels: np.ndarray, bins: int = 16) -> np.ndarray:
    """Per-channel histograms of equal-width bins, normalized by pixel count.

    Output is ``bins`` values for R, then G, then B. Value 255 always lands in
    the last bin.
    """

    total = pixels.shape[0] * pixels.shape[1]
    binned = np.minimum(pixels.astype(np.int64) * bins // 256, bins - 1)
    channels = [np.bincount(binned[..., channel].ravel(), minlength=bins) / total for channel in range(3)]
    return np.concatenate(channels)


def grayscale(pixels: np.ndarray) -> np.ndarray:
    """Luma-weighted grayscale scaled to [0, 1]."""

    return (pixels.astype(np.float64) @ LUMA_WEIGHTS) / 255.0


def _correlate3x3(gray: np.ndarray, kernel: np.ndarray) -> np.ndarray:
    height, width = gray.shape
    response = np.zeros((height - 2, width - 2), dtype=np.float64)
    for ky in range(3):
        for kx in range(3):
            weight = kernel[ky, kx]
            if weight:
                response += weight * gray[ky : ky + height - 2, kx : kx + width - 2]
    return response


def edge_strength(gray: np.ndarray) -> float:
    """Mean Sobel gradient magnitude over interior pixels."""

    height, width = gray.shape
    if height < 3 or width < 3:
        return 0.0
    gx = _correlate3x3(gray, SOBEL_X)
    gy = _correlate3x3(gray, SOBEL_Y)
    return float(np.mean(np.hypot(gx, gy)))


def texture_features(pixels: np.ndarray) -> np.ndarray:
    """Return ``[contrast, energy, uniformity, edge_strength]``.

    Contrast sums squared right and below neighbour differences over the
    top-left ``(h-1) x (w-1)`` region and divides by its pixel count.
    Uniformity is the same value as energy; it is kept as its own slot in the
    layout.
    """

    gray = grayscale(pixels)
    height, width = gray.shape

    contrast = 0.0
    if height >= 2 and width >= 2:
        region = gray[:-1, :-1]
        horizontal = region - gray[:-1, 1:]
        vertical = region - gray[1:, :-1]
        contrast = float((np.sum(horizontal**2) + np.sum(vertical**2)) / ((width - 1) * (height - 1)))

    energy = float(np.mean(gray**2))
    uniformity = energy
    return np.array([contrast, energy, uniformity, edge_strength(gray)], dtype=np.float64)


def spatial_grid(pixels: np.ndarray, grid_size: int = 4) -> np.ndarray:
    """Mean color of each cell of a ``grid_size`` x ``grid_size`` partition, row-major.

    The last row and column of cells absorb the remainder of the integer division.
    """

    height, width = pixels.shape[:2]
    cell_height = height // grid_size
    cell_width = width // grid_size
    features = np.zeros(grid_size * grid_size * 3, dtype=np.float64)

    for gy in range(grid_size):
        y0 = gy * cell_height
        y1 = height if gy == grid_size - 1 else y0 + cell_height
        for gx in range(grid_size):
            x0 = gx * cell_width
            x1 = width if gx == grid_size - 1 else x0 + cell_width
            cell = pixels[y0:y1, x0:x1]
            if cell.size == 0:
                continue
            idx = (gy * grid_size + gx) * 3
            features[idx : idx + 3] = cell.reshape(-1, 3).mean(axis=0) / 255.0
    return features


def fit_dimension(parts: Sequence[np.ndarray], dimension: int) -> np.ndarray:
    """Concatenate ``parts`` and zero-pad or truncate the result to ``dimension``."""

    combined = np.concatenate([np.asarray(part, dtype=np.float64) for part in parts])
    if combined.size >= dimension:
        return combined[:dimension]
    return np.pad(combined, (0, dimension - combined.size))


__all__ = [
    "color_histogram",
    "edge_strength",
    "fit_dimension",
    "grayscale",
    "spatial_grid",
    "texture_features",
    "to_pixels",
]
