# Path: core/extractors/handcrafted.py
# Purpose: Provide the default handcrafted color/texture/spatial feature extractor.
# Layer: core/extractors.
# Details: Preprocesses to a canonical square, concatenates the sub-features, pads to the configured dimension, and L2-normalizes.

from __future__ import annotations

import numpy as np
from PIL import Image

from core.imaging import preprocess_image
from core.models.domain import freeze_vector
from .base import FeatureExtractor
from .features import TEXTURE_FEATURES, color_histogram, fit_dimension, spatial_grid, texture_features, to_pixels


class SimpleFeatureExtractor(FeatureExtractor):
    """Deterministic extractor built from color histograms, texture statistics, and a color grid.

    With default settings the natural feature count is 100 (48 + 4 + 48); the
    remaining components up to ``dim`` are structural zeros reserved for
    future sub-features.
    """

    def __init__(
        self,
        dim: int = 512,
        image_size: int = 224,
        crop_margin: int = 50,
        grid_size: int = 4,
        histogram_bins: int = 16,
    ) -> None:
        if dim <= 0:
            raise ValueError("Feature dimension must be positive.")
        self.dim = dim
        self.image_size = image_size
        self.crop_margin = crop_margin
        self.grid_size = grid_size
        self.histogram_bins = histogram_bins
        self.name = "simple"

    @classmethod
    def from_settings(cls, settings) -> "SimpleFeatureExtractor":
        """Build an extractor from :class:`config.settings.ExtractorSettings`."""

        return cls(
            dim=settings.dimension,
            image_size=settings.image_size,
            crop_margin=settings.crop_margin,
            grid_size=settings.grid_size,
            histogram_bins=settings.histogram_bins,
        )

    @property
    def natural_dimension(self) -> int:
        """Number of components produced before padding or truncation."""

        return 3 * self.histogram_bins + TEXTURE_FEATURES + 3 * self.grid_size * self.grid_size

    def canonicalize(self, image: Image.Image) -> Image.Image:
        """Return the canonical square every sub-feature operates on."""

        return preprocess_image(image, size=self.image_size, margin=self.crop_margin)

    def extract(self, image: Image.Image) -> np.ndarray:
        """Return the normalized feature vector of ``image``.

        Raises:
            StructuralError: the image has zero area.
        """

        pixels = to_pixels(self.canonicalize(image))
        combined = fit_dimension(
            [
                color_histogram(pixels, self.histogram_bins),
                texture_features(pixels),
                spatial_grid(pixels, self.grid_size),
            ],
            self.dim,
        )
        return freeze_vector(self._normalize(combined))
