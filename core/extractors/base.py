# Path: core/extractors/base.py
# Purpose: Define the FeatureExtractor interface turning images into fixed-length vectors.
# Layer: core/extractors.
# Details: Alternative algorithms plug in behind extract()/dimension() without touching the pipeline.

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Sequence

import numpy as np
from PIL import Image

from core.errors import StructuralError


class FeatureExtractor(ABC):
    """Abstract base class for all extractors used by ingestion and search."""

    name: str
    dim: int

    @abstractmethod
    def extract(self, image: Image.Image) -> np.ndarray:
        """Return a feature vector of length :meth:`dimension` for ``image``."""

    def dimension(self) -> int:
        """Return the length of every vector produced by :meth:`extract`."""

        return self.dim

    def extract_all(self, images: Sequence[Image.Image]) -> List[np.ndarray]:
        """Extract vectors for ``images`` in order.

        Fails as a whole on the first zero-area image; the raised
        :class:`StructuralError` carries that image's 0-based ``index``.
        """

        vectors: List[np.ndarray] = []
        for index, image in enumerate(images):
            try:
                vectors.append(self.extract(image))
            except StructuralError as exc:
                raise StructuralError(f"Feature extraction failed for image {index}: {exc}", index=index) from exc
        return vectors

    @staticmethod
    def _normalize(vector: np.ndarray) -> np.ndarray:
        """Scale to unit L2 norm; a zero vector is returned unchanged."""

        norm = np.linalg.norm(vector.astype(np.float64))
        if norm == 0:
            return vector.astype(np.float32)
        return (vector / norm).astype(np.float32)
