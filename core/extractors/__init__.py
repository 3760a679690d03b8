# Path: core/extractors/__init__.py
# Purpose: Package initializer for feature extractor implementations and interfaces.
# Layer: core/extractors.
# Details: Exposes the base interface and the handcrafted reference extractor.

from .base import FeatureExtractor
from .handcrafted import SimpleFeatureExtractor

__all__ = ["FeatureExtractor", "SimpleFeatureExtractor"]
