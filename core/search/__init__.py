# Path: core/search/__init__.py
# Purpose: Package initializer for the single-image search path.
# Layer: core/search.
# Details: Exposes the upload/search/delete/stats service.

from .service import ImageSearchService, similarity_label

__all__ = ["ImageSearchService", "similarity_label"]
