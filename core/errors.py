# Path: core/errors.py
# Purpose: Define the exception taxonomy shared by extraction, ingestion, and search.
# Layer: core.
# Details: Item-level errors are recovered by the pipeline, traversal errors abort a run.

from __future__ import annotations

from pathlib import Path
from typing import Optional


class ImageSearchError(Exception):
    """Base class for all domain errors raised by the core."""


class StructuralError(ImageSearchError):
    """Raised when an image cannot be processed because it has zero area.

    ``index`` is set by batch extraction to the 0-based position of the offending image.
    """

    def __init__(self, message: str, index: Optional[int] = None) -> None:
        super().__init__(message)
        self.index = index


class DecodeError(ImageSearchError):
    """Raised when a file cannot be opened or decoded as an image."""

    def __init__(self, message: str, path: Optional[Path] = None) -> None:
        super().__init__(message)
        self.path = path


class StoreError(ImageSearchError):
    """Raised when a vector store call fails or receives invalid arguments."""


class TraversalError(ImageSearchError):
    """Raised when directory discovery cannot read part of the tree."""

    def __init__(self, message: str, path: Optional[Path] = None) -> None:
        super().__init__(message)
        self.path = path


class InvalidRequestError(ImageSearchError):
    """Raised by the single-image path for bad caller input (format, size, top_k)."""


class ImageNotFoundError(ImageSearchError):
    """Raised when no stored copy exists for a requested image id."""


__all__ = [
    "ImageSearchError",
    "StructuralError",
    "DecodeError",
    "StoreError",
    "TraversalError",
    "InvalidRequestError",
    "ImageNotFoundError",
]
