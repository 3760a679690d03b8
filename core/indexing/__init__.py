# Path: core/indexing/__init__.py
# Purpose: Package initializer for indexing utilities.
# Layer: core/indexing.
# Details: Exposes discovery, batch partitioning, and the concurrent index builder.

from .scanner import ImageScanner, discover
from .index_builder import IndexBuilder, partition

__all__ = ["ImageScanner", "IndexBuilder", "discover", "partition"]
