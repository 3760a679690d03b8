# Path: core/indexing/scanner.py
# Purpose: Discover image files under a root directory for batch ingestion.
# Layer: core/indexing.
# Details: Deterministic lexical walk; any unreadable directory aborts the whole discovery.

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Union

from core.errors import TraversalError
from core.imaging import SUPPORTED_EXTENSIONS
from utils.logging import get_logger

LOGGER = get_logger(__name__)


class ImageScanner:
    """Scan filesystem paths for supported image files."""

    def __init__(self, root: Union[str, Path], extensions: Optional[Iterable[str]] = None) -> None:
        self.root = Path(root)
        self.extensions = frozenset(ext.lower() for ext in (extensions or SUPPORTED_EXTENSIONS))

    def discover(self) -> List[Path]:
        """Return every matching file under the root in walk order.

        Raises:
            TraversalError: the root or any directory below it cannot be read.
        """

        if not self.root.is_dir():
            raise TraversalError(f"Dataset root is not a readable directory: {self.root}", path=self.root)

        paths = list(self._iter_image_files())
        LOGGER.info("discovery_complete", extra={"root": str(self.root), "file_count": len(paths)})
        return paths

    def _iter_image_files(self) -> Iterator[Path]:
        """Yield matching files, visiting directories and files in sorted name order."""

        def _raise(error: OSError) -> None:
            failed = Path(error.filename) if error.filename else self.root
            raise TraversalError(f"Cannot read directory {failed}: {error.strerror or error}", path=failed) from error

        for dirpath, dirnames, filenames in os.walk(self.root, onerror=_raise):
            dirnames.sort()
            for name in sorted(filenames):
                if Path(name).suffix.lower() in self.extensions:
                    yield Path(dirpath) / name


def discover(root: Union[str, Path]) -> List[Path]:
    """Shortcut for ``ImageScanner(root).discover()``."""

    return ImageScanner(root).discover()
