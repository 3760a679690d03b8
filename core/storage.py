# Path: core/storage.py
# Purpose: Manage the directory of canonical image copies keyed by image id.
# Layer: core.
# Details: Copies are decoded-then-re-encoded so stored files share a small set of formats.

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

from PIL import Image

from core.imaging import canonical_extension, save_image

LOOKUP_EXTENSIONS = (".jpg", ".jpeg", ".png", ".bmp", ".tiff", ".tif", ".gif")


class ImageStorage:
    """Filesystem store for canonical copies, one file per image id."""

    def __init__(self, root: Union[str, Path]) -> None:
        self.root = Path(root)

    def ensure_root(self) -> Path:
        self.root.mkdir(parents=True, exist_ok=True)
        return self.root

    def path_for(self, image_id: str, source: Union[str, Path]) -> Path:
        """Return where the copy of ``source`` stored under ``image_id`` lives."""

        return self.root / f"{image_id}{canonical_extension(source)}"

    def store(self, image: Image.Image, image_id: str, source: Union[str, Path]) -> Path:
        """Encode ``image`` under ``image_id``, keeping the source format when it is encodable.

        Raises:
            OSError: the file could not be written.
        """

        return save_image(image, self.path_for(image_id, source))

    def store_raw(self, data: bytes, image_id: str, extension: str) -> Path:
        """Write an already-validated upload payload verbatim as ``<image_id><extension>``."""

        target = self.ensure_root() / f"{image_id}{extension.lower()}"
        target.write_bytes(data)
        return target

    def find(self, image_id: str) -> Optional[Path]:
        """Probe known extensions for the stored copy of ``image_id``."""

        for ext in LOOKUP_EXTENSIONS:
            candidate = self.root / f"{image_id}{ext}"
            if candidate.exists():
                return candidate
        return None

    def public_name(self, image_id: str) -> str:
        """File name of the stored copy relative to the storage root, defaulting to ``<id>.jpg``."""

        found = self.find(image_id)
        return found.name if found is not None else f"{image_id}.jpg"

    def remove(self, image_id: str) -> bool:
        """Delete the stored copy of ``image_id`` if present."""

        found = self.find(image_id)
        if found is None:
            return False
        found.unlink()
        return True
