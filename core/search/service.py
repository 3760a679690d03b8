# Path: core/search/service.py
# Purpose: Serve single-image upload, similarity search, deletion, and statistics requests.
# Layer: core/search.
# Details: Shares the extractor and vector store with batch ingestion; surfaces each failure class distinctly.

from __future__ import annotations

import time
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List

import numpy as np

from core.errors import ImageNotFoundError, InvalidRequestError, StoreError
from core.extractors.base import FeatureExtractor
from core.imaging import image_info, is_supported_image, load_image_bytes
from core.models.domain import ImageInfo, ImageRecord, SearchHit
from core.storage import ImageStorage
from core.vector_store.base import VectorStore
from utils.logging import get_logger

LOGGER = get_logger(__name__)

SERVICE_VERSION = "1.0.0"


def similarity_label(distance: float) -> str:
    """Render an L2 distance as a percentage clamped to [0, 100]; smaller distance means more similar."""

    similarity = min(max((1.0 - distance) * 100.0, 0.0), 100.0)
    return f"{similarity:.1f}%"


class ImageSearchService:
    """High-level service bridging the HTTP/CLI layers with the extractor and vector store."""

    def __init__(
        self,
        extractor: FeatureExtractor,
        vector_store: VectorStore,
        storage: ImageStorage,
        max_file_size: int = 10 * 1024 * 1024,
        max_top_k: int = 100,
    ) -> None:
        self.extractor = extractor
        self.vector_store = vector_store
        self.storage = storage
        self.max_file_size = max_file_size
        self.max_top_k = max_top_k

    def _validate_upload(self, data: bytes, filename: str) -> None:
        if not filename or not is_supported_image(filename):
            raise InvalidRequestError(f"Unsupported image format: {filename or '<missing>'}")
        if len(data) > self.max_file_size:
            raise InvalidRequestError(
                f"File exceeds size limit ({self.max_file_size // (1024 * 1024)} MB)."
            )

    def _vector_for(self, data: bytes, filename: str) -> np.ndarray:
        image = load_image_bytes(data, label=filename)
        return self.extractor.extract(image)

    def upload(self, data: bytes, filename: str) -> ImageRecord:
        """
        Store an uploaded image and insert its feature vector.

        External calls:
        - core/extractors/base.py::FeatureExtractor.extract - build the vector (StructuralError on zero area).
        - core/vector_store/base.py::VectorStore.insert - StoreError propagates after the stored copy is removed.

        Raises:
            InvalidRequestError: unsupported extension or oversized payload.
            DecodeError: the payload is not a decodable image.
        """

        self._validate_upload(data, filename)
        vector = self._vector_for(data, filename)

        image_id = str(uuid.uuid4())
        stored_path = self.storage.store_raw(data, image_id, Path(filename).suffix)
        inserted_at = datetime.now(timezone.utc)
        try:
            self.vector_store.insert(
                [image_id],
                vector.reshape(1, -1),
                [{"path": str(stored_path), "source": filename, "inserted_at": inserted_at.isoformat()}],
            )
        except StoreError:
            stored_path.unlink(missing_ok=True)
            raise

        LOGGER.info("image_uploaded", extra={"image_id": image_id, "stored_path": str(stored_path)})
        return ImageRecord(id=image_id, vector=vector, stored_path=stored_path, inserted_at=inserted_at)

    def search(self, data: bytes, filename: str, top_k: int = 10) -> List[SearchHit]:
        """
        Return the ``top_k`` stored images nearest to the uploaded query image.

        External calls:
        - core/vector_store/base.py::VectorStore.search - retrieves nearest ids and distances.
        - core/storage.py::ImageStorage.public_name - resolves the stored file for each hit.
        """

        if top_k <= 0 or top_k > self.max_top_k:
            raise InvalidRequestError(f"Invalid top_k parameter (1-{self.max_top_k}).")
        self._validate_upload(data, filename)

        query = self._vector_for(data, filename)
        raw_results = self.vector_store.search(query, k=top_k)
        hits = [
            SearchHit(
                image_id=image_id,
                distance=distance,
                image_path=self.storage.public_name(image_id),
                similarity=similarity_label(distance),
            )
            for image_id, distance in raw_results
        ]
        LOGGER.info("search_completed", extra={"top_k": top_k, "hits": len(hits)})
        return hits

    def delete(self, image_id: str) -> None:
        """Delete the vector stored for ``image_id`` and its stored copy."""

        if not image_id or not image_id.strip():
            raise InvalidRequestError("Image id must not be empty.")
        self.vector_store.delete(image_id)
        removed = self.storage.remove(image_id)
        LOGGER.info("image_deleted", extra={"image_id": image_id, "file_removed": removed})

    def info(self, image_id: str) -> ImageInfo:
        """Return file and header metadata of the stored copy of ``image_id``.

        Raises:
            ImageNotFoundError: nothing is stored under ``image_id``.
            DecodeError: the stored file is not a readable image.
        """

        valid = bool(image_id and image_id.strip()) and Path(image_id).name == image_id
        stored = self.storage.find(image_id) if valid else None
        if stored is None:
            raise ImageNotFoundError(f"No stored image for id {image_id!r}.")
        return image_info(stored)

    def stats(self) -> Dict[str, Any]:
        """Return vector store statistics alongside server information."""

        return {
            "collection_info": self.vector_store.stats(),
            "server_info": {
                "version": SERVICE_VERSION,
                "feature_dim": self.extractor.dimension(),
                "upload_path": str(self.storage.root),
                "max_file_size": self.max_file_size,
                "timestamp": int(time.time()),
            },
        }

    def health(self) -> Dict[str, Any]:
        """Probe the vector store; a StoreError means the backend is unavailable."""

        self.vector_store.stats()
        return {"status": "ok", "timestamp": int(time.time())}
