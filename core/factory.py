# Path: core/factory.py
# Purpose: Wire extractors, vector stores, storage, and services from AppSettings.
# Layer: core.
# Details: Shared by the CLI scripts and the HTTP adapter so both paths use identical components.

from __future__ import annotations

from config import AppSettings
from core.extractors.handcrafted import SimpleFeatureExtractor
from core.indexing.index_builder import IndexBuilder
from core.search.service import ImageSearchService
from core.storage import ImageStorage
from core.vector_store.base import VectorStore
from core.vector_store.memory_store import InMemoryVectorStore
from utils.logging import get_logger

LOGGER = get_logger(__name__)


def build_vector_store(settings: AppSettings, load_existing: bool = True) -> VectorStore:
    """Create the configured store, restoring the saved snapshot when one exists."""

    store_settings = settings.vector_store
    if store_settings.name != "memory":
        raise ValueError(f"Unknown vector store: {store_settings.name}")

    store = InMemoryVectorStore(dim=store_settings.dim, metric_type=store_settings.metric_type)
    if load_existing:
        try:
            store.load(str(store_settings.index_path))
        except FileNotFoundError:
            LOGGER.info("vector_store_snapshot_missing", extra={"index_path": str(store_settings.index_path)})
        else:
            LOGGER.info("vector_store_loaded", extra={"index_path": str(store_settings.index_path), "rows": len(store)})
    return store


def build_index_builder(settings: AppSettings, vector_store: VectorStore, show_progress: bool = True) -> IndexBuilder:
    return IndexBuilder(
        extractor=SimpleFeatureExtractor.from_settings(settings.extractor),
        vector_store=vector_store,
        storage=ImageStorage(settings.server.upload_path),
        batch_size=settings.ingest.batch_size,
        worker_count=settings.ingest.worker_count,
        queue_capacity=settings.ingest.queue_capacity,
        progress_every=settings.ingest.progress_every,
        show_progress=show_progress,
    )


def build_search_service(settings: AppSettings, vector_store: VectorStore) -> ImageSearchService:
    storage = ImageStorage(settings.server.upload_path)
    storage.ensure_root()
    return ImageSearchService(
        extractor=SimpleFeatureExtractor.from_settings(settings.extractor),
        vector_store=vector_store,
        storage=storage,
        max_file_size=settings.server.max_file_size,
        max_top_k=settings.server.max_top_k,
    )
