# Path: config/settings.py
# Purpose: Provide typed application configuration models.
# Layer: config.
# Details: Centralizes settings for feature extraction, vector stores, batch ingestion, and the HTTP adapter.

from __future__ import annotations

import os
from pathlib import Path

from pydantic import BaseModel, Field


class ExtractorSettings(BaseModel):
    """Settings controlling canonical preprocessing and the handcrafted feature layout."""

    dimension: int = Field(default=512, gt=0, description="Length of every produced feature vector.")
    image_size: int = Field(default=224, ge=3, description="Edge of the square canonical image.")
    crop_margin: int = Field(default=50, ge=0, description="Extra pixels on the shorter side before center cropping.")
    grid_size: int = Field(default=4, gt=0, description="Cells per side of the spatial color grid.")
    histogram_bins: int = Field(default=16, gt=0, le=256, description="Histogram bins per color channel.")


class VectorStoreSettings(BaseModel):
    """Settings controlling vector store selection and persistence paths."""

    name: str = Field(default="memory", description="Identifier of the vector store implementation.")
    dim: int = Field(default=512, gt=0, description="Expected embedding dimensionality for the index.")
    index_path: Path = Field(default=Path("storage/indexes/image_vectors"), description="Base path of the serialized index.")
    metric_type: str = Field(default="L2", description="Distance metric reported by the store.")


class IngestSettings(BaseModel):
    """Settings for the concurrent batch ingestion pipeline."""

    batch_size: int = Field(default=50, gt=0, description="Files per batch.")
    worker_count: int = Field(default=4, gt=0, description="Number of parallel batch workers.")
    queue_capacity: int = Field(default=100, gt=0, description="Slots in the job and result queues.")
    progress_every: int = Field(default=10, gt=0, description="Batches between progress log lines.")


class ServerSettings(BaseModel):
    """Settings for the single-image upload/search path and its HTTP adapter."""

    host: str = Field(default="0.0.0.0", description="Interface the HTTP server binds to.")
    port: int = Field(default=8888, gt=0, description="Port the HTTP server listens on.")
    upload_path: Path = Field(default=Path("uploads"), description="Directory holding canonical image copies.")
    max_file_size: int = Field(default=10 * 1024 * 1024, gt=0, description="Upload size limit in bytes.")
    max_top_k: int = Field(default=100, gt=0, description="Upper bound for search result counts.")


def _env_str(key: str, default: str) -> str:
    return os.environ.get(key, default)


def _env_int(key: str, default: int) -> int:
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


class AppSettings(BaseModel):
    """Top-level application settings shared across services and interfaces."""

    extractor: ExtractorSettings = Field(default_factory=ExtractorSettings)
    vector_store: VectorStoreSettings = Field(default_factory=VectorStoreSettings)
    ingest: IngestSettings = Field(default_factory=IngestSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)
    log_level: str = Field(default="INFO", description="Verbosity level for application logs.")

    @classmethod
    def from_env(cls) -> "AppSettings":
        """Instantiate settings, overriding defaults from environment variables when present.

        Malformed integer values fall back to the defaults instead of failing startup.
        """

        defaults = cls()
        # The store dimension always follows the extractor dimension.
        dimension = _env_int("VECTOR_DIMENSION", defaults.extractor.dimension)

        return cls(
            extractor=ExtractorSettings(**{**defaults.extractor.model_dump(), "dimension": dimension}),
            vector_store=VectorStoreSettings(
                name=_env_str("VECTOR_STORE", defaults.vector_store.name),
                dim=dimension,
                index_path=Path(_env_str("VECTOR_INDEX_PATH", str(defaults.vector_store.index_path))),
                metric_type=_env_str("VECTOR_METRIC_TYPE", defaults.vector_store.metric_type),
            ),
            ingest=IngestSettings(
                batch_size=_env_int("INGEST_BATCH_SIZE", defaults.ingest.batch_size),
                worker_count=_env_int("INGEST_WORKERS", defaults.ingest.worker_count),
                queue_capacity=defaults.ingest.queue_capacity,
                progress_every=defaults.ingest.progress_every,
            ),
            server=ServerSettings(
                host=_env_str("SERVER_HOST", defaults.server.host),
                port=_env_int("SERVER_PORT", defaults.server.port),
                upload_path=Path(_env_str("UPLOAD_PATH", str(defaults.server.upload_path))),
                max_file_size=_env_int("MAX_FILE_SIZE", defaults.server.max_file_size),
                max_top_k=defaults.server.max_top_k,
            ),
            log_level=_env_str("LOG_LEVEL", defaults.log_level),
        )


__all__ = ["AppSettings", "ExtractorSettings", "IngestSettings", "ServerSettings", "VectorStoreSettings"]
