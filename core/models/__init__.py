# Path: core/models/__init__.py
# Purpose: Package initializer for domain model definitions.
# Layer: core/models.
# Details: Exposes dataclasses used across extraction, ingestion, and search layers.

from .domain import (
    AggregateStats,
    Batch,
    BatchResult,
    ImageInfo,
    ImageRecord,
    PipelineState,
    SearchHit,
    freeze_vector,
)

__all__ = [
    "AggregateStats",
    "Batch",
    "BatchResult",
    "ImageInfo",
    "ImageRecord",
    "PipelineState",
    "SearchHit",
    "freeze_vector",
]
