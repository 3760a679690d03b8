# Path: core/models/domain.py
# Purpose: Define domain models shared across extraction, ingestion, and search workflows.
# Layer: core/models.
# Details: Lightweight dataclasses; feature vectors are read-only float32 numpy arrays.

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Optional, Tuple

import numpy as np


def freeze_vector(vector: np.ndarray) -> np.ndarray:
    """Return ``vector`` as a read-only float32 array so it cannot change after production."""

    frozen = np.array(vector, dtype=np.float32, copy=True)
    frozen.flags.writeable = False
    return frozen


@dataclass(frozen=True, eq=False)
class ImageRecord:
    """A stored image together with the vector inserted for it."""

    id: str
    vector: np.ndarray
    stored_path: Path
    inserted_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass(frozen=True)
class Batch:
    """Consecutive slice of discovered file paths handled by exactly one worker."""

    batch_id: str
    index: int
    paths: Tuple[Path, ...]

    def __post_init__(self) -> None:
        if not self.paths:
            raise ValueError("A batch must contain at least one path.")

    def __len__(self) -> int:
        return len(self.paths)


@dataclass(frozen=True)
class BatchResult:
    """Outcome of one batch; ``processed_count + error_count`` always equals the batch size."""

    batch_id: str
    processed_count: int
    error_count: int
    fatal_error: Optional[str] = None

    @property
    def size(self) -> int:
        return self.processed_count + self.error_count

    @property
    def succeeded(self) -> bool:
        return self.fatal_error is None


@dataclass
class AggregateStats:
    """Running totals over all batch results of a run.

    Only the collector mutates an instance; totals are complete once the
    pipeline has joined every worker.
    """

    total_processed: int = 0
    total_errors: int = 0
    batches_seen: int = 0
    failed_batches: int = 0

    def record(self, result: BatchResult) -> None:
        self.total_processed += result.processed_count
        self.total_errors += result.error_count
        self.batches_seen += 1
        if not result.succeeded:
            self.failed_batches += 1

    @property
    def total_files(self) -> int:
        return self.total_processed + self.total_errors


class PipelineState(str, Enum):
    """Lifecycle of a single ingestion run."""

    IDLE = "idle"
    DISPATCHING = "dispatching"
    DRAINING = "draining"
    DONE = "done"


@dataclass
class SearchHit:
    """Search result item combining the store distance with the resolved image file."""

    image_id: str
    distance: float
    image_path: str
    similarity: str

    @property
    def score(self) -> float:
        return self.distance


@dataclass
class ImageInfo:
    """Basic file and header metadata for an image on disk."""

    filename: str
    size: int
    width: int
    height: int
    format: Optional[str]
    path: Path
