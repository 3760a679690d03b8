# Path: scripts/index_images.py
# Purpose: CLI tool to ingest an image dataset into the vector store.
# Layer: scripts.
# Details: Discovers images, runs the concurrent batch pipeline, and saves the reference index.

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path

# Ensure project root is on sys.path when running as a script.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from pydantic import ValidationError

from config import AppSettings, IngestSettings
from core.errors import TraversalError
from core.factory import build_index_builder, build_vector_store
from utils.logging import configure_logging, get_logger

LOGGER = get_logger("scripts.index_images")


def main() -> int:
    """Run batch ingestion over a dataset folder."""

    parser = argparse.ArgumentParser(description="Batch-insert an image dataset into the vector store")
    parser.add_argument("--dataset", type=Path, required=True, help="Folder containing images to ingest")
    parser.add_argument("--batch", type=int, default=None, help="Number of files per batch")
    parser.add_argument("--workers", type=int, default=None, help="Number of concurrent batch workers")
    args = parser.parse_args()

    settings = AppSettings.from_env()
    overrides = {}
    if args.batch is not None:
        overrides["batch_size"] = args.batch
    if args.workers is not None:
        overrides["worker_count"] = args.workers
    if overrides:
        try:
            ingest = IngestSettings(**{**settings.ingest.model_dump(), **overrides})
        except ValidationError:
            parser.error("--batch and --workers must be positive integers")
        settings = settings.model_copy(update={"ingest": ingest})

    configure_logging(settings.log_level)

    if not args.dataset.exists():
        LOGGER.error("dataset_missing", extra={"dataset": str(args.dataset)})
        return 1

    vector_store = build_vector_store(settings)
    builder = build_index_builder(settings, vector_store)

    started = time.perf_counter()
    try:
        stats = builder.ingest_directory(args.dataset)
    except TraversalError as exc:
        LOGGER.error("dataset_traversal_failed", extra={"dataset": str(args.dataset), "error": str(exc)})
        return 1
    elapsed = time.perf_counter() - started

    vector_store.save(str(settings.vector_store.index_path))
    LOGGER.info(
        "dataset_ingested",
        extra={
            "files": stats.total_files,
            "processed": stats.total_processed,
            "errors": stats.total_errors,
            "seconds": round(elapsed, 2),
            "index_path": str(settings.vector_store.index_path),
        },
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
