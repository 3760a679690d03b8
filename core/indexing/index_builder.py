# Path: core/indexing/index_builder.py
# Purpose: Ingest large image sets into the vector store through a bounded worker pool.
# Layer: core/indexing.
# Details: Dispatcher -> job queue -> N workers -> result queue -> single collector, with backpressure on both queues.

from __future__ import annotations

import queue
import threading
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np
from tqdm import tqdm

from core.errors import DecodeError, StoreError, StructuralError
from core.extractors.base import FeatureExtractor
from core.imaging import load_image
from core.indexing.scanner import ImageScanner
from core.models.domain import AggregateStats, Batch, BatchResult, PipelineState
from core.storage import ImageStorage
from core.vector_store.base import VectorStore
from utils.logging import get_logger

LOGGER = get_logger(__name__)

_CLOSED = object()


def new_batch_id() -> str:
    return uuid.uuid4().hex[:8]


def partition(paths: Sequence[Path], batch_size: int) -> List[Batch]:
    """Split ``paths`` into consecutive batches of ``batch_size`` (the last may be shorter).

    Batch ``i`` always holds ``paths[i * batch_size:(i + 1) * batch_size]``.
    """

    if batch_size <= 0:
        raise ValueError(f"batch_size must be positive, got {batch_size}.")
    return [
        Batch(batch_id=new_batch_id(), index=i // batch_size, paths=tuple(paths[i : i + batch_size]))
        for i in range(0, len(paths), batch_size)
    ]


class IndexBuilder:
    """Batch process images to populate the configured vector store.

    A run moves through ``IDLE -> DISPATCHING -> DRAINING -> DONE``. The calling
    thread dispatches batches, ``worker_count`` threads process them, and one
    collector thread is the only writer of the run's :class:`AggregateStats`.
    """

    def __init__(
        self,
        extractor: FeatureExtractor,
        vector_store: VectorStore,
        storage: ImageStorage,
        batch_size: int = 50,
        worker_count: int = 4,
        queue_capacity: int = 100,
        progress_every: int = 10,
        show_progress: bool = False,
    ) -> None:
        if batch_size <= 0 or worker_count <= 0 or queue_capacity <= 0 or progress_every <= 0:
            raise ValueError("batch_size, worker_count, queue_capacity and progress_every must be positive.")
        self.extractor = extractor
        self.vector_store = vector_store
        self.storage = storage
        self.batch_size = batch_size
        self.worker_count = worker_count
        self.queue_capacity = queue_capacity
        self.progress_every = progress_every
        self.show_progress = show_progress
        self.state = PipelineState.IDLE

    def ingest_directory(self, root: Union[str, Path], cancel_event: Optional[threading.Event] = None) -> AggregateStats:
        """
        Discover every supported image below ``root`` and ingest it.

        External calls:
        - core/indexing/scanner.py::ImageScanner.discover - TraversalError aborts the run before any dispatch.
        """

        paths = ImageScanner(root).discover()
        return self.ingest(paths, cancel_event=cancel_event)

    def ingest(self, paths: Sequence[Path], cancel_event: Optional[threading.Event] = None) -> AggregateStats:
        """Run the worker pool over ``paths`` and return the final totals.

        Totals are only returned after every worker and the collector have
        finished. When ``cancel_event`` is set, no further batches are
        dispatched; batches already queued still drain.
        """

        batches = partition(list(paths), self.batch_size)
        stats = AggregateStats()
        jobs: "queue.Queue[object]" = queue.Queue(maxsize=self.queue_capacity)
        results: "queue.Queue[object]" = queue.Queue(maxsize=self.queue_capacity)

        LOGGER.info(
            "ingest_started",
            extra={"file_count": len(paths), "batch_count": len(batches), "workers": self.worker_count},
        )

        progress = tqdm(total=len(paths), desc="Indexing images", unit="img", disable=not self.show_progress)
        collector = threading.Thread(target=self._collect, args=(results, stats, progress), name="ingest-collector")
        workers = [
            threading.Thread(target=self._work, args=(jobs, results), name=f"ingest-worker-{n}")
            for n in range(self.worker_count)
        ]
        collector.start()
        for worker in workers:
            worker.start()

        self.state = PipelineState.DISPATCHING
        try:
            for batch in batches:
                if cancel_event is not None and cancel_event.is_set():
                    LOGGER.warning("ingest_cancelled", extra={"next_batch_index": batch.index})
                    break
                jobs.put(batch)
                LOGGER.debug(
                    "batch_dispatched",
                    extra={"batch_id": batch.batch_id, "batch_index": batch.index + 1, "batch_total": len(batches)},
                )
        finally:
            # Close the job channel: one marker per worker.
            for _ in workers:
                jobs.put(_CLOSED)
            self.state = PipelineState.DRAINING
            for worker in workers:
                worker.join()
            results.put(_CLOSED)
            collector.join()
            progress.close()
            self.state = PipelineState.DONE

        LOGGER.info(
            "ingest_finished",
            extra={
                "file_count": len(paths),
                "processed": stats.total_processed,
                "errors": stats.total_errors,
                "batches": stats.batches_seen,
                "failed_batches": stats.failed_batches,
            },
        )
        return stats

    def _work(self, jobs: "queue.Queue[object]", results: "queue.Queue[object]") -> None:
        while True:
            batch = jobs.get()
            if batch is _CLOSED:
                return
            try:
                result = self.process_batch(batch)
            except Exception as exc:  # noqa: BLE001 - reported as a failed batch so the run keeps draining
                LOGGER.exception("batch_crashed", extra={"batch_id": batch.batch_id})
                result = BatchResult(
                    batch_id=batch.batch_id,
                    processed_count=0,
                    error_count=len(batch),
                    fatal_error=f"{type(exc).__name__}: {exc}",
                )
            results.put(result)

    def _collect(self, results: "queue.Queue[object]", stats: AggregateStats, progress: tqdm) -> None:
        while True:
            result = results.get()
            if result is _CLOSED:
                return
            stats.record(result)
            progress.update(result.size)

            if result.fatal_error is not None:
                LOGGER.error("batch_failed", extra={"batch_id": result.batch_id, "error": result.fatal_error})

            if stats.batches_seen % self.progress_every == 0:
                LOGGER.info(
                    "ingest_progress",
                    extra={
                        "files_done": stats.total_files,
                        "processed": stats.total_processed,
                        "errors": stats.total_errors,
                        "batches": stats.batches_seen,
                    },
                )

    def process_batch(self, batch: Batch) -> BatchResult:
        """
        Process one batch item by item, then insert all surviving vectors at once.

        External calls:
        - core/imaging.py::load_image - DecodeError counts as an item error.
        - core/extractors/base.py::FeatureExtractor.extract - StructuralError counts as an item error.
        - core/storage.py::ImageStorage.store - write failures count as item errors.
        - core/vector_store/base.py::VectorStore.insert - StoreError fails the whole batch.

        A failed insert reports the entire batch as errors even though the
        canonical copies of its items were already written.
        """

        log = get_logger(__name__, {"batch_id": batch.batch_id})
        log.info("batch_started", extra={"size": len(batch)})

        ids: List[str] = []
        vectors: List[np.ndarray] = []
        payloads: List[dict] = []
        error_count = 0

        for source in batch.paths:
            survivor = self._process_item(source, log)
            if survivor is None:
                error_count += 1
                continue
            image_id, vector, stored_path = survivor
            ids.append(image_id)
            vectors.append(vector)
            payloads.append(
                {
                    "path": str(stored_path),
                    "source": str(source),
                    "inserted_at": datetime.now(timezone.utc).isoformat(),
                }
            )

        if ids:
            try:
                self.vector_store.insert(ids, np.vstack(vectors).astype(np.float32), payloads)
            except StoreError as exc:
                log.error("batch_insert_failed", extra={"error": str(exc), "orphaned_copies": len(ids)})
                return BatchResult(
                    batch_id=batch.batch_id,
                    processed_count=0,
                    error_count=len(batch),
                    fatal_error=str(exc),
                )

        log.info("batch_finished", extra={"processed": len(ids), "errors": error_count})
        return BatchResult(batch_id=batch.batch_id, processed_count=len(ids), error_count=error_count)

    def _process_item(self, source: Path, log) -> Optional[Tuple[str, np.ndarray, Path]]:
        try:
            image = load_image(source)
        except DecodeError as exc:
            log.warning("image_load_failed", extra={"source": str(source), "error": str(exc)})
            return None

        try:
            vector = self.extractor.extract(image)
        except StructuralError as exc:
            log.warning("feature_extraction_failed", extra={"source": str(source), "error": str(exc)})
            return None

        image_id = str(uuid.uuid4())
        try:
            stored_path = self.storage.store(image, image_id, source)
        except (OSError, ValueError) as exc:
            log.warning("canonical_copy_failed", extra={"source": str(source), "error": str(exc)})
            return None

        return image_id, vector, stored_path

