# Path: core/vector_store/memory_store.py
# Purpose: Provide an in-memory numpy vector store with on-disk snapshots.
# Layer: core/vector_store.
# Details: Implements insert/search/delete/stats with brute-force L2 distance; safe for concurrent workers.

from __future__ import annotations

import json
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np

from core.errors import StoreError
from .base import VectorStore


class InMemoryVectorStore(VectorStore):
    """Reference vector store used by the CLI, the API, and tests.

    Vectors live in a single float32 matrix; every mutation happens under a
    lock because ingestion workers insert concurrently.
    """

    def __init__(self, dim: int, name: str = "memory", metric_type: str = "L2") -> None:
        self.dim = dim
        self.name = name
        self.metric_type = metric_type
        self._ids: List[str] = []
        self._vectors = np.empty((0, dim), dtype=np.float32)
        self._payloads: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.Lock()

    def insert(self, ids: Sequence[str], vectors: np.ndarray, payloads: Optional[List[Dict[str, Any]]] = None) -> None:
        """Append vectors with optional payload metadata as one all-or-nothing operation."""

        matrix = np.asarray(vectors, dtype=np.float32)
        if matrix.ndim == 1:
            matrix = matrix.reshape(1, -1)
        if len(ids) != matrix.shape[0]:
            raise StoreError(f"Got {len(ids)} ids for {matrix.shape[0]} vectors.")
        if matrix.shape[1] != self.dim:
            raise StoreError(f"Vector dimensionality {matrix.shape[1]} does not match store dimension {self.dim}.")

        payloads = payloads if payloads is not None else [{} for _ in ids]
        if len(payloads) != len(ids):
            raise StoreError("Payloads length must match ids length.")

        if len(set(ids)) != len(ids):
            raise StoreError("Duplicate ids within a single insert call.")

        with self._lock:
            existing = [item_id for item_id in ids if item_id in self._payloads]
            if existing:
                raise StoreError(f"Ids already stored: {existing}")
            self._vectors = np.vstack([self._vectors, matrix])
            self._ids.extend(ids)
            for item_id, payload in zip(ids, payloads):
                self._payloads[item_id] = dict(payload)

    def search(self, query: np.ndarray, k: int) -> List[Tuple[str, float]]:
        """Return the k nearest neighbors using L2 distance."""

        if k <= 0:
            raise StoreError(f"k must be positive, got {k}.")
        query = np.asarray(query, dtype=np.float32).reshape(-1)
        if query.shape[0] != self.dim:
            raise StoreError(f"Query dimensionality {query.shape[0]} does not match store dimension {self.dim}.")

        with self._lock:
            if not self._ids:
                return []
            distances = np.linalg.norm(self._vectors - query.reshape(1, -1), axis=1)
            ranked = np.argsort(distances, kind="stable")[:k]
            return [(self._ids[idx], float(distances[idx])) for idx in ranked]

    def delete(self, id: str) -> None:
        """Remove ``id``; unknown ids are ignored."""

        with self._lock:
            if id not in self._payloads:
                return
            position = self._ids.index(id)
            self._vectors = np.delete(self._vectors, position, axis=0)
            del self._ids[position]
            del self._payloads[id]

    def stats(self) -> Dict[str, Any]:
        with self._lock:
            row_count = len(self._ids)
        return {
            "collection_name": self.name,
            "row_count": row_count,
            "dimension": self.dim,
            "metric_type": self.metric_type,
        }

    def get_payload(self, id: str) -> Optional[Dict[str, Any]]:
        """Retrieve payload previously associated with the given id."""

        with self._lock:
            payload = self._payloads.get(id)
            return dict(payload) if payload is not None else None

    def __len__(self) -> int:
        with self._lock:
            return len(self._ids)

    def save(self, path: str) -> None:
        """Persist vectors and payloads to disk as lightweight JSON + numpy arrays."""

        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        with self._lock:
            np.save(target.with_suffix(".npy"), self._vectors)
            target.with_suffix(".json").write_text(json.dumps({"ids": self._ids, "payloads": self._payloads}))

    def load(self, path: str) -> None:
        """Load vectors and payloads previously saved by :meth:`save`."""

        target = Path(path)
        vector_path = target.with_suffix(".npy")
        metadata_path = target.with_suffix(".json")
        if not vector_path.exists() or not metadata_path.exists():
            raise FileNotFoundError(f"Missing vector store files for {path}.")

        vectors = np.load(vector_path).astype(np.float32).reshape(-1, self.dim)
        metadata = json.loads(metadata_path.read_text())
        ids = [str(item_id) for item_id in metadata.get("ids", [])]
        if len(ids) != vectors.shape[0]:
            raise StoreError(f"Snapshot {path} holds {len(ids)} ids for {vectors.shape[0]} vectors.")

        with self._lock:
            self._vectors = vectors
            self._ids = ids
            self._payloads = {str(k): v for k, v in metadata.get("payloads", {}).items()}
