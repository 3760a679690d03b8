# Path: core/vector_store/base.py
# Purpose: Define the VectorStore contract the ingestion and search paths depend on.
# Layer: core/vector_store.
# Details: insert/search/delete/stats plus payload lookup and persistence; failures raise StoreError.

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np


class VectorStore(ABC):
    """Abstract base class for pluggable vector store backends."""

    name: str
    dim: int

    @abstractmethod
    def insert(self, ids: Sequence[str], vectors: np.ndarray, payloads: Optional[List[Dict[str, Any]]] = None) -> None:
        """Insert all vectors or none; mismatched lengths or dimensions raise StoreError."""

    @abstractmethod
    def search(self, query: np.ndarray, k: int) -> List[Tuple[str, float]]:
        """Return up to ``k`` ``(id, distance)`` pairs ordered by ascending distance."""

    @abstractmethod
    def delete(self, id: str) -> None:
        """Remove the vector stored under ``id``."""

    @abstractmethod
    def stats(self) -> Dict[str, Any]:
        """Return backend statistics for observability."""

    @abstractmethod
    def get_payload(self, id: str) -> Optional[Dict[str, Any]]:
        """Return stored payload data for the given identifier if available."""

    def save(self, path: str) -> None:
        """Persist the index to disk when the backend supports it."""

        raise NotImplementedError(f"{type(self).__name__} does not support local persistence.")

    def load(self, path: str) -> None:
        """Load a serialized index from disk when the backend supports it."""

        raise NotImplementedError(f"{type(self).__name__} does not support local persistence.")
