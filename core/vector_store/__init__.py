# Path: core/vector_store/__init__.py
# Purpose: Package initializer for vector store interfaces and implementations.
# Layer: core/vector_store.
# Details: Exposes the base vector store contract and the in-memory reference store.

from .base import VectorStore
from .memory_store import InMemoryVectorStore

__all__ = ["VectorStore", "InMemoryVectorStore"]
