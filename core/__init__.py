# Path: core/__init__.py
# Purpose: Package initializer for feature extraction, ingestion, and search.
# Layer: core.
# Details: Subpackages for extractors, vector stores, indexing, search, and models; shared errors, imaging, and storage live beside them.
