# Path: config/__init__.py
# Purpose: Package initializer for configuration module.
# Layer: config.
# Details: Exposes settings models for application-wide configuration.

from .settings import AppSettings, ExtractorSettings, IngestSettings, ServerSettings, VectorStoreSettings

__all__ = ["AppSettings", "ExtractorSettings", "IngestSettings", "ServerSettings", "VectorStoreSettings"]
