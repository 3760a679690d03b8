# Path: api/__init__.py
# Purpose: Package initializer for the HTTP adapter over the search service.
# Layer: api.
# Details: Exposes the FastAPI application factory.

from .app import create_app, status_for

__all__ = ["create_app", "status_for"]
