# Path: utils/__init__.py
# Purpose: Package initializer for shared helpers.
# Layer: utils.
# Details: Exposes the structured logger factory.

from .logging import get_logger

__all__ = ["get_logger"]
