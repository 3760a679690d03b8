# Path: scripts/serve_api.py
# Purpose: Run the HTTP API with uvicorn.
# Layer: scripts.
# Details: Builds the search service from environment settings and serves it.

from __future__ import annotations

import sys
from pathlib import Path

# Ensure project root is on sys.path when running as a script.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import uvicorn

from api.app import create_app
from config import AppSettings
from core.factory import build_search_service, build_vector_store
from utils.logging import configure_logging, get_logger

LOGGER = get_logger("scripts.serve_api")


def main() -> None:
    settings = AppSettings.from_env()
    configure_logging(settings.log_level)

    vector_store = build_vector_store(settings)
    service = build_search_service(settings, vector_store)
    LOGGER.info(
        "server_starting",
        extra={"host": settings.server.host, "port": settings.server.port, "feature_dim": settings.extractor.dimension},
    )
    try:
        uvicorn.run(create_app(service), host=settings.server.host, port=settings.server.port)
    finally:
        vector_store.save(str(settings.vector_store.index_path))


if __name__ == "__main__":
    main()
