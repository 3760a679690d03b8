# Path: scripts/quick_search_demo.py
# Purpose: Simple CLI to run a similarity search against a stored index.
# Layer: scripts.
# Details: Loads the saved reference index and queries it with an image file.

from __future__ import annotations

import argparse
import sys
from pathlib import Path

# Ensure project root is on sys.path when running as a script.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from config import AppSettings
from core.factory import build_search_service, build_vector_store
from utils.logging import configure_logging


def main() -> None:
    """Execute a quick image search from the command line."""

    parser = argparse.ArgumentParser(description="Run a quick search against the image index")
    parser.add_argument("--image", type=Path, required=True, help="Query image file")
    parser.add_argument("--k", type=int, default=5, help="Number of results to return")
    args = parser.parse_args()

    settings = AppSettings.from_env()
    configure_logging(settings.log_level)

    service = build_search_service(settings, build_vector_store(settings))
    hits = service.search(args.image.read_bytes(), args.image.name, top_k=args.k)

    for hit in hits:
        print(f"id={hit.image_id} distance={hit.distance:.4f} similarity={hit.similarity} path={hit.image_path}")


if __name__ == "__main__":
    main()
