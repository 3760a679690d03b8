"""Shared fixtures: synthetic images on disk and in memory, plus wired components."""

from __future__ import annotations

import io
import os
import tempfile
from pathlib import Path
from typing import Callable, Tuple

import pytest
from PIL import Image

os.environ.setdefault("IMGSEARCH_LOG_DIR", tempfile.mkdtemp(prefix="imgsearch-logs-"))

from core.extractors.handcrafted import SimpleFeatureExtractor  # noqa: E402
from core.storage import ImageStorage  # noqa: E402
from core.vector_store.memory_store import InMemoryVectorStore  # noqa: E402

Color = Tuple[int, int, int]


def make_image(color: Color = (255, 0, 0), size: Tuple[int, int] = (32, 32)) -> Image.Image:
    return Image.new("RGB", size, color=color)


def encode(image: Image.Image, fmt: str = "PNG") -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def write_image(tmp_path: Path) -> Callable[..., Path]:
    """Write a solid-color image under ``tmp_path/dataset`` and return its path."""

    def _write(name: str, color: Color = (255, 0, 0), size: Tuple[int, int] = (24, 16)) -> Path:
        target = tmp_path / "dataset" / name
        target.parent.mkdir(parents=True, exist_ok=True)
        fmt = {".jpg": "JPEG", ".jpeg": "JPEG", ".png": "PNG", ".bmp": "BMP", ".tiff": "TIFF", ".tif": "TIFF"}[
            target.suffix.lower()
        ]
        make_image(color, size).save(target, format=fmt)
        return target

    return _write


@pytest.fixture
def write_corrupt(tmp_path: Path) -> Callable[[str], Path]:
    def _write(name: str) -> Path:
        target = tmp_path / "dataset" / name
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(b"this is not an image")
        return target

    return _write


@pytest.fixture
def extractor() -> SimpleFeatureExtractor:
    return SimpleFeatureExtractor()


@pytest.fixture
def small_extractor() -> SimpleFeatureExtractor:
    """Cheaper canonical size for pipeline tests."""

    return SimpleFeatureExtractor(dim=128, image_size=32, crop_margin=8)


@pytest.fixture
def vector_store(small_extractor: SimpleFeatureExtractor) -> InMemoryVectorStore:
    return InMemoryVectorStore(dim=small_extractor.dim)


@pytest.fixture
def storage(tmp_path: Path) -> ImageStorage:
    return ImageStorage(tmp_path / "uploads")
