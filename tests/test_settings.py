"""Tests for environment-driven configuration and component wiring."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest
from pydantic import ValidationError

from config import AppSettings, ExtractorSettings
from core.extractors.handcrafted import SimpleFeatureExtractor
from core.factory import build_index_builder, build_search_service, build_vector_store

ENV_KEYS = [
    "SERVER_PORT",
    "SERVER_HOST",
    "UPLOAD_PATH",
    "MAX_FILE_SIZE",
    "VECTOR_DIMENSION",
    "VECTOR_INDEX_PATH",
    "VECTOR_STORE",
    "VECTOR_METRIC_TYPE",
    "INGEST_BATCH_SIZE",
    "INGEST_WORKERS",
    "LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch) -> None:
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_defaults() -> None:
    settings = AppSettings.from_env()

    assert settings.server.port == 8888
    assert settings.server.upload_path == Path("uploads")
    assert settings.server.max_file_size == 10 * 1024 * 1024
    assert settings.extractor.dimension == 512
    assert settings.vector_store.dim == 512
    assert settings.ingest.batch_size == 50
    assert settings.ingest.worker_count == 4
    assert settings.ingest.queue_capacity == 100


def test_environment_overrides(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("SERVER_PORT", "9000")
    monkeypatch.setenv("UPLOAD_PATH", str(tmp_path / "up"))
    monkeypatch.setenv("VECTOR_DIMENSION", "256")
    monkeypatch.setenv("INGEST_WORKERS", "8")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")

    settings = AppSettings.from_env()

    assert settings.server.port == 9000
    assert settings.server.upload_path == tmp_path / "up"
    assert settings.extractor.dimension == 256
    assert settings.vector_store.dim == 256
    assert settings.ingest.worker_count == 8
    assert settings.log_level == "DEBUG"


def test_malformed_integers_fall_back_to_defaults(monkeypatch) -> None:
    monkeypatch.setenv("SERVER_PORT", "eighty")
    monkeypatch.setenv("INGEST_BATCH_SIZE", "")

    settings = AppSettings.from_env()

    assert settings.server.port == 8888
    assert settings.ingest.batch_size == 50


def test_out_of_range_values_are_rejected() -> None:
    with pytest.raises(ValidationError):
        ExtractorSettings(image_size=2)


def test_factory_wires_shared_components(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("UPLOAD_PATH", str(tmp_path / "uploads"))
    monkeypatch.setenv("VECTOR_INDEX_PATH", str(tmp_path / "index" / "vectors"))
    monkeypatch.setenv("VECTOR_DIMENSION", "64")
    settings = AppSettings.from_env()

    store = build_vector_store(settings)
    builder = build_index_builder(settings, store, show_progress=False)
    service = build_search_service(settings, store)

    assert isinstance(builder.extractor, SimpleFeatureExtractor)
    assert builder.extractor.dimension() == service.extractor.dimension() == 64
    assert builder.vector_store is service.vector_store is store
    assert (tmp_path / "uploads").is_dir()


def test_vector_store_restores_snapshot(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("VECTOR_INDEX_PATH", str(tmp_path / "index" / "vectors"))
    monkeypatch.setenv("VECTOR_DIMENSION", "4")
    settings = AppSettings.from_env()

    first = build_vector_store(settings)
    first.insert(["a"], np.ones((1, 4), dtype=np.float32))
    first.save(str(settings.vector_store.index_path))

    restored = build_vector_store(settings)

    assert len(restored) == 1
    assert len(build_vector_store(settings, load_existing=False)) == 0


def test_unknown_vector_store_is_rejected(monkeypatch) -> None:
    monkeypatch.setenv("VECTOR_STORE", "milvus")

    with pytest.raises(ValueError):
        build_vector_store(AppSettings.from_env())


def test_non_positive_dimension_is_rejected_by_extractor_settings(monkeypatch) -> None:
    monkeypatch.setenv("VECTOR_DIMENSION", "0")

    with pytest.raises(ValidationError) as info:
        AppSettings.from_env()

    assert info.value.title == "ExtractorSettings"
