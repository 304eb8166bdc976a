"""Tests for container wiring."""

import asyncio
from pathlib import Path

from snapplate.containers import build_container


def test_build_container_creates_services(settings) -> None:
    container = build_container(settings)

    assert container.analysis_service is not None
    assert container.log_store.quota_bytes == settings.storage_quota_bytes
    assert Path(settings.data_dir).is_dir()
    asyncio.run(container.close_resources())


def test_build_container_passes_server_defaults(settings) -> None:
    container = build_container(settings)

    snapshot = container.analysis_service.server_config()

    assert snapshot.has_server_key is True
    assert snapshot.server_model == "server-model"
    asyncio.run(container.close_resources())
