"""Shared test fixtures."""

from __future__ import annotations

import pytest
from httpx import ASGITransport, AsyncClient

import heatlens.main as main_module
from heatlens.config import AppConfig
from heatlens.core.models import RawSample


@pytest.fixture(autouse=True)
def _init_server():
    """Initialize server singletons for every test."""
    config = AppConfig()
    config.logging.level = "warning"
    config.limits.max_batch_size = 50

    stats, processor, service = main_module.build_components(config)

    # Patch module-level singletons
    main_module._config = config
    main_module._stats = stats
    main_module._processor = processor
    main_module._service = service

    yield

    # Cleanup
    main_module._config = None
    main_module._stats = None
    main_module._processor = None
    main_module._service = None


@pytest.fixture
async def client():
    from heatlens.main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


def _make_sample(**overrides) -> RawSample:
    values = {
        "kind": "click",
        "x": 960,
        "y": 540,
        "viewport_width": 1920,
        "viewport_height": 1080,
        "session_id": "session-a",
        "page_url": "/",
        "device_class": "desktop",
        "timestamp_ms": 1_700_000_000_000,
        "site_id": 1,
    }
    values.update(overrides)
    return RawSample(**values)


@pytest.fixture
def make_sample():
    """Factory for valid RawSample objects; keyword arguments override fields."""
    return _make_sample
