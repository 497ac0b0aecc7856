"""HeatLens server — main entry point.

This is the only file that knows about concrete implementations.
It wires together the core, queue, storage, and API layers.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from heatlens.api.heatmaps import router as heatmaps_router
from heatlens.api.monitoring import router as monitoring_router
from heatlens.api.samples import router as samples_router
from heatlens.config import AppConfig, load_config
from heatlens.core.processor import SampleProcessor
from heatlens.core.service import HeatmapService
from heatlens.core.stats import EngineStats
from heatlens.queue.asyncio_queue import AsyncioSampleQueue
from heatlens.storage.memory_store import MemorySampleStore

log = structlog.get_logger()

# Module-level singletons (set during startup)
_processor: SampleProcessor | None = None
_service: HeatmapService | None = None
_stats: EngineStats | None = None
_config: AppConfig | None = None


def get_processor() -> SampleProcessor:
    assert _processor is not None, "Server not initialized"
    return _processor


def get_service() -> HeatmapService:
    assert _service is not None, "Server not initialized"
    return _service


def get_stats() -> EngineStats:
    assert _stats is not None, "Server not initialized"
    return _stats


def get_config() -> AppConfig:
    assert _config is not None, "Server not initialized"
    return _config


def setup_logging(config: AppConfig) -> None:
    """Configure structlog based on the logging config."""
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if config.logging.format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=not config.logging.file))

    logger_factory = None
    if config.logging.file:
        logger_factory = structlog.WriteLoggerFactory(file=open(config.logging.file, "a"))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(config.logging.level.upper()),
        ),
        logger_factory=logger_factory or structlog.PrintLoggerFactory(),
    )


def build_components(config: AppConfig) -> tuple[EngineStats, SampleProcessor, HeatmapService]:
    """Create the stats, intake and query components for a config."""
    reference = config.reference_space()
    stats = EngineStats(active_window_seconds=config.limits.active_window_seconds)
    queue = AsyncioSampleQueue(max_size=config.queue.max_size)
    store = MemorySampleStore()
    processor = SampleProcessor(queue=queue, store=store, stats=stats, reference=reference)
    service = HeatmapService(store=store, stats=stats, reference=reference)
    return stats, processor, service


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown."""
    global _processor, _service, _stats, _config

    _config = load_config()
    setup_logging(_config)

    log.info("server_starting",
             env=_config.server.env,
             queue_max_size=_config.queue.max_size,
             reference=f"{_config.reference.width:g}x{_config.reference.height:g}",
             depth=_config.reference.depth)

    _stats, _processor, _service = build_components(_config)

    # Start background store consumer
    consumer_task = asyncio.create_task(_processor.run_store_consumer())

    log.info("server_started",
             host=_config.server.host,
             port=_config.server.port)

    yield

    # Shutdown
    consumer_task.cancel()
    try:
        await consumer_task
    except asyncio.CancelledError:
        pass
    log.info("server_stopped")


app = FastAPI(
    title="HeatLens",
    description="Interaction heatmap aggregation and rendering server",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(samples_router)
app.include_router(heatmaps_router)
app.include_router(monitoring_router)
