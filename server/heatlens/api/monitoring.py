"""Health check and monitoring endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from heatlens.core.models import ALLOWED_DAYS, DEVICE_CLASSES, HEATMAP_TYPES

router = APIRouter(prefix="/api/v1")


@router.get("/health")
async def health() -> dict:
    """Basic health check."""
    from heatlens.main import get_stats

    snapshot = get_stats().snapshot()
    return {
        "status": "ok",
        "version": "0.1.0",
        "uptime_seconds": snapshot["uptime_seconds"],
        "queue_depth": snapshot["queue_depth"],
        "samples_stored": snapshot["samples_stored"],
    }


@router.get("/stats")
async def stats() -> dict:
    """Detailed engine statistics.

    ``samples_discarded`` counts samples rejected as invalid at intake.
    The ``active_sessions`` section counts sessions that sent samples in
    the last ``window_seconds``, split by device class.
    """
    from heatlens.main import get_stats

    return get_stats().snapshot()


@router.get("/config")
async def get_client_config() -> dict:
    """Configuration endpoint for viewers and tracking clients."""
    from heatlens.main import get_config

    config = get_config()
    ref = config.reference
    return {
        "heatmap_types": list(HEATMAP_TYPES),
        "device_classes": list(DEVICE_CLASSES),
        "allowed_days": list(ALLOWED_DAYS),
        "max_batch_size": config.limits.max_batch_size,
        "reference": {
            "width": ref.width,
            "height": ref.height,
            "depth": ref.depth,
            "cell_size": ref.cell_size,
            "band_height": ref.band_height,
        },
        "canvas": {"width": config.canvas.width, "height": config.canvas.height},
    }
