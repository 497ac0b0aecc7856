"""Heatmap dataset and rendering API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse, Response

from heatlens.core.colors import legend
from heatlens.core.errors import MalformedDataset, PartitionNotFound
from heatlens.core.models import HeatmapDataset, HeatmapQuery
from heatlens.core.renderer import CanvasSize, render
from heatlens.surface.recording import RecordingSurface
from heatlens.surface.svg import SvgSurface

router = APIRouter(prefix="/api/v1/heatmaps")


def _build(site_id: int, page_url: str, heatmap_type: str, device: str,
           days: int) -> HeatmapDataset | JSONResponse:
    """Run the query, or return the JSON error response for it."""
    from heatlens.main import get_service

    try:
        query = HeatmapQuery(site_id=site_id, page_url=page_url, heatmap_type=heatmap_type,
                             device_type=device, days=days)
    except ValueError as exc:
        return JSONResponse(status_code=422, content={"error": str(exc)})

    try:
        return get_service().build_dataset(query)
    except PartitionNotFound as exc:
        return JSONResponse(status_code=404, content={
            "error": exc.message,
            "retryable": exc.retryable,
            "available_pages": get_service().available_pages(site_id),
        })


def _canvas(width: int | None, height: int | None) -> CanvasSize:
    from heatlens.main import get_config

    canvas = get_config().canvas
    return CanvasSize(
        width=min(width or canvas.width, canvas.max_width),
        height=min(height or canvas.height, canvas.max_height),
    )


@router.get("/legend")
async def get_legend() -> dict:
    """Color legend shared by all heatmap types."""
    return {"bands": legend()}


@router.get("/{site_id}/pages")
async def get_pages(site_id: int) -> dict:
    from heatlens.main import get_service

    return {"site_id": site_id, "pages": get_service().available_pages(site_id)}


@router.get("/{site_id}/data")
async def get_heatmap_data(
    site_id: int,
    page_url: str = Query(default="/"),
    heatmap_type: str = Query(default="click", alias="type"),
    device: str = Query(default="desktop"),
    days: int = Query(default=7),
) -> JSONResponse:
    """Aggregated dataset for one partition (site, page, type, device, days)."""
    result = _build(site_id, page_url, heatmap_type, device, days)
    if isinstance(result, JSONResponse):
        return result
    return JSONResponse(content=result.to_dict())


@router.get("/{site_id}/render.svg")
async def render_svg(
    site_id: int,
    page_url: str = Query(default="/"),
    heatmap_type: str = Query(default="click", alias="type"),
    device: str = Query(default="desktop"),
    days: int = Query(default=7),
    width: int | None = Query(default=None, ge=1),
    height: int | None = Query(default=None, ge=1),
) -> Response:
    """Render the partition's heatmap as an SVG overlay."""
    from heatlens.main import get_config, get_stats

    result = _build(site_id, page_url, heatmap_type, device, days)
    if isinstance(result, JSONResponse):
        return result

    canvas = _canvas(width, height)
    surface = SvgSurface(canvas.width, canvas.height)
    try:
        render(result, canvas, surface, get_config().reference_space())
    except MalformedDataset as exc:
        return JSONResponse(status_code=500, content={"error": str(exc)})
    get_stats().record_render()
    return Response(content=surface.to_svg(), media_type="image/svg+xml")


@router.get("/{site_id}/commands")
async def render_commands(
    site_id: int,
    page_url: str = Query(default="/"),
    heatmap_type: str = Query(default="click", alias="type"),
    device: str = Query(default="desktop"),
    days: int = Query(default=7),
    width: int | None = Query(default=None, ge=1),
    height: int | None = Query(default=None, ge=1),
) -> JSONResponse:
    """Drawing commands for a client-side canvas."""
    from heatlens.main import get_config, get_stats

    result = _build(site_id, page_url, heatmap_type, device, days)
    if isinstance(result, JSONResponse):
        return result

    canvas = _canvas(width, height)
    surface = RecordingSurface()
    try:
        render(result, canvas, surface, get_config().reference_space())
    except MalformedDataset as exc:
        return JSONResponse(status_code=500, content={"error": str(exc)})
    get_stats().record_render()
    return JSONResponse(content={
        "width": canvas.width,
        "height": canvas.height,
        "commands": surface.to_json(),
    })
