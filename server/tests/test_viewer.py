"""Tests for the viewer controller: stale fetches and re-rendering."""

from __future__ import annotations

import asyncio
import time
from dataclasses import asdict

import pytest
from structlog.testing import capture_logs

from heatlens.client import HeatmapClient
from heatlens.core.errors import PartitionNotFound
from heatlens.core.models import HeatmapDataset, HeatmapPoint, HeatmapQuery
from heatlens.core.renderer import CanvasSize
from heatlens.core.viewer import HeatmapViewer
from heatlens.surface.recording import DrawText, GradientCircle, RecordingSurface


def _dataset(page_url: str, value: int = 5) -> HeatmapDataset:
    return HeatmapDataset(
        site_id=1, page_url=page_url, heatmap_type="click", device_type="desktop",
        points=(HeatmapPoint(960, 540, value),), max=value, session_count=1,
        total_events=value,
    )


class GatedFetcher:
    """Fetch function whose results are released manually per page."""

    def __init__(self) -> None:
        self.gates: dict[str, asyncio.Event] = {}
        self.cancelled: list[str] = []

    async def __call__(self, query: HeatmapQuery) -> HeatmapDataset:
        gate = self.gates.setdefault(query.page_url, asyncio.Event())
        try:
            await gate.wait()
        except asyncio.CancelledError:
            self.cancelled.append(query.page_url)
            raise
        return _dataset(query.page_url)

    def release(self, page_url: str) -> None:
        self.gates.setdefault(page_url, asyncio.Event()).set()


def _viewer(fetch) -> HeatmapViewer:
    return HeatmapViewer(fetch, CanvasSize(800, 600), lambda canvas: RecordingSurface())


async def test_select_renders_dataset():
    fetcher = GatedFetcher()
    fetcher.release("/")
    viewer = _viewer(fetcher)

    dataset = await viewer.select(HeatmapQuery(site_id=1))
    assert dataset is not None
    assert viewer.dataset is dataset
    assert viewer.renders == 1
    assert viewer.frame.of_type(GradientCircle)


async def test_newer_selection_cancels_stale_fetch():
    fetcher = GatedFetcher()
    viewer = _viewer(fetcher)

    first = asyncio.create_task(viewer.select(HeatmapQuery(site_id=1, page_url="/old")))
    while "/old" not in fetcher.gates:
        await asyncio.sleep(0)
    fetcher.release("/new")
    second = await viewer.select(HeatmapQuery(site_id=1, page_url="/new"))

    assert await first is None
    assert fetcher.cancelled == ["/old"]
    assert second.page_url == "/new"
    assert viewer.query.page_url == "/new"
    assert viewer.renders == 1


async def test_cancel_log_names_the_superseded_page():
    fetcher = GatedFetcher()
    fetcher.release("/shown")
    viewer = _viewer(fetcher)
    await viewer.select(HeatmapQuery(site_id=1, page_url="/shown"))

    first = asyncio.create_task(viewer.select(HeatmapQuery(site_id=1, page_url="/old")))
    while "/old" not in fetcher.gates:
        await asyncio.sleep(0)
    fetcher.release("/new")
    with capture_logs() as logs:
        await viewer.select(HeatmapQuery(site_id=1, page_url="/new"))
    assert await first is None

    cancelled = [e for e in logs if e["event"] == "fetch_cancelled"]
    assert [e["page"] for e in cancelled] == ["/old"]


async def test_stale_result_is_discarded():
    """A fetch that ignores cancellation still never reaches the screen."""
    release = asyncio.Event()
    started = asyncio.Event()

    async def stubborn_fetch(query: HeatmapQuery) -> HeatmapDataset:
        if query.page_url == "/old":
            started.set()
            try:
                await release.wait()
            except asyncio.CancelledError:
                pass
        return _dataset(query.page_url)

    viewer = _viewer(stubborn_fetch)
    first = asyncio.create_task(viewer.select(HeatmapQuery(site_id=1, page_url="/old")))
    await started.wait()
    await viewer.select(HeatmapQuery(site_id=1, page_url="/new"))
    release.set()

    assert await first is None
    assert viewer.dataset.page_url == "/new"
    assert viewer.renders == 1


async def test_resize_rerenders_current_dataset():
    fetcher = GatedFetcher()
    fetcher.release("/")
    viewer = _viewer(fetcher)
    await viewer.select(HeatmapQuery(site_id=1))

    viewer.resize(CanvasSize(400, 300))
    assert viewer.renders == 2
    (blob,) = viewer.frame.of_type(GradientCircle)
    assert (blob.x, blob.y) == (200, 150)


async def test_resize_without_dataset_does_nothing():
    viewer = _viewer(GatedFetcher())
    viewer.resize(CanvasSize(400, 300))
    assert viewer.renders == 0
    assert viewer.frame is None


async def test_partition_not_found_propagates():
    async def missing(query: HeatmapQuery) -> HeatmapDataset:
        raise PartitionNotFound(query.site_id, query.page_url)

    viewer = _viewer(missing)
    with pytest.raises(PartitionNotFound):
        await viewer.select(HeatmapQuery(site_id=1))
    assert viewer.frame is None


async def test_viewer_with_http_client(client, make_sample):
    now_ms = int(time.time() * 1000)
    resp = await client.post("/api/v1/samples", json={
        "samples": [
            asdict(make_sample(session_id="s1", timestamp_ms=now_ms)),
            asdict(make_sample(session_id="s2", timestamp_ms=now_ms)),
        ],
    })
    assert resp.status_code == 200

    from heatlens.main import get_processor

    await get_processor().drain()

    viewer = _viewer(HeatmapClient(client=client).fetch)
    dataset = await viewer.select(HeatmapQuery(site_id=1))
    assert dataset.session_count == 2
    assert viewer.frame.of_type(GradientCircle)

    empty = await viewer.select(HeatmapQuery(site_id=1, heatmap_type="scroll"))
    assert empty.is_empty
    texts = viewer.frame.of_type(DrawText)
    assert texts[0].text.startswith("No heatmap data")
