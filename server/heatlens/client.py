"""HTTP client for the heatmap query service."""

from __future__ import annotations

import httpx
import structlog

from heatlens.core.errors import PartitionNotFound
from heatlens.core.models import HeatmapDataset, HeatmapQuery

log = structlog.get_logger()


class HeatmapClient:
    """Fetches datasets from a HeatLens server.

    Pass ``client`` to reuse an existing httpx.AsyncClient (for instance
    one bound to an ASGI app); otherwise one is created for ``base_url``.
    """

    def __init__(self, base_url: str = "http://localhost:8000",
                 client: httpx.AsyncClient | None = None, timeout: float = 10.0) -> None:
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)

    async def fetch(self, query: HeatmapQuery) -> HeatmapDataset:
        resp = await self._client.get(
            f"/api/v1/heatmaps/{query.site_id}/data",
            params={
                "page_url": query.page_url,
                "type": query.heatmap_type,
                "device": query.device_type,
                "days": query.days,
            },
        )
        if resp.status_code == 404:
            body = resp.json()
            raise PartitionNotFound(query.site_id, query.page_url,
                                    body.get("error", "no recorded pages yet"))
        resp.raise_for_status()
        dataset = HeatmapDataset.from_dict(resp.json())
        log.debug("dataset_fetched", site=query.site_id, page=query.page_url,
                  points=len(dataset.points))
        return dataset

    async def pages(self, site_id: int) -> list[str]:
        resp = await self._client.get(f"/api/v1/heatmaps/{site_id}/pages")
        resp.raise_for_status()
        return resp.json()["pages"]

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> HeatmapClient:
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()
