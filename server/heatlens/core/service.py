"""Heatmap query service — resolves a query into a dataset.

Takes one snapshot of the store per query, filters it to the partition,
and hands the result to the aggregator.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

import structlog

from heatlens.core.aggregator import aggregate
from heatlens.core.errors import PartitionNotFound
from heatlens.core.reference import DEFAULT_REFERENCE, ReferenceSpace

if TYPE_CHECKING:
    from heatlens.core.models import HeatmapDataset, HeatmapQuery
    from heatlens.core.stats import EngineStats
    from heatlens.storage.base import SampleStore

log = structlog.get_logger()


class HeatmapService:
    def __init__(
        self,
        store: SampleStore,
        stats: EngineStats,
        reference: ReferenceSpace = DEFAULT_REFERENCE,
    ) -> None:
        self._store = store
        self._stats = stats
        self._reference = reference

    def available_pages(self, site_id: int) -> list[str]:
        return sorted(self._store.pages(site_id))

    def build_dataset(self, query: HeatmapQuery, now_ms: int | None = None) -> HeatmapDataset:
        """Aggregate the partition selected by ``query``.

        Raises PartitionNotFound if the site has never recorded the page.
        A known page with no samples in the window yields an empty dataset.
        """
        if now_ms is None:
            now_ms = int(time.time() * 1000)

        pages = self._store.pages(query.site_id)
        if query.page_url not in pages:
            self._stats.record_partition_miss()
            log.info("partition_not_found", site=query.site_id, page=query.page_url,
                     known_pages=len(pages))
            if pages:
                raise PartitionNotFound(query.site_id, query.page_url,
                                        f"no recorded samples for page {query.page_url}")
            raise PartitionNotFound(query.site_id, query.page_url)

        partition = query.partition(now_ms)
        snapshot = self._store.snapshot(query.site_id, partition.since_ms, partition.until_ms)
        points = [p for p in snapshot if partition.matches(p)]

        dataset = aggregate(points, partition, self._reference, available_pages=pages)
        self._stats.record_dataset(empty=dataset.is_empty)
        log.info("dataset_built", site=query.site_id, page=query.page_url,
                 type=query.heatmap_type, device=query.device_type, days=query.days,
                 points=len(dataset.points), sessions=dataset.session_count,
                 events=dataset.total_events)
        return dataset
