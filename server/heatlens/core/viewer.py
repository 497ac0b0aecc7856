"""Heatmap viewer controller.

Holds the viewer's current selection as an immutable HeatmapQuery and
keeps the rendered frame in sync with it. Selecting a new query cancels
the fetch of the previous one; a result that arrives for a superseded
query is dropped and never rendered.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable

import structlog

from heatlens.core.models import HeatmapDataset, HeatmapQuery
from heatlens.core.reference import DEFAULT_REFERENCE, ReferenceSpace
from heatlens.core.renderer import CanvasSize, render
from heatlens.surface.base import DrawingSurface

log = structlog.get_logger()


Fetcher = Callable[[HeatmapQuery], Awaitable[HeatmapDataset]]


class HeatmapViewer:
    def __init__(
        self,
        fetch: Fetcher,
        canvas: CanvasSize,
        surface_factory: Callable[[CanvasSize], DrawingSurface],
        reference: ReferenceSpace = DEFAULT_REFERENCE,
    ) -> None:
        self._fetch = fetch
        self._surface_factory = surface_factory
        self._reference = reference
        self._generation = 0
        self._pending: asyncio.Task | None = None
        self._pending_query: HeatmapQuery | None = None

        self.canvas = canvas
        self.query: HeatmapQuery | None = None
        self.dataset: HeatmapDataset | None = None
        self.frame: DrawingSurface | None = None
        self.renders = 0

    async def select(self, query: HeatmapQuery) -> HeatmapDataset | None:
        """Fetch and render ``query``.

        Returns the dataset, or None if a newer selection superseded this
        one before its fetch completed.
        """
        self._generation += 1
        generation = self._generation

        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
            log.debug("fetch_cancelled", page=self._pending_query.page_url)

        task = asyncio.ensure_future(self._fetch(query))
        self._pending = task
        self._pending_query = query
        try:
            dataset = await task
        except asyncio.CancelledError:
            if task.cancelled() and generation != self._generation:
                return None
            raise
        except Exception:
            if generation != self._generation:
                return None
            raise

        if generation != self._generation:
            log.debug("stale_dataset_discarded", page=query.page_url)
            return None

        self.query = query
        self.dataset = dataset
        self._render()
        return dataset

    def resize(self, canvas: CanvasSize) -> None:
        """Change the canvas size and re-render the current dataset."""
        self.canvas = canvas
        if self.dataset is not None:
            self._render()

    def _render(self) -> None:
        surface = self._surface_factory(self.canvas)
        render(self.dataset, self.canvas, surface, self._reference)
        # Publish only a completed frame.
        self.frame = surface
        self.renders += 1
