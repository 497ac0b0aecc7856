"""In-process asyncio queue implementation of SampleQueue."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from heatlens.core.models import NormalizedPoint


class AsyncioSampleQueue:
    """SampleQueue backed by asyncio.Queue."""

    def __init__(self, max_size: int = 10_000) -> None:
        self._queue: asyncio.Queue[NormalizedPoint] = asyncio.Queue(maxsize=max_size)

    async def put(self, point: NormalizedPoint) -> None:
        await self._queue.put(point)

    async def get(self) -> NormalizedPoint:
        return await self._queue.get()

    def qsize(self) -> int:
        return self._queue.qsize()
