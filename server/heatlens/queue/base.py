"""Queue interface (port) for sample ingestion."""

from __future__ import annotations

from typing import Protocol, TYPE_CHECKING

if TYPE_CHECKING:
    from heatlens.core.models import NormalizedPoint


class SampleQueue(Protocol):
    """Port: accepts normalized samples and delivers them to consumers."""

    async def put(self, point: NormalizedPoint) -> None: ...

    async def get(self) -> NormalizedPoint: ...

    def qsize(self) -> int: ...
