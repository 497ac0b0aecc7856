"""Storage interface (port) for normalized samples."""

from __future__ import annotations

from typing import Iterable, Protocol, TYPE_CHECKING

if TYPE_CHECKING:
    from heatlens.core.models import NormalizedPoint


class SampleStore(Protocol):
    """Port: append-only store of normalized samples.

    ``snapshot`` must return an immutable view, so a query computed from it
    is repeatable even while new samples keep arriving.
    """

    def append(self, points: Iterable[NormalizedPoint]) -> int: ...

    def snapshot(self, site_id: int, since_ms: int | None = None,
                 until_ms: int | None = None) -> tuple[NormalizedPoint, ...]: ...

    def pages(self, site_id: int) -> set[str]: ...
