"""In-memory append-only sample store.

Samples are kept per site in arrival order. Readers get tuple snapshots
taken under the lock, never the live lists.
"""

from __future__ import annotations

import threading
from typing import Iterable, TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from heatlens.core.models import NormalizedPoint

log = structlog.get_logger()


class MemorySampleStore:
    """SampleStore held in process memory."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._by_site: dict[int, list[NormalizedPoint]] = {}
        self._pages: dict[int, set[str]] = {}

    def append(self, points: Iterable[NormalizedPoint]) -> int:
        count = 0
        with self._lock:
            for p in points:
                self._by_site.setdefault(p.site_id, []).append(p)
                self._pages.setdefault(p.site_id, set()).add(p.page_url)
                count += 1
        log.debug("samples_appended", count=count)
        return count

    def snapshot(self, site_id: int, since_ms: int | None = None,
                 until_ms: int | None = None) -> tuple[NormalizedPoint, ...]:
        """Samples of a site whose timestamp falls in [since_ms, until_ms]."""
        with self._lock:
            points = tuple(self._by_site.get(site_id, ()))
        return tuple(
            p for p in points
            if (since_ms is None or p.timestamp_ms >= since_ms)
            and (until_ms is None or p.timestamp_ms <= until_ms)
        )

    def pages(self, site_id: int) -> set[str]:
        with self._lock:
            return set(self._pages.get(site_id, ()))

    def __len__(self) -> int:
        with self._lock:
            return sum(len(v) for v in self._by_site.values())
