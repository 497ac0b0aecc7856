"""Sample processor — validates, normalizes, and enqueues incoming samples.

Normalization happens here, before storage, so the store only ever holds
reference-space points. Depends on the SampleQueue and SampleStore
protocols, not concrete implementations.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import TYPE_CHECKING, Sequence

import structlog

from heatlens.core.normalizer import normalize_many
from heatlens.core.reference import DEFAULT_REFERENCE, ReferenceSpace

if TYPE_CHECKING:
    from heatlens.core.models import NormalizedPoint, RawSample
    from heatlens.core.stats import EngineStats
    from heatlens.queue.base import SampleQueue
    from heatlens.storage.base import SampleStore

log = structlog.get_logger()


@dataclass(frozen=True)
class IntakeResult:
    accepted: int
    discarded: int
    clamped: int
    queued: int


class SampleProcessor:
    """Normalizes raw samples and moves them through the queue into the store."""

    def __init__(
        self,
        queue: SampleQueue,
        store: SampleStore,
        stats: EngineStats,
        reference: ReferenceSpace = DEFAULT_REFERENCE,
    ) -> None:
        self._queue = queue
        self._store = store
        self._stats = stats
        self._reference = reference

    async def process_batch(self, samples: Sequence[RawSample]) -> IntakeResult:
        """Normalize a batch and enqueue the valid samples.

        Invalid samples are dropped and counted, never stored.
        """
        result = normalize_many(samples, self._reference)
        self._stats.record_batch(
            received=len(samples),
            accepted=len(result.points),
            discarded=result.discarded,
            clamped=result.clamped,
        )
        if result.discarded:
            log.warning("samples_discarded", count=result.discarded, batch=len(samples))

        per_session = Counter((p.session_id, p.device_class) for p in result.points)
        for (session_id, device_class), count in per_session.items():
            self._stats.record_session(session_id, device_class, count)

        queued = 0
        for point in result.points:
            try:
                await self._queue.put(point)
                queued += 1
            except Exception:
                log.error("queue_put_failed", session=point.session_id[:8], exc_info=True)

        self._stats.update_queue_depth(self._queue.qsize())
        if queued:
            log.info("samples_enqueued", count=queued, clamped=result.clamped)

        return IntakeResult(
            accepted=len(result.points),
            discarded=result.discarded,
            clamped=result.clamped,
            queued=queued,
        )

    def _store_one(self, point: NormalizedPoint) -> None:
        try:
            self._store.append([point])
            self._stats.record_stored(1)
        except Exception:
            log.error("store_write_failed", session=point.session_id[:8], exc_info=True)
            self._stats.record_store_error()

    async def drain(self) -> int:
        """Move every currently queued sample into the store without waiting."""
        moved = 0
        while self._queue.qsize() > 0:
            self._store_one(await self._queue.get())
            moved += 1
        self._stats.update_queue_depth(self._queue.qsize())
        return moved

    async def run_store_consumer(self) -> None:
        """Consume from the queue and append to the store. Runs as a background task."""
        log.info("store_consumer_started")
        while True:
            point = await self._queue.get()
            self._store_one(point)
            self._stats.update_queue_depth(self._queue.qsize())
