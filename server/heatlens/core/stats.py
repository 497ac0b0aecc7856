"""Engine statistics and active-session tracking.

Tracks in-memory counters and a sliding window of sessions that recently
sent samples. No framework dependencies.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass


@dataclass
class SessionActivity:
    """Tracks a single session's recent activity."""
    last_seen: float          # time.monotonic() timestamp
    device_class: str
    samples_sent: int = 0


class EngineStats:
    """Thread-safe engine statistics.

    ``samples_discarded`` counts samples rejected at normalization time;
    ``samples_clamped`` counts samples kept after clamping into the
    reference space. A session is active if it sent a sample within
    ``active_window_seconds``.
    """

    def __init__(self, active_window_seconds: float = 120.0) -> None:
        self._lock = threading.Lock()
        self._started_at = time.time()
        self._active_window = active_window_seconds

        # Intake counters
        self.samples_received: int = 0
        self.samples_accepted: int = 0
        self.samples_discarded: int = 0
        self.samples_clamped: int = 0
        self.samples_stored: int = 0
        self.batches_received: int = 0
        self.store_errors: int = 0
        self.queue_depth: int = 0
        self.queue_max_depth: int = 0

        # Query / render counters
        self.datasets_built: int = 0
        self.empty_datasets: int = 0
        self.partition_misses: int = 0
        self.renders: int = 0

        # Session tracking: session_id → SessionActivity
        self._sessions: dict[str, SessionActivity] = {}

    def record_batch(self, received: int, accepted: int, discarded: int, clamped: int) -> None:
        with self._lock:
            self.batches_received += 1
            self.samples_received += received
            self.samples_accepted += accepted
            self.samples_discarded += discarded
            self.samples_clamped += clamped

    def record_session(self, session_id: str, device_class: str, count: int = 1) -> None:
        """Record that a session sent ``count`` accepted samples."""
        now = time.monotonic()
        with self._lock:
            if session_id in self._sessions:
                activity = self._sessions[session_id]
                activity.last_seen = now
                activity.device_class = device_class
                activity.samples_sent += count
            else:
                self._sessions[session_id] = SessionActivity(
                    last_seen=now, device_class=device_class, samples_sent=count,
                )

    def record_stored(self, count: int) -> None:
        with self._lock:
            self.samples_stored += count

    def record_store_error(self) -> None:
        with self._lock:
            self.store_errors += 1

    def record_dataset(self, *, empty: bool) -> None:
        with self._lock:
            self.datasets_built += 1
            if empty:
                self.empty_datasets += 1

    def record_partition_miss(self) -> None:
        with self._lock:
            self.partition_misses += 1

    def record_render(self) -> None:
        with self._lock:
            self.renders += 1

    def update_queue_depth(self, depth: int) -> None:
        with self._lock:
            self.queue_depth = depth
            if depth > self.queue_max_depth:
                self.queue_max_depth = depth

    def _prune_stale_sessions(self, now: float) -> None:
        """Remove sessions not seen within the active window. Caller holds lock."""
        cutoff = now - self._active_window
        stale = [sid for sid, s in self._sessions.items() if s.last_seen < cutoff]
        for sid in stale:
            del self._sessions[sid]

    def snapshot(self) -> dict:
        """Return a JSON-serializable snapshot of all stats."""
        now_mono = time.monotonic()
        with self._lock:
            self._prune_stale_sessions(now_mono)

            by_device: dict[str, int] = {"desktop": 0, "tablet": 0, "mobile": 0}
            for s in self._sessions.values():
                by_device[s.device_class] = by_device.get(s.device_class, 0) + 1

            return {
                "uptime_seconds": round(time.time() - self._started_at, 1),
                "samples_received": self.samples_received,
                "samples_accepted": self.samples_accepted,
                "samples_discarded": self.samples_discarded,
                "samples_clamped": self.samples_clamped,
                "samples_stored": self.samples_stored,
                "batches_received": self.batches_received,
                "store_errors": self.store_errors,
                "queue_depth": self.queue_depth,
                "queue_max_depth_ever": self.queue_max_depth,
                "datasets_built": self.datasets_built,
                "empty_datasets": self.empty_datasets,
                "partition_misses": self.partition_misses,
                "renders": self.renders,
                "active_sessions": {
                    "total": len(self._sessions),
                    **by_device,
                    "window_seconds": self._active_window,
                },
            }
