#!/usr/bin/env python3
"""HeatLens interaction simulator.

Generates realistic click, movement and scroll traffic for testing the server.

Usage:
    # 20 sessions browsing three pages for one minute
    python -m tools.simulator.simulate --server http://localhost:8000 --sessions 20 --duration 60

    # Mobile-only traffic on a single page
    python -m tools.simulator.simulate --devices mobile --pages /pricing

    # Stress test: 200 sessions, fast event rate
    python -m tools.simulator.simulate --sessions 200 --events-per-second 20
"""

from __future__ import annotations

import argparse
import asyncio
import json
import random
import time
import uuid
from dataclasses import dataclass, field

import httpx

# Typical viewports per device class (width, height).
VIEWPORTS = {
    "desktop": [(1920, 1080), (1366, 768), (1536, 864), (1440, 900), (2560, 1440)],
    "tablet": [(768, 1024), (810, 1080), (820, 1180)],
    "mobile": [(375, 667), (390, 844), (412, 915), (360, 800)],
}

# Relative positions (0-1) that attract clicks: nav, hero CTA, pricing card.
HOTSPOTS = [(0.1, 0.05), (0.5, 0.45), (0.75, 0.6), (0.9, 0.05)]


@dataclass
class SimSession:
    session_id: str
    device_class: str
    page_url: str
    viewport: tuple[int, int]
    pointer: tuple[float, float]
    scroll_depth: float = 0.0
    # How far down this visitor is willing to scroll.
    patience: float = 1500.0
    buffer: list[dict] = field(default_factory=list)
    samples_sent: int = 0
    errors: int = 0


def make_sample(session: SimSession, kind: str, x: float, y: float, site_id: int) -> dict:
    w, h = session.viewport
    return {
        "kind": kind,
        "x": round(x, 1),
        "y": round(y, 1),
        "viewport_width": w,
        "viewport_height": h,
        "session_id": session.session_id,
        "page_url": session.page_url,
        "device_class": session.device_class,
        "timestamp_ms": int(time.time() * 1000),
        "site_id": site_id,
    }


def step_session(session: SimSession, site_id: int) -> None:
    """Advance a session by one event: move, maybe click, maybe scroll."""
    w, h = session.viewport

    # Drift toward a random hotspot.
    hx, hy = random.choice(HOTSPOTS)
    px, py = session.pointer
    px += (hx * w - px) * random.uniform(0.1, 0.4) + random.gauss(0, w * 0.02)
    py += (hy * h - py) * random.uniform(0.1, 0.4) + random.gauss(0, h * 0.02)
    session.pointer = (px, py)
    session.buffer.append(make_sample(session, "move", px, py, site_id))

    if random.random() < 0.15:
        session.buffer.append(make_sample(
            session, "click", px + random.gauss(0, 4), py + random.gauss(0, 4), site_id,
        ))

    if session.scroll_depth < session.patience and random.random() < 0.3:
        session.scroll_depth += random.uniform(50, 300)
        session.buffer.append(make_sample(session, "scroll", 0, session.scroll_depth, site_id))


async def flush(client: httpx.AsyncClient, server_url: str, session: SimSession) -> None:
    if not session.buffer:
        return
    payload = {"samples": session.buffer}
    try:
        resp = await client.post(
            f"{server_url}/api/v1/samples",
            content=json.dumps(payload),
            headers={"content-type": "application/json"},
        )
        if resp.status_code == 200:
            session.samples_sent += resp.json()["accepted"]
        else:
            session.errors += 1
    except httpx.RequestError:
        session.errors += 1
    session.buffer = []


async def run_session(
    client: httpx.AsyncClient,
    session: SimSession,
    args: argparse.Namespace,
) -> None:
    """Simulate a single browsing session, flushing a batch every second."""
    interval = 1.0 / args.events_per_second
    end_time = time.monotonic() + args.duration
    last_flush = time.monotonic()

    while time.monotonic() < end_time:
        step_session(session, args.site_id)
        if time.monotonic() - last_flush >= 1.0:
            await flush(client, args.server, session)
            last_flush = time.monotonic()
        await asyncio.sleep(interval)

    await flush(client, args.server, session)


async def run_simulation(args: argparse.Namespace) -> None:
    """Run the full simulation."""
    sessions = []
    for _ in range(args.sessions):
        device_class = random.choice(args.devices)
        w, h = random.choice(VIEWPORTS[device_class])
        sessions.append(SimSession(
            session_id=str(uuid.uuid4()),
            device_class=device_class,
            page_url=random.choice(args.pages),
            viewport=(w, h),
            pointer=(random.uniform(0, w), random.uniform(0, h)),
            patience=random.expovariate(1 / 1200),
        ))

    print(f"Starting simulation: {args.sessions} sessions, {args.events_per_second} events/s each")
    print(f"  Site: {args.site_id}")
    print(f"  Pages: {', '.join(args.pages)}")
    print(f"  Devices: {', '.join(args.devices)}")
    print(f"  Duration: {args.duration}s")
    print(f"  Server: {args.server}")
    print()

    start = time.monotonic()

    async with httpx.AsyncClient(timeout=10.0) as client:
        await asyncio.gather(*(run_session(client, s, args) for s in sessions))

        elapsed = time.monotonic() - start
        total = sum(s.samples_sent for s in sessions)
        errors = sum(s.errors for s in sessions)

        print(f"\nSimulation complete in {elapsed:.1f}s")
        print(f"  Samples accepted: {total}")
        print(f"  Errors: {errors}")
        print(f"  Throughput: {total / elapsed:.1f} samples/sec")

        # Check server stats
        try:
            resp = await client.get(f"{args.server}/api/v1/stats")
            if resp.status_code == 200:
                stats = resp.json()
                print("\nServer stats:")
                print(f"  Samples received: {stats['samples_received']}")
                print(f"  Samples discarded: {stats['samples_discarded']}")
                print(f"  Samples stored: {stats['samples_stored']}")
                print(f"  Active sessions: {stats['active_sessions']['total']}")
                print(f"  Queue depth: {stats['queue_depth']}")
        except httpx.RequestError as exc:
            print(f"\nCould not fetch server stats: {exc}")


def main():
    parser = argparse.ArgumentParser(description="HeatLens interaction simulator")
    parser.add_argument("--server", default="http://localhost:8000", help="Server URL")
    parser.add_argument("--site-id", type=int, default=1, help="Site id to report under")
    parser.add_argument("--sessions", type=int, default=20, help="Number of simulated sessions")
    parser.add_argument("--duration", type=int, default=60, help="Simulation duration in seconds")
    parser.add_argument("--events-per-second", type=float, default=4,
                        help="Pointer events per second per session")
    parser.add_argument("--pages", type=str, default="/,/pricing,/blog",
                        help="Comma-separated page URLs")
    parser.add_argument("--devices", type=str, default="desktop,tablet,mobile",
                        help="Comma-separated device classes")

    args = parser.parse_args()
    args.pages = [p for p in args.pages.split(",") if p]
    args.devices = [d for d in args.devices.split(",") if d in VIEWPORTS]
    if not args.devices:
        parser.error("no valid device class in --devices")

    asyncio.run(run_simulation(args))


if __name__ == "__main__":
    main()
