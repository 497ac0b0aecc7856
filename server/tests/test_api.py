"""Tests for the intake, heatmap and monitoring API endpoints."""

from __future__ import annotations

import json
import time

import pytest


def _sample(session_id: str = "session-001", **overrides) -> dict:
    sample = {
        "kind": "click",
        "x": 683,
        "y": 384,
        "viewport_width": 1366,
        "viewport_height": 768,
        "session_id": session_id,
        "page_url": "/",
        "device_class": "desktop",
        "timestamp_ms": int(time.time() * 1000),
    }
    sample.update(overrides)
    return sample


async def _post_samples(client, samples, site_id: int = 1):
    resp = await client.post(
        "/api/v1/samples",
        content=json.dumps({"site_id": site_id, "samples": samples}),
        headers={"content-type": "application/json"},
    )
    from heatlens.main import get_processor

    await get_processor().drain()
    return resp


@pytest.mark.asyncio
async def test_health(client):
    resp = await client.get("/api/v1/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "ok"
    assert set(data) == {"status", "version", "uptime_seconds", "queue_depth", "samples_stored"}


@pytest.mark.asyncio
async def test_stats_empty(client):
    resp = await client.get("/api/v1/stats")
    assert resp.status_code == 200
    data = resp.json()
    assert data["samples_received"] == 0
    assert data["active_sessions"]["total"] == 0


@pytest.mark.asyncio
async def test_config_endpoint(client):
    resp = await client.get("/api/v1/config")
    assert resp.status_code == 200
    data = resp.json()
    assert data["reference"]["width"] == 1920
    assert data["reference"]["height"] == 1080
    assert data["reference"]["depth"] == 3000
    assert data["allowed_days"] == [1, 7, 30, 90]


@pytest.mark.asyncio
async def test_submit_samples(client):
    resp = await _post_samples(client, [_sample(), _sample("session-002", kind="move")])
    assert resp.status_code == 200
    data = resp.json()
    assert data["accepted"] == 2
    assert data["discarded"] == 0
    assert data["queued"] == 2


@pytest.mark.asyncio
async def test_invalid_samples_discarded_and_counted(client):
    resp = await _post_samples(client, [
        _sample(),
        _sample("bad-1", viewport_width=0),
        _sample("bad-2", x="left"),
    ])
    assert resp.status_code == 200
    assert resp.json()["accepted"] == 1
    assert resp.json()["discarded"] == 2

    stats = (await client.get("/api/v1/stats")).json()
    assert stats["samples_discarded"] == 2
    assert stats["samples_stored"] == 1
    assert stats["active_sessions"]["total"] == 1


@pytest.mark.asyncio
async def test_non_finite_timestamp_is_discarded_not_fatal(client):
    # json.dumps writes the bare Infinity token, which json.loads accepts.
    resp = await _post_samples(client, [
        _sample(),
        _sample("inf-ts", timestamp_ms=float("inf")),
        _sample("inf-site", site_id=float("inf")),
    ])
    assert resp.status_code == 200
    assert resp.json()["accepted"] == 1
    assert resp.json()["discarded"] == 2


@pytest.mark.asyncio
async def test_bad_entries_do_not_sink_the_batch(client):
    resp = await _post_samples(client, [
        _sample("good-1"),
        _sample("good-2"),
        _sample("bad-ts", timestamp_ms="yesterday"),
        _sample("bad-site", site_id=1.5),
        "not a sample",
        None,
    ])
    assert resp.status_code == 200
    assert resp.json()["accepted"] == 2
    assert resp.json()["discarded"] == 4

    stats = (await client.get("/api/v1/stats")).json()
    assert stats["samples_discarded"] == 4
    assert stats["samples_stored"] == 2


@pytest.mark.asyncio
async def test_batch_site_id_applies_to_samples(client):
    await _post_samples(client, [_sample()], site_id=7)
    resp = await client.get("/api/v1/heatmaps/7/pages")
    assert resp.json()["pages"] == ["/"]

    resp = await _post_samples(client, [_sample()], site_id="seven")
    assert resp.status_code == 200
    assert resp.json()["discarded"] == 1


@pytest.mark.asyncio
async def test_invalid_json(client):
    resp = await client.post(
        "/api/v1/samples",
        content=b"not json at all",
        headers={"content-type": "application/json"},
    )
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_samples_must_be_list(client):
    resp = await client.post("/api/v1/samples", json={"samples": {"kind": "click"}})
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_batch_too_large(client):
    resp = await client.post("/api/v1/samples", json={"samples": [_sample()] * 51})
    assert resp.status_code == 413


@pytest.mark.asyncio
async def test_heatmap_data(client):
    await _post_samples(client, [_sample(f"s-{i}") for i in range(4)] + [_sample("s-x", x=10, y=10)])

    resp = await client.get("/api/v1/heatmaps/1/data", params={"page_url": "/", "type": "click"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["heatmap_type"] == "click"
    assert data["max"] == 4
    assert data["session_count"] == 5
    assert data["total_events"] == 5
    assert data["available_pages"] == ["/"]
    hot = max(data["data"], key=lambda p: p["value"])
    assert hot["x"] == pytest.approx(960)
    assert hot["y"] == pytest.approx(540)


@pytest.mark.asyncio
async def test_heatmap_empty_for_other_device(client):
    await _post_samples(client, [_sample()])
    resp = await client.get("/api/v1/heatmaps/1/data", params={"device": "mobile"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["data"] == []
    assert data["max"] == 0
    assert data["session_count"] == 0


@pytest.mark.asyncio
async def test_heatmap_unknown_page(client):
    resp = await client.get("/api/v1/heatmaps/1/data", params={"page_url": "/nope"})
    assert resp.status_code == 404
    data = resp.json()
    assert data["error"] == "no recorded pages yet"
    assert data["retryable"] is True


@pytest.mark.asyncio
async def test_heatmap_invalid_query(client):
    resp = await client.get("/api/v1/heatmaps/1/data", params={"days": 14})
    assert resp.status_code == 422
    resp = await client.get("/api/v1/heatmaps/1/data", params={"type": "hover"})
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_scroll_heatmap(client):
    await _post_samples(client, [
        _sample("a", kind="scroll", x=0, y=900),
        _sample("b", kind="scroll", x=0, y=200),
    ])
    resp = await client.get("/api/v1/heatmaps/1/data", params={"type": "scroll"})
    data = resp.json()
    ys = [p["y"] for p in data["data"]]
    assert ys == sorted(ys)
    assert data["data"][0]["value"] == 2
    assert data["data"][0]["width"] == 1920
    assert data["max"] == data["session_count"] == 2


@pytest.mark.asyncio
async def test_scroll_past_page_end_renders_on_canvas(client):
    await _post_samples(client, [_sample("deep", kind="scroll", x=0, y=5000)])
    resp = await client.get("/api/v1/heatmaps/1/commands",
                            params={"type": "scroll", "width": 800, "height": 600})
    assert resp.status_code == 200
    bands = [c for c in resp.json()["commands"] if c["op"] == "FillRect"][1:]
    assert len(bands) == 60
    assert all(b["y"] + b["height"] <= 600 + 1e-9 for b in bands)
    assert bands[-1]["y"] == pytest.approx(590)


@pytest.mark.asyncio
async def test_pages(client):
    await _post_samples(client, [_sample(page_url="/pricing"), _sample(page_url="/")])
    resp = await client.get("/api/v1/heatmaps/1/pages")
    assert resp.json()["pages"] == ["/", "/pricing"]


@pytest.mark.asyncio
async def test_render_svg(client):
    await _post_samples(client, [_sample()])
    resp = await client.get("/api/v1/heatmaps/1/render.svg", params={"width": 800, "height": 600})
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("image/svg+xml")
    assert resp.text.startswith("<svg")
    assert "radialGradient" in resp.text

    stats = (await client.get("/api/v1/stats")).json()
    assert stats["renders"] == 1


@pytest.mark.asyncio
async def test_render_commands_no_data(client):
    await _post_samples(client, [_sample()])
    resp = await client.get("/api/v1/heatmaps/1/commands", params={"type": "move"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["width"] == 1200
    assert data["height"] == 800
    ops = [c["op"] for c in data["commands"]]
    assert ops[:2] == ["Clear", "FillRect"]
    assert ops[-1] == "DrawText"
    assert data["commands"][-1]["text"] == "No heatmap data available for this page"


@pytest.mark.asyncio
async def test_legend(client):
    resp = await client.get("/api/v1/heatmaps/legend")
    assert [b["label"] for b in resp.json()["bands"]] == ["Low", "Medium", "High", "Very High"]
