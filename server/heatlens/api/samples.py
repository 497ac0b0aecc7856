"""Sample intake API endpoint.

This is the thin FastAPI adapter. It parses JSON sample batches into
internal models and calls the processor.
"""

from __future__ import annotations

import json

from fastapi import APIRouter, Request, Response

from heatlens.core.models import RawSample

router = APIRouter(prefix="/api/v1")


def _parse_json_sample(data, default_site_id) -> RawSample:
    """Parse one sample. Values are passed through unchecked; the normalizer validates them."""
    if not isinstance(data, dict):
        # Rejected by the normalizer as a sample without a kind.
        data = {}
    return RawSample(
        kind=data.get("kind", ""),
        x=data.get("x", 0),
        y=data.get("y", 0),
        viewport_width=data.get("viewport_width", 0),
        viewport_height=data.get("viewport_height", 0),
        session_id=str(data.get("session_id", "")),
        page_url=str(data.get("page_url", "/")),
        device_class=data.get("device_class", "desktop"),
        timestamp_ms=data.get("timestamp_ms", 0),
        site_id=data.get("site_id", default_site_id),
    )


def _json_response(result: dict, status: int) -> Response:
    return Response(
        content=json.dumps(result),
        status_code=status,
        media_type="application/json",
    )


@router.post("/samples")
async def receive_samples(request: Request) -> Response:
    """Receive a batch of interaction samples.

    Body: {"site_id": 1, "samples": [{"kind": "click", "x": 683, "y": 384,
    "viewport_width": 1366, "viewport_height": 768, ...}]}
    """
    from heatlens.main import get_config, get_processor

    body_bytes = await request.body()
    try:
        body = json.loads(body_bytes)
    except (json.JSONDecodeError, UnicodeDecodeError):
        return _json_response({"accepted": 0, "error": "invalid JSON"}, 400)

    raw_samples = body.get("samples") if isinstance(body, dict) else None
    if not isinstance(raw_samples, list):
        return _json_response({"accepted": 0, "error": "samples must be a list"}, 422)

    max_batch = get_config().limits.max_batch_size
    if len(raw_samples) > max_batch:
        return _json_response(
            {"accepted": 0, "error": f"batch of {len(raw_samples)} exceeds {max_batch}"}, 413,
        )

    default_site_id = body.get("site_id", 0)
    samples = [_parse_json_sample(s, default_site_id) for s in raw_samples]

    result = await get_processor().process_batch(samples)
    return _json_response({
        "accepted": result.accepted,
        "discarded": result.discarded,
        "clamped": result.clamped,
        "queued": result.queued,
    }, 200)
