"""Coordinate normalizer — maps raw samples into the reference space.

A click at 50% of a 1366-wide viewport and one at 50% of a 1920-wide
viewport must land in the same density cell, so every sample is rescaled
before it is stored.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Iterable

import structlog

from heatlens.core.errors import InvalidSample
from heatlens.core.models import (
    DEVICE_CLASSES,
    HEATMAP_TYPES,
    KIND_SCROLL,
    NormalizedPoint,
    RawSample,
)
from heatlens.core.reference import DEFAULT_REFERENCE, ReferenceSpace

log = structlog.get_logger()


def _clamp(value: float, upper: float) -> float:
    return min(max(value, 0.0), upper)


def _is_integer(value) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and math.isfinite(value) and value.is_integer()


def validate(sample: RawSample) -> None:
    """Raise InvalidSample if the sample cannot be placed in reference space."""
    if sample.kind not in HEATMAP_TYPES:
        raise InvalidSample(f"unknown kind {sample.kind!r}")
    if sample.device_class not in DEVICE_CLASSES:
        raise InvalidSample(f"unknown device class {sample.device_class!r}")
    if not sample.session_id:
        raise InvalidSample("session_id is required")
    for name in ("x", "y", "viewport_width", "viewport_height"):
        value = getattr(sample, name)
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
            raise InvalidSample(f"{name} must be a finite number, got {value!r}")
    if sample.viewport_width <= 0 or sample.viewport_height <= 0:
        raise InvalidSample(
            f"viewport must be positive, got {sample.viewport_width}x{sample.viewport_height}"
        )
    for name in ("timestamp_ms", "site_id"):
        value = getattr(sample, name)
        if not _is_integer(value) or value < 0:
            raise InvalidSample(f"{name} must be a non-negative integer, got {value!r}")


def normalize(sample: RawSample, reference: ReferenceSpace = DEFAULT_REFERENCE) -> NormalizedPoint:
    """Rescale one sample into the reference space, clamping out-of-range values."""
    validate(sample)

    raw_x = sample.x * (reference.width / sample.viewport_width)
    if sample.kind == KIND_SCROLL:
        # Scroll depth is independent of viewport width.
        raw_y = sample.y
        y_limit = reference.depth
    else:
        raw_y = sample.y * (reference.height / sample.viewport_height)
        y_limit = reference.height

    x = _clamp(raw_x, reference.width)
    y = _clamp(raw_y, y_limit)

    return NormalizedPoint(
        kind=sample.kind,
        x=x,
        y=y,
        session_id=sample.session_id,
        site_id=int(sample.site_id),
        page_url=sample.page_url,
        device_class=sample.device_class,
        timestamp_ms=int(sample.timestamp_ms),
        clamped=(x != raw_x or y != raw_y),
    )


@dataclass
class NormalizationResult:
    points: list[NormalizedPoint] = field(default_factory=list)
    discarded: int = 0
    clamped: int = 0


def normalize_many(
    samples: Iterable[RawSample],
    reference: ReferenceSpace = DEFAULT_REFERENCE,
) -> NormalizationResult:
    """Normalize a batch, discarding (and counting) invalid samples."""
    result = NormalizationResult()
    for sample in samples:
        try:
            point = normalize(sample, reference)
        except InvalidSample as exc:
            result.discarded += 1
            log.debug("sample_discarded", session=str(sample.session_id)[:8],
                      kind=sample.kind, reason=str(exc))
            continue
        if point.clamped:
            result.clamped += 1
        result.points.append(point)
    return result
