"""Tests for dataset invariants, queries and wire serialization."""

from __future__ import annotations

import pytest

from heatlens.core.errors import MalformedDataset
from heatlens.core.models import HeatmapDataset, HeatmapPoint, HeatmapQuery


def _wire(**overrides) -> dict:
    data = {
        "site_id": 1,
        "page_url": "/",
        "heatmap_type": "click",
        "device_type": "desktop",
        "data": [{"x": 960, "y": 540, "value": 50}, {"x": 10, "y": 20, "value": 100}],
        "max": 100,
        "session_count": 10,
        "total_events": 150,
        "available_pages": ["/", "/pricing"],
    }
    data.update(overrides)
    return data


def test_round_trip_keeps_fields():
    dataset = HeatmapDataset.from_dict(_wire())
    assert dataset.points[0] == HeatmapPoint(960.0, 540.0, 50)
    assert dataset.available_pages == ("/", "/pricing")
    assert HeatmapDataset.from_dict(dataset.to_dict()) == dataset


def test_width_only_serialized_when_present():
    assert "width" not in HeatmapPoint(1, 2, 3).to_dict()
    assert HeatmapPoint(0, 50, 3, 1920).to_dict()["width"] == 1920


@pytest.mark.parametrize("overrides", [
    {"max": 0},                                   # points but no max
    {"max": 60},                                  # value above max
    {"session_count": 0},                         # points without sessions
    {"data": [], "max": 5},                       # max without points
    {"data": [{"x": 1, "y": 1, "value": -1}]},    # negative value
    {"heatmap_type": "hover"},
])
def test_invariant_violations_raise(overrides):
    with pytest.raises(MalformedDataset):
        HeatmapDataset.from_dict(_wire(**overrides))


def test_partial_payload_raises():
    data = _wire()
    del data["max"]
    with pytest.raises(MalformedDataset):
        HeatmapDataset.from_dict(data)


def test_empty_dataset_is_valid():
    dataset = HeatmapDataset.from_dict(_wire(data=[], max=0, session_count=0, total_events=0))
    assert dataset.is_empty


@pytest.mark.parametrize("overrides", [
    {"heatmap_type": "hover"},
    {"device_type": "watch"},
    {"days": 14},
])
def test_invalid_query_rejected(overrides):
    with pytest.raises(ValueError):
        HeatmapQuery(site_id=1, **overrides)


def test_partition_window():
    key = HeatmapQuery(site_id=3, page_url="/a", heatmap_type="scroll",
                       device_type="mobile", days=1).partition(now_ms=100_000_000)
    assert key.until_ms == 100_000_000
    assert key.since_ms == 100_000_000 - 86_400_000
    assert key.heatmap_type == "scroll"
