"""Density aggregation — turns normalized points into a HeatmapDataset.

Point modes (click, move) bin points into a square grid; each non-empty
cell becomes one weighted point at the centroid of its samples.

Scroll mode counts reach: for each depth band, how many sessions scrolled
at least that far.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Sequence

from heatlens.core.models import (
    KIND_SCROLL,
    HeatmapDataset,
    HeatmapPoint,
    NormalizedPoint,
    PartitionKey,
)
from heatlens.core.reference import DEFAULT_REFERENCE, ReferenceSpace


@dataclass
class DensityCell:
    count: int = 0

    # Running sums for centroid update.
    _x_sum: float = 0.0
    _y_sum: float = 0.0

    def add_point(self, x: float, y: float) -> None:
        self.count += 1
        self._x_sum += x
        self._y_sum += y

    @property
    def x(self) -> float:
        return self._x_sum / self.count if self.count else 0.0

    @property
    def y(self) -> float:
        return self._y_sum / self.count if self.count else 0.0

    def to_point(self) -> HeatmapPoint:
        return HeatmapPoint(x=round(self.x, 2), y=round(self.y, 2), value=self.count)


def _cell_index(x: float, y: float, cell_size: float) -> tuple[int, int]:
    """(row, column) of the cell containing a reference-space point."""
    return int(y // cell_size), int(x // cell_size)


def bin_points(points: Iterable[NormalizedPoint], cell_size: float) -> dict[tuple[int, int], DensityCell]:
    """Accumulate points into grid cells keyed by (row, column)."""
    cells: dict[tuple[int, int], DensityCell] = {}
    for p in points:
        key = _cell_index(p.x, p.y, cell_size)
        cell = cells.get(key)
        if cell is None:
            cell = cells[key] = DensityCell()
        cell.add_point(p.x, p.y)
    return cells


def reach_bands(
    max_depths: Iterable[float],
    band_height: float,
    width: float,
    depth: float,
) -> list[HeatmapPoint]:
    """Scroll reach per band, in ascending depth order.

    A session counts toward a band when its deepest scroll reached the
    band's lower bound. Values never increase with depth. Bands tile
    [0, depth); a session at exactly ``depth`` falls in the last band.
    """
    depths = sorted(max_depths)
    if not depths:
        return []

    bands: list[HeatmapPoint] = []
    n_bands = min(
        int(math.floor(depths[-1] / band_height)) + 1,
        int(math.ceil(depth / band_height)),
    )
    below = 0  # sessions whose max depth is under the current lower bound
    for i in range(n_bands):
        lower = i * band_height
        while below < len(depths) and depths[below] < lower:
            below += 1
        reached = len(depths) - below
        if reached == 0:
            break
        bands.append(HeatmapPoint(x=0.0, y=lower, value=reached, width=width))
    return bands


def aggregate(
    points: Sequence[NormalizedPoint],
    partition: PartitionKey,
    reference: ReferenceSpace = DEFAULT_REFERENCE,
    available_pages: Iterable[str] = (),
) -> HeatmapDataset:
    """Aggregate the points of one partition.

    The caller has already filtered by site, page, device and window; the
    aggregator only accumulates what it is given.
    """
    for p in points:
        if p.kind != partition.heatmap_type:
            raise ValueError(
                f"{p.kind} point passed to a {partition.heatmap_type} aggregation"
            )

    sessions = {p.session_id for p in points}

    if partition.heatmap_type == KIND_SCROLL:
        deepest: dict[str, float] = {}
        for p in points:
            if p.y > deepest.get(p.session_id, -1.0):
                deepest[p.session_id] = p.y
        out = reach_bands(deepest.values(), reference.band_height,
                          reference.width, reference.depth)
    else:
        cells = bin_points(points, reference.cell_size)
        out = [cells[key].to_point() for key in sorted(cells)]

    return HeatmapDataset(
        site_id=partition.site_id,
        page_url=partition.page_url,
        heatmap_type=partition.heatmap_type,
        device_type=partition.device_type,
        points=tuple(out),
        max=max((p.value for p in out), default=0),
        session_count=len(sessions),
        total_events=len(points),
        available_pages=tuple(sorted(available_pages)),
    )
