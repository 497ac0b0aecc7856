"""Heatmap renderer — draws a dataset onto a DrawingSurface.

Rendering is a pure function of (dataset, canvas size, reference space):
no state survives between calls, so rendering the same dataset twice
issues the same commands.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog

from heatlens.core.colors import color_for, scroll_color_for
from heatlens.core.models import KIND_SCROLL, HeatmapDataset, check_dataset
from heatlens.core.reference import DEFAULT_REFERENCE, ReferenceSpace
from heatlens.surface.recording import DrawCommand, RecordingSurface

if TYPE_CHECKING:
    from heatlens.surface.base import DrawingSurface

log = structlog.get_logger()

BACKGROUND = "#f9fafb"
GRID_COLOR = "#e5e7eb"
NO_DATA_COLOR = "#6b7280"
NO_DATA_FONT = "20px sans-serif"
NO_DATA_TEXT = "No heatmap data available for this page"
LABEL_COLOR = "#ffffff"
LABEL_FONT = "bold 14px sans-serif"


@dataclass(frozen=True)
class CanvasSize:
    width: float
    height: float

    def __post_init__(self) -> None:
        if not (self.width > 0 and self.height > 0):
            raise ValueError(f"canvas must be positive, got {self.width}x{self.height}")


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def reach_label(value: float, session_count: int) -> str:
    return f"{_round_half_up(value / session_count * 100)}% reached"


def _draw_backdrop(surface: DrawingSurface, canvas: CanvasSize, spacing: float) -> None:
    surface.clear(canvas.width, canvas.height)
    surface.fill_rect(0, 0, canvas.width, canvas.height, BACKGROUND)
    x = 0.0
    while x < canvas.width:
        surface.draw_line(x, 0, x, canvas.height, GRID_COLOR)
        x += spacing
    y = 0.0
    while y < canvas.height:
        surface.draw_line(0, y, canvas.width, y, GRID_COLOR)
        y += spacing


def _render_points(dataset: HeatmapDataset, canvas: CanvasSize,
                   surface: DrawingSurface, ref: ReferenceSpace) -> None:
    radius_scale = canvas.width / ref.width if ref.scale_radius else 1.0

    placed = []
    for point in dataset.points:
        intensity = point.value / dataset.max
        x = point.x / ref.width * canvas.width
        y = point.y / ref.height * canvas.height
        radius = (ref.base_radius + intensity * ref.radius_spread) * radius_scale
        surface.draw_gradient_circle(x, y, radius, color_for(intensity))
        placed.append((x, y, intensity))

    # Exact sample locations on top of the blur.
    for x, y, intensity in placed:
        color = "#ffffff" if intensity > 0.5 else "#000000"
        surface.fill_circle(x, y, ref.marker_radius, color)


def _render_scroll(dataset: HeatmapDataset, canvas: CanvasSize,
                   surface: DrawingSurface, ref: ReferenceSpace) -> None:
    band_height = ref.band_height / ref.depth * canvas.height

    for point in sorted(dataset.points, key=lambda p: p.y):
        intensity = point.value / dataset.max
        y = point.y / ref.depth * canvas.height
        surface.fill_rect(0, y, canvas.width, band_height, scroll_color_for(intensity).css())
        surface.draw_text(reach_label(point.value, dataset.session_count),
                          10, y + band_height * 0.6, LABEL_COLOR, LABEL_FONT)


def render(
    dataset: HeatmapDataset,
    canvas: CanvasSize,
    surface: DrawingSurface,
    reference: ReferenceSpace = DEFAULT_REFERENCE,
) -> None:
    """Draw ``dataset`` on ``surface``.

    The backdrop (background and grid) is always drawn. An empty dataset
    yields a centered "no data" message. A dataset violating its
    invariants raises MalformedDataset before any data is drawn.
    """
    check_dataset(dataset)
    _draw_backdrop(surface, canvas, reference.grid_spacing)

    if dataset.is_empty:
        surface.draw_text(NO_DATA_TEXT, canvas.width / 2, canvas.height / 2,
                          NO_DATA_COLOR, NO_DATA_FONT, align="center")
        return

    if dataset.heatmap_type == KIND_SCROLL:
        _render_scroll(dataset, canvas, surface, reference)
    else:
        _render_points(dataset, canvas, surface, reference)

    log.debug("render_completed", type=dataset.heatmap_type,
              points=len(dataset.points), width=canvas.width, height=canvas.height)


def render_commands(
    dataset: HeatmapDataset,
    canvas: CanvasSize,
    reference: ReferenceSpace = DEFAULT_REFERENCE,
) -> list[DrawCommand]:
    """Render onto a fresh RecordingSurface and return its commands."""
    surface = RecordingSurface()
    render(dataset, canvas, surface, reference)
    return surface.commands
