"""Reference space shared by all normalized points.

Every stored point lives in this fixed coordinate system, independent of
the viewport it was captured on and of the canvas it is rendered to.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ReferenceSpace:
    # Point modes (click, move).
    width: float = 1920.0
    height: float = 1080.0
    # Scroll mode: deepest scroll position represented.
    depth: float = 3000.0

    # Aggregation quantization.
    cell_size: float = 20.0
    band_height: float = 50.0

    # Point heat blob radius, in reference units: base + intensity * spread.
    base_radius: float = 30.0
    radius_spread: float = 20.0
    scale_radius: bool = True

    # Canvas decoration, in canvas pixels.
    grid_spacing: float = 100.0
    marker_radius: float = 3.0

    def __post_init__(self) -> None:
        for name in ("width", "height", "depth", "cell_size", "band_height", "grid_spacing"):
            if getattr(self, name) <= 0:
                raise ValueError(f"reference {name} must be > 0")
        if self.base_radius < 0 or self.radius_spread < 0 or self.marker_radius < 0:
            raise ValueError("radii must be >= 0")


DEFAULT_REFERENCE = ReferenceSpace()
