"""Intensity → color ramp shared by every rendering mode.

Four bands, each a quarter of [0, 1]: blue, green, amber, red. Within a
band the point-mode alpha grows linearly from 0 to the band's ceiling;
scroll mode uses the same band colors with a higher alpha floor so that
faint bands stay legible.
"""

from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class Rgba:
    r: int
    g: int
    b: int
    a: float

    @property
    def rgb(self) -> tuple[int, int, int]:
        return (self.r, self.g, self.b)

    def css(self) -> str:
        return f"rgba({self.r}, {self.g}, {self.b}, {round(self.a, 4):g})"


@dataclass(frozen=True)
class Band:
    index: int
    lower: float
    rgb: tuple[int, int, int]
    ceiling_alpha: float   # point mode, reached at the top of the band
    scroll_alpha: float    # scroll mode, at the bottom of the band
    label: str

    def point_alpha(self, intensity: float) -> float:
        return self.ceiling_alpha * (intensity - self.lower) * 4

    def scroll_band_alpha(self, intensity: float) -> float:
        return self.scroll_alpha + (intensity - self.lower) * 2


BANDS: tuple[Band, ...] = (
    Band(1, 0.0, (59, 130, 246), 0.6, 0.3, "Low"),
    Band(2, 0.25, (34, 197, 94), 0.6, 0.3, "Medium"),
    Band(3, 0.5, (234, 179, 8), 0.7, 0.4, "High"),
    Band(4, 0.75, (239, 68, 68), 0.8, 0.5, "Very High"),
)


def band_for(intensity: float) -> Band:
    """Band containing ``intensity``. Bands are half-open except the last."""
    if not math.isfinite(intensity) or not 0.0 <= intensity <= 1.0:
        raise ValueError(f"intensity must be within [0, 1], got {intensity}")
    for band in reversed(BANDS):
        if intensity >= band.lower:
            return band
    return BANDS[0]


def color_for(intensity: float) -> Rgba:
    """Point-mode color: band color at the band's linear alpha."""
    band = band_for(intensity)
    return Rgba(*band.rgb, band.point_alpha(intensity))


def scroll_color_for(intensity: float) -> Rgba:
    band = band_for(intensity)
    return Rgba(*band.rgb, band.scroll_band_alpha(intensity))


def legend() -> list[dict]:
    """Legend entries, one per band, at the band's ceiling alpha."""
    return [
        {
            "label": band.label,
            "from": band.lower,
            "color": Rgba(*band.rgb, band.ceiling_alpha).css(),
        }
        for band in BANDS
    ]
