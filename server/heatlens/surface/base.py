"""Drawing surface interface (port) used by the renderer."""

from __future__ import annotations

from typing import Protocol, TYPE_CHECKING

if TYPE_CHECKING:
    from heatlens.core.colors import Rgba


class DrawingSurface(Protocol):
    """Port: a 2D surface of caller-chosen pixel size.

    Colors are CSS color strings except for gradient circles, which fade
    from an Rgba at the center to the same color fully transparent.
    """

    def clear(self, width: float, height: float) -> None: ...

    def fill_rect(self, x: float, y: float, width: float, height: float, color: str) -> None: ...

    def draw_line(self, x1: float, y1: float, x2: float, y2: float, color: str,
                  line_width: float = 1.0) -> None: ...

    def draw_gradient_circle(self, x: float, y: float, radius: float, center: Rgba) -> None: ...

    def fill_circle(self, x: float, y: float, radius: float, color: str) -> None: ...

    def draw_text(self, text: str, x: float, y: float, color: str, font: str,
                  align: str = "left") -> None: ...
