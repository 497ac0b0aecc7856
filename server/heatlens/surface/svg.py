"""SVG implementation of DrawingSurface.

Builds a standalone SVG document so a rendering can be served over HTTP
without a graphics context. Shapes are painted in call order with normal
alpha compositing, so translucent blobs accumulate where they overlap.
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from xml.sax.saxutils import escape, quoteattr

if TYPE_CHECKING:
    from heatlens.core.colors import Rgba

_ANCHORS = {"left": "start", "center": "middle", "right": "end"}


def _num(value: float) -> str:
    return f"{round(value, 3):g}"


def _split_font(font: str) -> tuple[str, str, str]:
    """Split a CSS font shorthand like 'bold 14px sans-serif'."""
    weight = "normal"
    parts = font.split()
    if parts and parts[0] == "bold":
        weight = "bold"
        parts = parts[1:]
    size = parts[0] if parts else "12px"
    family = " ".join(parts[1:]) or "sans-serif"
    return weight, size, family


class SvgSurface:
    """DrawingSurface that accumulates SVG elements."""

    def __init__(self, width: float, height: float) -> None:
        self.width = width
        self.height = height
        self._defs: list[str] = []
        self._body: list[str] = []
        self._next_gradient_id = 0

    def clear(self, width: float, height: float) -> None:
        self.width = width
        self.height = height
        self._defs.clear()
        self._body.clear()
        self._next_gradient_id = 0

    def fill_rect(self, x: float, y: float, width: float, height: float, color: str) -> None:
        self._body.append(
            f'<rect x="{_num(x)}" y="{_num(y)}" width="{_num(width)}" '
            f'height="{_num(height)}" fill={quoteattr(color)}/>'
        )

    def draw_line(self, x1: float, y1: float, x2: float, y2: float, color: str,
                  line_width: float = 1.0) -> None:
        self._body.append(
            f'<line x1="{_num(x1)}" y1="{_num(y1)}" x2="{_num(x2)}" y2="{_num(y2)}" '
            f'stroke={quoteattr(color)} stroke-width="{_num(line_width)}"/>'
        )

    def draw_gradient_circle(self, x: float, y: float, radius: float, center: Rgba) -> None:
        gid = f"g{self._next_gradient_id}"
        self._next_gradient_id += 1
        self._defs.append(
            f'<radialGradient id="{gid}">'
            f'<stop offset="0" stop-color="rgb{center.rgb}" '
            f'stop-opacity="{_num(center.a)}"/>'
            f'<stop offset="1" stop-color="rgb{center.rgb}" stop-opacity="0"/>'
            f'</radialGradient>'
        )
        self._body.append(
            f'<circle cx="{_num(x)}" cy="{_num(y)}" r="{_num(radius)}" fill="url(#{gid})"/>'
        )

    def fill_circle(self, x: float, y: float, radius: float, color: str) -> None:
        self._body.append(
            f'<circle cx="{_num(x)}" cy="{_num(y)}" r="{_num(radius)}" fill={quoteattr(color)}/>'
        )

    def draw_text(self, text: str, x: float, y: float, color: str, font: str,
                  align: str = "left") -> None:
        weight, size, family = _split_font(font)
        self._body.append(
            f'<text x="{_num(x)}" y="{_num(y)}" fill={quoteattr(color)} '
            f'font-family={quoteattr(family)} font-size="{size}" font-weight="{weight}" '
            f'text-anchor="{_ANCHORS.get(align, "start")}">{escape(text)}</text>'
        )

    def to_svg(self) -> str:
        defs = f"<defs>{''.join(self._defs)}</defs>" if self._defs else ""
        return (
            f'<svg xmlns="http://www.w3.org/2000/svg" width="{_num(self.width)}" '
            f'height="{_num(self.height)}" viewBox="0 0 {_num(self.width)} {_num(self.height)}">'
            f"{defs}{''.join(self._body)}</svg>"
        )
