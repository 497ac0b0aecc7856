"""Recording implementation of DrawingSurface.

Keeps every drawing call as an immutable command. Used to compare
renderings, and as the command list handed to non-Python canvases.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING, Union

if TYPE_CHECKING:
    from heatlens.core.colors import Rgba


@dataclass(frozen=True)
class Clear:
    width: float
    height: float


@dataclass(frozen=True)
class FillRect:
    x: float
    y: float
    width: float
    height: float
    color: str


@dataclass(frozen=True)
class DrawLine:
    x1: float
    y1: float
    x2: float
    y2: float
    color: str
    line_width: float


@dataclass(frozen=True)
class GradientCircle:
    x: float
    y: float
    radius: float
    center: Rgba


@dataclass(frozen=True)
class FillCircle:
    x: float
    y: float
    radius: float
    color: str


@dataclass(frozen=True)
class DrawText:
    text: str
    x: float
    y: float
    color: str
    font: str
    align: str


DrawCommand = Union[Clear, FillRect, DrawLine, GradientCircle, FillCircle, DrawText]


class RecordingSurface:
    """DrawingSurface that stores commands in call order."""

    def __init__(self) -> None:
        self.commands: list[DrawCommand] = []

    def clear(self, width: float, height: float) -> None:
        self.commands.append(Clear(width, height))

    def fill_rect(self, x: float, y: float, width: float, height: float, color: str) -> None:
        self.commands.append(FillRect(x, y, width, height, color))

    def draw_line(self, x1: float, y1: float, x2: float, y2: float, color: str,
                  line_width: float = 1.0) -> None:
        self.commands.append(DrawLine(x1, y1, x2, y2, color, line_width))

    def draw_gradient_circle(self, x: float, y: float, radius: float, center: Rgba) -> None:
        self.commands.append(GradientCircle(x, y, radius, center))

    def fill_circle(self, x: float, y: float, radius: float, color: str) -> None:
        self.commands.append(FillCircle(x, y, radius, color))

    def draw_text(self, text: str, x: float, y: float, color: str, font: str,
                  align: str = "left") -> None:
        self.commands.append(DrawText(text, x, y, color, font, align))

    def of_type(self, kind: type) -> list:
        return [c for c in self.commands if isinstance(c, kind)]

    def to_json(self) -> list[dict]:
        """Commands as JSON-serializable dicts, tagged with their op name."""
        out = []
        for cmd in self.commands:
            entry = {"op": type(cmd).__name__}
            entry.update(asdict(cmd))
            if isinstance(cmd, GradientCircle):
                entry["center"] = cmd.center.css()
            out.append(entry)
        return out
