"""Backend-neutral drawing primitives produced by :func:`render`.

Coordinates are in viewport pixels with the origin at the top-left corner
and ``y`` growing downwards, the convention of both QPainter and most
canvas APIs. Text positions name the baseline anchor point.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Tuple, Union

Point = Tuple[float, float]


class Style(enum.Enum):
    BACKGROUND = "background"
    GRID_MINOR = "grid_minor"
    GRID_MAJOR = "grid_major"
    GRID_CENTER = "grid_center"
    MARKER = "marker"
    WAVEFORM = "waveform"
    LABEL = "label"
    STATUS = "status"


class Align(enum.Enum):
    LEFT = "left"
    RIGHT = "right"


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float
    style: Style = Style.BACKGROUND


@dataclass(frozen=True)
class Line:
    x1: float
    y1: float
    x2: float
    y2: float
    style: Style


@dataclass(frozen=True)
class Polyline:
    points: Tuple[Point, ...]
    style: Style = Style.WAVEFORM

    def __len__(self) -> int:
        return len(self.points)


@dataclass(frozen=True)
class Text:
    x: float
    y: float
    text: str
    style: Style
    align: Align = Align.LEFT


DrawCommand = Union[Rect, Line, Polyline, Text]

__all__ = ["Align", "DrawCommand", "Line", "Point", "Polyline", "Rect", "Style", "Text"]
