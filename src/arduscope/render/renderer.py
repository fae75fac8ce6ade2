"""Map a waveform frame onto the scope screen.

:func:`render` is a pure function: the same frame and configuration always
produce the same command tuple, and neither input is modified. Display
surfaces (the Qt widget, the PNG exporter) only translate commands into
their own drawing calls.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from ..core.frame import WaveformFrame
from .commands import Align, DrawCommand, Line, Polyline, Rect, Style, Text

MINOR_SUBDIVISIONS = 5
MARKER_SIZE = 20.0
LABEL_INSET_X = 10.0
LABEL_OFFSET_Y = 20.0
STATUS_INSET = 10.0


@dataclass(frozen=True)
class RenderConfig:
    """Display parameters owned by the UI and passed in on every draw."""

    width: float
    height: float
    voltage_scale: float = 5.0
    grid_divisions: int = 10
    sample_rate_hz: float = 10_000.0

    def __post_init__(self) -> None:
        if self.voltage_scale <= 0:
            raise ValueError("voltage_scale must be positive")
        if self.grid_divisions <= 0:
            raise ValueError("grid_divisions must be positive")
        if self.width < 0 or self.height < 0:
            raise ValueError("viewport size must not be negative")


def voltage_to_y(voltage: float, config: RenderConfig) -> float:
    """0 V maps to the bottom edge, ``voltage_scale`` to the top; no clipping."""
    return config.height * (1.0 - voltage / config.voltage_scale)


def voltage_labels(config: RenderConfig) -> List[str]:
    div = config.grid_divisions
    return [
        f"{config.voltage_scale - i * config.voltage_scale / div:.1f}"
        for i in range(div + 1)
    ]


def _grid(config: RenderConfig) -> List[DrawCommand]:
    w, h, div = config.width, config.height, config.grid_divisions
    div_x = w / div
    div_y = h / div
    center = div // 2
    out: List[DrawCommand] = []

    for i in range(div + 1):
        x = i * div_x
        style = Style.GRID_CENTER if i == center else Style.GRID_MAJOR
        out.append(Line(x, 0.0, x, h, style))
        if i < div:
            for j in range(1, MINOR_SUBDIVISIONS):
                sub_x = x + div_x / MINOR_SUBDIVISIONS * j
                out.append(Line(sub_x, 0.0, sub_x, h, Style.GRID_MINOR))

    for i in range(div + 1):
        y = i * div_y
        style = Style.GRID_CENTER if i == center else Style.GRID_MAJOR
        out.append(Line(0.0, y, w, y, style))
        if i < div:
            for j in range(1, MINOR_SUBDIVISIONS):
                sub_y = y + div_y / MINOR_SUBDIVISIONS * j
                out.append(Line(0.0, sub_y, w, sub_y, Style.GRID_MINOR))
    return out


def _center_marker(config: RenderConfig) -> List[DrawCommand]:
    cx = config.width / 2.0
    cy = config.height / 2.0
    return [
        Line(cx - MARKER_SIZE, cy, cx + MARKER_SIZE, cy, Style.MARKER),
        Line(cx, cy - MARKER_SIZE, cx, cy + MARKER_SIZE, Style.MARKER),
    ]


def _labels(config: RenderConfig) -> List[DrawCommand]:
    div_y = config.height / config.grid_divisions
    return [
        Text(LABEL_INSET_X, i * div_y + LABEL_OFFSET_Y, label, Style.LABEL)
        for i, label in enumerate(voltage_labels(config))
    ]


def _waveform(frame: WaveformFrame, config: RenderConfig) -> Polyline:
    n = len(frame)
    x_step = config.width / n
    ys = config.height * (1.0 - frame.samples / config.voltage_scale)
    points = tuple((i * x_step, float(y)) for i, y in enumerate(ys))
    return Polyline(points, Style.WAVEFORM)


def status_text(frame: Optional[WaveformFrame], config: RenderConfig) -> Tuple[str, str]:
    """Return the (elapsed marker, sample annotation) pair."""
    if frame is None:
        return "0s", "0 Sa/s"
    return "0s", f"{config.sample_rate_hz:.0f} Sa/s  {len(frame)} Sa"


def render(frame: Optional[WaveformFrame], config: RenderConfig) -> Tuple[DrawCommand, ...]:
    if config.width == 0 or config.height == 0:
        return ()

    commands: List[DrawCommand] = [Rect(0.0, 0.0, config.width, config.height)]
    commands.extend(_grid(config))
    commands.extend(_center_marker(config))
    commands.extend(_labels(config))
    if frame is not None and len(frame) > 0:
        commands.append(_waveform(frame, config))

    elapsed, annotation = status_text(frame, config)
    baseline = config.height - STATUS_INSET
    commands.append(Text(STATUS_INSET, baseline, elapsed, Style.STATUS))
    commands.append(
        Text(config.width - STATUS_INSET, baseline, annotation, Style.STATUS, Align.RIGHT)
    )
    return tuple(commands)
