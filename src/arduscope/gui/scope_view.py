"""QPainter display surface for the scope screen."""

from __future__ import annotations

from typing import Dict, Optional

from PySide6.QtCore import QPointF
from PySide6.QtGui import QColor, QFont, QFontMetricsF, QPainter, QPaintEvent, QPen, QPolygonF
from PySide6.QtWidgets import QWidget

from ..core.frame import WaveformFrame
from ..render import Align, DrawCommand, Line, Polyline, Rect, RenderConfig, Style, Text, render
from ..render.theme import DEFAULT_THEME, StyleSpec
from ..tools.debug import time_block

# Pixel clamp so anomalous samples cannot overflow Qt's integer geometry
_COORD_LIMIT = 1.0e6


def _clamp(value: float) -> float:
    return max(-_COORD_LIMIT, min(_COORD_LIMIT, value))


class ScopeView(QWidget):
    """
    Paint the commands produced by :func:`arduscope.render.render`.

    The view keeps only the last displayed frame so it can redraw on resize.
    """

    def __init__(
        self,
        parent: QWidget | None = None,
        *,
        voltage_scale: float = 5.0,
        grid_divisions: int = 10,
        sample_rate_hz: float = 10_000.0,
        theme: Dict[Style, StyleSpec] | None = None,
    ) -> None:
        super().__init__(parent)
        self.setMinimumSize(320, 240)
        self._frame: Optional[WaveformFrame] = None
        self._voltage_scale = float(voltage_scale)
        self._grid_divisions = int(grid_divisions)
        self._sample_rate_hz = float(sample_rate_hz)
        self._theme = theme or DEFAULT_THEME

    def set_frame(self, frame: WaveformFrame) -> None:
        self._frame = frame
        self.update()

    def clear(self) -> None:
        self._frame = None
        self.update()

    def set_voltage_scale(self, volts: float) -> None:
        self._voltage_scale = float(volts)
        self.update()

    def render_config(self) -> RenderConfig:
        return RenderConfig(
            width=float(self.width()),
            height=float(self.height()),
            voltage_scale=self._voltage_scale,
            grid_divisions=self._grid_divisions,
            sample_rate_hz=self._sample_rate_hz,
        )

    def paintEvent(self, event: QPaintEvent) -> None:
        commands = render(self._frame, self.render_config())
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        with time_block("ScopeView.paint"):
            for cmd in commands:
                self._paint(painter, cmd)
        painter.end()

    def _paint(self, painter: QPainter, cmd: DrawCommand) -> None:
        spec = self._theme[cmd.style]
        color = QColor(spec.color)
        if isinstance(cmd, Rect):
            painter.fillRect(int(cmd.x), int(cmd.y), int(cmd.width), int(cmd.height), color)
        elif isinstance(cmd, Line):
            painter.setPen(QPen(color, spec.width))
            painter.drawLine(
                QPointF(cmd.x1, cmd.y1),
                QPointF(cmd.x2, cmd.y2),
            )
        elif isinstance(cmd, Polyline):
            painter.setPen(QPen(color, spec.width))
            polygon = QPolygonF([QPointF(x, _clamp(y)) for x, y in cmd.points])
            painter.drawPolyline(polygon)
        elif isinstance(cmd, Text):
            font = QFont(painter.font())
            font.setPixelSize(max(1, int(spec.font_px)))
            painter.setFont(font)
            painter.setPen(color)
            x = cmd.x
            if cmd.align is Align.RIGHT:
                x -= QFontMetricsF(font).horizontalAdvance(cmd.text)
            painter.drawText(QPointF(x, cmd.y), cmd.text)
