"""Headless PNG export of rendered draw commands via matplotlib's Agg canvas."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Iterable

from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.figure import Figure

from .commands import Align, DrawCommand, Line, Polyline, Rect, Style, Text
from .theme import DEFAULT_THEME, StyleSpec

logger = logging.getLogger(__name__)

_DPI = 100.0
# matplotlib measures line widths and fonts in points
_PX_TO_PT = 72.0 / _DPI


def build_figure(
    commands: Iterable[DrawCommand],
    width: float,
    height: float,
    theme: Dict[Style, StyleSpec] | None = None,
) -> Figure:
    """Draw ``commands`` onto a new figure sized ``width`` x ``height`` pixels."""
    palette = theme or DEFAULT_THEME
    fig = Figure(figsize=(max(1.0, width) / _DPI, max(1.0, height) / _DPI), dpi=_DPI)
    FigureCanvasAgg(fig)
    ax = fig.add_axes((0.0, 0.0, 1.0, 1.0))
    ax.set_xlim(0.0, width)
    ax.set_ylim(height, 0.0)
    ax.set_axis_off()

    for cmd in commands:
        spec = palette[cmd.style]
        if isinstance(cmd, Rect):
            fig.patch.set_facecolor(spec.color)
            ax.set_facecolor(spec.color)
        elif isinstance(cmd, Line):
            ax.plot(
                (cmd.x1, cmd.x2),
                (cmd.y1, cmd.y2),
                color=spec.color,
                linewidth=spec.width * _PX_TO_PT,
                solid_capstyle="butt",
            )
        elif isinstance(cmd, Polyline):
            if not cmd.points:
                continue
            xs, ys = zip(*cmd.points)
            ax.plot(xs, ys, color=spec.color, linewidth=spec.width * _PX_TO_PT)
        elif isinstance(cmd, Text):
            ax.text(
                cmd.x,
                cmd.y,
                cmd.text,
                color=spec.color,
                fontsize=spec.font_px * _PX_TO_PT,
                ha="right" if cmd.align is Align.RIGHT else "left",
                va="baseline",
                clip_on=False,
            )
    return fig


def export_png(
    commands: Iterable[DrawCommand],
    width: float,
    height: float,
    path: str | Path,
) -> Path:
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    fig = build_figure(commands, width, height)
    fig.savefig(out, dpi=_DPI, facecolor=fig.get_facecolor())
    logger.info("Wrote scope snapshot to %s", out)
    return out
