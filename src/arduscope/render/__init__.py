"""Turn waveform frames into backend-neutral drawing commands.

:func:`render` produces the commands; the Qt widget in :mod:`arduscope.gui`
and :func:`~arduscope.render.mpl_export.export_png` paint them. The exporter
is not imported here so that the core stays usable without matplotlib.
"""

from .commands import Align, DrawCommand, Line, Polyline, Rect, Style, Text
from .renderer import RenderConfig, render, voltage_labels, voltage_to_y

__all__ = [
    "Align",
    "DrawCommand",
    "Line",
    "Polyline",
    "Rect",
    "RenderConfig",
    "Style",
    "Text",
    "render",
    "voltage_labels",
    "voltage_to_y",
]
