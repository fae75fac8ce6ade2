"""Default colours and stroke widths for every draw style."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict

from .commands import Style


@dataclass(frozen=True)
class StyleSpec:
    color: str
    width: float = 1.0
    font_px: float = 0.0


DEFAULT_THEME: Dict[Style, StyleSpec] = {
    Style.BACKGROUND: StyleSpec("#0A1E1E"),
    Style.GRID_MINOR: StyleSpec("#132B2B", 1.0),
    Style.GRID_MAJOR: StyleSpec("#1A3535", 1.0),
    Style.GRID_CENTER: StyleSpec("#2A4545", 2.0),
    Style.MARKER: StyleSpec("#FF8844", 3.0),
    Style.WAVEFORM: StyleSpec("#00FF88", 3.0),
    Style.LABEL: StyleSpec("#88FFAA", font_px=20.0),
    Style.STATUS: StyleSpec("#666666", font_px=18.0),
}
