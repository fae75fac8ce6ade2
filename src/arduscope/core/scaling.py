from __future__ import annotations

from typing import Sequence

import numpy as np

from .frame import DEFAULT_VREF, WaveformFrame

DEFAULT_CODE_MAX = 1023


def scale(
    raw_codes: Sequence[int] | np.ndarray,
    vref: float = DEFAULT_VREF,
    code_max: int = DEFAULT_CODE_MAX,
) -> WaveformFrame:
    """
    Convert raw ADC codes into volts: ``code / code_max * vref``.

    Codes above ``code_max`` are passed through unclamped so that device-side
    anomalies stay visible on the display.
    """
    if code_max <= 0:
        raise ValueError("code_max must be positive")
    codes = np.asarray(raw_codes, dtype=np.float64)
    return WaveformFrame(codes / float(code_max) * float(vref))
