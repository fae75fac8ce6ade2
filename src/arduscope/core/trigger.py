"""Oscilloscope trigger gating.

:class:`TriggerEngine` decides, frame by frame, whether a new sweep replaces
the one on screen:

- ``AUTO`` forwards every frame (free-running display).
- ``NORMAL`` forwards only frames containing a threshold crossing with the
  configured slope; otherwise the previous frame stays on screen.
- ``SINGLE`` forwards the first qualifying frame and then stops until
  :meth:`TriggerEngine.rearm` is called.
"""

from __future__ import annotations

import enum
import logging
from typing import Optional

import numpy as np

from .frame import WaveformFrame

logger = logging.getLogger(__name__)


class TriggerMode(enum.Enum):
    AUTO = "auto"
    NORMAL = "normal"
    SINGLE = "single"


class Slope(enum.Enum):
    RISING = "rising"
    FALLING = "falling"


class TriggerPhase(enum.Enum):
    FREE_RUN = "free_run"
    ARMED_WAITING = "armed_waiting"
    STOPPED = "stopped"


def find_trigger_index(
    samples: np.ndarray,
    threshold: float,
    slope: Slope = Slope.RISING,
) -> Optional[int]:
    """
    Return the first ``i > 0`` where ``samples[i-1] -> samples[i]`` crosses
    ``threshold`` with the given slope, or ``None``.

    Rising: ``samples[i-1] < threshold <= samples[i]``.
    Falling: ``samples[i-1] > threshold >= samples[i]``.
    """
    values = np.asarray(samples, dtype=np.float64)
    if values.size < 2:
        return None
    prev = values[:-1]
    curr = values[1:]
    if slope is Slope.RISING:
        hits = (prev < threshold) & (threshold <= curr)
    else:
        hits = (prev > threshold) & (threshold >= curr)
    idx = np.flatnonzero(hits)
    if idx.size == 0:
        return None
    return int(idx[0]) + 1


class TriggerEngine:
    def __init__(
        self,
        mode: TriggerMode = TriggerMode.AUTO,
        threshold: float = 2.5,
        slope: Slope = Slope.RISING,
    ) -> None:
        self.threshold = float(threshold)
        self.slope = slope
        self._mode = mode
        self._phase = self._initial_phase(mode)
        self._captured = False

    @staticmethod
    def _initial_phase(mode: TriggerMode) -> TriggerPhase:
        if mode is TriggerMode.AUTO:
            return TriggerPhase.FREE_RUN
        return TriggerPhase.ARMED_WAITING

    @property
    def mode(self) -> TriggerMode:
        return self._mode

    @property
    def phase(self) -> TriggerPhase:
        return self._phase

    @property
    def captured(self) -> bool:
        """True while a Single capture is frozen on screen."""
        return self._captured

    def set_mode(self, mode: TriggerMode) -> None:
        """Switch mode; always resets the phase and drops any capture."""
        self._mode = mode
        self._phase = self._initial_phase(mode)
        self._captured = False
        logger.debug("Trigger mode -> %s (%s)", mode.value, self._phase.value)

    def set_threshold(self, threshold: float) -> None:
        self.threshold = float(threshold)

    def set_slope(self, slope: Slope) -> None:
        self.slope = slope

    def rearm(self) -> None:
        """Wait for a new qualifying edge. Idempotent."""
        self._phase = self._initial_phase(self._mode)
        self._captured = False

    def offer(self, frame: WaveformFrame) -> Optional[WaveformFrame]:
        """Return ``frame`` if it should be displayed, else ``None``."""
        if self._mode is TriggerMode.AUTO:
            return frame
        if self._phase is TriggerPhase.STOPPED:
            return None

        if find_trigger_index(frame.samples, self.threshold, self.slope) is None:
            return None

        if self._mode is TriggerMode.SINGLE:
            self._phase = TriggerPhase.STOPPED
            self._captured = True
            logger.info("Single trigger captured at %.3f V", self.threshold)
        return frame
