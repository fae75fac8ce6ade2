"""Synthetic frame source used when no device is attached."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .frame import DEFAULT_FRAME_SAMPLES, WaveformFrame
from .protocol import Command, FrequencyMessage, MeasurementMessage, VoltageMessage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DemoConfig:
    """
    Shape of the synthetic signal.

    ``period`` is both the sine period in samples and the modulus of the phase
    accumulator; ``step`` is how far the phase advances on each tick.
    """

    samples: int = DEFAULT_FRAME_SAMPLES
    amplitude: float = 2.0
    offset: float = 2.5
    period: int = 512
    step: int = 5
    tick_interval_ms: int = 50
    sample_rate_hz: float = 10_000.0

    def __post_init__(self) -> None:
        if self.samples <= 0:
            raise ValueError("samples must be positive")
        if self.period <= 0:
            raise ValueError("period must be positive")
        if self.tick_interval_ms <= 0:
            raise ValueError("tick_interval_ms must be positive")

    @property
    def refresh_hz(self) -> float:
        return 1000.0 / self.tick_interval_ms


class DemoSignalGenerator:
    """
    Produce one sine frame per tick.

    The generator owns no timer: whoever schedules the ticks calls
    :meth:`tick`, which keeps it interchangeable with the device path.
    """

    def __init__(self, config: DemoConfig | None = None, phase: int = 0) -> None:
        self.config = config or DemoConfig()
        self._initial_phase = int(phase) % self.config.period
        self._phase = self._initial_phase
        self._index = np.arange(self.config.samples, dtype=np.float64)

    @property
    def phase(self) -> int:
        return self._phase

    @property
    def tick_interval_ms(self) -> int:
        return self.config.tick_interval_ms

    def reset(self) -> None:
        self._phase = self._initial_phase

    def tick(self) -> WaveformFrame:
        cfg = self.config
        angle = 2.0 * np.pi * (self._phase + self._index) / cfg.period
        frame = WaveformFrame(cfg.offset + cfg.amplitude * np.sin(angle))
        self._phase = (self._phase + cfg.step) % cfg.period
        return frame

    def respond(self, command: Command) -> Optional[MeasurementMessage]:
        """Answer a measurement request the way the firmware would."""
        cfg = self.config
        if command is Command.REQUEST_FREQUENCY:
            return FrequencyMessage(hz=cfg.sample_rate_hz / cfg.period)
        if command is Command.REQUEST_VOLTAGE:
            low = cfg.offset - abs(cfg.amplitude)
            high = cfg.offset + abs(cfg.amplitude)
            return VoltageMessage(values=(low, high, cfg.offset, high - low))
        logger.debug("Demo source ignores command %s", command.name)
        return None
