"""Immutable waveform frame passed between the pipeline stages."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Sequence

import numpy as np

DEFAULT_FRAME_SAMPLES = 512
DEFAULT_VREF = 5.0


@dataclass(frozen=True, eq=False)
class WaveformFrame:
    """
    One sweep of voltage samples.

    The samples are copied into a read-only float64 array on construction so
    that neither producers nor consumers can change a frame after it has been
    handed to the trigger engine.
    """

    samples: np.ndarray

    def __post_init__(self) -> None:
        arr = np.array(self.samples, dtype=np.float64, copy=True).reshape(-1)
        arr.setflags(write=False)
        object.__setattr__(self, "samples", arr)

    @classmethod
    def from_volts(cls, volts: Sequence[float] | np.ndarray) -> "WaveformFrame":
        return cls(np.asarray(volts, dtype=np.float64))

    def __len__(self) -> int:
        return int(self.samples.size)

    def __iter__(self) -> Iterator[float]:
        for value in self.samples:
            yield float(value)

    def __getitem__(self, index: int) -> float:
        return float(self.samples[index])

    @property
    def minimum(self) -> float:
        if self.samples.size == 0:
            return 0.0
        return float(self.samples.min())

    @property
    def maximum(self) -> float:
        if self.samples.size == 0:
            return 0.0
        return float(self.samples.max())

    @property
    def peak_to_peak(self) -> float:
        return self.maximum - self.minimum

    def __repr__(self) -> str:
        return (
            f"WaveformFrame(n={len(self)}, min={self.minimum:.3f}, "
            f"max={self.maximum:.3f})"
        )
