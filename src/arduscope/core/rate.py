from __future__ import annotations

from collections import deque
from typing import Deque, Iterable


class FrameRateMeter:
    """
    Estimate how many frames per second reach the display.

    Notes
    -----
    - Timestamps are in seconds and assumed monotonic increasing.
    - The estimate is taken over the last ``window_size`` timestamps, so it
      follows rate changes (e.g. switching from demo to device) within a
      couple of seconds.
    """

    def __init__(self, window_size: int = 40, default_hz: float = 0.0) -> None:
        if window_size <= 1:
            raise ValueError("window_size must be > 1")
        self._times: Deque[float] = deque(maxlen=window_size)
        self.default_hz = float(default_hz)

    def mark(self, t: float) -> None:
        """
        Record that a frame was displayed at ``t``.

        Parameters
        ----------
        t:
            Timestamp in seconds (``time.monotonic()`` in the GUI).
        """
        self._times.append(float(t))

    def feed(self, times: Iterable[float]) -> None:
        for t in times:
            self.mark(t)

    @property
    def hz(self) -> float:
        if len(self._times) < 2:
            return self.default_hz
        span = self._times[-1] - self._times[0]
        if span <= 0:
            return self.default_hz
        return (len(self._times) - 1) / span

    @property
    def window_span_s(self) -> float:
        if len(self._times) < 2:
            return 0.0
        return self._times[-1] - self._times[0]

    def __len__(self) -> int:
        return len(self._times)

    def reset(self) -> None:
        self._times.clear()
