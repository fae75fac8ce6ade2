from __future__ import annotations

from typing import List

from .protocol import Command

DEFAULT_REQUEST_EVERY = 5


class MeasurementScheduler:
    """
    Ask the device for frequency and voltage once every ``every`` frames.

    The counter advances per frame *accepted* by the trigger engine, so the
    outbound command rate follows what is displayed rather than how fast the
    device streams.
    """

    def __init__(self, every: int = DEFAULT_REQUEST_EVERY) -> None:
        if every <= 0:
            raise ValueError("every must be positive")
        self.every = int(every)
        self._count = 0

    @property
    def count(self) -> int:
        return self._count

    def on_frame_accepted(self) -> List[Command]:
        self._count += 1
        if self._count < self.every:
            return []
        self._count = 0
        return [Command.REQUEST_FREQUENCY, Command.REQUEST_VOLTAGE]

    def reset(self) -> None:
        self._count = 0
