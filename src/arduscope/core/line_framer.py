"""Split a raw serial byte stream into complete text lines.

The framer keeps the unterminated tail of the stream in a bounded carry
buffer. When that tail grows beyond the buffer capacity the framer gives up
on the current line: the buffer is cleared, a :class:`BufferOverflow` marker
is emitted in place of the lost data, and everything up to the next newline
is discarded so that the following line starts cleanly.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Union

logger = logging.getLogger(__name__)

DEFAULT_CARRY_CAPACITY = 4096
_NEWLINE = b"\n"


@dataclass(frozen=True)
class BufferOverflow:
    """Signal emitted when the carry buffer would exceed its capacity."""

    dropped_bytes: int
    capacity: int


RawLine = str
FramerItem = Union[RawLine, BufferOverflow]


class CarryBuffer:
    """Bounded store for bytes that do not yet form a complete line."""

    def __init__(self, capacity: int = DEFAULT_CARRY_CAPACITY) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self._capacity = int(capacity)
        self._data = bytearray()

    @property
    def capacity(self) -> int:
        return self._capacity

    def fits(self, extra: int) -> bool:
        return len(self._data) + extra <= self._capacity

    def extend(self, chunk: bytes) -> None:
        if _NEWLINE in chunk:
            raise ValueError("carry buffer never holds a newline")
        if not self.fits(len(chunk)):
            raise OverflowError("carry buffer capacity exceeded")
        self._data += chunk

    def take(self) -> bytes:
        data = bytes(self._data)
        self._data.clear()
        return data

    def clear(self) -> None:
        self._data.clear()

    def __len__(self) -> int:
        return len(self._data)

    def __bytes__(self) -> bytes:
        return bytes(self._data)


class LineFramer:
    """Turn arbitrary byte chunks into trimmed, newline-terminated lines."""

    def __init__(self, capacity: int = DEFAULT_CARRY_CAPACITY) -> None:
        self._carry = CarryBuffer(capacity)
        self._discarding = False
        self.overflow_count = 0

    @property
    def capacity(self) -> int:
        return self._carry.capacity

    @property
    def pending(self) -> int:
        """Number of bytes waiting for a newline."""
        return len(self._carry)

    def reset(self) -> None:
        self._carry.clear()
        self._discarding = False

    def ingest(self, data: bytes) -> List[FramerItem]:
        """
        Consume ``data`` and return the lines it completes.

        Blank lines are skipped. The returned list may also contain
        :class:`BufferOverflow` markers, in stream order.
        """
        out: List[FramerItem] = []
        start = 0
        while True:
            idx = data.find(_NEWLINE, start)
            if idx == -1:
                break
            segment = data[start:idx]
            start = idx + 1

            if self._discarding:
                # tail of a line that already overflowed
                self._discarding = False
                continue

            if not self._carry.fits(len(segment)):
                out.append(self._overflow(len(segment)))
                continue

            line = (self._carry.take() + segment).decode("ascii", errors="replace").strip()
            if line:
                out.append(line)

        tail = data[start:]
        if not tail or self._discarding:
            return out
        if self._carry.fits(len(tail)):
            self._carry.extend(tail)
        else:
            out.append(self._overflow(len(tail)))
            self._discarding = True
        return out

    def _overflow(self, incoming: int) -> BufferOverflow:
        dropped = len(self._carry) + incoming
        self._carry.clear()
        self.overflow_count += 1
        logger.warning(
            "Line buffer overflow (%d bytes > %d); resynchronizing on next newline",
            dropped,
            self._carry.capacity,
        )
        return BufferOverflow(dropped_bytes=dropped, capacity=self._carry.capacity)


__all__ = [
    "DEFAULT_CARRY_CAPACITY",
    "BufferOverflow",
    "CarryBuffer",
    "FramerItem",
    "LineFramer",
    "RawLine",
]
