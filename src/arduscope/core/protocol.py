"""
Decoder for the text protocol spoken by the scope firmware.

The device sends one message per line::

    DATA:512,530,601,...      raw ADC codes for one frame
    FREQ:1000.0               measured frequency in Hz
    VOLT:0.12,4.10,2.05,3.98  four voltage scalars, field 3 is peak-to-peak

and accepts single-letter commands (``S``, ``P``, ``F``, ``V``) without a
terminator. ``decode()`` raises a :class:`~arduscope.errors.DecodeError`
subclass for anything it cannot use; callers drop the line and carry on.
"""

from __future__ import annotations

import enum
import logging
import math
from dataclasses import dataclass
from typing import Tuple, Union

from ..errors import MalformedMeasurement, MalformedSample, UnknownPrefix

logger = logging.getLogger(__name__)

DATA_PREFIX = "DATA:"
FREQ_PREFIX = "FREQ:"
VOLT_PREFIX = "VOLT:"

VOLT_FIELD_COUNT = 4
PEAK_TO_PEAK_INDEX = 3


@dataclass(frozen=True)
class WaveformMessage:
    codes: Tuple[int, ...]


@dataclass(frozen=True)
class FrequencyMessage:
    hz: float

    def label(self) -> str:
        return f"{self.hz:.2f} Hz"


@dataclass(frozen=True)
class VoltageMessage:
    values: Tuple[float, ...]

    @property
    def peak_to_peak(self) -> float:
        return self.values[PEAK_TO_PEAK_INDEX]

    def label(self) -> str:
        return f"Vpp: {self.peak_to_peak:.2f}V"


ProtocolMessage = Union[WaveformMessage, FrequencyMessage, VoltageMessage]
MeasurementMessage = Union[FrequencyMessage, VoltageMessage]


class Command(enum.Enum):
    """Single-byte commands understood by the firmware."""

    START = b"S"
    PAUSE = b"P"
    REQUEST_FREQUENCY = b"F"
    REQUEST_VOLTAGE = b"V"

    @property
    def wire(self) -> bytes:
        return self.value


def _parse_codes(payload: str, line: str) -> Tuple[int, ...]:
    tokens = payload.split(",")
    codes = []
    for token in tokens:
        try:
            code = int(token.strip())
            float(code)
        except ValueError:
            raise MalformedSample(f"Bad sample token {token!r}", line) from None
        except OverflowError:
            raise MalformedSample(f"Sample token out of range: {token[:16]!r}...", line) from None
        codes.append(code)
    return tuple(codes)


def _parse_float(token: str, line: str) -> float:
    try:
        value = float(token.strip())
    except ValueError:
        raise MalformedMeasurement(f"Bad measurement field {token!r}", line) from None
    if math.isnan(value):
        raise MalformedMeasurement("Measurement field is NaN", line)
    return value


def decode(line: str) -> ProtocolMessage:
    """Decode one trimmed line into a protocol message."""
    if line.startswith(DATA_PREFIX):
        payload = line[len(DATA_PREFIX):]
        if not payload.strip():
            raise MalformedSample("DATA line without samples", line)
        return WaveformMessage(codes=_parse_codes(payload, line))

    if line.startswith(FREQ_PREFIX):
        return FrequencyMessage(hz=_parse_float(line[len(FREQ_PREFIX):], line))

    if line.startswith(VOLT_PREFIX):
        fields = line[len(VOLT_PREFIX):].split(",")
        if len(fields) < VOLT_FIELD_COUNT:
            raise MalformedMeasurement(
                f"Expected at least {VOLT_FIELD_COUNT} VOLT fields, got {len(fields)}",
                line,
            )
        return VoltageMessage(values=tuple(_parse_float(f, line) for f in fields))

    raise UnknownPrefix(f"Unknown message prefix in {line[:16]!r}", line)


__all__ = [
    "Command",
    "FrequencyMessage",
    "MeasurementMessage",
    "ProtocolMessage",
    "VoltageMessage",
    "WaveformMessage",
    "decode",
]
