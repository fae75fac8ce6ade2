"""Exception hierarchy shared by the acquisition pipeline and the device link.

Decode errors describe a single bad line and are always recovered locally by
the caller. Device errors describe a transport that could not be brought up;
the session reports them to its status observers and stays disconnected.
"""

from __future__ import annotations


class ScopeError(Exception):
    """Base class for all arduscope errors."""


class DecodeError(ScopeError, ValueError):
    """A text line could not be turned into a protocol message."""

    def __init__(self, message: str, line: str = "") -> None:
        super().__init__(message)
        self.line = line


class MalformedSample(DecodeError):
    """A ``DATA:`` line carried a token that is not an integer ADC code."""


class MalformedMeasurement(DecodeError):
    """A ``FREQ:`` or ``VOLT:`` line could not be parsed."""


class UnknownPrefix(DecodeError):
    """The line does not start with any known message prefix."""


class DeviceError(ScopeError):
    """The serial device could not be opened or used."""


class DeviceUnavailable(DeviceError):
    """No matching serial device is attached."""


class PermissionDenied(DeviceError):
    """The operating system refused access to the serial device."""


class OpenFailed(DeviceError):
    """The serial device exists but opening it failed."""


__all__ = [
    "ScopeError",
    "DecodeError",
    "MalformedSample",
    "MalformedMeasurement",
    "UnknownPrefix",
    "DeviceError",
    "DeviceUnavailable",
    "PermissionDenied",
    "OpenFailed",
]
