"""Acquisition pipeline: framing, decoding, scaling, triggering.

Bytes from the device go through :class:`LineFramer` and :func:`decode`;
waveform messages are scaled into :class:`WaveformFrame` objects, which (like
the frames of :class:`DemoSignalGenerator`) are gated by
:class:`TriggerEngine`. :class:`ScopeSession` ties the stages together and
is the object the GUI drives.
"""

from .demo import DemoConfig, DemoSignalGenerator
from .frame import WaveformFrame
from .line_framer import BufferOverflow, CarryBuffer, LineFramer
from .measurements import MeasurementScheduler
from .protocol import (
    Command,
    FrequencyMessage,
    ProtocolMessage,
    VoltageMessage,
    WaveformMessage,
    decode,
)
from .rate import FrameRateMeter
from .scaling import scale
from .session import ScopeSession, Source, StatusEvent, StatusKind
from .trigger import Slope, TriggerEngine, TriggerMode, TriggerPhase, find_trigger_index

__all__ = [
    "BufferOverflow",
    "CarryBuffer",
    "Command",
    "DemoConfig",
    "DemoSignalGenerator",
    "FrameRateMeter",
    "FrequencyMessage",
    "LineFramer",
    "MeasurementScheduler",
    "ProtocolMessage",
    "ScopeSession",
    "Slope",
    "Source",
    "StatusEvent",
    "StatusKind",
    "TriggerEngine",
    "TriggerMode",
    "TriggerPhase",
    "VoltageMessage",
    "WaveformFrame",
    "WaveformMessage",
    "decode",
    "find_trigger_index",
    "scale",
]
