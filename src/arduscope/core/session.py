"""Single-threaded coordinator between frame sources, trigger and display.

:class:`ScopeSession` is the surface the UI talks to. Every entry point
(device bytes, demo ticks, button presses) is expected to be called from the
same thread, typically the Qt event loop, so none of the owned state is
locked. Exactly one frame source is active at a time; switching sources or
pausing takes effect before the call returns, and no frame from the stopped
source reaches the observers afterwards.
"""

from __future__ import annotations

import enum
import logging
import time
from dataclasses import dataclass
from typing import Callable, List, Optional, Protocol

from ..errors import DecodeError, DeviceError, DeviceUnavailable, UnknownPrefix
from .demo import DemoSignalGenerator
from .frame import DEFAULT_VREF, WaveformFrame
from .line_framer import BufferOverflow, LineFramer
from .measurements import MeasurementScheduler
from .protocol import (
    Command,
    FrequencyMessage,
    MeasurementMessage,
    VoltageMessage,
    WaveformMessage,
    decode,
)
from .rate import FrameRateMeter
from .scaling import DEFAULT_CODE_MAX, scale
from .trigger import Slope, TriggerEngine, TriggerMode

logger = logging.getLogger(__name__)


class Source(enum.Enum):
    DEMO = "demo"
    DEVICE = "device"


class StatusKind(enum.Enum):
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    DEVICE_ERROR = "device_error"
    BUFFER_OVERFLOW = "buffer_overflow"
    SOURCE_CHANGED = "source_changed"
    STREAMING_CHANGED = "streaming_changed"
    TRIGGER_CHANGED = "trigger_changed"
    SCALE_CHANGED = "scale_changed"


@dataclass(frozen=True)
class StatusEvent:
    kind: StatusKind
    message: str = ""
    error: Optional[BaseException] = None


class DeviceLink(Protocol):
    """What the session needs from a connected device transport."""

    def read_available(self) -> bytes:  # pragma: no cover - protocol
        ...

    def write(self, data: bytes) -> None:  # pragma: no cover - protocol
        ...

    def close(self) -> None:  # pragma: no cover - protocol
        ...


FrameObserver = Callable[[WaveformFrame], None]
MeasurementObserver = Callable[[MeasurementMessage], None]
StatusObserver = Callable[[StatusEvent], None]
LinkFactory = Callable[[], DeviceLink]


class ScopeSession:
    def __init__(
        self,
        *,
        link_factory: LinkFactory | None = None,
        framer: LineFramer | None = None,
        trigger: TriggerEngine | None = None,
        scheduler: MeasurementScheduler | None = None,
        demo: DemoSignalGenerator | None = None,
        rate_meter: FrameRateMeter | None = None,
        vref: float = DEFAULT_VREF,
        code_max: int = DEFAULT_CODE_MAX,
        voltage_scale: float = 5.0,
        trigger_level: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if voltage_scale <= 0:
            raise ValueError("voltage_scale must be positive")
        self._link_factory = link_factory
        self._framer = framer or LineFramer()
        self._trigger = trigger or TriggerEngine()
        self._scheduler = scheduler or MeasurementScheduler()
        self._demo = demo or DemoSignalGenerator()
        self._rate = rate_meter or FrameRateMeter()
        self._vref = float(vref)
        self._code_max = int(code_max)
        self._clock = clock

        self._source = Source.DEMO
        self._streaming = True
        self._link: Optional[DeviceLink] = None
        self._voltage_scale = float(voltage_scale)
        self._explicit_level = trigger_level is not None
        self._trigger.set_threshold(
            trigger_level if trigger_level is not None else self._voltage_scale / 2.0
        )

        self._last_frame: Optional[WaveformFrame] = None
        self._frequency: Optional[FrequencyMessage] = None
        self._voltage: Optional[VoltageMessage] = None
        self.dropped_lines = 0

        self._frame_observers: List[FrameObserver] = []
        self._measurement_observers: List[MeasurementObserver] = []
        self._status_observers: List[StatusObserver] = []

    # ---------------------------------------------------------------- observers
    def add_frame_observer(self, callback: FrameObserver) -> None:
        self._frame_observers.append(callback)

    def add_measurement_observer(self, callback: MeasurementObserver) -> None:
        self._measurement_observers.append(callback)

    def add_status_observer(self, callback: StatusObserver) -> None:
        self._status_observers.append(callback)

    def _notify(self, observers: List[Callable], payload: object) -> None:
        for callback in list(observers):
            try:
                callback(payload)
            except Exception:
                logger.exception("Observer %r failed for %r", callback, payload)

    def _status(self, kind: StatusKind, message: str = "", error: BaseException | None = None) -> None:
        self._notify(self._status_observers, StatusEvent(kind, message, error))

    # --------------------------------------------------------------- properties
    @property
    def source(self) -> Source:
        return self._source

    @property
    def streaming(self) -> bool:
        return self._streaming

    @property
    def connected(self) -> bool:
        return self._link is not None

    @property
    def demo_active(self) -> bool:
        """True when the demo generator should be ticking."""
        return self._source is Source.DEMO and self._streaming

    @property
    def demo(self) -> DemoSignalGenerator:
        return self._demo

    @property
    def trigger(self) -> TriggerEngine:
        return self._trigger

    @property
    def voltage_scale(self) -> float:
        return self._voltage_scale

    @property
    def last_frame(self) -> Optional[WaveformFrame]:
        return self._last_frame

    @property
    def frequency(self) -> Optional[FrequencyMessage]:
        return self._frequency

    @property
    def voltage(self) -> Optional[VoltageMessage]:
        return self._voltage

    @property
    def frame_rate_hz(self) -> float:
        return self._rate.hz

    # --------------------------------------------------------------- UI surface
    def select_source(self, source: Source) -> None:
        """Stop the current source, then activate ``source``."""
        if source is self._source:
            if source is Source.DEVICE and not self.connected:
                self.connect_device()
            return

        if self._source is Source.DEVICE:
            self.disconnect_device()
        self._source = source
        self._scheduler.reset()
        self._rate.reset()
        logger.info("Frame source -> %s", source.value)
        self._status(StatusKind.SOURCE_CHANGED, source.value)

        if source is Source.DEVICE:
            self.connect_device()

    def set_streaming(self, streaming: bool) -> None:
        streaming = bool(streaming)
        if streaming == self._streaming:
            return
        self._streaming = streaming
        if self._source is Source.DEVICE:
            self._write(Command.START if streaming else Command.PAUSE)
        if not streaming:
            self._rate.reset()
        self._status(StatusKind.STREAMING_CHANGED, "running" if streaming else "paused")

    def set_trigger_mode(self, mode: TriggerMode) -> None:
        self._trigger.set_mode(mode)
        self._status(StatusKind.TRIGGER_CHANGED, mode.value)

    def rearm_trigger(self) -> None:
        self._trigger.rearm()
        self._status(StatusKind.TRIGGER_CHANGED, self._trigger.phase.value)

    def set_trigger_slope(self, slope: Slope) -> None:
        self._trigger.set_slope(slope)
        self._status(StatusKind.TRIGGER_CHANGED, slope.value)

    def set_trigger_level(self, level: float | None) -> None:
        """Pin the trigger threshold, or ``None`` to follow the scale midpoint."""
        self._explicit_level = level is not None
        self._trigger.set_threshold(level if level is not None else self._voltage_scale / 2.0)
        self._status(StatusKind.TRIGGER_CHANGED, f"{self._trigger.threshold:.2f} V")

    def set_voltage_scale(self, volts: float) -> None:
        if volts <= 0:
            raise ValueError("voltage scale must be positive")
        self._voltage_scale = float(volts)
        if not self._explicit_level:
            self._trigger.set_threshold(self._voltage_scale / 2.0)
        self._status(StatusKind.SCALE_CHANGED, f"{self._voltage_scale:g} V")

    # ------------------------------------------------------------------ device
    def connect_device(self) -> bool:
        if self._link is not None:
            return True
        if self._link_factory is None:
            self._device_error(DeviceUnavailable("No device link configured"))
            return False
        try:
            link = self._link_factory()
        except DeviceError as exc:
            self._device_error(exc)
            return False

        self._link = link
        self._framer.reset()
        self._scheduler.reset()
        logger.info("Device connected")
        self._status(StatusKind.CONNECTED)
        if self._streaming and self._source is Source.DEVICE:
            self._write(Command.START)
        return True

    def disconnect_device(self) -> None:
        if self._link is None:
            return
        self._write(Command.PAUSE)
        self._drop_link()

    def _drop_link(self) -> None:
        link, self._link = self._link, None
        self._framer.reset()
        if link is not None:
            link.close()
        logger.info("Device disconnected")
        self._status(StatusKind.DISCONNECTED)

    def _device_error(self, exc: DeviceError) -> None:
        logger.warning("Device error: %s", exc)
        self._status(StatusKind.DEVICE_ERROR, str(exc), exc)

    def poll_device(self) -> int:
        """Read whatever the link has buffered; returns frames displayed."""
        if self._link is None or self._source is not Source.DEVICE:
            return 0
        try:
            data = self._link.read_available()
        except DeviceError as exc:
            self._device_error(exc)
            self._drop_link()
            return 0
        if not data:
            return 0
        return self.feed_device(data)

    def feed_device(self, data: bytes) -> int:
        """Push raw device bytes through the pipeline; returns frames displayed."""
        if self._link is None or self._source is not Source.DEVICE:
            logger.debug("Ignoring %d device bytes while device source is inactive", len(data))
            return 0
        shown = 0
        for item in self._framer.ingest(data):
            if self._link is None or self._source is not Source.DEVICE:
                # an observer stopped the device mid-chunk
                break
            if isinstance(item, BufferOverflow):
                self._status(
                    StatusKind.BUFFER_OVERFLOW,
                    f"dropped {item.dropped_bytes} bytes",
                )
                continue
            if self._handle_line(item):
                shown += 1
        return shown

    def _handle_line(self, line: str) -> bool:
        try:
            message = decode(line)
        except UnknownPrefix as exc:
            logger.debug("Ignoring line: %s", exc)
            return False
        except DecodeError as exc:
            self.dropped_lines += 1
            logger.warning("Dropping line %r: %s", exc.line[:40], exc)
            return False

        if isinstance(message, WaveformMessage):
            if not self._streaming:
                return False
            frame = scale(message.codes, self._vref, self._code_max)
            return self._accept(frame) is not None

        self._publish_measurement(message)
        return False

    # -------------------------------------------------------------------- demo
    def tick_demo(self) -> Optional[WaveformFrame]:
        """Advance the demo generator by one frame if it is the active source."""
        if not self.demo_active:
            return None
        return self._accept(self._demo.tick())

    # ------------------------------------------------------------------ common
    def _accept(self, frame: WaveformFrame) -> Optional[WaveformFrame]:
        shown = self._trigger.offer(frame)
        if shown is None:
            return None
        self._last_frame = shown
        self._rate.mark(self._clock())
        self._notify(self._frame_observers, shown)
        for command in self._scheduler.on_frame_accepted():
            self._send_request(command)
        return shown

    def _send_request(self, command: Command) -> None:
        if self._source is Source.DEMO:
            reply = self._demo.respond(command)
            if reply is not None:
                self._publish_measurement(reply)
        else:
            self._write(command)

    def _write(self, command: Command) -> None:
        if self._link is None:
            return
        self._link.write(command.wire)

    def _publish_measurement(self, message: MeasurementMessage) -> None:
        if isinstance(message, FrequencyMessage):
            self._frequency = message
        elif isinstance(message, VoltageMessage):
            self._voltage = message
        self._notify(self._measurement_observers, message)

    def close(self) -> None:
        self.disconnect_device()
