"""pyserial-backed link to the scope firmware.

The link is opened non-blocking (``timeout=0``) so that the GUI thread can
poll it from a timer without ever waiting on the device. Writes are
fire-and-forget: failures are logged, never retried.
"""

from __future__ import annotations

import errno
import logging
from typing import Iterable, List, Optional, Sequence

import serial
from serial.tools import list_ports

from ..config.runtime import DEFAULT_VENDOR_IDS
from ..errors import DeviceUnavailable, OpenFailed, PermissionDenied

logger = logging.getLogger(__name__)

DEFAULT_BAUD_RATE = 115200
WRITE_TIMEOUT_S = 0.1


def available_ports() -> List[str]:
    return [p.device for p in list_ports.comports()]


def describe_ports() -> List[str]:
    """Human-readable port list, e.g. for ``--list-ports``."""
    lines = []
    for p in list_ports.comports():
        vid = f"{p.vid:04X}" if p.vid is not None else "----"
        pid = f"{p.pid:04X}" if p.pid is not None else "----"
        lines.append(f"{p.device}  [{vid}:{pid}]  {p.description}")
    return lines


def find_device_port(vendor_ids: Iterable[int] = DEFAULT_VENDOR_IDS) -> str:
    """Return the first port whose USB vendor ID is in ``vendor_ids``."""
    wanted = set(vendor_ids)
    ports = list_ports.comports()
    if not ports:
        raise DeviceUnavailable("No serial devices found")
    for p in ports:
        if p.vid is not None and p.vid in wanted:
            logger.info("Found scope device on %s (VID %04X)", p.device, p.vid)
            return p.device
    raise DeviceUnavailable("No Arduino-compatible serial device found (vendor ID mismatch)")


def _is_permission_error(exc: BaseException) -> bool:
    code = getattr(exc, "errno", None)
    if code in (errno.EACCES, errno.EPERM):
        return True
    return "permission" in str(exc).lower() or "access is denied" in str(exc).lower()


def _is_missing_device(exc: BaseException) -> bool:
    code = getattr(exc, "errno", None)
    return code in (errno.ENOENT, errno.ENODEV, errno.ENXIO)


class SerialLink:
    """A connected serial port speaking the scope protocol."""

    def __init__(self, port: serial.Serial) -> None:
        self._serial = port

    @classmethod
    def open(
        cls,
        port: Optional[str] = None,
        *,
        baud_rate: int = DEFAULT_BAUD_RATE,
        vendor_ids: Sequence[int] = DEFAULT_VENDOR_IDS,
    ) -> "SerialLink":
        """Open ``port`` (or the first matching device) at 8N1, no flow control."""
        device = port or find_device_port(vendor_ids)
        try:
            ser = serial.Serial(
                port=device,
                baudrate=baud_rate,
                bytesize=serial.EIGHTBITS,
                parity=serial.PARITY_NONE,
                stopbits=serial.STOPBITS_ONE,
                xonxoff=False,
                rtscts=False,
                dsrdtr=False,
                timeout=0,
                write_timeout=WRITE_TIMEOUT_S,
            )
        except (serial.SerialException, OSError) as exc:
            if _is_permission_error(exc):
                raise PermissionDenied(f"Permission denied opening {device}: {exc}") from exc
            if _is_missing_device(exc):
                raise DeviceUnavailable(f"Serial device {device} is not present") from exc
            raise OpenFailed(f"Could not open {device}: {exc}") from exc
        logger.info("Opened %s at %d baud", device, baud_rate)
        return cls(ser)

    @property
    def name(self) -> str:
        return str(self._serial.port)

    @property
    def is_open(self) -> bool:
        return bool(self._serial.is_open)

    def read_available(self) -> bytes:
        """Return whatever bytes are buffered, without blocking."""
        try:
            waiting = self._serial.in_waiting
            if not waiting:
                return b""
            return self._serial.read(waiting)
        except (serial.SerialException, OSError) as exc:
            raise DeviceUnavailable(f"Lost connection to {self.name}: {exc}") from exc

    def write(self, data: bytes) -> None:
        try:
            self._serial.write(data)
        except (serial.SerialException, OSError) as exc:
            logger.warning("Write of %r to %s failed: %s", data, self.name, exc)

    def close(self) -> None:
        try:
            self._serial.close()
        except (serial.SerialException, OSError) as exc:
            logger.debug("Ignoring error while closing %s: %s", self.name, exc)
