from __future__ import annotations

import errno
from types import SimpleNamespace

import pytest
import serial

from arduscope.errors import DeviceUnavailable, OpenFailed, PermissionDenied
from arduscope.transport import serial_link
from arduscope.transport.serial_link import SerialLink, find_device_port


def _port(device: str, vid: int | None, pid: int | None = 0x0043) -> SimpleNamespace:
    return SimpleNamespace(device=device, vid=vid, pid=pid, description="test port")


class FakeSerial:
    def __init__(self, **kwargs) -> None:
        self.kwargs = kwargs
        self.port = kwargs.get("port")
        self.is_open = True
        self.in_waiting = 0
        self.rx = b""
        self.written: list[bytes] = []

    def read(self, size: int) -> bytes:
        data, self.rx = self.rx[:size], self.rx[size:]
        self.in_waiting = len(self.rx)
        return data

    def write(self, data: bytes) -> int:
        self.written.append(data)
        return len(data)

    def close(self) -> None:
        self.is_open = False


@pytest.fixture
def ports(monkeypatch):
    found: list = []
    monkeypatch.setattr(serial_link.list_ports, "comports", lambda: list(found))
    return found


def test_find_device_port_matches_vendor(ports) -> None:
    ports.extend([_port("/dev/ttyS0", None), _port("/dev/ttyACM0", 0x2341)])
    assert find_device_port() == "/dev/ttyACM0"


def test_find_device_port_without_ports(ports) -> None:
    with pytest.raises(DeviceUnavailable):
        find_device_port()


def test_find_device_port_vendor_mismatch(ports) -> None:
    ports.append(_port("/dev/ttyUSB0", 0x1234))
    with pytest.raises(DeviceUnavailable):
        find_device_port()


def test_describe_ports(ports) -> None:
    ports.append(_port("/dev/ttyACM0", 0x2341))
    assert serial_link.describe_ports() == ["/dev/ttyACM0  [2341:0043]  test port"]
    assert serial_link.available_ports() == ["/dev/ttyACM0"]


def test_open_uses_8n1_non_blocking(monkeypatch, ports) -> None:
    ports.append(_port("/dev/ttyACM0", 0x2341))
    monkeypatch.setattr(serial_link.serial, "Serial", FakeSerial)
    link = SerialLink.open(baud_rate=115200)
    kwargs = link._serial.kwargs
    assert kwargs["port"] == "/dev/ttyACM0"
    assert kwargs["baudrate"] == 115200
    assert kwargs["bytesize"] == serial.EIGHTBITS
    assert kwargs["parity"] == serial.PARITY_NONE
    assert kwargs["stopbits"] == serial.STOPBITS_ONE
    assert kwargs["timeout"] == 0
    assert not kwargs["rtscts"]


def test_read_and_write(monkeypatch) -> None:
    monkeypatch.setattr(serial_link.serial, "Serial", FakeSerial)
    link = SerialLink.open("/dev/ttyACM0")
    assert link.read_available() == b""
    link._serial.rx = b"DATA:1,2\n"
    link._serial.in_waiting = 9
    assert link.read_available() == b"DATA:1,2\n"
    link.write(b"S")
    assert link._serial.written == [b"S"]
    link.close()
    assert not link.is_open


@pytest.mark.parametrize(
    "exc, expected",
    [
        (serial.SerialException(errno.EACCES, "could not open port"), PermissionDenied),
        (serial.SerialException("[Errno 13] Permission denied: '/dev/ttyACM0'"), PermissionDenied),
        (serial.SerialException(errno.ENOENT, "could not open port"), DeviceUnavailable),
        (serial.SerialException("device busy"), OpenFailed),
    ],
)
def test_open_errors_are_classified(monkeypatch, exc, expected) -> None:
    def boom(**kwargs):
        raise exc

    monkeypatch.setattr(serial_link.serial, "Serial", boom)
    with pytest.raises(expected):
        SerialLink.open("/dev/ttyACM0")


def test_read_error_means_device_gone(monkeypatch) -> None:
    monkeypatch.setattr(serial_link.serial, "Serial", FakeSerial)
    link = SerialLink.open("/dev/ttyACM0")

    def broken(size):
        raise serial.SerialException("device reports readiness to read but returned no data")

    link._serial.in_waiting = 4
    link._serial.read = broken
    with pytest.raises(DeviceUnavailable):
        link.read_available()
