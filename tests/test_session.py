from __future__ import annotations

from typing import List

import pytest

from arduscope.core.protocol import Command, FrequencyMessage, VoltageMessage
from arduscope.core.session import ScopeSession, Source, StatusKind
from arduscope.core.trigger import TriggerMode
from arduscope.errors import DeviceUnavailable, PermissionDenied

FRAME_LINE = b"DATA:" + b",".join(b"%d" % c for c in (0, 256, 512, 768, 1023)) + b"\n"


class FakeLink:
    def __init__(self) -> None:
        self.writes: List[bytes] = []
        self.pending: List[bytes] = []
        self.closed = False
        self.fail_reads = False

    def read_available(self) -> bytes:
        if self.fail_reads:
            raise DeviceUnavailable("unplugged")
        data = b"".join(self.pending)
        self.pending.clear()
        return data

    def write(self, data: bytes) -> None:
        self.writes.append(data)

    def close(self) -> None:
        self.closed = True


class Recorder:
    def __init__(self, session: ScopeSession) -> None:
        self.frames: list = []
        self.measurements: list = []
        self.status: list = []
        session.add_frame_observer(self.frames.append)
        session.add_measurement_observer(self.measurements.append)
        session.add_status_observer(self.status.append)

    def kinds(self) -> list:
        return [event.kind for event in self.status]


@pytest.fixture
def link() -> FakeLink:
    return FakeLink()


@pytest.fixture
def session(link: FakeLink) -> ScopeSession:
    return ScopeSession(link_factory=lambda: link, clock=lambda: 0.0)


def _device_session(session: ScopeSession) -> Recorder:
    rec = Recorder(session)
    session.select_source(Source.DEVICE)
    return rec


def test_starts_on_demo_and_streaming(session: ScopeSession) -> None:
    assert session.source is Source.DEMO
    assert session.streaming
    assert session.demo_active
    assert not session.connected


def test_demo_ticks_reach_frame_observers(session: ScopeSession) -> None:
    rec = Recorder(session)
    frame = session.tick_demo()
    assert frame is not None
    assert rec.frames == [frame]
    assert session.last_frame is frame


def test_demo_answers_measurement_requests_locally(session: ScopeSession, link: FakeLink) -> None:
    rec = Recorder(session)
    for _ in range(5):
        session.tick_demo()
    assert [type(m) for m in rec.measurements] == [FrequencyMessage, VoltageMessage]
    assert session.voltage.peak_to_peak == pytest.approx(4.0)
    assert link.writes == []


def test_selecting_device_connects_and_starts(session: ScopeSession, link: FakeLink) -> None:
    rec = _device_session(session)
    assert session.connected
    assert link.writes == [Command.START.wire]
    assert StatusKind.CONNECTED in rec.kinds()
    assert session.tick_demo() is None


def test_device_frames_are_scaled(session: ScopeSession) -> None:
    rec = _device_session(session)
    assert session.feed_device(FRAME_LINE) == 1
    (frame,) = rec.frames
    assert frame[0] == 0.0
    assert frame[4] == pytest.approx(5.0)


def test_poll_reads_from_link(session: ScopeSession, link: FakeLink) -> None:
    rec = _device_session(session)
    link.pending.extend([FRAME_LINE[:7], FRAME_LINE[7:] + FRAME_LINE])
    assert session.poll_device() == 2
    assert len(rec.frames) == 2


def test_measurement_requests_follow_accepted_frames(session: ScopeSession, link: FakeLink) -> None:
    _device_session(session)
    session.feed_device(FRAME_LINE * 5)
    assert link.writes == [b"S", b"F", b"V"]


def test_measurement_replies_are_published(session: ScopeSession) -> None:
    rec = _device_session(session)
    session.feed_device(b"FREQ:1000.0\nVOLT:0.1,0.2,0.3,4.0\n")
    assert session.frequency.label() == "1000.00 Hz"
    assert session.voltage.label() == "Vpp: 4.00V"
    assert len(rec.measurements) == 2


def test_pause_stops_frames_but_keeps_measurements(session: ScopeSession, link: FakeLink) -> None:
    rec = _device_session(session)
    session.set_streaming(False)
    assert link.writes[-1] == Command.PAUSE.wire
    assert session.feed_device(FRAME_LINE + b"FREQ:50\n") == 0
    assert rec.frames == []
    assert len(rec.measurements) == 1

    session.set_streaming(True)
    assert link.writes[-1] == Command.START.wire
    assert session.feed_device(FRAME_LINE) == 1


def test_paused_demo_does_not_tick(session: ScopeSession) -> None:
    session.set_streaming(False)
    assert session.tick_demo() is None


def test_switching_back_to_demo_disconnects(session: ScopeSession, link: FakeLink) -> None:
    rec = _device_session(session)
    session.select_source(Source.DEMO)
    assert link.writes[-1] == Command.PAUSE.wire
    assert link.closed
    assert not session.connected
    assert session.feed_device(FRAME_LINE) == 0
    assert rec.frames == []
    assert StatusKind.DISCONNECTED in rec.kinds()
    assert session.tick_demo() is not None


def test_open_failure_leaves_session_disconnected() -> None:
    def refuse():
        raise PermissionDenied("no access to /dev/ttyACM0")

    session = ScopeSession(link_factory=refuse)
    rec = Recorder(session)
    session.select_source(Source.DEVICE)
    assert not session.connected
    errors = [e for e in rec.status if e.kind is StatusKind.DEVICE_ERROR]
    assert len(errors) == 1
    assert isinstance(errors[0].error, PermissionDenied)
    assert session.poll_device() == 0


def test_missing_link_factory_reports_device_error() -> None:
    session = ScopeSession()
    rec = Recorder(session)
    assert session.connect_device() is False
    assert StatusKind.DEVICE_ERROR in rec.kinds()


def test_read_failure_drops_the_link(session: ScopeSession, link: FakeLink) -> None:
    rec = _device_session(session)
    link.fail_reads = True
    assert session.poll_device() == 0
    assert not session.connected
    assert link.closed
    assert rec.kinds()[-2:] == [StatusKind.DEVICE_ERROR, StatusKind.DISCONNECTED]


def test_malformed_lines_are_counted_and_skipped(session: ScopeSession) -> None:
    rec = _device_session(session)
    shown = session.feed_device(b"DATA:1,x\nHELLO\nFREQ:abc\n" + FRAME_LINE)
    assert shown == 1
    assert session.dropped_lines == 2
    assert len(rec.frames) == 1


def test_overflow_is_reported(link: FakeLink) -> None:
    from arduscope.core.line_framer import LineFramer

    session = ScopeSession(link_factory=lambda: link, framer=LineFramer(capacity=64))
    rec = _device_session(session)
    session.feed_device(b"9" * 100 + b"\n" + FRAME_LINE)
    assert StatusKind.BUFFER_OVERFLOW in rec.kinds()
    assert len(rec.frames) == 1


def test_single_trigger_through_session(session: ScopeSession) -> None:
    rec = _device_session(session)
    session.set_trigger_mode(TriggerMode.SINGLE)
    flat = b"DATA:100,100,100\n"
    session.feed_device(flat + FRAME_LINE + FRAME_LINE)
    assert len(rec.frames) == 1
    session.rearm_trigger()
    session.feed_device(FRAME_LINE)
    assert len(rec.frames) == 2


def test_trigger_level_follows_scale_until_pinned(session: ScopeSession) -> None:
    assert session.trigger.threshold == pytest.approx(2.5)
    session.set_voltage_scale(2.0)
    assert session.trigger.threshold == pytest.approx(1.0)
    session.set_trigger_level(0.3)
    session.set_voltage_scale(10.0)
    assert session.trigger.threshold == pytest.approx(0.3)
    session.set_trigger_level(None)
    assert session.trigger.threshold == pytest.approx(5.0)
    with pytest.raises(ValueError):
        session.set_voltage_scale(0)


def test_failing_observer_does_not_break_delivery(session: ScopeSession) -> None:
    seen = []

    def broken(frame):
        raise RuntimeError("boom")

    session.add_frame_observer(broken)
    session.add_frame_observer(seen.append)
    session.tick_demo()
    assert len(seen) == 1


def test_close_disconnects(session: ScopeSession, link: FakeLink) -> None:
    _device_session(session)
    session.close()
    assert link.closed
    assert link.writes[-1] == b"P"


def test_stopping_from_an_observer_drops_rest_of_chunk(session: ScopeSession, link: FakeLink) -> None:
    rec = _device_session(session)

    def stop_on_first(frame):
        session.select_source(Source.DEMO)

    session.add_frame_observer(stop_on_first)
    shown = session.feed_device(b"DATA:0,1023,0,1023\n" * 3)
    assert shown == 1
    assert len(rec.frames) == 1
    assert session.source is Source.DEMO
    assert link.closed


def test_pausing_from_an_observer_drops_rest_of_chunk(session: ScopeSession) -> None:
    rec = _device_session(session)
    session.add_frame_observer(lambda frame: session.set_streaming(False))
    session.feed_device(FRAME_LINE * 3)
    assert len(rec.frames) == 1


def test_out_of_range_sample_does_not_stop_the_chunk(session: ScopeSession) -> None:
    rec = _device_session(session)
    shown = session.feed_device(b"DATA:1," + b"9" * 400 + b"\n" + b"DATA:0,1023,0,1023\n")
    assert shown == 1
    assert len(rec.frames) == 1
    assert session.dropped_lines == 1
