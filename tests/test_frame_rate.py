from arduscope.core.rate import FrameRateMeter


def test_frame_rate_meter_estimates_rate_for_regular_frames() -> None:
    meter = FrameRateMeter(window_size=40)
    t = 0.0
    for _ in range(100):
        meter.mark(t)
        t += 0.05  # 20 Hz
    assert 19.0 < meter.hz < 21.0
    assert len(meter) == 40


def test_frame_rate_meter_defaults_until_two_marks() -> None:
    meter = FrameRateMeter(default_hz=0.0)
    assert meter.hz == 0.0
    meter.mark(1.0)
    assert meter.hz == 0.0
    meter.feed([1.0])
    assert meter.hz == 0.0
    meter.reset()
    assert meter.window_span_s == 0.0
