import pathlib
import sys
import tempfile
import unittest

# Ensure src/ is on path for direct test execution
ROOT = pathlib.Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from arduscope.config.runtime import (  # noqa: E402
    DEFAULT_VENDOR_IDS,
    ScopeConfig,
    config_from_mapping,
    load_config,
)
from arduscope.core.trigger import Slope, TriggerMode  # noqa: E402
from arduscope.wiring import build_session  # noqa: E402


class LoadConfigTest(unittest.TestCase):
    def test_missing_file_gives_defaults(self):
        cfg = load_config("/nonexistent/arduscope.yaml")
        self.assertEqual(cfg, ScopeConfig())
        self.assertEqual(load_config(None).baud_rate, 115200)

    def test_nested_blocks_are_flattened(self):
        text = (
            "acquisition:\n"
            "  vref: 3.3\n"
            "demo:\n"
            "  period: 256\n"
            "  tick_ms: 20\n"
            "trigger:\n"
            "  mode: Single\n"
            "  slope: falling\n"
            "  level: 1.2\n"
            "serial:\n"
            "  port: /dev/ttyUSB0\n"
            "  vendor_ids: ['0x2341']\n"
            "unknown_key: 1\n"
        )
        with tempfile.TemporaryDirectory() as tmp:
            path = pathlib.Path(tmp) / "scope.yaml"
            path.write_text(text, encoding="utf-8")
            cfg = load_config(path)

        self.assertAlmostEqual(cfg.vref, 3.3)
        self.assertEqual(cfg.demo_period, 256)
        self.assertEqual(cfg.demo_tick_ms, 20)
        self.assertEqual(cfg.trigger_mode_enum, TriggerMode.SINGLE)
        self.assertEqual(cfg.trigger_slope_enum, Slope.FALLING)
        self.assertAlmostEqual(cfg.trigger_level, 1.2)
        self.assertEqual(cfg.port, "/dev/ttyUSB0")
        self.assertEqual(cfg.vendor_ids, (0x2341,))

    def test_non_mapping_file_is_rejected(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = pathlib.Path(tmp) / "scope.yaml"
            path.write_text("- 1\n- 2\n", encoding="utf-8")
            with self.assertRaises(ValueError):
                load_config(path)


    def test_invalid_yaml_is_a_value_error(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = pathlib.Path(tmp) / "scope.yaml"
            path.write_text("trigger: [unclosed\n", encoding="utf-8")
            with self.assertRaises(ValueError) as ctx:
                load_config(path)
        self.assertIn("scope.yaml", str(ctx.exception))

    def test_block_keys_without_prefixed_field_stay_flat(self):
        cfg = config_from_mapping({"trigger": {"mode": "single", "measurement_every": 3}})
        self.assertEqual(cfg.measurement_every, 3)
        self.assertEqual(cfg.trigger_mode, "single")


class SanitizeTest(unittest.TestCase):
    def test_limits_and_choices(self):
        cfg = config_from_mapping(
            {
                "code_max": 0,
                "voltage_scale": -1,
                "trigger_mode": "norm",
                "trigger_slope": "sideways",
                "vendor_ids": ["bogus"],
            }
        )
        self.assertEqual(cfg.code_max, 1)
        self.assertEqual(cfg.voltage_scale, 0.1)
        self.assertEqual(cfg.trigger_mode, "normal")
        self.assertEqual(cfg.trigger_slope, "rising")
        self.assertEqual(cfg.vendor_ids, DEFAULT_VENDOR_IDS)

    def test_empty_mapping(self):
        self.assertEqual(config_from_mapping({}), ScopeConfig())


class BuildSessionTest(unittest.TestCase):
    def test_session_uses_config(self):
        cfg = config_from_mapping(
            {"trigger": {"mode": "normal", "level": 1.0}, "frame_samples": 64}
        )
        session = build_session(cfg, link_factory=lambda: None)
        self.assertEqual(session.trigger.mode, TriggerMode.NORMAL)
        self.assertAlmostEqual(session.trigger.threshold, 1.0)
        self.assertEqual(session.demo.config.samples, 64)


if __name__ == "__main__":
    unittest.main()
