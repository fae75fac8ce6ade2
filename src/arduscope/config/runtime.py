"""Runtime configuration for the acquisition pipeline and the scope display."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Mapping, MutableMapping, Optional, Tuple

import yaml

from ..core.demo import DemoConfig
from ..core.trigger import Slope, TriggerMode

# Arduino, CH340, FTDI, CP210x
DEFAULT_VENDOR_IDS: Tuple[int, ...] = (0x2341, 0x1A86, 0x0403, 0x10C4)

# Nested YAML blocks and the field prefix their keys map onto
_BLOCK_PREFIXES = {
    "acquisition": "",
    "display": "",
    "serial": "",
    "demo": "demo_",
    "trigger": "trigger_",
}


@dataclass(slots=True)
class ScopeConfig:
    """
    Tuning knobs for acquisition, triggering and display.

    The defaults match the Arduino firmware: 10-bit ADC at 5 V, 512-sample
    frames over a 115200 baud link, and a 20 Hz demo refresh.
    """

    vref: float = 5.0
    code_max: int = 1023
    carry_capacity: int = 4096
    frame_samples: int = 512

    demo_amplitude: float = 2.0
    demo_offset: float = 2.5
    demo_period: int = 512
    demo_step: int = 5
    demo_tick_ms: int = 50

    trigger_mode: str = "auto"
    trigger_slope: str = "rising"
    # None follows the midpoint of voltage_scale
    trigger_level: Optional[float] = None
    measurement_every: int = 5

    voltage_scale: float = 5.0
    grid_divisions: int = 10
    sample_rate_hz: float = 10_000.0

    port: Optional[str] = None
    baud_rate: int = 115200
    vendor_ids: Tuple[int, ...] = field(default=DEFAULT_VENDOR_IDS)
    poll_interval_ms: int = 10

    def sanitized(self) -> ScopeConfig:
        """Return a copy with limits applied and enum-like strings normalized."""
        level = self.trigger_level
        if level is not None:
            level = float(level)
        return ScopeConfig(
            vref=max(1e-6, float(self.vref)),
            code_max=max(1, int(self.code_max)),
            carry_capacity=max(64, int(self.carry_capacity)),
            frame_samples=max(2, int(self.frame_samples)),
            demo_amplitude=float(self.demo_amplitude),
            demo_offset=float(self.demo_offset),
            demo_period=max(1, int(self.demo_period)),
            demo_step=int(self.demo_step),
            demo_tick_ms=max(1, int(self.demo_tick_ms)),
            trigger_mode=_normalize_choice(self.trigger_mode, TriggerMode, "auto"),
            trigger_slope=_normalize_choice(self.trigger_slope, Slope, "rising"),
            trigger_level=level,
            measurement_every=max(1, int(self.measurement_every)),
            voltage_scale=max(0.1, float(self.voltage_scale)),
            grid_divisions=max(2, int(self.grid_divisions)),
            sample_rate_hz=max(1.0, float(self.sample_rate_hz)),
            port=str(self.port) if self.port else None,
            baud_rate=max(300, int(self.baud_rate)),
            vendor_ids=_parse_vendor_ids(self.vendor_ids),
            poll_interval_ms=max(1, int(self.poll_interval_ms)),
        )

    def demo_config(self) -> DemoConfig:
        return DemoConfig(
            samples=self.frame_samples,
            amplitude=self.demo_amplitude,
            offset=self.demo_offset,
            period=self.demo_period,
            step=self.demo_step,
            tick_interval_ms=self.demo_tick_ms,
            sample_rate_hz=self.sample_rate_hz,
        )

    @property
    def trigger_mode_enum(self) -> TriggerMode:
        return TriggerMode(_normalize_choice(self.trigger_mode, TriggerMode, "auto"))

    @property
    def trigger_slope_enum(self) -> Slope:
        return Slope(_normalize_choice(self.trigger_slope, Slope, "rising"))


def _normalize_choice(value: Any, enum_cls: Any, default: str) -> str:
    raw = str(value or default).strip().lower()
    if raw in {"norm"}:
        raw = "normal"
    valid = {member.value for member in enum_cls}
    return raw if raw in valid else default


def _parse_vendor_ids(values: Any) -> Tuple[int, ...]:
    if values is None:
        return DEFAULT_VENDOR_IDS
    if isinstance(values, (str, int)):
        values = [values]
    parsed = []
    for item in values:
        try:
            parsed.append(int(item, 0) if isinstance(item, str) else int(item))
        except (TypeError, ValueError):
            continue
    return tuple(parsed) or DEFAULT_VENDOR_IDS


def _recognized_fields() -> set[str]:
    """Return the dataclass field names accepted by :class:`ScopeConfig`."""
    return {f.name for f in fields(ScopeConfig)}


def _normalize_mapping(data: Mapping[str, Any]) -> MutableMapping[str, Any]:
    """Flatten the known nested blocks (``demo:``, ``trigger:`` ...)."""
    known = _recognized_fields()
    merged: MutableMapping[str, Any] = {}
    for key, value in data.items():
        prefix = _BLOCK_PREFIXES.get(key)
        if prefix is not None and isinstance(value, Mapping):
            for sub_key, sub_value in value.items():
                name = str(sub_key)
                if prefix and not name.startswith(prefix) and prefix + name in known:
                    name = prefix + name
                merged[name] = sub_value
        else:
            merged[key] = value
    return merged


def config_from_mapping(data: Mapping[str, Any] | None) -> ScopeConfig:
    """Build :class:`ScopeConfig` from ``data`` (ignoring unknown keys)."""
    if not data:
        return ScopeConfig()
    normalized = _normalize_mapping(data)
    known = _recognized_fields()
    payload = {key: normalized[key] for key in normalized.keys() & known}
    return ScopeConfig(**payload).sanitized()


def load_config(path: str | Path | None) -> ScopeConfig:
    """
    Load configuration from ``path``.

    Missing files fall back to default :class:`ScopeConfig`.
    """
    if path is None:
        return ScopeConfig()
    cfg_path = Path(path)
    if not cfg_path.exists():
        return ScopeConfig()
    with cfg_path.open("r", encoding="utf-8") as fh:
        try:
            raw = yaml.safe_load(fh) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {cfg_path}: {exc}") from exc
    if not isinstance(raw, Mapping):
        raise ValueError(f"Expected mapping in {cfg_path}, got {type(raw).__name__}")
    return config_from_mapping(raw)


__all__ = ["DEFAULT_VENDOR_IDS", "ScopeConfig", "config_from_mapping", "load_config"]
