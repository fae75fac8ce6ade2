"""Build a ready-to-use :class:`ScopeSession` from a :class:`ScopeConfig`."""

from __future__ import annotations

import functools
from typing import Optional

from .config.runtime import ScopeConfig
from .core.demo import DemoSignalGenerator
from .core.line_framer import LineFramer
from .core.measurements import MeasurementScheduler
from .core.session import LinkFactory, ScopeSession
from .core.trigger import TriggerEngine
from .transport.serial_link import SerialLink


def serial_link_factory(config: ScopeConfig, port: Optional[str] = None) -> LinkFactory:
    return functools.partial(
        SerialLink.open,
        port or config.port,
        baud_rate=config.baud_rate,
        vendor_ids=config.vendor_ids,
    )


def build_session(
    config: ScopeConfig | None = None,
    *,
    link_factory: LinkFactory | None = None,
) -> ScopeSession:
    """
    Wire every pipeline stage with the values from ``config``.

    ``link_factory`` defaults to opening a serial port as configured; tests
    pass a factory returning an in-memory link instead.
    """
    cfg = (config or ScopeConfig()).sanitized()
    return ScopeSession(
        link_factory=link_factory or serial_link_factory(cfg),
        framer=LineFramer(cfg.carry_capacity),
        trigger=TriggerEngine(mode=cfg.trigger_mode_enum, slope=cfg.trigger_slope_enum),
        scheduler=MeasurementScheduler(cfg.measurement_every),
        demo=DemoSignalGenerator(cfg.demo_config()),
        vref=cfg.vref,
        code_max=cfg.code_max,
        voltage_scale=cfg.voltage_scale,
        trigger_level=cfg.trigger_level,
    )
