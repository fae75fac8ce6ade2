"""Main window for the arduscope GUI."""

from __future__ import annotations

import logging

from PySide6.QtCore import QTimer, Qt, Slot
from PySide6.QtGui import QCloseEvent
from PySide6.QtWidgets import (
    QButtonGroup,
    QComboBox,
    QGridLayout,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from ..config.runtime import ScopeConfig
from ..core.protocol import FrequencyMessage, MeasurementMessage, VoltageMessage
from ..core.session import ScopeSession, Source, StatusEvent, StatusKind
from ..core.trigger import Slope, TriggerMode
from .scope_view import ScopeView

logger = logging.getLogger(__name__)

VOLTAGE_SCALES = (1.0, 2.0, 5.0, 10.0, 20.0)


def _format_rate(hz: float) -> str:
    if hz >= 1000.0:
        return f"{hz / 1000.0:g} kS/s"
    return f"{hz:g} S/s"


class MainWindow(QMainWindow):
    """
    Scope screen plus source, acquisition and trigger controls.

    All pipeline work happens on the GUI thread: one timer ticks the demo
    generator, another polls the serial link, and button slots call straight
    into the :class:`ScopeSession`.
    """

    def __init__(self, session: ScopeSession, config: ScopeConfig | None = None) -> None:
        super().__init__()
        self.setWindowTitle("arduscope")
        self._session = session
        self._config = config or ScopeConfig()

        self.scope_view = ScopeView(
            voltage_scale=session.voltage_scale,
            grid_divisions=self._config.grid_divisions,
            sample_rate_hz=self._config.sample_rate_hz,
        )

        self._demo_timer = QTimer(self)
        self._demo_timer.setTimerType(Qt.TimerType.PreciseTimer)
        self._demo_timer.setInterval(session.demo.tick_interval_ms)
        self._demo_timer.timeout.connect(self._on_demo_tick)

        self._poll_timer = QTimer(self)
        self._poll_timer.setInterval(self._config.poll_interval_ms)
        self._poll_timer.timeout.connect(self._on_poll)

        self._build_ui()

        session.add_frame_observer(self.scope_view.set_frame)
        session.add_measurement_observer(self._on_measurement)
        session.add_status_observer(self._on_status)

        self._sync_controls()
        self._sync_timers()

    # ------------------------------------------------------------------ layout
    def _build_ui(self) -> None:
        # Source
        self.btn_demo = QPushButton(self.tr("Demo"))
        self.btn_device = QPushButton(self.tr("Device"))
        self._source_group = QButtonGroup(self)
        for btn, source in ((self.btn_demo, Source.DEMO), (self.btn_device, Source.DEVICE)):
            btn.setCheckable(True)
            self._source_group.addButton(btn)
            btn.clicked.connect(lambda _checked=False, s=source: self._session.select_source(s))

        self.btn_play = QPushButton()
        self.btn_play.setCheckable(True)
        self.btn_play.toggled.connect(self._session.set_streaming)

        source_box = QGroupBox(self.tr("Input"))
        source_layout = QHBoxLayout(source_box)
        source_layout.addWidget(self.btn_demo)
        source_layout.addWidget(self.btn_device)
        source_layout.addWidget(self.btn_play)

        # Trigger
        self.btn_auto = QPushButton(self.tr("Auto"))
        self.btn_normal = QPushButton(self.tr("Normal"))
        self.btn_single = QPushButton(self.tr("Single"))
        self._trigger_group = QButtonGroup(self)
        for btn, mode in (
            (self.btn_auto, TriggerMode.AUTO),
            (self.btn_normal, TriggerMode.NORMAL),
            (self.btn_single, TriggerMode.SINGLE),
        ):
            btn.setCheckable(True)
            self._trigger_group.addButton(btn)
            btn.clicked.connect(lambda _checked=False, m=mode: self._session.set_trigger_mode(m))

        self.btn_rearm = QPushButton(self.tr("Re-arm"))
        self.btn_rearm.clicked.connect(self._session.rearm_trigger)

        self.slope_combo = QComboBox()
        self.slope_combo.addItem(self.tr("Rising"), Slope.RISING)
        self.slope_combo.addItem(self.tr("Falling"), Slope.FALLING)
        self.slope_combo.currentIndexChanged.connect(self._on_slope_changed)

        trigger_box = QGroupBox(self.tr("Trigger"))
        trigger_layout = QHBoxLayout(trigger_box)
        for widget in (self.btn_auto, self.btn_normal, self.btn_single, self.btn_rearm, self.slope_combo):
            trigger_layout.addWidget(widget)

        # Vertical scale
        self.scale_combo = QComboBox()
        for volts in VOLTAGE_SCALES:
            self.scale_combo.addItem(f"{volts:g} V", volts)
        self.scale_combo.currentIndexChanged.connect(self._on_scale_changed)

        # Readouts
        self.lbl_frequency = QLabel("-- Hz")
        self.lbl_voltage = QLabel("Vpp: --")
        self.lbl_sample_rate = QLabel(_format_rate(self._config.sample_rate_hz))
        self.lbl_timebase = QLabel(f"{self._session.demo.tick_interval_ms} ms")
        self.lbl_fps = QLabel("0.0 fps")
        self.lbl_trigger = QLabel()

        readouts = QGridLayout()
        readouts.addWidget(QLabel(self.tr("Frequency")), 0, 0)
        readouts.addWidget(self.lbl_frequency, 0, 1)
        readouts.addWidget(QLabel(self.tr("Voltage")), 1, 0)
        readouts.addWidget(self.lbl_voltage, 1, 1)
        readouts.addWidget(QLabel(self.tr("Sample rate")), 2, 0)
        readouts.addWidget(self.lbl_sample_rate, 2, 1)
        readouts.addWidget(QLabel(self.tr("Timebase")), 3, 0)
        readouts.addWidget(self.lbl_timebase, 3, 1)
        readouts.addWidget(QLabel(self.tr("Refresh")), 4, 0)
        readouts.addWidget(self.lbl_fps, 4, 1)
        readouts.addWidget(QLabel(self.tr("Trigger")), 5, 0)
        readouts.addWidget(self.lbl_trigger, 5, 1)
        readouts.addWidget(QLabel(self.tr("Scale")), 6, 0)
        readouts.addWidget(self.scale_combo, 6, 1)

        side = QVBoxLayout()
        side.addLayout(readouts)
        side.addStretch(1)

        top = QHBoxLayout()
        top.addWidget(self.scope_view, 1)
        top.addLayout(side)

        controls = QHBoxLayout()
        controls.addWidget(source_box)
        controls.addWidget(trigger_box)

        container = QWidget()
        layout = QVBoxLayout(container)
        layout.addLayout(top, 1)
        layout.addLayout(controls)
        self.setCentralWidget(container)
        self.statusBar().showMessage(self.tr("Ready"))

    # ------------------------------------------------------------------- state
    def _sync_controls(self) -> None:
        session = self._session
        self.btn_demo.setChecked(session.source is Source.DEMO)
        self.btn_device.setChecked(session.source is Source.DEVICE)

        self.btn_play.blockSignals(True)
        self.btn_play.setChecked(session.streaming)
        self.btn_play.blockSignals(False)
        self.btn_play.setText(self.tr("Pause") if session.streaming else self.tr("Run"))

        mode = session.trigger.mode
        self.btn_auto.setChecked(mode is TriggerMode.AUTO)
        self.btn_normal.setChecked(mode is TriggerMode.NORMAL)
        self.btn_single.setChecked(mode is TriggerMode.SINGLE)
        self.btn_rearm.setEnabled(mode is not TriggerMode.AUTO)

        engine = session.trigger
        state = engine.phase.value.replace("_", " ")
        self.lbl_trigger.setText(f"{state} @ {engine.threshold:.2f} V")

        self.scale_combo.blockSignals(True)
        idx = self.scale_combo.findData(session.voltage_scale)
        if idx >= 0:
            self.scale_combo.setCurrentIndex(idx)
        self.scale_combo.blockSignals(False)

    def _sync_timers(self) -> None:
        if self._session.demo_active:
            if not self._demo_timer.isActive():
                self._demo_timer.start()
        else:
            self._demo_timer.stop()

        if self._session.source is Source.DEVICE and self._session.connected:
            if not self._poll_timer.isActive():
                self._poll_timer.start()
        else:
            self._poll_timer.stop()

    # ------------------------------------------------------------------- slots
    @Slot()
    def _on_demo_tick(self) -> None:
        self._session.tick_demo()
        self._refresh_rate_label()

    @Slot()
    def _on_poll(self) -> None:
        if self._session.poll_device():
            self._refresh_rate_label()

    @Slot(int)
    def _on_scale_changed(self, index: int) -> None:
        volts = self.scale_combo.itemData(index)
        if volts is None:
            return
        self._session.set_voltage_scale(float(volts))
        self.scope_view.set_voltage_scale(float(volts))

    @Slot(int)
    def _on_slope_changed(self, index: int) -> None:
        slope = self.slope_combo.itemData(index)
        if isinstance(slope, Slope):
            self._session.set_trigger_slope(slope)

    def _refresh_rate_label(self) -> None:
        self.lbl_fps.setText(f"{self._session.frame_rate_hz:.1f} fps")
        # Single capture stops the trigger without a status event
        self._sync_controls()

    def _on_measurement(self, message: MeasurementMessage) -> None:
        if isinstance(message, FrequencyMessage):
            if message.hz > 0:
                self.lbl_frequency.setText(message.label())
        elif isinstance(message, VoltageMessage):
            self.lbl_voltage.setText(message.label())

    def _on_status(self, event: StatusEvent) -> None:
        if event.kind is StatusKind.DEVICE_ERROR:
            self.statusBar().showMessage(self.tr("Device error: ") + event.message, 5000)
        elif event.kind is StatusKind.BUFFER_OVERFLOW:
            self.statusBar().showMessage(self.tr("Resynchronized: ") + event.message, 3000)
        elif event.kind is StatusKind.CONNECTED:
            self.statusBar().showMessage(self.tr("Device connected"), 3000)
        elif event.kind is StatusKind.DISCONNECTED:
            self.statusBar().showMessage(self.tr("Device disconnected"), 3000)
        elif event.kind is StatusKind.SOURCE_CHANGED:
            self.statusBar().showMessage(self.tr("Source: ") + event.message, 3000)
        self._sync_controls()
        self._sync_timers()

    def closeEvent(self, event: QCloseEvent) -> None:
        self._demo_timer.stop()
        self._poll_timer.stop()
        try:
            self._session.close()
        except Exception:  # pragma: no cover - best-effort shutdown
            logger.exception("Failed to close session cleanly")
        super().closeEvent(event)
