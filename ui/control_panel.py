"""
ControlPanel
============
Left-hand panel with:
  - Hostile-drone toggle with a pulsing glow while active
  - Start QKD / Start Unsafe / Renew Keys / Reset buttons
  - Phase indicator dots (idle → establishing → monitoring → renewing)

Buttons follow the session: everything but Reset is disabled while a round
is in flight, and Renew Keys stays disabled until a link is connected.
"""
from __future__ import annotations

import math

from PyQt6.QtCore import (
    Qt, QTimer, QPropertyAnimation, QEasingCurve,
    pyqtSignal, pyqtProperty,
)
from PyQt6.QtGui import QColor, QPainter, QPen, QPainterPath, QBrush
from PyQt6.QtWidgets import (
    QFrame, QVBoxLayout, QHBoxLayout, QLabel,
    QPushButton, QWidget, QGroupBox, QSizePolicy,
)

from controller.session_state import ConnectionPhase, SessionState


# ──────────────────────────────────────────────────────────────────────────── #
#  Animated hostile-drone toggle                                               #
# ──────────────────────────────────────────────────────────────────────────── #

class _DroneToggle(QWidget):
    """
    Pill-shaped toggle that pulses red when the drone is active.
    The thumb slides via QPropertyAnimation on a custom 'offset' property.
    """
    toggled = pyqtSignal(bool)

    _DURATION = 260      # ms
    _PULSE_MS  = 40      # ms, glow pulse repaint interval
    _WIDTH  = 52
    _HEIGHT = 28

    def __init__(self, parent=None):
        super().__init__(parent)
        self._checked: bool = False
        self._offset: float = 0.0          # 0.0 = off, 1.0 = on
        self._pulse_t: float = 0.0         # 0..2pi for glow cycle

        self.setFixedSize(self._WIDTH, self._HEIGHT)
        self.setCursor(Qt.CursorShape.PointingHandCursor)

        self._anim = QPropertyAnimation(self, b"offset", self)
        self._anim.setDuration(self._DURATION)
        self._anim.setEasingCurve(QEasingCurve.Type.OutCubic)

        self._pulse_timer = QTimer(self)
        self._pulse_timer.setInterval(self._PULSE_MS)
        self._pulse_timer.timeout.connect(self._tick_pulse)

    def _get_offset(self) -> float:
        return self._offset

    def _set_offset(self, v: float) -> None:
        self._offset = v
        self.update()

    offset = pyqtProperty(float, _get_offset, _set_offset)

    def _tick_pulse(self) -> None:
        self._pulse_t = (self._pulse_t + 0.18) % (2 * math.pi)
        self.update()

    def isChecked(self) -> bool:
        return self._checked

    def setChecked(self, val: bool) -> None:
        if val == self._checked:
            return
        self._checked = val
        self._anim.stop()
        self._anim.setStartValue(self._offset)
        self._anim.setEndValue(1.0 if val else 0.0)
        self._anim.start()
        if val:
            self._pulse_timer.start()
        else:
            self._pulse_timer.stop()

    def mousePressEvent(self, _event) -> None:
        self.setChecked(not self._checked)
        self.toggled.emit(self._checked)

    def paintEvent(self, _event) -> None:
        p = QPainter(self)
        p.setRenderHint(QPainter.RenderHint.Antialiasing)

        w, h = self._WIDTH, self._HEIGHT
        r = h / 2
        pulse = 0.5 + 0.5 * math.sin(self._pulse_t)

        if self._checked:
            track_col = QColor(int(180 + 20 * pulse), 30, 50, int(180 + 40 * pulse))
        else:
            track_col = QColor(30, 30, 60, 200)

        path = QPainterPath()
        path.addRoundedRect(0, 0, w, h, r, r)
        p.fillPath(path, QBrush(track_col))

        border = QColor(220, 50, 80, 200) if self._checked \
            else QColor(80, 100, 220, 120)
        p.setPen(QPen(border, 1.5))
        p.drawPath(path)

        margin = 3
        thumb_x = margin + self._offset * (w - h)
        thumb_d = h - 2 * margin
        thumb_col = QColor(int(220 + 20 * pulse), 60, 80) if self._checked \
            else QColor(110, 120, 200)

        p.setPen(Qt.PenStyle.NoPen)
        p.setBrush(QBrush(thumb_col))
        p.drawEllipse(int(thumb_x), margin, int(thumb_d), int(thumb_d))
        p.end()


# ──────────────────────────────────────────────────────────────────────────── #
#  Main ControlPanel                                                           #
# ──────────────────────────────────────────────────────────────────────────── #

_PHASES = [
    (ConnectionPhase.IDLE,         "Idle"),
    (ConnectionPhase.ESTABLISHING, "Establishing"),
    (ConnectionPhase.MONITORING,   "Monitoring"),
    (ConnectionPhase.RENEWING,     "Renewing"),
]


class ControlPanel(QFrame):
    """Operation buttons, drone toggle and phase indicator."""

    secure_clicked = pyqtSignal()
    unsafe_clicked = pyqtSignal()
    renew_clicked  = pyqtSignal()
    reset_clicked  = pyqtSignal()
    eve_toggled    = pyqtSignal(bool)

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setObjectName("controlPanel")
        self.setFixedWidth(270)
        self.setSizePolicy(QSizePolicy.Policy.Fixed, QSizePolicy.Policy.Expanding)

        root = QVBoxLayout(self)
        root.setContentsMargins(6, 8, 6, 8)
        root.setSpacing(8)

        root.addWidget(self._build_threat())
        root.addWidget(self._build_buttons())
        root.addWidget(self._build_phase_indicator())
        root.addStretch()

    # ------------------------------------------------------------------ #
    #  Section builders                                                    #
    # ------------------------------------------------------------------ #
    def _build_threat(self) -> QGroupBox:
        grp = QGroupBox("Threat")
        row = QHBoxLayout(grp)
        lbl = QLabel("Hostile drone")
        lbl.setObjectName("labelCaption")
        self._toggle = _DroneToggle()
        self._toggle.toggled.connect(self.eve_toggled.emit)
        row.addWidget(lbl)
        row.addStretch()
        row.addWidget(self._toggle)
        return grp

    def _build_buttons(self) -> QGroupBox:
        grp = QGroupBox("Operations")
        col = QVBoxLayout(grp)
        col.setSpacing(6)

        self._btn_secure = QPushButton("Start QKD")
        self._btn_secure.setObjectName("btnSecure")
        self._btn_unsafe = QPushButton("Start Unsafe")
        self._btn_unsafe.setObjectName("btnUnsafe")
        self._btn_renew = QPushButton("Renew Keys")
        self._btn_renew.setObjectName("btnRenew")
        self._btn_reset = QPushButton("Reset")
        self._btn_reset.setObjectName("btnReset")

        self._btn_secure.clicked.connect(self.secure_clicked.emit)
        self._btn_unsafe.clicked.connect(self.unsafe_clicked.emit)
        self._btn_renew.clicked.connect(self.renew_clicked.emit)
        self._btn_reset.clicked.connect(self.reset_clicked.emit)

        for btn in (self._btn_secure, self._btn_unsafe, self._btn_renew, self._btn_reset):
            col.addWidget(btn)

        self._btn_renew.setEnabled(False)
        return grp

    def _build_phase_indicator(self) -> QGroupBox:
        grp = QGroupBox("Link Phase")
        col = QVBoxLayout(grp)
        col.setSpacing(4)
        self._phase_dots = {}
        for phase, label in _PHASES:
            row = QHBoxLayout()
            dot = QLabel("●")
            dot.setFixedWidth(16)
            text = QLabel(label)
            text.setObjectName("labelCaption")
            row.addWidget(dot)
            row.addWidget(text)
            row.addStretch()
            col.addLayout(row)
            self._phase_dots[phase] = dot
        self.set_phase(ConnectionPhase.IDLE)
        return grp

    # ------------------------------------------------------------------ #
    #  Public API                                                          #
    # ------------------------------------------------------------------ #
    @property
    def eve_active(self) -> bool:
        return self._toggle.isChecked()

    def set_phase(self, phase: ConnectionPhase) -> None:
        for p, dot in self._phase_dots.items():
            colour = "#00e5ff" if p is phase else "rgba(120,130,190,90)"
            dot.setStyleSheet(f"color: {colour}; background: transparent;")

    def apply_state(self, state: SessionState) -> None:
        busy = state.is_simulating
        self._btn_secure.setEnabled(not busy)
        self._btn_unsafe.setEnabled(not busy)
        self._btn_renew.setEnabled(not busy and state.is_connected)
        self._toggle.setEnabled(not busy)
        self.set_phase(state.connection_phase)
