"""
KeyStatusPanel
==============
Right-side key dashboard with:
  - Error-rate numeric display, colour-coded against the security threshold
  - Connection / phase / renewal counters
  - Sifted bit count and security verdict
  - Comparison strip: one cell per sifted bit, green when the pair agrees
"""
from typing import Sequence

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QColor, QPainter
from PyQt6.QtWidgets import (
    QFrame, QVBoxLayout, QGridLayout, QLabel,
    QProgressBar, QGroupBox, QWidget, QSizePolicy,
)

from controller.session_state import SessionState
from simulation.bb84 import SECURITY_THRESHOLD
from simulation.round_result import ComparisonResult


class _ComparisonStrip(QWidget):
    """Row of cells, one per sifted bit pair."""

    _CELL_H = 18

    def __init__(self, parent=None):
        super().__init__(parent)
        self._results: Sequence[ComparisonResult] = ()
        self.setFixedHeight(self._CELL_H + 4)
        self.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Fixed)

    def set_results(self, results: Sequence[ComparisonResult]) -> None:
        self._results = results
        self.update()

    def paintEvent(self, _event) -> None:
        p = QPainter(self)
        p.fillRect(self.rect(), QColor(8, 8, 18))
        n = len(self._results)
        if n:
            w = self.width() / n
            for i, res in enumerate(self._results):
                col = QColor("#00b894") if res.match else QColor("#d63031")
                p.fillRect(int(i * w) + 1, 2, max(1, int(w) - 2), self._CELL_H, col)
        p.end()


class KeyStatusPanel(QFrame):
    """Live view of the session's last round and lifecycle counters."""

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setObjectName("statusPanel")
        self.setSizePolicy(QSizePolicy.Policy.Preferred, QSizePolicy.Policy.Expanding)

        root = QVBoxLayout(self)
        root.setContentsMargins(10, 10, 10, 10)
        root.setSpacing(10)

        root.addWidget(self._build_error_meter())
        root.addWidget(self._build_counters())
        root.addWidget(self._build_strip())
        root.addStretch()

        self.apply_state(SessionState())

    # ------------------------------------------------------------------ #
    #  Builders                                                            #
    # ------------------------------------------------------------------ #
    def _build_error_meter(self) -> QGroupBox:
        grp = QGroupBox("Error Rate")
        layout = QVBoxLayout(grp)
        layout.setSpacing(6)

        self._lbl_error = QLabel("0.0 %")
        self._lbl_error.setObjectName("labelMetric")
        self._lbl_error.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self._lbl_error)

        self._bar_error = QProgressBar()
        self._bar_error.setRange(0, 100)
        self._bar_error.setFormat("")
        self._bar_error.setFixedHeight(18)
        layout.addWidget(self._bar_error)

        lbl_thr = QLabel(f"Secure at or below {SECURITY_THRESHOLD:.0f}%")
        lbl_thr.setObjectName("labelCaption")
        lbl_thr.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(lbl_thr)
        return grp

    def _build_counters(self) -> QGroupBox:
        grp = QGroupBox("Link")
        grid = QGridLayout(grp)
        grid.setVerticalSpacing(4)

        self._values = {}
        rows = [
            ("connected", "Connected"),
            ("phase",     "Phase"),
            ("renewals",  "Key renewals"),
            ("sifted",    "Sifted bits"),
            ("verdict",   "Verdict"),
        ]
        for r, (key, caption) in enumerate(rows):
            cap = QLabel(caption)
            cap.setObjectName("labelCaption")
            val = QLabel("-")
            val.setAlignment(Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter)
            grid.addWidget(cap, r, 0)
            grid.addWidget(val, r, 1)
            self._values[key] = val
        return grp

    def _build_strip(self) -> QGroupBox:
        grp = QGroupBox("Sifted Key Comparison")
        layout = QVBoxLayout(grp)
        self._strip = _ComparisonStrip()
        layout.addWidget(self._strip)
        return grp

    # ------------------------------------------------------------------ #
    #  Updates                                                             #
    # ------------------------------------------------------------------ #
    def apply_state(self, state: SessionState) -> None:
        rate = state.error_rate
        colour = "#00b894" if rate <= SECURITY_THRESHOLD else "#d63031"
        self._lbl_error.setText(f"{rate:.1f} %")
        self._lbl_error.setStyleSheet(f"color: {colour};")
        self._bar_error.setValue(int(round(rate)))
        self._bar_error.setStyleSheet(
            f"QProgressBar::chunk {{ background-color: {colour}; border-radius: 4px; }}"
        )

        self._values["connected"].setText("Yes" if state.is_connected else "No")
        self._values["phase"].setText(state.connection_phase.value.title())
        self._values["renewals"].setText(str(state.key_renewal_count))
        self._values["sifted"].setText(str(state.sifted_count))

        if not state.sender:
            verdict, vcol = "-", "#90caf9"
        elif state.is_secure:
            verdict, vcol = "SECURE", "#00b894"
        else:
            verdict, vcol = "COMPROMISED", "#d63031"
        self._values["verdict"].setText(verdict)
        self._values["verdict"].setStyleSheet(f"color: {vcol}; font-weight: bold;")

        self._strip.set_results(state.comparison_results)
