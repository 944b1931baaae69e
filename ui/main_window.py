"""
MainWindow
==========
The top-level application window.  Wires together:
  - ControlPanel   (left)
  - LinkCanvas     (centre, log underneath)
  - KeyStatusPanel + AnalysisPanel (right)
  - QtSessionBridge
"""
from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import (
    QMainWindow, QWidget, QHBoxLayout, QVBoxLayout,
    QSplitter, QLabel,
)

from controller.qt_bridge import QtSessionBridge
from controller.session_state import ConnectionPhase, SessionState
from .analysis_panel import AnalysisPanel
from .control_panel import ControlPanel
from .key_status_panel import KeyStatusPanel
from .link_canvas import LinkCanvas
from .log_panel import LogPanel
from .styles import DARK_STYLESHEET


_PHASE_STATUS = {
    ConnectionPhase.IDLE:         "Idle",
    ConnectionPhase.ESTABLISHING: "Establishing link...",
    ConnectionPhase.MONITORING:   "Monitoring - waiting for drone intersection",
    ConnectionPhase.RENEWING:     "Renewing keys...",
}


class MainWindow(QMainWindow):

    def __init__(self, bridge: QtSessionBridge = None):
        super().__init__()
        self.setWindowTitle("Vehicle Link QKD")
        self.resize(1280, 760)
        self.setMinimumSize(960, 600)
        self.setStyleSheet(DARK_STYLESHEET)

        self._bridge = bridge or QtSessionBridge(self)

        self._build_ui()
        self._connect_signals()
        self._bridge.reset()

    # ------------------------------------------------------------------ #
    #  UI construction                                                     #
    # ------------------------------------------------------------------ #
    def _build_ui(self) -> None:
        central = QWidget()
        self.setCentralWidget(central)

        root = QVBoxLayout(central)
        root.setContentsMargins(8, 6, 8, 6)
        root.setSpacing(4)

        title = QLabel("Quantum Key Distribution — Vehicle-to-Vehicle Link")
        title.setStyleSheet("font-size: 15px; font-weight: bold; color: #e8eaf6; background: transparent;")
        root.addWidget(title)

        splitter = QSplitter(Qt.Orientation.Horizontal)
        splitter.setChildrenCollapsible(False)

        self._control_panel = ControlPanel()
        self._canvas = LinkCanvas()
        self._log_panel = LogPanel()
        self._status_panel = KeyStatusPanel()
        self._analysis_panel = AnalysisPanel()

        centre_col = QWidget()
        centre_layout = QVBoxLayout(centre_col)
        centre_layout.setContentsMargins(0, 0, 0, 0)
        centre_layout.setSpacing(4)
        centre_layout.addWidget(self._canvas, stretch=3)
        centre_layout.addWidget(self._log_panel, stretch=2)

        right_col = QWidget()
        right_layout = QVBoxLayout(right_col)
        right_layout.setContentsMargins(0, 0, 0, 0)
        right_layout.addWidget(self._status_panel, stretch=3)
        right_layout.addWidget(self._analysis_panel, stretch=2)

        splitter.addWidget(self._control_panel)
        splitter.addWidget(centre_col)
        splitter.addWidget(right_col)
        splitter.setSizes([270, 640, 340])
        root.addWidget(splitter, stretch=1)

        self.statusBar().showMessage("Ready  —  choose an operation")

    # ------------------------------------------------------------------ #
    #  Signal connections                                                  #
    # ------------------------------------------------------------------ #
    def _connect_signals(self) -> None:
        cp = self._control_panel
        br = self._bridge

        # Control panel → bridge
        cp.eve_toggled.connect(self._on_eve_toggled)
        cp.secure_clicked.connect(br.start_secure)
        cp.unsafe_clicked.connect(br.start_unsafe)
        cp.renew_clicked.connect(br.renew)
        cp.reset_clicked.connect(br.reset)

        # Bridge → UI
        br.beam_changed.connect(self._canvas.set_beam)
        br.hostile_actor_changed.connect(self._canvas.set_drone_visible)
        br.photon_processed.connect(self._canvas.add_photon)
        br.log_message.connect(self._log_panel.append)
        br.log_cleared.connect(self._log_panel.clear)
        br.state_changed.connect(self._on_state_changed)

        # Canvas → bridge (cooldown applied by the bridge's gate)
        self._canvas.beam_intersection.connect(br.on_beam_intersection)

        br.eve_active = cp.eve_active

    # ------------------------------------------------------------------ #
    #  Slots                                                               #
    # ------------------------------------------------------------------ #
    def _on_eve_toggled(self, active: bool) -> None:
        self._bridge.eve_active = active
        self._canvas.set_drone_visible(active)

    def _on_state_changed(self, state: SessionState) -> None:
        self._control_panel.apply_state(state)
        self._status_panel.apply_state(state)
        self._analysis_panel.apply_state(state)

        msg = _PHASE_STATUS[state.connection_phase]
        if state.is_connected and not state.is_simulating:
            msg += f"  |  renewals: {state.key_renewal_count}  |  error rate: {state.error_rate:.1f}%"
        self.statusBar().showMessage(msg)
