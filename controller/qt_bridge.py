"""
QtSessionBridge
===============
Sits between the SessionController and the PyQt6 front-end.

It owns:
  - A SessionController instance
  - An IntersectionGate that throttles the canvas' intersection signal
  - PyQt signals that the UI connects to

The UI decides *which* operation to request; the bridge forwards it to the
session and re-emits everything the session produces (beam colour, drone
visibility, log lines, state snapshots, per-photon events) as Qt signals.

Photon pacing runs a short nested event loop after each photon so the canvas
can animate and the window stays responsive.  Clicks that arrive meanwhile
reach the session while it is busy and are ignored by its guard.
"""
from dataclasses import dataclass
from typing import Optional

from PyQt6.QtCore import QEventLoop, QObject, QTimer, pyqtSignal

import config
from simulation.photon import PhotonSample

from .intersection import IntersectionGate
from .session_controller import SessionController, SessionObserver, VisualSink
from .session_state import SessionState


# ------------------------------------------------------------------ #
#  Data objects carried by signals                                       #
# ------------------------------------------------------------------ #
@dataclass
class PhotonEvent:
    """Snapshot of a single processed photon, emitted after each step."""
    index: int
    total: int
    sender_bit: int
    sender_basis: str
    sender_colour: str      # hex colour for the animation
    sender_symbol: str      # ↑ → ↗ ↖

    receiver_basis: str
    receiver_bit: int
    bases_match: bool


class _SignalAdapter(VisualSink, SessionObserver):
    """Turns session callbacks into bridge signals."""

    def __init__(self, bridge: "QtSessionBridge"):
        self._bridge = bridge

    def set_beam_visible(self, visible: bool, color: Optional[str] = None) -> None:
        self._bridge.beam_changed.emit(visible, color)

    def set_hostile_actor_visible(self, visible: bool) -> None:
        self._bridge.hostile_actor_changed.emit(visible)

    def state_changed(self, state: SessionState) -> None:
        self._bridge.state_changed.emit(state)

    def log_appended(self, line: str) -> None:
        self._bridge.log_message.emit(line)

    def log_cleared(self) -> None:
        self._bridge.log_cleared.emit()


# ------------------------------------------------------------------ #
#  Bridge                                                              #
# ------------------------------------------------------------------ #
class QtSessionBridge(QObject):

    # ---- Signals ----
    beam_changed          = pyqtSignal(bool, object)   # visible, colour or None
    hostile_actor_changed = pyqtSignal(bool)
    state_changed         = pyqtSignal(object)         # SessionState
    photon_processed      = pyqtSignal(object)         # PhotonEvent
    log_message           = pyqtSignal(str)
    log_cleared           = pyqtSignal()

    def __init__(
        self,
        parent=None,
        photon_count: int = config.PHOTON_COUNT,
        pace_ms: int = config.PHOTON_PACE_MS,
        cooldown: float = config.INTERSECTION_COOLDOWN,
    ):
        super().__init__(parent)
        self.pace_ms = max(0, pace_ms)
        self._photon_count = photon_count

        adapter = _SignalAdapter(self)
        self._session = SessionController(
            sink=adapter,
            observers=[adapter],
            photon_count=photon_count,
            on_photon=self._on_photon,
        )
        self._gate = IntersectionGate(self._session.auto_renew, cooldown=cooldown)

        # Settings (updated by the control panel before each click)
        self.eve_active: bool = False

    # ------------------------------------------------------------------ #
    #  Public API                                                          #
    # ------------------------------------------------------------------ #
    @property
    def session(self) -> SessionController:
        return self._session

    @property
    def state(self) -> SessionState:
        return self._session.state

    def start_secure(self) -> bool:
        return self._session.start_secure(self.eve_active)

    def start_unsafe(self) -> bool:
        return self._session.start_unsafe(self.eve_active)

    def renew(self) -> bool:
        return self._session.renew(self.eve_active)

    def reset(self) -> None:
        self._gate.reset()
        self._session.reset()

    def on_beam_intersection(self) -> bool:
        """Slot for the canvas' intersection signal."""
        return self._gate.signal()

    # ------------------------------------------------------------------ #
    #  Internal: per-photon pacing                                         #
    # ------------------------------------------------------------------ #
    def _on_photon(self, index: int, sent: PhotonSample, measured: PhotonSample) -> None:
        event = PhotonEvent(
            index          = index,
            total          = self._photon_count,
            sender_bit     = sent.bit,
            sender_basis   = sent.basis,
            sender_colour  = sent.colour,
            sender_symbol  = sent.symbol,
            receiver_basis = measured.basis,
            receiver_bit   = measured.bit,
            bases_match    = sent.basis == measured.basis,
        )
        self.photon_processed.emit(event)

        if self.pace_ms > 0:
            loop = QEventLoop(self)
            QTimer.singleShot(self.pace_ms, loop.quit)
            loop.exec()
