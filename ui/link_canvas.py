"""
LinkCanvas
==========
A 2D view of the vehicle link:
  - Vehicle Alpha (left) and Vehicle Bravo (right)
  - The quantum beam between them (colour / visibility driven by the session)
  - Optional hostile drone orbiting above the link with a downward hacking beam
  - Photon particles travelling along the beam, one per processed photon

Everything is laid out in a fixed logical scene (100 x 60 units) that is
scaled to the widget, so the intersection threshold does not depend on the
window size.  Whenever the hacking beam's tip comes within the threshold of
the quantum beam, ``beam_intersection`` is emitted on every animation tick;
throttling is the IntersectionGate's job.
"""
import math
from typing import List, Optional

from PyQt6.QtCore import Qt, QTimer, QRectF, QPointF, pyqtSignal
from PyQt6.QtGui import QColor, QPainter, QPen, QBrush, QFont, QRadialGradient
from PyQt6.QtWidgets import QWidget, QSizePolicy

import config
from controller.intersection import beam_intersects
from controller.qt_bridge import PhotonEvent
from controller.session_state import BEAM_RENEWAL, BEAM_SECURE, RECEIVER_NAME, SENDER_NAME


# ── Scene geometry (logical units) ──────────────────────────────────────
_SCENE_W = 100.0
_SCENE_H = 60.0
_ALPHA_POS = (12.0, 44.0)
_BRAVO_POS = (88.0, 44.0)
_BEAM_START = (18.0, 42.0)
_BEAM_END = (82.0, 42.0)
_ORBIT_CENTRE = (50.0, 16.0)
_ORBIT_RX = 30.0
_ORBIT_RY = 8.0
_HACK_BEAM_LEN = 22.0

# ── Timing ──────────────────────────────────────────────────────────────
_TICK_MS = 30
_ORBIT_STEP = 0.035        # radians per tick
_PHOTON_STEP = 0.06        # fraction of the beam per tick
_FLASH_MS = 300

# ── Colours ─────────────────────────────────────────────────────────────
_ALPHA_COL = "#2980b9"
_BRAVO_COL = "#27ae60"
_DRONE_COL = "#c0392b"
_DEFAULT_BEAM = BEAM_SECURE


class _Particle:
    __slots__ = ("progress", "colour", "symbol")

    def __init__(self, colour: str, symbol: str):
        self.progress = 0.0
        self.colour = QColor(colour)
        self.symbol = symbol


class LinkCanvas(QWidget):
    """Animated link view."""

    beam_intersection = pyqtSignal()

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Expanding)
        self.setMinimumSize(480, 260)

        self._beam_visible: bool = False
        self._beam_colour: str = _DEFAULT_BEAM
        self._pending_colour: Optional[str] = None
        self._drone_visible: bool = False
        self._angle: float = 0.0
        self._particles: List[_Particle] = []
        self._intersecting: bool = False
        self.threshold: float = config.INTERSECTION_DISTANCE

        self._flash_timer = QTimer(self)
        self._flash_timer.setSingleShot(True)
        self._flash_timer.timeout.connect(self._end_flash)

        self._anim_timer = QTimer(self)
        self._anim_timer.setInterval(_TICK_MS)
        self._anim_timer.timeout.connect(self._tick)
        self._anim_timer.start()

    # ------------------------------------------------------------------ #
    #  Session-facing slots                                                #
    # ------------------------------------------------------------------ #
    def set_beam(self, visible: bool, colour: Optional[str] = None) -> None:
        self._beam_visible = visible
        if not visible:
            self._flash_timer.stop()
            self._pending_colour = None
            self._particles.clear()
        elif colour == BEAM_RENEWAL:
            self._beam_colour = colour
            self._flash_timer.start(_FLASH_MS)
        elif self._flash_timer.isActive():
            # Keep the flash on screen; apply the colour when it ends
            self._pending_colour = colour or _DEFAULT_BEAM
        else:
            self._beam_colour = colour or _DEFAULT_BEAM
        self.update()

    def set_drone_visible(self, visible: bool) -> None:
        self._drone_visible = visible
        self.update()

    def add_photon(self, event: PhotonEvent) -> None:
        if self._beam_visible:
            self._particles.append(_Particle(event.sender_colour, event.sender_symbol))

    # ------------------------------------------------------------------ #
    #  Geometry                                                            #
    # ------------------------------------------------------------------ #
    def drone_position(self):
        cx, cy = _ORBIT_CENTRE
        return (cx + _ORBIT_RX * math.cos(self._angle), cy + _ORBIT_RY * math.sin(self._angle))

    def hack_beam_tip(self):
        x, y = self.drone_position()
        return (x, y + _HACK_BEAM_LEN)

    # ------------------------------------------------------------------ #
    #  Animation                                                           #
    # ------------------------------------------------------------------ #
    def _end_flash(self) -> None:
        if self._pending_colour is not None:
            self._beam_colour = self._pending_colour
            self._pending_colour = None
        else:
            self._beam_colour = _DEFAULT_BEAM
        self.update()

    def _tick(self) -> None:
        self._angle = (self._angle + _ORBIT_STEP) % (2 * math.pi)

        for p in self._particles:
            p.progress += _PHOTON_STEP
        self._particles = [p for p in self._particles if p.progress < 1.0]

        self._intersecting = self._beam_visible and beam_intersects(
            self.hack_beam_tip(), _BEAM_START, _BEAM_END,
            hostile_beam_visible=self._drone_visible,
            threshold=self.threshold,
        )
        if self._intersecting:
            self.beam_intersection.emit()
        self.update()

    # ------------------------------------------------------------------ #
    #  Painting                                                            #
    # ------------------------------------------------------------------ #
    def _map(self, x: float, y: float) -> QPointF:
        return QPointF(x / _SCENE_W * self.width(), y / _SCENE_H * self.height())

    def _scale(self) -> float:
        return min(self.width() / _SCENE_W, self.height() / _SCENE_H)

    def paintEvent(self, _event) -> None:
        p = QPainter(self)
        p.setRenderHint(QPainter.RenderHint.Antialiasing)
        p.fillRect(self.rect(), QColor("#050508"))
        s = self._scale()

        # Road
        road_y = self._map(0, 50).y()
        p.setPen(QPen(QColor("#1e3a5f"), 2, Qt.PenStyle.DashLine))
        p.drawLine(QPointF(0, road_y), QPointF(self.width(), road_y))

        # Quantum beam
        if self._beam_visible:
            colour = QColor(self._beam_colour)
            p.setPen(QPen(colour, max(2.0, 0.8 * s)))
            p.drawLine(self._map(*_BEAM_START), self._map(*_BEAM_END))

            for part in self._particles:
                x = _BEAM_START[0] + (_BEAM_END[0] - _BEAM_START[0]) * part.progress
                centre = self._map(x, _BEAM_START[1])
                r = 1.4 * s
                grad = QRadialGradient(centre, r)
                grad.setColorAt(0.0, part.colour.lighter(170))
                grad.setColorAt(1.0, part.colour.darker(150))
                p.setPen(Qt.PenStyle.NoPen)
                p.setBrush(QBrush(grad))
                p.drawEllipse(centre, r, r)

        # Vehicles
        self._draw_vehicle(p, _ALPHA_POS, SENDER_NAME, _ALPHA_COL, s)
        self._draw_vehicle(p, _BRAVO_POS, RECEIVER_NAME, _BRAVO_COL, s)

        # Drone + hacking beam
        if self._drone_visible:
            drone = self._map(*self.drone_position())
            tip = self._map(*self.hack_beam_tip())
            hack_col = QColor("#ffff00") if self._intersecting else QColor("#ff1744")
            p.setPen(QPen(hack_col, max(1.5, 0.5 * s), Qt.PenStyle.DotLine))
            p.drawLine(drone, tip)

            p.setPen(QPen(QColor(_DRONE_COL).lighter(160), 1.5))
            p.setBrush(QBrush(QColor(_DRONE_COL)))
            p.drawEllipse(drone, 2.2 * s, 1.2 * s)

        p.end()

    def _draw_vehicle(self, p: QPainter, pos, label: str, colour: str, s: float) -> None:
        centre = self._map(*pos)
        w, h = 12 * s, 6 * s
        rect = QRectF(centre.x() - w / 2, centre.y() - h / 2, w, h)
        col = QColor(colour)
        p.setPen(QPen(col.lighter(170), 1.5))
        p.setBrush(QBrush(col))
        p.drawRoundedRect(rect, 6, 6)
        p.setPen(QPen(QColor("#ffffff")))
        p.setFont(QFont("Segoe UI", 8, QFont.Weight.Bold))
        p.drawText(rect, Qt.AlignmentFlag.AlignCenter, label.split()[-1].upper())
