"""
intersection.py
===============
Beam-intersection signalling between the renderer and the session.

The session core never deduplicates intersection signals by time.  The
renderer side does, through an IntersectionGate: a signal is forwarded to
``SessionController.auto_renew()`` only once the cooldown since the last
forwarded signal has elapsed.  Whether the session then accepts the renewal
is still decided by the session's own guard.
"""
from __future__ import annotations

import logging
import math
import time
from typing import Callable, Optional, Tuple

logger = logging.getLogger(__name__)

Point = Tuple[float, float]

DEFAULT_COOLDOWN_S = 2.0
DEFAULT_INTERSECTION_DISTANCE = 5.0


# ------------------------------------------------------------------ #
#  Geometry                                                            #
# ------------------------------------------------------------------ #
def point_to_segment_distance(p: Point, a: Point, b: Point) -> float:
    """Shortest distance from point *p* to the segment *a*–*b*."""
    ax, ay = a
    bx, by = b
    px, py = p
    dx, dy = bx - ax, by - ay
    length_sq = dx * dx + dy * dy
    if length_sq == 0.0:
        return math.hypot(px - ax, py - ay)
    t = ((px - ax) * dx + (py - ay) * dy) / length_sq
    t = max(0.0, min(1.0, t))
    return math.hypot(px - (ax + t * dx), py - (ay + t * dy))


def beam_intersects(
    hostile_tip: Point,
    beam_start: Point,
    beam_end: Point,
    hostile_beam_visible: bool = True,
    threshold: float = DEFAULT_INTERSECTION_DISTANCE,
) -> bool:
    """True when the hostile beam is on and reaches within *threshold* of the link beam."""
    if not hostile_beam_visible:
        return False
    return point_to_segment_distance(hostile_tip, beam_start, beam_end) < threshold


# ------------------------------------------------------------------ #
#  Cooldown gate                                                       #
# ------------------------------------------------------------------ #
class IntersectionGate:
    """Forwards at most one intersection signal per cooldown window."""

    def __init__(
        self,
        on_intersection: Callable[[], bool],
        cooldown: float = DEFAULT_COOLDOWN_S,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._on_intersection = on_intersection
        self.cooldown = max(0.0, cooldown)
        self._clock = clock
        self._last_fired: Optional[float] = None

    def signal(self) -> bool:
        """
        Reports an intersection.  Returns False inside the cooldown window,
        otherwise whatever the handler returned (True if the session accepted).
        """
        now = self._clock()
        if self._last_fired is not None and now - self._last_fired <= self.cooldown:
            return False
        self._last_fired = now
        logger.debug("Beam intersection forwarded at %.3f", now)
        return bool(self._on_intersection())

    def reset(self) -> None:
        self._last_fired = None
