"""
SessionController
=================
Owns the single SessionState of the vehicle link and serialises every
operation through it.

Each accepted operation is one indivisible unit:

    begin transition  →  one protocol round  →  completion transition

The commands produced by the transitions are dispatched to:
  - a VisualSink   (beam / hostile-actor signals for the renderer)
  - the event log  (append-only list of strings, cleared only by reset)
  - SessionObservers (state snapshots and log lines for panels / websockets)

Rejected operations (busy, disconnected, idle auto-renew) are silent no-ops:
they return False and leave the state object and the log untouched.
A reset issued while a round is in flight wins: the round's outcome is
dropped and the operation reports False.
"""
from __future__ import annotations

import logging
import random
from typing import Callable, List, Optional, Sequence

from simulation.bb84 import DEFAULT_PHOTON_COUNT, BB84Protocol
from simulation.photon import PhotonSample

from . import session_state as transitions
from .session_state import (
    ClearLog,
    LogLine,
    Operation,
    SessionState,
    SetBeam,
    SetHostileActor,
    Transition,
)

logger = logging.getLogger(__name__)


class VisualSink:
    """Renderer-facing signals. The base class ignores them."""

    def set_beam_visible(self, visible: bool, color: Optional[str] = None) -> None:
        pass

    def set_hostile_actor_visible(self, visible: bool) -> None:
        pass


class SessionObserver:
    """Receives every state snapshot and log change. The base class ignores them."""

    def state_changed(self, state: SessionState) -> None:
        pass

    def log_appended(self, line: str) -> None:
        pass

    def log_cleared(self) -> None:
        pass


class SessionController:
    """Single vehicle-link session: serialises operations and dispatches their effects."""

    def __init__(
        self,
        protocol: Optional[BB84Protocol] = None,
        sink: Optional[VisualSink] = None,
        observers: Sequence[SessionObserver] = (),
        photon_count: int = DEFAULT_PHOTON_COUNT,
        rng: Optional[random.Random] = None,
        on_photon: Optional[Callable[[int, PhotonSample, PhotonSample], None]] = None,
    ):
        self._protocol = protocol or BB84Protocol(photon_count=photon_count, rng=rng)
        self._sink = sink or VisualSink()
        self._observers: List[SessionObserver] = list(observers)
        self._on_photon = on_photon

        self._state = SessionState()
        self._log: List[str] = []
        self._generation = 0

    # ------------------------------------------------------------------ #
    #  Read access                                                         #
    # ------------------------------------------------------------------ #
    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def log(self) -> List[str]:
        return list(self._log)

    @property
    def protocol(self) -> BB84Protocol:
        return self._protocol

    def set_sink(self, sink: VisualSink) -> None:
        self._sink = sink

    def add_observer(self, observer: SessionObserver) -> None:
        self._observers.append(observer)

    def remove_observer(self, observer: SessionObserver) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    # ------------------------------------------------------------------ #
    #  Operations                                                          #
    # ------------------------------------------------------------------ #
    def start_secure(self, eve_active: bool = False) -> bool:
        """Establish the link with full QKD protection."""
        return self._run(Operation.START_SECURE, eve_active)

    def start_unsafe(self, eve_active: bool = False) -> bool:
        """Establish the link without any correction stage."""
        return self._run(Operation.START_UNSAFE, eve_active)

    def renew(self, eve_active: bool = False) -> bool:
        """Manual re-keying of a connected link."""
        return self._run(Operation.RENEW, eve_active)

    def auto_renew(self) -> bool:
        """Beam-intersection handler: re-key under forced interference."""
        return self._run(Operation.AUTO_RENEW, True)

    def reset(self) -> None:
        """Back to a brand-new idle session with an empty log."""
        logger.info("Session reset")
        self._generation += 1
        self._apply(transitions.reset())

    # ------------------------------------------------------------------ #
    #  Internals                                                           #
    # ------------------------------------------------------------------ #
    def _run(self, operation: Operation, eve_active: bool) -> bool:
        started = transitions.begin(self._state, operation, eve_active)
        if started is None:
            logger.debug(
                "Ignored %s (simulating=%s, connected=%s, phase=%s)",
                operation.value, self._state.is_simulating,
                self._state.is_connected, self._state.connection_phase.value,
            )
            return False

        request = started.request
        logger.info(
            "%s: eve=%s protected=%s", operation.value, request.eve_active, request.protected,
        )
        previous = self._state
        self._apply(started)

        generation = self._generation
        try:
            outcome = self._protocol.run_round(
                request.eve_active, request.protected, on_photon=self._on_photon,
            )
        except Exception:
            logger.exception(f"{operation.value} failed during the protocol round")
            if generation == self._generation:
                self._apply(Transition(previous))
            raise
        if generation != self._generation:
            # reset() ran from inside the round; its fresh state wins
            logger.info("%s discarded: session was reset mid-round", operation.value)
            return False
        self._apply(transitions.complete(self._state, request, outcome))

        logger.info(
            "%s complete: phase=%s sifted=%d error_rate=%.1f%% secure=%s renewals=%d",
            operation.value, self._state.connection_phase.value, outcome.sifted_count,
            outcome.error_rate, outcome.is_secure, self._state.key_renewal_count,
        )
        return True

    def _apply(self, transition: Transition) -> None:
        self._state = transition.state
        for command in transition.commands:
            self._dispatch(command)
        for obs in self._observers:
            obs.state_changed(self._state)

    def _dispatch(self, command) -> None:
        if isinstance(command, LogLine):
            self._log.append(command.text)
            for obs in self._observers:
                obs.log_appended(command.text)
        elif isinstance(command, ClearLog):
            self._log.clear()
            for obs in self._observers:
                obs.log_cleared()
        elif isinstance(command, SetBeam):
            self._sink.set_beam_visible(command.visible, command.color)
        elif isinstance(command, SetHostileActor):
            self._sink.set_hostile_actor_visible(command.visible)
        else:
            raise TypeError(f"Unknown session command {command!r}")
