"""
session_state.py
================
Connection lifecycle of the vehicle-to-vehicle link as a pure state machine.

Every transition is a function ``(SessionState, ...) -> Transition``: the new
immutable state plus the side-effect commands (log lines, beam / hostile-actor
signals) the owner must carry out.  Nothing in here touches I/O, so the whole
lifecycle is testable without a renderer or a clock.

Phases:

    idle ──start──▶ establishing ──▶ monitoring (secure + eavesdropper)
                                 └─▶ idle       (everything else)
    connected ──renew──▶ renewing ──▶ idle
    monitoring ──intersection──▶ renewing ──▶ monitoring
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Tuple

from simulation.bb84 import CORRECTION_NOTICE_THRESHOLD
from simulation.photon import PhotonSample
from simulation.round_result import ComparisonResult, RoundOutcome


# ── Beam colour tokens ──────────────────────────────────────────────────
BEAM_SECURE = "#06b6d4"     # cyan
BEAM_UNSAFE = "#ff6600"     # orange
BEAM_RENEWAL = "#00ff00"    # green flash

SENDER_NAME = "Vehicle Alpha"
RECEIVER_NAME = "Vehicle Bravo"
READY_MESSAGE = "Link systems ready - awaiting orders."


class ConnectionPhase(str, Enum):
    IDLE = "idle"
    ESTABLISHING = "establishing"
    MONITORING = "monitoring"
    RENEWING = "renewing"


class EventType(str, Enum):
    SEND_PHOTONS = "send_photons"
    SIFTING = "sifting"
    EAVESDROPPER_DETECTED = "eavesdropper_detected"
    SECURE_KEY = "secure_key"


class Operation(str, Enum):
    START_SECURE = "start_secure"
    START_UNSAFE = "start_unsafe"
    RENEW = "renew"
    AUTO_RENEW = "auto_renew"
    RESET = "reset"


@dataclass(frozen=True)
class LastEvent:
    """Coarse classification of the latest happening, for summarisation."""
    type: EventType
    details: str


@dataclass(frozen=True)
class SessionState:
    """Snapshot of the link. A fresh ``SessionState()`` is the neutral idle state."""
    # Last round, flattened
    sender: Tuple[PhotonSample, ...] = ()
    receiver: Tuple[PhotonSample, ...] = ()
    sifted_sender: Tuple[PhotonSample, ...] = ()
    sifted_receiver: Tuple[PhotonSample, ...] = ()
    comparison_results: Tuple[ComparisonResult, ...] = ()
    error_rate: float = 0.0
    is_secure: bool = False

    # Lifecycle
    is_simulating: bool = False
    is_connected: bool = False
    connection_phase: ConnectionPhase = ConnectionPhase.IDLE
    key_renewal_count: int = 0
    last_event: Optional[LastEvent] = None

    @property
    def sifted_count(self) -> int:
        return len(self.sifted_sender)


# ------------------------------------------------------------------ #
#  Commands                                                            #
# ------------------------------------------------------------------ #
@dataclass(frozen=True)
class SetBeam:
    visible: bool
    color: Optional[str] = None


@dataclass(frozen=True)
class SetHostileActor:
    visible: bool


@dataclass(frozen=True)
class LogLine:
    text: str


@dataclass(frozen=True)
class ClearLog:
    pass


@dataclass(frozen=True)
class RoundRequest:
    """What the engine must run for an accepted operation, and where to settle."""
    operation: Operation
    eve_active: bool
    protected: bool
    settle_phase: ConnectionPhase


@dataclass(frozen=True)
class Transition:
    state: SessionState
    commands: Tuple[object, ...] = ()
    request: Optional[RoundRequest] = None


# ------------------------------------------------------------------ #
#  Transitions                                                         #
# ------------------------------------------------------------------ #
def begin(state: SessionState, operation: Operation, eve_active: bool = False) -> Optional[Transition]:
    """
    Claims the link for one round.

    Returns None when the operation is not allowed in *state*; the caller
    must then leave everything untouched.
    """
    if state.is_simulating:
        return None

    if operation is Operation.START_SECURE:
        request = RoundRequest(
            operation, eve_active, protected=True,
            settle_phase=ConnectionPhase.MONITORING if eve_active else ConnectionPhase.IDLE,
        )
        phase = ConnectionPhase.ESTABLISHING
        lines = []
        commands = (SetHostileActor(eve_active), SetBeam(True))

    elif operation is Operation.START_UNSAFE:
        request = RoundRequest(operation, eve_active, protected=False, settle_phase=ConnectionPhase.IDLE)
        phase = ConnectionPhase.ESTABLISHING
        lines = [
            "ESTABLISHING UNPROTECTED COMMUNICATION...",
            "WARNING: NO QUANTUM PROTECTION ACTIVE!",
        ]
        commands = (SetHostileActor(eve_active), SetBeam(True, BEAM_UNSAFE))

    elif operation is Operation.RENEW:
        if not state.is_connected:
            return None
        request = RoundRequest(operation, eve_active, protected=True, settle_phase=ConnectionPhase.IDLE)
        phase = ConnectionPhase.RENEWING
        lines = ["MANUAL KEY RENEWAL INITIATED..."]
        commands = ()

    elif operation is Operation.AUTO_RENEW:
        if not state.is_connected or state.connection_phase is ConnectionPhase.IDLE:
            return None
        # An intersection means the drone is on the beam: force interference
        request = RoundRequest(operation, True, protected=True, settle_phase=ConnectionPhase.MONITORING)
        phase = ConnectionPhase.RENEWING
        lines = ["BEAM INTERSECTION DETECTED! Auto-renewing keys..."]
        commands = (SetHostileActor(True),)

    else:
        raise ValueError(f"{operation!r} does not run a protocol round")

    lines.extend(_round_banner(request))
    new_state = replace(
        state,
        is_simulating=True,
        connection_phase=phase,
        last_event=LastEvent(
            EventType.SEND_PHOTONS,
            f"{SENDER_NAME} is sending photons to {RECEIVER_NAME} "
            f"({'protected' if request.protected else 'unprotected'} mode, "
            f"eavesdropper {'active' if request.eve_active else 'inactive'}).",
        ),
    )
    return Transition(new_state, tuple(LogLine(t) for t in lines) + commands, request)


def complete(state: SessionState, request: RoundRequest, outcome: RoundOutcome) -> Transition:
    """Merges *outcome* into *state* and settles the phase."""
    op = request.operation
    lines = _round_report(request, outcome)

    if op in (Operation.START_SECURE, Operation.START_UNSAFE):
        renewals = 0
    else:
        renewals = state.key_renewal_count + 1

    if op is Operation.START_SECURE:
        lines.append("QKD PROTECTION ACTIVE - secure channel established!")
        if request.eve_active:
            lines += [
                "Drone interference detected and neutralized by QKD!",
                "ALL KEYS REMAIN SECURE despite hostile intercept!",
                "Auto-renewal will trigger when the drone beam crosses the link...",
            ]
        else:
            lines.append("Secure communication established - ready for operations!")
        commands = (SetBeam(True, BEAM_SECURE),)

    elif op is Operation.START_UNSAFE:
        if request.eve_active:
            lines += [
                "DRONE SUCCESSFULLY INTERCEPTED COMMUNICATIONS!",
                "Many keys corrupted - communication compromised!",
                "No protection against eavesdropping!",
                "Try QKD protection to secure communications!",
            ]
        else:
            lines += [
                "Communication established (but vulnerable)",
                "No protection if an attacker appears!",
                "Consider using QKD protection for security!",
            ]
        commands = (SetBeam(True, BEAM_UNSAFE),)

    elif op is Operation.RENEW:
        lines += [
            f"KEY RENEWAL #{renewals} COMPLETE!",
            "All keys remain secure - QKD protection maintained!",
        ]
        commands = (SetBeam(True, BEAM_RENEWAL), SetBeam(True, BEAM_SECURE))

    else:
        lines += [
            f"AUTO-RENEWAL #{renewals} COMPLETE - keys refreshed!",
            "All keys remain secure - QKD adapted to interference!",
        ]
        commands = (SetBeam(True, BEAM_RENEWAL), SetBeam(True, BEAM_SECURE))

    new_state = replace(
        state,
        sender=outcome.sender,
        receiver=outcome.receiver,
        sifted_sender=outcome.sifted_sender,
        sifted_receiver=outcome.sifted_receiver,
        comparison_results=outcome.comparison_results,
        error_rate=outcome.error_rate,
        is_secure=outcome.is_secure,
        is_simulating=False,
        is_connected=True,
        connection_phase=request.settle_phase,
        key_renewal_count=renewals,
        last_event=classify(request, outcome),
    )
    return Transition(new_state, tuple(LogLine(t) for t in lines) + commands)


def reset() -> Transition:
    """Brand-new idle state; the log starts over with a single ready line."""
    return Transition(
        SessionState(),
        (ClearLog(), LogLine(READY_MESSAGE), SetBeam(False), SetHostileActor(False)),
    )


def classify(request: RoundRequest, outcome: RoundOutcome) -> LastEvent:
    sifted = outcome.sifted_count
    if not outcome.protected:
        if not outcome.is_secure:
            return LastEvent(
                EventType.EAVESDROPPER_DETECTED,
                f"Unprotected link corrupted: {outcome.error_rate:.1f}% of {sifted} sifted bits "
                f"disagree, above the tolerated threshold. The key is compromised.",
            )
        return LastEvent(
            EventType.SIFTING,
            f"Unprotected link sifted {sifted} of {outcome.photon_count} bits with "
            f"{outcome.error_rate:.1f}% disagreement. No correction is applied.",
        )

    if request.eve_active and outcome.raw_error_rate > CORRECTION_NOTICE_THRESHOLD:
        return LastEvent(
            EventType.EAVESDROPPER_DETECTED,
            f"Interference of {outcome.raw_error_rate:.1f}% detected on {sifted} sifted bits "
            f"({outcome.intercepted_count} photons intercepted); error correction restored a secure key.",
        )
    return LastEvent(
        EventType.SECURE_KEY,
        f"Secure key of {sifted} sifted bits established after {request.operation.value} "
        f"(raw interference {outcome.raw_error_rate:.1f}%).",
    )


# ------------------------------------------------------------------ #
#  Log text                                                            #
# ------------------------------------------------------------------ #
def _round_banner(request: RoundRequest) -> list:
    mode = "QKD PROTECTED" if request.protected else "UNPROTECTED"
    renewal = " [KEY RENEWAL]" if request.operation in (Operation.RENEW, Operation.AUTO_RENEW) else ""
    lines = [
        f"INITIATING {mode} PROTOCOL{renewal}...",
        f"{SENDER_NAME} transmitting quantum photons...",
    ]
    if request.eve_active:
        lines.append("WARNING: HOSTILE DRONE INTERCEPTING CHANNEL!")
    return lines


def _round_report(request: RoundRequest, outcome: RoundOutcome) -> list:
    lines = [
        f"{RECEIVER_NAME} received all {outcome.photon_count} transmissions.",
        "Units coordinating basis verification...",
        f"Key sifting complete. {outcome.sifted_count} bits retained.",
        "Executing security verification...",
    ]
    if outcome.protected:
        lines.append(f"Raw interference detected: {outcome.raw_error_rate:.1f}%")
        if request.eve_active and outcome.raw_error_rate > CORRECTION_NOTICE_THRESHOLD:
            lines += [
                "QKD error correction activated - all keys secured!",
                "Interference detected and compensated automatically!",
            ]
    else:
        lines.append(f"Communication compromised: {outcome.error_rate:.1f}% corruption!")
    return lines
