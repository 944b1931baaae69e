"""Tests for the pure session transitions."""
from dataclasses import replace

import pytest

from controller.session_state import (
    BEAM_RENEWAL,
    BEAM_SECURE,
    BEAM_UNSAFE,
    READY_MESSAGE,
    ClearLog,
    ConnectionPhase,
    EventType,
    LogLine,
    Operation,
    RoundRequest,
    SessionState,
    SetBeam,
    SetHostileActor,
    begin,
    classify,
    complete,
    reset,
)
from simulation.round_result import ComparisonResult, RoundOutcome


CONNECTED_IDLE = SessionState(is_connected=True, is_secure=True)
MONITORING = SessionState(is_connected=True, is_secure=True, connection_phase=ConnectionPhase.MONITORING)


def _outcome(protected, eve_active, error_rate=0.0, raw_error_rate=0.0, is_secure=True):
    return RoundOutcome(
        comparison_results=(ComparisonResult(True),) * 4,
        error_rate=error_rate,
        is_secure=is_secure,
        raw_error_rate=raw_error_rate,
        protected=protected,
        eve_active=eve_active,
    )


def _lines(transition):
    return [c.text for c in transition.commands if isinstance(c, LogLine)]


def _visuals(transition):
    return [c for c in transition.commands if not isinstance(c, LogLine)]


# ------------------------------------------------------------------ #
#  begin                                                               #
# ------------------------------------------------------------------ #
@pytest.mark.parametrize("operation", [
    Operation.START_SECURE, Operation.START_UNSAFE, Operation.RENEW, Operation.AUTO_RENEW,
])
def test_nothing_begins_while_simulating(operation):
    busy = replace(MONITORING, is_simulating=True)
    assert begin(busy, operation, True) is None


def test_renew_requires_a_connection():
    assert begin(SessionState(), Operation.RENEW) is None


@pytest.mark.parametrize("state", [SessionState(), CONNECTED_IDLE])
def test_auto_renew_requires_monitoring_or_renewing(state):
    assert begin(state, Operation.AUTO_RENEW) is None


def test_reset_is_not_a_round():
    with pytest.raises(ValueError):
        begin(SessionState(), Operation.RESET)


def test_start_secure_claims_the_link():
    t = begin(SessionState(), Operation.START_SECURE, eve_active=True)

    assert t.state.is_simulating
    assert t.state.connection_phase is ConnectionPhase.ESTABLISHING
    assert t.state.last_event.type is EventType.SEND_PHOTONS
    assert t.request.protected and t.request.eve_active
    assert t.request.settle_phase is ConnectionPhase.MONITORING
    assert _visuals(t) == [SetHostileActor(True), SetBeam(True)]
    assert _lines(t) == [
        "INITIATING QKD PROTECTED PROTOCOL...",
        "Vehicle Alpha transmitting quantum photons...",
        "WARNING: HOSTILE DRONE INTERCEPTING CHANNEL!",
    ]


def test_start_unsafe_warns_and_shows_orange_beam():
    t = begin(SessionState(), Operation.START_UNSAFE, eve_active=False)

    assert not t.request.protected
    assert t.request.settle_phase is ConnectionPhase.IDLE
    assert _visuals(t) == [SetHostileActor(False), SetBeam(True, BEAM_UNSAFE)]
    assert _lines(t)[:3] == [
        "ESTABLISHING UNPROTECTED COMMUNICATION...",
        "WARNING: NO QUANTUM PROTECTION ACTIVE!",
        "INITIATING UNPROTECTED PROTOCOL...",
    ]


@pytest.mark.parametrize("state", [CONNECTED_IDLE, MONITORING])
def test_manual_renew_always_settles_idle(state):
    t = begin(state, Operation.RENEW)

    assert t.state.connection_phase is ConnectionPhase.RENEWING
    assert t.request.settle_phase is ConnectionPhase.IDLE
    assert _visuals(t) == []
    assert "INITIATING QKD PROTECTED PROTOCOL [KEY RENEWAL]..." in _lines(t)


def test_auto_renew_forces_the_eavesdropper():
    t = begin(MONITORING, Operation.AUTO_RENEW, eve_active=False)

    assert t.request.eve_active
    assert t.request.settle_phase is ConnectionPhase.MONITORING
    assert _visuals(t) == [SetHostileActor(True)]
    assert _lines(t)[0] == "BEAM INTERSECTION DETECTED! Auto-renewing keys..."


def test_begin_leaves_the_input_state_alone():
    state = SessionState()
    begin(state, Operation.START_SECURE)
    assert state == SessionState()


# ------------------------------------------------------------------ #
#  complete                                                            #
# ------------------------------------------------------------------ #
def test_complete_merges_outcome_and_settles():
    started = begin(SessionState(key_renewal_count=4, is_connected=True), Operation.START_SECURE)
    t = complete(started.state, started.request, _outcome(True, False))

    assert not t.state.is_simulating
    assert t.state.is_connected
    assert t.state.connection_phase is ConnectionPhase.IDLE
    assert t.state.key_renewal_count == 0
    assert t.state.is_secure
    assert t.state.comparison_results == (ComparisonResult(True),) * 4
    assert _visuals(t) == [SetBeam(True, BEAM_SECURE)]
    assert _lines(t)[-1] == "Secure communication established - ready for operations!"


def test_renewal_increments_counter_and_flashes_green_then_cyan():
    started = begin(replace(MONITORING, key_renewal_count=2), Operation.RENEW)
    t = complete(started.state, started.request, _outcome(True, False))

    assert t.state.key_renewal_count == 3
    assert t.state.connection_phase is ConnectionPhase.IDLE
    assert _visuals(t) == [SetBeam(True, BEAM_RENEWAL), SetBeam(True, BEAM_SECURE)]
    assert "KEY RENEWAL #3 COMPLETE!" in _lines(t)


def test_unsafe_report_uses_corruption_wording():
    started = begin(SessionState(), Operation.START_UNSAFE, eve_active=True)
    t = complete(started.state, started.request, _outcome(False, True, 30.0, 30.0, False))

    assert "Communication compromised: 30.0% corruption!" in _lines(t)
    assert _visuals(t) == [SetBeam(True, BEAM_UNSAFE)]


# ------------------------------------------------------------------ #
#  classify / reset                                                    #
# ------------------------------------------------------------------ #
def _request(op, eve, protected):
    return RoundRequest(op, eve, protected, ConnectionPhase.IDLE)


@pytest.mark.parametrize("request_,outcome,expected", [
    (_request(Operation.START_UNSAFE, True, False), _outcome(False, True, 30.0, 30.0, False),
     EventType.EAVESDROPPER_DETECTED),
    (_request(Operation.START_UNSAFE, False, False), _outcome(False, False),
     EventType.SIFTING),
    (_request(Operation.START_SECURE, True, True), _outcome(True, True, raw_error_rate=12.0),
     EventType.EAVESDROPPER_DETECTED),
    (_request(Operation.START_SECURE, True, True), _outcome(True, True, raw_error_rate=5.0),
     EventType.SECURE_KEY),
    (_request(Operation.RENEW, False, True), _outcome(True, False),
     EventType.SECURE_KEY),
])
def test_classify(request_, outcome, expected):
    assert classify(request_, outcome).type is expected


def test_reset_returns_neutral_state_and_ready_log():
    t = reset()

    assert t.state == SessionState()
    assert t.request is None
    assert t.commands == (
        ClearLog(), LogLine(READY_MESSAGE), SetBeam(False), SetHostileActor(False),
    )
