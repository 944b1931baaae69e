"""
models.py: Pydantic schemas for request/response validation.
"""
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel

from controller.session_state import SessionState


# ── Requests ─────────────────────────────────────────────────────────── #

class OperationRequest(BaseModel):
    eve_active: bool = False


# ── Session ──────────────────────────────────────────────────────────── #

class PhotonInfo(BaseModel):
    bit: int
    basis: str
    original_bit: int
    original_basis: str
    basis_match: Optional[bool] = None

class LastEventInfo(BaseModel):
    type: str
    details: str

class SessionStateResponse(BaseModel):
    sender: List[PhotonInfo] = []
    receiver: List[PhotonInfo] = []
    sifted_sender: List[PhotonInfo] = []
    sifted_receiver: List[PhotonInfo] = []
    comparison_results: List[bool] = []
    error_rate: float = 0.0
    is_secure: bool = False
    is_simulating: bool = False
    is_connected: bool = False
    connection_phase: str = "idle"
    key_renewal_count: int = 0
    last_event: Optional[LastEventInfo] = None

    @classmethod
    def from_state(cls, state: SessionState) -> "SessionStateResponse":
        def photons(seq):
            return [
                PhotonInfo(
                    bit=p.bit, basis=p.basis,
                    original_bit=p.original_bit, original_basis=p.original_basis,
                    basis_match=p.basis_match,
                )
                for p in seq
            ]

        last = state.last_event
        return cls(
            sender=photons(state.sender),
            receiver=photons(state.receiver),
            sifted_sender=photons(state.sifted_sender),
            sifted_receiver=photons(state.sifted_receiver),
            comparison_results=[c.match for c in state.comparison_results],
            error_rate=state.error_rate,
            is_secure=state.is_secure,
            is_simulating=state.is_simulating,
            is_connected=state.is_connected,
            connection_phase=state.connection_phase.value,
            key_renewal_count=state.key_renewal_count,
            last_event=LastEventInfo(type=last.type.value, details=last.details) if last else None,
        )

class OperationResponse(BaseModel):
    accepted: bool
    state: SessionStateResponse

class LogResponse(BaseModel):
    lines: List[str] = []


# ── Analysis ─────────────────────────────────────────────────────────── #

class AnalysisResponse(BaseModel):
    event_type: Optional[str] = None
    text: str
