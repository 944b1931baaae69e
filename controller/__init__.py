from .session_state import (
    BEAM_RENEWAL,
    BEAM_SECURE,
    BEAM_UNSAFE,
    ConnectionPhase,
    EventType,
    LastEvent,
    Operation,
    SessionState,
)
from .session_controller import SessionController, SessionObserver, VisualSink
from .intersection import IntersectionGate, beam_intersects, point_to_segment_distance
