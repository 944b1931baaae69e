"""
websocket_manager.py: WebSocket fan-out of session events.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from itertools import count
from typing import Any, Dict, List, Optional

from fastapi import WebSocket

from controller.session_controller import SessionObserver, VisualSink
from controller.session_state import SessionState

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Manages WebSocket connections and broadcasts."""

    def __init__(self):
        self._connections: Dict[int, WebSocket] = {}   # client_id -> ws
        self._ids = count(1)

    async def connect(self, websocket: WebSocket) -> int:
        await websocket.accept()
        client_id = next(self._ids)
        self._connections[client_id] = websocket
        return client_id

    def disconnect(self, client_id: int):
        self._connections.pop(client_id, None)

    async def send_personal(self, client_id: int, message: dict):
        ws = self._connections.get(client_id)
        if ws:
            try:
                await ws.send_json(message)
            except Exception:
                logger.warning("Dropping websocket client %d after failed send", client_id)
                self.disconnect(client_id)

    async def broadcast(self, message: dict, exclude: Optional[int] = None):
        disconnected = []
        for cid, ws in self._connections.items():
            if cid == exclude:
                continue
            try:
                await ws.send_json(message)
            except Exception:
                disconnected.append(cid)
        for cid in disconnected:
            logger.warning("Dropping websocket client %d after failed broadcast", cid)
            self.disconnect(cid)

    async def broadcast_all(self, messages: List[dict]):
        for message in messages:
            await self.broadcast(message)

    def get_clients(self) -> List[int]:
        return list(self._connections.keys())

    @staticmethod
    def make_event(event_type: str, data: Any = None) -> dict:
        return {
            "type": event_type,
            "data": data or {},
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }


class EventRecorder(VisualSink, SessionObserver):
    """
    Collects the session's side effects as websocket events.

    Session operations run synchronously; the endpoint drains the recorder
    afterwards and broadcasts everything in order.
    """

    def __init__(self):
        self._pending: List[dict] = []

    # VisualSink
    def set_beam_visible(self, visible: bool, color: Optional[str] = None) -> None:
        self._pending.append(ConnectionManager.make_event("beam", {"visible": visible, "color": color}))

    def set_hostile_actor_visible(self, visible: bool) -> None:
        self._pending.append(ConnectionManager.make_event("hostile_actor", {"visible": visible}))

    # SessionObserver
    def log_appended(self, line: str) -> None:
        self._pending.append(ConnectionManager.make_event("log", {"line": line}))

    def log_cleared(self) -> None:
        self._pending.append(ConnectionManager.make_event("log_cleared"))

    def state_changed(self, state: SessionState) -> None:
        self._pending.append(ConnectionManager.make_event("state", {
            "phase": state.connection_phase.value,
            "is_simulating": state.is_simulating,
            "is_connected": state.is_connected,
        }))

    def drain(self) -> List[dict]:
        pending, self._pending = self._pending, []
        return pending
